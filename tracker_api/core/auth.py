"""Authentication and access dependencies.

Identities come from bearer tokens issued by the chat service; this API
never creates users or sessions of its own. Access to a pregnancy is
resolved from the store on every request.
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from tracker_api.core.security import TokenData, decode_access_token
from tracker_api.database import get_db
from tracker_api.logging_config import get_logger, user_id_ctx
from tracker_api.services.access import AccessGrant, require_write, resolve_access

logger = get_logger(__name__)


def _bearer_token(request: Request) -> str | None:
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header[7:].strip() or None
    return None


async def get_current_identity(request: Request) -> TokenData:
    """Validate the bearer token and return the caller's identity.

    Raises:
        HTTPException 401: If the token is missing, invalid or expired
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated",
        headers={"WWW-Authenticate": "Bearer"},
    )

    token = _bearer_token(request)
    if token is None:
        raise credentials_exception

    payload = decode_access_token(token)
    if payload is None:
        logger.info("Rejected bearer token")
        raise credentials_exception

    identity = TokenData(payload)
    user_id_ctx.set(identity.user_id)
    return identity


CurrentIdentity = Annotated[TokenData, Depends(get_current_identity)]


async def get_current_access(
    identity: CurrentIdentity,
    db: AsyncSession = Depends(get_db),
) -> AccessGrant:
    """Resolve the pregnancy the caller may see.

    Raises:
        NotFoundError: If the caller has no access to any record
    """
    return await resolve_access(db, identity.user_id)


CurrentAccess = Annotated[AccessGrant, Depends(get_current_access)]


async def get_write_access(grant: CurrentAccess) -> AccessGrant:
    """Like get_current_access, but read-only grants are refused.

    Raises:
        ForbiddenError: If the caller only has read permission
    """
    return require_write(grant)


WriteAccess = Annotated[AccessGrant, Depends(get_write_access)]
