"""Caller role lookup."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tracker_api.core.auth import CurrentIdentity
from tracker_api.database import get_db
from tracker_api.schemas.pregnancy import MyRoleResponse, PregnancyRead
from tracker_api.services.access import find_access

router = APIRouter(prefix="/api/me", tags=["me"])


@router.get("/role", response_model=MyRoleResponse)
async def get_my_role(
    identity: CurrentIdentity,
    db: AsyncSession = Depends(get_db),
) -> MyRoleResponse:
    """Role and permission of the caller on the record they resolve to.

    Returns empty fields instead of 404 when the caller has no access, so
    clients can branch on onboarding without treating it as an error.
    """
    grant = await find_access(db, identity.user_id)
    if grant is None:
        return MyRoleResponse()

    return MyRoleResponse(
        role=grant.role.value,
        permission=grant.permission.value,
        pregnancy=PregnancyRead.model_validate(grant.pregnancy),
    )
