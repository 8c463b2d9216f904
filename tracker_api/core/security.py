"""Security utilities.

Invite code hashing/verification and validation of the bearer tokens issued
by the upstream chat service.
"""

from datetime import UTC, datetime

import bcrypt
from jose import JWTError, jwt

from tracker_api.config import decode_auth_token_key, settings
from tracker_api.core.invite_codes import normalize_code


def hash_invite_code(code: str, rounds: int | None = None) -> str:
    """Hash an invite code with bcrypt.

    The code is normalized first so formatting never affects matching.
    Invite codes are short and human-enterable, so the adaptive cost is
    what makes offline guessing expensive.

    Args:
        code: Plaintext code in any case/format
        rounds: bcrypt cost factor (defaults to settings.invite_code_hash_rounds)

    Returns:
        The bcrypt hash as a string
    """
    salt = bcrypt.gensalt(rounds=rounds or settings.invite_code_hash_rounds)
    hashed = bcrypt.hashpw(normalize_code(code).encode("utf-8"), salt)
    return hashed.decode("utf-8")


def verify_invite_code(code: str, code_hash: str) -> bool:
    """Check a candidate code against a stored hash.

    Returns:
        True on match, False on mismatch

    Raises:
        ValueError: If the stored hash is malformed
    """
    return bcrypt.checkpw(
        normalize_code(code).encode("utf-8"),
        code_hash.encode("utf-8"),
    )


def decode_access_token(token: str) -> dict | None:
    """Decode and validate a bearer token from the chat service.

    Returns:
        Token payload dict if valid, None if invalid, expired or missing uid
    """
    try:
        payload = jwt.decode(
            token,
            decode_auth_token_key(),
            algorithms=[settings.jwt_algorithm],
        )
    except (JWTError, ValueError):
        return None

    if not payload.get("uid"):
        return None

    return payload


class TokenData:
    """Parsed token data for type safety."""

    def __init__(self, payload: dict):
        self.user_id: str = str(payload["uid"])
        self.email: str | None = payload.get("email")
        exp = payload.get("exp")
        self.exp: datetime | None = (
            datetime.fromtimestamp(exp, tz=UTC) if exp is not None else None
        )
