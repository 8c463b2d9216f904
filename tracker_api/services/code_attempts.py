"""Per-user throttle on invite code redemption.

Every redemption attempt is appended to ``code_attempts``. A user with five
or more failures in the trailing hour is refused before any code is checked.
Successful attempts are recorded but never counted.
"""

from datetime import UTC, datetime, timedelta

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tracker_api.logging_config import get_logger
from tracker_api.models.code_attempt import CodeAttempt

logger = get_logger(__name__)

MAX_FAILED_ATTEMPTS = 5
ATTEMPT_WINDOW = timedelta(hours=1)


async def count_recent_failures(
    db: AsyncSession,
    user_id: str,
    now: datetime | None = None,
) -> int:
    """Count failed attempts by ``user_id`` inside the trailing window."""
    since = (now or datetime.now(UTC)) - ATTEMPT_WINDOW
    result = await db.execute(
        select(func.count())
        .select_from(CodeAttempt)
        .where(
            CodeAttempt.user_id == user_id,
            CodeAttempt.success.is_(False),
            CodeAttempt.attempted_at > since,
        )
    )
    return result.scalar_one()


async def is_rate_limited(db: AsyncSession, user_id: str) -> bool:
    failures = await count_recent_failures(db, user_id)
    return failures >= MAX_FAILED_ATTEMPTS


async def record_attempt(
    db: AsyncSession,
    user_id: str,
    success: bool,
    ip_address: str | None = None,
) -> CodeAttempt:
    """Append an attempt row and commit it.

    Committed on its own so a failed redemption is still counted even though
    the caller is about to raise.
    """
    attempt = CodeAttempt(
        user_id=user_id,
        success=success,
        ip_address=ip_address,
        attempted_at=datetime.now(UTC),
    )
    db.add(attempt)
    await db.commit()

    if not success:
        logger.info(
            "Recorded failed code attempt",
            ip_address=ip_address,
        )
    return attempt
