"""Tests for the per-user redemption throttle."""

from datetime import UTC, datetime, timedelta

from sqlalchemy import func, select

from tracker_api.models import CodeAttempt
from tracker_api.services.code_attempts import (
    ATTEMPT_WINDOW,
    MAX_FAILED_ATTEMPTS,
    count_recent_failures,
    is_rate_limited,
    record_attempt,
)


class TestCodeAttempts:
    def test_limits(self):
        assert MAX_FAILED_ATTEMPTS == 5
        assert ATTEMPT_WINDOW == timedelta(hours=1)

    async def test_record_attempt_appends(self, db_session):
        await record_attempt(db_session, "u1", False, "10.0.0.1")
        await record_attempt(db_session, "u1", True, "10.0.0.1")

        count = await db_session.scalar(select(func.count()).select_from(CodeAttempt))
        assert count == 2

    async def test_only_failures_count(self, db_session):
        for _ in range(3):
            await record_attempt(db_session, "u1", False)
        for _ in range(4):
            await record_attempt(db_session, "u1", True)

        assert await count_recent_failures(db_session, "u1") == 3

    async def test_counts_are_per_user(self, db_session):
        for _ in range(MAX_FAILED_ATTEMPTS):
            await record_attempt(db_session, "u1", False)

        assert await is_rate_limited(db_session, "u1")
        assert not await is_rate_limited(db_session, "u2")

    async def test_limit_reached_at_five(self, db_session):
        for _ in range(MAX_FAILED_ATTEMPTS - 1):
            await record_attempt(db_session, "u1", False)
        assert not await is_rate_limited(db_session, "u1")

        await record_attempt(db_session, "u1", False)
        assert await is_rate_limited(db_session, "u1")

    async def test_old_failures_fall_out_of_window(self, db_session):
        old = datetime.now(UTC) - ATTEMPT_WINDOW - timedelta(minutes=5)
        for _ in range(MAX_FAILED_ATTEMPTS):
            db_session.add(CodeAttempt(user_id="u1", success=False, attempted_at=old))
        await db_session.commit()

        assert await count_recent_failures(db_session, "u1") == 0
        assert not await is_rate_limited(db_session, "u1")
