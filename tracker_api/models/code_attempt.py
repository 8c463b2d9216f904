"""Append-only log of invite code redemption attempts.

Counted per user over a trailing window to throttle guessing. Rows are
never updated.
"""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from tracker_api.models.base import Base, utcnow


class CodeAttempt(Base):
    """One redemption attempt, successful or not."""

    __tablename__ = "code_attempts"
    __table_args__ = (
        Index("ix_code_attempts_user_attempted", "user_id", "attempted_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    attempted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    success: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True)

    def __repr__(self) -> str:
        return f"<CodeAttempt(user={self.user_id}, success={self.success})>"
