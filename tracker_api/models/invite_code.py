"""Invite code model.

Only a bcrypt hash of the code and its first four characters are stored;
the plaintext is shown to the owner once, at issue time. A code is active
while it is unredeemed, unrevoked and unexpired. Expiry is derived from
``expires_at``; redemption and revocation are stored and permanent.
"""

import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    String,
    Uuid,
    and_,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tracker_api.models.base import Base, utcnow
from tracker_api.models.pregnancy import Permission


class InviteRole(str, Enum):
    """Role granted when a code is redeemed."""

    FATHER = "father"
    SUPPORT = "support"


class InviteCode(Base):
    """A short-lived sharing code scoped to a pregnancy, role and permission."""

    __tablename__ = "invite_codes"
    __table_args__ = (
        CheckConstraint("role IN ('father', 'support')", name="ck_invite_role"),
        CheckConstraint(
            "permission IN ('read', 'write')", name="ck_invite_permission"
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    pregnancy_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("pregnancies.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    code_hash: Mapped[str] = mapped_column(String(60), nullable=False)
    code_prefix: Mapped[str] = mapped_column(String(4), nullable=False)

    role: Mapped[str] = mapped_column(String(20), nullable=False)
    permission: Mapped[str] = mapped_column(
        String(20), nullable=False, default=Permission.READ.value
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )

    redeemed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None
    )
    redeemed_by: Mapped[str | None] = mapped_column(
        String(255), nullable=True, default=None
    )
    revoked_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None
    )

    pregnancy = relationship("Pregnancy", back_populates="invite_codes")

    @classmethod
    def active_clause(cls, now: datetime):
        """SQL filter matching codes that can still be redeemed at ``now``."""
        return and_(
            cls.redeemed_at.is_(None),
            cls.revoked_at.is_(None),
            cls.expires_at > now,
        )

    def __repr__(self) -> str:
        return (
            f"<InviteCode(id={self.id}, prefix={self.code_prefix}, "
            f"role={self.role})>"
        )
