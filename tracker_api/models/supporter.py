"""Supporter membership model.

Many supporters per pregnancy. Removal is soft; redeeming another support
code later revives the same row instead of adding a second one.
"""

import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tracker_api.models.base import Base, utcnow
from tracker_api.models.pregnancy import Permission


class Supporter(Base):
    """A user granted supporter access to a pregnancy."""

    __tablename__ = "supporters"
    __table_args__ = (
        UniqueConstraint("pregnancy_id", "user_id", name="uq_supporter_pregnancy_user"),
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

    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    display_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    permission: Mapped[str] = mapped_column(
        String(10), nullable=False, default=Permission.READ.value
    )

    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    invited_via_code_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("invite_codes.id", ondelete="SET NULL"),
        nullable=True,
    )

    removed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None
    )

    display_partner_card: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True
    )

    pregnancy = relationship("Pregnancy", back_populates="supporters")

    def __repr__(self) -> str:
        return (
            f"<Supporter(user={self.user_id}, pregnancy={self.pregnancy_id}, "
            f"permission={self.permission})>"
        )
