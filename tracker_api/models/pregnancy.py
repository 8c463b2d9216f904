"""Pregnancy record model.

One record per owning user. Besides the owner, a record carries at most one
partner slot (filled by a pairing request or a father-role invite code) and
at most one co-owner slot (administrative write access that does not occupy
the partner slot).
"""

import uuid
from datetime import date, datetime
from enum import Enum

from sqlalchemy import Boolean, Date, DateTime, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tracker_api.models.base import Base, TimestampMixin

DEFAULT_CYCLE_LENGTH = 28


class Permission(str, Enum):
    """Access level granted to a delegated user."""

    READ = "read"
    WRITE = "write"


class PartnerStatus(str, Enum):
    """State of the partner slot on a pregnancy."""

    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"


class PregnancyOutcome(str, Enum):
    """Recorded outcome of a pregnancy."""

    ONGOING = "ongoing"
    BIRTH = "birth"
    MISCARRIAGE = "miscarriage"
    ECTOPIC = "ectopic"
    STILLBIRTH = "stillbirth"


class Pregnancy(Base, TimestampMixin):
    """A pregnancy record owned by exactly one user."""

    __tablename__ = "pregnancies"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    owner_id: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )

    # Partner slot ("father" role)
    partner_id: Mapped[str | None] = mapped_column(
        String(255), nullable=True, index=True
    )
    partner_status: Mapped[str | None] = mapped_column(String(20), nullable=True)
    partner_permission: Mapped[str | None] = mapped_column(String(20), nullable=True)
    partner_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    display_partner_card: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True
    )

    # Co-owner slot
    coowner_id: Mapped[str | None] = mapped_column(
        String(255), nullable=True, index=True
    )
    coowner_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Profile
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    calculation_method: Mapped[str | None] = mapped_column(String(20), nullable=True)
    cycle_length: Mapped[int] = mapped_column(
        Integer, nullable=False, default=DEFAULT_CYCLE_LENGTH
    )
    baby_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    mom_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    mom_birthday: Mapped[date | None] = mapped_column(Date, nullable=True)
    gender: Mapped[str | None] = mapped_column(String(20), nullable=True)
    parent_role: Mapped[str | None] = mapped_column(String(20), nullable=True)
    profile_photo: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Outcome / archive
    outcome: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PregnancyOutcome.ONGOING.value
    )
    outcome_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    archived: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    archived_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Relationships
    supporters = relationship(
        "Supporter",
        back_populates="pregnancy",
        cascade="all, delete-orphan",
    )
    invite_codes = relationship(
        "InviteCode",
        back_populates="pregnancy",
        cascade="all, delete-orphan",
    )

    @property
    def has_approved_partner(self) -> bool:
        return (
            self.partner_id is not None
            and self.partner_status == PartnerStatus.APPROVED.value
        )

    def __repr__(self) -> str:
        return f"<Pregnancy(id={self.id}, owner={self.owner_id})>"
