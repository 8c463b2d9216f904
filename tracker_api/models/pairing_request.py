"""Legacy partner pairing request model.

A would-be partner addresses a request to the record owner's email; the
owner approves (choosing a permission) or denies it. Superseded by invite
codes but still served.
"""

import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from tracker_api.models.base import Base, utcnow


class PairingStatus(str, Enum):
    """Lifecycle of a pairing request. Only PENDING has outgoing transitions."""

    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"
    CANCELLED = "cancelled"


class PairingRequest(Base):
    """A request from a would-be partner to pair with a record owner."""

    __tablename__ = "pairing_requests"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    requester_id: Mapped[str] = mapped_column(String(255), nullable=False)
    requester_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    target_email: Mapped[str] = mapped_column(String(255), nullable=False)
    target_id: Mapped[str | None] = mapped_column(
        String(255), nullable=True, index=True
    )
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=PairingStatus.PENDING.value,
        index=True,
    )
    permission: Mapped[str | None] = mapped_column(String(20), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    resolved_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self) -> str:
        return (
            f"<PairingRequest(id={self.id}, requester={self.requester_id}, "
            f"status={self.status})>"
        )
