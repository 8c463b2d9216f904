"""Read-only mirror of the external identity directory.

Users are created and authenticated by the chat service; this service only
looks identities up by email when addressing a pairing request.
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from tracker_api.models.base import Base


class User(Base):
    """An externally managed user identity."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)

    def __repr__(self) -> str:
        return f"<User {self.id}>"
