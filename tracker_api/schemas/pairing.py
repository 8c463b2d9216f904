"""Legacy pairing request schemas."""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from tracker_api.schemas.sharing import PartnerInfoResponse


class PairingRequestCreate(BaseModel):
    target_email: str = Field(..., min_length=1, max_length=255)
    requester_name: str | None = Field(default=None, max_length=100)


class PairingRequestCreated(BaseModel):
    request_id: uuid.UUID
    status: str
    message: str = "Request sent. Waiting for approval."


class PairingRequestItem(BaseModel):
    """A pending request as shown to its target."""

    model_config = {"from_attributes": True}

    id: uuid.UUID
    requester_id: str
    requester_name: str | None = None
    target_email: str
    status: str
    created_at: datetime


class PendingRequestsResponse(BaseModel):
    requests: list[PairingRequestItem]


class PermissionRequest(BaseModel):
    permission: str = Field(..., description="'read' or 'write'")


class PairingStatusResponse(BaseModel):
    """Pairing from the caller's side. ``role`` is empty when unpaired."""

    paired: bool
    role: str
    partner: PartnerInfoResponse | None = None
