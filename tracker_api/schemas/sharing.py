"""Invite code sharing schemas.

Plaintext codes only ever appear in GenerateCodeResponse; listings carry
the stored prefix.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from tracker_api.schemas.pregnancy import PregnancyRead


class SuccessResponse(BaseModel):
    success: bool = True


class GenerateCodeRequest(BaseModel):
    """Request to issue a code. Permission defaults to read."""

    role: str = Field(..., description="'father' or 'support'")
    permission: str | None = Field(default=None, description="'read' or 'write'")


class GenerateCodeResponse(BaseModel):
    id: uuid.UUID
    code: str
    role: str
    permission: str
    expires_at: datetime


class RedeemCodeRequest(BaseModel):
    """Request to redeem a code.

    There is deliberately no email field; the privileged override reads the
    email claim of the verified token.
    """

    code: str = Field(..., min_length=1, max_length=32)
    display_name: str | None = Field(default=None, max_length=100)


class RedeemCodeResponse(BaseModel):
    success: bool = True
    role: str
    permission: str
    pregnancy: PregnancyRead
    mom_name: str | None = None
    baby_name: str | None = None
    due_date: str | None = None


class PartnerInfoResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: str
    name: str | None = None
    permission: str
    paired_at: datetime
    display_partner_card: bool = True


class SupporterInfo(BaseModel):
    model_config = {"from_attributes": True}

    id: uuid.UUID
    user_id: str
    display_name: str | None = None
    permission: str
    joined_at: datetime
    display_partner_card: bool = True


class ActiveCodeInfo(BaseModel):
    id: uuid.UUID
    code_prefix: str
    masked_code: str
    role: str
    permission: str
    expires_at: datetime
    expires_in: str


class SharingStatusResponse(BaseModel):
    """Partner, supporters and active codes of the caller's pregnancy."""

    partner: PartnerInfoResponse | None = None
    supporters: list[SupporterInfo]
    active_codes: list[ActiveCodeInfo]
