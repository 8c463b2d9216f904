"""Pregnancy record schemas."""

import uuid
from datetime import date, datetime

from pydantic import BaseModel, Field


class PregnancyFields(BaseModel):
    """Profile fields accepted on create and update. Omitted fields are kept."""

    due_date: date | None = None
    start_date: date | None = None
    calculation_method: str | None = Field(default=None, max_length=20)
    cycle_length: int | None = Field(default=None, ge=20, le=45)
    baby_name: str | None = Field(default=None, max_length=100)
    mom_name: str | None = Field(default=None, max_length=100)
    mom_birthday: date | None = None
    gender: str | None = Field(default=None, max_length=20)
    parent_role: str | None = Field(default=None, max_length=20)


class PregnancyRead(BaseModel):
    """A pregnancy record as returned to any user with access."""

    model_config = {"from_attributes": True}

    id: uuid.UUID
    owner_id: str
    partner_id: str | None = None
    partner_permission: str | None = None
    due_date: date | None = None
    start_date: date | None = None
    calculation_method: str | None = None
    cycle_length: int
    baby_name: str | None = None
    mom_name: str | None = None
    mom_birthday: date | None = None
    gender: str | None = None
    parent_role: str | None = None
    profile_photo: str | None = None
    display_partner_card: bool = True
    outcome: str
    outcome_date: date | None = None
    archived: bool
    archived_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class PregnancyResponse(BaseModel):
    """A record together with the caller's role and permission on it."""

    pregnancy: PregnancyRead
    role: str
    permission: str


class PregnanciesResponse(BaseModel):
    """Every record the caller can reach, with their role on each."""

    pregnancies: list[PregnancyResponse]


class MyRoleResponse(BaseModel):
    """The caller's role; all fields empty when they have no access."""

    role: str = ""
    permission: str = ""
    pregnancy: PregnancyRead | None = None


class OutcomeRequest(BaseModel):
    outcome: str = Field(..., min_length=1, max_length=20)
    outcome_date: date | None = None


class ArchiveRequest(BaseModel):
    archived: bool
