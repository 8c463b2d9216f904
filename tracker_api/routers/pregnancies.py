"""Pregnancy record endpoints."""

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from tracker_api.core.auth import CurrentAccess, CurrentIdentity, WriteAccess
from tracker_api.database import get_db
from tracker_api.schemas.pregnancy import (
    ArchiveRequest,
    OutcomeRequest,
    PregnanciesResponse,
    PregnancyFields,
    PregnancyRead,
    PregnancyResponse,
)
from tracker_api.services.access import AccessGrant
from tracker_api.services.pregnancy import (
    create_pregnancy,
    get_pregnancy_by_id,
    list_accessible_pregnancies,
    set_archived,
    set_outcome,
    update_pregnancy,
    update_pregnancy_by_id,
)

router = APIRouter(prefix="/api", tags=["pregnancy"])


def _grant_response(grant: AccessGrant) -> PregnancyResponse:
    return PregnancyResponse(
        pregnancy=PregnancyRead.model_validate(grant.pregnancy),
        role=grant.role.value,
        permission=grant.permission.value,
    )


def _owner_response(pregnancy) -> PregnancyResponse:
    return PregnancyResponse(
        pregnancy=PregnancyRead.model_validate(pregnancy),
        role="owner",
        permission="write",
    )


@router.get("/pregnancy", response_model=PregnancyResponse)
async def get_pregnancy(grant: CurrentAccess) -> PregnancyResponse:
    """The record the caller owns or was granted access to."""
    return _grant_response(grant)


@router.post(
    "/pregnancy",
    response_model=PregnancyResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_my_pregnancy(
    body: PregnancyFields,
    identity: CurrentIdentity,
    db: AsyncSession = Depends(get_db),
) -> PregnancyResponse:
    grant = await create_pregnancy(db, identity.user_id, body.model_dump())
    return _grant_response(grant)


@router.put("/pregnancy", response_model=PregnancyResponse)
async def update_my_pregnancy(
    body: PregnancyFields,
    grant: WriteAccess,
    db: AsyncSession = Depends(get_db),
) -> PregnancyResponse:
    """Update profile fields. Needs write permission; archived records are frozen."""
    updated = await update_pregnancy(db, grant, body.model_dump(exclude_unset=True))
    return _grant_response(updated)


@router.get("/pregnancies", response_model=PregnanciesResponse)
async def list_my_pregnancies(
    identity: CurrentIdentity,
    db: AsyncSession = Depends(get_db),
) -> PregnanciesResponse:
    """All records the caller can reach, active ones first."""
    grants = await list_accessible_pregnancies(db, identity.user_id)
    return PregnanciesResponse(pregnancies=[_grant_response(g) for g in grants])


@router.get("/pregnancies/{pregnancy_id}", response_model=PregnancyResponse)
async def get_pregnancy_record(
    pregnancy_id: uuid.UUID,
    identity: CurrentIdentity,
    db: AsyncSession = Depends(get_db),
) -> PregnancyResponse:
    grant = await get_pregnancy_by_id(db, pregnancy_id, identity.user_id)
    return _grant_response(grant)


@router.put("/pregnancies/{pregnancy_id}", response_model=PregnancyResponse)
async def update_pregnancy_record(
    pregnancy_id: uuid.UUID,
    body: PregnancyFields,
    identity: CurrentIdentity,
    db: AsyncSession = Depends(get_db),
) -> PregnancyResponse:
    """Update one record by id. Needs write permission on that record."""
    grant = await update_pregnancy_by_id(
        db, pregnancy_id, identity.user_id, body.model_dump(exclude_unset=True)
    )
    return _grant_response(grant)


@router.put("/pregnancies/{pregnancy_id}/outcome", response_model=PregnancyResponse)
async def set_pregnancy_outcome(
    pregnancy_id: uuid.UUID,
    body: OutcomeRequest,
    identity: CurrentIdentity,
    db: AsyncSession = Depends(get_db),
) -> PregnancyResponse:
    pregnancy = await set_outcome(
        db, pregnancy_id, identity.user_id, body.outcome, body.outcome_date
    )
    return _owner_response(pregnancy)


@router.put("/pregnancies/{pregnancy_id}/archive", response_model=PregnancyResponse)
async def set_pregnancy_archive(
    pregnancy_id: uuid.UUID,
    body: ArchiveRequest,
    identity: CurrentIdentity,
    db: AsyncSession = Depends(get_db),
) -> PregnancyResponse:
    pregnancy = await set_archived(db, pregnancy_id, identity.user_id, body.archived)
    return _owner_response(pregnancy)
