"""Legacy partner pairing endpoints."""

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from tracker_api.core.auth import CurrentIdentity
from tracker_api.database import get_db
from tracker_api.schemas.pairing import (
    PairingRequestCreate,
    PairingRequestCreated,
    PairingRequestItem,
    PairingStatusResponse,
    PendingRequestsResponse,
    PermissionRequest,
)
from tracker_api.schemas.sharing import PartnerInfoResponse, SuccessResponse
from tracker_api.services import pairing

router = APIRouter(prefix="/api/pairing", tags=["pairing"])


@router.post(
    "/request",
    response_model=PairingRequestCreated,
    status_code=status.HTTP_201_CREATED,
)
async def create_pairing_request(
    body: PairingRequestCreate,
    identity: CurrentIdentity,
    db: AsyncSession = Depends(get_db),
) -> PairingRequestCreated:
    request = await pairing.create_pairing_request(
        db, identity.user_id, body.requester_name, body.target_email
    )
    return PairingRequestCreated(request_id=request.id, status=request.status)


@router.get("/pending", response_model=PendingRequestsResponse)
async def list_pending_requests(
    identity: CurrentIdentity,
    db: AsyncSession = Depends(get_db),
) -> PendingRequestsResponse:
    requests = await pairing.list_pending_requests(db, identity.user_id)
    return PendingRequestsResponse(
        requests=[PairingRequestItem.model_validate(r) for r in requests]
    )


@router.post("/approve/{request_id}", response_model=SuccessResponse)
async def approve_pairing_request(
    request_id: uuid.UUID,
    body: PermissionRequest,
    identity: CurrentIdentity,
    db: AsyncSession = Depends(get_db),
) -> SuccessResponse:
    await pairing.approve_pairing_request(
        db, request_id, identity.user_id, body.permission
    )
    return SuccessResponse()


@router.post("/deny/{request_id}", response_model=SuccessResponse)
async def deny_pairing_request(
    request_id: uuid.UUID,
    identity: CurrentIdentity,
    db: AsyncSession = Depends(get_db),
) -> SuccessResponse:
    await pairing.deny_pairing_request(db, request_id, identity.user_id)
    return SuccessResponse()


@router.put("/permission", response_model=SuccessResponse)
async def update_partner_permission(
    body: PermissionRequest,
    identity: CurrentIdentity,
    db: AsyncSession = Depends(get_db),
) -> SuccessResponse:
    await pairing.update_partner_permission(db, identity.user_id, body.permission)
    return SuccessResponse()


@router.delete("", response_model=SuccessResponse)
async def remove_pairing(
    identity: CurrentIdentity,
    db: AsyncSession = Depends(get_db),
) -> SuccessResponse:
    await pairing.remove_pairing(db, identity.user_id)
    return SuccessResponse()


@router.get("/status", response_model=PairingStatusResponse)
async def get_pairing_status(
    identity: CurrentIdentity,
    db: AsyncSession = Depends(get_db),
) -> PairingStatusResponse:
    state = await pairing.get_pairing_status(db, identity.user_id)
    return PairingStatusResponse(
        paired=state.paired,
        role=state.role,
        partner=(
            PartnerInfoResponse.model_validate(state.partner)
            if state.partner is not None
            else None
        ),
    )
