"""Invite code sharing endpoints.

Owners issue and revoke codes and manage supporters; any authenticated
user may redeem. Business rules live in ``services.sharing``; errors
surface through the TrackerError handler.
"""

import uuid

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from tracker_api.config import settings
from tracker_api.core.auth import CurrentIdentity
from tracker_api.core.invite_codes import format_expires_in, mask_code
from tracker_api.database import get_db
from tracker_api.middleware.rate_limit import get_client_ip, limiter
from tracker_api.schemas.pregnancy import PregnancyRead
from tracker_api.schemas.sharing import (
    ActiveCodeInfo,
    GenerateCodeRequest,
    GenerateCodeResponse,
    PartnerInfoResponse,
    RedeemCodeRequest,
    RedeemCodeResponse,
    SharingStatusResponse,
    SuccessResponse,
    SupporterInfo,
)
from tracker_api.services import sharing

router = APIRouter(prefix="/api/sharing", tags=["sharing"])


@router.get("/status", response_model=SharingStatusResponse)
async def get_sharing_status(
    identity: CurrentIdentity,
    db: AsyncSession = Depends(get_db),
) -> SharingStatusResponse:
    """Partner, supporters and active codes of the caller's own pregnancy."""
    status_ = await sharing.get_sharing_status(db, identity.user_id)

    return SharingStatusResponse(
        partner=(
            PartnerInfoResponse.model_validate(status_.partner)
            if status_.partner is not None
            else None
        ),
        supporters=[SupporterInfo.model_validate(s) for s in status_.supporters],
        active_codes=[
            ActiveCodeInfo(
                id=code.id,
                code_prefix=code.code_prefix,
                masked_code=mask_code(code.code_prefix),
                role=code.role,
                permission=code.permission,
                expires_at=code.expires_at,
                expires_in=format_expires_in(code.expires_at),
            )
            for code in status_.active_codes
        ],
    )


@router.post(
    "/generate",
    response_model=GenerateCodeResponse,
    status_code=status.HTTP_201_CREATED,
)
async def generate_invite_code(
    body: GenerateCodeRequest,
    identity: CurrentIdentity,
    db: AsyncSession = Depends(get_db),
) -> GenerateCodeResponse:
    """Issue a code. The plaintext is returned here and never again."""
    issued = await sharing.issue_invite_code(
        db, identity.user_id, body.role, body.permission
    )
    return GenerateCodeResponse(
        id=issued.invite.id,
        code=issued.code,
        role=issued.role,
        permission=issued.permission,
        expires_at=issued.expires_at,
    )


@router.post("/redeem", response_model=RedeemCodeResponse)
@limiter.limit(settings.redeem_rate_limit)
async def redeem_invite_code(
    request: Request,
    body: RedeemCodeRequest,
    identity: CurrentIdentity,
    db: AsyncSession = Depends(get_db),
) -> RedeemCodeResponse:
    redemption = await sharing.redeem_invite_code(
        db,
        code=body.code,
        user_id=identity.user_id,
        display_name=body.display_name,
        email=identity.email,
        ip_address=get_client_ip(request),
    )

    pregnancy = redemption.pregnancy
    return RedeemCodeResponse(
        role=redemption.role.value,
        permission=redemption.permission.value,
        pregnancy=PregnancyRead.model_validate(pregnancy),
        mom_name=pregnancy.mom_name,
        baby_name=pregnancy.baby_name,
        due_date=pregnancy.due_date.isoformat() if pregnancy.due_date else None,
    )


@router.post("/codes/{code_id}/revoke", response_model=SuccessResponse)
async def revoke_invite_code(
    code_id: uuid.UUID,
    identity: CurrentIdentity,
    db: AsyncSession = Depends(get_db),
) -> SuccessResponse:
    await sharing.revoke_invite_code(db, code_id, identity.user_id)
    return SuccessResponse()


@router.delete("/supporters/{supporter_id}", response_model=SuccessResponse)
async def remove_supporter(
    supporter_id: uuid.UUID,
    identity: CurrentIdentity,
    db: AsyncSession = Depends(get_db),
) -> SuccessResponse:
    await sharing.remove_supporter(db, supporter_id, identity.user_id)
    return SuccessResponse()
