"""Legacy partner pairing by email request.

A would-be partner sends a request addressed to the owner's email. The
owner approves it with a chosen permission, which fills the partner slot,
or denies it. Superseded by father-role invite codes but still served to
older clients.
"""

import uuid
from dataclasses import dataclass
from datetime import UTC, datetime

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from tracker_api.core.errors import InvalidRequestError, NotFoundError
from tracker_api.logging_config import get_logger
from tracker_api.models.pairing_request import PairingRequest, PairingStatus
from tracker_api.models.pregnancy import PartnerStatus, Pregnancy
from tracker_api.models.user import User
from tracker_api.services import partnership
from tracker_api.services.partnership import PartnerInfo
from tracker_api.services.sharing import parse_permission

logger = get_logger(__name__)


@dataclass(frozen=True)
class PairingState:
    """Pairing as seen by one user. ``role`` is empty when unpaired."""

    paired: bool
    role: str
    partner: PartnerInfo | None = None


async def create_pairing_request(
    db: AsyncSession,
    requester_id: str,
    requester_name: str | None,
    target_email: str,
) -> PairingRequest:
    """Create a pending request addressed to ``target_email``.

    The target identity is resolved case-insensitively when the email is
    known; otherwise the request waits unaddressed.

    Raises:
        InvalidRequestError: If the email is blank.
    """
    target_email = (target_email or "").strip()
    if not target_email:
        raise InvalidRequestError("Target email required")

    result = await db.execute(
        select(User.id)
        .where(func.lower(User.email) == target_email.lower())
        .limit(1)
    )
    target_id = result.scalar_one_or_none()

    request = PairingRequest(
        requester_id=requester_id,
        requester_name=requester_name,
        target_email=target_email,
        target_id=target_id,
        status=PairingStatus.PENDING.value,
        created_at=datetime.now(UTC),
    )
    db.add(request)
    await db.commit()
    await db.refresh(request)

    logger.info(
        "Created pairing request",
        request_id=str(request.id),
        target_resolved=target_id is not None,
    )
    return request


async def list_pending_requests(
    db: AsyncSession,
    target_id: str,
) -> list[PairingRequest]:
    result = await db.execute(
        select(PairingRequest)
        .where(
            PairingRequest.target_id == target_id,
            PairingRequest.status == PairingStatus.PENDING.value,
        )
        .order_by(PairingRequest.created_at.desc())
    )
    return list(result.scalars().all())


async def approve_pairing_request(
    db: AsyncSession,
    request_id: uuid.UUID,
    target_id: str,
    permission: str,
) -> PairingRequest:
    """Approve a pending request and pair the requester as partner.

    The request update and the partner assignment commit together.

    Raises:
        InvalidRequestError: If permission is not read or write.
        NotFoundError: If the request is not pending, not addressed to the
            caller, or the caller owns no pregnancy.
        ConflictError: If a different partner is already approved.
    """
    granted = parse_permission(permission)

    try:
        result = await db.execute(
            select(PairingRequest)
            .where(
                PairingRequest.id == request_id,
                PairingRequest.target_id == target_id,
                PairingRequest.status == PairingStatus.PENDING.value,
            )
            .with_for_update()
        )
        request = result.scalar_one_or_none()
        if request is None:
            raise NotFoundError("Request not found")

        result = await db.execute(
            select(Pregnancy).where(Pregnancy.owner_id == target_id).with_for_update()
        )
        pregnancy = result.scalar_one_or_none()
        if pregnancy is None:
            raise NotFoundError("No pregnancy found")

        partnership.assign_partner(
            pregnancy,
            request.requester_id,
            granted,
            display_name=request.requester_name,
        )

        request.status = PairingStatus.APPROVED.value
        request.permission = granted.value
        request.resolved_at = datetime.now(UTC)

        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(
        "Approved pairing request",
        request_id=str(request_id),
        permission=granted.value,
    )
    return request


async def deny_pairing_request(
    db: AsyncSession,
    request_id: uuid.UUID,
    target_id: str,
) -> None:
    result = await db.execute(
        update(PairingRequest)
        .where(
            PairingRequest.id == request_id,
            PairingRequest.target_id == target_id,
            PairingRequest.status == PairingStatus.PENDING.value,
        )
        .values(status=PairingStatus.DENIED.value, resolved_at=datetime.now(UTC))
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        await db.rollback()
        raise NotFoundError("Request not found")

    await db.commit()
    logger.info("Denied pairing request", request_id=str(request_id))


async def update_partner_permission(
    db: AsyncSession,
    owner_id: str,
    permission: str,
) -> Pregnancy:
    """Change the permission of the owner's current partner.

    Raises:
        InvalidRequestError: If permission is not read or write.
        NotFoundError: If the owner has no partner.
    """
    granted = parse_permission(permission)

    result = await db.execute(
        select(Pregnancy)
        .where(Pregnancy.owner_id == owner_id, Pregnancy.partner_id.is_not(None))
        .with_for_update()
    )
    pregnancy = result.scalar_one_or_none()
    if pregnancy is None:
        raise NotFoundError("No partner paired")

    partnership.update_partner_permission(pregnancy, granted)
    await db.commit()

    logger.info("Updated partner permission", permission=granted.value)
    return pregnancy


async def remove_pairing(db: AsyncSession, user_id: str) -> None:
    """Unpair the caller, acting as owner first and as partner second.

    As partner, every record the caller partners is cleared.

    Raises:
        NotFoundError: If the caller is on neither side of a pairing.
    """
    result = await db.execute(
        select(Pregnancy)
        .where(Pregnancy.owner_id == user_id, Pregnancy.partner_id.is_not(None))
        .with_for_update()
    )
    pregnancy = result.scalar_one_or_none()
    if pregnancy is not None:
        cleared = [pregnancy]
    else:
        result = await db.execute(
            select(Pregnancy).where(Pregnancy.partner_id == user_id).with_for_update()
        )
        cleared = list(result.scalars().all())

    if not cleared:
        raise NotFoundError("No pairing found")

    for record in cleared:
        partnership.clear_partner(record)
    await db.commit()

    logger.info("Removed pairing", cleared=len(cleared))


async def get_pairing_status(db: AsyncSession, user_id: str) -> PairingState:
    result = await db.execute(
        select(Pregnancy).where(Pregnancy.owner_id == user_id)
    )
    pregnancy = result.scalar_one_or_none()
    if pregnancy is not None:
        if pregnancy.partner_id is None:
            return PairingState(paired=False, role="owner")
        return PairingState(
            paired=True,
            role="owner",
            partner=partnership.partner_info(pregnancy, pregnancy.partner_id),
        )

    result = await db.execute(
        select(Pregnancy)
        .where(
            Pregnancy.partner_id == user_id,
            Pregnancy.partner_status == PartnerStatus.APPROVED.value,
        )
        .limit(1)
    )
    pregnancy = result.scalar_one_or_none()
    if pregnancy is None:
        return PairingState(paired=False, role="")

    return PairingState(
        paired=True,
        role="partner",
        partner=partnership.partner_info(pregnancy, pregnancy.owner_id),
    )
