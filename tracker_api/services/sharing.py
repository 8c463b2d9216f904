"""Invite code sharing service.

Owners issue short-lived codes granting the father or support role; other
users redeem them to gain access. Only a bcrypt hash and a four character
prefix are stored, so redemption verifies the submitted code against every
active hash in turn. The number of active codes is bounded by the 48 hour
expiry, which keeps that scan short.

Redemption is exactly-once: the matched code is re-read under a row lock
and marked redeemed with a conditional UPDATE inside the same transaction
that applies the role. Of two concurrent redeemers of the same code, one
commits and the other sees the code inactive.
"""

import asyncio
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from tracker_api.config import settings
from tracker_api.core.errors import (
    ConflictError,
    ForbiddenError,
    InvalidRequestError,
    NotFoundError,
    RateLimitedError,
)
from tracker_api.core.invite_codes import (
    code_prefix,
    generate_code,
    is_valid_code_format,
)
from tracker_api.core.security import hash_invite_code, verify_invite_code
from tracker_api.logging_config import get_logger
from tracker_api.models.invite_code import InviteCode, InviteRole
from tracker_api.models.pregnancy import Permission, Pregnancy
from tracker_api.models.supporter import Supporter
from tracker_api.services import code_attempts
from tracker_api.services.partnership import PartnerInfo, assign_partner, partner_info

logger = get_logger(__name__)

INVALID_CODE_MESSAGE = "Invalid or expired code"


@dataclass(frozen=True)
class IssuedInviteCode:
    """A freshly issued code. ``code`` is the only copy of the plaintext."""

    code: str
    invite: InviteCode

    @property
    def expires_at(self) -> datetime:
        return self.invite.expires_at

    @property
    def role(self) -> str:
        return self.invite.role

    @property
    def permission(self) -> str:
        return self.invite.permission


@dataclass(frozen=True)
class Redemption:
    """Outcome of a successful redemption."""

    pregnancy: Pregnancy
    role: InviteRole
    permission: Permission


@dataclass
class SharingStatus:
    """Everything an owner sees on the sharing screen."""

    pregnancy: Pregnancy
    partner: PartnerInfo | None
    supporters: list[Supporter] = field(default_factory=list)
    active_codes: list[InviteCode] = field(default_factory=list)


def _parse_role(value: str) -> InviteRole:
    try:
        return InviteRole(value)
    except ValueError:
        raise InvalidRequestError("Role must be 'father' or 'support'") from None


def parse_permission(value: str | None) -> Permission:
    """Validate a permission string; empty means read."""
    if not value:
        return Permission.READ
    try:
        return Permission(value)
    except ValueError:
        raise InvalidRequestError("Permission must be 'read' or 'write'") from None


def is_privileged_email(
    email: str | None,
    privileged_emails: list[str] | None = None,
) -> bool:
    if not email:
        return False
    configured = (
        settings.privileged_emails if privileged_emails is None else privileged_emails
    )
    candidate = email.strip().lower()
    return any(candidate == entry.strip().lower() for entry in configured)


async def _get_owned_pregnancy(
    db: AsyncSession,
    owner_id: str,
) -> Pregnancy | None:
    result = await db.execute(
        select(Pregnancy).where(Pregnancy.owner_id == owner_id)
    )
    return result.scalar_one_or_none()


async def issue_invite_code(
    db: AsyncSession,
    owner_id: str,
    role: str,
    permission: str | None = None,
) -> IssuedInviteCode:
    """Issue a new invite code for the caller's own pregnancy.

    Args:
        db: Database session.
        owner_id: The caller; must own a pregnancy.
        role: ``father`` or ``support``.
        permission: ``read`` or ``write``; defaults to read.

    Returns:
        The plaintext code together with the stored row.

    Raises:
        ForbiddenError: If the caller owns no pregnancy.
        InvalidRequestError: If role or permission is not recognised.
        ConflictError: If a father code is requested while a partner is
            already approved.
    """
    pregnancy = await _get_owned_pregnancy(db, owner_id)
    if pregnancy is None:
        raise ForbiddenError("Only pregnancy owner can generate codes")

    invite_role = _parse_role(role)
    invite_permission = parse_permission(permission)

    if invite_role == InviteRole.FATHER and pregnancy.has_approved_partner:
        raise ConflictError("Already has a partner")

    code = generate_code()
    code_hash = await asyncio.to_thread(hash_invite_code, code)
    now = datetime.now(UTC)

    invite = InviteCode(
        pregnancy_id=pregnancy.id,
        code_hash=code_hash,
        code_prefix=code_prefix(code),
        role=invite_role.value,
        permission=invite_permission.value,
        created_at=now,
        expires_at=now + timedelta(hours=settings.invite_code_expiry_hours),
    )
    db.add(invite)
    await db.commit()
    await db.refresh(invite)

    logger.info(
        "Issued invite code",
        pregnancy_id=str(pregnancy.id),
        code_prefix=invite.code_prefix,
        role=invite.role,
        permission=invite.permission,
    )

    return IssuedInviteCode(code=code, invite=invite)


async def _find_matching_code(
    db: AsyncSession,
    code: str,
    now: datetime,
) -> InviteCode | None:
    result = await db.execute(
        select(InviteCode).where(InviteCode.active_clause(now))
    )
    for candidate in result.scalars().all():
        try:
            matched = await asyncio.to_thread(
                verify_invite_code, code, candidate.code_hash
            )
        except ValueError:
            logger.warning(
                "Skipping invite code with malformed hash",
                code_id=str(candidate.id),
            )
            continue
        if matched:
            return candidate
    return None


async def _upsert_supporter(
    db: AsyncSession,
    pregnancy_id: uuid.UUID,
    user_id: str,
    display_name: str | None,
    permission: Permission,
    code_id: uuid.UUID,
    display_partner_card: bool,
    now: datetime,
) -> Supporter:
    result = await db.execute(
        select(Supporter)
        .where(
            Supporter.pregnancy_id == pregnancy_id,
            Supporter.user_id == user_id,
        )
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    supporter = result.scalar_one_or_none()

    if supporter is None:
        supporter = Supporter(
            pregnancy_id=pregnancy_id,
            user_id=user_id,
        )
        db.add(supporter)

    # Re-redemption revives a removed row and refreshes it
    supporter.display_name = display_name
    supporter.permission = permission.value
    supporter.invited_via_code_id = code_id
    supporter.display_partner_card = display_partner_card
    supporter.joined_at = now
    supporter.removed_at = None
    return supporter


async def _claim_code(
    db: AsyncSession,
    code_id: uuid.UUID,
    user_id: str,
    now: datetime,
) -> InviteCode | None:
    """Lock the code and mark it redeemed; None if someone else got there first."""
    result = await db.execute(
        select(InviteCode)
        .where(InviteCode.id == code_id, InviteCode.active_clause(now))
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    invite = result.scalar_one_or_none()
    if invite is None:
        return None

    claimed = await db.execute(
        update(InviteCode)
        .where(InviteCode.id == code_id, InviteCode.active_clause(now))
        .values(redeemed_at=now, redeemed_by=user_id)
        .execution_options(synchronize_session=False)
    )
    if claimed.rowcount != 1:
        return None
    return invite


async def redeem_invite_code(
    db: AsyncSession,
    code: str,
    user_id: str,
    display_name: str | None = None,
    email: str | None = None,
    ip_address: str | None = None,
    privileged_emails: list[str] | None = None,
) -> Redemption:
    """Redeem an invite code on behalf of ``user_id``.

    Every failed attempt is recorded and counts toward the per-user
    throttle. ``email`` must come from the verified token, never from the
    request body, because it decides the privileged override.

    Raises:
        RateLimitedError: If the user has too many recent failures.
        InvalidRequestError: If the code is not well formed.
        NotFoundError: If no active code matches, or the match was redeemed
            concurrently.
        ConflictError: If a father code meets a different approved partner.
    """
    if await code_attempts.is_rate_limited(db, user_id):
        logger.warning("Invite code redemption rate limited")
        raise RateLimitedError("Too many attempts. Try again later.")

    if not is_valid_code_format(code):
        await code_attempts.record_attempt(db, user_id, False, ip_address)
        raise InvalidRequestError("Invalid code format")

    now = datetime.now(UTC)
    matched = await _find_matching_code(db, code, now)
    if matched is None:
        await code_attempts.record_attempt(db, user_id, False, ip_address)
        raise NotFoundError(INVALID_CODE_MESSAGE)

    try:
        invite = await _claim_code(db, matched.id, user_id, now)
        if invite is None:
            raise NotFoundError(INVALID_CODE_MESSAGE)

        prefix = invite.code_prefix
        privileged = is_privileged_email(email, privileged_emails)
        role = InviteRole(invite.role)
        permission = Permission.WRITE if privileged else Permission(invite.permission)

        result = await db.execute(
            select(Pregnancy)
            .where(Pregnancy.id == invite.pregnancy_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        pregnancy = result.scalar_one()

        if role == InviteRole.FATHER:
            assign_partner(
                pregnancy,
                user_id,
                permission,
                display_name=display_name,
                display_partner_card=not privileged,
            )
        else:
            await _upsert_supporter(
                db,
                pregnancy_id=pregnancy.id,
                user_id=user_id,
                display_name=display_name,
                permission=permission,
                code_id=invite.id,
                display_partner_card=not privileged,
                now=now,
            )

        await db.commit()
    except Exception:
        await db.rollback()
        await code_attempts.record_attempt(db, user_id, False, ip_address)
        raise

    await code_attempts.record_attempt(db, user_id, True, ip_address)

    logger.info(
        "Redeemed invite code",
        pregnancy_id=str(pregnancy.id),
        code_prefix=prefix,
        role=role.value,
        permission=permission.value,
        privileged=privileged,
    )

    return Redemption(pregnancy=pregnancy, role=role, permission=permission)


async def revoke_invite_code(
    db: AsyncSession,
    code_id: uuid.UUID,
    owner_id: str,
) -> None:
    """Revoke one of the owner's unredeemed codes.

    Someone else's code, an unknown id and an already used code all fail
    the same way.

    Raises:
        NotFoundError: If nothing was revoked.
    """
    owned = select(Pregnancy.id).where(Pregnancy.owner_id == owner_id)
    result = await db.execute(
        update(InviteCode)
        .where(
            InviteCode.id == code_id,
            InviteCode.pregnancy_id.in_(owned),
            InviteCode.redeemed_at.is_(None),
            InviteCode.revoked_at.is_(None),
        )
        .values(revoked_at=datetime.now(UTC))
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        await db.rollback()
        raise NotFoundError("Code not found or already revoked")

    await db.commit()
    logger.info("Revoked invite code", code_id=str(code_id))


async def list_active_codes(
    db: AsyncSession,
    pregnancy_id: uuid.UUID,
) -> list[InviteCode]:
    """Active codes for a pregnancy, newest first."""
    result = await db.execute(
        select(InviteCode)
        .where(
            InviteCode.pregnancy_id == pregnancy_id,
            InviteCode.active_clause(datetime.now(UTC)),
        )
        .order_by(InviteCode.created_at.desc())
    )
    return list(result.scalars().all())


async def list_supporters(
    db: AsyncSession,
    pregnancy_id: uuid.UUID,
) -> list[Supporter]:
    """Active supporters for a pregnancy, most recently joined first."""
    result = await db.execute(
        select(Supporter)
        .where(
            Supporter.pregnancy_id == pregnancy_id,
            Supporter.removed_at.is_(None),
        )
        .order_by(Supporter.joined_at.desc())
    )
    return list(result.scalars().all())


async def remove_supporter(
    db: AsyncSession,
    supporter_id: uuid.UUID,
    owner_id: str,
) -> None:
    """Soft-remove a supporter from the owner's pregnancy.

    Raises:
        NotFoundError: If the supporter is unknown, not on the caller's
            pregnancy, or already removed.
    """
    owned = select(Pregnancy.id).where(Pregnancy.owner_id == owner_id)
    result = await db.execute(
        update(Supporter)
        .where(
            Supporter.id == supporter_id,
            Supporter.pregnancy_id.in_(owned),
            Supporter.removed_at.is_(None),
        )
        .values(removed_at=datetime.now(UTC))
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        await db.rollback()
        raise NotFoundError("Supporter not found")

    await db.commit()
    logger.info("Removed supporter", supporter_id=str(supporter_id))


async def get_sharing_status(db: AsyncSession, owner_id: str) -> SharingStatus:
    """Partner, supporters and active codes of the caller's own pregnancy.

    Raises:
        NotFoundError: If the caller owns no pregnancy.
    """
    pregnancy = await _get_owned_pregnancy(db, owner_id)
    if pregnancy is None:
        raise NotFoundError("No pregnancy found")

    partner = None
    if pregnancy.partner_id is not None:
        partner = partner_info(pregnancy, pregnancy.partner_id)

    return SharingStatus(
        pregnancy=pregnancy,
        partner=partner,
        supporters=await list_supporters(db, pregnancy.id),
        active_codes=await list_active_codes(db, pregnancy.id),
    )
