"""Pregnancy record operations.

Reads go through the access resolver so delegated users see the record
they were granted. Profile edits need a write grant; outcome and archive
changes are reserved for the owner.
"""

import uuid
from datetime import UTC, date, datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tracker_api.core.errors import (
    ConflictError,
    ForbiddenError,
    InvalidRequestError,
    NotFoundError,
)
from tracker_api.logging_config import get_logger
from tracker_api.models.pregnancy import (
    DEFAULT_CYCLE_LENGTH,
    Permission,
    Pregnancy,
    PregnancyOutcome,
)
from tracker_api.services.access import (
    AccessGrant,
    AccessRole,
    list_access,
    require_write,
    resolve_access_to,
)

logger = get_logger(__name__)

PROFILE_FIELDS = (
    "due_date",
    "start_date",
    "calculation_method",
    "cycle_length",
    "baby_name",
    "mom_name",
    "mom_birthday",
    "gender",
    "parent_role",
)


def _apply_profile(pregnancy: Pregnancy, fields: dict[str, Any]) -> None:
    # None leaves the stored value in place
    for name in PROFILE_FIELDS:
        value = fields.get(name)
        if value is not None:
            setattr(pregnancy, name, value)


async def create_pregnancy(
    db: AsyncSession,
    owner_id: str,
    fields: dict[str, Any],
) -> AccessGrant:
    """Create the caller's pregnancy record.

    Raises:
        ConflictError: If the caller already owns one.
    """
    result = await db.execute(
        select(Pregnancy.id).where(Pregnancy.owner_id == owner_id)
    )
    if result.scalar_one_or_none() is not None:
        raise ConflictError("Pregnancy already exists")

    pregnancy = Pregnancy(owner_id=owner_id, cycle_length=DEFAULT_CYCLE_LENGTH)
    _apply_profile(pregnancy, fields)
    db.add(pregnancy)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Pregnancy already exists") from None
    await db.refresh(pregnancy)

    logger.info("Created pregnancy", pregnancy_id=str(pregnancy.id))
    return AccessGrant(pregnancy, AccessRole.OWNER, Permission.WRITE)


async def update_pregnancy(
    db: AsyncSession,
    grant: AccessGrant,
    fields: dict[str, Any],
) -> AccessGrant:
    """Update profile fields of the record a grant points at.

    Raises:
        ForbiddenError: If the grant is read-only or the record is archived.
    """
    require_write(grant)
    pregnancy = grant.pregnancy
    if pregnancy.archived:
        raise ForbiddenError("Cannot modify archived pregnancy")

    _apply_profile(pregnancy, fields)
    pregnancy.updated_at = datetime.now(UTC)
    await db.commit()
    await db.refresh(pregnancy)

    logger.info(
        "Updated pregnancy",
        pregnancy_id=str(pregnancy.id),
        role=grant.role.value,
    )
    return grant


async def list_accessible_pregnancies(
    db: AsyncSession,
    user_id: str,
) -> list[AccessGrant]:
    """Every record the caller owns, co-owns, partners or supports."""
    return await list_access(db, user_id)


async def get_pregnancy_by_id(
    db: AsyncSession,
    pregnancy_id: uuid.UUID,
    user_id: str,
) -> AccessGrant:
    """The caller's grant on one record.

    Raises:
        NotFoundError: If the record does not exist.
        ForbiddenError: If the caller has no role on it.
    """
    return await resolve_access_to(db, pregnancy_id, user_id)


async def update_pregnancy_by_id(
    db: AsyncSession,
    pregnancy_id: uuid.UUID,
    user_id: str,
    fields: dict[str, Any],
) -> AccessGrant:
    grant = await resolve_access_to(db, pregnancy_id, user_id)
    return await update_pregnancy(db, grant, fields)


async def _get_owned_by_id(
    db: AsyncSession,
    pregnancy_id: uuid.UUID,
    user_id: str,
    action: str,
) -> Pregnancy:
    result = await db.execute(
        select(Pregnancy).where(Pregnancy.id == pregnancy_id)
    )
    pregnancy = result.scalar_one_or_none()
    if pregnancy is None:
        raise NotFoundError("Pregnancy not found")
    if pregnancy.owner_id != user_id:
        raise ForbiddenError(f"Only owner can {action}")
    return pregnancy


async def set_outcome(
    db: AsyncSession,
    pregnancy_id: uuid.UUID,
    user_id: str,
    outcome: str,
    outcome_date: date | None = None,
) -> Pregnancy:
    """Record the outcome of a pregnancy.

    Raises:
        NotFoundError: If the record does not exist.
        ForbiddenError: If the caller is not the owner or it is archived.
        InvalidRequestError: If the outcome value is unknown.
    """
    pregnancy = await _get_owned_by_id(db, pregnancy_id, user_id, "set outcome")
    if pregnancy.archived:
        raise ForbiddenError("Cannot modify archived pregnancy")

    try:
        value = PregnancyOutcome(outcome)
    except ValueError:
        raise InvalidRequestError("Invalid outcome value") from None

    pregnancy.outcome = value.value
    pregnancy.outcome_date = outcome_date
    pregnancy.updated_at = datetime.now(UTC)
    await db.commit()
    await db.refresh(pregnancy)

    logger.info(
        "Set pregnancy outcome",
        pregnancy_id=str(pregnancy.id),
        outcome=value.value,
    )
    return pregnancy


async def set_archived(
    db: AsyncSession,
    pregnancy_id: uuid.UUID,
    user_id: str,
    archived: bool,
) -> Pregnancy:
    pregnancy = await _get_owned_by_id(db, pregnancy_id, user_id, "archive")

    now = datetime.now(UTC)
    pregnancy.archived = archived
    pregnancy.archived_at = now if archived else None
    pregnancy.updated_at = now
    await db.commit()
    await db.refresh(pregnancy)

    logger.info(
        "Set pregnancy archive flag",
        pregnancy_id=str(pregnancy.id),
        archived=archived,
    )
    return pregnancy
