"""Access resolution for pregnancy records.

Answers "which record may this user see, in what role and with what
permission". The store is read on every call; there is no cache, so a
revoked supporter or cleared partner loses access on the very next request.

Resolution order, first match wins:

1. owner            -> write
2. co-owner         -> write
3. approved partner -> stored permission (default read), role ``father``
4. active supporter -> that row's permission (default read), role ``support``

A user who owns a record and also supports someone else's therefore always
resolves to their own record. ``resolve_access_to`` and ``list_access``
apply the same order to one named record, or to every record the user
reaches, so the second record stays reachable by id.
"""

import uuid
from dataclasses import dataclass
from enum import Enum

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from tracker_api.core.errors import ForbiddenError, NotFoundError
from tracker_api.models.pregnancy import PartnerStatus, Permission, Pregnancy
from tracker_api.models.supporter import Supporter


class AccessRole(str, Enum):
    """How a user is related to the record they resolved to."""

    OWNER = "owner"
    COOWNER = "coowner"
    FATHER = "father"
    SUPPORT = "support"


@dataclass(frozen=True)
class AccessGrant:
    """Result of resolving a user's access."""

    pregnancy: Pregnancy
    role: AccessRole
    permission: Permission

    @property
    def can_write(self) -> bool:
        return self.permission == Permission.WRITE


def _permission_or_read(value: str | None) -> Permission:
    if value == Permission.WRITE.value:
        return Permission.WRITE
    return Permission.READ


def _grant_for(
    pregnancy: Pregnancy,
    user_id: str,
    supporter_permission: str | None = None,
) -> AccessGrant | None:
    """Grant of ``user_id`` on one record.

    ``supporter_permission`` is the permission of the user's active
    supporter row on this record, if there is one.
    """
    if pregnancy.owner_id == user_id:
        return AccessGrant(pregnancy, AccessRole.OWNER, Permission.WRITE)
    if pregnancy.coowner_id == user_id:
        return AccessGrant(pregnancy, AccessRole.COOWNER, Permission.WRITE)
    if (
        pregnancy.partner_id == user_id
        and pregnancy.partner_status == PartnerStatus.APPROVED.value
    ):
        return AccessGrant(
            pregnancy,
            AccessRole.FATHER,
            _permission_or_read(pregnancy.partner_permission),
        )
    if supporter_permission is not None:
        return AccessGrant(
            pregnancy,
            AccessRole.SUPPORT,
            _permission_or_read(supporter_permission),
        )
    return None


async def find_access(db: AsyncSession, user_id: str) -> AccessGrant | None:
    """Resolve access, returning None when the user has no record at all."""
    result = await db.execute(
        select(Pregnancy).where(Pregnancy.owner_id == user_id)
    )
    pregnancy = result.scalar_one_or_none()
    if pregnancy is not None:
        return AccessGrant(pregnancy, AccessRole.OWNER, Permission.WRITE)

    result = await db.execute(
        select(Pregnancy).where(Pregnancy.coowner_id == user_id).limit(1)
    )
    pregnancy = result.scalar_one_or_none()
    if pregnancy is not None:
        return AccessGrant(pregnancy, AccessRole.COOWNER, Permission.WRITE)

    result = await db.execute(
        select(Pregnancy)
        .where(
            Pregnancy.partner_id == user_id,
            Pregnancy.partner_status == PartnerStatus.APPROVED.value,
        )
        .limit(1)
    )
    pregnancy = result.scalar_one_or_none()
    if pregnancy is not None:
        return AccessGrant(
            pregnancy,
            AccessRole.FATHER,
            _permission_or_read(pregnancy.partner_permission),
        )

    result = await db.execute(
        select(Pregnancy, Supporter.permission)
        .join(Supporter, Supporter.pregnancy_id == Pregnancy.id)
        .where(
            Supporter.user_id == user_id,
            Supporter.removed_at.is_(None),
        )
        .order_by(Supporter.joined_at.desc())
        .limit(1)
    )
    row = result.first()
    if row is not None:
        pregnancy, permission = row
        return AccessGrant(
            pregnancy,
            AccessRole.SUPPORT,
            _permission_or_read(permission),
        )

    return None


async def resolve_access(db: AsyncSession, user_id: str) -> AccessGrant:
    """Resolve access or raise.

    Raises:
        NotFoundError: If the user owns, co-owns, partners or supports nothing.
    """
    grant = await find_access(db, user_id)
    if grant is None:
        raise NotFoundError("No pregnancy found")
    return grant


def require_write(grant: AccessGrant) -> AccessGrant:
    """Gate a mutation on write permission.

    Raises:
        ForbiddenError: If the grant is read-only.
    """
    if not grant.can_write:
        raise ForbiddenError("Write access required")
    return grant


async def resolve_access_to(
    db: AsyncSession,
    pregnancy_id: uuid.UUID,
    user_id: str,
) -> AccessGrant:
    """Resolve the caller's grant on one specific record.

    Raises:
        NotFoundError: If the record does not exist.
        ForbiddenError: If the caller has no role on it.
    """
    result = await db.execute(
        select(Pregnancy).where(Pregnancy.id == pregnancy_id)
    )
    pregnancy = result.scalar_one_or_none()
    if pregnancy is None:
        raise NotFoundError("Pregnancy not found")

    result = await db.execute(
        select(Supporter.permission).where(
            Supporter.pregnancy_id == pregnancy.id,
            Supporter.user_id == user_id,
            Supporter.removed_at.is_(None),
        )
    )
    grant = _grant_for(pregnancy, user_id, result.scalar_one_or_none())
    if grant is None:
        raise ForbiddenError("Access denied")
    return grant


async def list_access(db: AsyncSession, user_id: str) -> list[AccessGrant]:
    """Every record the user reaches, active first, then newest first."""
    supported = (
        select(Supporter.pregnancy_id, Supporter.permission)
        .where(Supporter.user_id == user_id, Supporter.removed_at.is_(None))
        .subquery()
    )
    result = await db.execute(
        select(Pregnancy, supported.c.permission)
        .outerjoin(supported, supported.c.pregnancy_id == Pregnancy.id)
        .where(
            or_(
                Pregnancy.owner_id == user_id,
                Pregnancy.coowner_id == user_id,
                and_(
                    Pregnancy.partner_id == user_id,
                    Pregnancy.partner_status == PartnerStatus.APPROVED.value,
                ),
                supported.c.pregnancy_id.is_not(None),
            )
        )
        .order_by(Pregnancy.archived.asc(), Pregnancy.created_at.desc())
    )

    grants = []
    for pregnancy, permission in result.all():
        grant = _grant_for(pregnancy, user_id, permission)
        if grant is not None:
            grants.append(grant)
    return grants
