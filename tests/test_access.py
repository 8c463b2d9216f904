"""Tests for access resolution.

Priority rules run against SQLite; the write gate is pure.
"""

import uuid
from datetime import UTC, datetime

import pytest

from tracker_api.core.errors import ForbiddenError, NotFoundError
from tracker_api.models import PartnerStatus, Permission, Pregnancy, Supporter
from tracker_api.services.access import (
    AccessGrant,
    AccessRole,
    find_access,
    require_write,
    resolve_access,
)


async def add_pregnancy(db, owner_id: str, **kwargs) -> Pregnancy:
    pregnancy = Pregnancy(id=uuid.uuid4(), owner_id=owner_id, **kwargs)
    db.add(pregnancy)
    await db.commit()
    return pregnancy


async def add_supporter(db, pregnancy, user_id: str, **kwargs) -> Supporter:
    supporter = Supporter(pregnancy_id=pregnancy.id, user_id=user_id, **kwargs)
    db.add(supporter)
    await db.commit()
    return supporter


class TestRequireWrite:
    def test_write_grant_passes(self):
        grant = AccessGrant(Pregnancy(owner_id="o"), AccessRole.OWNER, Permission.WRITE)
        assert require_write(grant) is grant

    def test_read_grant_refused(self):
        grant = AccessGrant(Pregnancy(owner_id="o"), AccessRole.SUPPORT, Permission.READ)
        assert not grant.can_write
        with pytest.raises(ForbiddenError):
            require_write(grant)


class TestResolveAccess:
    async def test_no_access(self, db_session):
        assert await find_access(db_session, "nobody") is None
        with pytest.raises(NotFoundError):
            await resolve_access(db_session, "nobody")

    async def test_owner(self, db_session):
        pregnancy = await add_pregnancy(db_session, "mom")
        grant = await resolve_access(db_session, "mom")

        assert grant.pregnancy.id == pregnancy.id
        assert grant.role == AccessRole.OWNER
        assert grant.permission == Permission.WRITE

    async def test_coowner_gets_write(self, db_session):
        pregnancy = await add_pregnancy(db_session, "mom", coowner_id="admin")
        grant = await resolve_access(db_session, "admin")

        assert grant.pregnancy.id == pregnancy.id
        assert grant.role == AccessRole.COOWNER
        assert grant.permission == Permission.WRITE

    async def test_approved_partner_uses_stored_permission(self, db_session):
        await add_pregnancy(
            db_session,
            "mom",
            partner_id="dad",
            partner_status=PartnerStatus.APPROVED.value,
            partner_permission="write",
        )
        grant = await resolve_access(db_session, "dad")
        assert grant.role == AccessRole.FATHER
        assert grant.permission == Permission.WRITE

    async def test_partner_permission_defaults_to_read(self, db_session):
        await add_pregnancy(
            db_session,
            "mom",
            partner_id="dad",
            partner_status=PartnerStatus.APPROVED.value,
        )
        grant = await resolve_access(db_session, "dad")
        assert grant.permission == Permission.READ

    async def test_pending_partner_has_no_access(self, db_session):
        await add_pregnancy(
            db_session,
            "mom",
            partner_id="dad",
            partner_status=PartnerStatus.PENDING.value,
        )
        assert await find_access(db_session, "dad") is None

    async def test_supporter_permission(self, db_session):
        pregnancy = await add_pregnancy(db_session, "mom")
        await add_supporter(db_session, pregnancy, "grandma", permission="write")

        grant = await resolve_access(db_session, "grandma")
        assert grant.pregnancy.id == pregnancy.id
        assert grant.role == AccessRole.SUPPORT
        assert grant.permission == Permission.WRITE

    async def test_removed_supporter_has_no_access(self, db_session):
        pregnancy = await add_pregnancy(db_session, "mom")
        await add_supporter(
            db_session, pregnancy, "grandma", removed_at=datetime.now(UTC)
        )
        assert await find_access(db_session, "grandma") is None

    async def test_owner_beats_supporter(self, db_session):
        other = await add_pregnancy(db_session, "mom")
        own = await add_pregnancy(db_session, "aunt")
        await add_supporter(db_session, other, "aunt", permission="read")

        grant = await resolve_access(db_session, "aunt")
        assert grant.pregnancy.id == own.id
        assert grant.role == AccessRole.OWNER

    async def test_coowner_beats_partner(self, db_session):
        coowned = await add_pregnancy(db_session, "mom-1", coowner_id="admin")
        await add_pregnancy(
            db_session,
            "mom-2",
            partner_id="admin",
            partner_status=PartnerStatus.APPROVED.value,
            partner_permission="read",
        )
        grant = await resolve_access(db_session, "admin")
        assert grant.pregnancy.id == coowned.id
        assert grant.role == AccessRole.COOWNER

    async def test_partner_beats_supporter(self, db_session):
        partnered = await add_pregnancy(
            db_session,
            "mom-1",
            partner_id="dad",
            partner_status=PartnerStatus.APPROVED.value,
            partner_permission="read",
        )
        supported = await add_pregnancy(db_session, "mom-2")
        await add_supporter(db_session, supported, "dad", permission="write")

        grant = await resolve_access(db_session, "dad")
        assert grant.pregnancy.id == partnered.id
        assert grant.role == AccessRole.FATHER
        assert grant.permission == Permission.READ
