"""Tests for pregnancy record operations."""

import uuid
from datetime import UTC, date, datetime

import pytest
from sqlalchemy import select

from tracker_api.core.errors import (
    ConflictError,
    ForbiddenError,
    InvalidRequestError,
    NotFoundError,
)
from tracker_api.models import Pregnancy, Supporter
from tracker_api.models.pregnancy import DEFAULT_CYCLE_LENGTH, Permission
from tracker_api.services import pregnancy as pregnancy_service
from tracker_api.services.access import AccessGrant, AccessRole, resolve_access

OWNER = "mom"


@pytest.fixture
async def grant(db_session) -> AccessGrant:
    return await pregnancy_service.create_pregnancy(
        db_session, OWNER, {"baby_name": "Bean", "due_date": date(2027, 3, 1)}
    )


class TestCreate:
    async def test_create_sets_owner_and_defaults(self, grant):
        assert grant.role == AccessRole.OWNER
        assert grant.permission == Permission.WRITE
        assert grant.pregnancy.owner_id == OWNER
        assert grant.pregnancy.baby_name == "Bean"
        assert grant.pregnancy.cycle_length == DEFAULT_CYCLE_LENGTH
        assert grant.pregnancy.outcome == "ongoing"
        assert grant.pregnancy.archived is False

    async def test_second_create_conflicts(self, db_session, grant):
        with pytest.raises(ConflictError):
            await pregnancy_service.create_pregnancy(db_session, OWNER, {})


class TestUpdate:
    async def test_owner_updates_profile(self, db_session, grant):
        await pregnancy_service.update_pregnancy(
            db_session, grant, {"mom_name": "Ana", "baby_name": None}
        )

        current = await resolve_access(db_session, OWNER)
        assert current.pregnancy.mom_name == "Ana"
        assert current.pregnancy.baby_name == "Bean"

    async def test_read_grant_is_refused(self, db_session, grant):
        read_only = AccessGrant(grant.pregnancy, AccessRole.SUPPORT, Permission.READ)
        with pytest.raises(ForbiddenError):
            await pregnancy_service.update_pregnancy(
                db_session, read_only, {"mom_name": "Ana"}
            )

    async def test_write_supporter_may_update(self, db_session, grant):
        helper = AccessGrant(grant.pregnancy, AccessRole.SUPPORT, Permission.WRITE)
        await pregnancy_service.update_pregnancy(
            db_session, helper, {"gender": "girl"}
        )
        assert grant.pregnancy.gender == "girl"

    async def test_archived_record_is_frozen(self, db_session, grant):
        await pregnancy_service.set_archived(
            db_session, grant.pregnancy.id, OWNER, True
        )
        with pytest.raises(ForbiddenError):
            await pregnancy_service.update_pregnancy(
                db_session, grant, {"mom_name": "Ana"}
            )


class TestOutcome:
    async def test_owner_sets_outcome(self, db_session, grant):
        record = await pregnancy_service.set_outcome(
            db_session, grant.pregnancy.id, OWNER, "birth", date(2027, 2, 27)
        )
        assert record.outcome == "birth"
        assert record.outcome_date == date(2027, 2, 27)

    async def test_non_owner_forbidden(self, db_session, grant):
        with pytest.raises(ForbiddenError):
            await pregnancy_service.set_outcome(
                db_session, grant.pregnancy.id, "dad", "birth"
            )

    async def test_unknown_record(self, db_session, grant):
        with pytest.raises(NotFoundError):
            await pregnancy_service.set_outcome(
                db_session, uuid.uuid4(), OWNER, "birth"
            )

    async def test_invalid_outcome(self, db_session, grant):
        with pytest.raises(InvalidRequestError):
            await pregnancy_service.set_outcome(
                db_session, grant.pregnancy.id, OWNER, "unknown"
            )

    async def test_archived_outcome_forbidden(self, db_session, grant):
        await pregnancy_service.set_archived(
            db_session, grant.pregnancy.id, OWNER, True
        )
        with pytest.raises(ForbiddenError):
            await pregnancy_service.set_outcome(
                db_session, grant.pregnancy.id, OWNER, "birth"
            )


class TestArchive:
    async def test_toggle(self, db_session, grant):
        record = await pregnancy_service.set_archived(
            db_session, grant.pregnancy.id, OWNER, True
        )
        assert record.archived is True
        assert record.archived_at is not None

        record = await pregnancy_service.set_archived(
            db_session, grant.pregnancy.id, OWNER, False
        )
        assert record.archived is False
        assert record.archived_at is None

    async def test_non_owner_forbidden(self, db_session, grant):
        other = Pregnancy(owner_id="someone-else")
        db_session.add(other)
        await db_session.commit()

        with pytest.raises(ForbiddenError):
            await pregnancy_service.set_archived(db_session, other.id, OWNER, True)


class TestRecordsById:
    @pytest.fixture
    async def sisters(self, db_session, grant) -> Pregnancy:
        """A second record on which the owner is a read-only supporter."""
        other = Pregnancy(id=uuid.uuid4(), owner_id="sister", baby_name="Pip")
        db_session.add(other)
        await db_session.flush()
        db_session.add(
            Supporter(pregnancy_id=other.id, user_id=OWNER, permission="read")
        )
        await db_session.commit()
        return other

    async def test_list_includes_supported_record(self, db_session, grant, sisters):
        grants = await pregnancy_service.list_accessible_pregnancies(db_session, OWNER)

        roles = {g.pregnancy.id: (g.role, g.permission) for g in grants}
        assert roles == {
            grant.pregnancy.id: (AccessRole.OWNER, Permission.WRITE),
            sisters.id: (AccessRole.SUPPORT, Permission.READ),
        }

    async def test_list_puts_archived_last(self, db_session, grant, sisters):
        await pregnancy_service.set_archived(
            db_session, sisters.id, "sister", True
        )
        grants = await pregnancy_service.list_accessible_pregnancies(db_session, OWNER)
        assert [g.pregnancy.id for g in grants] == [grant.pregnancy.id, sisters.id]

    async def test_list_skips_removed_supporter(self, db_session, grant, sisters):
        result = await db_session.execute(
            select(Supporter).where(Supporter.user_id == OWNER)
        )
        result.scalar_one().removed_at = datetime.now(UTC)
        await db_session.commit()

        grants = await pregnancy_service.list_accessible_pregnancies(db_session, OWNER)
        assert [g.pregnancy.id for g in grants] == [grant.pregnancy.id]

    async def test_list_empty_for_stranger(self, db_session, grant):
        assert (
            await pregnancy_service.list_accessible_pregnancies(db_session, "nobody")
            == []
        )

    async def test_get_by_id_uses_role_on_that_record(
        self, db_session, grant, sisters
    ):
        found = await pregnancy_service.get_pregnancy_by_id(
            db_session, sisters.id, OWNER
        )
        assert found.pregnancy.baby_name == "Pip"
        assert found.role == AccessRole.SUPPORT
        assert found.permission == Permission.READ

    async def test_get_by_id_partner(self, db_session, grant):
        grant.pregnancy.partner_id = "dad"
        grant.pregnancy.partner_status = "approved"
        grant.pregnancy.partner_permission = "write"
        await db_session.commit()

        found = await pregnancy_service.get_pregnancy_by_id(
            db_session, grant.pregnancy.id, "dad"
        )
        assert found.role == AccessRole.FATHER
        assert found.permission == Permission.WRITE

    async def test_get_by_id_unknown(self, db_session, grant):
        with pytest.raises(NotFoundError):
            await pregnancy_service.get_pregnancy_by_id(
                db_session, uuid.uuid4(), OWNER
            )

    async def test_get_by_id_without_role(self, db_session, grant):
        with pytest.raises(ForbiddenError):
            await pregnancy_service.get_pregnancy_by_id(
                db_session, grant.pregnancy.id, "stranger"
            )

    async def test_update_by_id_read_only_refused(self, db_session, grant, sisters):
        with pytest.raises(ForbiddenError):
            await pregnancy_service.update_pregnancy_by_id(
                db_session, sisters.id, OWNER, {"baby_name": "Changed"}
            )
        assert sisters.baby_name == "Pip"

    async def test_update_by_id_owner(self, db_session, grant, sisters):
        updated = await pregnancy_service.update_pregnancy_by_id(
            db_session, sisters.id, "sister", {"mom_name": "Bea"}
        )
        assert updated.role == AccessRole.OWNER
        assert updated.pregnancy.mom_name == "Bea"
