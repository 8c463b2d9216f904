"""Tests for model definitions."""

import uuid

from tracker_api.models import (
    CodeAttempt,
    InviteCode,
    InviteRole,
    PairingRequest,
    PairingStatus,
    PartnerStatus,
    Permission,
    Pregnancy,
    PregnancyOutcome,
    Supporter,
    User,
)


class TestTableNames:
    def test_tablenames(self):
        assert User.__tablename__ == "users"
        assert Pregnancy.__tablename__ == "pregnancies"
        assert Supporter.__tablename__ == "supporters"
        assert InviteCode.__tablename__ == "invite_codes"
        assert CodeAttempt.__tablename__ == "code_attempts"
        assert PairingRequest.__tablename__ == "pairing_requests"


class TestEnums:
    def test_values(self):
        assert {r.value for r in InviteRole} == {"father", "support"}
        assert {p.value for p in Permission} == {"read", "write"}
        assert {s.value for s in PartnerStatus} == {"pending", "approved", "denied"}
        assert {s.value for s in PairingStatus} == {
            "pending",
            "approved",
            "denied",
            "cancelled",
        }
        assert PregnancyOutcome.ONGOING.value == "ongoing"
        assert len(PregnancyOutcome) == 5


class TestPregnancy:
    def test_has_approved_partner(self):
        pregnancy = Pregnancy(owner_id="owner")
        assert not pregnancy.has_approved_partner

        pregnancy.partner_id = "dad"
        pregnancy.partner_status = PartnerStatus.PENDING.value
        assert not pregnancy.has_approved_partner

        pregnancy.partner_status = PartnerStatus.APPROVED.value
        assert pregnancy.has_approved_partner

    def test_repr(self):
        pregnancy = Pregnancy(id=uuid.uuid4(), owner_id="owner-1")
        assert "owner-1" in repr(pregnancy)


class TestSupporter:
    def test_unique_per_pregnancy(self):
        names = {c.name for c in Supporter.__table__.constraints}
        assert "uq_supporter_pregnancy_user" in names


class TestInviteCode:
    def test_repr_shows_prefix_only(self):
        invite = InviteCode(code_prefix="A7K9", code_hash="$2b$secret", role="support")
        assert "A7K9" in repr(invite)
        assert "secret" not in repr(invite)
