"""Tests for invite code hashing and bearer token validation."""

from datetime import timedelta

import pytest

from tests.conftest import make_token
from tracker_api.core.security import (
    TokenData,
    decode_access_token,
    hash_invite_code,
    verify_invite_code,
)


class TestInviteCodeHashing:
    def test_hash_is_bcrypt(self):
        hashed = hash_invite_code("A7K9-2QXM-4P", rounds=4)
        assert hashed.startswith("$2")
        assert len(hashed) == 60

    def test_verify_matches_any_formatting(self):
        hashed = hash_invite_code("A7K9-2QXM-4P", rounds=4)
        assert verify_invite_code("A7K9-2QXM-4P", hashed)
        assert verify_invite_code("a7k92qxm4p", hashed)
        assert verify_invite_code(" a7k9 2qxm 4p ", hashed)

    def test_verify_rejects_other_code(self):
        hashed = hash_invite_code("A7K9-2QXM-4P", rounds=4)
        assert verify_invite_code("A7K9-2QXM-4Q", hashed) is False

    def test_hashes_are_salted(self):
        assert hash_invite_code("A7K92QXM4P", rounds=4) != hash_invite_code(
            "A7K92QXM4P", rounds=4
        )

    def test_malformed_hash_raises(self):
        with pytest.raises(ValueError):
            verify_invite_code("A7K92QXM4P", "not-a-bcrypt-hash")

    def test_default_rounds_come_from_settings(self):
        # fast_hashing fixture sets 4 rounds
        assert hash_invite_code("A7K92QXM4P").startswith("$2b$04$")


class TestDecodeAccessToken:
    def test_valid_token(self):
        payload = decode_access_token(make_token("user-1", email="a@example.com"))
        assert payload is not None
        assert payload["uid"] == "user-1"
        assert payload["email"] == "a@example.com"

    def test_expired_token(self):
        token = make_token("user-1", expires_in=timedelta(seconds=-10))
        assert decode_access_token(token) is None

    def test_wrong_key(self):
        token = make_token("user-1", key=b"some-other-signing-key-0123456789")
        assert decode_access_token(token) is None

    def test_garbage(self):
        assert decode_access_token("not.a.token") is None

    def test_missing_uid(self):
        token = make_token("")
        assert decode_access_token(token) is None


class TestTokenData:
    def test_parses_claims(self):
        data = TokenData({"uid": 42, "email": "a@example.com", "exp": 1_900_000_000})
        assert data.user_id == "42"
        assert data.email == "a@example.com"
        assert data.exp is not None
        assert data.exp.tzinfo is not None

    def test_optional_claims(self):
        data = TokenData({"uid": "u"})
        assert data.email is None
        assert data.exp is None
