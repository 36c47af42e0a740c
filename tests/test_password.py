"""
Tests for the bcrypt credential hasher.
"""

import pytest

from auth.errors import InvalidInputError
from auth.password import CredentialHasher


class TestHash:
    def test_hash_then_verify(self, hasher):
        record = hasher.hash("abcdefgh")
        assert record != "abcdefgh"
        assert hasher.verify("abcdefgh", record) is True

    def test_wrong_password_does_not_verify(self, hasher):
        record = hasher.hash("correct horse")
        assert hasher.verify("battery staple", record) is False

    def test_salted(self, hasher):
        assert hasher.hash("same-password") != hasher.hash("same-password")

    def test_cost_factor_in_record(self):
        record = CredentialHasher(rounds=5).hash("abcdefgh")
        assert record.startswith("$2b$05$")

    def test_default_cost_is_twelve(self):
        assert CredentialHasher().rounds == 12

    def test_empty_password_rejected(self, hasher):
        with pytest.raises(InvalidInputError):
            hasher.hash("")

    def test_overlong_password_rejected(self, hasher):
        with pytest.raises(InvalidInputError):
            hasher.hash("x" * 73)

    def test_rounds_out_of_range(self):
        with pytest.raises(ValueError):
            CredentialHasher(rounds=3)


class TestVerify:
    @pytest.mark.parametrize("bad_record", ["", "not-a-hash", "$2b$04$short"])
    def test_malformed_record_returns_false(self, hasher, bad_record):
        assert hasher.verify("abcdefgh", bad_record) is False

    def test_empty_candidate_returns_false(self, hasher):
        assert hasher.verify("", hasher.hash("abcdefgh")) is False

    @pytest.mark.asyncio
    async def test_async_variants(self, hasher):
        record = await hasher.hash_async("abcdefgh")
        assert await hasher.verify_async("abcdefgh", record) is True
        assert await hasher.verify_async("abcdefgx", record) is False
