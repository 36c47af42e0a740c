"""
Tests for session token issuance and verification.
"""

import json
from base64 import urlsafe_b64decode

import pytest

from auth.errors import TokenExpiredError, TokenInvalidError, TokenMalformedError
from auth.jwt import TokenIssuer, _b64encode

TEST_SECRET = "test-secret-key"


def _payload(token: str) -> dict:
    segment = token.split(".")[0]
    return json.loads(urlsafe_b64decode(segment + "=" * (-len(segment) % 4)))


class TestIssue:
    def test_roundtrip_returns_subject(self, tokens):
        token = tokens.issue("user-1")
        assert tokens.verify(token) == "user-1"

    def test_default_ttl_is_24_hours(self, tokens, clock):
        payload = _payload(tokens.issue("user-1"))
        assert payload["iat"] == int(clock.now)
        assert payload["exp"] - payload["iat"] == 86400

    def test_custom_ttl_and_email_claim(self, tokens):
        claims = tokens.decode(tokens.issue("user-1", 60, email="a@x.com"))
        assert claims.expires_at - claims.issued_at == 60
        assert claims.email == "a@x.com"

    @pytest.mark.parametrize("ttl", [0, -60])
    def test_non_positive_ttl_rejected(self, tokens, ttl):
        with pytest.raises(ValueError):
            tokens.issue("user-1", ttl)

    def test_empty_secret_rejected(self):
        with pytest.raises(ValueError):
            TokenIssuer("")

    def test_other_secret_cannot_verify(self, tokens, clock):
        other = TokenIssuer("another-secret", clock=clock)
        with pytest.raises(TokenInvalidError):
            other.verify(tokens.issue("user-1"))


class TestExpiry:
    def test_valid_until_exp(self, tokens, clock):
        token = tokens.issue("user-1", ttl=60)
        clock.advance(60)
        assert tokens.verify(token) == "user-1"

    def test_expired_after_ttl(self, tokens, clock):
        token = tokens.issue("user-1", ttl=60)
        clock.advance(61)
        with pytest.raises(TokenExpiredError):
            tokens.verify(token)


class TestTampering:
    def test_payload_byte_flip_is_invalid(self, tokens):
        segment, signature = tokens.issue("user-1").split(".")
        flipped = "B" if segment[5] != "B" else "C"
        tampered = segment[:5] + flipped + segment[6:]
        with pytest.raises(TokenInvalidError):
            tokens.verify(tampered + "." + signature)

    def test_swapped_subject_is_invalid(self, tokens):
        segment, signature = tokens.issue("user-1").split(".")
        payload = _payload(segment + "." + signature)
        payload["sub"] = "admin"
        forged = _b64encode(json.dumps(payload).encode())
        with pytest.raises(TokenInvalidError):
            tokens.verify(forged + "." + signature)

    def test_signature_byte_flip_is_invalid(self, tokens):
        token = tokens.issue("user-1")
        last = "0" if token[-1] != "0" else "1"
        with pytest.raises(TokenInvalidError):
            tokens.verify(token[:-1] + last)


class TestMalformed:
    @pytest.mark.parametrize("token", ["", "no-dot", "a.b.c", ".sig", "payload."])
    def test_unparseable(self, tokens, token):
        with pytest.raises(TokenMalformedError):
            tokens.verify(token)

    def test_signed_garbage_payload(self, clock):
        issuer = TokenIssuer(TEST_SECRET, clock=clock)
        segment = _b64encode(b"not json")
        with pytest.raises(TokenMalformedError):
            issuer.verify(segment + "." + issuer._sign(segment))

    def test_signed_payload_without_subject(self, clock):
        issuer = TokenIssuer(TEST_SECRET, clock=clock)
        segment = _b64encode(json.dumps({"exp": 1}).encode())
        with pytest.raises(TokenMalformedError):
            issuer.verify(segment + "." + issuer._sign(segment))
