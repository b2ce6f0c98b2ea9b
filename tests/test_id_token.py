"""Tests for identity token parsing and nonce checks."""

import pytest

from conftest import make_jwt
from token_response.errors import NonceMismatchError, TokenParsingError
from token_response.id_token import IdTokenProcessor


class TestIdTokenProcessor:
    """Tests for IdTokenProcessor."""

    @pytest.fixture
    def processor(self, crypto):
        return IdTokenProcessor(crypto)

    def test_parse_claims(self, processor, raw_id_token) -> None:
        """Test that claims are decoded and exposed."""
        id_token = processor.parse(raw_id_token)

        assert id_token.raw_token == raw_id_token
        assert id_token.claims.oid == "00000000-oid"
        assert id_token.claims.sub == "sub-123"
        assert id_token.claims.tid == "72f988bf-tenant"
        assert id_token.claims.preferred_username == "test@contoso.com"

    def test_matching_nonce(self, processor, raw_id_token) -> None:
        """Test that a matching nonce passes."""
        id_token = processor.parse(raw_id_token, cached_nonce="nonce-abc")

        assert id_token.claims.nonce == "nonce-abc"

    def test_nonce_mismatch(self, processor, raw_id_token) -> None:
        """Test that differing nonces raise NonceMismatchError."""
        with pytest.raises(NonceMismatchError):
            processor.parse(raw_id_token, cached_nonce="other-nonce")

    def test_token_without_nonce_is_accepted(self, processor) -> None:
        """Test that a token carrying no nonce is not a mismatch."""
        id_token = processor.parse(make_jwt({"sub": "s"}), cached_nonce="nonce-abc")

        assert id_token.claims.nonce is None

    def test_no_cached_nonce_is_accepted(self, processor, raw_id_token) -> None:
        """Test that a nonce is not required when none was sent."""
        processor.parse(raw_id_token)

    @pytest.mark.parametrize("token", ["", "only.two", "a.b.c.d"])
    def test_malformed_token(self, processor, token) -> None:
        """Test that non-JWT input raises TokenParsingError."""
        with pytest.raises(TokenParsingError):
            processor.parse(token)

    def test_payload_not_json(self, processor) -> None:
        """Test that an undecodable payload raises TokenParsingError."""
        with pytest.raises(TokenParsingError):
            processor.parse("header.bm90LWpzb24.signature")

    def test_emails_claim(self, processor) -> None:
        """Test the emails accessor for B2C-style tokens."""
        id_token = processor.parse(make_jwt({"sub": "s", "emails": ["b2c@contoso.com"]}))

        assert id_token.claims.emails == ["b2c@contoso.com"]
