"""Tests for the cache record assembler."""

import time

import pytest

from conftest import CLIENT_ID, TENANT_ID, make_jwt
from token_response.assembler import CacheRecordAssembler
from token_response.authority import Authority, AuthorityType, ProtocolMode
from token_response.errors import ClientInfoEmptyError, InvalidCacheEnvironmentError
from token_response.id_token import IdTokenProcessor
from token_response.models import LibraryStateObject, ServerAuthorizationTokenResponse

HOME_ACCOUNT_ID = "00000000-oid.72f988bf-tenant"


class TestCacheRecordAssembler:
    """Tests for CacheRecordAssembler.assemble."""

    @pytest.fixture
    def assembler(self):
        return CacheRecordAssembler(CLIENT_ID)

    @pytest.fixture
    def id_token(self, crypto, raw_id_token):
        return IdTokenProcessor(crypto).parse(raw_id_token)

    def test_full_response(self, assembler, aad_authority, token_response, id_token) -> None:
        """Test that every present field produces its entity."""
        response = ServerAuthorizationTokenResponse(**token_response, foci="1")

        record = assembler.assemble(response, aad_authority, HOME_ACCOUNT_ID, id_token)

        assert record.account.home_account_id == HOME_ACCOUNT_ID
        assert record.id_token.secret == token_response["id_token"]
        assert record.id_token.realm == TENANT_ID
        assert record.access_token.secret == "access-token-secret"
        assert record.refresh_token.secret == "refresh-token-secret"
        assert record.refresh_token.family_id == "1"
        assert record.app_metadata.family_id == "1"
        assert record.app_metadata.client_id == CLIENT_ID
        assert record.app_metadata.environment == "login.microsoftonline.com"

    def test_home_account_id_shared(self, assembler, aad_authority, token_response, id_token) -> None:
        """Test that all entities carry the same home account id."""
        record = assembler.assemble(
            ServerAuthorizationTokenResponse(**token_response), aad_authority, HOME_ACCOUNT_ID, id_token
        )

        ids = {
            record.account.home_account_id,
            record.id_token.home_account_id,
            record.access_token.home_account_id,
            record.refresh_token.home_account_id,
        }
        assert ids == {HOME_ACCOUNT_ID}

    def test_empty_secrets_produce_no_entities(self, assembler, aad_authority) -> None:
        """Test that empty raw fields never produce entities."""
        response = ServerAuthorizationTokenResponse(access_token="", refresh_token="", id_token="", foci="")

        record = assembler.assemble(response, aad_authority, HOME_ACCOUNT_ID)

        assert record.account is None
        assert record.id_token is None
        assert record.access_token is None
        assert record.refresh_token is None
        assert record.app_metadata is None

    def test_invalid_environment(self, assembler, token_response) -> None:
        """Test that an authority without environment is rejected."""
        with pytest.raises(InvalidCacheEnvironmentError):
            assembler.assemble(
                ServerAuthorizationTokenResponse(**token_response),
                Authority(canonical_authority="not-a-url"),
                HOME_ACCOUNT_ID,
            )

    def test_expiry_from_library_state(self, assembler, aad_authority, token_response) -> None:
        """Test expiry arithmetic anchored on the request timestamp."""
        state = LibraryStateObject(id="abc", ts=1_700_000_000)

        record = assembler.assemble(
            ServerAuthorizationTokenResponse(**token_response), aad_authority, HOME_ACCOUNT_ID,
            library_state=state,
        )

        assert record.access_token.expires_on == 1_700_000_000 + 3600
        assert record.access_token.extended_expires_on == 1_700_000_000 + 4200

    def test_expiry_from_current_time(self, assembler, aad_authority, token_response) -> None:
        """Test expiry arithmetic anchored on now without library state."""
        before = int(time.time())

        record = assembler.assemble(
            ServerAuthorizationTokenResponse(**token_response), aad_authority, HOME_ACCOUNT_ID
        )

        after = int(time.time())
        assert before + 3600 <= record.access_token.expires_on <= after + 3600
        assert record.access_token.extended_expires_on == record.access_token.expires_on + 600

    def test_ext_expires_in_defaults_to_zero(self, assembler, aad_authority) -> None:
        response = ServerAuthorizationTokenResponse(access_token="at", expires_in=100)

        record = assembler.assemble(
            response, aad_authority, HOME_ACCOUNT_ID, library_state=LibraryStateObject(id="x", ts=1000)
        )

        assert record.access_token.expires_on == 1100
        assert record.access_token.extended_expires_on == 1100

    def test_response_scopes_win(self, assembler, aad_authority, token_response) -> None:
        """Test that the response scope field takes precedence over request scopes."""
        record = assembler.assemble(
            ServerAuthorizationTokenResponse(**token_response), aad_authority, HOME_ACCOUNT_ID,
            request_scopes=["Mail.Read"],
        )

        assert record.access_token.target == "openid profile User.Read"

    def test_request_scopes_fallback(self, assembler, aad_authority) -> None:
        """Test that request scopes are used when the response has none."""
        response = ServerAuthorizationTokenResponse(access_token="at", expires_in=100)

        record = assembler.assemble(
            response, aad_authority, HOME_ACCOUNT_ID, request_scopes=["Mail.Read", "User.Read"]
        )

        assert record.access_token.target == "Mail.Read User.Read"

    def test_access_token_realm_falls_back_to_authority_tenant(self, assembler, aad_authority) -> None:
        """Test that without an id token the authority tenant is the realm."""
        response = ServerAuthorizationTokenResponse(access_token="at", expires_in=100)

        record = assembler.assemble(response, aad_authority, HOME_ACCOUNT_ID)

        assert record.access_token.realm == TENANT_ID

    def test_adfs_without_client_info(self, assembler, adfs_authority, crypto) -> None:
        """Test that ADFS accounts do not need client_info."""
        raw = make_jwt({"sub": "adfs-sub", "upn": "user@contoso.com"})
        response = ServerAuthorizationTokenResponse(id_token=raw, access_token="at", expires_in=100)

        record = assembler.assemble(
            response, adfs_authority, "adfs-sub", IdTokenProcessor(crypto).parse(raw)
        )

        assert record.account.authority_type == "ADFS"
        assert record.account.username == "user@contoso.com"
        assert record.id_token.realm == ""

    @pytest.mark.parametrize("authority_type", [AuthorityType.AAD, AuthorityType.B2C])
    def test_directory_authority_without_client_info(self, assembler, id_token, raw_id_token, authority_type) -> None:
        """Test that AAD and B2C authorities require client_info."""
        authority = Authority(
            canonical_authority="https://login.microsoftonline.com/common/",
            authority_type=authority_type,
        )
        response = ServerAuthorizationTokenResponse(id_token=raw_id_token, access_token="at")

        with pytest.raises(ClientInfoEmptyError):
            assembler.assemble(response, authority, HOME_ACCOUNT_ID, id_token)

    def test_oidc_protocol_without_client_info(self, assembler, id_token, raw_id_token) -> None:
        """Test that plain OIDC authorities fall back to a generic account."""
        authority = Authority(
            canonical_authority="https://accounts.example.com/tenant/",
            authority_type=AuthorityType.GENERIC,
            protocol_mode=ProtocolMode.OIDC,
        )
        response = ServerAuthorizationTokenResponse(id_token=raw_id_token)

        record = assembler.assemble(response, authority, "sub-123", id_token)

        assert record.account.authority_type == "Generic"
        assert record.account.local_account_id == "00000000-oid"

    def test_obo_assertion_propagates(self, assembler, aad_authority, token_response, id_token) -> None:
        record = assembler.assemble(
            ServerAuthorizationTokenResponse(**token_response), aad_authority, HOME_ACCOUNT_ID, id_token,
            obo_assertion="assertion",
        )

        assert record.access_token.obo_assertion == "assertion"
        assert record.refresh_token.obo_assertion == "assertion"
        assert record.account.obo_assertion == "assertion"
