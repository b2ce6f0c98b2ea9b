"""Tests for cache entities, keys and home account id derivation."""

from conftest import OBJECT_ID, TENANT_ID, make_client_info, make_jwt
from token_response.authority import Authority, AuthorityType, generate_environment_from_authority
from token_response.entities import (
    AccessTokenEntity,
    AccountEntity,
    AppMetadataEntity,
    RefreshTokenEntity,
    generate_home_account_id,
)
from token_response.id_token import IdToken, IdTokenClaims


def _id_token(**claims) -> IdToken:
    return IdToken(raw_token=make_jwt(claims), claims=IdTokenClaims(claims))


class TestGenerateHomeAccountId:
    """Tests for generate_home_account_id."""

    def test_from_client_info(self, crypto) -> None:
        """Test that uid.utid is used for directory authorities."""
        home_account_id = generate_home_account_id(
            make_client_info(), AuthorityType.AAD, crypto, _id_token(sub="s")
        )

        assert home_account_id == f"{OBJECT_ID}.{TENANT_ID}"

    def test_adfs_uses_subject(self, crypto) -> None:
        """Test that ADFS ignores client_info and uses sub."""
        home_account_id = generate_home_account_id(
            make_client_info(), AuthorityType.ADFS, crypto, _id_token(sub="adfs-sub")
        )

        assert home_account_id == "adfs-sub"

    def test_undecodable_client_info_falls_back(self, crypto) -> None:
        """Test fallback to sub when client_info cannot be decoded."""
        home_account_id = generate_home_account_id("@@@", AuthorityType.AAD, crypto, _id_token(sub="s"))

        assert home_account_id == "s"

    def test_partial_client_info_falls_back(self, crypto) -> None:
        """Test fallback to sub when client_info lacks utid."""
        home_account_id = generate_home_account_id(
            make_client_info(utid=""), AuthorityType.B2C, crypto, _id_token(sub="s")
        )

        assert home_account_id == "s"

    def test_nothing_available(self, crypto) -> None:
        """Test that an empty id is returned without client_info or id token."""
        assert generate_home_account_id(None, AuthorityType.AAD, crypto) == ""


class TestAuthorityEnvironment:
    """Tests for authority parsing and environment derivation."""

    def test_host_and_tenant(self, aad_authority) -> None:
        assert aad_authority.host_name_and_port == "login.microsoftonline.com"
        assert aad_authority.tenant == TENANT_ID
        assert generate_environment_from_authority(aad_authority) == "login.microsoftonline.com"

    def test_preferred_alias(self) -> None:
        """Test that a known alias maps to the preferred cache environment."""
        authority = Authority(
            canonical_authority="https://login.windows.net/common/",
            environment_aliases=["login.microsoftonline.com", "login.windows.net"],
        )

        assert generate_environment_from_authority(authority) == "login.microsoftonline.com"

    def test_empty_environment(self) -> None:
        """Test that an authority without host yields an empty environment."""
        assert generate_environment_from_authority(Authority(canonical_authority="not-a-url")) == ""


class TestAccountEntity:
    """Tests for AccountEntity construction and keys."""

    def test_create_account(self, aad_authority) -> None:
        """Test the directory account built from client_info and claims."""
        id_token = _id_token(oid="oid-1", sub="s", tid=TENANT_ID, preferred_username="u@contoso.com", name="U")

        account = AccountEntity.create_account(make_client_info(), "home.id", aad_authority, id_token)

        assert account.realm == TENANT_ID
        assert account.local_account_id == "oid-1"
        assert account.username == "u@contoso.com"
        assert account.authority_type == "MSSTS"
        assert account.generate_account_key() == f"home.id-login.microsoftonline.com-{TENANT_ID}"

    def test_create_account_username_from_emails(self, aad_authority) -> None:
        """Test that B2C emails claim is used when preferred_username is absent."""
        id_token = _id_token(sub="s", emails=["first@b2c.com", "second@b2c.com"])

        account = AccountEntity.create_account(make_client_info(), "home.id", aad_authority, id_token)

        assert account.username == "first@b2c.com"

    def test_create_generic_account_adfs(self, adfs_authority) -> None:
        """Test the ADFS account built from claims alone."""
        id_token = _id_token(sub="adfs-sub", upn="user@contoso.com")

        account = AccountEntity.create_generic_account(adfs_authority, "adfs-sub", id_token)

        assert account.authority_type == "ADFS"
        assert account.realm == ""
        assert account.local_account_id == "adfs-sub"
        assert account.username == "user@contoso.com"
        assert account.environment == "fs.contoso.com"

    def test_account_info(self, aad_authority) -> None:
        """Test the public account projection."""
        id_token = _id_token(oid="oid-1", tid=TENANT_ID, preferred_username="u@contoso.com", name="U")
        account = AccountEntity.create_account(make_client_info(), "home.id", aad_authority, id_token)

        info = account.get_account_info()

        assert info.home_account_id == "home.id"
        assert info.tenant_id == TENANT_ID
        assert info.username == "u@contoso.com"
        assert info.name == "U"

    def test_dict_round_trip(self, aad_authority) -> None:
        """Test that accounts survive serialization to dict."""
        account = AccountEntity.create_account(make_client_info(), "home.id", aad_authority, _id_token(sub="s"))

        assert AccountEntity.from_dict(account.to_dict()) == account


class TestCredentialKeys:
    """Tests for credential cache keys."""

    def test_access_token_key(self) -> None:
        token = AccessTokenEntity.create(
            "Home.Id", "login.microsoftonline.com", "secret", "Client", "tenant", "User.Read", 10, 20
        )

        assert token.generate_credential_key() == (
            "home.id-login.microsoftonline.com-accesstoken-client-tenant-user.read"
        )
        assert token.token_type == "Bearer"

    def test_pop_access_token_credential_type(self) -> None:
        token = AccessTokenEntity.create("h", "env", "secret", "c", "t", "s", 10, 20, token_type="pop")

        assert token.is_pop
        assert token.credential_type == "AccessToken_With_AuthScheme"

    def test_family_refresh_token_key_uses_family_id(self) -> None:
        token = RefreshTokenEntity.create("h", "env", "secret", "client", family_id="1")

        assert token.generate_credential_key() == "h-env-refreshtoken-1--"

    def test_app_metadata_key(self) -> None:
        metadata = AppMetadataEntity(client_id="Client", environment="env", family_id="1")

        assert metadata.generate_app_metadata_key() == "appmetadata-env-client"
