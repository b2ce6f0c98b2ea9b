"""Cache entities derived from a token response

Each entity has a fixed shape and its own key format. ``CacheRecord`` groups
the five of them; any subset may be present.
"""

import logging
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Optional

from .authority import Authority, AuthorityType, generate_environment_from_authority
from .constants import (
    ACCESS_TOKEN_CREDENTIAL,
    ACCESS_TOKEN_WITH_AUTH_SCHEME_CREDENTIAL,
    ADFS_ACCOUNT_TYPE,
    APP_METADATA_PREFIX,
    BEARER_SCHEME,
    CACHE_KEY_SEPARATOR,
    GENERIC_ACCOUNT_TYPE,
    ID_TOKEN_CREDENTIAL,
    MSSTS_ACCOUNT_TYPE,
    POP_SCHEME,
    REFRESH_TOKEN_CREDENTIAL,
)
from .crypto import CryptoProvider, build_client_info
from .errors import ClientInfoDecodingError, ClientInfoEmptyError
from .id_token import IdToken
from .utils import now_seconds

logger = logging.getLogger(__name__)


def _from_dict(cls, data: Dict[str, Any]):
    names = {f.name for f in fields(cls)}
    return cls(**{k: v for k, v in data.items() if k in names})


@dataclass
class AccountInfo:
    """Public view of a signed-in account"""
    home_account_id: str
    environment: str
    tenant_id: str
    username: str
    local_account_id: str
    name: str = ""


@dataclass
class AccountEntity:
    """Signed-in account as stored in the cache"""
    home_account_id: str
    environment: str
    realm: str
    local_account_id: str = ""
    username: str = ""
    authority_type: str = MSSTS_ACCOUNT_TYPE
    name: str = ""
    client_info: str = ""
    obo_assertion: str = ""

    def generate_account_key(self) -> str:
        """Cache key: home account id, environment and realm"""
        return generate_account_cache_key(self.home_account_id, self.environment, self.realm)

    def get_account_info(self) -> AccountInfo:
        return AccountInfo(
            home_account_id=self.home_account_id,
            environment=self.environment,
            tenant_id=self.realm,
            username=self.username,
            local_account_id=self.local_account_id,
            name=self.name,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AccountEntity":
        return _from_dict(cls, data)

    @classmethod
    def create_account(cls, client_info: str, home_account_id: str, authority: Authority,
                       id_token: IdToken, obo_assertion: Optional[str] = None) -> "AccountEntity":
        """Build a directory (MSSTS) account from client_info and id token claims"""
        claims = id_token.claims
        return cls(
            home_account_id=home_account_id,
            environment=generate_environment_from_authority(authority),
            realm=claims.tid or "",
            local_account_id=claims.oid or "",
            username=claims.preferred_username or (claims.emails[0] if claims.emails else ""),
            authority_type=MSSTS_ACCOUNT_TYPE,
            name=claims.name or "",
            client_info=client_info,
            obo_assertion=obo_assertion or "",
        )

    @classmethod
    def create_generic_account(cls, authority: Authority, home_account_id: str,
                               id_token: IdToken, obo_assertion: Optional[str] = None) -> "AccountEntity":
        """Build an account from id token claims alone (ADFS and non-directory authorities)"""
        claims = id_token.claims
        account_type = ADFS_ACCOUNT_TYPE if authority.authority_type == AuthorityType.ADFS else GENERIC_ACCOUNT_TYPE
        return cls(
            home_account_id=home_account_id,
            environment=generate_environment_from_authority(authority),
            realm="",
            local_account_id=claims.oid or claims.sub or "",
            # upn only comes from ADFS; other generic authorities leave it empty
            username=claims.upn or "",
            authority_type=account_type,
            name=claims.name or "",
            obo_assertion=obo_assertion or "",
        )


def generate_account_cache_key(home_account_id: str, environment: str, realm: str) -> str:
    return CACHE_KEY_SEPARATOR.join([home_account_id, environment, realm]).lower()


def generate_home_account_id(client_info: Optional[str], authority_type: AuthorityType,
                             crypto: CryptoProvider, id_token: Optional[IdToken] = None) -> str:
    """Derive the home account id shared by every entity of one response

    Args:
        client_info: client_info from the token response
        authority_type: Type of the authority that issued the tokens
        crypto: Crypto provider used to decode client_info
        id_token: Parsed identity token, if the response had one

    Returns:
        ``uid.utid`` from client_info for directory authorities, otherwise the
        id token subject, otherwise an empty string
    """
    account_id = (id_token.claims.sub if id_token else None) or ""

    if authority_type == AuthorityType.ADFS:
        return account_id

    if client_info:
        try:
            info = build_client_info(client_info, crypto)
            if info.uid and info.utid:
                return f"{info.uid}.{info.utid}"
        except (ClientInfoEmptyError, ClientInfoDecodingError) as e:
            logger.debug(f"Could not derive home account id from client_info: {e}")

    logger.debug("No usable client_info in response, using id token subject as home account id")
    return account_id


@dataclass
class CredentialEntity:
    """Fields shared by id, access and refresh token records"""
    home_account_id: str
    environment: str
    credential_type: str
    client_id: str
    secret: str
    realm: str = ""
    target: str = ""
    family_id: str = ""
    obo_assertion: str = ""

    def generate_credential_key(self) -> str:
        """Cache key: account, environment, type, client (family for FOCI refresh tokens), realm, target"""
        client_or_family_id = self.client_id
        if self.credential_type == REFRESH_TOKEN_CREDENTIAL and self.family_id:
            client_or_family_id = self.family_id
        return CACHE_KEY_SEPARATOR.join([
            self.home_account_id,
            self.environment,
            self.credential_type,
            client_or_family_id,
            self.realm,
            self.target,
        ]).lower()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]):
        return _from_dict(cls, data)


@dataclass
class IdTokenEntity(CredentialEntity):
    """Raw identity token and the tenant it was issued for"""

    @classmethod
    def create(cls, home_account_id: str, environment: str, id_token: str, client_id: str,
               tenant_id: str, obo_assertion: Optional[str] = None) -> "IdTokenEntity":
        return cls(
            home_account_id=home_account_id,
            environment=environment,
            credential_type=ID_TOKEN_CREDENTIAL,
            client_id=client_id,
            secret=id_token,
            realm=tenant_id,
            obo_assertion=obo_assertion or "",
        )


@dataclass
class AccessTokenEntity(CredentialEntity):
    """Access token with its scopes (target) and expiry in epoch seconds"""
    cached_at: int = 0
    expires_on: int = 0
    extended_expires_on: int = 0
    token_type: str = BEARER_SCHEME

    @property
    def is_pop(self) -> bool:
        return self.token_type.lower() == POP_SCHEME

    @classmethod
    def create(cls, home_account_id: str, environment: str, access_token: str, client_id: str,
               tenant_id: str, scopes: str, expires_on: int, ext_expires_on: int,
               token_type: Optional[str] = None, obo_assertion: Optional[str] = None) -> "AccessTokenEntity":
        token_type = token_type or BEARER_SCHEME
        credential_type = ACCESS_TOKEN_CREDENTIAL
        if token_type.lower() == POP_SCHEME:
            credential_type = ACCESS_TOKEN_WITH_AUTH_SCHEME_CREDENTIAL
        return cls(
            home_account_id=home_account_id,
            environment=environment,
            credential_type=credential_type,
            client_id=client_id,
            secret=access_token,
            realm=tenant_id,
            target=scopes,
            obo_assertion=obo_assertion or "",
            cached_at=now_seconds(),
            expires_on=expires_on,
            extended_expires_on=ext_expires_on,
            token_type=token_type,
        )


@dataclass
class RefreshTokenEntity(CredentialEntity):
    """Refresh token, shared by the app family when family_id is set"""

    @classmethod
    def create(cls, home_account_id: str, environment: str, refresh_token: str, client_id: str,
               family_id: Optional[str] = None, obo_assertion: Optional[str] = None) -> "RefreshTokenEntity":
        return cls(
            home_account_id=home_account_id,
            environment=environment,
            credential_type=REFRESH_TOKEN_CREDENTIAL,
            client_id=client_id,
            secret=refresh_token,
            family_id=family_id or "",
            obo_assertion=obo_assertion or "",
        )


@dataclass
class AppMetadataEntity:
    """Per-application metadata, currently only the FOCI family id"""
    client_id: str
    environment: str
    family_id: str = ""

    def generate_app_metadata_key(self) -> str:
        return CACHE_KEY_SEPARATOR.join([APP_METADATA_PREFIX, self.environment, self.client_id]).lower()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AppMetadataEntity":
        return _from_dict(cls, data)


@dataclass
class CacheRecord:
    """Entities derived from one token response, committed as a unit"""
    account: Optional[AccountEntity] = None
    id_token: Optional[IdTokenEntity] = None
    access_token: Optional[AccessTokenEntity] = None
    refresh_token: Optional[RefreshTokenEntity] = None
    app_metadata: Optional[AppMetadataEntity] = None
