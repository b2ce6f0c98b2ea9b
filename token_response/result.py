"""Projection of a cache record into the caller-facing authentication result"""

import datetime
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .constants import THE_FAMILY_ID
from .crypto import CryptoProvider, PopTokenGenerator
from .entities import AccountInfo, CacheRecord
from .errors import ResourceRequestParametersRequiredError
from .id_token import IdToken
from .models import RequestStateObject
from .utils import scopes_from_string


@dataclass(frozen=True)
class AuthenticationResult:
    """Result of a successful token acquisition

    Attributes:
        unique_id: oid claim, else sub claim, else empty
        tenant_id: tid claim, else empty
        scopes: Scopes the access token was granted for, in order
        account: Public view of the signed-in account, if any
        id_token: Raw identity token
        id_token_claims: Decoded identity token claims
        access_token: Access token, signed when the token type is proof-of-possession
        from_cache: True if served from the cache rather than a server response
        expires_on: Access token expiry (UTC)
        ext_expires_on: Extended access token expiry (UTC)
        family_id: "1" for family-of-client-IDs apps, else empty
        token_type: Access token scheme, e.g. Bearer or pop
        state: Caller portion of the request state
    """
    unique_id: str
    tenant_id: str
    scopes: List[str]
    account: Optional[AccountInfo]
    id_token: str
    id_token_claims: Dict[str, Any]
    access_token: str
    from_cache: bool
    expires_on: Optional[datetime.datetime] = None
    ext_expires_on: Optional[datetime.datetime] = None
    family_id: str = ""
    token_type: str = ""
    state: str = ""


def _from_epoch_seconds(value: int) -> datetime.datetime:
    """Convert epoch seconds to a UTC datetime, clamped to the representable range"""
    try:
        return datetime.datetime.fromtimestamp(int(value), datetime.timezone.utc)
    except (OverflowError, OSError, ValueError):
        if value < 0:
            return datetime.datetime.min.replace(tzinfo=datetime.timezone.utc)
        return datetime.datetime.max.replace(tzinfo=datetime.timezone.utc)


async def generate_authentication_result(
    crypto: CryptoProvider,
    record: CacheRecord,
    from_cache: bool,
    id_token: Optional[IdToken] = None,
    request_state: Optional[RequestStateObject] = None,
    resource_request_method: Optional[str] = None,
    resource_request_uri: Optional[str] = None,
) -> AuthenticationResult:
    """Build an AuthenticationResult from a cache record

    Args:
        crypto: Crypto provider used to sign proof-of-possession tokens
        record: Cache record to project
        from_cache: Whether the record was read from the cache
        id_token: Parsed identity token
        request_state: Decoded request state
        resource_request_method: HTTP method for proof-of-possession binding
        resource_request_uri: Resource URI for proof-of-possession binding

    Returns:
        AuthenticationResult

    Raises:
        ResourceRequestParametersRequiredError: If a proof-of-possession token
            is built without both method and URI
    """
    access_token = ""
    scopes: List[str] = []
    expires_on = None
    ext_expires_on = None
    family_id = ""

    if record.access_token:
        if record.access_token.is_pop:
            if not resource_request_method or not resource_request_uri:
                raise ResourceRequestParametersRequiredError()
            access_token = await PopTokenGenerator(crypto).sign_pop_token(
                record.access_token.secret, resource_request_method, resource_request_uri
            )
        else:
            access_token = record.access_token.secret

        scopes = scopes_from_string(record.access_token.target)
        expires_on = _from_epoch_seconds(record.access_token.expires_on)
        ext_expires_on = _from_epoch_seconds(record.access_token.extended_expires_on)

    if record.app_metadata:
        family_id = THE_FAMILY_ID if record.app_metadata.family_id == THE_FAMILY_ID else ""

    claims = id_token.claims if id_token else {}

    return AuthenticationResult(
        unique_id=claims.get("oid") or claims.get("sub") or "",
        tenant_id=claims.get("tid") or "",
        scopes=scopes,
        account=record.account.get_account_info() if record.account else None,
        id_token=id_token.raw_token if id_token else "",
        id_token_claims=dict(claims),
        access_token=access_token,
        from_cache=from_cache,
        expires_on=expires_on,
        ext_expires_on=ext_expires_on,
        family_id=family_id,
        token_type=record.access_token.token_type if record.access_token else "",
        state=request_state.user_request_state if request_state else "",
    )
