"""Shared pytest fixtures.

Builders for unsigned JWTs, client_info and request state so tests can
produce realistic token responses without a live authorization server.
"""

import base64
import json
from typing import Any, Dict

import pytest

from token_cache import InMemoryTokenCache
from token_response import Authority, AuthorityType, DefaultCrypto
from token_response.errors import get_interaction_required_codes

CLIENT_ID = "0b1ad3e2-client"
TENANT_ID = "72f988bf-tenant"
OBJECT_ID = "00000000-oid"
SUBJECT = "sub-123"


def b64url(data: Dict[str, Any]) -> str:
    """Encode a dict as unpadded base64url JSON."""
    return base64.urlsafe_b64encode(json.dumps(data).encode()).decode().rstrip("=")


def make_jwt(claims: Dict[str, Any]) -> str:
    """Build an unsigned three-segment JWT carrying the given claims."""
    return f"{b64url({'alg': 'none', 'typ': 'JWT'})}.{b64url(claims)}.signature"


def make_client_info(uid: str = OBJECT_ID, utid: str = TENANT_ID) -> str:
    return b64url({"uid": uid, "utid": utid})


@pytest.fixture(autouse=True)
def _reset_error_code_cache() -> None:
    """Ensure configured error code lists do not leak between tests."""
    get_interaction_required_codes.cache_clear()
    yield
    get_interaction_required_codes.cache_clear()


@pytest.fixture
def crypto() -> DefaultCrypto:
    return DefaultCrypto()


@pytest.fixture
def aad_authority() -> Authority:
    return Authority(canonical_authority=f"https://login.microsoftonline.com/{TENANT_ID}/")


@pytest.fixture
def adfs_authority() -> Authority:
    return Authority(
        canonical_authority="https://fs.contoso.com/adfs/",
        authority_type=AuthorityType.ADFS,
    )


@pytest.fixture
def id_token_claims() -> Dict[str, Any]:
    return {
        "oid": OBJECT_ID,
        "sub": SUBJECT,
        "tid": TENANT_ID,
        "nonce": "nonce-abc",
        "name": "Test User",
        "preferred_username": "test@contoso.com",
    }


@pytest.fixture
def raw_id_token(id_token_claims) -> str:
    return make_jwt(id_token_claims)


@pytest.fixture
def token_response(raw_id_token) -> Dict[str, Any]:
    """Successful token endpoint response for an AAD authority."""
    return {
        "token_type": "Bearer",
        "scope": "openid profile User.Read",
        "expires_in": 3600,
        "ext_expires_in": 600,
        "access_token": "access-token-secret",
        "refresh_token": "refresh-token-secret",
        "id_token": raw_id_token,
        "client_info": make_client_info(),
    }


@pytest.fixture
def token_cache() -> InMemoryTokenCache:
    return InMemoryTokenCache()
