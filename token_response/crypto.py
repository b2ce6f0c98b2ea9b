"""Crypto collaborator: encoding, client_info decoding and PoP signing

The pipeline only talks to crypto through ``CryptoProvider``. ``DefaultCrypto``
is a working implementation; callers with hardware-backed keys plug in their
own provider.
"""

import json
import logging
import secrets
from typing import Any, Dict, Optional, Protocol, Union
from urllib.parse import urlparse

from authlib.jose import JsonWebKey, jwt

from .errors import ClientInfoDecodingError, ClientInfoEmptyError, PopSigningKeyMissingError
from .models import ClientInfo
from .utils import base64url_decode, base64url_encode, is_empty, now_seconds

logger = logging.getLogger(__name__)


class CryptoProvider(Protocol):
    """Crypto operations the pipeline delegates to"""

    def base64_decode(self, value: str) -> str:
        ...

    def base64_encode(self, value: str) -> str:
        ...

    async def sign_jwt(self, payload: Dict[str, Any], kid: str) -> str:
        ...


class DefaultCrypto:
    """Crypto provider backed by the standard library and authlib

    Args:
        signing_key: Private JWK (dict or JSON string) used for
            proof-of-possession signatures. Signing is unavailable without it.
        algorithm: JWS algorithm for the signature
    """

    def __init__(self, signing_key: Optional[Union[Dict[str, Any], str]] = None, algorithm: str = "RS256"):
        self.algorithm = algorithm
        self._signing_key = JsonWebKey.import_key(signing_key) if signing_key else None

    def base64_decode(self, value: str) -> str:
        return base64url_decode(value)

    def base64_encode(self, value: str) -> str:
        return base64url_encode(value)

    async def sign_jwt(self, payload: Dict[str, Any], kid: str) -> str:
        """Sign a payload as a compact JWS

        Raises:
            PopSigningKeyMissingError: If no signing key was configured
        """
        if self._signing_key is None:
            raise PopSigningKeyMissingError()

        header = {"alg": self.algorithm, "typ": "pop"}
        if kid:
            header["kid"] = kid
        signed = jwt.encode(header, payload, self._signing_key)
        return signed.decode("utf-8") if isinstance(signed, bytes) else signed


def build_client_info(raw_client_info: Optional[str], crypto: CryptoProvider) -> ClientInfo:
    """Decode the base64url client_info returned by the server

    Args:
        raw_client_info: client_info value from the response
        crypto: Crypto provider used for base64 decoding

    Returns:
        ClientInfo with uid and utid

    Raises:
        ClientInfoEmptyError: If client_info is empty
        ClientInfoDecodingError: If client_info is not base64-encoded JSON
    """
    if is_empty(raw_client_info):
        raise ClientInfoEmptyError()

    try:
        decoded = json.loads(crypto.base64_decode(raw_client_info))
        if not isinstance(decoded, dict):
            raise ValueError("client_info is not a JSON object")
    except ValueError as e:
        raise ClientInfoDecodingError(str(e)) from e

    return ClientInfo(uid=str(decoded.get("uid") or ""), utid=str(decoded.get("utid") or ""))


class PopTokenGenerator:
    """Builds signed HTTP request (proof-of-possession) tokens"""

    def __init__(self, crypto: CryptoProvider):
        self.crypto = crypto

    async def sign_pop_token(self, access_token: str, resource_request_method: str,
                             resource_request_uri: str, kid: str = "") -> str:
        """Bind an access token to an HTTP method and resource

        Args:
            access_token: Access token secret from the cache
            resource_request_method: HTTP method of the protected request
            resource_request_uri: URI of the protected resource
            kid: Key id of the signing key

        Returns:
            Signed JWT carrying the access token, method and resource host
        """
        payload = {
            "at": access_token,
            "ts": now_seconds(),
            "m": resource_request_method.upper(),
            "u": urlparse(resource_request_uri).netloc or resource_request_uri,
            "nonce": secrets.token_urlsafe(16),
        }
        logger.debug(f"Signing proof-of-possession token for {payload['m']} {payload['u']}")
        return await self.crypto.sign_jwt(payload, kid)
