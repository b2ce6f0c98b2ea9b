"""Identity token parsing and nonce validation"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .crypto import CryptoProvider
from .errors import NonceMismatchError, TokenParsingError

logger = logging.getLogger(__name__)


class IdTokenClaims(dict):
    """Claims of an identity token with accessors for the ones the pipeline reads"""

    @property
    def oid(self) -> Optional[str]:
        return self.get("oid")

    @property
    def sub(self) -> Optional[str]:
        return self.get("sub")

    @property
    def tid(self) -> Optional[str]:
        return self.get("tid")

    @property
    def nonce(self) -> Optional[str]:
        return self.get("nonce")

    @property
    def name(self) -> Optional[str]:
        return self.get("name")

    @property
    def preferred_username(self) -> Optional[str]:
        return self.get("preferred_username")

    @property
    def upn(self) -> Optional[str]:
        return self.get("upn")

    @property
    def emails(self) -> List[str]:
        emails = self.get("emails")
        return emails if isinstance(emails, list) else []


@dataclass
class IdToken:
    """Raw identity token together with its decoded claims"""
    raw_token: str
    claims: IdTokenClaims = field(default_factory=IdTokenClaims)


class IdTokenProcessor:
    """Decodes identity tokens and applies the nonce check"""

    def __init__(self, crypto: CryptoProvider):
        self.crypto = crypto

    def extract_token_claims(self, raw_token: str) -> Dict[str, Any]:
        """Decode the payload segment of a JWT (no signature verification)

        Raises:
            TokenParsingError: If the token is empty or not a decodable JWT
        """
        if not raw_token:
            raise TokenParsingError("Token is empty.")

        segments = raw_token.split(".")
        if len(segments) != 3:
            raise TokenParsingError(f"Expected 3 segments, got {len(segments)}.")

        try:
            claims = json.loads(self.crypto.base64_decode(segments[1]))
        except ValueError as e:
            raise TokenParsingError(str(e)) from e
        if not isinstance(claims, dict):
            raise TokenParsingError("Token payload is not a JSON object.")
        return claims

    def parse(self, raw_id_token: str, cached_nonce: Optional[str] = None) -> IdToken:
        """Parse an identity token and check it against the cached nonce

        Args:
            raw_id_token: id_token value from the token response
            cached_nonce: Nonce sent with the original request, if any

        Returns:
            IdToken with raw token and claims

        Raises:
            TokenParsingError: If the token cannot be decoded
            NonceMismatchError: If both nonces are present and differ
        """
        claims = IdTokenClaims(self.extract_token_claims(raw_id_token))

        if cached_nonce and claims.nonce and claims.nonce != cached_nonce:
            raise NonceMismatchError()
        if cached_nonce and not claims.nonce:
            logger.debug("Nonce was sent but the id token carries none")

        return IdToken(raw_token=raw_id_token, claims=claims)
