"""Encoding and decoding of the state value echoed by the server

State is ``base64url(json(library_state)) + "|" + user_state``. The library
portion carries the request timestamp used for token expiry arithmetic; the
caller portion is handed back verbatim on the authentication result.
"""

import json
import uuid
from typing import Dict, Optional

from .constants import RESOURCE_DELIM
from .crypto import CryptoProvider
from .errors import InvalidStateError
from .models import LibraryStateObject, RequestStateObject
from .utils import now_seconds


def generate_library_state(crypto: CryptoProvider, meta: Optional[Dict[str, str]] = None) -> str:
    """Encode a fresh library state stamped with the current time"""
    state = {"id": str(uuid.uuid4()), "ts": now_seconds()}
    if meta:
        state["meta"] = meta
    return crypto.base64_encode(json.dumps(state))


def set_request_state(crypto: CryptoProvider, user_state: Optional[str] = None,
                      meta: Optional[Dict[str, str]] = None) -> str:
    """Build the state value to send with an authorization request"""
    library_state = generate_library_state(crypto, meta)
    if user_state:
        return f"{library_state}{RESOURCE_DELIM}{user_state}"
    return library_state


def parse_request_state(crypto: CryptoProvider, state: Optional[str]) -> RequestStateObject:
    """Split echoed state into its library and caller portions

    Args:
        crypto: Crypto provider used for base64 decoding
        state: State value echoed by the server

    Returns:
        RequestStateObject with the decoded library state

    Raises:
        InvalidStateError: If state is empty or the library portion cannot be decoded
    """
    if not state:
        raise InvalidStateError("Null, undefined or empty state")

    library_part, _, user_part = state.partition(RESOURCE_DELIM)

    try:
        decoded = json.loads(crypto.base64_decode(library_part))
    except ValueError as e:
        raise InvalidStateError(str(e)) from e

    if not isinstance(decoded, dict) or "ts" not in decoded:
        raise InvalidStateError("Library state is missing its timestamp")

    try:
        library_state = LibraryStateObject(
            id=str(decoded.get("id", "")),
            ts=int(decoded["ts"]),
            meta=decoded.get("meta"),
        )
    except (TypeError, ValueError) as e:
        raise InvalidStateError(str(e)) from e

    return RequestStateObject(user_request_state=user_part, library_state=library_state)
