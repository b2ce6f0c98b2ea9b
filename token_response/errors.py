"""Error taxonomy for token response processing

Every failure raised by the pipeline is an ``AuthError`` subclass carrying
structured fields (``error_code``, ``error_message``, ``suberror``) so callers
can branch on the kind without parsing text.
"""

import functools
from typing import Optional, Tuple

from .constants import INTERACTION_REQUIRED_ERROR_CODES, INTERACTION_REQUIRED_SUBERRORS


class AuthError(Exception):
    """Base exception for all token response processing errors"""

    def __init__(self, error_code: str, error_message: Optional[str] = None, suberror: Optional[str] = None):
        self.error_code = error_code or ""
        self.error_message = error_message or ""
        self.suberror = suberror or ""
        message = f"{self.error_code}: {self.error_message}" if self.error_message else self.error_code
        super().__init__(message)


class ClientAuthError(AuthError):
    """Raised when the client rejects a response it cannot trust or use"""


class StateMissingError(ClientAuthError):
    """Raised when the server or the cached state is absent"""

    def __init__(self, state_kind: str):
        self.state_kind = state_kind
        super().__init__("state_not_found", f"State not found: {state_kind}")


class StateMismatchError(ClientAuthError):
    """Raised when the echoed state does not match the cached state"""

    def __init__(self):
        super().__init__("state_mismatch", "State mismatch error. Please check your network. Continued requests may cause cache overflow.")


class InvalidStateError(ClientAuthError):
    """Raised when the echoed state cannot be decoded into request state"""

    def __init__(self, detail: str = ""):
        super().__init__("invalid_state", f"State was not the expected format. {detail}".strip())


class NonceMismatchError(ClientAuthError):
    """Raised when the id token nonce does not match the cached nonce"""

    def __init__(self):
        super().__init__("nonce_mismatch", "Nonce mismatch error. This may be caused by a race condition in concurrent requests.")


class TokenParsingError(ClientAuthError):
    """Raised when an id token is not a decodable JWT"""

    def __init__(self, detail: str = ""):
        super().__init__("token_parsing_error", f"Token cannot be parsed. {detail}".strip())


class InvalidCacheEnvironmentError(ClientAuthError):
    """Raised when no cache environment can be derived from the authority"""

    def __init__(self):
        super().__init__("invalid_cache_environment", "The cached token key is not a valid environment.")


class ClientInfoEmptyError(ClientAuthError):
    """Raised when a directory authority response carries no client_info"""

    def __init__(self):
        super().__init__("client_info_empty_error", "The client info was empty. Please review the trace to determine the root cause.")


class ClientInfoDecodingError(ClientAuthError):
    """Raised when client_info is present but cannot be decoded"""

    def __init__(self, detail: str = ""):
        super().__init__("client_info_decoding_error", f"The client info could not be parsed/decoded correctly. {detail}".strip())


class ClientConfigurationError(AuthError):
    """Raised when the caller configured or invoked the pipeline incorrectly"""


class ResourceRequestParametersRequiredError(ClientConfigurationError):
    """Raised when a proof-of-possession token is built without a method and URI"""

    def __init__(self):
        super().__init__(
            "resource_request_parameters_required",
            "resourceRequestMethod and resourceRequestUri are required for proof-of-possession tokens",
        )


class PopSigningKeyMissingError(ClientConfigurationError):
    """Raised when a proof-of-possession signature is requested without a key"""

    def __init__(self):
        super().__init__("pop_signing_key_missing", "No signing key was configured for proof-of-possession tokens")


class InteractionRequiredAuthError(AuthError):
    """Raised when the server requires the user to re-authenticate interactively"""


class ServerError(AuthError):
    """Raised when the authorization or token endpoint reports a failure"""


class StoreWriteFailedError(AuthError):
    """Raised when the credential store fails to save a cache record"""

    def __init__(self, cause: BaseException):
        self.cause = cause
        super().__init__("store_write_failed", f"Failed to write cache record: {cause}")


@functools.lru_cache(maxsize=1)
def get_interaction_required_codes() -> Tuple[Tuple[str, ...], Tuple[str, ...]]:
    """Return the (error codes, suberrors) allow-lists

    Built-in codes are extended with any configured in
    ``settings.INTERACTION_REQUIRED_CODES_FILE``.
    """
    import settings
    from config.loader import load_error_code_overrides

    overrides = load_error_code_overrides(settings.INTERACTION_REQUIRED_CODES_FILE)
    codes = INTERACTION_REQUIRED_ERROR_CODES + tuple(
        c for c in overrides["error_codes"] if c not in INTERACTION_REQUIRED_ERROR_CODES
    )
    suberrors = INTERACTION_REQUIRED_SUBERRORS + tuple(
        s for s in overrides["suberrors"] if s not in INTERACTION_REQUIRED_SUBERRORS
    )
    return codes, suberrors


def is_interaction_required_error(
    error_code: Optional[str],
    error_description: Optional[str] = None,
    suberror: Optional[str] = None,
) -> bool:
    """Check whether a server error means the user must sign in again

    Args:
        error_code: ``error`` field of the server response
        error_description: ``error_description`` field of the server response
        suberror: ``suberror`` field of the server response

    Returns:
        True if the code or suberror is a known interaction-required value,
        or a known code appears inside the description
    """
    codes, suberrors = get_interaction_required_codes()

    if error_code and error_code in codes:
        return True
    if suberror and suberror in suberrors:
        return True
    if error_description and any(code in error_description for code in codes):
        return True
    return False
