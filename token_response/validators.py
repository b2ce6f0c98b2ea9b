"""Anti-forgery and error validation of authorization server responses"""

import logging
from typing import Optional
from urllib.parse import unquote

from .crypto import CryptoProvider, build_client_info
from .errors import (
    InteractionRequiredAuthError,
    ServerError,
    StateMismatchError,
    StateMissingError,
    is_interaction_required_error,
)
from .models import ServerAuthorizationCodeResponse, ServerAuthorizationTokenResponse

logger = logging.getLogger(__name__)


def validate_server_authorization_code_response(
    response: ServerAuthorizationCodeResponse,
    cached_state: Optional[str],
    crypto: CryptoProvider,
) -> None:
    """Validate the redirect payload of an interactive sign-in

    Args:
        response: Parsed authorization endpoint response
        cached_state: State stored locally when the request was sent
        crypto: Crypto provider used to decode client_info

    Raises:
        StateMissingError: If the server or cached state is absent
        StateMismatchError: If the states differ after URL-decoding
        InteractionRequiredAuthError: If the server requires interactive sign-in
        ServerError: If the server reported any other error
        ClientInfoDecodingError: If client_info is present but undecodable
    """
    if not response.state:
        raise StateMissingError("Server State")
    if not cached_state:
        raise StateMissingError("Cached State")

    if unquote(response.state) != unquote(cached_state):
        raise StateMismatchError()

    if response.error or response.error_description or response.suberror:
        logger.warning(f"Authorization endpoint returned error: {response.error} ({response.suberror or 'no suberror'})")
        if is_interaction_required_error(response.error, response.error_description, response.suberror):
            raise InteractionRequiredAuthError(response.error or "", response.error_description, response.suberror)
        raise ServerError(response.error or "", response.error_description, response.suberror)

    if response.client_info:
        build_client_info(response.client_info, crypto)

    logger.debug("Authorization code response validated")


def validate_token_response(response: ServerAuthorizationTokenResponse) -> None:
    """Check a token endpoint response for server-reported errors

    Only error fields are inspected; the success payload is checked when the
    cache record is assembled.

    Args:
        response: Parsed token endpoint response

    Raises:
        InteractionRequiredAuthError: If the server requires interactive sign-in
        ServerError: If the server reported any other error
    """
    if not (response.error or response.error_description or response.suberror):
        logger.debug("Token response contains no error")
        return

    logger.warning(
        f"Token endpoint returned error: {response.error} "
        f"(correlation id {response.correlation_id}, trace id {response.trace_id})"
    )
    if is_interaction_required_error(response.error, response.error_description, response.suberror):
        raise InteractionRequiredAuthError(response.error or "", response.error_description, response.suberror)

    error_string = (
        f"{response.error_codes} - [{response.timestamp}]: {response.error_description} "
        f"- Correlation ID: {response.correlation_id} - Trace ID: {response.trace_id}"
    )
    raise ServerError(response.error or "", error_string)
