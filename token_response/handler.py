"""Token response handling: validate, derive, commit and project"""

import logging
from typing import Any, Dict, List, Optional, Union

from .assembler import CacheRecordAssembler
from .authority import Authority
from .commit import CachePlugin, CacheStore, CommitOrchestrator, SerializableTokenCache
from .crypto import CryptoProvider
from .entities import generate_home_account_id
from .id_token import IdToken, IdTokenProcessor
from .models import RequestStateObject, ServerAuthorizationCodeResponse, ServerAuthorizationTokenResponse
from .request_state import parse_request_state
from .result import AuthenticationResult, generate_authentication_result
from .validators import validate_server_authorization_code_response, validate_token_response

logger = logging.getLogger(__name__)


class ResponseHandler:
    """Turns authorization server responses into cached credentials and results

    Only configuration-time values live on the handler. Everything derived
    from a response (claims, home account id, request state) is local to the
    call that derived it.

    Example:
        handler = ResponseHandler(client_id, cache, DefaultCrypto())
        handler.validate_token_response(response)
        result = await handler.handle_server_token_response(response, authority)
    """

    def __init__(
        self,
        client_id: str,
        cache_storage: CacheStore,
        crypto: CryptoProvider,
        serializable_cache: Optional[SerializableTokenCache] = None,
        persistence_plugin: Optional[CachePlugin] = None,
    ):
        self.client_id = client_id
        self.cache_storage = cache_storage
        self.crypto = crypto
        self.id_token_processor = IdTokenProcessor(crypto)
        self.assembler = CacheRecordAssembler(client_id)
        self.orchestrator = CommitOrchestrator(cache_storage, persistence_plugin, serializable_cache)

    def validate_server_authorization_code_response(
        self,
        response: Union[ServerAuthorizationCodeResponse, Dict[str, Any]],
        cached_state: Optional[str],
    ) -> None:
        """Validate an authorization code callback against the cached state"""
        if isinstance(response, dict):
            response = ServerAuthorizationCodeResponse.model_validate(response)
        validate_server_authorization_code_response(response, cached_state, self.crypto)

    def validate_token_response(self, response: Union[ServerAuthorizationTokenResponse, Dict[str, Any]]) -> None:
        """Raise if the token endpoint reported an error"""
        if isinstance(response, dict):
            response = ServerAuthorizationTokenResponse.model_validate(response)
        validate_token_response(response)

    async def handle_server_token_response(
        self,
        response: Union[ServerAuthorizationTokenResponse, Dict[str, Any]],
        authority: Authority,
        resource_request_method: Optional[str] = None,
        resource_request_uri: Optional[str] = None,
        cached_nonce: Optional[str] = None,
        cached_state: Optional[str] = None,
        request_scopes: Optional[List[str]] = None,
        obo_assertion: Optional[str] = None,
        handling_refresh_token_response: bool = False,
    ) -> Optional[AuthenticationResult]:
        """Process a validated token response into the cache and a result

        Args:
            response: Token endpoint response (model or decoded JSON)
            authority: Authority the request was sent to
            resource_request_method: HTTP method for proof-of-possession tokens
            resource_request_uri: Resource URI for proof-of-possession tokens
            cached_nonce: Nonce sent with the request
            cached_state: State sent with the request
            request_scopes: Scopes of the original request
            obo_assertion: On-behalf-of assertion the tokens were obtained with
            handling_refresh_token_response: True for silent refresh exchanges

        Returns:
            AuthenticationResult, or None when a refresh was dropped because
            its account was removed while the refresh was in flight
        """
        if isinstance(response, dict):
            response = ServerAuthorizationTokenResponse.model_validate(response)

        logger.debug(f"Handling token response from {authority.canonical_authority}")
        id_token: Optional[IdToken] = None
        if response.id_token:
            id_token = self.id_token_processor.parse(response.id_token, cached_nonce)

        home_account_id = generate_home_account_id(
            response.client_info, authority.authority_type, self.crypto, id_token
        )

        request_state: Optional[RequestStateObject] = None
        if cached_state:
            request_state = parse_request_state(self.crypto, cached_state)

        record = self.assembler.assemble(
            response,
            authority,
            home_account_id,
            id_token,
            request_state.library_state if request_state else None,
            request_scopes,
            obo_assertion,
        )

        saved = await self.orchestrator.commit(record, handling_refresh_token_response)
        if saved is None:
            return None

        return await generate_authentication_result(
            self.crypto,
            saved,
            False,
            id_token,
            request_state,
            resource_request_method,
            resource_request_uri,
        )
