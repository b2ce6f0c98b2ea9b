"""Token response processing for OAuth2/OIDC clients

Validates authorization server responses, derives cache entities from them,
commits those to a credential store and builds the caller-facing result.
"""

from .authority import Authority, AuthorityType, ProtocolMode, generate_environment_from_authority
from .assembler import CacheRecordAssembler
from .commit import CachePlugin, CacheStore, CommitOrchestrator, TokenCacheContext
from .crypto import DefaultCrypto, PopTokenGenerator, build_client_info
from .entities import (
    AccessTokenEntity,
    AccountEntity,
    AccountInfo,
    AppMetadataEntity,
    CacheRecord,
    IdTokenEntity,
    RefreshTokenEntity,
    generate_home_account_id,
)
from .errors import (
    AuthError,
    ClientAuthError,
    ClientConfigurationError,
    ClientInfoDecodingError,
    ClientInfoEmptyError,
    InteractionRequiredAuthError,
    InvalidCacheEnvironmentError,
    InvalidStateError,
    NonceMismatchError,
    PopSigningKeyMissingError,
    ResourceRequestParametersRequiredError,
    ServerError,
    StateMismatchError,
    StateMissingError,
    StoreWriteFailedError,
    TokenParsingError,
    is_interaction_required_error,
)
from .handler import ResponseHandler
from .id_token import IdToken, IdTokenClaims, IdTokenProcessor
from .models import (
    LibraryStateObject,
    RequestStateObject,
    ServerAuthorizationCodeResponse,
    ServerAuthorizationTokenResponse,
)
from .request_state import parse_request_state, set_request_state
from .result import AuthenticationResult, generate_authentication_result

__all__ = [
    "Authority",
    "AuthorityType",
    "ProtocolMode",
    "generate_environment_from_authority",
    "CacheRecordAssembler",
    "CachePlugin",
    "CacheStore",
    "CommitOrchestrator",
    "TokenCacheContext",
    "DefaultCrypto",
    "PopTokenGenerator",
    "build_client_info",
    "AccessTokenEntity",
    "AccountEntity",
    "AccountInfo",
    "AppMetadataEntity",
    "CacheRecord",
    "IdTokenEntity",
    "RefreshTokenEntity",
    "generate_home_account_id",
    "AuthError",
    "ClientAuthError",
    "ClientConfigurationError",
    "ClientInfoDecodingError",
    "ClientInfoEmptyError",
    "InteractionRequiredAuthError",
    "InvalidCacheEnvironmentError",
    "InvalidStateError",
    "NonceMismatchError",
    "PopSigningKeyMissingError",
    "ResourceRequestParametersRequiredError",
    "ServerError",
    "StateMismatchError",
    "StateMissingError",
    "StoreWriteFailedError",
    "TokenParsingError",
    "is_interaction_required_error",
    "ResponseHandler",
    "IdToken",
    "IdTokenClaims",
    "IdTokenProcessor",
    "LibraryStateObject",
    "RequestStateObject",
    "ServerAuthorizationCodeResponse",
    "ServerAuthorizationTokenResponse",
    "parse_request_state",
    "set_request_state",
    "AuthenticationResult",
    "generate_authentication_result",
]
