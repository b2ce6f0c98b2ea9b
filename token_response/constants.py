"""
Protocol constants for token response processing
"""

# Separator between the library and caller portions of the echoed state
RESOURCE_DELIM = "|"

# Separator used when building cache keys
CACHE_KEY_SEPARATOR = "-"

# Reserved family-of-client-IDs value
THE_FAMILY_ID = "1"

# Authentication schemes (token_type values)
BEARER_SCHEME = "Bearer"
POP_SCHEME = "pop"

# Credential types stored in the cache
ID_TOKEN_CREDENTIAL = "IdToken"
ACCESS_TOKEN_CREDENTIAL = "AccessToken"
ACCESS_TOKEN_WITH_AUTH_SCHEME_CREDENTIAL = "AccessToken_With_AuthScheme"
REFRESH_TOKEN_CREDENTIAL = "RefreshToken"

# App metadata key prefix
APP_METADATA_PREFIX = "appmetadata"

# Account authority types as persisted in the cache
MSSTS_ACCOUNT_TYPE = "MSSTS"
ADFS_ACCOUNT_TYPE = "ADFS"
GENERIC_ACCOUNT_TYPE = "Generic"

# Server error codes that require the user to sign in again interactively
INTERACTION_REQUIRED_ERROR_CODES = (
    "interaction_required",
    "consent_required",
    "login_required",
)

INTERACTION_REQUIRED_SUBERRORS = (
    "message_only",
    "additional_action",
    "basic_action",
    "user_password_expired",
    "consent_required",
)
