"""In-memory credential store with JSON serialization"""

import json
import logging
import threading
from typing import Any, Dict, List, Optional

from token_response.entities import (
    AccessTokenEntity,
    AccountEntity,
    AppMetadataEntity,
    CacheRecord,
    CredentialEntity,
    IdTokenEntity,
    RefreshTokenEntity,
)


logger = logging.getLogger(__name__)

ACCOUNT_SECTION = "Account"
ID_TOKEN_SECTION = "IdToken"
ACCESS_TOKEN_SECTION = "AccessToken"
REFRESH_TOKEN_SECTION = "RefreshToken"
APP_METADATA_SECTION = "AppMetadata"


def _load_section(parsed: Dict[str, Any], section: str, entity_cls) -> Dict[str, Any]:
    """Rebuild one section of a serialized cache

    Raises:
        ValueError: If the section or one of its entries has the wrong shape
    """
    entries = parsed.get(section, {})
    if not isinstance(entries, dict):
        raise ValueError(f"Token cache section {section} must be a JSON object")

    loaded = {}
    for key, value in entries.items():
        if not isinstance(value, dict):
            raise ValueError(f"Token cache entry {key} in {section} must be a JSON object")
        try:
            loaded[key] = entity_cls.from_dict(value)
        except (TypeError, KeyError) as e:
            raise ValueError(f"Invalid token cache entry {key} in {section}: {e}") from e
    return loaded


class InMemoryTokenCache:
    """Key-based store for accounts, credentials and app metadata

    Implements the store the response pipeline writes to, and can be
    serialized so a persistence plugin can load and save it.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._accounts: Dict[str, AccountEntity] = {}
        self._id_tokens: Dict[str, IdTokenEntity] = {}
        self._access_tokens: Dict[str, AccessTokenEntity] = {}
        self._refresh_tokens: Dict[str, RefreshTokenEntity] = {}
        self._app_metadata: Dict[str, AppMetadataEntity] = {}

    def get_account(self, account_key: str) -> Optional[AccountEntity]:
        """Get an account by its cache key

        Args:
            account_key: Key from ``AccountEntity.generate_account_key``

        Returns:
            AccountEntity, or None if not cached
        """
        with self._lock:
            return self._accounts.get(account_key)

    def get_all_accounts(self) -> List[AccountEntity]:
        with self._lock:
            return list(self._accounts.values())

    def get_credential(self, credential_key: str) -> Optional[CredentialEntity]:
        """Get an id, access or refresh token by its cache key"""
        with self._lock:
            for section in (self._id_tokens, self._access_tokens, self._refresh_tokens):
                if credential_key in section:
                    return section[credential_key]
        return None

    def get_app_metadata(self, app_metadata_key: str) -> Optional[AppMetadataEntity]:
        with self._lock:
            return self._app_metadata.get(app_metadata_key)

    def save_cache_record(self, record: CacheRecord) -> None:
        """Save every entity present on the record

        Args:
            record: Cache record from the response pipeline
        """
        with self._lock:
            if record.account:
                self._accounts[record.account.generate_account_key()] = record.account
            if record.id_token:
                self._id_tokens[record.id_token.generate_credential_key()] = record.id_token
            if record.access_token:
                self._access_tokens[record.access_token.generate_credential_key()] = record.access_token
            if record.refresh_token:
                self._refresh_tokens[record.refresh_token.generate_credential_key()] = record.refresh_token
            if record.app_metadata:
                self._app_metadata[record.app_metadata.generate_app_metadata_key()] = record.app_metadata

        logger.debug("Saved cache record to token cache")

    def remove_account(self, account_key: str) -> bool:
        """Remove an account and every credential issued for it

        Args:
            account_key: Key from ``AccountEntity.generate_account_key``

        Returns:
            True if the account was cached
        """
        with self._lock:
            account = self._accounts.pop(account_key, None)
            if account is None:
                return False

            for section in (self._id_tokens, self._access_tokens, self._refresh_tokens):
                for key, credential in list(section.items()):
                    if (credential.home_account_id == account.home_account_id
                            and credential.environment == account.environment):
                        del section[key]

        logger.info(f"Removed account {account_key} from token cache")
        return True

    def clear(self) -> None:
        with self._lock:
            self._accounts.clear()
            self._id_tokens.clear()
            self._access_tokens.clear()
            self._refresh_tokens.clear()
            self._app_metadata.clear()

    def serialize(self) -> str:
        """Dump the cache as JSON, one section per entity type"""
        with self._lock:
            data: Dict[str, Dict[str, Any]] = {
                ACCOUNT_SECTION: {k: v.to_dict() for k, v in self._accounts.items()},
                ID_TOKEN_SECTION: {k: v.to_dict() for k, v in self._id_tokens.items()},
                ACCESS_TOKEN_SECTION: {k: v.to_dict() for k, v in self._access_tokens.items()},
                REFRESH_TOKEN_SECTION: {k: v.to_dict() for k, v in self._refresh_tokens.items()},
                APP_METADATA_SECTION: {k: v.to_dict() for k, v in self._app_metadata.items()},
            }
        return json.dumps(data, indent=2)

    def deserialize(self, data: str) -> None:
        """Replace the cache contents with a JSON dump from ``serialize``

        Raises:
            ValueError: If data is not valid JSON or does not have the cache shape
        """
        parsed = json.loads(data) if data else {}
        if not isinstance(parsed, dict):
            raise ValueError("Serialized token cache must be a JSON object")

        accounts = _load_section(parsed, ACCOUNT_SECTION, AccountEntity)
        id_tokens = _load_section(parsed, ID_TOKEN_SECTION, IdTokenEntity)
        access_tokens = _load_section(parsed, ACCESS_TOKEN_SECTION, AccessTokenEntity)
        refresh_tokens = _load_section(parsed, REFRESH_TOKEN_SECTION, RefreshTokenEntity)
        app_metadata = _load_section(parsed, APP_METADATA_SECTION, AppMetadataEntity)

        with self._lock:
            self._accounts = accounts
            self._id_tokens = id_tokens
            self._access_tokens = access_tokens
            self._refresh_tokens = refresh_tokens
            self._app_metadata = app_metadata
