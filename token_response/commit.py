"""Persistence lifecycle around the cache write

The persistence plugin's hooks bracket every store access:
``before_cache_access`` runs before the store is read, ``after_cache_access``
runs once the write attempt has concluded, whatever its outcome.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional, Protocol

from .entities import AccountEntity, CacheRecord
from .errors import StoreWriteFailedError

logger = logging.getLogger(__name__)


class CacheStore(Protocol):
    """Key-based credential store the pipeline writes to"""

    def get_account(self, account_key: str) -> Optional[AccountEntity]:
        ...

    def save_cache_record(self, record: CacheRecord) -> None:
        ...


class SerializableTokenCache(Protocol):
    """Cache that a persistence plugin can load from and dump to storage"""

    def serialize(self) -> str:
        ...

    def deserialize(self, data: str) -> None:
        ...


class TokenCacheContext:
    """Handed to persistence hooks; tells the plugin whether the cache changed"""

    def __init__(self, token_cache: SerializableTokenCache, has_changed: bool):
        self.token_cache = token_cache
        self.has_changed = has_changed

    @property
    def cache_has_changed(self) -> bool:
        return self.has_changed


class CachePlugin(Protocol):
    """Persistence plugin loading and saving the cache around each access"""

    async def before_cache_access(self, context: TokenCacheContext) -> None:
        ...

    async def after_cache_access(self, context: TokenCacheContext) -> None:
        ...


class CommitOrchestrator:
    """Writes cache records, honouring persistence hooks and the refresh race guard

    Args:
        store: Credential store records are written to
        persistence_plugin: Optional plugin wrapped around each store access
        serializable_cache: Cache the plugin loads/saves; hooks only run when both are set
    """

    def __init__(
        self,
        store: CacheStore,
        persistence_plugin: Optional[CachePlugin] = None,
        serializable_cache: Optional[SerializableTokenCache] = None,
    ):
        self.store = store
        self.persistence_plugin = persistence_plugin
        self.serializable_cache = serializable_cache

    @asynccontextmanager
    async def persistence_scope(self, has_changed: bool = True) -> AsyncIterator[Optional[TokenCacheContext]]:
        """Run the before hook on entry and the after hook on every exit

        When the body raises and the after hook fails too, the hook failure is
        logged and the body's exception propagates.
        """
        if not (self.persistence_plugin and self.serializable_cache):
            yield None
            return

        context = TokenCacheContext(self.serializable_cache, has_changed)
        logger.debug("Persistence enabled, calling before_cache_access")
        await self.persistence_plugin.before_cache_access(context)
        try:
            yield context
        except BaseException:
            logger.debug("Persistence enabled, calling after_cache_access")
            try:
                await self.persistence_plugin.after_cache_access(context)
            except Exception as hook_error:
                logger.error(f"after_cache_access failed after an aborted cache access: {hook_error}")
            raise
        logger.debug("Persistence enabled, calling after_cache_access")
        await self.persistence_plugin.after_cache_access(context)

    async def commit(self, record: CacheRecord, handling_refresh_token_response: bool = False) -> Optional[CacheRecord]:
        """Save a cache record unless a concurrent account removal must win

        When the record comes from a silent refresh, the account it belongs
        to must still be in the store. If another caller removed it after the
        refresh started, nothing is written and None is returned. The check
        and the write are not atomic; a removal landing between them is not
        detected.

        Args:
            record: Cache record to save
            handling_refresh_token_response: True if the record came from a refresh token exchange

        Returns:
            The saved record, or None if the write was skipped

        Raises:
            StoreWriteFailedError: If the store fails to save the record
        """
        async with self.persistence_scope(has_changed=True):
            if handling_refresh_token_response and record.account:
                key = record.account.generate_account_key()
                if not self.store.get_account(key):
                    logger.warning(
                        "Account used to refresh tokens not in persistence, "
                        "refreshed tokens will not be stored in the cache"
                    )
                    return None

            try:
                self.store.save_cache_record(record)
            except Exception as e:
                logger.error(f"Failed to save cache record: {e}")
                raise StoreWriteFailedError(e) from e

        logger.debug("Cache record saved")
        return record
