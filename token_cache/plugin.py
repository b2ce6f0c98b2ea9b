"""File-backed persistence plugin for the token cache"""

import logging
import os
import platform
from pathlib import Path
from typing import Optional

from token_response.commit import TokenCacheContext


logger = logging.getLogger(__name__)


class FileCachePlugin:
    """Loads the token cache from disk before access and saves it after changes"""

    def __init__(self, cache_file: Optional[str] = None):
        """Initialize the plugin

        Args:
            cache_file: Path to cache file (default: settings.TOKEN_CACHE_FILE)
        """
        if cache_file is None:
            from settings import TOKEN_CACHE_FILE
            cache_file = TOKEN_CACHE_FILE

        self.cache_file = Path(cache_file).expanduser()

    def _ensure_secure_directory(self) -> None:
        """Create parent directory with secure permissions"""
        parent_dir = self.cache_file.parent
        if not parent_dir.exists():
            parent_dir.mkdir(parents=True, exist_ok=True)
            if platform.system() != "Windows":
                os.chmod(parent_dir, 0o700)

    async def before_cache_access(self, context: TokenCacheContext) -> None:
        """Load the cache file into the context's cache

        A missing file leaves the cache as is. A corrupt file is logged and
        the cache is treated as empty.
        """
        if not self.cache_file.exists():
            logger.debug(f"No token cache file at {self.cache_file}")
            return

        try:
            context.token_cache.deserialize(self.cache_file.read_text())
            logger.debug(f"Loaded token cache from {self.cache_file}")
        except (ValueError, OSError) as e:
            logger.error(f"Failed to load token cache from {self.cache_file}: {e}")
            context.token_cache.deserialize("")

    async def after_cache_access(self, context: TokenCacheContext) -> None:
        """Write the cache back to disk if it changed

        Raises:
            OSError: If the cache file cannot be written
        """
        if not context.cache_has_changed:
            return

        self._ensure_secure_directory()
        self.cache_file.write_text(context.token_cache.serialize())

        # Set file permissions to 600 on Unix-like systems
        if platform.system() != "Windows":
            os.chmod(self.cache_file, 0o600)

        logger.debug(f"Saved token cache to {self.cache_file}")
