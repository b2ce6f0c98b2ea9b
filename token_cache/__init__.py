"""Default credential store and persistence for the token response pipeline"""

from .plugin import FileCachePlugin
from .store import InMemoryTokenCache

__all__ = [
    "FileCachePlugin",
    "InMemoryTokenCache",
]
