"""
TTL-bounded tag map cache for committagger.

One entry per repository identity, persisted through FileStore as:
    {"tag_cache_owner/name": {"data": {<sha>: [<tag>, ...]}, "timestamp": <epoch ms>}}

Reads evict stale entries (the eviction is persisted), writes replace the
whole entry. Empty maps are never stored.
"""

import logging
import time
from pathlib import Path
from typing import Callable, Dict, Optional, Union

from ..domain import CacheEntry, RepositoryKey, TagMap
from .file_store import FileStore

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 60 * 60
DEFAULT_KEY_PREFIX = 'tag_cache_'


def _now_ms() -> int:
    return int(time.time() * 1000)


class TagCache:
    """
    Persistent tag map cache with time-to-live expiry.

    Instantiate once per process with an explicit TTL and key prefix.

    Example:
        cache = TagCache(FileStore(Path("~/.committagger/cache.json")))
        cache.set(RepositoryKey("octo", "hello"), {"<sha>": ["v1.0"]})
        cache.get(RepositoryKey("octo", "hello"))
    """

    def __init__(
        self,
        store: FileStore,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        key_prefix: str = DEFAULT_KEY_PREFIX,
        clock: Callable[[], int] = _now_ms,
    ):
        """
        Initialize TagCache.

        Args:
            store: Backing key/value store
            ttl_seconds: How long an entry stays readable after being written
            key_prefix: Prefix for storage keys; invalidate_all only touches these
            clock: Returns the current time in epoch milliseconds
        """
        self.store = store
        self.ttl_ms = int(ttl_seconds * 1000)
        self.key_prefix = key_prefix
        self._clock = clock

    @classmethod
    def from_path(cls, path: Union[str, Path], **kwargs) -> 'TagCache':
        return cls(FileStore(Path(path)), **kwargs)

    def storage_key(self, key: RepositoryKey) -> str:
        return f"{self.key_prefix}{key}"

    def _is_stale(self, raw) -> bool:
        entry = CacheEntry.from_dict(raw)
        return entry is None or entry.is_expired(self._clock(), self.ttl_ms)

    def get(self, key: RepositoryKey) -> Optional[TagMap]:
        """
        Get the cached tag map for a repository.

        An expired (or corrupt) entry is deleted from the store and
        reported as a miss.

        Returns:
            TagMap, or None on miss
        """
        storage_key = self.storage_key(key)
        if self.store.pop_if(storage_key, self._is_stale):
            logger.debug(f"Evicted stale cache entry for {key}")
            return None

        entry = CacheEntry.from_dict(self.store.get(storage_key))
        if entry is None:
            return None
        return entry.data

    def set(self, key: RepositoryKey, tag_map: TagMap) -> None:
        """Replace the entry for a repository with tag_map, stamped now."""
        entry = CacheEntry(data=dict(tag_map), timestamp=self._clock())
        self.store.set(self.storage_key(key), entry.to_dict())
        logger.debug(f"Cached {len(tag_map)} tagged commits for {key}")

    def invalidate(self, key: RepositoryKey) -> bool:
        """
        Drop the entry for a repository.

        Returns:
            True if an entry existed
        """
        return self.store.delete(self.storage_key(key))

    def invalidate_all(self) -> int:
        """
        Drop every tag cache entry (keys carrying the prefix).

        Returns:
            Number of entries removed
        """
        keys = [k for k in self.store.keys() if k.startswith(self.key_prefix)]
        if not keys:
            return 0
        return self.store.delete_many(keys)

    def entries(self) -> Dict[str, CacheEntry]:
        """
        List the valid entries currently cached, keyed by owner/name.

        Expired entries are skipped but not evicted.
        """
        now = self._clock()
        result: Dict[str, CacheEntry] = {}
        for storage_key, raw in self.store.read().items():
            if not storage_key.startswith(self.key_prefix):
                continue
            entry = CacheEntry.from_dict(raw)
            if entry is None or entry.is_expired(now, self.ttl_ms):
                continue
            result[storage_key[len(self.key_prefix):]] = entry
        return result
