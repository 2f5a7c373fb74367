"""
File store infrastructure for committagger.

Persists a flat JSON object of key -> value with:
- Atomic writes (write to temp, then rename)
- Thread-safe read-modify-write operations
- Automatic parent directory creation
"""

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)


class FileStore:
    """
    JSON file persistence with atomic writes.

    Every mutating call is a whole-file replacement performed under a
    re-entrant lock, so each single-key operation is atomic with respect
    to other threads of this process.

    Example:
        store = FileStore(Path("~/.committagger/cache.json"))
        store.set("tag_cache_torvalds/linux", {"data": {...}, "timestamp": 0})
        entry = store.get("tag_cache_torvalds/linux")
    """

    def __init__(self, path: Path, auto_create: bool = True):
        """
        Initialize FileStore.

        Args:
            path: Path to JSON file
            auto_create: Create file and parent directories if they don't exist
        """
        self.path = Path(path).expanduser().resolve()
        self._lock = threading.RLock()
        self._cache: Optional[Dict[str, Any]] = None

        if auto_create:
            self._ensure_exists()

    def _ensure_exists(self) -> None:
        """Create file and parent directories if needed."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if not self.path.exists():
            self._write_atomic({})

    def _write_atomic(self, data: Dict[str, Any]) -> None:
        """Write data atomically using temp file and rename."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(
            dir=self.path.parent,
            prefix=f".{self.path.name}.",
            suffix=".tmp"
        )

        try:
            with os.fdopen(fd, 'w') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
                f.write('\n')

            os.replace(temp_path, self.path)

        except Exception:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise

    def _load(self) -> Dict[str, Any]:
        """Load the store from disk (or the in-memory copy). Caller holds the lock."""
        if self._cache is not None:
            return self._cache

        data: Dict[str, Any] = {}
        try:
            if self.path.exists():
                with open(self.path, 'r') as f:
                    loaded = json.load(f)
                if isinstance(loaded, dict):
                    data = loaded
                else:
                    logger.warning(f"Ignoring non-object content in {self.path}")
        except (ValueError, OSError) as e:
            logger.warning(f"Error reading {self.path}: {e}")

        self._cache = data
        return data

    def _mutate(self, change: Callable[[Dict[str, Any]], bool]) -> bool:
        """
        Apply change to a copy of the data and persist it if change returns True.

        Returns:
            Whatever change returned
        """
        with self._lock:
            data = dict(self._load())
            changed = change(data)
            if changed:
                self._write_atomic(data)
                self._cache = data
            return changed

    def read(self) -> Dict[str, Any]:
        """Return a shallow copy of the whole store."""
        with self._lock:
            return dict(self._load())

    def get(self, key: str, default: Any = None) -> Any:
        """Get single value, or default if absent."""
        with self._lock:
            return self._load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set single value, replacing any previous value."""
        def change(data: Dict[str, Any]) -> bool:
            data[key] = value
            return True

        self._mutate(change)

    def delete(self, key: str) -> bool:
        """
        Delete a key.

        Returns:
            True if key was deleted, False if not found
        """
        def change(data: Dict[str, Any]) -> bool:
            if key not in data:
                return False
            del data[key]
            return True

        return self._mutate(change)

    def delete_many(self, keys: Iterable[str]) -> int:
        """
        Delete several keys in a single write.

        Returns:
            Number of keys removed
        """
        removed: List[str] = []

        def change(data: Dict[str, Any]) -> bool:
            for key in keys:
                if key in data:
                    del data[key]
                    removed.append(key)
            return bool(removed)

        self._mutate(change)
        return len(removed)

    def pop_if(self, key: str, predicate: Callable[[Any], bool]) -> bool:
        """
        Atomically delete key if predicate(value) holds.

        Returns:
            True if the key was removed
        """
        def change(data: Dict[str, Any]) -> bool:
            if key in data and predicate(data[key]):
                del data[key]
                return True
            return False

        return self._mutate(change)

    def keys(self) -> List[str]:
        """Get all keys."""
        return list(self.read().keys())

    def __contains__(self, key: str) -> bool:
        return key in self.read()
