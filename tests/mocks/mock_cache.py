import fnmatch
import json
import time
from typing import Any, Dict, List, Optional, Tuple

from catalog.core.exceptions import CacheError
from catalog.services.cache import CacheStore


class MockCache(CacheStore):
    """
    In-memory CacheStore. Values go through JSON like they do in Redis, so a
    test sees exactly what a real cache hit would return.
    """

    def __init__(self):
        self.entries: Dict[str, Tuple[str, Optional[float]]] = {}  # key -> (payload, expires_at)
        self.set_calls: List[Tuple[str, Any, Optional[int]]] = []
        self.deleted_keys: List[str] = []
        self.deleted_patterns: List[str] = []
        self.should_fail_reads = False  # Toggle to simulate an unreachable cache
        self.should_fail_deletes = False

    def _alive(self, key: str) -> bool:
        entry = self.entries.get(key)
        if entry is None:
            return False
        _, expires_at = entry
        if expires_at is not None and expires_at <= time.monotonic():
            del self.entries[key]
            return False
        return True

    async def get(self, key: str) -> Optional[Any]:
        if self.should_fail_reads or not self._alive(key):
            return None
        return json.loads(self.entries[key][0])

    async def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> bool:
        self.set_calls.append((key, value, ttl_seconds))
        expires_at = time.monotonic() + ttl_seconds if ttl_seconds else None
        self.entries[key] = (json.dumps(value, default=str), expires_at)
        return True

    async def delete(self, *keys: str) -> int:
        if self.should_fail_deletes:
            raise CacheError("delete failed")
        self.deleted_keys.extend(keys)
        return sum(1 for key in keys if self.entries.pop(key, None) is not None)

    async def delete_pattern(self, pattern: str) -> int:
        if self.should_fail_deletes:
            raise CacheError("delete_pattern failed")
        self.deleted_patterns.append(pattern)
        matched = [key for key in self.entries if fnmatch.fnmatchcase(key, pattern)]
        for key in matched:
            del self.entries[key]
        return len(matched)

    def expire(self, key: str) -> None:
        """Force TTL expiry of one entry"""
        if key in self.entries:
            payload, _ = self.entries[key]
            self.entries[key] = (payload, time.monotonic() - 1)

    def has(self, key: str) -> bool:
        return self._alive(key)

    def ttl_of(self, key: str) -> Optional[int]:
        for set_key, _, ttl in reversed(self.set_calls):
            if set_key == key:
                return ttl
        return None

    def clear_history(self):
        """Clear test history"""
        self.set_calls = []
        self.deleted_keys = []
        self.deleted_patterns = []
