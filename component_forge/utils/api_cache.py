"""Disk cache for agent responses, keyed by agent, model and prompt."""

import hashlib
import json
import logging
import os
import time
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

logger = logging.getLogger(__name__)


def hash_prompt(prompt: str) -> str:
    """Short stable hash of a prompt; case and surrounding whitespace are ignored."""
    return hashlib.md5(prompt.strip().lower().encode("utf-8")).hexdigest()[:16]


def prompt_key(agent: str, model: Optional[str], prompt: str) -> str:
    """Cache key for one agent call."""
    return f"{agent}:{model or 'default'}:{hash_prompt(prompt)}"


class ApiCache:
    """Disk-based cache of raw agent responses, one namespace per agent."""

    def __init__(
        self,
        cache_dir: Union[str, Path],
        namespace: str = "responses",
        ttl: int = 86400,
    ):
        """
        Initialize the response cache.

        Parameters
        ----------
        cache_dir : str or Path
            Root directory for cache files
        namespace : str
            Subdirectory for this cache, usually the agent name
        ttl : int
            Seconds before an entry counts as expired
        """
        self.cache_dir = Path(cache_dir)
        self.namespace = namespace
        self.ttl = ttl
        self.namespace_dir = self.cache_dir / namespace
        self.namespace_dir.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Response cache at {self.namespace_dir}")

    def get_cache_path(self, key: str) -> Path:
        hashed_key = hashlib.md5(key.encode("utf-8")).hexdigest()
        return self.namespace_dir / f"{hashed_key}.json"

    def get(self, key: str) -> Optional[Any]:
        """
        Return the cached value for ``key``.

        Parameters
        ----------
        key : str
            Cache key, see ``prompt_key``

        Returns
        -------
        object or None
            Stored value, or None when missing, expired or unreadable
        """
        cache_path = self.get_cache_path(key)
        if not cache_path.exists():
            return None

        try:
            with open(cache_path, "r", encoding="utf-8") as f:
                entry = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Unreadable cache entry {cache_path.name}: {e}")
            return None

        if time.time() - entry.get("timestamp", 0) > self.ttl:
            logger.debug(f"Cache expired for {key}")
            return None

        logger.debug(f"Cache hit for {key}")
        return entry.get("value")

    def set(self, key: str, value: Any) -> bool:
        """Store a JSON-serializable value. Returns False if the write failed."""
        cache_path = self.get_cache_path(key)
        try:
            with open(cache_path, "w", encoding="utf-8") as f:
                json.dump({"timestamp": time.time(), "key": key, "value": value}, f, ensure_ascii=False)
        except (OSError, TypeError, ValueError) as e:
            logger.warning(f"Error writing cache entry for {key}: {e}")
            return False
        logger.debug(f"Cached value for {key}")
        return True

    def get_or_call(self, key: str, fn: Callable[[], Any]) -> Any:
        """Return the cached value, or call ``fn`` and cache a non-empty result."""
        cached = self.get(key)
        if cached is not None:
            return cached
        value = fn()
        if value:
            self.set(key, value)
        return value

    def invalidate(self, key: str) -> bool:
        cache_path = self.get_cache_path(key)
        if not cache_path.exists():
            return False
        try:
            os.remove(cache_path)
        except OSError as e:
            logger.warning(f"Error invalidating cache for {key}: {e}")
            return False
        logger.debug(f"Invalidated cache for {key}")
        return True

    def clear(self, older_than: Optional[int] = None) -> int:
        """
        Remove entries from this namespace.

        Parameters
        ----------
        older_than : int, optional
            Only remove entries older than this many seconds

        Returns
        -------
        int
            Number of entries removed
        """
        count = 0
        now = time.time()
        for cache_file in self.namespace_dir.glob("*.json"):
            try:
                if older_than is not None and now - os.path.getmtime(cache_file) <= older_than:
                    continue
                os.remove(cache_file)
                count += 1
            except OSError as e:
                logger.warning(f"Error clearing cache file {cache_file}: {e}")

        logger.info(f"Cleared {count} cache entries from {self.namespace}")
        return count

    def get_stats(self) -> Dict:
        """Entry count, size on disk, and age buckets for this namespace."""
        cache_files = list(self.namespace_dir.glob("*.json"))
        now = time.time()
        ages = {"1h": 0, "24h": 0, "expired": 0}
        for cache_file in cache_files:
            age = now - os.path.getmtime(cache_file)
            if age > self.ttl:
                ages["expired"] += 1
            elif age <= 3600:
                ages["1h"] += 1
            else:
                ages["24h"] += 1

        return {
            "namespace": self.namespace,
            "entry_count": len(cache_files),
            "total_size_bytes": sum(os.path.getsize(f) for f in cache_files),
            "age_distribution": ages,
        }
