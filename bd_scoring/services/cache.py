"""Result caching: in-memory namespaced TTL store and a Redis backend."""
import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Generic, Optional, Type, TypeVar

import redis
from pydantic import BaseModel

from bd_scoring.config import Settings, get_settings

logger = logging.getLogger(__name__)
T = TypeVar("T", bound=BaseModel)

DEFAULT_NAMESPACE = "default"


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    sets: int = 0
    expirations: int = 0
    evictions: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0

    @property
    def total_operations(self) -> int:
        return self.hits + self.misses + self.sets

    def to_dict(self) -> dict:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "sets": self.sets,
            "expirations": self.expirations,
            "evictions": self.evictions,
            "hit_rate": round(self.hit_rate, 4),
        }


@dataclass
class _CacheEntry:
    value: Any
    created_at: float
    expires_at: float


class ResultCache:
    """In-memory key → value store with per-namespace size limits and TTLs.

    Parameters
    ----------
    settings:
        Supplies namespace sizes, default TTLs and the eviction ratio.
    clock:
        Monotonic clock in seconds (default ``time.monotonic``).
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        settings = settings or get_settings()
        self._namespaces = settings.cache_namespaces()
        self._eviction_ratio = settings.cache_eviction_ratio
        self._clock = clock
        self._lock = threading.Lock()
        self._stores: Dict[str, "OrderedDict[str, _CacheEntry]"] = {}
        self._stats: Dict[str, CacheStats] = {}

    def _config(self, namespace: str) -> tuple[int, int]:
        return self._namespaces.get(namespace, self._namespaces[DEFAULT_NAMESPACE])

    def _store(self, namespace: str) -> "OrderedDict[str, _CacheEntry]":
        return self._stores.setdefault(namespace, OrderedDict())

    def _stat(self, namespace: str) -> CacheStats:
        return self._stats.setdefault(namespace, CacheStats())

    def get(self, key: str, namespace: str = DEFAULT_NAMESPACE) -> Optional[Any]:
        """Cached value, or None on miss or expiry."""
        with self._lock:
            store = self._store(namespace)
            stats = self._stat(namespace)
            entry = store.get(key)
            if entry is None:
                stats.misses += 1
                return None
            if self._clock() >= entry.expires_at:
                del store[key]
                stats.misses += 1
                stats.expirations += 1
                return None
            stats.hits += 1
            return entry.value

    def set(
        self,
        key: str,
        value: Any,
        ttl: Optional[float] = None,
        namespace: str = DEFAULT_NAMESPACE,
    ) -> None:
        """Store ``value``; evicts the oldest entries when the namespace is full."""
        max_size, default_ttl = self._config(namespace)
        now = self._clock()
        with self._lock:
            store = self._store(namespace)
            store.pop(key, None)
            store[key] = _CacheEntry(
                value=value,
                created_at=now,
                expires_at=now + (default_ttl if ttl is None else ttl),
            )
            self._stat(namespace).sets += 1
            if len(store) > max_size:
                self._evict(namespace, store, int(max_size * self._eviction_ratio))

    def _evict(self, namespace: str, store: "OrderedDict[str, _CacheEntry]", target: int) -> None:
        # Insertion order is creation order
        evicted = 0
        while len(store) > target:
            store.popitem(last=False)
            evicted += 1
        self._stat(namespace).evictions += evicted
        logger.info(f"Evicted {evicted} entries from {namespace} cache")

    def delete(self, key: str, namespace: str = DEFAULT_NAMESPACE) -> bool:
        with self._lock:
            return self._store(namespace).pop(key, None) is not None

    def clear(self, namespace: Optional[str] = None) -> None:
        """Drop one namespace (and its stats), or everything."""
        with self._lock:
            if namespace is None:
                self._stores.clear()
                self._stats.clear()
            else:
                self._stores.pop(namespace, None)
                self._stats.pop(namespace, None)

    def cleanup_expired(self) -> int:
        """Remove expired entries in every namespace; returns the count removed."""
        now = self._clock()
        removed = 0
        with self._lock:
            for namespace, store in self._stores.items():
                expired = [k for k, e in store.items() if now >= e.expires_at]
                for key in expired:
                    del store[key]
                if expired:
                    self._stat(namespace).expirations += len(expired)
                    logger.info(f"Cleaned up {len(expired)} expired entries from {namespace} cache")
                removed += len(expired)
        return removed

    def size(self, namespace: str = DEFAULT_NAMESPACE) -> int:
        with self._lock:
            return len(self._store(namespace))

    def stats(self, namespace: str = DEFAULT_NAMESPACE) -> CacheStats:
        with self._lock:
            current = self._stat(namespace)
            return replace(current)


class RedisResultCache(Generic[T]):
    """Redis-backed cache with Pydantic model support.

    Exposes the same ``get``/``set`` surface as ``ResultCache``. Keys are
    prefixed with their namespace; failures are logged and treated as misses.
    """

    def __init__(
        self,
        model: Type[T],
        client: Optional[redis.Redis] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        settings = settings or get_settings()
        self.model = model
        self.client = client or redis.Redis(
            host=settings.redis_host,
            port=settings.redis_port,
            db=settings.redis_db,
            decode_responses=True,
        )
        self._namespaces = settings.cache_namespaces()

    @staticmethod
    def _key(key: str, namespace: str) -> str:
        return f"{namespace}:{key}"

    def connect(self) -> bool:
        """Test the connection."""
        try:
            self.client.ping()
            return True
        except redis.ConnectionError as e:
            logger.error(f"Redis connection failed: {e}")
            return False

    def get(self, key: str, namespace: str = DEFAULT_NAMESPACE) -> Optional[T]:
        """Get cached item and deserialize to the configured model."""
        full_key = self._key(key, namespace)
        try:
            data = self.client.get(full_key)
            if data:
                return self.model.model_validate_json(data)
            return None
        except Exception as e:
            logger.warning(f"Cache get error for {full_key}: {e}")
            return None

    def set(
        self,
        key: str,
        value: T,
        ttl: Optional[float] = None,
        namespace: str = DEFAULT_NAMESPACE,
    ) -> bool:
        """Cache a model with TTL (namespace default when omitted)."""
        full_key = self._key(key, namespace)
        if ttl is None:
            ttl = self._namespaces.get(namespace, self._namespaces[DEFAULT_NAMESPACE])[1]
        try:
            self.client.setex(full_key, int(ttl), value.model_dump_json())
            return True
        except Exception as e:
            logger.warning(f"Cache set error for {full_key}: {e}")
            return False

    def delete(self, key: str, namespace: str = DEFAULT_NAMESPACE) -> bool:
        full_key = self._key(key, namespace)
        try:
            return bool(self.client.delete(full_key))
        except Exception as e:
            logger.warning(f"Cache delete error for {full_key}: {e}")
            return False

    def clear(self, namespace: Optional[str] = None) -> int:
        """Invalidate every key in a namespace (all namespaces when None)."""
        pattern = f"{namespace}:*" if namespace else "*"
        try:
            count = 0
            for key in self.client.scan_iter(match=pattern):
                self.client.delete(key)
                count += 1
            return count
        except Exception as e:
            logger.warning(f"Cache delete pattern error for {pattern}: {e}")
            return 0


class CacheKeys:
    """Cache namespaces and key builders."""
    SCORING = "scoring"

    @staticmethod
    def scoring(company_id: str, config_hash: str) -> str:
        return f"scoring_{company_id}_{config_hash}"
