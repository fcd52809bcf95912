"""
Shared caching for type resolution.

Resolution results are keyed by registry name and registry version, so a
registration never lets a stale entry be served. Uses cachetools caches.
"""
import functools
import logging
import threading

import cachetools

logger = logging.getLogger(__name__)


class Cache:
    """Cache manager for the type mapping module.

    Thread-safe singleton that manages all named caches.
    """

    _instance = None
    _caches: dict[str, cachetools.TTLCache] = {}
    _lock = threading.RLock()

    @classmethod
    def get_instance(cls) -> 'Cache':
        """Get singleton instance."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    def get_cache(self, name: str, maxsize: int = 1024, ttl: int = 3600) -> cachetools.TTLCache:
        """Get or create a TTL cache with the given name.

        Args:
            name: Name of the cache
            maxsize: Maximum cache size
            ttl: Time-to-live in seconds

        Returns
            TTLCache instance
        """
        if name not in self._caches:
            with self._lock:
                if name not in self._caches:
                    self._caches[name] = cachetools.TTLCache(maxsize=maxsize, ttl=ttl)
        return self._caches[name]

    def clear_all(self) -> None:
        """Clear all managed caches."""
        with self._lock:
            for cache in self._caches.values():
                cache.clear()

    def clear_cache(self, name: str) -> None:
        """Clear a specific cache by name."""
        with self._lock:
            if name in self._caches:
                self._caches[name].clear()
                logger.debug(f'Cleared cache {name}')


def cacheable_resolution(cache_name: str, maxsize: int = 1024, ttl: int = 3600):
    """Decorator for memoising resolution methods of versioned objects.

    The instance must expose `cache_key` (a stable name) and `version`
    (incremented on every registration). Results, including None, are cached
    per (cache_key, version, *args).

    Args:
        cache_name: Name of the shared cache
        maxsize: Maximum cache size
        ttl: Time-to-live in seconds
    """
    def decorator(method):
        @functools.wraps(method)
        def wrapper(self, *args):
            cache = Cache.get_instance().get_cache(cache_name, maxsize=maxsize, ttl=ttl)
            try:
                key = (self.cache_key, self.version, *args)
                hash(key)
            except TypeError:
                return method(self, *args)

            with Cache._lock:
                if key in cache:
                    return cache[key]

            result = method(self, *args)
            with Cache._lock:
                cache[key] = result
            return result
        return wrapper
    return decorator
