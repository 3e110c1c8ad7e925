"""
Cache service on top of the Django cache framework.
The backend (LocMemCache, Redis, Memcached...) is chosen by settings.CACHES.
"""

import logging
from datetime import timedelta
from typing import Callable, Optional, TypeVar

from django.conf import settings
from django.core.cache import caches

from apps.exchange.domain.interfaces import BaseCacheService

logger = logging.getLogger(__name__)

T = TypeVar("T")

_MISSING = object()


class DjangoCacheService(BaseCacheService):
    """
    Get-or-create cache with per-entry expiry.

    Concurrent misses on the same key are not de-duplicated: each caller
    runs the factory and the last write wins.
    """

    def __init__(self, alias: Optional[str] = None, default_ttl: Optional[timedelta] = None):
        self.alias = alias or settings.EXCHANGE_CACHE_ALIAS
        self.default_ttl = default_ttl if default_ttl is not None else timedelta(seconds=settings.DEFAULT_CACHE_TTL)

    @property
    def _cache(self):
        return caches[self.alias]

    def get_or_create(self, key: str, factory: Callable[[], Optional[T]], ttl: Optional[timedelta] = None) -> Optional[T]:
        value = self._cache.get(key, _MISSING)
        if value is not _MISSING:
            logger.debug("Cache hit: %s", key)
            return value

        logger.debug("Cache miss: %s", key)
        value = factory()

        if value is not None:
            timeout = (ttl if ttl is not None else self.default_ttl).total_seconds()
            self._cache.set(key, value, timeout=timeout)

        return value

    def remove(self, key: str) -> None:
        self._cache.delete(key)
