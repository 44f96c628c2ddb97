"""Short code resolution."""

import asyncio
import logging
from typing import Optional

from .exceptions import NotFoundError
from .metrics import ShortenerMetrics
from .shortcode import ShortCodeGenerator
from .store.base import MappingStore
from .store.cache import RedisCache
from .store.models import ShortLink


class Resolver:
    """Look up short codes and count hits."""

    def __init__(
        self,
        store: MappingStore,
        cache: Optional[RedisCache] = None,
        metrics: Optional[ShortenerMetrics] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.store = store
        self.cache = cache
        self.metrics = metrics
        self.logger = logger or logging.getLogger(__name__)

    async def resolve(self, code: str) -> str:
        """Return the original URL for a code and record the hit.

        A failed hit update is logged and counted but does not fail the lookup.

        Raises:
            NotFoundError: If the code is malformed or unknown
            StoreError: If the store cannot be read
        """
        if self.metrics:
            self.metrics.resolve_attempts.inc()

        original_url = await self._lookup(code)

        if original_url is None:
            if self.metrics:
                self.metrics.resolve_not_found.inc()
            self.logger.warning(f"Short code not found: {code}")
            raise NotFoundError(code)

        await self._record_hit(code)

        self.logger.debug(f"Resolved {code} -> {original_url}")
        return original_url

    async def info(self, code: str) -> Optional[ShortLink]:
        """Return the stored record without counting a hit."""
        if not ShortCodeGenerator.is_valid_format(code):
            return None
        return await self.store.get(code)

    async def _lookup(self, code: str) -> Optional[str]:
        if not ShortCodeGenerator.is_valid_format(code):
            return None

        if self.cache:
            cached_url = await self.cache.get(code)
            if cached_url:
                self.logger.debug(f"Cache hit for {code}")
                return cached_url

        link = await self.store.get(code)
        if link is None:
            return None

        if self.cache:
            await self.cache.set(code, link.original_url)
        return link.original_url

    async def _record_hit(self, code: str) -> None:
        try:
            updated = await asyncio.shield(self.store.increment_hit(code))
        except Exception:
            self.logger.exception(f"Failed to increment hit count for {code}")
            if self.metrics:
                self.metrics.hit_increment_failures.inc()
            return

        if not updated:
            self.logger.warning(f"Hit count not updated, {code} vanished from the store")
            if self.metrics:
                self.metrics.hit_increment_failures.inc()
