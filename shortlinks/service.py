"""Business logic service for URL shortening."""

import asyncio
import logging
from typing import Any, Dict, Iterable, Optional

from .common.url_builder import build_short_url
from .common.validators import is_valid_url
from .exceptions import AlreadyExistsError, EmptyURLError, GenerationExhaustedError, InvalidURLError
from .metrics import ShortenerMetrics
from .shortcode import ShortCodeGenerator
from .store.base import MappingStore


class ShorteningService:
    """Validate URLs, allocate codes and persist new short links."""

    def __init__(
        self,
        store: MappingStore,
        short_code_generator: Optional[ShortCodeGenerator] = None,
        base_url: str = "http://localhost:8080",
        path_prefix: str = "",
        max_collision_retries: int = 5,
        max_url_length: int = 2048,
        blocked_hosts: Iterable[str] = (),
        metrics: Optional[ShortenerMetrics] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize shortening service.

        Args:
            store: Mapping store instance
            short_code_generator: Optional short code generator
            base_url: Base URL used when the caller supplies none
            path_prefix: Optional path prefix for short URLs
            max_collision_retries: Extra attempts after a taken code
            max_url_length: Longest accepted URL
            blocked_hosts: Hostnames that may not be shortened
            metrics: Optional metrics instance
            logger: Optional logger
        """
        self.store = store
        self.generator = short_code_generator or ShortCodeGenerator()
        self.base_url = base_url
        self.path_prefix = path_prefix
        self.max_collision_retries = max_collision_retries
        self.max_url_length = max_url_length
        self.blocked_hosts = tuple(blocked_hosts)
        self.metrics = metrics
        self.logger = logger or logging.getLogger(__name__)

    def validate(self, raw_url: Optional[str]) -> str:
        """Check a submitted URL and return it stripped of surrounding whitespace.

        Raises:
            EmptyURLError: If nothing was submitted
            InvalidURLError: If it is not an absolute http(s) URL
        """
        if raw_url is None or not raw_url.strip():
            raise EmptyURLError()

        url = raw_url.strip()
        is_valid, error = is_valid_url(
            url,
            max_length=self.max_url_length,
            blocked_hosts=self.blocked_hosts,
        )
        if not is_valid:
            raise InvalidURLError(error)
        return url

    async def shorten(self, raw_url: Optional[str], base_url: Optional[str] = None) -> Dict[str, Any]:
        """Create a new short link.

        Args:
            raw_url: The URL as submitted by the client
            base_url: Base URL for the short link (defaults to the configured one)

        Returns:
            Dictionary with code, short_url, original_url, created_at

        Raises:
            EmptyURLError, InvalidURLError: If validation fails
            GenerationExhaustedError: If no free code could be stored
            StoreError: If the store fails
        """
        if self.metrics:
            self.metrics.shorten_attempts.inc()

        try:
            original_url = self.validate(raw_url)
        except (EmptyURLError, InvalidURLError) as e:
            self.logger.warning(f"Rejected URL {raw_url!r}: {e}")
            raise

        link = await self._store_with_unique_code(original_url)

        short_url = build_short_url(
            code=link.code,
            base_url=base_url or self.base_url,
            path_prefix=self.path_prefix,
        )

        if self.metrics:
            self.metrics.shorten_successes.inc()

        self.logger.info(f"Created short URL: {link.code} -> {original_url}")

        return {
            "code": link.code,
            "short_url": short_url,
            "original_url": link.original_url,
            "created_at": link.created_at,
        }

    async def _store_with_unique_code(self, original_url: str):
        """Generate codes until the store accepts one.

        The insert is shielded: a caller that goes away mid-request does not
        cancel the store operation, so no half-written link is left behind.
        """
        for attempt in range(self.max_collision_retries + 1):
            code = self.generator.generate()
            try:
                return await asyncio.shield(self.store.put(code, original_url))
            except AlreadyExistsError:
                self.logger.warning(f"Short code collision on attempt {attempt + 1}: {code}")

        raise GenerationExhaustedError(
            f"Unable to store a unique short code after {self.max_collision_retries + 1} attempts"
        )
