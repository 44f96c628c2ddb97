"""In-memory mapping store."""

import logging
import threading
from dataclasses import replace
from datetime import datetime, timezone
from typing import Dict, List, Optional

from ..exceptions import AlreadyExistsError
from .base import MappingStore, validate_limit
from .models import ShortLink


class InMemoryStore(MappingStore):
    """Process-local store backed by a dict.

    Mutations hold a lock for the dict operation only; lookups do not lock.
    Contents are lost when the process exits.
    """

    def __init__(self, store_url: str = "memory://", logger: Optional[logging.Logger] = None):
        super().__init__(store_url, logger)
        self._links: Dict[str, ShortLink] = {}
        self._lock = threading.Lock()

    async def put(
        self,
        code: str,
        original_url: str,
        created_at: Optional[datetime] = None,
    ) -> ShortLink:
        if created_at is None:
            created_at = datetime.now(timezone.utc)
        elif created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)

        link = ShortLink(code=code, original_url=original_url, created_at=created_at)
        with self._lock:
            if code in self._links:
                raise AlreadyExistsError(code)
            self._links[code] = link
        self.logger.debug(f"Stored {code} -> {original_url}")
        return replace(link)

    async def get(self, code: str) -> Optional[ShortLink]:
        link = self._links.get(code)
        return replace(link) if link else None

    async def increment_hit(self, code: str) -> bool:
        with self._lock:
            link = self._links.get(code)
            if link is None:
                return False
            link.hit_count += 1
            link.last_accessed = datetime.now(timezone.utc)
        return True

    async def size(self) -> int:
        return len(self._links)

    async def list_recent(self, limit: int = 100) -> List[ShortLink]:
        validate_limit(limit)
        with self._lock:
            # newest insert first, so equal timestamps stay newest first after the stable sort
            links = list(reversed(self._links.values()))
        links.sort(key=lambda link: link.created_at, reverse=True)
        return [replace(link) for link in links[:limit]]

    async def close(self) -> None:
        self.logger.debug(f"Closing in-memory store with {len(self._links)} links")
