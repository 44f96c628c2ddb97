"""Mapping store wrapper that records operation counts and latency."""

import time
from contextlib import asynccontextmanager
from datetime import datetime
from typing import List, Optional

from ..exceptions import AlreadyExistsError
from .base import MappingStore
from .models import ShortLink


class InstrumentedStore(MappingStore):
    """Delegate to another store, recording each call in ShortenerMetrics.

    Statuses: success, not_found (missing code), conflict (code taken)
    and error (anything else raised).
    """

    def __init__(self, store: MappingStore, metrics):
        super().__init__(store.store_url, store.logger)
        self.store = store
        self.metrics = metrics

    @asynccontextmanager
    async def _timed(self, operation: str):
        outcome = {"status": "success"}
        start = time.perf_counter()
        try:
            yield outcome
        except AlreadyExistsError:
            outcome["status"] = "conflict"
            raise
        except Exception:
            outcome["status"] = "error"
            raise
        finally:
            self.metrics.record_store_operation(operation, outcome["status"], time.perf_counter() - start)

    async def put(
        self,
        code: str,
        original_url: str,
        created_at: Optional[datetime] = None,
    ) -> ShortLink:
        async with self._timed("put"):
            return await self.store.put(code, original_url, created_at)

    async def get(self, code: str) -> Optional[ShortLink]:
        async with self._timed("get") as outcome:
            link = await self.store.get(code)
            if link is None:
                outcome["status"] = "not_found"
            return link

    async def increment_hit(self, code: str) -> bool:
        async with self._timed("increment_hit") as outcome:
            updated = await self.store.increment_hit(code)
            if not updated:
                outcome["status"] = "not_found"
            return updated

    async def size(self) -> int:
        async with self._timed("size"):
            return await self.store.size()

    async def list_recent(self, limit: int = 100) -> List[ShortLink]:
        async with self._timed("list_recent"):
            return await self.store.list_recent(limit)

    async def close(self) -> None:
        await self.store.close()
