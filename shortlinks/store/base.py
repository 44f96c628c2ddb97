"""Abstract base class for mapping store implementations."""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from .models import ShortLink


def validate_limit(limit: int) -> int:
    """Reject listing limits below one."""
    if limit < 1:
        raise ValueError(f"limit must be at least 1, got {limit}")
    return limit


class MappingStore(ABC):
    """Code -> ShortLink key-value store.

    Implementations must make ``put`` an atomic insert-if-absent and
    ``increment_hit`` an atomic read-modify-write, whatever the backing
    medium. Records returned to callers are copies.
    """

    def __init__(self, store_url: str, logger: Optional[logging.Logger] = None):
        """Initialize store.

        Args:
            store_url: Store connection string
            logger: Optional logger instance
        """
        self.store_url = store_url
        self.logger = logger or logging.getLogger(__name__)

    @abstractmethod
    async def put(
        self,
        code: str,
        original_url: str,
        created_at: Optional[datetime] = None,
    ) -> ShortLink:
        """Insert a new mapping unless the code is already taken.

        Args:
            code: The short code
            original_url: The original long URL
            created_at: Optional creation timestamp (defaults to now UTC)

        Returns:
            The stored ShortLink

        Raises:
            AlreadyExistsError: If the code already exists
            StoreError: If the backing store fails
        """

    @abstractmethod
    async def get(self, code: str) -> Optional[ShortLink]:
        """Get the mapping for a short code.

        Args:
            code: The short code to lookup

        Returns:
            The ShortLink if found, None otherwise
        """

    @abstractmethod
    async def increment_hit(self, code: str) -> bool:
        """Increment the hit count and stamp the access time.

        Args:
            code: The short code to update

        Returns:
            True if incremented, False if the code does not exist
        """

    @abstractmethod
    async def size(self) -> int:
        """Return the number of stored mappings."""

    @abstractmethod
    async def list_recent(self, limit: int = 100) -> List[ShortLink]:
        """List recently created mappings, newest first.

        Args:
            limit: Maximum number of mappings to return

        Raises:
            ValueError: If limit is less than 1
        """

    async def health_check(self) -> bool:
        """Check that the store answers a lightweight query.

        Returns:
            True if healthy, False otherwise
        """
        try:
            await self.size()
            return True
        except Exception as e:
            self.logger.error(f"Health check failed: {e}")
            return False

    @abstractmethod
    async def close(self) -> None:
        """Release store resources."""
