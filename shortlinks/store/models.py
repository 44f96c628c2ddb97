"""Data models for URL shortener."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


def _parse_timestamp(value) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


@dataclass
class ShortLink:
    """A short code bound to its original URL and usage data."""

    code: str
    original_url: str
    created_at: datetime
    hit_count: int = 0
    last_accessed: Optional[datetime] = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "code": self.code,
            "original_url": self.original_url,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "hit_count": self.hit_count,
            "last_accessed": self.last_accessed.isoformat() if self.last_accessed else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ShortLink":
        """Create from dictionary (database row or to_dict() output)."""
        return cls(
            code=data["code"],
            original_url=data["original_url"],
            created_at=_parse_timestamp(data["created_at"]),
            hit_count=data.get("hit_count") or 0,
            last_accessed=_parse_timestamp(data.get("last_accessed")),
        )
