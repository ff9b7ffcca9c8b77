"""Cache entry model."""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass
class CacheEntry(Generic[T]):
    """
    Cached value with its creation time and expiry (epoch seconds).

    An entry is expired once `now >= expires_at`.
    """

    data: T
    timestamp: float
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at
