"""Result shapes produced by cache engines."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

from reactivecache.domain.models.common import LifetimeMillis, TimestampMillis

T = TypeVar("T")


class Source(Enum):
    """Where the data handed back to the caller came from."""
    MEMORY = "memory"
    PERSISTENCE = "persistence"
    CLOUD = "cloud"  # fresh from the loader


@dataclass(frozen=True)
class Reply(Generic[T]):
    """Detail-wrapped result returned by the *_as_reply operations."""
    data: T
    source: Source
    encrypted: bool
    stale: bool = False

    @property
    def from_cache(self) -> bool:
        return self.source is not Source.CLOUD


@dataclass
class Record:
    """A stored value plus the bookkeeping the engine needs to expire and evict it."""
    data: Any
    timestamp: TimestampMillis
    expirable: bool = True
    encrypted: bool = False
    lifetime_millis: Optional[LifetimeMillis] = None
    source: Source = Source.MEMORY

    def has_expired(self, lifetime_millis: Optional[LifetimeMillis], now: TimestampMillis) -> bool:
        """A record never expires without a positive lifetime."""
        if not lifetime_millis:
            return False
        return now - self.timestamp > lifetime_millis
