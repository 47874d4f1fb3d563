"""Defines common Value Objects used across the provider and engine contexts.

These objects represent simple values or concepts like provider keys,
lifetimes and time units, ensuring consistency and type safety.
"""

from dataclasses import dataclass
from enum import Enum
from typing import NewType, Union

# === Core Value Objects ===

# Using NewType for semantic clarity, although they are plain values at runtime.
ProviderKey = NewType("ProviderKey", str)        # Identifier of one cache slot
LifetimeMillis = NewType("LifetimeMillis", int)  # Lifetime of a record in milliseconds
TimestampMillis = NewType("TimestampMillis", int)  # Wall clock time in milliseconds


class TimeUnit(Enum):
    """Units accepted by ProviderBuilder.life_cache, valued in milliseconds."""
    MILLISECONDS = 1
    SECONDS = 1000
    MINUTES = 60 * 1000
    HOURS = 60 * 60 * 1000
    DAYS = 24 * 60 * 60 * 1000

    def to_millis(self, duration: Union[int, float]) -> int:
        return int(duration * self.value)


@dataclass(frozen=True)
class Lifetime:
    """A duration and the unit it is expressed in."""
    duration: Union[int, float]
    unit: TimeUnit

    def to_millis(self) -> LifetimeMillis:
        return LifetimeMillis(self.unit.to_millis(self.duration))
