"""Memory-over-disk record store with expiry checks."""

import dataclasses
import logging
import time
from typing import Any, Callable, List, Optional

from reactivecache.domain.interfaces.persistence import Persistence
from reactivecache.domain.models.common import LifetimeMillis, ProviderKey, TimestampMillis
from reactivecache.domain.models.reply import Record, Source
from reactivecache.infrastructure.cache.memory import MemoryCache

logger = logging.getLogger(__name__)

Clock = Callable[[], TimestampMillis]


def now_millis() -> TimestampMillis:
    return TimestampMillis(int(time.time() * 1000))


class TwoLayersCache:
    """Looks records up in memory first, then on disk, promoting disk hits to memory."""

    def __init__(self, persistence: Persistence, memory: Optional[MemoryCache] = None, clock: Clock = now_millis):
        self.persistence = persistence
        self.memory = memory if memory is not None else MemoryCache()
        self._clock = clock

    def retrieve(
        self,
        key: ProviderKey,
        use_expired_data: bool,
        lifetime_millis: Optional[LifetimeMillis],
    ) -> Optional[Record]:
        """Returns the record for key tagged with the layer it came from.

        Expired records are evicted and hidden, unless use_expired_data is set,
        in which case they are returned as they are.
        """
        record = self.memory.get(key)
        source = Source.MEMORY
        if record is None:
            record = self.persistence.retrieve(key)
            if record is None:
                logger.debug(f"Cache miss for key: {key}")
                return None
            source = Source.PERSISTENCE
            self.memory.put(key, record)

        if self.has_expired(record, lifetime_millis):
            if use_expired_data:
                logger.debug(f"Keeping expired record for key {key} as stale fallback")
            else:
                logger.debug(f"Record expired for key {key}. Evicting.")
                self.evict(key)
                return None

        return dataclasses.replace(record, source=source)

    def has_expired(self, record: Record, lifetime_millis: Optional[LifetimeMillis]) -> bool:
        return record.has_expired(lifetime_millis, self._clock())

    def save(
        self,
        key: ProviderKey,
        data: Any,
        lifetime_millis: Optional[LifetimeMillis],
        expirable: bool,
        encrypted: bool,
    ) -> None:
        record = Record(
            data=data,
            timestamp=self._clock(),
            expirable=expirable,
            encrypted=encrypted,
            lifetime_millis=lifetime_millis,
        )
        # disk first: memory must never hold a record the disk refused
        evicted = self.persistence.save(key, record)
        for evicted_key in evicted:
            self.memory.evict(evicted_key)
        self.memory.put(key, record)

    def evict(self, key: ProviderKey) -> None:
        self.memory.evict(key)
        self.persistence.evict(key)

    def evict_all(self) -> None:
        self.memory.evict_all()
        self.persistence.evict_all()

    def all_keys(self) -> List[ProviderKey]:
        return self.persistence.all_keys()
