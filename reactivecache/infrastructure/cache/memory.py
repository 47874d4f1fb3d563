"""In-process layer of the reference engine.

Holds the records served most recently so repeated reads skip the disk.
The layer is bounded: once it holds max_entries records, the least recently
used one is dropped. Dropped records stay on disk.
"""

import logging
from collections import OrderedDict
from typing import List, Optional

from reactivecache.domain.models.common import ProviderKey
from reactivecache.domain.models.reply import Record

logger = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES = 1000


class MemoryCache:
    """LRU dictionary of records keyed by provider key."""

    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES):
        if max_entries <= 0:
            raise ValueError(f"max_entries must be strictly positive, got {max_entries}")
        self.max_entries = max_entries
        self._records: "OrderedDict[ProviderKey, Record]" = OrderedDict()

    def get(self, key: ProviderKey) -> Optional[Record]:
        record = self._records.get(key)
        if record is not None:
            self._records.move_to_end(key)
            logger.debug(f"Memory hit for key: {key}")
        return record

    def put(self, key: ProviderKey, record: Record) -> None:
        self._records[key] = record
        self._records.move_to_end(key)
        logger.debug(f"Stored record in memory: key={key}")
        self._prune()

    def evict(self, key: ProviderKey) -> None:
        if self._records.pop(key, None) is not None:
            logger.debug(f"Deleted record from memory: key={key}")

    def evict_all(self) -> None:
        self._records.clear()
        logger.info("Cleared in-memory records.")

    def keys(self) -> List[ProviderKey]:
        return list(self._records)

    def _prune(self) -> None:
        while len(self._records) > self.max_entries:
            lru_key, _ = self._records.popitem(last=False)
            logger.debug(f"Dropped least recently used record from memory: key={lru_key}")
