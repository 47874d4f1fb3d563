"""Disk persistence for the reference engine, backed by diskcache.

Records are pickled here and handed to diskcache as bytes, so a value that
cannot be serialized fails before anything is written. After each save the
store checks how much space it uses and, past 95% of the configured budget,
evicts expirable records (oldest first) until usage falls under 70%.
Non-expirable records are never evicted for space.
"""

import logging
import pickle
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Union

import diskcache as dc

from reactivecache.domain.errors import EngineFailure
from reactivecache.domain.interfaces.persistence import Persistence
from reactivecache.domain.models.common import ProviderKey
from reactivecache.domain.models.reply import Record

logger = logging.getLogger(__name__)

DEFAULT_MAX_MB = 100
# Fractions of max_mb that start and stop eviction of expirable records.
EVICTION_TRIGGER_RATIO = 0.95
EVICTION_TARGET_RATIO = 0.70
BYTES_PER_MB = 1024 * 1024

STORAGE_ERRORS = (OSError, sqlite3.Error, pickle.PickleError, EOFError, dc.Timeout)
# pickle reports unpicklable objects (locks, sockets, lambdas) as TypeError or AttributeError
SERIALIZATION_ERRORS = (pickle.PicklingError, TypeError, AttributeError)


@contextmanager
def _storage_errors(key: Optional[str]) -> Iterator[None]:
    try:
        yield
    except STORAGE_ERRORS as e:
        logger.error(f"Disk persistence failure for key {key}: {e}")
        raise EngineFailure(key, e) from e


def _serialize(key: ProviderKey, record: Record) -> bytes:
    try:
        return pickle.dumps(record, protocol=pickle.HIGHEST_PROTOCOL)
    except SERIALIZATION_ERRORS as e:
        logger.error(f"Cannot serialize record for key {key}: {e}")
        raise EngineFailure(key, e) from e


class DiskPersistence(Persistence):
    """Persistence implementation on top of a diskcache.Cache directory."""

    def __init__(self, directory: Union[str, Path], max_mb: int = DEFAULT_MAX_MB):
        if max_mb <= 0:
            raise ValueError(f"max_mb must be strictly positive, got {max_mb}")
        self.directory = Path(directory)
        self.max_mb = max_mb
        with _storage_errors(None):
            self._cache = dc.Cache(str(self.directory), timeout=1)
        logger.info(f"Initialized disk persistence at: {self._cache.directory} (max {max_mb} MB)")

    def save(self, key: ProviderKey, record: Record) -> List[ProviderKey]:
        payload = _serialize(key, record)
        with _storage_errors(key):
            self._cache.set(key, payload)
            logger.debug(f"Stored record on disk: key={key} ({len(payload)} bytes)")
            return self._evict_expirable_if_needed()

    def retrieve(self, key: ProviderKey) -> Optional[Record]:
        with _storage_errors(key):
            payload = self._cache.get(key, default=None)
            if payload is None:
                return None
            record = pickle.loads(payload) if isinstance(payload, bytes) else payload
            if not isinstance(record, Record):
                logger.warning(f"Discarding unexpected disk entry for key {key}: {type(record).__name__}")
                self._cache.delete(key)
                return None
            return record

    def evict(self, key: ProviderKey) -> None:
        with _storage_errors(key):
            if self._cache.delete(key):
                logger.debug(f"Deleted record from disk: key={key}")

    def evict_all(self) -> None:
        with _storage_errors(None):
            self._cache.clear()
        logger.info(f"Cleared disk persistence at: {self.directory}")

    def all_keys(self) -> List[ProviderKey]:
        with _storage_errors(None):
            return [ProviderKey(str(key)) for key in self._cache.iterkeys()]

    def stored_mb(self) -> float:
        with _storage_errors(None):
            return self._cache.volume() / BYTES_PER_MB

    def close(self) -> None:
        self._cache.close()

    def _evict_expirable_if_needed(self) -> List[ProviderKey]:
        if self.stored_mb() < self.max_mb * EVICTION_TRIGGER_RATIO:
            return []

        target_mb = self.max_mb * EVICTION_TARGET_RATIO
        candidates = []
        for key in self.all_keys():
            record = self.retrieve(key)
            if record is not None and record.expirable:
                candidates.append((record.timestamp, key))

        if not candidates:
            logger.warning(
                f"Disk persistence over {EVICTION_TRIGGER_RATIO:.0%} of {self.max_mb} MB "
                f"but no record is expirable"
            )
            return []

        evicted: List[ProviderKey] = []
        for _, key in sorted(candidates):
            self._cache.delete(key)
            evicted.append(key)
            logger.debug(f"Evicted expirable record for space: key={key}")
            if self.stored_mb() < target_mb:
                break
        logger.info(f"Evicted {len(evicted)} expirable record(s) to stay under {self.max_mb} MB")
        return evicted
