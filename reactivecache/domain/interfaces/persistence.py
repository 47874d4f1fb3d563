"""Interface for the durable layer of the reference engine.

Defines the contract for storing, retrieving and evicting records by key,
plus the size bookkeeping needed to evict expirable records under pressure.
"""

import abc
from typing import List, Optional

from reactivecache.domain.models.common import ProviderKey
from reactivecache.domain.models.reply import Record


class Persistence(abc.ABC):
    """Abstract Base Class for record persistence."""

    @abc.abstractmethod
    def save(self, key: ProviderKey, record: Record) -> List[ProviderKey]:
        """Stores a record, replacing any previous one under the same key.

        Returns the keys of the records evicted to make room, if any.
        """
        pass

    @abc.abstractmethod
    def retrieve(self, key: ProviderKey) -> Optional[Record]:
        """Returns the record stored under key, or None."""
        pass

    @abc.abstractmethod
    def evict(self, key: ProviderKey) -> None:
        """Deletes the record stored under key. Missing keys are ignored."""
        pass

    @abc.abstractmethod
    def evict_all(self) -> None:
        """Deletes every record."""
        pass

    @abc.abstractmethod
    def all_keys(self) -> List[ProviderKey]:
        """Lists the keys of every stored record."""
        pass

    @abc.abstractmethod
    def stored_mb(self) -> float:
        """Returns the space currently used, in megabytes."""
        pass
