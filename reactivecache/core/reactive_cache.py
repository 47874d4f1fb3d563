"""ReactiveCache: owns a cache engine and hands out provider builders."""

import logging
from pathlib import Path
from typing import Any, List, Union

from reactivecache.core.provider import ProviderBuilder
from reactivecache.domain.interfaces.processor import ProcessorProviders
from reactivecache.infrastructure.cache.disk_persistence import DEFAULT_MAX_MB, DiskPersistence
from reactivecache.infrastructure.cache.memory import DEFAULT_MAX_ENTRIES, MemoryCache
from reactivecache.infrastructure.cache.processor import ProcessorProvidersImpl
from reactivecache.infrastructure.cache.two_layers_cache import TwoLayersCache
from reactivecache.infrastructure.config.settings import (
    get_cache_directory,
    get_max_mb,
    get_memory_max_entries,
    use_expired_data,
)

logger = logging.getLogger(__name__)


class ReactiveCache:
    """Entry point: one instance per cache directory, shared by every provider."""

    def __init__(self, processor: ProcessorProviders):
        self.processor = processor

    def provider(self) -> ProviderBuilder[Any]:
        """Returns a fresh builder; bind it with ``with_key`` to get a Provider."""
        return ProviderBuilder(self.processor)

    async def evict_all(self) -> None:
        """Evict the data of every provider created from this instance."""
        logger.info("Evicting all cached data.")
        await self.processor.evict_all()

    def keys(self) -> List[str]:
        """Keys currently persisted, when the engine is the reference one."""
        if isinstance(self.processor, ProcessorProvidersImpl):
            return list(self.processor.two_layers_cache.all_keys())
        raise NotImplementedError(f"{type(self.processor).__name__} does not expose its keys")

    @classmethod
    def from_settings(cls) -> "ReactiveCache":
        """Builds a disk-backed instance from the loaded configuration."""
        return (
            ReactiveCacheBuilder()
            .use_expired_data_if_loader_not_available(use_expired_data())
            .max_mb_persistence(get_max_mb())
            .max_memory_entries(get_memory_max_entries())
            .using(get_cache_directory())
        )


class ReactiveCacheBuilder:
    """Configures the reference engine before a ReactiveCache is created."""

    def __init__(self):
        self._use_expired_data = False
        self._max_mb = DEFAULT_MAX_MB
        self._max_memory_entries = DEFAULT_MAX_ENTRIES

    def use_expired_data_if_loader_not_available(self, use_expired: bool = True) -> "ReactiveCacheBuilder":
        """Serve expired data when a loader fails, for operations that defer to the engine default."""
        self._use_expired_data = use_expired
        return self

    def max_mb_persistence(self, max_mb: int) -> "ReactiveCacheBuilder":
        """Disk budget; past it, expirable records are evicted."""
        if max_mb <= 0:
            raise ValueError(f"max_mb must be strictly positive, got {max_mb}")
        self._max_mb = max_mb
        return self

    def max_memory_entries(self, max_entries: int) -> "ReactiveCacheBuilder":
        """How many records the in-process layer keeps before dropping the least recently used."""
        if max_entries <= 0:
            raise ValueError(f"max_entries must be strictly positive, got {max_entries}")
        self._max_memory_entries = max_entries
        return self

    def using(self, cache_directory: Union[str, Path]) -> ReactiveCache:
        """Creates the ReactiveCache persisting under cache_directory."""
        persistence = DiskPersistence(cache_directory, max_mb=self._max_mb)
        processor = ProcessorProvidersImpl(
            TwoLayersCache(persistence, memory=MemoryCache(self._max_memory_entries)),
            use_expired_data_if_loader_not_available=self._use_expired_data,
        )
        logger.info(f"ReactiveCache ready at {persistence.directory} (use_expired_data={self._use_expired_data})")
        return ReactiveCache(processor)
