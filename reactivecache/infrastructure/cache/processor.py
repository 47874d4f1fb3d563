"""Reference implementation of the ProcessorProviders engine contract.

For every ProviderConfig the processor:

1. looks the record up (memory, then disk), dropping it if it expired unless
   stale data may be used as a fallback;
2. serves a live record straight away unless the call forces eviction;
3. otherwise runs the loader, evicts when forced, stores the fresh value and
   serves it with Source.CLOUD;
4. if the loader fails or returns None, evicts when forced and serves the
   stale record when allowed, else raises LoaderFailed.

No await separates the forced eviction from the write that follows, so a
cancelled task never leaves a replace half applied.
"""

import logging
from typing import Any, AsyncIterator, Optional

from reactivecache.domain.errors import LoaderFailed
from reactivecache.domain.interfaces.processor import ProcessorProviders
from reactivecache.domain.models.config import ProviderConfig
from reactivecache.domain.models.reply import Record, Reply, Source
from reactivecache.infrastructure.cache.two_layers_cache import TwoLayersCache

logger = logging.getLogger(__name__)


class ProcessorProvidersImpl(ProcessorProviders):
    """Cache engine built on a TwoLayersCache."""

    def __init__(self, two_layers_cache: TwoLayersCache, use_expired_data_if_loader_not_available: bool = False):
        self.two_layers_cache = two_layers_cache
        self.use_expired_data_if_loader_not_available = use_expired_data_if_loader_not_available

    async def process(self, config: ProviderConfig) -> AsyncIterator[Any]:
        yield await self._get_data(config)

    async def evict_all(self) -> None:
        self.two_layers_cache.evict_all()

    async def _get_data(self, config: ProviderConfig) -> Any:
        use_expired = config.stale_fallback.resolve(self.use_expired_data_if_loader_not_available)
        record = self.two_layers_cache.retrieve(config.provider_key, use_expired, config.lifetime_millis)

        if record is not None and not config.evict.force_evict:
            if not self.two_layers_cache.has_expired(record, config.lifetime_millis):
                return self._reply(config, record.data, record.source, stale=False)

        return await self._get_data_from_loader(config, record, use_expired)

    async def _get_data_from_loader(self, config: ProviderConfig, record: Optional[Record], use_expired: bool) -> Any:
        key = config.provider_key
        try:
            data = await config.loader.load()
        except Exception as e:
            self._clear_key_if_needed(config)
            stale = self._stale_fallback(config, record, use_expired)
            if stale is not None:
                logger.warning(f"Loader for key {key} failed ({e}); serving expired data")
                return stale
            raise LoaderFailed(key, e) from e

        if data is None:
            self._clear_key_if_needed(config)
            stale = self._stale_fallback(config, record, use_expired)
            if stale is not None:
                logger.warning(f"Loader for key {key} returned no data; serving expired data")
                return stale
            raise LoaderFailed(key, None)

        self._clear_key_if_needed(config)
        self.two_layers_cache.save(key, data, config.lifetime_millis, config.expirable, config.encrypted)
        logger.debug(f"Stored fresh data for key {key}")
        return self._reply(config, data, Source.CLOUD, stale=False)

    def _stale_fallback(self, config: ProviderConfig, record: Optional[Record], use_expired: bool) -> Any:
        if not use_expired or record is None:
            return None
        stale = self.two_layers_cache.has_expired(record, config.lifetime_millis)
        return self._reply(config, record.data, record.source, stale=stale)

    def _clear_key_if_needed(self, config: ProviderConfig) -> None:
        if config.evict.force_evict:
            self.two_layers_cache.evict(config.provider_key)

    def _reply(self, config: ProviderConfig, data: Any, source: Source, stale: bool) -> Any:
        if config.detail_response:
            return Reply(data=data, source=source, encrypted=config.encrypted, stale=stale)
        return data
