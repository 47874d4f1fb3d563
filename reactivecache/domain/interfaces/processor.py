"""Interface for the cache-processing engine providers talk to.

The engine owns storage, retrieval, expiry and eviction. Providers only hand
it a fully specified ProviderConfig and interpret what comes back.
"""

import abc
from typing import Any, AsyncIterator

from reactivecache.domain.models.config import ProviderConfig


class ProcessorProviders(abc.ABC):
    """Abstract Base Class for cache engines."""

    @abc.abstractmethod
    def process(self, config: ProviderConfig) -> AsyncIterator[Any]:
        """Runs one provider operation.

        Implementations are async generators: nothing happens until the
        stream is iterated, and a single item is emitted.

        Args:
            config: The operation to perform.

        Yields:
            The bare value, or a Reply when ``config.detail_response`` is set.

        Raises:
            LoaderFailed: The loader failed and no usable record was cached.
            EngineFailure: Storage or serialization failed.
        """
        raise NotImplementedError

    @abc.abstractmethod
    async def evict_all(self) -> None:
        """Removes every record held by the engine.

        Raises:
            EngineFailure: Storage failed while clearing.
        """
        raise NotImplementedError
