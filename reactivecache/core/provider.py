"""Providers: the per-key entry point for cache CRUD operations.

A ProviderBuilder collects the policy for one cache slot (encryption,
expirability, lifetime). ``with_key`` freezes that policy into a Policy and
returns a Provider bound to the key; the builder refuses further changes.

Each Provider operation assembles a ProviderConfig for its access mode,
hands it to the engine and adapts the outcome:

    ====================================  ===========  ============  ======  ==============
    operation                             loader       force_evict   detail  stale_fallback
    ====================================  ===========  ============  ======  ==============
    evict()                               placeholder  True          False   DENY_STALE
    read()                                placeholder  False         False   DENY_STALE
    read_with_loader(loader)              deferred     False         False   ENGINE_DEFAULT
    replace(value)                        eager        True          False   ENGINE_DEFAULT
    read_with_loader_as_reply(loader)     deferred     False         True    ENGINE_DEFAULT
    replace_as_reply(value)               eager        True          True    ENGINE_DEFAULT
    ====================================  ===========  ============  ======  ==============

Operations are coroutines, so nothing reaches the engine until they are awaited.
"""

import logging
from contextlib import aclosing
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Generic, Optional, TypeVar, Union

from reactivecache.core.exception_adapter import ExceptionAdapter
from reactivecache.domain.errors import EngineFailure, ProviderBuilderError
from reactivecache.domain.interfaces.processor import ProcessorProviders
from reactivecache.domain.models.common import Lifetime, LifetimeMillis, ProviderKey, TimeUnit
from reactivecache.domain.models.config import (
    EvictDynamicKey,
    Loader,
    LoaderSource,
    ProviderConfig,
    StaleFallback,
)
from reactivecache.domain.models.reply import Reply

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Policy:
    """Cache rules for one slot, frozen when the builder is bound to a key."""
    key: ProviderKey
    encrypted: bool = False
    expirable: bool = True
    lifetime: Optional[Lifetime] = None

    @property
    def lifetime_millis(self) -> Optional[LifetimeMillis]:
        return self.lifetime.to_millis() if self.lifetime is not None else None


class Provider(Generic[T]):
    """Entry point to manage cache CRUD operations for a single key."""

    def __init__(self, policy: Policy, processor: ProcessorProviders):
        self._policy = policy
        self._processor = processor
        self._exception_adapter = ExceptionAdapter()

    @property
    def key(self) -> str:
        return self._policy.key

    @property
    def policy(self) -> Policy:
        return self._policy

    async def evict(self) -> None:
        """Evict all the cached data for this provider."""
        config = self._assemble(
            self._exception_adapter.placeholder_loader(),
            EvictDynamicKey(force_evict=True),
            detail_response=False,
            stale_fallback=StaleFallback.DENY_STALE,
        )
        try:
            await self._dispatch(config, allow_empty=True)
        except Exception as e:
            self._exception_adapter.complete_on_missing_loader(e, self.key)

    async def read(self) -> T:
        """Read from cache and raise NoCachedValue if no data is available."""
        config = self._assemble(
            self._exception_adapter.placeholder_loader(),
            EvictDynamicKey(force_evict=False),
            detail_response=False,
            stale_fallback=StaleFallback.DENY_STALE,
        )
        try:
            return await self._dispatch(config)
        except Exception as e:
            self._exception_adapter.strip_placeholder_loader_exception(e, self.key)

    async def read_with_loader(self, loader: Loader) -> T:
        """Read from cache; if nothing is available, call the loader and cache its result.

        Args:
            loader: Zero-argument callable returning an awaitable. It is only
                invoked when the engine needs fresh data.
        """
        config = self._assemble(
            LoaderSource.deferred(loader),
            EvictDynamicKey(force_evict=False),
            detail_response=False,
            stale_fallback=StaleFallback.ENGINE_DEFAULT,
        )
        return await self._dispatch(config)

    async def replace(self, value: T) -> T:
        """Replace the cached data with value."""
        config = self._assemble(
            LoaderSource.eager(value),
            EvictDynamicKey(force_evict=True),
            detail_response=False,
            stale_fallback=StaleFallback.ENGINE_DEFAULT,
        )
        return await self._dispatch(config)

    async def read_with_loader_as_reply(self, loader: Loader) -> Reply[T]:
        """Same as read_with_loader but wraps the data in a Reply for debug purposes."""
        config = self._assemble(
            LoaderSource.deferred(loader),
            EvictDynamicKey(force_evict=False),
            detail_response=True,
            stale_fallback=StaleFallback.ENGINE_DEFAULT,
        )
        return await self._dispatch(config)

    async def replace_as_reply(self, value: T) -> Reply[T]:
        """Same as replace but wraps the data in a Reply for debug purposes."""
        config = self._assemble(
            LoaderSource.eager(value),
            EvictDynamicKey(force_evict=True),
            detail_response=True,
            stale_fallback=StaleFallback.ENGINE_DEFAULT,
        )
        return await self._dispatch(config)

    def _assemble(
        self,
        loader: LoaderSource[Any],
        evict: EvictDynamicKey,
        detail_response: bool,
        stale_fallback: StaleFallback,
    ) -> ProviderConfig:
        return ProviderConfig(
            provider_key=self._policy.key,
            encrypted=self._policy.encrypted,
            expirable=self._policy.expirable,
            lifetime_millis=self._policy.lifetime_millis,
            loader=loader,
            evict=evict,
            detail_response=detail_response,
            stale_fallback=stale_fallback,
        )

    async def _dispatch(self, config: ProviderConfig, allow_empty: bool = False) -> Any:
        """Sends config to the engine and returns the first item it emits.

        With allow_empty an engine that completes without emitting yields None.
        """
        logger.debug(
            f"Dispatching '{config.provider_key}': loader={config.loader.kind.value}, "
            f"force_evict={config.evict.force_evict}, detail={config.detail_response}, "
            f"stale={config.stale_fallback.value}"
        )
        async with aclosing(self._processor.process(config)) as stream:
            async for item in stream:
                return item
        if allow_empty:
            return None
        raise EngineFailure(config.provider_key, LookupError("engine completed without emitting a value"))

    def __repr__(self) -> str:
        return f"Provider(key={self.key!r})"


class ProviderBuilder(Generic[T]):
    """Collects the policy of a provider before it is bound to a key."""

    def __init__(self, processor: ProcessorProviders):
        self._processor = processor
        self._encrypted = False
        self._expirable = True
        self._lifetime: Optional[Lifetime] = None
        self._bound_key: Optional[str] = None

    def encrypt(self, encrypt: bool) -> "ProviderBuilder[T]":
        """If True, the engine encrypts this provider's data, provided an encryption key was configured."""
        self._ensure_open("encrypt")
        self._encrypted = encrypt
        return self

    def expirable(self, expirable: bool) -> "ProviderBuilder[T]":
        """Make the data eligible to be evicted if not enough space remains on disk. True by default."""
        self._ensure_open("expirable")
        self._expirable = expirable
        return self

    def life_cache(
        self,
        duration: Union[int, float, timedelta],
        unit: Optional[TimeUnit] = None,
    ) -> "ProviderBuilder[T]":
        """Set the amount of time before the data is considered expired.

        Without a life cache the data is never evicted unless evict() or
        replace() is called explicitly.

        Args:
            duration: Amount of ``unit``, or a timedelta (then ``unit`` must be omitted).
            unit: TimeUnit of ``duration``; seconds when omitted.

        Raises:
            ValueError: The lifetime is not strictly positive.
        """
        self._ensure_open("life_cache")
        if isinstance(duration, timedelta):
            if unit is not None:
                raise ValueError("unit must not be given together with a timedelta")
            lifetime = Lifetime(duration.total_seconds() * 1000, TimeUnit.MILLISECONDS)
        else:
            lifetime = Lifetime(duration, unit or TimeUnit.SECONDS)
        if lifetime.to_millis() <= 0:
            raise ValueError(f"Life cache must be strictly positive, got {duration} {lifetime.unit.name.lower()}")
        self._lifetime = lifetime
        return self

    def with_key(self, key: Any) -> Provider[T]:
        """Bind the builder to key and return the Provider for it.

        Raises:
            ValueError: key is None or renders as an empty string.
            ProviderBuilderError: The builder was already bound.
        """
        self._ensure_open("with_key")
        if key is None or str(key) == "":
            raise ValueError("Provider key must be a non-empty value")
        policy = Policy(
            key=ProviderKey(str(key)),
            encrypted=self._encrypted,
            expirable=self._expirable,
            lifetime=self._lifetime,
        )
        self._bound_key = policy.key
        logger.debug(f"Provider bound: {policy}")
        return Provider(policy, self._processor)

    def _ensure_open(self, operation: str) -> None:
        if self._bound_key is not None:
            raise ProviderBuilderError(
                f"Cannot call {operation}() on a builder already bound to key '{self._bound_key}'"
            )
