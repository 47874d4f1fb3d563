"""The request a provider hands to a cache engine for one operation."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

from reactivecache.domain.models.common import LifetimeMillis, ProviderKey

T = TypeVar("T")

Loader = Callable[[], Awaitable[T]]


class StaleFallback(Enum):
    """Whether expired data may be served when the loader yields nothing."""
    ALLOW_STALE = "allow_stale"
    DENY_STALE = "deny_stale"
    ENGINE_DEFAULT = "engine_default"

    def resolve(self, engine_default: bool) -> bool:
        if self is StaleFallback.ALLOW_STALE:
            return True
        if self is StaleFallback.DENY_STALE:
            return False
        return engine_default


class SourceKind(Enum):
    EAGER = "eager"
    DEFERRED = "deferred"


@dataclass(frozen=True)
class LoaderSource(Generic[T]):
    """Where fresh data comes from: a value already in hand or a deferred computation."""
    kind: SourceKind
    value: Optional[T] = None
    computation: Optional[Loader] = None

    @classmethod
    def eager(cls, value: T) -> "LoaderSource[T]":
        return cls(kind=SourceKind.EAGER, value=value)

    @classmethod
    def deferred(cls, computation: Loader) -> "LoaderSource[T]":
        if not callable(computation):
            raise TypeError(f"Loader must be a callable returning an awaitable, got {type(computation).__name__}")
        return cls(kind=SourceKind.DEFERRED, computation=computation)

    async def load(self) -> T:
        if self.kind is SourceKind.EAGER:
            return self.value
        return await self.computation()


@dataclass(frozen=True)
class EvictDynamicKey:
    force_evict: bool = False


@dataclass(frozen=True)
class ProviderConfig:
    """Canonical description of a single provider operation.

    Built fresh by the provider for every call and discarded once the engine
    has answered.
    """
    provider_key: ProviderKey
    encrypted: bool
    expirable: bool
    lifetime_millis: Optional[LifetimeMillis]
    loader: LoaderSource[Any]
    evict: EvictDynamicKey
    detail_response: bool
    stale_fallback: StaleFallback
