"""reactivecache: per-key cache access coordination on top of a pluggable engine.

Typical use::

    cache = ReactiveCacheBuilder().using("/tmp/cache")
    users = cache.provider().life_cache(10, TimeUnit.MINUTES).with_key("user:42")
    name = await users.read_with_loader(fetch_user_name)
"""

from reactivecache.core.provider import Policy, Provider, ProviderBuilder
from reactivecache.core.reactive_cache import ReactiveCache, ReactiveCacheBuilder
from reactivecache.domain.errors import (
    EngineFailure,
    LoaderFailed,
    NoCachedValue,
    ProviderBuilderError,
    ReactiveCacheError,
)
from reactivecache.domain.models.common import TimeUnit
from reactivecache.domain.models.reply import Reply, Source

__all__ = [
    "EngineFailure",
    "LoaderFailed",
    "NoCachedValue",
    "Policy",
    "Provider",
    "ProviderBuilder",
    "ProviderBuilderError",
    "ReactiveCache",
    "ReactiveCacheBuilder",
    "ReactiveCacheError",
    "Reply",
    "Source",
    "TimeUnit",
]
