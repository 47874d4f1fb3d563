"""Errors surfaced by providers and by cache engines.

Callers only ever see subclasses of ReactiveCacheError. PlaceholderLoaderError
is internal: it is raised by the placeholder loader and never leaves the
provider layer.
"""

from typing import Optional


class ReactiveCacheError(Exception):
    """Base class for every error raised by reactivecache."""


class ProviderBuilderError(ReactiveCacheError, RuntimeError):
    """Raised when a ProviderBuilder is used after it has been bound to a key."""


class NoCachedValue(ReactiveCacheError):
    """read() found nothing cached and no loader was supplied."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"No data cached for provider key '{key}' and no loader was supplied")


class LoaderFailed(ReactiveCacheError):
    """The loader failed to produce data and nothing usable was cached.

    When the loader was the placeholder loader this is the engine's
    "no cached value and no loader" signal; see ``no_loader``.
    """

    def __init__(self, key: str, cause: Optional[BaseException]):
        self.key = key
        self.cause = cause
        detail = f"{type(cause).__name__}: {cause}" if cause is not None else "loader returned no data"
        super().__init__(f"Loader for provider key '{key}' failed ({detail})")

    @property
    def no_loader(self) -> bool:
        return isinstance(self.cause, PlaceholderLoaderError)


class EngineFailure(ReactiveCacheError):
    """Any other failure of the underlying cache engine (disk, serialization...)."""

    def __init__(self, key: Optional[str], cause: Optional[BaseException]):
        self.key = key
        self.cause = cause
        where = f"provider key '{key}'" if key is not None else "cache engine"
        super().__init__(f"Cache engine failed for {where}: {cause}")


class PlaceholderLoaderError(Exception):
    """Raised by the placeholder loader handed to the engine on read and evict."""

    def __init__(self):
        super().__init__("Placeholder loader invoked: no loader available")
