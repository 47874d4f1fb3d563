"""Error adaptation for the read and evict paths.

Both paths hand the engine a placeholder loader that always fails, since
neither needs fresh data. The engine then reports "nothing cached and the
loader failed" in the usual way, and this module turns that synthetic
failure into the outcome each operation promises.
"""

import logging
from typing import Any, NoReturn

from reactivecache.domain.errors import LoaderFailed, NoCachedValue, PlaceholderLoaderError
from reactivecache.domain.models.config import LoaderSource

logger = logging.getLogger(__name__)


async def _fail_placeholder() -> Any:
    raise PlaceholderLoaderError()


def _caused_by_placeholder(error: BaseException) -> bool:
    if isinstance(error, PlaceholderLoaderError):
        return True
    return isinstance(error, LoaderFailed) and error.no_loader


class ExceptionAdapter:
    """Maps placeholder-triggered engine failures onto the public contract."""

    def placeholder_loader(self) -> LoaderSource[Any]:
        return LoaderSource.deferred(_fail_placeholder)

    def complete_on_missing_loader(self, error: Exception, key: str) -> None:
        """Evict path: an absent value is not a failure.

        Re-raises anything that was not triggered by the placeholder loader.
        """
        if _caused_by_placeholder(error):
            logger.debug(f"Evict for '{key}' completed; nothing left cached")
            return None
        raise error

    def strip_placeholder_loader_exception(self, error: Exception, key: str) -> NoReturn:
        """Read path: re-raise as NoCachedValue without the internal placeholder chain."""
        if _caused_by_placeholder(error):
            logger.debug(f"Read for '{key}' found no cached data")
            raise NoCachedValue(key) from None
        raise error
