"""Command Handler: Orchestrates CLI command execution.

Receives commands from the main entry point (main.py), runs the matching
provider operation against the ReactiveCache and reports through the
UserInterface. Every handler returns True on success and False when the
error was displayed to the user.
"""

import logging
from typing import Optional

from reactivecache.core.reactive_cache import ReactiveCache
from reactivecache.domain.errors import NoCachedValue, ReactiveCacheError
from reactivecache.domain.interfaces.user_interface import UserInterface
from reactivecache.domain.models.common import TimeUnit

logger = logging.getLogger(__name__)


class CommandHandler:
    """Handles incoming commands and delegates to providers."""

    def __init__(self, cache: ReactiveCache, ui: UserInterface):
        self.cache = cache
        self.ui = ui

    async def handle_read(self, key: str) -> bool:
        logger.info(f"Handling 'read' command for key: {key}")
        try:
            value = await self.cache.provider().with_key(key).read()
        except NoCachedValue:
            self.ui.display_error(f"Nothing cached for key '{key}'.")
            return False
        except ReactiveCacheError as e:
            logger.error(f"Read of key {key} failed: {e}", exc_info=True)
            self.ui.display_error(f"Read failed: {e}")
            return False
        self.ui.display_output(value, title=key)
        return True

    async def handle_replace(
        self,
        key: str,
        value: str,
        lifetime: Optional[float] = None,
        unit: TimeUnit = TimeUnit.SECONDS,
        expirable: bool = True,
        encrypt: bool = False,
        as_reply: bool = False,
    ) -> bool:
        logger.info(f"Handling 'replace' command for key: {key}")
        try:
            builder = self.cache.provider().expirable(expirable).encrypt(encrypt)
            if lifetime is not None:
                builder.life_cache(lifetime, unit)
            provider = builder.with_key(key)
            if as_reply:
                result = await provider.replace_as_reply(value)
            else:
                result = await provider.replace(value)
        except ValueError as e:
            self.ui.display_error(f"Invalid option: {e}")
            return False
        except ReactiveCacheError as e:
            logger.error(f"Replace of key {key} failed: {e}", exc_info=True)
            self.ui.display_error(f"Replace failed: {e}")
            return False
        self.ui.display_output(result, title=key)
        return True

    async def handle_evict(self, key: str) -> bool:
        logger.info(f"Handling 'evict' command for key: {key}")
        try:
            await self.cache.provider().with_key(key).evict()
        except ReactiveCacheError as e:
            logger.error(f"Evict of key {key} failed: {e}", exc_info=True)
            self.ui.display_error(f"Evict failed: {e}")
            return False
        self.ui.display_info(f"Evicted '{key}'.")
        return True

    async def handle_evict_all(self) -> bool:
        logger.info("Handling 'evict-all' command")
        try:
            await self.cache.evict_all()
        except ReactiveCacheError as e:
            logger.error(f"Evict all failed: {e}", exc_info=True)
            self.ui.display_error(f"Evict all failed: {e}")
            return False
        self.ui.display_info("Evicted every cached key.")
        return True

    def handle_keys(self) -> bool:
        try:
            keys = self.cache.keys()
        except ReactiveCacheError as e:
            self.ui.display_error(f"Listing keys failed: {e}")
            return False
        self.ui.display_keys(keys)
        return True
