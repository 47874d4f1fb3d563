"""Main entry point for the reactivecache CLI.

Sets up the Typer CLI application, performs dependency injection (Composition Root),
defines CLI commands, and delegates execution to the CommandHandler.
"""

import asyncio
import logging
from pathlib import Path
from typing import Annotated, Any, Coroutine, Dict, Optional

import typer

from reactivecache.core.command_handler import CommandHandler
from reactivecache.core.reactive_cache import ReactiveCache
from reactivecache.domain.errors import ReactiveCacheError
from reactivecache.domain.models.common import TimeUnit
from reactivecache.infrastructure.cli.display import ConsoleDisplay
from reactivecache.infrastructure.config.settings import load_configuration, set_config
from reactivecache.infrastructure.monitoring.logger_setup import setup_logging_from_settings

logger = logging.getLogger(__name__)

# --- Dependency Injection Container (Manual) ---

_dependencies: Optional[Dict[str, Any]] = None


def create_dependencies() -> Dict[str, Any]:
    """Creates and wires up all dependencies for the application.

    This acts as the Composition Root.
    """
    load_configuration()
    setup_logging_from_settings()

    dependencies: Dict[str, Any] = {'ui': ConsoleDisplay()}
    try:
        dependencies['cache'] = ReactiveCache.from_settings()
    except (ReactiveCacheError, ValueError) as e:
        logger.error(f"Fatal Error during application initialization: {e}", exc_info=True)
        dependencies['ui'].display_error(f"Could not open the cache: {e}")
        raise typer.Exit(code=1)
    dependencies['command_handler'] = CommandHandler(cache=dependencies['cache'], ui=dependencies['ui'])
    logger.debug("All dependencies initialized successfully.")
    return dependencies


def get_dependencies() -> Dict[str, Any]:
    global _dependencies
    if _dependencies is None:
        _dependencies = create_dependencies()
    return _dependencies


def reset_dependencies() -> None:
    global _dependencies
    _dependencies = None


def _handler() -> CommandHandler:
    return get_dependencies()['command_handler']


def run_command(coro: Coroutine[Any, Any, bool]) -> None:
    """Runs an async handler and turns a reported failure into exit code 1."""
    if not asyncio.run(coro):
        raise typer.Exit(code=1)

# --- Typer App Definition ---
app = typer.Typer(
    name="reactivecache",
    help="Inspect and manage a reactivecache cache directory.",
    add_completion=False,
)


@app.callback()
def main_callback(
    cache_dir: Annotated[
        Optional[Path],
        typer.Option("--cache-dir", "-d", help="Cache directory (overrides cache.directory).")
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log at DEBUG level.")] = False,
):
    """reactivecache command line."""
    if cache_dir is not None:
        set_config('cache.directory', str(cache_dir))
        reset_dependencies()
    if verbose:
        set_config('logging.level', 'DEBUG')
        reset_dependencies()


@app.command()
def read(key: Annotated[str, typer.Argument(help="Provider key.")]):
    """Print the value cached under KEY."""
    run_command(_handler().handle_read(key))


@app.command()
def replace(
    key: Annotated[str, typer.Argument(help="Provider key.")],
    value: Annotated[str, typer.Argument(help="Value to store.")],
    lifetime: Annotated[
        Optional[float], typer.Option("--lifetime", "-l", help="Lifetime before the value expires.")
    ] = None,
    unit: Annotated[
        str, typer.Option("--unit", "-u", help="Unit of --lifetime: milliseconds, seconds, minutes, hours, days.")
    ] = "seconds",
    expirable: Annotated[
        bool, typer.Option("--expirable/--no-expirable", help="Allow eviction when disk space runs out.")
    ] = True,
    encrypt: Annotated[bool, typer.Option("--encrypt", help="Mark the record as encrypted.")] = False,
    reply: Annotated[bool, typer.Option("--reply", help="Show where the data came from.")] = False,
):
    """Store VALUE under KEY, discarding whatever was cached before."""
    try:
        time_unit = TimeUnit[unit.upper()]
    except KeyError:
        raise typer.BadParameter(f"Unknown unit '{unit}'", param_hint="--unit")
    run_command(_handler().handle_replace(
        key, value, lifetime=lifetime, unit=time_unit, expirable=expirable, encrypt=encrypt, as_reply=reply,
    ))


@app.command()
def evict(key: Annotated[str, typer.Argument(help="Provider key.")]):
    """Evict the value cached under KEY."""
    run_command(_handler().handle_evict(key))


@app.command(name="evict-all")
def evict_all():
    """Evict every cached value."""
    run_command(_handler().handle_evict_all())


@app.command()
def keys():
    """List the cached keys."""
    if not _handler().handle_keys():
        raise typer.Exit(code=1)

# --- Main Execution Guard ---

def cli_entry_point():
    """Function to be called by the script entry point in pyproject.toml."""
    app()


if __name__ == "__main__":
    cli_entry_point()
