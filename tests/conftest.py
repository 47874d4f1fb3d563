import logging
import os

import pytest
from typer.testing import CliRunner
from pathlib import Path

from reactivecache import main as cli_main
from reactivecache.core.reactive_cache import ReactiveCache, ReactiveCacheBuilder
from reactivecache.domain.errors import LoaderFailed
from reactivecache.domain.interfaces.processor import ProcessorProviders
from reactivecache.infrastructure.cache.disk_persistence import DiskPersistence
from reactivecache.infrastructure.cache.processor import ProcessorProvidersImpl
from reactivecache.infrastructure.cache.two_layers_cache import TwoLayersCache
from reactivecache.infrastructure.config import settings


class RecordingProcessor(ProcessorProviders):
    """Engine double: records every config and answers as scripted.

    With run_loader set it behaves like a cache that never holds anything:
    the loader runs and its failure is reported as LoaderFailed.
    """

    def __init__(self):
        self.configs = []
        self.result = "cached value"
        self.error = None
        self.run_loader = False
        self.emit_nothing = False
        self.evict_all_calls = 0

    async def process(self, config):
        self.configs.append(config)
        if self.error is not None:
            raise self.error
        if self.emit_nothing:
            return
        if self.run_loader:
            try:
                value = await config.loader.load()
            except Exception as e:
                raise LoaderFailed(config.provider_key, e) from e
            yield value
            return
        yield self.result

    async def evict_all(self):
        self.evict_all_calls += 1

    @property
    def last_config(self):
        return self.configs[-1]


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start: int = 1_000_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, millis: int) -> None:
        self.now += millis


@pytest.fixture
def recording_processor():
    return RecordingProcessor()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def persistence(tmp_path: Path):
    store = DiskPersistence(tmp_path / "records", max_mb=10)
    yield store
    store.close()


@pytest.fixture
def two_layers_cache(persistence: DiskPersistence, clock: FakeClock):
    return TwoLayersCache(persistence, clock=clock)


@pytest.fixture
def engine(two_layers_cache: TwoLayersCache):
    """Reference engine over a temporary directory with a controllable clock."""
    return ProcessorProvidersImpl(two_layers_cache)


@pytest.fixture
def reactive_cache(engine: ProcessorProvidersImpl) -> ReactiveCache:
    return ReactiveCache(engine)


@pytest.fixture
def disk_cache(tmp_path: Path) -> ReactiveCache:
    """ReactiveCache built the way applications build it."""
    return ReactiveCacheBuilder().using(tmp_path / "reactivecache")


@pytest.fixture(scope="session")
def runner():
    """Provides a Typer CliRunner instance."""
    return CliRunner()


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    return tmp_path / "cli-cache"


@pytest.fixture
def mock_console_display(mocker):
    """Mocks the ConsoleDisplay created by the CLI to capture output easily."""
    mock = mocker.MagicMock()
    mocker.patch('reactivecache.main.ConsoleDisplay', return_value=mock)
    return mock


@pytest.fixture(autouse=True)
def isolated_configuration(monkeypatch, tmp_path: Path):
    """Keep user config files, REACTIVECACHE_* variables and CLI state out of tests."""
    for name in list(os.environ):
        if name.startswith(settings.ENV_PREFIX):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    root_logger = logging.getLogger()
    handlers, level = root_logger.handlers[:], root_logger.level
    monkeypatch.setattr(settings, "DEFAULT_CONFIG_FILE", tmp_path / "config.yaml")
    settings.reset_configuration()
    settings.clear_test_config()
    cli_main.reset_dependencies()
    yield
    settings.reset_configuration()
    settings.clear_test_config()
    cli_main.reset_dependencies()
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)
