import os
import pytest
from pathlib import Path
from typer.testing import CliRunner

from workcache.core.cache_manager import CacheManager
from workcache.domain.interfaces.clock import Clock
from workcache.infrastructure.cache.entry_store import EntryStore
from workcache.infrastructure.config import settings
from workcache.infrastructure.filesystem.memory_fs import MemoryFileSystem

CACHE_ROOT = Path("/cache")
START_TIME = 1_700_000_000.0


class FakeClock(Clock):
    """A clock that only moves when told to."""

    def __init__(self, now: float = START_TIME):
        self._now = now

    def now(self) -> float:
        return self._now

    def advance(self, seconds: float) -> None:
        self._now += seconds


@pytest.fixture(scope="session")
def runner():
    """Provides a Typer CliRunner instance."""
    return CliRunner()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def memory_fs(clock):
    return MemoryFileSystem(clock=clock)


@pytest.fixture
async def store(memory_fs, clock):
    """An initialized EntryStore with a one hour default TTL."""
    entry_store = EntryStore(CACHE_ROOT, memory_fs, clock, default_ttl=3600)
    await entry_store.init()
    return entry_store


@pytest.fixture
async def manager(memory_fs, clock):
    """An initialized CacheManager on the in-memory file system."""
    cache = CacheManager(CACHE_ROOT, max_age=3600, max_size=10_000, file_system=memory_fs, clock=clock)
    await cache.init()
    yield cache
    await cache.preloader.shutdown(timeout=1)


@pytest.fixture(autouse=True)
def isolated_configuration(monkeypatch, tmp_path):
    """Keeps tests away from the user's config file, .env and WORKCACHE_* variables."""
    for name in list(os.environ):
        if name.startswith(settings.ENV_PREFIX):
            monkeypatch.delenv(name)
    monkeypatch.setattr(settings, "DEFAULT_CONFIG_FILE", tmp_path / "no-config.yaml")
    monkeypatch.setattr(settings, "find_dotenv_path", lambda: None)
    settings.reset_configuration()
    settings.clear_test_config()
    yield
    settings.reset_configuration()
    settings.clear_test_config()
