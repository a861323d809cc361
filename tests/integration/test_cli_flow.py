import asyncio
import logging
from pathlib import Path

import pytest
from typer.testing import CliRunner

from workcache.core.cache_manager import CacheManager
from workcache.main import app

# These fixtures are defined in tests/conftest.py:
# runner: CliRunner
# isolated_configuration: keeps WORKCACHE_* variables and config files out


@pytest.fixture(autouse=True)
def restore_root_logging():
    """setup_logging replaces root handlers with ones bound to the runner's streams."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    return tmp_path / "cache"


def populate(cache_dir: Path, entries):
    async def _populate():
        async with CacheManager(cache_dir) as cache:
            for key, value, category in entries:
                await cache.set(key, value, category)
    asyncio.run(_populate())


def test_stats_on_fresh_cache(runner: CliRunner, cache_dir: Path):
    result = runner.invoke(app, ["--cache-dir", str(cache_dir), "stats"])
    assert result.exit_code == 0, result.output
    assert "Entries" in result.output
    assert (cache_dir / "workitems").is_dir()
    assert (cache_dir / "metadata" / "access.log").exists()


def test_get_shows_cached_value(runner: CliRunner, cache_dir: Path):
    populate(cache_dir, [("42", {"id": 42, "title": "Fix login"}, "workitems")])

    result = runner.invoke(app, ["--cache-dir", str(cache_dir), "get", "42", "--category", "workitems"])

    assert result.exit_code == 0, result.output
    assert "Fix login" in result.output


def test_get_miss_shows_warning(runner: CliRunner, cache_dir: Path):
    result = runner.invoke(app, ["--cache-dir", str(cache_dir), "get", "nope"])
    assert result.exit_code == 0, result.output
    assert "No live entry" in result.output


def test_get_unknown_category_is_a_miss(runner: CliRunner, cache_dir: Path):
    result = runner.invoke(app, ["--cache-dir", str(cache_dir), "get", "42", "--category", "bogus"])
    assert result.exit_code == 0, result.output
    assert "No live entry" in result.output


def test_clear_with_yes_flag(runner: CliRunner, cache_dir: Path):
    populate(cache_dir, [("a", "1", "general"), ("b", "2", "queries")])

    result = runner.invoke(app, ["--cache-dir", str(cache_dir), "clear", "--yes"])

    assert result.exit_code == 0, result.output
    assert "Cache cleared" in result.output
    assert list((cache_dir / "general").iterdir()) == []
    assert list((cache_dir / "queries").iterdir()) == []


def test_clear_declined_keeps_entries(runner: CliRunner, cache_dir: Path):
    populate(cache_dir, [("a", "1", "general")])

    result = runner.invoke(app, ["--cache-dir", str(cache_dir), "clear"], input="n\n")

    assert result.exit_code == 0, result.output
    assert "Clear cancelled" in result.output
    assert len(list((cache_dir / "general").iterdir())) == 1


def test_pending_lists_uncached_neighbours(runner: CliRunner, cache_dir: Path):
    populate(cache_dir, [("11", {"id": 11}, "workitems")])

    result = runner.invoke(app, ["--cache-dir", str(cache_dir), "pending", "10"])

    assert result.exit_code == 0, result.output
    rows = {line.strip() for line in result.stdout.splitlines()}
    assert {"8", "9", "12"} <= rows
    assert "11" not in rows


def test_prune_reports_counts(runner: CliRunner, cache_dir: Path):
    populate(cache_dir, [("a", "1", "general")])
    result = runner.invoke(app, ["--cache-dir", str(cache_dir), "prune"])
    assert result.exit_code == 0, result.output
    assert "Removed 0 expired and 0 evicted entries." in result.output


def test_cache_dir_from_environment(runner: CliRunner, cache_dir: Path, monkeypatch):
    monkeypatch.setenv("WORKCACHE_CACHE_DIR", str(cache_dir))
    result = runner.invoke(app, ["stats"])
    assert result.exit_code == 0, result.output
    assert (cache_dir / "metadata").is_dir()
