from pathlib import Path

import pytest

from workcache.core.cache_manager import CacheManager
from workcache.infrastructure.cache.preload_strategies import AdjacentIdStrategy, NoPreloadStrategy
from workcache.infrastructure.config import settings


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "cache:\n"
        "  dir: /srv/workcache\n"
        "  max_age: 600\n"
        "  max_size: 2048\n"
        "preload:\n"
        "  enabled: false\n"
        "logging:\n"
        "  level: debug\n",
        encoding="utf-8",
    )
    return path


def test_defaults_without_any_configuration(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    loaded = settings.load_cache_settings()
    assert loaded.cache_dir == tmp_path / ".workcache"
    assert loaded.max_age == 3600
    assert loaded.max_size == 100 * 1024 * 1024
    assert loaded.preload_enabled is True
    assert loaded.log_level == "INFO"
    assert loaded.log_file is None


def test_yaml_values_are_flattened(config_file):
    settings.load_configuration(config_file=config_file)
    assert settings.get_config("cache.max_age") == 600
    assert settings.get_config("preload.enabled") is False
    assert settings.get_config("missing.key", "fallback") == "fallback"


def test_yaml_feeds_cache_settings(config_file, monkeypatch):
    monkeypatch.setattr(settings, "DEFAULT_CONFIG_FILE", config_file)
    loaded = settings.load_cache_settings()
    assert loaded.cache_dir == Path("/srv/workcache")
    assert loaded.max_age == 600.0
    assert loaded.max_size == 2048
    assert loaded.preload_enabled is False
    assert loaded.log_level == "DEBUG"


def test_environment_overrides_yaml(config_file, monkeypatch):
    monkeypatch.setenv("WORKCACHE_CACHE_MAX_AGE", "120")
    monkeypatch.setenv("WORKCACHE_PRELOAD_ENABLED", "true")
    settings.load_configuration(config_file=config_file)
    assert settings.get_config("cache.max_age") == 120
    assert settings.get_config("preload.enabled") is True


def test_dotenv_file_is_loaded_without_overriding_environment(tmp_path, monkeypatch):
    env_file = tmp_path / ".env"
    env_file.write_text("WORKCACHE_CACHE_MAX_SIZE=4096\nWORKCACHE_CACHE_MAX_AGE=30\n", encoding="utf-8")
    monkeypatch.setenv("WORKCACHE_CACHE_MAX_AGE", "90")
    # load_dotenv writes into os.environ; register the key so monkeypatch cleans it up
    monkeypatch.setenv("WORKCACHE_CACHE_MAX_SIZE", "")
    monkeypatch.delenv("WORKCACHE_CACHE_MAX_SIZE")

    settings.load_configuration(env_file=env_file)

    assert settings.get_config("cache.max_size") == 4096
    assert settings.get_config("cache.max_age") == 90


def test_test_config_has_highest_priority(monkeypatch):
    monkeypatch.setenv("WORKCACHE_CACHE_MAX_AGE", "120")
    settings.set_config_for_testing({"cache.max_age": 5})
    assert settings.get_config("cache.max_age") == 5
    settings.clear_test_config()
    assert settings.get_config("cache.max_age") == 120


def test_invalid_yaml_is_ignored(tmp_path):
    bad = tmp_path / "config.yaml"
    bad.write_text("cache: [unclosed", encoding="utf-8")
    settings.load_configuration(config_file=bad)
    assert settings.get_config("cache.max_age") is None


def test_explicit_cache_dir_wins(config_file, monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "DEFAULT_CONFIG_FILE", config_file)
    loaded = settings.load_cache_settings(cache_dir=tmp_path / "explicit")
    assert loaded.cache_dir == tmp_path / "explicit"


def test_create_manager_picks_strategy(tmp_path):
    enabled = settings.CacheSettings(cache_dir=tmp_path, preload_window=3).create_manager()
    disabled = settings.CacheSettings(cache_dir=tmp_path, preload_enabled=False).create_manager()

    assert isinstance(enabled, CacheManager)
    assert isinstance(enabled.preloader.strategy, AdjacentIdStrategy)
    assert enabled.preloader.strategy.window == 3
    assert isinstance(disabled.preloader.strategy, NoPreloadStrategy)


def test_create_manager_overrides(tmp_path):
    manager = settings.CacheSettings(cache_dir=tmp_path, max_size=10).create_manager(max_size=99)
    assert manager.max_size == 99
    assert manager.cache_dir == tmp_path
