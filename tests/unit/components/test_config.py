"""
Unit tests for configuration loading.
"""

import logging

import pytest
from pagedom import config as config_module
from pagedom.config import Config, configure_logging, get_config, load_config, reset_config


@pytest.fixture
def config_home(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    for key in ("PAGEDOM_VIEWPORT_WIDTH", "PAGEDOM_VIEWPORT_HEIGHT", "PAGEDOM_TRACK_ATTRIBUTES",
                "PAGEDOM_ROOT_MARGIN", "PAGEDOM_LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)
    (tmp_path / "pagedom").mkdir()
    return tmp_path / "pagedom"


class TestLoadConfig:
    def test_defaults(self, config_home):
        config = load_config()
        assert config.viewport.width == 1024
        assert config.viewport.height == 768
        assert config.collection.track_attributes is True
        assert config.observer.root_margin == "0px"

    def test_toml_file(self, config_home):
        (config_home / "config.toml").write_text(
            '[viewport]\nwidth = 800\nheight = 600\n'
            '[collection]\ntrack_attributes = false\n'
            '[observer]\nroot_margin = "50px"\n'
            '[logging]\nlevel = "debug"\n'
        )
        config = load_config()
        assert (config.viewport.width, config.viewport.height) == (800, 600)
        assert config.collection.track_attributes is False
        assert config.observer.root_margin == "50px"
        assert config.logging.level == "DEBUG"

    def test_broken_file_falls_back_to_defaults(self, config_home, caplog):
        (config_home / "config.toml").write_text("[viewport\nwidth = ")
        with caplog.at_level(logging.WARNING, logger="pagedom.config"):
            config = load_config()
        assert config.viewport.width == 1024
        assert "Ignoring unreadable config file" in caplog.text

    def test_env_overrides_file(self, config_home, monkeypatch):
        (config_home / "config.toml").write_text("[viewport]\nwidth = 800\n")
        monkeypatch.setenv("PAGEDOM_VIEWPORT_WIDTH", "320")
        monkeypatch.setenv("PAGEDOM_TRACK_ATTRIBUTES", "no")
        monkeypatch.setenv("PAGEDOM_ROOT_MARGIN", "5px 0")
        config = load_config()
        assert config.viewport.width == 320
        assert config.collection.track_attributes is False
        assert config.observer.root_margin == "5px 0"

    def test_bad_env_value_is_ignored(self, config_home, monkeypatch):
        monkeypatch.setenv("PAGEDOM_VIEWPORT_HEIGHT", "tall")
        assert load_config().viewport.height == 768


class TestGlobalConfig:
    def test_cached_until_reset(self, config_home, monkeypatch):
        reset_config()
        try:
            first = get_config()
            assert get_config() is first
            monkeypatch.setenv("PAGEDOM_VIEWPORT_WIDTH", "500")
            reset_config()
            assert get_config().viewport.width == 500
        finally:
            reset_config()
        assert config_module._config is None

    def test_configure_logging(self):
        config = Config()
        config.logging.level = "DEBUG"
        configure_logging(config)
        try:
            assert logging.getLogger("pagedom").level == logging.DEBUG
        finally:
            logging.getLogger("pagedom").setLevel(logging.NOTSET)

    def test_configure_logging_unknown_level(self):
        config = Config()
        config.logging.level = "chatty"
        configure_logging(config)
        try:
            assert logging.getLogger("pagedom").level == logging.WARNING
        finally:
            logging.getLogger("pagedom").setLevel(logging.NOTSET)
