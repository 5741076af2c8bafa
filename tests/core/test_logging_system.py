"""Tests for logging setup."""

import logging
import logging.handlers

import pytest
import yaml

from aircore.core import logging_system
from aircore.core.logging_system import (
    DEFAULT_CONFIG_PATH,
    ROOT_LOGGER_NAME,
    _strip_file_handlers,
    get_logger,
    initialize_logging,
)


@pytest.fixture(autouse=True)
def restore_logging():
    """Undo logger changes made by initialize_logging."""
    root = logging.getLogger()
    app = logging.getLogger(ROOT_LOGGER_NAME)
    saved = (root.level, list(root.handlers), app.level, list(app.handlers), app.propagate)
    yield
    for logger in (root, app):
        for handler in logger.handlers:
            if handler not in saved[1] and handler not in saved[3]:
                handler.close()
    root.setLevel(saved[0])
    root.handlers[:] = saved[1]
    app.setLevel(saved[2])
    app.handlers[:] = saved[3]
    app.propagate = saved[4]


def file_handlers(logger):
    return [h for h in logger.handlers if isinstance(h, logging.FileHandler)]


class TestInitializeLogging:
    """Test logging configuration."""

    def test_console_only_by_default(self):
        initialize_logging()

        app = logging.getLogger(ROOT_LOGGER_NAME)
        assert app.level == logging.DEBUG
        assert app.handlers
        assert file_handlers(app) == []

    def test_platform_dir_adds_file_handler(self, tmp_path, monkeypatch):
        monkeypatch.setattr(logging_system, "get_platform_log_dir", lambda: tmp_path / "logs")
        initialize_logging(use_platform_dir=True)

        handlers = file_handlers(logging.getLogger(ROOT_LOGGER_NAME))
        assert len(handlers) == 1
        assert handlers[0].baseFilename == str(tmp_path / "logs" / "aircore.log")

    def test_level_override(self):
        initialize_logging(level=logging.WARNING)
        assert logging.getLogger(ROOT_LOGGER_NAME).level == logging.WARNING

    def test_missing_config_falls_back(self, tmp_path):
        initialize_logging(config_path=tmp_path / "missing.yaml", level=logging.INFO)

        app = logging.getLogger(ROOT_LOGGER_NAME)
        assert app.level == logging.INFO
        assert file_handlers(app) == []


class TestStripFileHandlers:
    """Test removal of file handlers from a dictConfig."""

    def test_bundled_config(self):
        with open(DEFAULT_CONFIG_PATH, encoding="utf-8") as f:
            config = yaml.safe_load(f)

        _strip_file_handlers(config)

        assert set(config["handlers"]) == {"console"}
        assert config["loggers"]["aircore"]["handlers"] == ["console"]
        assert config["root"]["handlers"] == ["console"]

    def test_config_without_file_handlers(self):
        config = {"version": 1, "handlers": {"console": {"class": "logging.StreamHandler"}}}
        _strip_file_handlers(config)
        assert "console" in config["handlers"]


class TestGetLogger:
    """Test module loggers."""

    def test_module_logger_is_under_package(self):
        logger = get_logger("aircore.simulation.flight_simulation")
        assert logger.name.startswith(ROOT_LOGGER_NAME + ".")
