"""Logging setup for AirCore.

Every module obtains its logger through get_logger(__name__). The
application entry point calls initialize_logging() once, which applies a
YAML dictConfig file (the bundled config/logging.yaml by default) or a
plain console configuration when no file is available.

Typical usage:
    from aircore.core.logging_system import get_logger, initialize_logging

    initialize_logging(use_platform_dir=True)
    logger = get_logger(__name__)
    logger.info("Simulation ready")
"""

import logging
import logging.config
from pathlib import Path
from typing import Any

import yaml

ROOT_LOGGER_NAME = "aircore"
DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config" / "logging.yaml"
DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def get_platform_log_dir() -> Path:
    """Get the per-user log directory.

    Returns:
        Path to ~/.aircore/logs (not created).
    """
    return Path.home() / ".aircore" / "logs"


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a module.

    Args:
        name: Logger name, normally the module's __name__.

    Returns:
        Standard library logger.
    """
    return logging.getLogger(name)


def _redirect_file_handlers(config: dict[str, Any], log_dir: Path) -> None:
    """Rewrite relative file handler paths so they land in log_dir."""
    for handler in config.get("handlers", {}).values():
        filename = handler.get("filename")
        if filename and not Path(filename).is_absolute():
            handler["filename"] = str(log_dir / Path(filename).name)


def initialize_logging(
    config_path: str | Path | None = None,
    use_platform_dir: bool = False,
    level: int | None = None,
) -> None:
    """Configure logging for the application.

    Args:
        config_path: YAML dictConfig file. Defaults to the bundled logging.yaml.
        use_platform_dir: Write file handlers under ~/.aircore/logs. When False,
            file handlers are dropped and only console output is configured.
        level: Optional level override applied to the aircore logger.
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
    config: dict[str, Any] | None = None

    if path.exists():
        with open(path, encoding="utf-8") as f:
            config = yaml.safe_load(f)

    if config:
        if use_platform_dir:
            log_dir = get_platform_log_dir()
            log_dir.mkdir(parents=True, exist_ok=True)
            _redirect_file_handlers(config, log_dir)
        else:
            _strip_file_handlers(config)
        logging.config.dictConfig(config)
    else:
        logging.basicConfig(level=logging.INFO, format=DEFAULT_FORMAT)

    if level is not None:
        logging.getLogger(ROOT_LOGGER_NAME).setLevel(level)

    get_logger(__name__).debug("Logging initialized from %s", path if config else "defaults")


def _strip_file_handlers(config: dict[str, Any]) -> None:
    """Remove file handlers and every reference to them."""
    handlers = config.get("handlers", {})
    file_handlers = {name for name, spec in handlers.items() if "filename" in spec}
    for name in file_handlers:
        del handlers[name]

    sections = list(config.get("loggers", {}).values())
    if "root" in config:
        sections.append(config["root"])
    for section in sections:
        if "handlers" in section:
            section["handlers"] = [h for h in section["handlers"] if h not in file_handlers]
