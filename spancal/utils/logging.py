"""Logging configuration utilities for the calibration tools."""

import logging
import logging.config
import logging.handlers
import os
from pathlib import Path
from typing import Optional

import yaml

from ..config.schemas import LoggingSettings


def setup_logging(
    config_path: Optional[str] = None,
    default_level: Optional[int] = None,
    env_key: str = "SPANCAL_LOG_CFG",
    settings: Optional[LoggingSettings] = None,
    log_dir: Optional[Path] = None,
) -> None:
    """Setup logging configuration.

    A YAML ``dictConfig`` file is used when one is found, otherwise a console
    handler (and optionally a rotating file handler) is installed.

    Args:
        config_path: Path to a YAML logging configuration file
        default_level: Level used by the default configuration; overrides
            ``settings.level`` when given
        env_key: Environment variable that may name the configuration file
        settings: Logging settings for the default configuration
        log_dir: Directory for log files (defaults to ``settings.log_dir``)
    """
    settings = settings or LoggingSettings()

    if config_path is None:
        config_path = os.getenv(env_key)

    if config_path is not None and Path(config_path).exists():
        try:
            with open(config_path, encoding="utf-8") as config_file:
                config = yaml.safe_load(config_file)
            logging.config.dictConfig(config)
            return
        except (OSError, yaml.YAMLError, ValueError, TypeError) as e:
            print(f"Error loading logging configuration from {config_path}: {e}")
            print("Using default logging configuration")

    if default_level is None:
        level_name = getattr(settings.level, "value", settings.level)
        default_level = getattr(logging, str(level_name).upper(), logging.INFO)

    _setup_default_logging(default_level, settings, log_dir)


def _setup_default_logging(
    level: int, settings: LoggingSettings, log_dir: Optional[Path]
) -> None:
    """Setup default logging with a console and an optional file handler."""
    formatter = logging.Formatter(settings.format, datefmt=settings.datefmt)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Avoid duplicate output when called more than once
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
    root_logger.addHandler(console_handler)

    if settings.file_logging:
        logs_dir = Path(log_dir or settings.log_dir)
        logs_dir.mkdir(exist_ok=True, parents=True)
        file_handler = logging.handlers.RotatingFileHandler(
            logs_dir / settings.filename,
            maxBytes=settings.max_bytes,
            backupCount=settings.backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
