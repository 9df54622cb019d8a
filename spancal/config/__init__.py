"""Configuration for the calibration system."""

from .loader import (
    ConfigurationError,
    FileLoadError,
    FormatError,
    load_config,
    load_environment,
    load_file,
)
from .schemas import (
    AppConfig,
    ExportSettings,
    LayoutSettings,
    LoggingSettings,
    LogLevel,
    OverlaySettings,
    SolverSettings,
    create_default_config,
)

__all__ = [
    # Schemas
    "AppConfig",
    "OverlaySettings",
    "SolverSettings",
    "LayoutSettings",
    "ExportSettings",
    "LoggingSettings",
    "LogLevel",
    "create_default_config",
    # Loading
    "load_config",
    "load_file",
    "load_environment",
    "ConfigurationError",
    "FileLoadError",
    "FormatError",
]
