"""Pydantic configuration schemas for the calibration system.

This module defines the settings models that tune the interactive overlay,
the scale solver, the physical layout reconstruction and the export
formatter, providing:
- Type-safe configuration validation
- Default values and constraints
- Field descriptions for documentation
"""

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class LogLevel(str, Enum):
    """Logging level enumeration."""

    CRITICAL = "CRITICAL"
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"
    DEBUG = "DEBUG"


class BaseConfig(BaseModel):
    """Base configuration class with common functionality."""

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
        use_enum_values=True,
    )


# =============================================================================
# Calibration Settings
# =============================================================================


class OverlaySettings(BaseConfig):
    """Interactive adjustment overlay configuration."""

    hit_tolerance: int = Field(
        default=20,
        ge=1,
        le=200,
        description="Distance in pixels within which a click selects a reference line",
    )
    nudge_step: int = Field(
        default=1, ge=1, le=50, description="Pixels moved per arrow-key press"
    )
    near_fraction: float = Field(
        default=0.25,
        gt=0.0,
        lt=1.0,
        description="Initial near line position as a fraction of the smaller monitor",
    )
    far_fraction: float = Field(
        default=0.75,
        gt=0.0,
        lt=1.0,
        description="Initial far line position as a fraction of the smaller monitor",
    )
    handoff_timeout: Optional[float] = Field(
        default=None,
        gt=0.0,
        description=(
            "Seconds to wait for the surface to finish (None waits forever); "
            "on expiry the session is abandoned and the surface must return"
        ),
    )

    @model_validator(mode="after")
    def validate_fractions(self):
        """Near line must start before the far line."""
        if self.near_fraction >= self.far_fraction:
            raise ValueError("near_fraction must be smaller than far_fraction")
        return self


class SolverSettings(BaseConfig):
    """Scale and offset solver configuration."""

    degenerate_span: float = Field(
        default=1.0,
        ge=0.0,
        description="Parent line separation at or below which the scale is not updated",
    )


class LayoutSettings(BaseConfig):
    """Physical layout reconstruction configuration."""

    canvas_width_in: float = Field(
        default=144.0, gt=0.0, description="Export canvas width in inches"
    )
    canvas_height_in: float = Field(
        default=96.0, gt=0.0, description="Export canvas height in inches"
    )
    max_relaxation_rounds: Optional[int] = Field(
        default=None,
        ge=1,
        description="Cap on ppi relaxation rounds (None derives it from the edge count)",
    )


class ExportSettings(BaseConfig):
    """Export formatter configuration."""

    schema_version: int = Field(
        default=1, ge=1, description="Generic calibration document version"
    )
    layout_version: int = Field(
        default=1, ge=1, description="Layout tool document version"
    )
    position_decimals: int = Field(
        default=4, ge=0, le=10, description="Decimals kept for placement inches"
    )
    diagonal_decimals: int = Field(
        default=2, ge=0, le=10, description="Decimals kept for diagonal inches"
    )
    layout_url_base: str = Field(
        default="https://spanright.com/#layout=",
        description="Base URL the encoded layout document is appended to",
    )


class LoggingSettings(BaseConfig):
    """Logging configuration."""

    level: LogLevel = Field(default=LogLevel.INFO, description="Global logging level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log message format",
    )
    datefmt: str = Field(
        default="%Y-%m-%d %H:%M:%S", description="Date format for log messages"
    )
    log_dir: Path = Field(default=Path("logs"), description="Log files directory")
    file_logging: bool = Field(default=False, description="Enable file logging")
    filename: str = Field(default="spancal.log", description="Log file name")
    max_bytes: int = Field(
        default=5 * 1024 * 1024,  # 5MB
        ge=1024,
        description="Maximum log file size in bytes",
    )
    backup_count: int = Field(
        default=3, ge=1, le=20, description="Number of backup log files to keep"
    )


class AppConfig(BaseConfig):
    """Complete application configuration."""

    overlay: OverlaySettings = Field(default_factory=OverlaySettings)
    solver: SolverSettings = Field(default_factory=SolverSettings)
    layout: LayoutSettings = Field(default_factory=LayoutSettings)
    export: ExportSettings = Field(default_factory=ExportSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


def create_default_config() -> AppConfig:
    """Create the default application configuration."""
    return AppConfig()
