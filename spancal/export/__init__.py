"""Export of calibration results to serializable documents."""

from .formatter import (
    aspect_ratio,
    build_config,
    build_layout,
    build_layout_url,
    export_json,
    format_resolution,
    layout_json,
)
from .schemas import (
    CalibratedMonitor,
    CalibrationDocument,
    LayoutDocument,
    LayoutMonitor,
)

__all__ = [
    # Documents
    "CalibrationDocument",
    "CalibratedMonitor",
    "LayoutDocument",
    "LayoutMonitor",
    # Builders
    "build_config",
    "export_json",
    "build_layout",
    "layout_json",
    "build_layout_url",
    # Helpers
    "aspect_ratio",
    "format_resolution",
]
