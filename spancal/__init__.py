"""spancal: multi-monitor physical layout calibration.

Guides the user through a short per-pair adjustment to derive the scale
ratio, alignment and seam gap between adjacent displays, then reconstructs
the absolute physical layout for downstream layout tools.
"""

from .calibration import (
    CalibrationManager,
    CalibrationResult,
    ScriptedSurface,
    run_calibration,
)
from .config import AppConfig, load_config
from .errors import (
    CalibrationError,
    CalibrationInProgressError,
    DuplicateMonitorError,
    InsufficientMonitorsError,
    InteractionCancelledError,
    InteractionSurfaceFailure,
    LayoutReconstructionError,
    SerializationFailure,
)
from .export import build_config, build_layout, export_json, layout_json
from .layout import PhysicalPlacement, reconstruct_layout
from .monitors import Monitor, SizeOverrides, discover_monitors

__version__ = "0.1.0"

__all__ = [
    "Monitor",
    "SizeOverrides",
    "discover_monitors",
    "CalibrationManager",
    "CalibrationResult",
    "ScriptedSurface",
    "run_calibration",
    "PhysicalPlacement",
    "reconstruct_layout",
    "build_config",
    "build_layout",
    "export_json",
    "layout_json",
    "AppConfig",
    "load_config",
    "CalibrationError",
    "CalibrationInProgressError",
    "DuplicateMonitorError",
    "InsufficientMonitorsError",
    "InteractionCancelledError",
    "InteractionSurfaceFailure",
    "LayoutReconstructionError",
    "SerializationFailure",
]
