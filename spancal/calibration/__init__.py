"""Interactive monitor calibration.

This package orders monitors into a binding tree, drives the two-step
(Scale, Gap) adjustment for every pair, and solves each pair's scale factor
and relative placement.
"""

from .interactive import InteractionSurface, ScriptedSurface, run_overlay
from .manager import (
    CalibrationManager,
    CalibrationState,
    CalibrationStatus,
    run_calibration,
)
from .models import (
    BindingPair,
    BindOrientation,
    CalibrationResult,
    OverlayConfig,
    OverlayResult,
    OverlayStep,
)
from .overlay import Key, OverlaySession, OverlayState
from .planner import compute_calibration_order, determine_bind_orientation
from .solver import ScaleSolution, relative_position, segment_midpoints, solve_scale

__all__ = [
    # Models
    "BindingPair",
    "BindOrientation",
    "CalibrationResult",
    "OverlayConfig",
    "OverlayResult",
    "OverlayStep",
    # Planning
    "compute_calibration_order",
    "determine_bind_orientation",
    # Interaction
    "OverlaySession",
    "OverlayState",
    "Key",
    "InteractionSurface",
    "ScriptedSurface",
    "run_overlay",
    # Solving
    "ScaleSolution",
    "solve_scale",
    "segment_midpoints",
    "relative_position",
    # Main manager
    "CalibrationManager",
    "CalibrationState",
    "CalibrationStatus",
    "run_calibration",
]
