"""Calibration manager for coordinating the complete calibration process.

This module provides the CalibrationManager class that walks the binding
order pair by pair, runs the Scale and Gap steps on the interaction
surface, chains scale factors along the binding tree, and assembles the
per-monitor calibration results.
"""

import logging
import threading
import time
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional, Sequence

from ..config.schemas import AppConfig
from ..errors import (
    CalibrationError,
    CalibrationInProgressError,
    DuplicateMonitorError,
    InsufficientMonitorsError,
    InteractionCancelledError,
)
from ..monitors.models import Monitor, MonitorRect
from .interactive import InteractionSurface, run_overlay
from .models import (
    BindingPair,
    CalibrationResult,
    OverlayConfig,
    OverlayStep,
)
from .planner import compute_calibration_order, determine_bind_orientation
from .solver import relative_position, segment_midpoints, solve_scale

logger = logging.getLogger(__name__)

# Only one overlay may own the display area at a time
_session_lock = threading.Lock()


class CalibrationState(Enum):
    """Calibration process states."""

    IDLE = "idle"
    SCALE_STEP = "scale_step"
    GAP_STEP = "gap_step"
    COMPLETE = "complete"
    CANCELLED = "cancelled"
    ERROR = "error"


@dataclass
class CalibrationStatus:
    """Current calibration status."""

    state: CalibrationState
    progress: float  # 0.0 to 1.0
    message: str
    pair: Optional[BindingPair] = None
    errors: list[str] = field(default_factory=list)


def normalized_rects(monitors: Sequence[Monitor]) -> tuple[MonitorRect, ...]:
    """Monitor rectangles shifted so the virtual desktop starts at (0, 0)."""
    origin_x = min(m.position_x for m in monitors)
    origin_y = min(m.position_y for m in monitors)
    return tuple(m.rect.translated(-origin_x, -origin_y) for m in monitors)


class CalibrationManager:
    """Runs the interactive calibration of a set of monitors.

    The run is strictly sequential: a pair's Scale and Gap steps both reach
    a terminal state before the next pair starts. Cancelling any step aborts
    the whole run and no results are returned.
    """

    def __init__(
        self,
        surface: InteractionSurface,
        config: Optional[AppConfig] = None,
    ):
        """Initialize calibration manager.

        Args:
            surface: Interaction surface that runs the overlay steps
            config: Application configuration, defaults when None
        """
        self.surface = surface
        self.config = config or AppConfig()

        self.status = CalibrationStatus(
            state=CalibrationState.IDLE, progress=0.0, message="Ready for calibration"
        )
        self.status_callbacks: list[Callable[[CalibrationStatus], None]] = []
        self.session_start_time: Optional[float] = None

    def add_status_callback(self, callback: Callable[[CalibrationStatus], None]) -> None:
        """Add a callback for status updates."""
        self.status_callbacks.append(callback)

    def remove_status_callback(
        self, callback: Callable[[CalibrationStatus], None]
    ) -> None:
        """Remove a status update callback."""
        if callback in self.status_callbacks:
            self.status_callbacks.remove(callback)

    def _update_status(
        self,
        state: CalibrationState,
        message: str,
        progress: Optional[float] = None,
        pair: Optional[BindingPair] = None,
        errors: Optional[list[str]] = None,
    ) -> None:
        """Update calibration status and notify callbacks."""
        self.status.state = state
        self.status.message = message
        self.status.pair = pair
        if progress is not None:
            self.status.progress = max(0.0, min(1.0, progress))
        self.status.errors = list(errors or [])

        for callback in self.status_callbacks:
            try:
                callback(self.status)
            except Exception as e:
                logger.warning(f"Status callback failed: {e}")

        logger.debug(f"Calibration status: {state.value} - {message}")

    def run_calibration(self, monitors: Sequence[Monitor]) -> list[CalibrationResult]:
        """Calibrate every non-primary monitor against the binding tree.

        Args:
            monitors: Monitors with virtual-desktop placement; any manual
                physical size overrides must already be applied

        Returns:
            One result per non-primary monitor, in binding order

        Raises:
            InsufficientMonitorsError: Fewer than two monitors were given
            DuplicateMonitorError: Two monitors share an id
            CalibrationInProgressError: Another session is already running
            InteractionCancelledError: The user cancelled any step
            InteractionSurfaceFailure: The interaction surface failed
        """
        if len(monitors) < 2:
            logger.error(f"Cannot calibrate {len(monitors)} monitor(s)")
            raise InsufficientMonitorsError(len(monitors))

        counts = Counter(m.id for m in monitors)
        duplicates = sorted(monitor_id for monitor_id, n in counts.items() if n > 1)
        if duplicates:
            logger.error(f"Duplicate monitor ids: {duplicates}")
            raise DuplicateMonitorError(duplicates)

        if not _session_lock.acquire(blocking=False):
            raise CalibrationInProgressError("A calibration session is already running")

        try:
            self.session_start_time = time.time()
            results = self._calibrate_pairs(monitors)
        except InteractionCancelledError as e:
            logger.info(f"Calibration cancelled: {e}")
            self._update_status(CalibrationState.CANCELLED, str(e), errors=[str(e)])
            raise
        except CalibrationError as e:
            logger.error(f"Calibration failed: {e}")
            self._update_status(CalibrationState.ERROR, str(e), errors=[str(e)])
            raise
        finally:
            _session_lock.release()

        elapsed = time.time() - self.session_start_time
        self._update_status(
            CalibrationState.COMPLETE,
            f"Calibrated {len(results)} monitor pair(s)",
            progress=1.0,
        )
        logger.info(f"Calibration complete: {len(results)} pair(s) in {elapsed:.1f}s")
        return results

    def _calibrate_pairs(self, monitors: Sequence[Monitor]) -> list[CalibrationResult]:
        pairs = compute_calibration_order(monitors)
        rects = normalized_rects(monitors)
        scales = [1.0] * len(monitors)
        results: list[CalibrationResult] = []

        logger.info(f"Calibrating {len(monitors)} monitors in {len(pairs)} pair(s)")

        for number, pair in enumerate(pairs):
            result = self._calibrate_pair(monitors, rects, scales, pair, number, len(pairs))
            scales[pair.child] = result.scale
            results.append(result)

        return results

    def _calibrate_pair(
        self,
        monitors: Sequence[Monitor],
        rects: tuple[MonitorRect, ...],
        scales: list[float],
        pair: BindingPair,
        number: int,
        total: int,
    ) -> CalibrationResult:
        child, parent = monitors[pair.child], monitors[pair.parent]
        orientation = determine_bind_orientation(child, parent)
        parent_scale = scales[pair.parent]

        self._update_status(
            CalibrationState.SCALE_STEP,
            f"Match line heights between {child.display_name} and {parent.display_name}",
            progress=number / total,
            pair=pair,
        )
        scale_result = run_overlay(
            self.surface,
            OverlayConfig(
                step=OverlayStep.SCALE,
                child_index=pair.child,
                parent_index=pair.parent,
                orientation=orientation,
                monitors=rects,
            ),
            self.config.overlay,
        )
        if scale_result.cancelled:
            raise InteractionCancelledError(OverlayStep.SCALE.value, pair.as_tuple())

        solution = solve_scale(
            scale_result.segments,
            orientation,
            rects[pair.child],
            rects[pair.parent],
            parent_scale,
            self.config.solver.degenerate_span,
        )

        self._update_status(
            CalibrationState.GAP_STEP,
            f"Adjust the gap between {child.display_name} and {parent.display_name}",
            progress=(number + 0.5) / total,
            pair=pair,
        )
        gap_result = run_overlay(
            self.surface,
            OverlayConfig(
                step=OverlayStep.GAP,
                child_index=pair.child,
                parent_index=pair.parent,
                orientation=orientation,
                monitors=rects,
                midpoints=segment_midpoints(scale_result.segments),
            ),
            self.config.overlay,
        )
        if gap_result.cancelled:
            raise InteractionCancelledError(OverlayStep.GAP.value, pair.as_tuple())

        relative_x, relative_y = relative_position(
            gap_result.gap,
            orientation,
            child,
            parent,
            solution.scale,
            parent_scale,
            solution.relative_offset,
        )

        logger.info(
            f"Monitor {child.id} bound to {parent.id} ({orientation.value}): "
            f"scale {solution.scale:.4f}, gap {gap_result.gap}px"
        )

        return CalibrationResult(
            monitor_id=child.id,
            scale=solution.scale,
            relative_x=relative_x,
            relative_y=relative_y,
            gap=gap_result.gap,
            bound_to=parent.id,
            bind_orientation=orientation,
            align_offset_unbound=float(solution.align_offset_child),
            align_offset_bound=float(solution.align_offset_parent),
        )


def run_calibration(
    monitors: Sequence[Monitor],
    surface: InteractionSurface,
    config: Optional[AppConfig] = None,
) -> list[CalibrationResult]:
    """Convenience wrapper running a full calibration with a fresh manager."""
    return CalibrationManager(surface, config).run_calibration(monitors)
