"""Physical layout reconstruction.

Converts finished calibration results into the physical placement of every
monitor, in inches:

1. Pixel density propagation: monitors with a known physical size seed
   their ppi, which then spreads across calibration edges using the solved
   scale ratios until nothing changes.
2. Placement: a reference monitor sits at the origin and every calibrated
   monitor is placed against its already placed parent, in binding order.
3. Centering: the whole layout is translated so its bounding box is
   centered on the export canvas.

All functions are pure; the same inputs always give identical placements.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from ..calibration.models import CalibrationResult
from ..config.schemas import LayoutSettings
from ..errors import LayoutReconstructionError
from ..monitors.models import Monitor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PhysicalPlacement:
    """Position and size of one monitor in inches."""

    monitor_id: int
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def diagonal(self) -> float:
        return (self.width**2 + self.height**2) ** 0.5

    def translated(self, dx: float, dy: float) -> "PhysicalPlacement":
        """Return the placement moved by (dx, dy) inches."""
        return PhysicalPlacement(
            self.monitor_id, self.x + dx, self.y + dy, self.width, self.height
        )


def _check_result_ids(
    monitors: Sequence[Monitor], results: Sequence[CalibrationResult]
) -> None:
    known = {m.id for m in monitors}
    if len(known) != len(monitors):
        raise LayoutReconstructionError("Monitor ids must be unique")
    for result in results:
        for monitor_id in (result.monitor_id, result.bound_to):
            if monitor_id not in known:
                raise LayoutReconstructionError(
                    f"Calibration result references unknown monitor {monitor_id}"
                )


def seed_ppi(monitors: Sequence[Monitor]) -> dict[int, float]:
    """Pixel densities known directly from monitor metadata."""
    seeds = {}
    for monitor in monitors:
        ppi = monitor.effective_ppi
        if ppi is not None:
            seeds[monitor.id] = ppi
    return seeds


def relaxation_round(
    ppi: dict[int, float], results: Sequence[CalibrationResult]
) -> bool:
    """Relax every calibration edge once, updating ``ppi`` in place.

    Returns:
        True if any monitor gained a pixel density
    """
    changed = False
    for result in results:
        if result.monitor_id not in ppi and result.bound_to in ppi:
            ppi[result.monitor_id] = ppi[result.bound_to] * result.scale
            changed = True
        if result.bound_to not in ppi and result.monitor_id in ppi:
            ppi[result.bound_to] = ppi[result.monitor_id] / result.scale
            changed = True
    return changed


def propagate_ppi(
    monitors: Sequence[Monitor],
    results: Sequence[CalibrationResult],
    max_rounds: Optional[int] = None,
) -> dict[int, float]:
    """Propagate pixel density across the calibration tree.

    Monitors without any connection to a known physical size are absent
    from the returned mapping.

    Args:
        monitors: All monitors of the session
        results: Calibration results forming the binding tree
        max_rounds: Safety cap on relaxation rounds; defaults to the number
            of edges plus one

    Returns:
        Mapping of monitor id to pixels per inch
    """
    _check_result_ids(monitors, results)
    ppi = seed_ppi(monitors)
    limit = max_rounds if max_rounds is not None else len(results) + 1

    rounds = 0
    while relaxation_round(ppi, results):
        rounds += 1
        if rounds > limit:
            raise LayoutReconstructionError(
                f"Pixel density did not converge within {limit} rounds"
            )

    logger.debug(
        f"Pixel density known for {len(ppi)}/{len(monitors)} monitors "
        f"after {rounds} round(s)"
    )
    return ppi


def _choose_reference(
    monitors: Sequence[Monitor],
    results: Sequence[CalibrationResult],
    ppi: dict[int, float],
) -> Monitor:
    calibrated = {r.monitor_id for r in results}
    for monitor in monitors:
        if monitor.id not in calibrated and monitor.id in ppi:
            return monitor
    return monitors[0]


def place_monitors(
    monitors: Sequence[Monitor],
    results: Sequence[CalibrationResult],
    ppi: dict[int, float],
) -> dict[int, PhysicalPlacement]:
    """Place every monitor relative to its parent, reference at the origin.

    Raises:
        LayoutReconstructionError: If a monitor lacks a pixel density, a
            parent is not placed before its child, or a monitor is not
            reachable from the reference
    """
    by_id = {m.id: m for m in monitors}
    reference = _choose_reference(monitors, results, ppi)
    if reference.id not in ppi:
        raise LayoutReconstructionError(
            f"Reference monitor {reference.id} has no known pixel density"
        )

    ref_ppi = ppi[reference.id]
    placements = {
        reference.id: PhysicalPlacement(
            reference.id,
            0.0,
            0.0,
            reference.resolution_x / ref_ppi,
            reference.resolution_y / ref_ppi,
        )
    }

    for result in results:
        if result.bound_to not in placements:
            raise LayoutReconstructionError(
                f"Monitor {result.monitor_id} is bound to {result.bound_to}, "
                "which has not been placed yet"
            )
        if result.monitor_id not in ppi:
            raise LayoutReconstructionError(
                f"Monitor {result.monitor_id} has no known pixel density"
            )

        child, parent = by_id[result.monitor_id], by_id[result.bound_to]
        bound = placements[result.bound_to]
        ppi_child, ppi_parent = ppi[child.id], ppi[parent.id]

        width = child.resolution_x / ppi_child
        height = child.resolution_y / ppi_child
        gap_in = abs(result.gap) / ppi_parent
        # Both near lines sit at the same physical position
        offset_in = (
            result.align_offset_bound / ppi_parent
            - result.align_offset_unbound / ppi_child
        )

        if result.bind_horizontal:
            if child.position_x < parent.position_x:
                x = bound.x - width - gap_in
            else:
                x = bound.right + gap_in
            y = bound.y + offset_in
        else:
            if child.position_y < parent.position_y:
                y = bound.y - height - gap_in
            else:
                y = bound.bottom + gap_in
            x = bound.x + offset_in

        placements[child.id] = PhysicalPlacement(child.id, x, y, width, height)

    unplaced = [m.id for m in monitors if m.id not in placements]
    if unplaced:
        raise LayoutReconstructionError(
            f"Monitors {unplaced} are not connected to reference monitor {reference.id}"
        )
    return placements


def center_on_canvas(
    placements: Sequence[PhysicalPlacement], canvas_width: float, canvas_height: float
) -> list[PhysicalPlacement]:
    """Translate placements so their bounding box is centered on the canvas."""
    if not placements:
        return []

    min_x = min(p.x for p in placements)
    max_x = max(p.right for p in placements)
    min_y = min(p.y for p in placements)
    max_y = max(p.bottom for p in placements)

    dx = canvas_width / 2.0 - (min_x + max_x) / 2.0
    dy = canvas_height / 2.0 - (min_y + max_y) / 2.0
    return [p.translated(dx, dy) for p in placements]


def reconstruct_layout(
    monitors: Sequence[Monitor],
    results: Sequence[CalibrationResult],
    settings: Optional[LayoutSettings] = None,
) -> list[PhysicalPlacement]:
    """Reconstruct the physical layout of all monitors.

    Args:
        monitors: All monitors of the session
        results: Calibration results in binding order
        settings: Canvas size and relaxation settings

    Returns:
        Canvas-centered placements, in the order of ``monitors``

    Raises:
        LayoutReconstructionError: If no monitor has a known physical size
            or the results do not form a tree over the monitors
    """
    settings = settings or LayoutSettings()
    if not monitors:
        raise LayoutReconstructionError("No monitors to place")

    ppi = propagate_ppi(monitors, results, settings.max_relaxation_rounds)
    if not ppi:
        logger.error("No monitor has a known physical size")
        raise LayoutReconstructionError(
            "Cannot reconstruct layout: no monitor has a known physical size"
        )

    placements = place_monitors(monitors, results, ppi)
    centered = center_on_canvas(
        [placements[m.id] for m in monitors],
        settings.canvas_width_in,
        settings.canvas_height_in,
    )

    logger.info(f"Reconstructed physical layout of {len(centered)} monitors")
    return centered
