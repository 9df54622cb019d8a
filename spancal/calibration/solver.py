"""Scale and offset solver.

Turns the raw output of one pair's Scale and Gap steps into the scale
factor and relative placement stored in a ``CalibrationResult``.
"""

import logging
import math
from dataclasses import dataclass
from typing import Sequence

from ..monitors.models import Monitor, MonitorRect
from .models import BindOrientation
from .overlay import FAR_CHILD, FAR_PARENT, NEAR_CHILD, NEAR_PARENT

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScaleSolution:
    """Scale factor and cross-axis alignment for one pair."""

    scale: float
    relative_offset: float
    align_offset_child: int
    align_offset_parent: int
    span_child: float
    span_parent: float


def local_offsets(
    segments: Sequence[int],
    orientation: BindOrientation,
    child_rect: MonitorRect,
    parent_rect: MonitorRect,
) -> tuple[int, int, int, int]:
    """Convert absolute line positions into offsets from each monitor's origin."""
    if orientation.is_horizontal:
        child_origin, parent_origin = child_rect.y, parent_rect.y
    else:
        child_origin, parent_origin = child_rect.x, parent_rect.x

    return (
        segments[NEAR_CHILD] - child_origin,
        segments[NEAR_PARENT] - parent_origin,
        segments[FAR_CHILD] - child_origin,
        segments[FAR_PARENT] - parent_origin,
    )


def solve_scale(
    segments: Sequence[int],
    orientation: BindOrientation,
    child_rect: MonitorRect,
    parent_rect: MonitorRect,
    parent_scale: float,
    degenerate_span: float = 1.0,
) -> ScaleSolution:
    """Solve the child's scale and alignment offset from the Scale step.

    Once the user has matched the lines to the same physical positions on
    both monitors, the on-screen separation of the near and far lines on
    each monitor is proportional to its pixel density. The child's scale is
    the parent's scale times the ratio of the two separations. When the
    parent separation is at or below ``degenerate_span`` the parent's scale
    is kept unchanged.

    Args:
        segments: Line positions (near child, near parent, far child, far parent)
        orientation: Bind orientation of the pair
        child_rect: Child monitor rectangle, same frame as ``segments``
        parent_rect: Parent monitor rectangle, same frame as ``segments``
        parent_scale: Parent's scale relative to the primary monitor
        degenerate_span: Parent span at or below which scale is not updated

    Returns:
        The solved scale and offsets
    """
    near_child, near_parent, far_child, far_parent = local_offsets(
        segments, orientation, child_rect, parent_rect
    )

    span_child = float(abs(far_child - near_child))
    span_parent = float(abs(far_parent - near_parent))

    if span_parent > degenerate_span:
        scale = parent_scale * (span_child / span_parent)
    else:
        logger.warning(
            f"Parent line separation {span_parent:.0f}px is degenerate, "
            f"keeping parent scale {parent_scale:.4f}"
        )
        scale = parent_scale

    if not (scale > 0 and math.isfinite(scale)):
        # Zero child span: lines collapsed on the child side
        logger.warning(
            f"Solved scale {scale} is unusable, keeping parent scale {parent_scale:.4f}"
        )
        scale = parent_scale

    relative_offset = near_parent - near_child * scale

    return ScaleSolution(
        scale=scale,
        relative_offset=relative_offset,
        align_offset_child=near_child,
        align_offset_parent=near_parent,
        span_child=span_child,
        span_parent=span_parent,
    )


def segment_midpoints(segments: Sequence[int]) -> tuple[int, int]:
    """Midpoint of each monitor's two lines, seeding the Gap step."""
    return (
        math.trunc((segments[NEAR_CHILD] + segments[FAR_CHILD]) / 2),
        math.trunc((segments[NEAR_PARENT] + segments[FAR_PARENT]) / 2),
    )


def relative_position(
    gap: int,
    orientation: BindOrientation,
    child: Monitor,
    parent: Monitor,
    scale: float,
    parent_scale: float,
    relative_offset: float,
) -> tuple[float, float]:
    """Place the child relative to its parent along the seam.

    The signed virtual-desktop positions decide which monitor comes first
    along the gap axis. The gap is doubled because the Gap step draws its
    seam as a half-gap pulled back from each monitor's edge.

    Returns:
        ``(relative_x, relative_y)``; the cross-axis component is
        ``relative_offset``
    """
    if orientation.is_horizontal:
        if child.position_x < parent.position_x:
            along = -(gap * 2.0) - child.resolution_x * scale
        else:
            along = parent.resolution_x * parent_scale + gap * 2.0
        return (along, relative_offset)

    if child.position_y < parent.position_y:
        along = -(gap * 2.0) - child.resolution_y * scale
    else:
        along = parent.resolution_y * parent_scale + gap * 2.0
    return (relative_offset, along)
