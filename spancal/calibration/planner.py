"""Binding order planning.

Builds the spanning tree that decides which monitor is calibrated against
which, and in what order. The tree is grown greedily from the primary
monitor, always attaching the unbound monitor whose center is nearest to an
already bound one (Prim's algorithm with Euclidean center distance).
"""

import logging
from typing import Sequence

import numpy as np

from ..monitors.models import Monitor
from .models import BindingPair, BindOrientation

logger = logging.getLogger(__name__)


def primary_index(monitors: Sequence[Monitor]) -> int:
    """Index of the primary monitor, falling back to the first one."""
    for index, monitor in enumerate(monitors):
        if monitor.is_primary:
            return index
    if monitors:
        logger.warning("No monitor is flagged primary, using monitor 0 as root")
    return 0


def compute_calibration_order(monitors: Sequence[Monitor]) -> list[BindingPair]:
    """Compute the pairwise calibration order.

    Every non-primary monitor appears exactly once as a child, and a parent
    is always bound before any pair that uses it. Ties between equally
    distant pairs go to the first pair met scanning unbound monitors, then
    bound monitors, in list order.

    Args:
        monitors: Monitors with their virtual-desktop placement

    Returns:
        Ordered binding pairs; empty for fewer than two monitors
    """
    if len(monitors) < 2:
        return []

    centers = np.array([m.center for m in monitors], dtype=np.float64)
    bound = np.zeros(len(monitors), dtype=bool)
    bound[primary_index(monitors)] = True

    pairs: list[BindingPair] = []
    while not bound.all():
        unbound_idx = np.flatnonzero(~bound)
        bound_idx = np.flatnonzero(bound)

        diff = centers[unbound_idx, np.newaxis, :] - centers[np.newaxis, bound_idx, :]
        distances = np.sqrt((diff**2).sum(axis=2))

        # argmin returns the first minimum in row-major (unbound, bound) order
        row, col = divmod(int(np.argmin(distances)), len(bound_idx))
        child = int(unbound_idx[row])
        parent = int(bound_idx[col])

        bound[child] = True
        pairs.append(BindingPair(child=child, parent=parent))
        logger.debug(
            f"Bound monitor {child} to {parent} (center distance {distances[row, col]:.1f}px)"
        )

    return pairs


def determine_bind_orientation(a: Monitor, b: Monitor) -> BindOrientation:
    """Classify a pair as side by side or stacked.

    Compares how much the two bounding boxes overlap vertically against how
    much they overlap horizontally. The comparison is symmetric in its
    arguments.
    """
    ra, rb = a.rect, b.rect
    v_overlap = max(min(ra.bottom, rb.bottom) - max(ra.y, rb.y), 0)
    h_overlap = max(min(ra.right, rb.right) - max(ra.x, rb.x), 0)

    if v_overlap >= h_overlap:
        return BindOrientation.HORIZONTAL
    return BindOrientation.VERTICAL
