"""Data types shared by the calibration planner, overlay, solver and manager."""

import math
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Optional

from ..monitors.models import MonitorRect


class BindOrientation(str, Enum):
    """How two monitors of a binding pair sit relative to each other.

    HORIZONTAL pairs are side by side: reference lines run horizontally and
    move along y, the gap is measured along x. VERTICAL pairs are stacked:
    lines run vertically and move along x, the gap is measured along y.
    """

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"

    @property
    def is_horizontal(self) -> bool:
        return self is BindOrientation.HORIZONTAL


class OverlayStep(str, Enum):
    """Steps of the per-pair interactive adjustment."""

    SCALE = "scale"
    GAP = "gap"


@dataclass(frozen=True)
class BindingPair:
    """A calibration edge: ``child`` is calibrated against the bound ``parent``.

    Indices refer to positions in the monitor list given to the planner.
    """

    child: int
    parent: int

    def as_tuple(self) -> tuple[int, int]:
        return (self.child, self.parent)


@dataclass(frozen=True)
class OverlayConfig:
    """Configuration handed to the interaction surface for one step."""

    step: OverlayStep
    child_index: int
    parent_index: int
    orientation: BindOrientation
    monitors: tuple[MonitorRect, ...]
    midpoints: Optional[tuple[int, int]] = None

    @property
    def child_rect(self) -> MonitorRect:
        return self.monitors[self.child_index]

    @property
    def parent_rect(self) -> MonitorRect:
        return self.monitors[self.parent_index]


@dataclass(frozen=True)
class OverlayResult:
    """Outcome of one overlay step.

    ``segments`` holds the four Scale-step line positions in the order
    near-child, near-parent, far-child, far-parent. ``gap`` is the Gap-step
    value in pixels.
    """

    cancelled: bool
    segments: tuple[int, int, int, int] = (0, 0, 0, 0)
    gap: int = 0


@dataclass(frozen=True)
class CalibrationResult:
    """Calibration of one non-primary monitor against its parent.

    ``scale`` is relative to the primary monitor (chained along the binding
    tree). ``relative_x``/``relative_y`` place the child's frame in the
    parent's, scaled. The alignment offsets are the near reference line's
    distance from each monitor's own origin along the line axis, in that
    monitor's pixels; the cross-axis relative offset equals
    ``align_offset_bound - align_offset_unbound * scale``.
    """

    monitor_id: int
    scale: float
    relative_x: float
    relative_y: float
    gap: int
    bound_to: int
    bind_orientation: BindOrientation
    align_offset_unbound: float = 0.0
    align_offset_bound: float = 0.0

    def __post_init__(self) -> None:
        """Validate the result after initialization."""
        if not (self.scale > 0 and math.isfinite(self.scale)):
            raise ValueError(f"Scale must be positive and finite, got {self.scale}")
        if not isinstance(self.bind_orientation, BindOrientation):
            object.__setattr__(
                self, "bind_orientation", BindOrientation(self.bind_orientation)
            )

    @property
    def bind_horizontal(self) -> bool:
        return self.bind_orientation.is_horizontal

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary."""
        data = asdict(self)
        data["bind_orientation"] = self.bind_orientation.value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CalibrationResult":
        """Create a result from a dictionary produced by ``to_dict``."""
        return cls(**data)
