"""Monitor metadata models.

A ``Monitor`` is the record handed to the calibration core by the discovery
collaborator. It is treated as immutable for the duration of a session:
enrichment helpers return new instances via ``dataclasses.replace``.
"""

import math
from dataclasses import asdict, dataclass
from enum import Enum, IntEnum
from typing import Any, Optional

MM_PER_INCH = 25.4


class SizeSource(str, Enum):
    """Provenance of a monitor's physical size."""

    EDID = "edid"
    GUESSED = "guessed"
    MANUAL = "manual"
    NONE = "none"


class Rotation(IntEnum):
    """Display rotation as reported by the operating system."""

    LANDSCAPE = 0
    PORTRAIT = 1
    LANDSCAPE_FLIPPED = 2
    PORTRAIT_FLIPPED = 3


@dataclass(frozen=True)
class MonitorRect:
    """Axis-aligned monitor rectangle in pixels."""

    x: int
    y: int
    w: int
    h: int

    @property
    def right(self) -> int:
        return self.x + self.w

    @property
    def bottom(self) -> int:
        return self.y + self.h

    @property
    def center(self) -> tuple[float, float]:
        return (self.x + self.w / 2.0, self.y + self.h / 2.0)

    def translated(self, dx: int, dy: int) -> "MonitorRect":
        """Return the rectangle moved by (dx, dy)."""
        return MonitorRect(self.x + dx, self.y + dy, self.w, self.h)


@dataclass(frozen=True)
class Monitor:
    """A physical display and its virtual-desktop placement.

    Positions are signed virtual-desktop coordinates and may be negative.
    Physical size fields are optional; when none of them is known the monitor
    can still be calibrated, its pixel density is then inferred from a
    neighbour during layout reconstruction.
    """

    id: int
    device_name: str
    resolution_x: int
    resolution_y: int
    position_x: int = 0
    position_y: int = 0
    is_primary: bool = False
    friendly_name: str = ""
    monitor_name: str = ""
    adapter_name: str = ""
    monitor_device_id: str = ""
    orientation: int = Rotation.LANDSCAPE
    physical_width_mm: Optional[int] = None
    physical_height_mm: Optional[int] = None
    diagonal_in: Optional[float] = None
    ppi: Optional[float] = None
    size_source: SizeSource = SizeSource.NONE

    def __post_init__(self) -> None:
        """Validate monitor metadata after initialization."""
        if self.resolution_x <= 0 or self.resolution_y <= 0:
            raise ValueError(
                f"Monitor {self.id} resolution must be positive, "
                f"got {self.resolution_x}x{self.resolution_y}"
            )
        for name in ("physical_width_mm", "physical_height_mm", "diagonal_in", "ppi"):
            value = getattr(self, name)
            if value is not None and not (value > 0 and math.isfinite(value)):
                raise ValueError(f"Monitor {self.id} {name} must be positive, got {value}")
        if not isinstance(self.size_source, SizeSource):
            object.__setattr__(self, "size_source", SizeSource(self.size_source))

    @property
    def rect(self) -> MonitorRect:
        """Virtual-desktop rectangle."""
        return MonitorRect(
            self.position_x, self.position_y, self.resolution_x, self.resolution_y
        )

    @property
    def center(self) -> tuple[float, float]:
        """Center of the virtual-desktop bounding box."""
        return self.rect.center

    @property
    def display_name(self) -> str:
        return self.friendly_name or self.monitor_name or f"Display {self.id + 1}"

    @property
    def key(self) -> str:
        """Stable lookup key for per-monitor overrides."""
        return self.monitor_device_id or self.device_name

    @property
    def is_portrait(self) -> bool:
        return self.orientation in (Rotation.PORTRAIT, Rotation.PORTRAIT_FLIPPED)

    @property
    def has_physical_size(self) -> bool:
        return self.physical_width_mm is not None and self.physical_height_mm is not None

    @property
    def physical_width_in(self) -> Optional[float]:
        if self.physical_width_mm is None:
            return None
        return self.physical_width_mm / MM_PER_INCH

    @property
    def physical_height_in(self) -> Optional[float]:
        if self.physical_height_mm is None:
            return None
        return self.physical_height_mm / MM_PER_INCH

    @property
    def physical_diagonal_in(self) -> Optional[float]:
        """Known diagonal, else the diagonal of the physical size in millimeters."""
        if self.diagonal_in is not None:
            return self.diagonal_in
        if self.has_physical_size:
            return math.hypot(self.physical_width_in, self.physical_height_in)
        return None

    @property
    def diagonal_px(self) -> float:
        return math.hypot(self.resolution_x, self.resolution_y)

    @property
    def effective_ppi(self) -> Optional[float]:
        """Pixel density from the best available metadata, or None."""
        if self.ppi is not None:
            return self.ppi
        diagonal = self.physical_diagonal_in
        if diagonal is None:
            return None
        return self.diagonal_px / diagonal

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary."""
        data = asdict(self)
        data["size_source"] = self.size_source.value
        data["orientation"] = int(self.orientation)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Monitor":
        """Create a monitor from a dictionary produced by ``to_dict``."""
        values = dict(data)
        if "size_source" in values:
            values["size_source"] = SizeSource(values["size_source"])
        return cls(**values)
