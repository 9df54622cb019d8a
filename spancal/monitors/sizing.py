"""Best-effort physical size enrichment for monitor metadata.

These helpers run before the calibration core. None of them raises for
missing data: a monitor whose size cannot be determined simply stays
``SizeSource.NONE`` and gets its pixel density from a calibrated neighbour.
"""

import logging
import math
import re
from dataclasses import replace
from typing import Iterable, Optional, Union

from .models import MM_PER_INCH, Monitor, SizeSource

logger = logging.getLogger(__name__)

DEFAULT_ASPECT = 16.0 / 9.0
MIN_GUESS_DIAGONAL = 10
MAX_GUESS_DIAGONAL = 65

_NUMBER_PATTERN = re.compile(r"\d+")

SizeValue = Union[float, tuple[int, int]]


def physical_from_diagonal(
    monitor: Monitor, diagonal_in: float, source: SizeSource = SizeSource.GUESSED
) -> Monitor:
    """Derive the physical size in millimeters from a diagonal in inches.

    The monitor's pixel aspect ratio is assumed to match its panel; 16:9 is
    used when the resolution is unusable.
    """
    if diagonal_in <= 0 or not math.isfinite(diagonal_in):
        raise ValueError(f"Diagonal must be positive, got {diagonal_in}")

    if monitor.resolution_x > 0 and monitor.resolution_y > 0:
        aspect = monitor.resolution_x / monitor.resolution_y
    else:
        aspect = DEFAULT_ASPECT

    height_in = diagonal_in / math.sqrt(1.0 + aspect * aspect)
    width_in = height_in * aspect

    return replace(
        monitor,
        physical_width_mm=round(width_in * MM_PER_INCH),
        physical_height_mm=round(height_in * MM_PER_INCH),
        diagonal_in=diagonal_in,
        size_source=source,
    )


def extract_diagonal(text: str) -> Optional[float]:
    """Return the first stand-alone number in a plausible diagonal range."""
    for match in _NUMBER_PATTERN.finditer(text):
        value = int(match.group())
        if MIN_GUESS_DIAGONAL <= value <= MAX_GUESS_DIAGONAL:
            return float(value)
    return None


def guess_diagonal_from_names(monitor: Monitor) -> Optional[float]:
    """Try to extract a plausible diagonal from the monitor's names.

    Model names such as ``"LG 27GL850"`` or ``"AOC 24G2"`` often embed the
    panel size. Friendly name, monitor name and adapter name are tried in
    that order.
    """
    for name in (monitor.friendly_name, monitor.monitor_name, monitor.adapter_name):
        diagonal = extract_diagonal(name)
        if diagonal is not None:
            return diagonal
    return None


class SizeOverrides:
    """Manual physical size overrides keyed by monitor.

    A value is either a diagonal in inches or a ``(width_mm, height_mm)``
    pair. Keys are ``Monitor.key`` (hardware device id, else device name).
    The store is passed explicitly to ``enrich_monitors``; nothing in the
    core reads it.
    """

    def __init__(self, overrides: Optional[dict[str, SizeValue]] = None):
        self._overrides: dict[str, SizeValue] = {}
        for key, value in (overrides or {}).items():
            self.set(key, value)

    def set(self, key: str, value: SizeValue) -> None:
        """Register an override, validating its shape."""
        if isinstance(value, (tuple, list)):
            if len(value) != 2 or min(value) <= 0:
                raise ValueError(f"Override for {key!r} must be two positive sizes")
            value = (int(value[0]), int(value[1]))
        elif value <= 0:
            raise ValueError(f"Override diagonal for {key!r} must be positive")
        self._overrides[key] = value

    def remove(self, key: str) -> None:
        self._overrides.pop(key, None)

    def get(self, key: str) -> Optional[SizeValue]:
        return self._overrides.get(key)

    def clear(self) -> None:
        self._overrides.clear()

    def __contains__(self, key: str) -> bool:
        return key in self._overrides

    def __len__(self) -> int:
        return len(self._overrides)

    def apply(self, monitor: Monitor) -> Monitor:
        """Return the monitor with its override applied, if any."""
        value = self._overrides.get(monitor.key)
        if value is None:
            return monitor
        if isinstance(value, tuple):
            width_mm, height_mm = value
            return replace(
                monitor,
                physical_width_mm=width_mm,
                physical_height_mm=height_mm,
                diagonal_in=None,
                ppi=None,
                size_source=SizeSource.MANUAL,
            )
        return replace(
            physical_from_diagonal(monitor, float(value), SizeSource.MANUAL), ppi=None
        )


def enrich_monitors(
    monitors: Iterable[Monitor], overrides: Optional[SizeOverrides] = None
) -> list[Monitor]:
    """Apply manual overrides, then name-based guesses for unknown sizes."""
    enriched = []
    for monitor in monitors:
        if overrides is not None:
            monitor = overrides.apply(monitor)

        if not monitor.has_physical_size and monitor.diagonal_in is None:
            diagonal = guess_diagonal_from_names(monitor)
            if diagonal is not None:
                logger.warning(
                    f"Guessed {diagonal:.0f}\" diagonal for {monitor.display_name} from its name"
                )
                monitor = physical_from_diagonal(monitor, diagonal)

        enriched.append(monitor)
    return enriched
