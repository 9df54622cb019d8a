"""Export formatting of calibration results.

Builds the generic calibration document and the layout-tool document from
monitors and their calibration results. Writing the documents anywhere is
left to the caller.
"""

import logging
import math
from datetime import datetime, timezone
from typing import Optional, Sequence
from lzstring import LZString

from pydantic import ValidationError

from ..calibration.models import CalibrationResult
from ..config.schemas import ExportSettings, LayoutSettings
from ..errors import SerializationFailure
from ..layout.physical import reconstruct_layout
from ..monitors.models import Monitor
from .schemas import (
    CalibratedMonitor,
    CalibrationDocument,
    LayoutDocument,
    LayoutMonitor,
)

logger = logging.getLogger(__name__)

# Marks an LZ-string compressed layout fragment
LZ_PREFIX = "~"

RESOLUTION_NAMES = {
    (1920, 1080): "FHD",
    (1920, 1200): "WUXGA",
    (2560, 1080): "UWFHD",
    (2560, 1440): "QHD",
    (3440, 1440): "UWQHD",
    (3840, 2160): "4K",
    (3840, 1600): "UW4K",
}


def aspect_ratio(width: int, height: int) -> tuple[int, int]:
    """Reduce a resolution to its integer aspect ratio."""
    divisor = math.gcd(width, height)
    if divisor == 0:
        return (16, 9)
    return (width // divisor, height // divisor)


def format_resolution(width: int, height: int) -> str:
    """Common nickname of a resolution, else ``WxH``."""
    return RESOLUTION_NAMES.get((width, height), f"{width}x{height}")


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def build_config(
    monitors: Sequence[Monitor],
    results: Sequence[CalibrationResult],
    settings: Optional[ExportSettings] = None,
    calibrated_at: Optional[str] = None,
) -> CalibrationDocument:
    """Build the generic calibration document.

    Monitors without a calibration result (the primary) are exported with
    unit scale, zero offsets and no parent.

    Raises:
        SerializationFailure: If a value cannot be represented, e.g. a
            non-finite offset
    """
    settings = settings or ExportSettings()
    by_monitor = {r.monitor_id: r for r in results}

    try:
        records = []
        for monitor in monitors:
            result = by_monitor.get(monitor.id)
            physical = (
                (monitor.physical_width_mm, monitor.physical_height_mm)
                if monitor.has_physical_size
                else None
            )
            records.append(
                CalibratedMonitor(
                    device_name=monitor.device_name,
                    friendly_name=monitor.friendly_name or monitor.monitor_name,
                    resolution=(monitor.resolution_x, monitor.resolution_y),
                    physical_size_mm=physical,
                    physical_size_source=monitor.size_source.value,
                    is_primary=monitor.is_primary,
                    virtual_position=(monitor.position_x, monitor.position_y),
                    scale=result.scale if result else 1.0,
                    relative_x=result.relative_x if result else 0.0,
                    relative_y=result.relative_y if result else 0.0,
                    gap=result.gap if result else 0,
                    bound_to=result.bound_to if result else None,
                    bind_orientation=result.bind_orientation.value if result else None,
                )
            )

        return CalibrationDocument(
            version=settings.schema_version,
            calibrated_at=calibrated_at or _timestamp(),
            monitors=records,
        )
    except ValidationError as e:
        logger.error(f"Calibration document is invalid: {e}")
        raise SerializationFailure(f"Cannot build calibration document: {e}") from e


def export_json(
    monitors: Sequence[Monitor],
    results: Sequence[CalibrationResult],
    settings: Optional[ExportSettings] = None,
    calibrated_at: Optional[str] = None,
) -> str:
    """Serialize the generic calibration document as pretty-printed JSON."""
    document = build_config(monitors, results, settings, calibrated_at)
    return document.model_dump_json(by_alias=True, indent=2)


def build_layout(
    monitors: Sequence[Monitor],
    results: Sequence[CalibrationResult],
    settings: Optional[ExportSettings] = None,
    layout_settings: Optional[LayoutSettings] = None,
) -> LayoutDocument:
    """Build the layout-tool document from the reconstructed physical layout.

    Raises:
        LayoutReconstructionError: If no physical layout can be reconstructed
        SerializationFailure: If a value cannot be represented
    """
    settings = settings or ExportSettings()
    placements = reconstruct_layout(monitors, results, layout_settings)
    by_id = {m.id: m for m in monitors}

    try:
        entries = []
        for placement in placements:
            monitor = by_id[placement.monitor_id]
            diagonal = monitor.physical_diagonal_in or placement.diagonal
            label = (
                f'{_round_half_up(diagonal)}" '
                f"{format_resolution(monitor.resolution_x, monitor.resolution_y)}"
            )
            entries.append(
                LayoutMonitor(
                    n=label,
                    d=round(diagonal, settings.diagonal_decimals),
                    ar=aspect_ratio(monitor.resolution_x, monitor.resolution_y),
                    rx=monitor.resolution_x,
                    ry=monitor.resolution_y,
                    x=round(placement.x, settings.position_decimals),
                    y=round(placement.y, settings.position_decimals),
                    rot=90 if monitor.is_portrait else None,
                    dn=monitor.friendly_name or None,
                )
            )
        return LayoutDocument(v=settings.layout_version, m=entries)
    except ValidationError as e:
        logger.error(f"Layout document is invalid: {e}")
        raise SerializationFailure(f"Cannot build layout document: {e}") from e


def layout_json(
    monitors: Sequence[Monitor],
    results: Sequence[CalibrationResult],
    settings: Optional[ExportSettings] = None,
    layout_settings: Optional[LayoutSettings] = None,
) -> str:
    """Serialize the layout-tool document as compact JSON."""
    document = build_layout(monitors, results, settings, layout_settings)
    return document.model_dump_json(exclude_none=True)


def build_layout_url(
    monitors: Sequence[Monitor],
    results: Sequence[CalibrationResult],
    settings: Optional[ExportSettings] = None,
    layout_settings: Optional[LayoutSettings] = None,
) -> str:
    """Layout-tool URL carrying the compressed layout document.

    The document is LZ-string compressed into a URI-safe fragment marked
    with a ``~`` prefix. The raw JSON is used if compression yields nothing.
    """
    settings = settings or ExportSettings()
    payload = layout_json(monitors, results, settings, layout_settings)
    compressed = LZString().compressToEncodedURIComponent(payload)
    encoded = LZ_PREFIX + compressed if compressed else payload
    return settings.layout_url_base + encoded
