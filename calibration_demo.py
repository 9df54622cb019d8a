#!/usr/bin/env python3
"""
Calibration System Demo

Demonstrates the complete multi-monitor calibration flow on a synthetic
three-monitor desk: size enrichment, the scripted Scale and Gap steps for
every monitor pair, physical layout reconstruction and both export
documents.
"""

import argparse
import logging
import sys
from typing import Optional

from spancal.calibration import CalibrationManager, Key, ScriptedSurface
from spancal.config import ConfigurationError, load_config
from spancal.errors import CalibrationError
from spancal.export import build_layout_url, export_json, layout_json
from spancal.layout import reconstruct_layout
from spancal.monitors import SizeOverrides, StaticMonitorSource, discover_monitors
from spancal.utils import setup_logging

logger = logging.getLogger(__name__)


DEMO_MONITORS = [
    {
        "id": 0,
        "device_name": "\\\\.\\DISPLAY1",
        "friendly_name": "Main QHD",
        "resolution_x": 2560,
        "resolution_y": 1440,
        "position_x": 0,
        "position_y": 0,
        "is_primary": True,
        "physical_width_mm": 597,
        "physical_height_mm": 336,
        "size_source": "edid",
    },
    {
        "id": 1,
        "device_name": "\\\\.\\DISPLAY2",
        "friendly_name": "LG 24MK430",
        "resolution_x": 1920,
        "resolution_y": 1080,
        "position_x": 2560,
        "position_y": 180,
    },
    {
        "id": 2,
        "device_name": "\\\\.\\DISPLAY3",
        "monitor_name": "Generic PnP Monitor",
        "resolution_x": 1920,
        "resolution_y": 1080,
        "position_x": 0,
        "position_y": -1080,
    },
]


def demo_scripts() -> list:
    """Input scripts for the two pairs: Scale then Gap for each.

    The first pair binds the upper monitor to the primary (stacked, lines
    move along x); the second binds the right monitor (side by side, lines
    move along y). Coordinates are in the overlay frame, where the virtual
    desktop starts at (0, 0).
    """
    return [
        # Pair (2 -> 0), Scale: pull the primary's far line 40px inwards
        ScriptedSurface.drag((1440, 1500), (1400, 1500)) + [("confirm",)],
        # Pair (2 -> 0), Gap
        ScriptedSurface.nudges(Key.RIGHT, 12) + [("confirm",)],
        # Pair (1 -> 0), Scale: select the child's near line and nudge it
        ScriptedSurface.drag((3000, 1530), (3000, 1520))
        + ScriptedSurface.nudges(Key.UP, 5)
        + [("confirm",)],
        # Pair (1 -> 0), Gap: drag 18px along x
        ScriptedSurface.drag((2560, 1800), (2578, 1800)) + [("confirm",)],
    ]


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Scripted multi-monitor calibration demo")
    parser.add_argument("--config", help="YAML or JSON configuration file")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        setup_logging()
        logger.error(f"Demo failed: {e}")
        return 1

    setup_logging(
        settings=config.logging, default_level=logging.DEBUG if args.verbose else None
    )

    logger.info("=== Monitor Calibration Demo ===")

    overrides = SizeOverrides({"\\\\.\\DISPLAY3": 21.5})
    monitors = discover_monitors(StaticMonitorSource(DEMO_MONITORS), overrides)
    for monitor in monitors:
        ppi = monitor.effective_ppi
        logger.info(
            f"{monitor.display_name}: {monitor.resolution_x}x{monitor.resolution_y}, "
            f"size source {monitor.size_source.value}, "
            f"ppi {'unknown' if ppi is None else f'{ppi:.1f}'}"
        )

    manager = CalibrationManager(ScriptedSurface(demo_scripts()), config)
    manager.add_status_callback(
        lambda status: logger.info(f"[{status.progress:.0%}] {status.message}")
    )

    try:
        results = manager.run_calibration(monitors)
        for placement in reconstruct_layout(monitors, results, config.layout):
            logger.info(
                f"Monitor {placement.monitor_id}: {placement.width:.2f}x{placement.height:.2f}in "
                f"at ({placement.x:.2f}, {placement.y:.2f})"
            )

        print(export_json(monitors, results, config.export))
        print(layout_json(monitors, results, config.export, config.layout))
        print(build_layout_url(monitors, results, config.export, config.layout))
    except CalibrationError as e:
        logger.error(f"Demo failed: {e}")
        return 1

    logger.info("Demo completed ✓")
    return 0


if __name__ == "__main__":
    sys.exit(main())
