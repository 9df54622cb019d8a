"""Shared test configuration and fixtures for the calibration tests."""

import logging
import tempfile
from pathlib import Path

import pytest

from spancal.calibration import Key, ScriptedSurface
from spancal.config import AppConfig
from spancal.monitors import Monitor


def make_monitor(
    id: int,
    x: int = 0,
    y: int = 0,
    w: int = 1920,
    h: int = 1080,
    primary: bool = False,
    **kwargs,
) -> Monitor:
    """Build a monitor record with a virtual-desktop placement."""
    return Monitor(
        id=id,
        device_name=f"\\\\.\\DISPLAY{id + 1}",
        resolution_x=w,
        resolution_y=h,
        position_x=x,
        position_y=y,
        is_primary=primary,
        **kwargs,
    )


@pytest.fixture()
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture()
def monitor_factory():
    """Factory building monitors from placement arguments."""
    return make_monitor


@pytest.fixture()
def gap_script():
    """Build a Gap-step script that nudges to a gap and confirms."""

    def build(gap: int) -> list:
        key = Key.RIGHT if gap >= 0 else Key.LEFT
        return ScriptedSurface.nudges(key, abs(gap)) + [("confirm",)]

    return build


@pytest.fixture()
def side_by_side_monitors():
    """Two 24" 1080p monitors, primary on the left."""
    return [
        make_monitor(0, 0, 0, primary=True, diagonal_in=24.0, friendly_name="Left"),
        make_monitor(1, 1920, 0, friendly_name="Right"),
    ]


@pytest.fixture()
def row_of_three_monitors():
    """Three 1080p monitors in a row; only the primary knows its size."""
    return [
        make_monitor(0, 0, 0, primary=True, diagonal_in=24.0),
        make_monitor(1, 1920, 0),
        make_monitor(2, 3840, 0),
    ]


@pytest.fixture()
def app_config():
    """Default application configuration."""
    return AppConfig()


@pytest.fixture()
def restore_root_logger():
    """Restore root logger handlers and level after a logging test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in list(root.handlers):
        root.removeHandler(handler)
        if handler not in handlers:
            handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
