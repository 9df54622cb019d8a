"""Unit tests for the interaction surface seam."""

import threading
import time
from unittest.mock import patch

import pytest

from spancal.calibration import (
    BindOrientation,
    Key,
    OverlayConfig,
    OverlayStep,
    ScriptedSurface,
    run_overlay,
)
from spancal.config import OverlaySettings
from spancal.errors import InteractionSurfaceFailure
from spancal.monitors import MonitorRect


@pytest.fixture()
def scale_config():
    return OverlayConfig(
        step=OverlayStep.SCALE,
        child_index=1,
        parent_index=0,
        orientation=BindOrientation.HORIZONTAL,
        monitors=(MonitorRect(0, 0, 1920, 1080), MonitorRect(1920, 0, 1920, 1080)),
    )


class BlockingSurface:
    """Surface that never finishes until released."""

    def __init__(self):
        self.release = threading.Event()

    def run(self, session):
        self.release.wait(timeout=5)
        session.cancel()


class PollingSurface:
    """Surface that keeps its window open until the session is abandoned."""

    def __init__(self):
        self.session = None
        self.stopped = threading.Event()

    def run(self, session):
        self.session = session
        while not session.abandoned:
            time.sleep(0.005)
        session.confirm()
        self.stopped.set()


class FailingSurface:
    """Surface whose window cannot be created."""

    def run(self, session):
        raise OSError("no display available")


@pytest.mark.unit()
class TestScriptedSurface:
    """Test replaying input scripts."""

    def test_scripts_consumed_in_order(self, scale_config):
        """Test that each run consumes the next script."""
        surface = ScriptedSurface(
            [
                ScriptedSurface.drag((2500, 270), (2500, 280)) + [("confirm",)],
                [("cancel",)],
            ]
        )

        first = run_overlay(surface, scale_config)
        assert first.segments == (280, 270, 810, 810)
        assert surface.remaining == 1

        second = run_overlay(surface, scale_config)
        assert second.cancelled
        assert surface.remaining == 0
        assert surface.configs == [scale_config, scale_config]

    def test_steps_after_terminal_are_skipped(self, scale_config):
        """Test that a script stops at the first terminal transition."""
        surface = ScriptedSurface([[("confirm",), ("key", Key.ESCAPE)]])

        result = run_overlay(surface, scale_config)

        assert not result.cancelled
        assert len(surface.sessions[0].segments) == 4

    def test_nudges_helper(self):
        """Test the arrow-key step helper."""
        assert ScriptedSurface.nudges(Key.DOWN, 2) == [("key", Key.DOWN), ("key", Key.DOWN)]
        assert ScriptedSurface.nudges(Key.DOWN, 0) == []


@pytest.mark.unit()
class TestRunOverlay:
    """Test the threaded one-shot handoff."""

    def test_runs_on_dedicated_thread(self, scale_config):
        """Test that the surface does not run on the caller's thread."""
        seen = []

        class RecordingSurface:
            def run(self, session):
                seen.append(threading.current_thread())
                session.confirm()

        run_overlay(RecordingSurface(), scale_config)

        assert seen
        assert seen[0] is not threading.current_thread()

    def test_surface_exception(self, scale_config):
        """Test that a raising surface becomes an interaction failure."""
        with pytest.raises(InteractionSurfaceFailure) as exc_info:
            run_overlay(FailingSurface(), scale_config)

        assert exc_info.value.stage == "interaction"
        assert isinstance(exc_info.value.__cause__, OSError)

    def test_exhausted_script(self, scale_config):
        """Test that running out of scripts is reported as a failure."""
        with pytest.raises(InteractionSurfaceFailure):
            run_overlay(ScriptedSurface([]), scale_config)

    def test_returns_before_terminal(self, scale_config):
        """Test that a surface returning early is reported as a failure."""
        surface = ScriptedSurface([ScriptedSurface.drag((2500, 270), (2500, 300))])

        with pytest.raises(InteractionSurfaceFailure, match="still idle"):
            run_overlay(surface, scale_config)

    def test_handoff_timeout(self, scale_config):
        """Test that a surface exceeding the handoff timeout fails the step."""
        surface = BlockingSurface()
        try:
            with pytest.raises(InteractionSurfaceFailure, match="did not finish"):
                run_overlay(surface, scale_config, OverlaySettings(handoff_timeout=0.05))
        finally:
            surface.release.set()

    def test_timeout_abandons_session(self, scale_config):
        """Test that the surface is told to stop once the caller gives up."""
        surface = PollingSurface()

        with pytest.raises(InteractionSurfaceFailure, match="did not finish"):
            run_overlay(surface, scale_config, OverlaySettings(handoff_timeout=0.05))

        assert surface.stopped.wait(timeout=2)
        assert surface.session.abandoned
        assert not surface.session.is_terminal

    def test_thread_start_failure(self, scale_config):
        """Test that a thread that cannot start is reported as a failure."""
        with patch(
            "spancal.calibration.interactive.threading.Thread.start",
            side_effect=RuntimeError("can't start new thread"),
        ):
            with pytest.raises(InteractionSurfaceFailure, match="could not be started"):
                run_overlay(ScriptedSurface([[("confirm",)]]), scale_config)
