"""Unit tests for the calibration manager."""

import pytest

from spancal.calibration import (
    BindingPair,
    BindOrientation,
    CalibrationManager,
    CalibrationState,
    OverlayStep,
    ScriptedSurface,
    run_calibration,
)
from spancal.calibration.manager import _session_lock, normalized_rects
from spancal.errors import (
    CalibrationInProgressError,
    DuplicateMonitorError,
    InsufficientMonitorsError,
    InteractionCancelledError,
    InteractionSurfaceFailure,
)
from spancal.monitors import MonitorRect


@pytest.mark.unit()
class TestNormalizedRects:
    """Test the overlay frame."""

    def test_shifted_to_origin(self, monitor_factory):
        """Test that negative desktop coordinates are shifted to (0, 0)."""
        monitors = [
            monitor_factory(0, 0, 0, primary=True),
            monitor_factory(1, -1280, -200, w=1280, h=1024),
        ]

        assert normalized_rects(monitors) == (
            MonitorRect(1280, 200, 1920, 1080),
            MonitorRect(0, 0, 1280, 1024),
        )


@pytest.mark.unit()
class TestCalibrationManager:
    """Test running the per-pair steps and assembling results."""

    def test_two_monitors(self, side_by_side_monitors, gap_script):
        """Test a full run over a single pair."""
        surface = ScriptedSurface([[("confirm",)], gap_script(5)])
        manager = CalibrationManager(surface)

        results = manager.run_calibration(side_by_side_monitors)

        assert len(results) == 1
        result = results[0]
        assert result.monitor_id == 1
        assert result.bound_to == 0
        assert result.bind_orientation == BindOrientation.HORIZONTAL
        assert result.scale == 1.0
        assert result.gap == 5
        assert result.relative_x == pytest.approx(1930.0)
        assert result.relative_y == pytest.approx(0.0)
        assert result.align_offset_unbound == 270
        assert result.align_offset_bound == 270
        assert surface.remaining == 0

    def test_step_configs(self, side_by_side_monitors, gap_script):
        """Test the configs handed to the surface for Scale then Gap."""
        surface = ScriptedSurface(
            [
                ScriptedSurface.drag((2500, 810), (2500, 830)) + [("confirm",)],
                gap_script(0),
            ]
        )

        CalibrationManager(surface).run_calibration(side_by_side_monitors)

        scale_config, gap_config = surface.configs
        assert scale_config.step == OverlayStep.SCALE
        assert scale_config.midpoints is None
        assert gap_config.step == OverlayStep.GAP
        assert (gap_config.child_index, gap_config.parent_index) == (1, 0)
        assert gap_config.midpoints == (550, 540)

    def test_scale_chains_along_tree(self, row_of_three_monitors, gap_script):
        """Test that a grandchild inherits its parent's solved scale."""
        surface = ScriptedSurface(
            [
                # Pair (1 -> 0): parent far line from 810 to 720
                ScriptedSurface.drag((500, 810), (500, 720)) + [("confirm",)],
                gap_script(0),
                # Pair (2 -> 1): equal spans
                [("confirm",)],
                gap_script(0),
            ]
        )

        results = CalibrationManager(surface).run_calibration(row_of_three_monitors)

        assert [(r.monitor_id, r.bound_to) for r in results] == [(1, 0), (2, 1)]
        assert results[0].scale == pytest.approx(1.2)
        assert results[0].relative_y == pytest.approx(-54.0)
        assert results[1].scale == pytest.approx(1.2)
        assert results[1].relative_x == pytest.approx(1920 * 1.2)

    def test_status_callbacks(self, side_by_side_monitors, gap_script):
        """Test status updates for each step and completion."""
        updates = []
        manager = CalibrationManager(ScriptedSurface([[("confirm",)], gap_script(0)]))
        manager.add_status_callback(
            lambda status: updates.append((status.state, status.progress, status.pair))
        )

        manager.run_calibration(side_by_side_monitors)

        assert updates == [
            (CalibrationState.SCALE_STEP, 0.0, BindingPair(1, 0)),
            (CalibrationState.GAP_STEP, 0.5, BindingPair(1, 0)),
            (CalibrationState.COMPLETE, 1.0, None),
        ]
        assert manager.status.state == CalibrationState.COMPLETE

    def test_failing_callback_is_isolated(self, side_by_side_monitors, gap_script):
        """Test that a raising status callback does not abort calibration."""

        def broken(status):
            raise ValueError("observer bug")

        manager = CalibrationManager(ScriptedSurface([[("confirm",)], gap_script(0)]))
        manager.add_status_callback(broken)

        assert len(manager.run_calibration(side_by_side_monitors)) == 1

    def test_remove_status_callback(self, side_by_side_monitors, gap_script):
        """Test removing a status callback."""
        updates = []
        manager = CalibrationManager(ScriptedSurface([[("confirm",)], gap_script(0)]))
        manager.add_status_callback(updates.append)
        manager.remove_status_callback(updates.append)

        manager.run_calibration(side_by_side_monitors)

        assert updates == []

    def test_cancel_scale_step(self, side_by_side_monitors):
        """Test that cancelling the Scale step aborts the run."""
        surface = ScriptedSurface([[("cancel",)]])
        manager = CalibrationManager(surface)

        with pytest.raises(InteractionCancelledError) as exc_info:
            manager.run_calibration(side_by_side_monitors)

        assert exc_info.value.stage == "scale"
        assert exc_info.value.pair == (1, 0)
        assert manager.status.state == CalibrationState.CANCELLED
        assert len(surface.configs) == 1

    def test_insufficient_monitors(self, monitor_factory):
        """Test that a single monitor fails before any interaction."""
        surface = ScriptedSurface([])

        with pytest.raises(InsufficientMonitorsError) as exc_info:
            CalibrationManager(surface).run_calibration([monitor_factory(0, primary=True)])

        assert exc_info.value.stage == "planning"
        assert surface.configs == []

    def test_duplicate_monitor_ids(self, monitor_factory):
        """Test that monitors sharing an id are rejected before any interaction."""
        surface = ScriptedSurface([])
        monitors = [
            monitor_factory(0, primary=True),
            monitor_factory(1, 1920),
            monitor_factory(1, 3840),
        ]

        with pytest.raises(DuplicateMonitorError) as exc_info:
            CalibrationManager(surface).run_calibration(monitors)

        assert exc_info.value.monitor_ids == [1]
        assert exc_info.value.stage == "planning"
        assert surface.configs == []
        assert not _session_lock.locked()

    def test_surface_failure_sets_error_state(self, side_by_side_monitors):
        """Test that a surface failure is reported with the error state."""
        manager = CalibrationManager(ScriptedSurface([[("confirm",)]]))

        with pytest.raises(InteractionSurfaceFailure):
            manager.run_calibration(side_by_side_monitors)

        assert manager.status.state == CalibrationState.ERROR
        assert manager.status.errors

    def test_concurrent_session_rejected(self, side_by_side_monitors):
        """Test that a second session cannot start while one is running."""
        surface = ScriptedSurface([])
        assert _session_lock.acquire(blocking=False)
        try:
            with pytest.raises(CalibrationInProgressError):
                CalibrationManager(surface).run_calibration(side_by_side_monitors)
        finally:
            _session_lock.release()

        assert surface.configs == []

    def test_lock_released_after_failure(self, side_by_side_monitors, gap_script):
        """Test that a failed run does not block the next one."""
        with pytest.raises(InteractionCancelledError):
            run_calibration(side_by_side_monitors, ScriptedSurface([[("cancel",)]]))

        results = run_calibration(
            side_by_side_monitors, ScriptedSurface([[("confirm",)], gap_script(0)])
        )
        assert len(results) == 1
