"""Error types raised by the calibration core.

Every failure is reported to the caller as a single exception naming the
stage that failed. Nothing is retried automatically: calibration is driven
by a human, so a retry means re-running the whole flow.
"""

from typing import Optional


class CalibrationError(Exception):
    """Base exception for calibration failures."""

    stage = "calibration"

    def __init__(self, message: str, stage: Optional[str] = None):
        super().__init__(message)
        if stage is not None:
            self.stage = stage

    def __str__(self) -> str:
        return f"[{self.stage}] {super().__str__()}"


class InsufficientMonitorsError(CalibrationError):
    """Raised when fewer than two monitors are supplied."""

    stage = "planning"

    def __init__(self, count: int):
        super().__init__(f"Need at least 2 monitors for calibration, got {count}")
        self.count = count


class DuplicateMonitorError(CalibrationError):
    """Raised when two monitors share the same id."""

    stage = "planning"

    def __init__(self, monitor_ids: list[int]):
        super().__init__(f"Monitor ids must be unique, duplicated: {monitor_ids}")
        self.monitor_ids = monitor_ids


class InteractionCancelledError(CalibrationError):
    """Raised when the user aborts a Scale or Gap step.

    Cancellation is terminal for the whole run: results of earlier pairs are
    discarded along with the current one.
    """

    def __init__(self, stage: str, pair: Optional[tuple[int, int]] = None):
        message = "Calibration cancelled"
        if pair is not None:
            message += f" during {stage} step of pair {pair[0]} -> {pair[1]}"
        super().__init__(message, stage=stage)
        self.pair = pair


class InteractionSurfaceFailure(CalibrationError):
    """Raised when the interaction surface could not be run or reached."""

    stage = "interaction"


class CalibrationInProgressError(CalibrationError):
    """Raised when a second calibration session is started concurrently."""

    stage = "session"


class LayoutReconstructionError(CalibrationError):
    """Raised when a physical layout cannot be reconstructed."""

    stage = "reconstruction"


class SerializationFailure(CalibrationError):
    """Raised when export documents cannot be built from the results."""

    stage = "export"
