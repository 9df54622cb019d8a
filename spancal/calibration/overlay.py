"""Interactive adjustment protocol.

``OverlaySession`` is the logical state machine behind one Scale or Gap
step of a monitor pair. It knows nothing about windows or pixels on
screen: an interaction surface translates raw input into ``press``,
``move``, ``release`` and ``key`` calls, draws ``segments``/``gap``, and
reads ``result()`` once the session is confirmed or cancelled. A surface
also returns once ``abandoned`` is set: the caller stopped waiting and
the session ignores further input.

States:
    IDLE       no segment selected
    DRAGGING   button held on a hit-tested segment (Scale) or anywhere (Gap)
    CONFIRMED  terminal, result carries the adjusted values
    CANCELLED  terminal, the whole calibration run must be aborted
"""

import logging
import threading
from enum import Enum
from typing import Optional

from ..config.schemas import OverlaySettings
from .models import OverlayConfig, OverlayResult, OverlayStep

logger = logging.getLogger(__name__)

# Segment indices in OverlayResult.segments
NEAR_CHILD = 0
NEAR_PARENT = 1
FAR_CHILD = 2
FAR_PARENT = 3

SCALE_INSTRUCTIONS = (
    "Drag each colored line so it sits at the same physical height on both displays.\n"
    "Keep the two colors as far apart as possible for best accuracy.\n"
    "Arrow keys: ±1px  |  Enter: confirm  |  Esc: cancel"
)


class OverlayState(Enum):
    """Interaction states of an overlay session."""

    IDLE = "idle"
    DRAGGING = "dragging"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class Key(Enum):
    """Keyboard input understood by the overlay."""

    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    RETURN = "return"
    ESCAPE = "escape"


_NUDGE_DIRECTION = {Key.UP: -1, Key.LEFT: -1, Key.DOWN: 1, Key.RIGHT: 1}


def initial_segments(
    config: OverlayConfig, settings: OverlaySettings
) -> tuple[int, int, int, int]:
    """Starting line positions for the Scale step.

    Lines start at the near and far fractions of the smaller monitor's size
    along the line axis, measured from each monitor's own origin.
    """
    child, parent = config.child_rect, config.parent_rect
    if config.orientation.is_horizontal:
        size = min(child.h, parent.h)
        child_origin, parent_origin = child.y, parent.y
    else:
        size = min(child.w, parent.w)
        child_origin, parent_origin = child.x, parent.x

    near = int(size * settings.near_fraction)
    far = int(size * settings.far_fraction)
    return (child_origin + near, parent_origin + near, child_origin + far, parent_origin + far)


def default_midpoints(config: OverlayConfig) -> tuple[int, int]:
    """Geometric centers of both monitors along the line axis."""
    child, parent = config.child_rect, config.parent_rect
    if config.orientation.is_horizontal:
        return (child.y + child.h // 2, parent.y + parent.h // 2)
    return (child.x + child.w // 2, parent.x + parent.w // 2)


class OverlaySession:
    """State machine for one Scale or Gap step of a monitor pair.

    Coordinates are integers in the frame of ``config.monitors``. Lines may
    be dragged past the monitor edges; nothing is clamped.
    """

    def __init__(self, config: OverlayConfig, settings: Optional[OverlaySettings] = None):
        self.config = config
        self.settings = settings or OverlaySettings()

        self.segments: list[int] = (
            list(initial_segments(config, self.settings))
            if config.step == OverlayStep.SCALE
            else [0, 0, 0, 0]
        )
        self.gap = 0
        self.midpoints = config.midpoints or default_midpoints(config)

        self.state = OverlayState.IDLE
        self.selected: Optional[int] = None
        self.last_interacted: Optional[int] = None
        self._drag_start = 0
        self._drag_start_value = 0
        self._abandoned = threading.Event()

    @property
    def step(self) -> OverlayStep:
        return self.config.step

    @property
    def is_terminal(self) -> bool:
        return self.state in (OverlayState.CONFIRMED, OverlayState.CANCELLED)

    @property
    def abandoned(self) -> bool:
        return self._abandoned.is_set()

    def abandon(self) -> None:
        """Stop accepting input; the surface should return as soon as it sees this."""
        if not self._abandoned.is_set():
            logger.warning(
                f"Overlay {self.step.value} session abandoned while {self.state.value}"
            )
        self._abandoned.set()

    @property
    def _closed(self) -> bool:
        return self.is_terminal or self.abandoned

    def _line_axis(self, x: int, y: int) -> int:
        # Scale lines move across the seam, along y for side-by-side pairs
        return y if self.config.orientation.is_horizontal else x

    def _gap_axis(self, x: int, y: int) -> int:
        return x if self.config.orientation.is_horizontal else y

    def hit_test(self, x: int, y: int) -> Optional[int]:
        """Return the first segment under the pointer, if any.

        A segment is hit when the pointer lies within its monitor's extent
        across the line and within ``hit_tolerance`` of the line itself.
        """
        child, parent = self.config.child_rect, self.config.parent_rect
        tolerance = self.settings.hit_tolerance
        horizontal = self.config.orientation.is_horizontal

        for index, position in enumerate(self.segments):
            rect = child if index % 2 == 0 else parent
            if horizontal:
                inside = rect.x <= x <= rect.right
                distance = abs(y - position)
            else:
                inside = rect.y <= y <= rect.bottom
                distance = abs(x - position)
            if inside and distance <= tolerance:
                return index
        return None

    def press(self, x: int, y: int) -> bool:
        """Pointer button pressed. Returns True if a drag started."""
        if self._closed:
            return False

        if self.step == OverlayStep.SCALE:
            self.selected = self.hit_test(x, y)
            if self.selected is None:
                return False
            self._drag_start = self._line_axis(x, y)
            self._drag_start_value = self.segments[self.selected]
            self.last_interacted = self.selected
        else:
            self._drag_start = self._gap_axis(x, y)
            self._drag_start_value = self.gap

        self.state = OverlayState.DRAGGING
        return True

    def move(self, x: int, y: int) -> None:
        """Pointer moved; updates the dragged value while a drag is active."""
        if self.state != OverlayState.DRAGGING or self.abandoned:
            return

        if self.step == OverlayStep.SCALE:
            if self.selected is None:
                return
            delta = self._line_axis(x, y) - self._drag_start
            self.segments[self.selected] = self._drag_start_value + delta
            logger.debug(f"Segment {self.selected} dragged to {self.segments[self.selected]}")
        else:
            delta = self._gap_axis(x, y) - self._drag_start
            self.gap = self._drag_start_value + delta

    def release(self) -> None:
        """Pointer button released; ends any drag."""
        if self.state == OverlayState.DRAGGING:
            self.state = OverlayState.IDLE
            self.selected = None

    def nudge(self, direction: int) -> None:
        """Move the last interacted line (Scale) or the gap by one step."""
        if self._closed:
            return
        delta = direction * self.settings.nudge_step
        if self.step == OverlayStep.SCALE:
            if self.last_interacted is not None:
                self.segments[self.last_interacted] += delta
        else:
            self.gap += delta

    def key(self, key: Key) -> None:
        """Keyboard input: arrows nudge, Return confirms, Escape cancels."""
        if key == Key.RETURN:
            self.confirm()
        elif key == Key.ESCAPE:
            self.cancel()
        else:
            self.nudge(_NUDGE_DIRECTION[key])

    def confirm(self) -> None:
        if not self._closed:
            self.state = OverlayState.CONFIRMED
            self.selected = None

    def cancel(self) -> None:
        if not self._closed:
            self.state = OverlayState.CANCELLED
            self.selected = None

    def instructions(self) -> str:
        """Text a surface shows to the user for the current step."""
        if self.step == OverlayStep.SCALE:
            return SCALE_INSTRUCTIONS
        return (
            f"Gap: {self.gap}px  |  Drag or arrow keys to adjust  |  "
            "Enter: confirm  |  Esc: cancel"
        )

    def result(self) -> OverlayResult:
        """Result of a finished session.

        Raises:
            RuntimeError: If the session has not been confirmed or cancelled
        """
        if not self.is_terminal:
            raise RuntimeError(f"Overlay session is still {self.state.value}")
        if self.state == OverlayState.CANCELLED:
            return OverlayResult(cancelled=True)
        return OverlayResult(
            cancelled=False, segments=tuple(self.segments), gap=self.gap
        )
