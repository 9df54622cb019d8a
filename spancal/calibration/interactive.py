"""Interaction surface seam.

An interaction surface owns the full-screen overlay: it renders the
session's lines, translates raw input into ``OverlaySession`` calls, and
returns once the session reaches a terminal state or is abandoned. The
calibration manager runs it on a dedicated thread and blocks on a one-shot
handoff until the result (or a failure) comes back.
"""

import logging
import queue
import threading
from typing import Any, Optional, Protocol, Sequence

from ..config.schemas import OverlaySettings
from ..errors import InteractionSurfaceFailure
from .models import OverlayConfig, OverlayResult
from .overlay import Key, OverlaySession

logger = logging.getLogger(__name__)

Step = tuple[Any, ...]


class InteractionSurface(Protocol):
    """Protocol for interactive overlay implementations."""

    def run(self, session: OverlaySession) -> None:
        """Drive the session until it is confirmed or cancelled."""
        ...


class ScriptedSurface:
    """Interaction surface that replays prepared input scripts.

    Each call to ``run`` consumes the next script. A script is a sequence of
    steps such as ``("press", x, y)``, ``("move", x, y)``, ``("release",)``,
    ``("key", Key.DOWN)``, ``("confirm",)`` or ``("cancel",)``; each step
    names an ``OverlaySession`` method and its arguments.

    Example:
        surface = ScriptedSurface([
            ScriptedSurface.drag((100, 270), (100, 300)) + [("confirm",)],
            [("key", Key.RIGHT), ("confirm",)],
        ])
    """

    def __init__(self, scripts: Sequence[Sequence[Step]]):
        self._scripts = [list(script) for script in scripts]
        self.configs: list[OverlayConfig] = []
        self.sessions: list[OverlaySession] = []

    @property
    def remaining(self) -> int:
        return len(self._scripts)

    def run(self, session: OverlaySession) -> None:
        if not self._scripts:
            raise RuntimeError("No input script left for overlay session")

        self.configs.append(session.config)
        self.sessions.append(session)

        for step in self._scripts.pop(0):
            name, *args = step
            getattr(session, name)(*args)
            if session.is_terminal or session.abandoned:
                break

    @staticmethod
    def drag(start: tuple[int, int], end: tuple[int, int]) -> list[Step]:
        """Steps for a press at ``start``, a move to ``end`` and a release."""
        return [("press", *start), ("move", *end), ("release",)]

    @staticmethod
    def nudges(key: Key, count: int) -> list[Step]:
        """Steps for ``count`` presses of an arrow key."""
        return [("key", key)] * count


def run_overlay(
    surface: InteractionSurface,
    config: OverlayConfig,
    settings: Optional[OverlaySettings] = None,
) -> OverlayResult:
    """Run one overlay step on a dedicated thread and wait for its result.

    Args:
        surface: Interaction surface that drives the session
        config: Step configuration for the session
        settings: Overlay settings (tolerances, handoff timeout)

    Returns:
        The session result; ``cancelled`` is set if the user aborted

    Raises:
        InteractionSurfaceFailure: If the thread cannot start, the surface
            raises, the handoff times out, or the surface returns before the
            session is confirmed or cancelled
    """
    settings = settings or OverlaySettings()
    session = OverlaySession(config, settings)
    handoff: queue.Queue = queue.Queue(maxsize=1)

    def worker() -> None:
        try:
            surface.run(session)
        except Exception as e:
            # Handed to the waiting caller, which raises it as a surface failure
            handoff.put(("error", e))
            return
        handoff.put(("done", None))

    thread = threading.Thread(
        target=worker, name=f"overlay-{config.step.value}", daemon=True
    )
    try:
        thread.start()
    except RuntimeError as e:
        raise InteractionSurfaceFailure(f"Overlay thread could not be started: {e}") from e

    try:
        kind, payload = handoff.get(timeout=settings.handoff_timeout)
    except queue.Empty as e:
        session.abandon()
        thread.join(timeout=settings.handoff_timeout)
        if thread.is_alive():
            logger.warning(f"Overlay thread {thread.name} is still running after abandon")
        raise InteractionSurfaceFailure(
            f"Overlay {config.step.value} step did not finish within "
            f"{settings.handoff_timeout}s"
        ) from e
    thread.join()

    if kind == "error":
        raise InteractionSurfaceFailure(
            f"Interaction surface failed during {config.step.value} step: {payload}"
        ) from payload

    if not session.is_terminal:
        raise InteractionSurfaceFailure(
            f"Interaction surface returned while the {config.step.value} step "
            f"was still {session.state.value}"
        )
    return session.result()
