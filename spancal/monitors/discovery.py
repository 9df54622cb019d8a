"""Monitor discovery seam.

Enumerating displays from the operating system is the job of an external
collaborator. Anything that returns ``Monitor`` records satisfies
``MonitorSource``; ``StaticMonitorSource`` and ``load_monitors`` provide
fixed layouts for fixtures and offline runs.
"""

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Optional, Protocol, Union

import yaml

from .models import Monitor
from .sizing import SizeOverrides, enrich_monitors

logger = logging.getLogger(__name__)


class MonitorSource(Protocol):
    """Protocol for monitor enumeration backends."""

    def enumerate(self) -> list[Monitor]:
        """Return the connected monitors with their virtual-desktop placement."""
        ...


class StaticMonitorSource:
    """Monitor source backed by a fixed list of records."""

    def __init__(self, monitors: Iterable[Union[Monitor, dict[str, Any]]]):
        self._monitors = [
            m if isinstance(m, Monitor) else Monitor.from_dict(m) for m in monitors
        ]

    def enumerate(self) -> list[Monitor]:
        return list(self._monitors)


def load_monitors(path: Union[str, Path]) -> list[Monitor]:
    """Load monitor records from a YAML or JSON fixture file.

    The file holds either a list of monitor mappings or a mapping with a
    ``monitors`` key. Missing ``id`` fields default to the list position.
    """
    path = Path(path)
    with open(path, encoding="utf-8") as f:
        if path.suffix.lower() == ".json":
            data = json.load(f)
        else:
            data = yaml.safe_load(f)

    if isinstance(data, dict):
        data = data.get("monitors", [])
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of monitors in {path}")

    monitors = []
    for index, record in enumerate(data):
        record = dict(record)
        record.setdefault("id", index)
        monitors.append(Monitor.from_dict(record))

    logger.info(f"Loaded {len(monitors)} monitors from {path}")
    return monitors


def discover_monitors(
    source: MonitorSource, overrides: Optional[SizeOverrides] = None
) -> list[Monitor]:
    """Enumerate monitors and apply best-effort size enrichment."""
    monitors = enrich_monitors(source.enumerate(), overrides)
    for monitor in monitors:
        logger.debug(
            f"Monitor {monitor.id} {monitor.display_name}: "
            f"{monitor.resolution_x}x{monitor.resolution_y} at "
            f"({monitor.position_x}, {monitor.position_y}), "
            f"size source {monitor.size_source.value}"
        )
    return monitors
