"""Monitor metadata: models, size enrichment and discovery seam."""

from .discovery import (
    MonitorSource,
    StaticMonitorSource,
    discover_monitors,
    load_monitors,
)
from .models import MM_PER_INCH, Monitor, MonitorRect, Rotation, SizeSource
from .sizing import (
    SizeOverrides,
    enrich_monitors,
    extract_diagonal,
    guess_diagonal_from_names,
    physical_from_diagonal,
)

__all__ = [
    # Models
    "Monitor",
    "MonitorRect",
    "Rotation",
    "SizeSource",
    "MM_PER_INCH",
    # Sizing
    "SizeOverrides",
    "enrich_monitors",
    "extract_diagonal",
    "guess_diagonal_from_names",
    "physical_from_diagonal",
    # Discovery
    "MonitorSource",
    "StaticMonitorSource",
    "discover_monitors",
    "load_monitors",
]
