"""Physical layout reconstruction from calibration results."""

from .physical import (
    PhysicalPlacement,
    center_on_canvas,
    place_monitors,
    propagate_ppi,
    reconstruct_layout,
    relaxation_round,
    seed_ppi,
)

__all__ = [
    "PhysicalPlacement",
    "reconstruct_layout",
    "propagate_ppi",
    "relaxation_round",
    "seed_ppi",
    "place_monitors",
    "center_on_canvas",
]
