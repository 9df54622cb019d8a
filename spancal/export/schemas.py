"""Pydantic models for the exported calibration documents.

Two documents are produced from the same results: a generic calibration
record with camelCase keys, and a compact layout-tool record placing each
monitor in inches on a fixed canvas. Non-finite numbers are rejected at
construction time.
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ExportModel(BaseModel):
    """Base class for exported records."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        allow_inf_nan=False,
        extra="forbid",
    )


class CalibratedMonitor(ExportModel):
    """Generic per-monitor calibration record."""

    device_name: str
    friendly_name: str
    resolution: tuple[int, int]
    physical_size_mm: Optional[tuple[int, int]] = None
    physical_size_source: Literal["edid", "guessed", "manual", "none"] = "none"
    is_primary: bool
    virtual_position: tuple[int, int]
    scale: float = Field(gt=0)
    relative_x: float
    relative_y: float
    gap: int
    bound_to: Optional[int] = None
    bind_orientation: Optional[Literal["horizontal", "vertical"]] = None


class CalibrationDocument(ExportModel):
    """Generic calibration document."""

    version: int = Field(ge=1)
    calibrated_at: str
    monitors: list[CalibratedMonitor]


class LayoutMonitor(BaseModel):
    """One monitor of the layout-tool document.

    Keys are kept short since the document travels inside a URL.
    """

    model_config = ConfigDict(allow_inf_nan=False, extra="forbid")

    n: str = Field(description="Display label, e.g. '27\" QHD'")
    d: float = Field(gt=0, description="Diagonal in inches")
    ar: tuple[int, int] = Field(description="Reduced aspect ratio")
    rx: int = Field(gt=0, description="Horizontal resolution")
    ry: int = Field(gt=0, description="Vertical resolution")
    x: float = Field(description="Left edge on the canvas in inches")
    y: float = Field(description="Top edge on the canvas in inches")
    rot: Optional[Literal[90]] = Field(default=None, description="Portrait rotation")
    dn: Optional[str] = Field(default=None, description="Display name")


class LayoutDocument(BaseModel):
    """Layout-tool document."""

    model_config = ConfigDict(allow_inf_nan=False, extra="forbid")

    v: int = Field(ge=1)
    m: list[LayoutMonitor]
