"""Unit tests for the export formatter."""

import json
import math
from unittest.mock import patch

import pytest
from lzstring import LZString

from spancal.calibration import BindOrientation, CalibrationResult
from spancal.config import ExportSettings
from spancal.errors import LayoutReconstructionError, SerializationFailure
from spancal.export import (
    aspect_ratio,
    build_config,
    build_layout,
    build_layout_url,
    export_json,
    format_resolution,
    layout_json,
)
from spancal.monitors import Rotation, SizeSource

TIMESTAMP = "2024-05-01T12:00:00Z"


@pytest.fixture()
def right_result():
    return CalibrationResult(
        monitor_id=1,
        scale=1.0,
        relative_x=1930.0,
        relative_y=0.0,
        gap=5,
        bound_to=0,
        bind_orientation=BindOrientation.HORIZONTAL,
        align_offset_unbound=270.0,
        align_offset_bound=270.0,
    )


@pytest.mark.unit()
class TestHelpers:
    """Test label and aspect helpers."""

    @pytest.mark.parametrize(
        ("resolution", "expected"),
        [
            ((1920, 1080), (16, 9)),
            ((2560, 1080), (64, 27)),
            ((1920, 1200), (8, 5)),
            ((1080, 1920), (9, 16)),
            ((0, 0), (16, 9)),
        ],
    )
    def test_aspect_ratio(self, resolution, expected):
        """Test gcd-reduced aspect ratios."""
        assert aspect_ratio(*resolution) == expected

    def test_format_resolution(self):
        """Test resolution nicknames with a fallback."""
        assert format_resolution(2560, 1440) == "QHD"
        assert format_resolution(3840, 2160) == "4K"
        assert format_resolution(1366, 768) == "1366x768"


@pytest.mark.unit()
class TestCalibrationDocument:
    """Test the generic calibration document."""

    def test_fields(self, side_by_side_monitors, right_result):
        """Test per-monitor records, including the unbound primary."""
        document = build_config(side_by_side_monitors, [right_result], calibrated_at=TIMESTAMP)

        primary, child = document.monitors
        assert primary.scale == 1.0
        assert primary.bound_to is None
        assert primary.bind_orientation is None
        assert primary.is_primary
        assert child.bound_to == 0
        assert child.relative_x == 1930.0
        assert child.bind_orientation == "horizontal"
        assert child.friendly_name == "Right"
        assert child.physical_size_mm is None

    def test_json_keys(self, side_by_side_monitors, right_result):
        """Test camelCase keys in the serialized document."""
        data = json.loads(
            export_json(side_by_side_monitors, [right_result], calibrated_at=TIMESTAMP)
        )

        assert data["version"] == 1
        assert data["calibratedAt"] == TIMESTAMP
        child = data["monitors"][1]
        assert child["deviceName"] == "\\\\.\\DISPLAY2"
        assert child["boundTo"] == 0
        assert child["bindOrientation"] == "horizontal"
        assert child["relativeX"] == 1930.0
        assert child["virtualPosition"] == [1920, 0]
        assert child["physicalSizeSource"] == "none"

    def test_physical_size(self, monitor_factory):
        """Test physical size and its source in the record."""
        monitor = monitor_factory(
            0,
            primary=True,
            physical_width_mm=527,
            physical_height_mm=296,
            size_source=SizeSource.EDID,
        )
        record = build_config([monitor], []).monitors[0]

        assert record.physical_size_mm == (527, 296)
        assert record.physical_size_source == "edid"

    def test_timestamp_format(self, side_by_side_monitors):
        """Test the generated UTC timestamp."""
        stamp = build_config(side_by_side_monitors, []).calibrated_at
        assert len(stamp) == 20
        assert stamp.endswith("Z")
        assert stamp[10] == "T"

    def test_schema_version(self, side_by_side_monitors):
        """Test the configured document version."""
        document = build_config(side_by_side_monitors, [], ExportSettings(schema_version=2))
        assert document.version == 2

    def test_non_finite_value(self, side_by_side_monitors):
        """Test that non-finite offsets fail serialization."""
        result = CalibrationResult(
            monitor_id=1,
            scale=1.0,
            relative_x=float("inf"),
            relative_y=0.0,
            gap=0,
            bound_to=0,
            bind_orientation=BindOrientation.HORIZONTAL,
        )

        with pytest.raises(SerializationFailure) as exc_info:
            build_config(side_by_side_monitors, [result])
        assert exc_info.value.stage == "export"


@pytest.mark.unit()
class TestLayoutDocument:
    """Test the layout-tool document."""

    def test_entries(self, side_by_side_monitors, right_result):
        """Test labels, sizes and positions of each monitor."""
        document = build_layout(side_by_side_monitors, [right_result])

        assert document.v == 1
        primary, child = document.m
        assert primary.n == '24" FHD'
        assert primary.d == 24.0
        assert primary.ar == (16, 9)
        assert (primary.rx, primary.ry) == (1920, 1080)
        assert primary.rot is None
        assert primary.dn == "Left"
        assert child.n == '24" FHD'
        assert child.d == pytest.approx(24.0)
        assert child.x > primary.x

    def test_centered_positions(self, side_by_side_monitors, right_result):
        """Test that positions are centered on the canvas and rounded."""
        document = build_layout(side_by_side_monitors, [right_result])
        primary, child = document.m

        ppi = math.hypot(1920, 1080) / 24.0
        width = 1920 / ppi
        gap = 5 / ppi
        span = 2 * width + gap
        assert primary.x == pytest.approx(72.0 - span / 2, abs=1e-4)
        assert child.x == pytest.approx(primary.x + width + gap, abs=1e-4)
        assert primary.x == round(primary.x, 4)

    def test_label_rounds_half_up(self, monitor_factory):
        """Test that a .5 diagonal rounds up in the label."""
        monitors = [
            monitor_factory(0, primary=True, diagonal_in=22.5),
            monitor_factory(1, 1920, diagonal_in=21.5),
        ]
        result = CalibrationResult(
            monitor_id=1,
            scale=1.0,
            relative_x=1920.0,
            relative_y=0.0,
            gap=0,
            bound_to=0,
            bind_orientation=BindOrientation.HORIZONTAL,
        )

        labels = [m.n for m in build_layout(monitors, [result]).m]

        assert labels == ['23" FHD', '22" FHD']

    def test_portrait_rotation(self, monitor_factory):
        """Test that portrait monitors carry rot 90."""
        monitors = [
            monitor_factory(0, primary=True, ppi=96.0),
            monitor_factory(1, 1920, 0, w=1080, h=1920, orientation=Rotation.PORTRAIT),
        ]
        result = CalibrationResult(
            monitor_id=1,
            scale=1.0,
            relative_x=1920.0,
            relative_y=0.0,
            gap=0,
            bound_to=0,
            bind_orientation=BindOrientation.HORIZONTAL,
        )

        data = json.loads(layout_json(monitors, [result]))

        assert "rot" not in data["m"][0]
        assert data["m"][1]["rot"] == 90
        assert data["m"][1]["ar"] == [9, 16]
        assert "dn" not in data["m"][1]

    def test_requires_physical_layout(self, monitor_factory, right_result):
        """Test that missing physical sizes surface as a reconstruction error."""
        monitors = [monitor_factory(0, primary=True), monitor_factory(1, 1920)]
        with pytest.raises(LayoutReconstructionError):
            build_layout(monitors, [right_result])

    def test_layout_url(self, side_by_side_monitors, right_result):
        """Test that the URL fragment decompresses to the layout document."""
        url = build_layout_url(side_by_side_monitors, [right_result])
        base = ExportSettings().layout_url_base

        assert url.startswith(base + "~")
        fragment = url[len(base) + 1 :]
        assert "{" not in fragment
        payload = LZString().decompressFromEncodedURIComponent(fragment)
        assert payload == layout_json(side_by_side_monitors, [right_result])
        assert json.loads(payload)["v"] == 1

    def test_layout_url_base(self, side_by_side_monitors, right_result):
        """Test a configured base URL."""
        settings = ExportSettings(layout_url_base="https://example.com/#layout=")
        url = build_layout_url(side_by_side_monitors, [right_result], settings)
        assert url.startswith("https://example.com/#layout=~")

    def test_layout_url_without_compression(self, side_by_side_monitors, right_result):
        """Test the raw JSON fallback when compression yields nothing."""
        with patch(
            "spancal.export.formatter.LZString.compressToEncodedURIComponent",
            return_value="",
        ):
            url = build_layout_url(side_by_side_monitors, [right_result])

        payload = url[len(ExportSettings().layout_url_base) :]
        assert payload == layout_json(side_by_side_monitors, [right_result])
