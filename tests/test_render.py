import random
import uuid

import numpy as np
import pytest

from _harness import interleave, make_cable, rail_segments
from stpcable.cables import Cable
from stpcable.centerline import build_centerline
from stpcable.errors import CYCLIC_REFERENCE, DiagnosticCollector
from stpcable.io.entities import parse_entities
from stpcable.render import (
    RENDER_TYPE_CABLE,
    UNIT_MILLIMETERS,
    deliver_cables,
    feature_point_buffers,
    feature_prefix,
    matching_entities,
    point_cloud_buffers,
    show_feature_points,
    show_point_cloud,
)


class _Renderer:
    def __init__(self):
        self.calls = []

    def add_predefined_drawing(self, points, render_type, unit, name, identifier):
        self.calls.append((points, render_type, unit, name, identifier))


class _Viewer:
    def __init__(self):
        self.positions = None
        self.colors = None

    def update_points(self, positions, colors):
        self.positions = positions
        self.colors = colors


def _finished(x0=0.0, z=0.0):
    cable = make_cable(rail_segments(x0=x0, z=z, splines=1, points=3))
    return Cable(cable.rail1, cable.rail2, cable.diameter,
                 centerline=tuple(build_centerline(cable, 1.0)))


def test_deliver_cables():
    renderer = _Renderer()
    cables = [_finished(), Cable((), (), 0.0), _finished(z=5.0)]
    ids = deliver_cables(cables, renderer)
    assert len(ids) == 2
    assert len(set(ids)) == 2
    assert all(isinstance(i, uuid.UUID) for i in ids)
    points, render_type, unit, name, identifier = renderer.calls[0]
    assert points == list(cables[0].centerline)
    assert render_type == RENDER_TYPE_CABLE == "Cable"
    assert unit == UNIT_MILLIMETERS == "millimeters"
    assert name == "cable_1"
    assert identifier == ids[0]
    assert renderer.calls[1][3] == "cable_3"


def test_point_cloud_buffers_shape_and_colors():
    cables = [_finished(), _finished(z=5.0)]
    positions, colors = point_cloud_buffers(cables, random.Random(7))
    assert positions.shape == (6, 3)
    assert colors.shape == (6, 3)
    assert positions.dtype == np.float32
    assert np.all(colors[:3] == colors[0])
    assert np.all(colors[3:] == colors[3])
    assert np.all((colors >= 0.0) & (colors < 1.0))
    assert positions[3] == pytest.approx([0.0, 0.0, 5.0])


def test_point_cloud_colors_follow_seed():
    cables = [_finished(), _finished(z=5.0)]
    _, first = point_cloud_buffers(cables, random.Random(3))
    _, second = point_cloud_buffers(cables, random.Random(3))
    assert np.array_equal(first, second)


def test_offset_to_origin():
    positions, _ = point_cloud_buffers([_finished(x0=10.0, z=2.0)], offset_to_origin=True)
    assert positions[0] == pytest.approx([0.0, 0.0, 0.0])
    assert positions[-1] == pytest.approx([2.0, 0.0, 0.0])


def test_empty_point_cloud():
    positions, colors = point_cloud_buffers([])
    assert positions.shape == (0, 3)
    assert colors.shape == (0, 3)


def test_show_point_cloud():
    viewer = _Viewer()
    assert show_point_cloud([_finished()], viewer)
    assert viewer.positions.shape == (3, 3)


def test_show_point_cloud_without_points(caplog):
    viewer = _Viewer()
    with caplog.at_level("WARNING", logger="stpcable"):
        assert not show_point_cloud([], viewer)
    assert viewer.positions is None
    assert "zero points" in caplog.text


FEATURE_LINES = [
    "#1=CARTESIAN_POINT('',(0.0,0.0,0.0));",
    "#2=CARTESIAN_POINT('',(1.0,0.0,0.0));",
    "#3=CARTESIAN_POINT('',(1.0,2.0,0.0));",
    "#4=B_SPLINE_CURVE('',(#1,#2));",
    "#5=B_SPLINE_CURVE_WITH_KNOTS('',(#2,#3));",
    "#6=POLYLINE('',(#2,#3));",
    "#7=TRIMMED_CURVE('',(#8));",
    "#8=WRAPPER('',#7);",
]


class TestFeaturePoints:

    def _store(self):
        return parse_entities(FEATURE_LINES)

    def test_feature_prefix(self):
        assert feature_prefix("  axis2 placement ") == "AXIS2_PLACEMENT"
        assert feature_prefix("Cartesian_Point") == "CARTESIAN_POINT"
        with pytest.raises(ValueError):
            feature_prefix("   ")

    def test_prefix_selects_every_variant(self):
        store = self._store()
        assert matching_entities(store, "b spline") == [4, 5]
        assert matching_entities(store, "b spline curve with knots") == [5]
        assert matching_entities(store, "cartesian point") == [1, 2, 3]
        assert matching_entities(store, "circle") == []

    def test_one_color_per_entity(self):
        positions, colors = feature_point_buffers(self._store(), "b spline", random.Random(5))
        assert positions.shape == (4, 3)
        assert colors.shape == (4, 3)
        assert positions[3] == pytest.approx([1.0, 2.0, 0.0])
        assert np.all(colors[1] == colors[0])
        assert np.all(colors[3] == colors[2])
        assert np.all((colors >= 0.0) & (colors < 1.0))

    def test_colors_follow_seed(self):
        _, first = feature_point_buffers(self._store(), "cartesian point", random.Random(9))
        _, second = feature_point_buffers(self._store(), "cartesian point", random.Random(9))
        assert np.array_equal(first, second)

    def test_offset_to_origin(self):
        positions, _ = feature_point_buffers(self._store(), "polyline", offset_to_origin=True)
        assert positions[0] == pytest.approx([0.0, 0.0, 0.0])
        assert positions[1] == pytest.approx([0.0, 2.0, 0.0])

    def test_cycle_is_reported_and_skipped(self):
        collector = DiagnosticCollector()
        positions, _ = feature_point_buffers(self._store(), "trimmed", collector=collector)
        assert positions.shape == (0, 3)
        assert collector.error_count == 1
        assert collector.with_code(CYCLIC_REFERENCE)[0].entity_id == 7

    def test_spline_file(self, step_lines):
        store = parse_entities(step_lines(interleave(rail_segments())))
        positions, colors = feature_point_buffers(store, "b spline curve", random.Random(1))
        assert positions.shape == (30, 3)
        for block in colors.reshape(6, 5, 3):
            assert np.all(block == block[0])

    def test_show_feature_points(self):
        viewer = _Viewer()
        assert show_feature_points(self._store(), "cartesian", viewer)
        assert viewer.positions.shape == (3, 3)

    def test_show_feature_points_without_match(self, caplog):
        viewer = _Viewer()
        with caplog.at_level("WARNING", logger="stpcable"):
            assert not show_feature_points(self._store(), "circle", viewer)
        assert viewer.positions is None
        assert "zero points" in caplog.text
