"""
End-to-end reconstruction tests.
"""

import pytest

from _harness import interleave, rail_segments
from stpcable.config import ReconstructionConfig
from stpcable.errors import (
    CYCLIC_REFERENCE,
    UNRESOLVED_REFERENCE,
    UNTERMINATED_STATEMENT,
    MalformedFileError,
)
from stpcable.geometry import dist
from stpcable.pipeline import reconstruct_cables, reconstruct_file


def _two_cables(step_lines):
    return step_lines(interleave(rail_segments(), rail_segments(z=10.0)))


class TestReconstruction:

    def test_two_cables_recovered(self, step_lines):
        result = reconstruct_cables(_two_cables(step_lines))
        assert result.splines_found == 12
        assert len(result.cables) == 2
        assert result.cables_discarded == 0
        assert result.diagnostics == []
        for cable, z in zip(result.cables, (0.0, 10.0)):
            assert cable.diameter == pytest.approx(2.0)
            assert cable.centerline[0] == pytest.approx((0.0, 0.0, z))
            assert cable.centerline[-1] == pytest.approx((6.0, 0.0, z))
            assert len(cable.centerline) >= 50

    def test_rail_parity(self, step_lines):
        for cable in reconstruct_cables(_two_cables(step_lines)).cables:
            assert len(cable.rail1) == len(cable.rail2)

    def test_diameter_stability(self, step_lines):
        config = ReconstructionConfig()
        for cable in reconstruct_cables(_two_cables(step_lines), config).cables:
            for s1, s2 in zip(cable.rail1, cable.rail2):
                assert abs(dist(s1.start, s2.start) - cable.diameter) < config.tolerance

    def test_centerline_spacing(self, step_lines):
        config = ReconstructionConfig(max_distance_between_points=0.05)
        for cable in reconstruct_cables(_two_cables(step_lines), config).cables:
            for a, b in zip(cable.centerline, cable.centerline[1:]):
                assert dist(a, b) <= 0.05 + 1e-9

    def test_repeatable(self, step_lines):
        lines = _two_cables(step_lines)
        first = reconstruct_cables(lines)
        second = reconstruct_cables(lines)
        assert first.cables == second.cables

    def test_short_cables_are_discarded(self, step_lines):
        lines = step_lines(interleave(rail_segments(splines=2)))
        result = reconstruct_cables(lines)
        assert result.cables == []
        assert result.cables_discarded == 1

        relaxed = ReconstructionConfig(min_rail_splines=2)
        assert len(reconstruct_cables(lines, relaxed).cables) == 1

    def test_sparse_centerline_is_discarded(self, step_lines):
        lines = _two_cables(step_lines)
        config = ReconstructionConfig(max_distance_between_points=1.0)
        result = reconstruct_cables(lines, config)
        assert result.cables == []
        assert result.cables_discarded == 2


class TestSegmentAttachment:

    def _split_cable(self, step_lines):
        return step_lines(interleave(rail_segments(), rail_segments(x0=7.0)))

    def test_segments_separate_by_default(self, step_lines):
        result = reconstruct_cables(self._split_cable(step_lines))
        assert len(result.cables) == 2

    def test_segments_joined_when_enabled(self, step_lines):
        config = ReconstructionConfig(attach_segments=True)
        result = reconstruct_cables(self._split_cable(step_lines), config)
        assert len(result.cables) == 1
        cable = result.cables[0]
        assert len(cable.rail1) == len(cable.rail2) == 6
        assert cable.centerline[-1] == pytest.approx((13.0, 0.0, 0.0))

    def test_diameter_stability_when_joined(self, step_lines):
        lines = step_lines(interleave(rail_segments(), rail_segments(x0=7.0, half_gap=1.5)))
        config = ReconstructionConfig(attach_segments=True)
        result = reconstruct_cables(lines, config)
        assert len(result.cables) == 2
        assert sorted(c.diameter for c in result.cables) == pytest.approx([2.0, 3.0])
        for cable in result.cables:
            for s1, s2 in zip(cable.rail1, cable.rail2):
                assert abs(dist(s1.start, s2.start) - cable.diameter) < config.tolerance


class TestDiagnostics:

    def test_missing_reference_is_reported(self):
        lines = [
            "#1=CARTESIAN_POINT('',(0.0,0.0,0.0));",
            "#2=CARTESIAN_POINT('',(1.0,0.0,0.0));",
            "#3=B_SPLINE_CURVE('',(#1,#99,#2));",
        ]
        result = reconstruct_cables(lines)
        assert result.cables == []
        assert result.splines_found == 1
        assert result.unresolved_references == 1
        assert [d.code for d in result.warnings] == [UNRESOLVED_REFERENCE]
        assert result.errors == []

    def test_cycle_does_not_abort_run(self, step_lines):
        lines = _two_cables(step_lines) + [
            "#9001=B_SPLINE_CURVE('',(#9002));",
            "#9002=WRAPPER('',#9001);",
        ]
        result = reconstruct_cables(lines)
        assert len(result.cables) == 2
        assert [d.code for d in result.errors] == [CYCLIC_REFERENCE]

    def test_truncated_file_raises(self):
        lines = [
            "#1=CARTESIAN_POINT('',(0.0,0.0,0.0));",
            "#2=CARTESIAN_POINT('',(1.0,0.0,0.0));",
            "#3=B_SPLINE_CURVE('',#1,#2)",
        ]
        with pytest.raises(MalformedFileError) as excinfo:
            reconstruct_cables(lines)
        assert excinfo.value.diagnostic.code == UNTERMINATED_STATEMENT
        assert excinfo.value.diagnostic.line == 3


def test_reconstruct_file(harness_file):
    result = reconstruct_file(harness_file)
    assert result.entities_found > 0
    assert len(result.cables) == 2


def test_result_json(step_lines):
    data = reconstruct_cables(_two_cables(step_lines)).to_json()
    assert data["splines"] == 12
    assert len(data["cables"]) == 2
    assert data["cables"][0]["splines"] == 3
    assert data["cables"][0]["centerline"][0] == pytest.approx([0.0, 0.0, 0.0])
    assert data["diagnostics"] == []
