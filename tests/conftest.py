import io

import pytest

from _harness import interleave, rail_segments
from stpcable.io.step import write_step_curves


@pytest.fixture
def step_lines():
    """Build the lines of a STEP file holding ``curves``."""
    def _build(curves, **kwargs):
        buf = io.StringIO()
        write_step_curves(curves, buf, **kwargs)
        return buf.getvalue().splitlines()
    return _build


@pytest.fixture
def harness_file(tmp_path, step_lines):
    """Write a two-cable harness to disk and return its path."""
    path = tmp_path / "harness.stp"
    curves = interleave(rail_segments(), rail_segments(z=10.0))
    path.write_text("\n".join(step_lines(curves)) + "\n", encoding="utf-8")
    return path
