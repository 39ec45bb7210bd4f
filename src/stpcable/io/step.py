"""STEP export of polylines as B-spline curves."""

from __future__ import annotations

from typing import List, Sequence, TextIO, Tuple

Vec3 = Tuple[float, float, float]


class _EntityWriter:
    """Helper to append STEP entities with sequential ids."""

    def __init__(self) -> None:
        self.entities: List[str] = []

    def add(self, record: str) -> int:
        idx = len(self.entities) + 1
        self.entities.append(f"#{idx} = {record};")
        return idx

    def write(self, stream: TextIO) -> None:
        for entity in self.entities:
            stream.write(entity + "\n")


def write_step_curves(curves: Sequence[Sequence[Vec3]],
                      path_or_file,
                      *,
                      name: str = 'stpcable',
                      schema: str = 'AUTOMOTIVE_DESIGN_CC2',
                      per_line: int = 8) -> List[int]:
    """Write each polyline in ``curves`` as a ``B_SPLINE_CURVE_WITH_KNOTS``.

    The polyline vertices become the control points, in order. Returns
    the entity ids of the curves, in input order.
    """
    if not curves:
        raise ValueError('no curves to export')
    writer = _EntityWriter()
    curve_ids: List[int] = []

    for index, curve in enumerate(curves):
        if len(curve) < 2:
            raise ValueError(f'curve {index} needs at least two points, got {len(curve)}')
        point_ids = [
            writer.add(f"CARTESIAN_POINT('', ({p[0]:.6f}, {p[1]:.6f}, {p[2]:.6f}))")
            for p in curve
        ]
        degree = min(3, len(point_ids) - 1)
        interior = len(point_ids) - degree - 1
        multiplicities = [degree + 1] + [1] * interior + [degree + 1]
        knots = [i / (interior + 1) for i in range(interior + 2)]
        curve_ids.append(writer.add(
            f"B_SPLINE_CURVE_WITH_KNOTS('{name}_{index + 1}', {degree}, (\n"
            + _format_id_list(point_ids, per_line=per_line)
            + "),\n    .UNSPECIFIED., .F., .F., ("
            + ", ".join(str(m) for m in multiplicities)
            + "),\n    ("
            + ", ".join(f"{k:.6f}" for k in knots)
            + "), .UNSPECIFIED.)"
        ))

    close_stream = False
    if hasattr(path_or_file, 'write'):
        stream = path_or_file
    else:
        stream = open(path_or_file, 'w', encoding='utf-8')
        close_stream = True

    try:
        _write_header(stream, name, schema)
        stream.write("DATA;\n")
        writer.write(stream)
        stream.write("ENDSEC;\nEND-ISO-10303-21;\n")
    finally:
        if close_stream:
            stream.close()
    return curve_ids


def _write_header(stream: TextIO, name: str, schema: str) -> None:
    stream.write("ISO-10303-21;\n")
    stream.write("HEADER;\n")
    stream.write("FILE_DESCRIPTION(('stpcable export'),'2;1');\n")
    stream.write(
        "FILE_NAME('"
        + name
        + "','2024-01-01T00:00:00',('stpcable'),(''), 'stpcable', 'stpcable', '');\n"
    )
    stream.write("FILE_SCHEMA(('" + schema + "'));\n")
    stream.write("ENDSEC;\n")


def _format_id_list(ids: Sequence[int], *, indent: str = '    ', per_line: int = 8) -> str:
    lines: List[str] = []
    for start in range(0, len(ids), per_line):
        chunk = ids[start:start + per_line]
        lines.append(indent + ", ".join(f"#{entity}" for entity in chunk))
    return ",\n".join(lines)


__all__ = ['write_step_curves']
