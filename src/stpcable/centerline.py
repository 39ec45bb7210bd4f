"""Centerline of a cable: midpoints between corresponding rail points."""

from __future__ import annotations

from math import ceil
from typing import List

from stpcable.cables import Cable
from stpcable.errors import error_malformed_cable
from stpcable.geometry import Point3, add, dist, midpoint, normalize, scale3, sub


def build_centerline(cable: Cable, max_distance: float = 0.1,
                     cable_index: int = 0) -> List[Point3]:
    """Midpoints of corresponding rail points, gap-filled to ``max_distance``.

    For spline pair ``k`` the first ``min(len(rail1[k]), len(rail2[k]))``
    points of each spline are paired by index. Whenever a midpoint lands
    farther than ``max_distance`` from the previous one, evenly spaced
    points are inserted on the straight segment between them.

    :raises MalformedCableError: the rails hold different spline counts.
    """
    if not cable.is_well_formed:
        raise error_malformed_cable(cable_index, len(cable.rail1), len(cable.rail2))
    if max_distance <= 0:
        raise ValueError(f"max_distance must be positive, got {max_distance!r}")

    points: List[Point3] = []
    for spline1, spline2 in zip(cable.rail1, cable.rail2):
        length = min(len(spline1.positions), len(spline2.positions))
        for k in range(length):
            new_point = midpoint(spline1.positions[k], spline2.positions[k])
            if points:
                last = points[-1]
                gap = dist(last, new_point)
                if gap > max_distance:
                    # ceil(gap / step) - 1 fillers leave no hole wider than step
                    fillers = ceil(gap / max_distance) - 1
                    direction = normalize(sub(new_point, last))
                    for n in range(1, fillers + 1):
                        points.append(add(last, scale3(direction, n * max_distance)))
            points.append(new_point)
    return points


__all__ = ["build_centerline"]
