"""Point3 helpers shared by the reconstruction stages.

Points are plain ``(x, y, z)`` float tuples.
"""

from __future__ import annotations

from math import sqrt
from typing import Tuple

Point3 = Tuple[float, float, float]

ORIGIN: Point3 = (0.0, 0.0, 0.0)

## default slack for "same point" comparisons
epsilon = 0.00001


def add(a: Point3, b: Point3) -> Point3:
    """ 3 vector, `a + b`"""
    return (a[0] + b[0], a[1] + b[1], a[2] + b[2])


def sub(a: Point3, b: Point3) -> Point3:
    """ 3 vector, `a - b`"""
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])


def scale3(a: Point3, c: float) -> Point3:
    """ 3 vector, vector ``a`` times scalar ``c``"""
    return (a[0] * c, a[1] * c, a[2] * c)


def cross(a: Point3, b: Point3) -> Point3:
    return (a[1] * b[2] - a[2] * b[1],
            a[2] * b[0] - a[0] * b[2],
            a[0] * b[1] - a[1] * b[0])


def dot(a: Point3, b: Point3) -> float:
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def mag(a: Point3) -> float:
    """ magnitude of 3 vector ``a``"""
    return sqrt(a[0] * a[0] + a[1] * a[1] + a[2] * a[2])


def dist(a: Point3, b: Point3) -> float:
    """ euclidean distance between points ``a`` and ``b``"""
    return mag(sub(a, b))


def midpoint(a: Point3, b: Point3) -> Point3:
    return ((a[0] + b[0]) / 2.0, (a[1] + b[1]) / 2.0, (a[2] + b[2]) / 2.0)


def normalize(vec: Point3) -> Point3:
    length = mag(vec)
    if length == 0.0:
        return ORIGIN
    return (vec[0] / length, vec[1] / length, vec[2] / length)


def vclose(a: Point3, b: Point3, eps: float = epsilon) -> bool:
    """ are two points the same within ``eps``"""
    return dist(a, b) < eps


def line_point_distance(direction: Point3, on_line: Point3, p: Point3) -> float:
    """Perpendicular distance from ``p`` to the infinite line through
    ``on_line`` along ``direction``.

    ``direction`` must be non-zero.
    """
    return mag(cross(direction, sub(p, on_line))) / mag(direction)


__all__ = [
    "Point3",
    "ORIGIN",
    "epsilon",
    "add",
    "sub",
    "scale3",
    "cross",
    "dot",
    "mag",
    "dist",
    "midpoint",
    "normalize",
    "vclose",
    "line_point_distance",
]
