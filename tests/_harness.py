"""Synthetic cable geometry shared by the test modules."""

import math

from stpcable.cables import Cable
from stpcable.splines import SplineCurve


def rail_segments(x0=0.0, splines=3, length=2.0, points=5, half_gap=1.0, z=0.0):
    """Straight cable along +x: list of (rail1, rail2) point lists per spline."""
    pairs = []
    for k in range(splines):
        xs = [x0 + k * length + length * i / (points - 1) for i in range(points)]
        rail1 = [(x, half_gap, z) for x in xs]
        rail2 = [(x, -half_gap, z) for x in xs]
        pairs.append((rail1, rail2))
    return pairs


def ring_segments(inner=5.0, outer=7.0, quarters=4, points=4):
    """Closed ring cable in the XY plane, one spline pair per quarter turn."""
    pairs = []
    for q in range(quarters):
        angles = [math.pi / 2 * (q + i / (points - 1)) for i in range(points)]
        rail1 = [(inner * math.cos(a), inner * math.sin(a), 0.0) for a in angles]
        rail2 = [(outer * math.cos(a), outer * math.sin(a), 0.0) for a in angles]
        pairs.append((rail1, rail2))
    return pairs


def interleave(*cables):
    """Curves in exporter order: rail1 then rail2 of each spline pair."""
    curves = []
    for pairs in cables:
        for rail1, rail2 in pairs:
            curves.append(rail1)
            curves.append(rail2)
    return curves


def to_splines(curves):
    return [SplineCurve(tuple(c)) for c in curves]


def make_cable(pairs):
    rail1 = tuple(SplineCurve(tuple(r1)) for r1, _ in pairs)
    rail2 = tuple(SplineCurve(tuple(r2)) for _, r2 in pairs)
    first1, first2 = rail1[0].start, rail2[0].start
    diameter = math.dist(first1, first2)
    return Cable(rail1, rail2, diameter)
