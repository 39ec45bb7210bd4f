"""Reconnect cable segments split apart in the exchange file.

A segment continues another of the same diameter when the tangent ray
leaving the end of the other segment passes within ``tolerance`` of this
segment's starting midpoint. Collinear segments pointing the opposite
way can also satisfy the distance test; ``require_forward_hit`` rejects
hits behind the ray origin, and turning it off restores the bare
distance test.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from stpcable.cables import Cable
from stpcable.config import ReconstructionConfig
from stpcable.errors import DiagnosticCollector, warning_runaway_chain
from stpcable.geometry import Point3, dist, dot, line_point_distance, mag, midpoint, sub

logger = logging.getLogger(__name__)

Ray = Tuple[Point3, Point3]


def end_ray(cable: Cable) -> Optional[Ray]:
    """Origin and direction of the tangent leaving the end of ``cable``.

    The origin is the midpoint of the two rail ends; the direction runs
    between the last two centerline points of the final spline pair.
    Returns ``None`` when the final splines are too short to define it.
    """
    if not cable.rail1 or not cable.rail2:
        return None
    last1 = cable.rail1[-1].positions
    last2 = cable.rail2[-1].positions
    if len(last1) < 2 or len(last2) < 2:
        return None
    before = midpoint(last1[-2], last2[-2])
    origin = midpoint(last1[-1], last2[-1])
    direction = sub(origin, before)
    if mag(direction) == 0.0:
        return None
    return origin, direction


def start_point(cable: Cable) -> Optional[Point3]:
    """Midpoint of the first points of both rails."""
    if not cable.rail1 or not cable.rail2:
        return None
    first1 = cable.rail1[0].start
    first2 = cable.rail2[0].start
    if first1 is None or first2 is None:
        return None
    return midpoint(first1, first2)


def ray_hits(ray: Optional[Ray], point: Optional[Point3], tolerance: float,
             forward_only: bool = True) -> bool:
    """Whether ``point`` lies within ``tolerance`` of the line along ``ray``."""
    if ray is None or point is None:
        return False
    origin, direction = ray
    if line_point_distance(direction, origin, point) >= tolerance:
        return False
    if forward_only:
        along = dot(sub(point, origin), direction) / mag(direction)
        return along > -tolerance
    return True


def _same_gauge(a: Cable, b: Cable, tolerance: float) -> bool:
    return abs(a.diameter - b.diameter) < tolerance


def stitch_segments(cables: Sequence[Cable],
                    config: Optional[ReconstructionConfig] = None,
                    collector: Optional[DiagnosticCollector] = None) -> List[Cable]:
    """Join segments into whole cables.

    A segment continues another only when both have the same diameter
    (within ``tolerance``) and the other's end ray hits its start.
    Segments continuing nothing begin a chain; each chain repeatedly
    takes the segment, not yet in the chain, whose start is hit by the
    current end ray nearest its origin. Rails of the chained segments
    are concatenated; the diameter of the first segment is kept.
    """
    config = config or ReconstructionConfig()
    forward = config.require_forward_hit
    tolerance = config.tolerance
    rays = [end_ray(cable) for cable in cables]
    starts = [start_point(cable) for cable in cables]

    def continues(j: int, i: int) -> bool:
        return (_same_gauge(cables[j], cables[i], tolerance)
                and ray_hits(rays[j], starts[i], tolerance, forward))

    stitched: List[Cable] = []
    for i, first in enumerate(cables):
        if any(j != i and continues(j, i) for j in range(len(cables))):
            continue

        chain = [i]
        runaway = first.runaway
        current = i
        while True:
            hits = [j for j in range(len(cables))
                    if j not in chain and _same_gauge(first, cables[j], tolerance)
                    and continues(current, j)]
            if not hits:
                break
            following = min(hits, key=lambda j: dist(rays[current][0], starts[j]))
            if len(chain) - 1 >= config.max_chain_iterations:
                runaway = True
                if collector is not None:
                    collector.add(warning_runaway_chain(
                        len(stitched), config.max_chain_iterations, stitching=True))
                break
            chain.append(following)
            current = following

        rail1 = tuple(s for j in chain for s in cables[j].rail1)
        rail2 = tuple(s for j in chain for s in cables[j].rail2)
        runaway = runaway or any(cables[j].runaway for j in chain)
        if len(chain) > 1:
            logger.debug("stitched segments %s into cable %d", chain, len(stitched))
        stitched.append(Cable(rail1, rail2, first.diameter, runaway=runaway))

    logger.info("stitched %d segments into %d cables", len(cables), len(stitched))
    return stitched


__all__ = ["end_ray", "start_point", "ray_hits", "stitch_segments"]
