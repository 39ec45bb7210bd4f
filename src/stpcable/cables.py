"""Pair parallel splines into rails and chain rail pairs into cables.

A cable appears in the file as two strings of splines ("rails") joined
end to end, held at a constant separation (the cable diameter). Both
rails hold the same number of splines, and spline ``k`` of one rail
runs beside spline ``k`` of the other.

Ties between candidate splines are broken by declaration order: the
spline declared nearest after the current one wins, since exporters
write the two rails of a cable close together.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Set, Sequence, Tuple

from stpcable.config import ReconstructionConfig
from stpcable.errors import DiagnosticCollector, warning_runaway_chain
from stpcable.geometry import Point3, dist, vclose
from stpcable.splines import SplineCurve

logger = logging.getLogger(__name__)

UsedSplineSet = Set[int]


@dataclass(frozen=True)
class Cable:
    """Two rails of splines plus the centerline derived from them."""
    rail1: Tuple[SplineCurve, ...]
    rail2: Tuple[SplineCurve, ...]
    diameter: float
    centerline: Tuple[Point3, ...] = ()
    runaway: bool = False

    @property
    def is_well_formed(self) -> bool:
        return len(self.rail1) == len(self.rail2)

    @property
    def radius(self) -> float:
        return self.diameter / 2.0


@dataclass(frozen=True)
class PairingResult:
    starts_line: bool
    partner: Optional[int] = None
    diameter: float = 0.0

    @property
    def begins_cable(self) -> bool:
        return self.starts_line and self.partner is not None


def pair_spline(splines: Sequence[SplineCurve],
                index: int,
                used: UsedSplineSet,
                config: Optional[ReconstructionConfig] = None) -> PairingResult:
    """Find whether spline ``index`` starts a rail and which spline is its partner.

    Candidates are scanned forward from ``index + 1``, wrapping around,
    skipping splines in ``used``. A candidate whose end meets our start
    means something connects into this spline, so it does not start a
    line. The scan stops at the first candidate whose start-to-start and
    end-to-end separations agree: that is the partner, and both splines
    are added to ``used``. Candidates past the partner are never checked
    for connections, so a pair declared just ahead of an unrelated cable
    touching its start still begins a cable of its own.
    """
    config = config or ReconstructionConfig()
    current = splines[index]
    if index in used or current.is_degenerate:
        return PairingResult(starts_line=False)

    count = len(splines)
    starts_line = True
    for offset in range(1, count):
        other_index = (index + offset) % count
        other = splines[other_index]
        if other_index in used or other.is_degenerate:
            continue
        if dist(other.end, current.start) < config.tolerance:
            starts_line = False
        gap_start = dist(current.start, other.start)
        gap_end = dist(current.end, other.end)
        if abs(gap_start - gap_end) < config.parallel_tolerance:
            used.add(index)
            used.add(other_index)
            return PairingResult(starts_line=starts_line, partner=other_index,
                                 diameter=gap_start)

    return PairingResult(starts_line=starts_line)


def chain_cable(splines: Sequence[SplineCurve],
                start: int,
                partner: int,
                diameter: float,
                used: UsedSplineSet,
                config: Optional[ReconstructionConfig] = None,
                collector: Optional[DiagnosticCollector] = None,
                cable_index: int = 0) -> Cable:
    """Walk forward from the pair (``start``, ``partner``) until no spline pair continues it.

    Each step looks for a spline starting where rail 1 ends and one
    starting where rail 2 ends, each sitting ``diameter`` away from the
    other rail's end, declared within ``locality_window`` entries of each
    other. The walk stops after ``max_chain_iterations`` steps; the
    partial cable is returned with ``runaway`` set.
    """
    config = config or ReconstructionConfig()
    rail1: List[SplineCurve] = [splines[start]]
    rail2: List[SplineCurve] = [splines[partner]]
    search_from = start
    steps = 0
    runaway = False

    while True:
        found = _next_pair(splines, rail1[-1], rail2[-1], diameter, search_from, config)
        if found is None:
            break
        if steps >= config.max_chain_iterations:
            runaway = True
            if collector is not None:
                collector.add(warning_runaway_chain(cable_index, config.max_chain_iterations))
            break
        index1, index2 = found
        rail1.append(splines[index1])
        rail2.append(splines[index2])
        used.add(index1)
        used.add(index2)
        search_from += 2
        steps += 1

    logger.debug("cable %d: %d spline pairs, diameter %.4f", cable_index, len(rail1), diameter)
    return Cable(tuple(rail1), tuple(rail2), diameter, runaway=runaway)


def _next_pair(splines: Sequence[SplineCurve],
               last1: SplineCurve,
               last2: SplineCurve,
               diameter: float,
               search_from: int,
               config: ReconstructionConfig) -> Optional[Tuple[int, int]]:
    count = len(splines)
    index1 = index2 = -1
    for offset in range(count):
        index = (search_from + offset) % count
        candidate = splines[index]
        if candidate.is_degenerate:
            continue
        if (vclose(candidate.start, last1.end, config.point_epsilon)
                and abs(dist(candidate.start, last2.end) - diameter) < config.tolerance):
            index1 = index
        if (vclose(candidate.start, last2.end, config.point_epsilon)
                and abs(dist(candidate.start, last1.end) - diameter) < config.tolerance):
            index2 = index
        if index1 >= 0 and index2 >= 0 and abs(index1 - index2) <= config.locality_window:
            return index1, index2
    return None


def assemble_cables(splines: Sequence[SplineCurve],
                    config: Optional[ReconstructionConfig] = None,
                    collector: Optional[DiagnosticCollector] = None) -> List[Cable]:
    """Pair and chain every cable in ``splines``, in declaration order."""
    config = config or ReconstructionConfig()
    used: UsedSplineSet = set()
    cables: List[Cable] = []
    for index in range(len(splines)):
        pairing = pair_spline(splines, index, used, config)
        if not pairing.begins_cable:
            continue
        cables.append(chain_cable(splines, index, pairing.partner, pairing.diameter,
                                  used, config, collector, cable_index=len(cables)))
    logger.info("assembled %d cables from %d splines", len(cables), len(splines))
    return cables


__all__ = [
    "Cable",
    "PairingResult",
    "UsedSplineSet",
    "pair_spline",
    "chain_cable",
    "assemble_cables",
]
