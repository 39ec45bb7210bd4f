"""B-spline curve extraction from an entity table."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Mapping, Optional, Tuple

from stpcable.errors import (
    CyclicReferenceError,
    DiagnosticCollector,
    warning_degenerate_spline,
)
from stpcable.geometry import Point3
from stpcable.io.resolver import ReferenceResolver

logger = logging.getLogger(__name__)

SPLINE_PREFIX = "B_SPLINE_CURVE"


@dataclass(frozen=True)
class SplineCurve:
    """Resolved point sequence of one B_SPLINE_CURVE entity."""
    positions: Tuple[Point3, ...]
    entity_id: Optional[int] = None

    @property
    def start(self) -> Optional[Point3]:
        return self.positions[0] if self.positions else None

    @property
    def end(self) -> Optional[Point3]:
        return self.positions[-1] if self.positions else None

    @property
    def is_degenerate(self) -> bool:
        return not self.positions

    def __len__(self) -> int:
        return len(self.positions)


def extract_splines(store: Mapping[int, str],
                    collector: Optional[DiagnosticCollector] = None,
                    resolver: Optional[ReferenceResolver] = None) -> List[SplineCurve]:
    """Return every B_SPLINE_CURVE in ``store``, in declaration order.

    Splines that resolve to no points are kept (and reported); splines
    whose references form a cycle are reported and left out.
    """
    if collector is None:
        collector = DiagnosticCollector()
    if resolver is None:
        resolver = ReferenceResolver(store, collector)

    splines: List[SplineCurve] = []
    for entity_id, text in store.items():
        if not text.startswith(SPLINE_PREFIX):
            continue
        try:
            points = resolver.resolve_entity(entity_id)
        except CyclicReferenceError as err:
            collector.add_error(err)
            continue
        if not points:
            collector.add(warning_degenerate_spline(entity_id))
        splines.append(SplineCurve(tuple(points), entity_id))

    logger.debug("extracted %d splines", len(splines))
    return splines


__all__ = ["SplineCurve", "extract_splines", "SPLINE_PREFIX"]
