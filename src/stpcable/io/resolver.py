"""Follow ``#id`` references to collect CARTESIAN_POINT coordinates.

Only CARTESIAN_POINT is read as geometry; every other entity is treated
as an opaque wrapper whose references are followed in textual order.
The order of the returned points is the order in which the references
appear in the text, which later decides rail point correspondence.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Tuple

from stpcable.errors import (
    DiagnosticCollector,
    error_cyclic_reference,
    warning_malformed_coordinate,
    warning_unresolved_reference,
)
from stpcable.geometry import ORIGIN, Point3

logger = logging.getLogger(__name__)

_LEADING_DIGITS = re.compile(r"\s*(\d+)")


@dataclass(frozen=True)
class Placement:
    """An AXIS2_PLACEMENT_3D: location plus optional axis and reference direction."""
    location: Point3
    axis: Optional[Point3] = None
    ref_direction: Optional[Point3] = None


def parse_vector(text: str) -> Optional[Point3]:
    """Read the three numbers of a CARTESIAN_POINT or DIRECTION definition.

    Returns ``None`` when the definition does not hold exactly three
    comma separated fields after its name. A field that does not start
    with a digit or ``-`` reads as ``0``.
    """
    cleaned = text
    for char in ")(;#\n":
        cleaned = cleaned.replace(char, "")
    sections = cleaned.split(",")
    if len(sections) != 4:
        return None
    coords = [0.0, 0.0, 0.0]
    for idx, section in enumerate(sections[1:]):
        section = section.strip()
        if section and (section[0].isdigit() or section.startswith("-")):
            try:
                coords[idx] = float(section)
            except ValueError:
                pass
    return (coords[0], coords[1], coords[2])


def reference_ids(text: str) -> List[int]:
    """Entity ids referenced by ``text``, in textual order.

    Each ``#`` is followed by the id; the id ends at the first non-digit
    (``,`` or ``)`` in practice).
    """
    ids: List[int] = []
    for section in text.split("#")[1:]:
        try:
            entity_id = int(section)
        except ValueError:
            match = _LEADING_DIGITS.match(section)
            if match is None:
                continue
            entity_id = int(match.group(1))
        if entity_id != 0:
            ids.append(entity_id)
    return ids


class ReferenceResolver:
    """Resolve entity definitions to point sequences.

    Results are memoized per entity id; the store is treated as
    immutable for the lifetime of the resolver.
    """

    def __init__(self, store: Mapping[int, str],
                 collector: Optional[DiagnosticCollector] = None) -> None:
        self.store = store
        self.collector = collector if collector is not None else DiagnosticCollector()
        self._cache: Dict[int, Tuple[Point3, ...]] = {}
        self._active: List[int] = []
        self.unresolved_count = 0

    def resolve_points(self, text: str, entity_id: Optional[int] = None) -> List[Point3]:
        """Points reachable from the definition ``text``.

        :raises CyclicReferenceError: the definition reaches itself.
        """
        if entity_id is not None:
            if entity_id in self._active:
                raise error_cyclic_reference(entity_id, self._active + [entity_id])
            self._active.append(entity_id)
        try:
            return self._resolve_text(text, entity_id)
        finally:
            if entity_id is not None:
                self._active.pop()

    def resolve_entity(self, entity_id: int) -> List[Point3]:
        """Points reachable from entity ``entity_id``."""
        cached = self._cache.get(entity_id)
        if cached is not None:
            return list(cached)
        points = self.resolve_points(self.store[entity_id], entity_id)
        self._cache[entity_id] = tuple(points)
        return points

    def _resolve_text(self, text: str, entity_id: Optional[int]) -> List[Point3]:
        if text.startswith("CARTESIAN_POINT"):
            return [self._vector(text, entity_id)]
        if "#" not in text:
            return []
        points: List[Point3] = []
        for ref in reference_ids(text):
            if ref in self.store:
                points.extend(self.resolve_entity(ref))
            else:
                self.unresolved_count += 1
                self.collector.add(warning_unresolved_reference(entity_id, ref))
        return points

    def _vector(self, text: str, entity_id: Optional[int]) -> Point3:
        vec = parse_vector(text)
        if vec is None:
            self.collector.add(warning_malformed_coordinate(entity_id, text))
            return ORIGIN
        return vec

    def resolve_placement(self, entity_id: int) -> Placement:
        """Interpret an AXIS2_PLACEMENT_3D entity.

        :raises KeyError: ``entity_id`` is not an AXIS2_PLACEMENT_3D in the store.
        """
        text = self.store[entity_id]
        if not text.startswith("AXIS2_PLACEMENT_3D"):
            raise KeyError(f"#{entity_id} is not an AXIS2_PLACEMENT_3D")
        refs = reference_ids(text)
        vectors: List[Optional[Point3]] = []
        for ref in refs[:3]:
            target = self.store.get(ref)
            if target is None:
                self.unresolved_count += 1
                self.collector.add(warning_unresolved_reference(entity_id, ref))
                vectors.append(None)
            else:
                vectors.append(self._vector(target, ref))
        vectors.extend([None] * (3 - len(vectors)))
        location = vectors[0] if vectors[0] is not None else ORIGIN
        return Placement(location=location, axis=vectors[1], ref_direction=vectors[2])


def resolve_points(text: str, store: Mapping[int, str],
                   collector: Optional[DiagnosticCollector] = None) -> List[Point3]:
    """Resolve ``text`` against ``store`` with a fresh resolver."""
    return ReferenceResolver(store, collector).resolve_points(text)


__all__ = [
    "Placement",
    "ReferenceResolver",
    "parse_vector",
    "reference_ids",
    "resolve_points",
]
