"""Hand reconstructed cables to the rendering collaborators.

Two consumers are supported: a cable renderer taking one ordered point
sequence per cable, and a point-cloud viewer taking flat position and
colour buffers (debugging aid, one random colour per cable). The viewer
can also be fed the raw CARTESIAN_POINTs behind every entity of one
kind, to inspect how an exporter lays out a feature.
"""

from __future__ import annotations

import logging
import random
import uuid
from typing import List, Mapping, Optional, Protocol, Sequence, Tuple

import numpy as np

from stpcable.cables import Cable
from stpcable.errors import CyclicReferenceError, DiagnosticCollector
from stpcable.geometry import Point3
from stpcable.io.resolver import ReferenceResolver

logger = logging.getLogger(__name__)

RENDER_TYPE_CABLE = "Cable"
UNIT_MILLIMETERS = "millimeters"


class CableRenderer(Protocol):
    def add_predefined_drawing(self, points: Sequence[Point3], render_type: str,
                               unit: str, name: str, identifier: uuid.UUID) -> None:
        ...


class PointCloudViewer(Protocol):
    def update_points(self, positions: np.ndarray, colors: np.ndarray) -> None:
        ...


def deliver_cables(cables: Sequence[Cable], renderer: CableRenderer,
                   name: str = "cable") -> List[uuid.UUID]:
    """Send each cable centerline to ``renderer``; returns the identifiers used."""
    identifiers: List[uuid.UUID] = []
    for idx, cable in enumerate(cables):
        if not cable.centerline:
            continue
        identifier = uuid.uuid4()
        renderer.add_predefined_drawing(
            list(cable.centerline),
            RENDER_TYPE_CABLE,
            UNIT_MILLIMETERS,
            f"{name}_{idx + 1}",
            identifier,
        )
        identifiers.append(identifier)
    return identifiers


def _random_color(rng: random.Random) -> List[float]:
    return [rng.randrange(0, 255) / 255.0 for _ in range(3)]


def _stack(groups: Sequence[Tuple[Sequence[Point3], Sequence[float]]],
           offset_to_origin: bool) -> Tuple[np.ndarray, np.ndarray]:
    position_blocks = []
    color_blocks = []
    for points, color in groups:
        if not points:
            continue
        block = np.asarray(points, dtype=np.float32)
        position_blocks.append(block)
        color_blocks.append(np.tile(np.asarray(color, dtype=np.float32), (len(block), 1)))

    if not position_blocks:
        empty = np.zeros((0, 3), dtype=np.float32)
        return empty, empty.copy()

    positions = np.concatenate(position_blocks)
    colors = np.concatenate(color_blocks)
    if offset_to_origin:
        positions = positions - positions[0]
    return positions, colors


def point_cloud_buffers(cables: Sequence[Cable],
                        rng: Optional[random.Random] = None,
                        offset_to_origin: bool = False) -> Tuple[np.ndarray, np.ndarray]:
    """Positions and colours of every centerline point, shape ``(N, 3)`` each.

    Colours are RGB in ``[0, 1)``; every point of a cable shares one
    colour. With ``offset_to_origin`` all positions are shifted so the
    first one sits at the origin.
    """
    rng = rng or random.Random()
    groups = [(cable.centerline, _random_color(rng)) for cable in cables if cable.centerline]
    return _stack(groups, offset_to_origin)


def feature_prefix(feature: str) -> str:
    """Entity-name prefix for a user supplied feature name.

    ``"axis2 placement"`` becomes ``"AXIS2_PLACEMENT"``.
    """
    prefix = feature.strip().upper().replace(" ", "_")
    if not prefix:
        raise ValueError("feature name is empty")
    return prefix


def matching_entities(store: Mapping[int, str], feature: str) -> List[int]:
    """Ids of the entities whose definition starts with ``feature``, in declaration order."""
    prefix = feature_prefix(feature)
    return [entity_id for entity_id, text in store.items() if text.startswith(prefix)]


def feature_point_buffers(store: Mapping[int, str], feature: str,
                          rng: Optional[random.Random] = None,
                          offset_to_origin: bool = False,
                          collector: Optional[DiagnosticCollector] = None
                          ) -> Tuple[np.ndarray, np.ndarray]:
    """Positions and colours of the points reachable from every ``feature`` entity.

    ``feature`` is matched case-insensitively against the start of each
    definition, spaces standing for underscores, so a prefix such as
    ``"b spline"`` selects every B_SPLINE_* entity. Each matching
    entity gets one random colour. Entities whose references form a
    cycle are reported to ``collector`` and skipped.
    """
    rng = rng or random.Random()
    resolver = ReferenceResolver(store, collector)
    groups = []
    for entity_id in matching_entities(store, feature):
        color = _random_color(rng)
        try:
            points = resolver.resolve_entity(entity_id)
        except CyclicReferenceError as err:
            resolver.collector.add_error(err)
            continue
        groups.append((points, color))
    logger.debug("%d %s entities selected", len(groups), feature_prefix(feature))
    return _stack(groups, offset_to_origin)


def show_point_cloud(cables: Sequence[Cable], viewer: PointCloudViewer,
                     rng: Optional[random.Random] = None,
                     offset_to_origin: bool = False) -> bool:
    """Push the point-cloud buffers of ``cables`` to ``viewer``.

    Returns ``False`` (and pushes nothing) when there are no points.
    """
    positions, colors = point_cloud_buffers(cables, rng, offset_to_origin)
    return _push(viewer, positions, colors)


def show_feature_points(store: Mapping[int, str], feature: str, viewer: PointCloudViewer,
                        rng: Optional[random.Random] = None,
                        offset_to_origin: bool = False) -> bool:
    """Push the points behind every ``feature`` entity to ``viewer``."""
    positions, colors = feature_point_buffers(store, feature, rng, offset_to_origin)
    return _push(viewer, positions, colors)


def _push(viewer: PointCloudViewer, positions: np.ndarray, colors: np.ndarray) -> bool:
    if len(positions) == 0:
        logger.warning("zero points in point cloud")
        return False
    viewer.update_points(positions, colors)
    return True


__all__ = [
    "CableRenderer",
    "PointCloudViewer",
    "RENDER_TYPE_CABLE",
    "UNIT_MILLIMETERS",
    "deliver_cables",
    "feature_prefix",
    "matching_entities",
    "point_cloud_buffers",
    "feature_point_buffers",
    "show_point_cloud",
    "show_feature_points",
]
