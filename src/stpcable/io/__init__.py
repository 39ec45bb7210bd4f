"""STEP reading and writing for stpcable."""

from .entities import EntityStore, entity_kind, kind_counts, parse_entities, read_entities
from .resolver import Placement, ReferenceResolver, parse_vector, reference_ids, resolve_points
from .step import write_step_curves

__all__ = [
    'EntityStore',
    'entity_kind',
    'kind_counts',
    'parse_entities',
    'read_entities',
    'Placement',
    'ReferenceResolver',
    'parse_vector',
    'reference_ids',
    'resolve_points',
    'write_step_curves',
]
