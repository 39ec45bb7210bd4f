"""Entity table of a STEP (ISO-10303-21) text file.

Each ``#<id>=<definition>;`` statement becomes one entry mapping the
integer id to its unparsed definition text. Statements may span several
physical lines.
"""

from __future__ import annotations

import logging
from collections import Counter
from pathlib import Path
from typing import Dict, Iterable, Optional

from stpcable.errors import (
    error_duplicate_entity_id,
    error_invalid_entity_id,
    error_unterminated_statement,
)

logger = logging.getLogger(__name__)

EntityStore = Dict[int, str]


def parse_entities(lines: Iterable[str]) -> EntityStore:
    """Build the entity table from ``lines``.

    The returned dict preserves declaration order. Definition text keeps
    its trailing ``;``; surrounding whitespace is removed and continuation
    lines are joined without a separator.

    :raises MalformedFileError: a statement is never terminated, an id is
        not an integer, or an id is declared twice.
    """
    entities: EntityStore = {}
    start_line = 0
    statement: Optional[str] = None

    for number, raw in enumerate(lines, start=1):
        line = raw.strip()
        if statement is None:
            if not (line.startswith("#") and "=" in line):
                continue
            start_line = number
            statement = line
        else:
            statement += line
        if statement.endswith(";"):
            _add_statement(entities, statement, start_line)
            statement = None

    if statement is not None:
        raise error_unterminated_statement(start_line, statement)

    logger.debug("parsed %d entities", len(entities))
    return entities


def _add_statement(entities: EntityStore, statement: str, line: int) -> None:
    left, definition = statement.split("=", 1)
    token = left.replace("#", "").strip()
    try:
        entity_id = int(token)
    except ValueError:
        raise error_invalid_entity_id(line, token) from None
    if entity_id in entities:
        raise error_duplicate_entity_id(line, entity_id)
    entities[entity_id] = definition.strip()


def read_entities(path: Path | str) -> EntityStore:
    """Read the file at ``path`` and return its entity table."""
    text = Path(path).read_text(encoding="utf-8", errors="replace")
    return parse_entities(text.splitlines())


def entity_kind(text: str) -> str:
    """Leading entity name of a definition, e.g. ``CARTESIAN_POINT``.

    Complex entities (``(NAMED_UNIT(*) ...)``) report an empty name.
    """
    return text.split("(", 1)[0].strip()


def kind_counts(entities: EntityStore) -> Counter:
    """Number of entities per kind."""
    return Counter(entity_kind(text) or "<complex>" for text in entities.values())


__all__ = ["EntityStore", "parse_entities", "read_entities", "entity_kind", "kind_counts"]
