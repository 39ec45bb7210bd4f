"""
Diagnostics and exceptions raised while reconstructing cables.

Error code ranges:
- E0xx: file structure errors (abort the run)
- E1xx: entity resolution errors (skip the entity)
- E2xx: cable reconstruction errors (skip the cable)
- W1xx: entity resolution warnings
- W2xx: chaining / stitching warnings
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

logger = logging.getLogger(__name__)


class Severity(Enum):
    """Severity levels for diagnostics."""
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


_LOG_LEVELS = {
    Severity.ERROR: logging.ERROR,
    Severity.WARNING: logging.WARNING,
    Severity.INFO: logging.INFO,
}

UNTERMINATED_STATEMENT = "E001"
INVALID_ENTITY_ID = "E002"
DUPLICATE_ENTITY_ID = "E003"
CYCLIC_REFERENCE = "E101"
MALFORMED_CABLE = "E201"
UNRESOLVED_REFERENCE = "W101"
MALFORMED_COORDINATE = "W102"
DEGENERATE_SPLINE = "W103"
RUNAWAY_CHAIN = "W201"
RUNAWAY_STITCH = "W202"


@dataclass
class Diagnostic:
    """A single diagnostic message (error, warning, etc.)."""
    code: str                       # E001, W101, etc.
    kind: str                       # MalformedFileError, UnresolvedReferenceWarning, ...
    message: str
    severity: Severity
    line: Optional[int] = None      # 1-based line in the source file
    entity_id: Optional[int] = None
    cable_index: Optional[int] = None
    hints: List[str] = field(default_factory=list)

    def format(self) -> str:
        """Format the diagnostic for display."""
        where = []
        if self.line is not None:
            where.append(f"line {self.line}")
        if self.entity_id is not None:
            where.append(f"#{self.entity_id}")
        if self.cable_index is not None:
            where.append(f"cable {self.cable_index}")
        prefix = f"{', '.join(where)}: " if where else ""
        parts = [f"{prefix}{self.severity.value}[{self.code}]: {self.message}"]
        for hint in self.hints:
            parts.append(f"    = hint: {hint}")
        return "\n".join(parts)

    def to_json(self) -> dict:
        """Convert to JSON-serializable dict for tooling integration."""
        return {
            "code": self.code,
            "kind": self.kind,
            "message": self.message,
            "severity": self.severity.value,
            "line": self.line,
            "entity_id": self.entity_id,
            "cable_index": self.cable_index,
            "hints": self.hints,
        }


class StepCableError(Exception):
    """Base exception for reconstruction errors."""

    def __init__(self, diagnostic: Diagnostic):
        self.diagnostic = diagnostic
        super().__init__(diagnostic.message)

    def __str__(self) -> str:
        return self.diagnostic.format()


class MalformedFileError(StepCableError):
    """The exchange file is structurally broken (E0xx)."""
    pass


class CyclicReferenceError(StepCableError):
    """An entity reaches itself through its references (E1xx)."""
    pass


class MalformedCableError(StepCableError):
    """A reconstructed cable violates rail parity (E2xx)."""
    pass


# --- File structure errors ---

def error_unterminated_statement(line: int, entity_text: str) -> MalformedFileError:
    """E001: entity statement reaches end of input without ';'."""
    preview = entity_text if len(entity_text) <= 60 else entity_text[:57] + "..."
    diag = Diagnostic(
        code=UNTERMINATED_STATEMENT,
        kind="MalformedFileError",
        message=f"entity statement starting here is never terminated by ';': {preview}",
        severity=Severity.ERROR,
        line=line,
        hints=["the file may be truncated"],
    )
    return MalformedFileError(diag)


def error_invalid_entity_id(line: int, token: str) -> MalformedFileError:
    """E002: left side of an entity statement is not an integer id."""
    diag = Diagnostic(
        code=INVALID_ENTITY_ID,
        kind="MalformedFileError",
        message=f"invalid entity id '{token}'",
        severity=Severity.ERROR,
        line=line,
    )
    return MalformedFileError(diag)


def error_duplicate_entity_id(line: int, entity_id: int) -> MalformedFileError:
    """E003: the same entity id is declared twice."""
    diag = Diagnostic(
        code=DUPLICATE_ENTITY_ID,
        kind="MalformedFileError",
        message=f"entity #{entity_id} is declared more than once",
        severity=Severity.ERROR,
        line=line,
        entity_id=entity_id,
    )
    return MalformedFileError(diag)


# --- Resolution errors and warnings ---

def error_cyclic_reference(entity_id: int, path: List[int]) -> CyclicReferenceError:
    """E101: reference cycle found while resolving ``entity_id``."""
    chain = " -> ".join(f"#{eid}" for eid in path)
    diag = Diagnostic(
        code=CYCLIC_REFERENCE,
        kind="CyclicReferenceError",
        message=f"cyclic reference: {chain}",
        severity=Severity.ERROR,
        entity_id=entity_id,
    )
    return CyclicReferenceError(diag)


def warning_unresolved_reference(entity_id: Optional[int], missing_id: int) -> Diagnostic:
    """W101: a reference points at an id absent from the file."""
    return Diagnostic(
        code=UNRESOLVED_REFERENCE,
        kind="UnresolvedReferenceWarning",
        message=f"reference to undefined entity #{missing_id} skipped",
        severity=Severity.WARNING,
        entity_id=entity_id,
    )


def warning_malformed_coordinate(entity_id: Optional[int], text: str) -> Diagnostic:
    """W102: numeric fields of a point or direction could not be read."""
    return Diagnostic(
        code=MALFORMED_COORDINATE,
        kind="MalformedCoordinateWarning",
        message=f"could not read three coordinates from {text!r}; using the origin",
        severity=Severity.WARNING,
        entity_id=entity_id,
    )


def warning_degenerate_spline(entity_id: int) -> Diagnostic:
    """W103: a spline resolved to no points."""
    return Diagnostic(
        code=DEGENERATE_SPLINE,
        kind="DegenerateSplineWarning",
        message="B_SPLINE_CURVE resolved to zero points",
        severity=Severity.WARNING,
        entity_id=entity_id,
    )


# --- Reconstruction errors and warnings ---

def error_malformed_cable(cable_index: int, count1: int, count2: int) -> MalformedCableError:
    """E201: the two rails of a cable hold different spline counts."""
    diag = Diagnostic(
        code=MALFORMED_CABLE,
        kind="MalformedCableError",
        message=f"rails hold {count1} and {count2} splines; cable excluded",
        severity=Severity.ERROR,
        cable_index=cable_index,
    )
    return MalformedCableError(diag)


def warning_runaway_chain(cable_index: int, limit: int, *, stitching: bool = False) -> Diagnostic:
    """W201/W202: chain or stitch walk stopped by the iteration cap."""
    stage = "segment stitching" if stitching else "spline chaining"
    return Diagnostic(
        code=RUNAWAY_STITCH if stitching else RUNAWAY_CHAIN,
        kind="RunawayChainWarning",
        message=f"{stage} stopped after {limit} iterations; partial cable kept",
        severity=Severity.WARNING,
        cable_index=cable_index,
        hints=["the file may contain looping or ambiguous rail matches"],
    )


class DiagnosticCollector:
    """Collects diagnostics during one reconstruction run."""

    def __init__(self) -> None:
        self.diagnostics: List[Diagnostic] = []
        self._error_count = 0

    def add(self, diagnostic: Diagnostic) -> None:
        """Add a diagnostic and log it."""
        self.diagnostics.append(diagnostic)
        if diagnostic.severity == Severity.ERROR:
            self._error_count += 1
        logger.log(_LOG_LEVELS[diagnostic.severity], diagnostic.format())

    def add_error(self, error: StepCableError) -> None:
        """Add an error exception as a diagnostic."""
        self.add(error.diagnostic)

    def with_code(self, code: str) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.code == code]

    @property
    def error_count(self) -> int:
        return self._error_count

    @property
    def warning_count(self) -> int:
        return sum(1 for d in self.diagnostics if d.severity == Severity.WARNING)

    @property
    def has_errors(self) -> bool:
        return self._error_count > 0

    @property
    def has_warnings(self) -> bool:
        return self.warning_count > 0

    def format_all(self) -> str:
        """Format all diagnostics for display."""
        parts = [d.format() for d in self.diagnostics]
        if self._error_count > 0:
            parts.append(f"{self._error_count} error(s), {self.warning_count} warning(s)")
        elif self.warning_count > 0:
            parts.append(f"{self.warning_count} warning(s)")
        return "\n".join(parts)

    def to_json(self) -> dict:
        """Convert all diagnostics to JSON format."""
        return {
            "diagnostics": [d.to_json() for d in self.diagnostics],
            "error_count": self._error_count,
            "warning_count": self.warning_count,
        }


__all__ = [
    "Severity",
    "Diagnostic",
    "DiagnosticCollector",
    "StepCableError",
    "MalformedFileError",
    "CyclicReferenceError",
    "MalformedCableError",
    "UNTERMINATED_STATEMENT",
    "INVALID_ENTITY_ID",
    "DUPLICATE_ENTITY_ID",
    "CYCLIC_REFERENCE",
    "MALFORMED_CABLE",
    "UNRESOLVED_REFERENCE",
    "MALFORMED_COORDINATE",
    "DEGENERATE_SPLINE",
    "RUNAWAY_CHAIN",
    "RUNAWAY_STITCH",
]
