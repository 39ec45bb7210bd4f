"""End-to-end cable reconstruction from STEP text."""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional

from stpcable.cables import Cable, assemble_cables
from stpcable.centerline import build_centerline
from stpcable.config import ReconstructionConfig
from stpcable.errors import Diagnostic, DiagnosticCollector, MalformedCableError, Severity
from stpcable.io.entities import parse_entities
from stpcable.io.resolver import ReferenceResolver
from stpcable.splines import extract_splines
from stpcable.stitch import stitch_segments

logger = logging.getLogger(__name__)


@dataclass
class ReconstructionResult:
    """Cables recovered from one file plus everything worth reporting."""
    cables: List[Cable] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)
    entities_found: int = 0
    splines_found: int = 0
    cables_discarded: int = 0
    unresolved_references: int = 0

    @property
    def errors(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == Severity.ERROR]

    @property
    def warnings(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == Severity.WARNING]

    def to_json(self) -> dict:
        return {
            "entities": self.entities_found,
            "splines": self.splines_found,
            "discarded": self.cables_discarded,
            "cables": [
                {
                    "diameter": cable.diameter,
                    "splines": len(cable.rail1),
                    "runaway": cable.runaway,
                    "centerline": [list(p) for p in cable.centerline],
                }
                for cable in self.cables
            ],
            "diagnostics": [d.to_json() for d in self.diagnostics],
        }


def reconstruct_cables(lines: Iterable[str],
                       config: Optional[ReconstructionConfig] = None) -> ReconstructionResult:
    """Recover cable centerlines from the lines of a STEP file.

    :raises MalformedFileError: the file structure is broken; nothing is
        reconstructed. Every other problem is reported in
        ``ReconstructionResult.diagnostics``.
    """
    config = config or ReconstructionConfig()
    collector = DiagnosticCollector()

    store = parse_entities(lines)
    resolver = ReferenceResolver(store, collector)
    splines = extract_splines(store, collector, resolver)
    logger.info("%d entities, %d splines", len(store), len(splines))

    cables = assemble_cables(splines, config, collector)
    if config.attach_segments:
        cables = stitch_segments(cables, config, collector)

    result = ReconstructionResult(
        diagnostics=collector.diagnostics,
        entities_found=len(store),
        splines_found=len(splines),
        unresolved_references=resolver.unresolved_count,
    )
    for index, cable in enumerate(cables):
        try:
            centerline = build_centerline(cable, config.max_distance_between_points, index)
        except MalformedCableError as err:
            collector.add_error(err)
            continue
        if (len(centerline) < config.min_centerline_points
                or len(cable.rail1) < config.min_rail_splines):
            logger.debug("cable %d discarded as noise (%d points, %d splines)",
                         index, len(centerline), len(cable.rail1))
            result.cables_discarded += 1
            continue
        result.cables.append(dataclasses.replace(cable, centerline=tuple(centerline)))

    logger.info("reconstructed %d cables (%d discarded)",
                len(result.cables), result.cables_discarded)
    return result


def reconstruct_file(path: Path | str,
                     config: Optional[ReconstructionConfig] = None) -> ReconstructionResult:
    """Read ``path`` and reconstruct its cables."""
    text = Path(path).read_text(encoding="utf-8", errors="replace")
    return reconstruct_cables(text.splitlines(), config)


__all__ = ["ReconstructionResult", "reconstruct_cables", "reconstruct_file"]
