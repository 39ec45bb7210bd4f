# -*- coding: utf-8 -*-
"""Reconstruct cable harness centerlines from STEP exchange files."""
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("stpcable")
except PackageNotFoundError:  # pragma: no cover - handled when package not installed
    __version__ = "unknown"

from .cables import Cable, assemble_cables, chain_cable, pair_spline
from .centerline import build_centerline
from .config import ReconstructionConfig, load_config
from .errors import (
    CyclicReferenceError,
    Diagnostic,
    MalformedCableError,
    MalformedFileError,
    StepCableError,
)
from .pipeline import ReconstructionResult, reconstruct_cables, reconstruct_file
from .splines import SplineCurve, extract_splines
from .stitch import stitch_segments

__all__ = [
    "__version__",
    "Cable",
    "SplineCurve",
    "ReconstructionConfig",
    "ReconstructionResult",
    "Diagnostic",
    "StepCableError",
    "MalformedFileError",
    "CyclicReferenceError",
    "MalformedCableError",
    "assemble_cables",
    "build_centerline",
    "chain_cable",
    "extract_splines",
    "load_config",
    "pair_spline",
    "reconstruct_cables",
    "reconstruct_file",
    "stitch_segments",
]
