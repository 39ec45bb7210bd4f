#!/usr/bin/env python3
"""
CLI for stpcable.

Usage:
    python -m stpcable reconstruct FILE.stp [--config FILE.yaml] [options]
    python -m stpcable entities FILE.stp
    python -m stpcable points FILE.stp FEATURE [--save FILE.npz]

Examples:
    # Reconstruct cables with default thresholds
    python -m stpcable reconstruct harness.stp

    # Join segments split across the file and write results as JSON
    python -m stpcable reconstruct harness.stp --attach-segments --json cables.json

    # Export the centerlines as STEP curves
    python -m stpcable reconstruct harness.stp --export-step centerlines.stp

    # Show which entity kinds the file holds
    python -m stpcable entities harness.stp

    # Gather every point behind the AXIS2_PLACEMENT_3D entities, logging to a file
    python -m stpcable --log-file run.log points harness.stp "axis2 placement" --save axes.npz
"""

import argparse
import json
import logging
import random
import sys
from pathlib import Path

import numpy as np

from .config import load_config
from .errors import DiagnosticCollector, MalformedFileError
from .io.entities import kind_counts, read_entities
from .io.step import write_step_curves
from .logging_config import setup_logging
from .pipeline import reconstruct_file
from .render import feature_point_buffers, feature_prefix, matching_entities


def cmd_reconstruct(args):
    """Reconstruct cables and print a summary."""
    source_path = Path(args.file)
    if not source_path.exists():
        print(f"Error: File not found: {source_path}", file=sys.stderr)
        return 1

    try:
        config = load_config(args.config)
        config = config.replace(
            tolerance=args.tolerance,
            max_distance_between_points=args.max_spacing,
            attach_segments=True if args.attach_segments else None,
        )
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        result = reconstruct_file(source_path, config)
    except MalformedFileError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"{source_path.name}: {result.entities_found} entities, "
          f"{result.splines_found} splines, {len(result.cables)} cable(s)"
          f" ({result.cables_discarded} discarded)")
    for idx, cable in enumerate(result.cables, start=1):
        flag = " [capped]" if cable.runaway else ""
        print(f"  cable_{idx}: diameter {cable.diameter:.4f}, "
              f"{len(cable.rail1)} spline pair(s), {len(cable.centerline)} points{flag}")
    if result.diagnostics:
        print(f"Diagnostics ({len(result.errors)} error(s), {len(result.warnings)} warning(s)):")
        for diag in result.diagnostics:
            print(f"  {diag.format()}")

    if args.json:
        Path(args.json).write_text(json.dumps(result.to_json(), indent=2), encoding="utf-8")
        print(f"Wrote {args.json}")

    if args.export_step:
        curves = [cable.centerline for cable in result.cables if len(cable.centerline) >= 2]
        if not curves:
            print("Nothing to export: no cables reconstructed", file=sys.stderr)
        else:
            write_step_curves(curves, args.export_step, name=source_path.stem)
            print(f"Wrote {args.export_step}")

    return 0


def cmd_entities(args):
    """Print entity counts by kind."""
    source_path = Path(args.file)
    if not source_path.exists():
        print(f"Error: File not found: {source_path}", file=sys.stderr)
        return 1

    try:
        store = read_entities(source_path)
    except MalformedFileError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"{source_path.name}: {len(store)} entities")
    for kind, count in kind_counts(store).most_common():
        print(f"  {kind:<40} {count}")
    return 0


def cmd_points(args):
    """Collect the points behind every entity of one kind."""
    source_path = Path(args.file)
    if not source_path.exists():
        print(f"Error: File not found: {source_path}", file=sys.stderr)
        return 1

    try:
        store = read_entities(source_path)
        selected = matching_entities(store, args.feature)
    except (MalformedFileError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    collector = DiagnosticCollector()
    rng = random.Random(args.seed) if args.seed is not None else None
    positions, colors = feature_point_buffers(
        store, args.feature, rng, args.offset_to_origin, collector)

    print(f"{source_path.name}: {len(selected)} {feature_prefix(args.feature)}* "
          f"entities, {len(positions)} points")
    if len(positions):
        low, high = positions.min(axis=0), positions.max(axis=0)
        print(f"  bounds: ({low[0]:.3f}, {low[1]:.3f}, {low[2]:.3f})"
              f" .. ({high[0]:.3f}, {high[1]:.3f}, {high[2]:.3f})")
    if collector.diagnostics:
        print(collector.format_all())

    if args.save:
        np.savez(args.save, positions=positions, colors=colors)
        print(f"Wrote {args.save}")
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog='python -m stpcable',
        description='Reconstruct cable centerlines from STEP files',
    )
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Log debugging detail')
    parser.add_argument('--log-file', metavar='FILE',
                        help='Also write the log to FILE')

    subparsers = parser.add_subparsers(dest='action', required=True)

    # reconstruct command
    rec_parser = subparsers.add_parser('reconstruct', help='Reconstruct cables from a STEP file')
    rec_parser.add_argument('file', help='STEP source file')
    rec_parser.add_argument('-c', '--config', metavar='YAML',
                            help='Settings file (default: $STPCABLE_CONFIG)')
    rec_parser.add_argument('--tolerance', type=float,
                            help='Geometric matching slack')
    rec_parser.add_argument('--max-spacing', type=float,
                            help='Largest gap between centerline points')
    rec_parser.add_argument('--attach-segments', action='store_true',
                            help='Join cable segments split across the file')
    rec_parser.add_argument('--json', metavar='FILE',
                            help='Write cables and diagnostics as JSON')
    rec_parser.add_argument('--export-step', metavar='FILE',
                            help='Write centerlines as STEP curves')

    # entities command
    ent_parser = subparsers.add_parser('entities', help='Count entities by kind')
    ent_parser.add_argument('file', help='STEP source file')

    # points command
    pts_parser = subparsers.add_parser('points',
                                       help='Collect the points behind entities of one kind')
    pts_parser.add_argument('file', help='STEP source file')
    pts_parser.add_argument('feature', help='Entity kind or prefix, e.g. "axis2 placement"')
    pts_parser.add_argument('--offset-to-origin', action='store_true',
                            help='Shift the points so the first one sits at the origin')
    pts_parser.add_argument('--seed', type=int,
                            help='Seed for the per-entity colours')
    pts_parser.add_argument('--save', metavar='FILE.npz',
                            help='Write positions and colours as a numpy archive')

    args = parser.parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.WARNING, args.log_file)

    if args.action == 'reconstruct':
        return cmd_reconstruct(args)
    elif args.action == 'entities':
        return cmd_entities(args)
    elif args.action == 'points':
        return cmd_points(args)
    else:
        parser.print_help()
        return 1


if __name__ == '__main__':
    sys.exit(main())
