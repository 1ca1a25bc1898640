"""Command line helpers for Comp Generator.

This module implements the console entry points for the project. The
``run_cli`` function parses command line arguments, merges them with the
saved settings file and runs the accompaniment pipeline, while :func:`main`
configures logging before delegating to it.

Option precedence is: command line flag, then the JSON settings file, then
the built-in default. ``--save-settings`` stores the resolved options so the
next run picks them up without repeating the flags.

Example
-------
Running ``python -m comp_generator --input solo.mid --output comped.mid
--pattern charleston --key Ab4`` stamps a Charleston comp in A-flat under
every melodic track of ``solo.mid``. Leaving out ``--pattern`` infers the comp
rhythm from the gaps in the solo and leaving out ``--key`` uses the last note
of the solo as the key.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict

from . import (
    DEFAULT_SETTINGS_FILE,
    CompError,
    load_settings,
    save_settings,
)
from .midi_io import BACKING_VELOCITY, SOLO_COMP_VELOCITY
from .note_utils import parse_pitch
from .quantizer import DEFAULT_SUBDIVISIONS
from .rhythm_engine import PATTERN_NAMES, canonical_pattern

__all__ = ["run_cli", "main"]

INFERRED = "inferred"

_BUILTIN_DEFAULTS: Dict[str, Any] = {
    "pattern": INFERRED,
    "subdivisions": DEFAULT_SUBDIVISIONS,
    "program": 0,
}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate a chordal accompaniment for a MIDI solo."
    )
    parser.add_argument("--list-patterns", action="store_true", help="List the canned comping patterns and exit")
    parser.add_argument("--input", type=str, required=True, help="MIDI file containing the solo.")
    parser.add_argument("--output", type=str, required=True, help="Output MIDI file path.")
    parser.add_argument(
        "--pattern",
        type=str,
        help=f"Comping pattern: '{INFERRED}' or one of {', '.join(PATTERN_NAMES)} (default: {INFERRED}).",
    )
    parser.add_argument("--key", type=str, help="Key root as a MIDI number or note name (e.g. 68 or Ab4). Estimated from the solo when omitted.")
    parser.add_argument("--subdivisions", type=int, help=f"Grid cells per measure for rhythm inference (default: {DEFAULT_SUBDIVISIONS}).")
    parser.add_argument("--velocity", type=int, help="Velocity of the comp notes.")
    parser.add_argument("--program", type=int, help="MIDI program of a standalone backing track (default: 0).")
    parser.add_argument("--backing-only", action="store_true", help="Write only the backing chords to a new file instead of merging them into the solo.")
    parser.add_argument("--settings-file", type=str, help="Path to the JSON settings file.")
    parser.add_argument("--save-settings", action="store_true", help="Persist pattern, subdivisions, velocity and program to the settings file.")
    parser.add_argument("--verbose", action="store_true", help="Log per-measure diagnostics.")
    return parser


def _resolve(args: argparse.Namespace, settings: dict, name: str, default: Any) -> Any:
    value = getattr(args, name)
    if value is not None:
        return value
    return settings.get(name, default)


def run_cli() -> None:
    """Parse CLI arguments and write the accompaniment.

    Invalid options, malformed input files and write failures are logged and
    terminate the process with exit status ``1``.
    """

    if "--list-patterns" in sys.argv[1:]:
        print("\n".join(PATTERN_NAMES))
        return

    args = _build_parser().parse_args()
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    settings_path = Path(args.settings_file).expanduser() if args.settings_file else DEFAULT_SETTINGS_FILE
    settings = load_settings(settings_path)

    pattern = _resolve(args, settings, "pattern", _BUILTIN_DEFAULTS["pattern"])
    subdivisions = _resolve(args, settings, "subdivisions", _BUILTIN_DEFAULTS["subdivisions"])
    program = _resolve(args, settings, "program", _BUILTIN_DEFAULTS["program"])
    default_velocity = BACKING_VELOCITY if args.backing_only else SOLO_COMP_VELOCITY
    velocity = _resolve(args, settings, "velocity", default_velocity)
    try:
        subdivisions, velocity, program = int(subdivisions), int(velocity), int(program)
    except (TypeError, ValueError):
        logging.error("Subdivisions, velocity and program must be integers.")
        sys.exit(1)

    if str(pattern).lower() == INFERRED:
        pattern_name = None
    else:
        try:
            pattern_name = canonical_pattern(pattern)
        except ValueError:
            logging.error(f"Unknown pattern: {pattern}")
            sys.exit(1)

    if subdivisions <= 0 or subdivisions % 8:
        logging.error("Subdivisions must be a positive multiple of 8.")
        sys.exit(1)
    if not 1 <= velocity <= 127:
        logging.error("Velocity must be between 1 and 127.")
        sys.exit(1)
    if not 0 <= program <= 127:
        logging.error("Program must be between 0 and 127.")
        sys.exit(1)

    key = None
    if args.key is not None:
        try:
            key = parse_pitch(args.key)
        except ValueError:
            logging.error(f"Invalid key: {args.key}")
            sys.exit(1)

    if not Path(args.input).expanduser().is_file():
        logging.error(f"Input file not found: {args.input}")
        sys.exit(1)

    if args.save_settings:
        save_settings(
            {
                "pattern": pattern_name or INFERRED,
                "subdivisions": subdivisions,
                "velocity": velocity,
                "program": program,
            },
            settings_path,
        )

    from . import backing_for_solo, write_on_solo

    try:
        if args.backing_only:
            backing_for_solo(
                args.input,
                args.output,
                pattern=pattern_name,
                key=key,
                subdivisions=subdivisions,
                velocity=velocity,
                program=program,
            )
        else:
            write_on_solo(
                args.input,
                args.output,
                pattern=pattern_name,
                key=key,
                subdivisions=subdivisions,
                velocity=velocity,
            )
    except CompError as exc:
        logging.error("Could not generate accompaniment: %s", exc)
        sys.exit(1)
    except (OSError, EOFError) as exc:
        # Unreadable or truncated input, or a destination that cannot be
        # written.
        logging.error("Could not process MIDI file: %s", exc)
        sys.exit(1)
    except ValueError as exc:
        logging.error(str(exc))
        sys.exit(1)
    logging.info("Accompaniment generation complete.")


def main() -> None:
    """Entry point used by ``python -m comp_generator`` and the console script."""

    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    run_cli()
