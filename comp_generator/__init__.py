#!/usr/bin/env python3
"""Comp Generator library.

This package listens to a recorded solo and writes a chordal accompaniment
("comping") for it. A typical workflow is to call :func:`write_on_solo` with
the path of a monophonic MIDI performance; the function returns the solo with
a backing part merged into each of its melodic tracks. The command line
interface in :mod:`comp_generator.cli` wraps the same call.

Underlying Algorithm
--------------------
The solo is reduced to its note onsets, which are quantized onto a grid of
24 cells per 4/4 measure. Wherever the soloist leaves more than a quarter of
a measure of space, a short comp hit is placed just before the melody
re-enters; the downbeat of every measure is always struck. Chords follow a
fixed ii–V–I–I cycle relative to the last note of the solo, which serves as a
rough key estimate. Finally each chord is expanded into note on/off pairs at
the source file's resolution::

    onsets, releases = extract_events(events_from_midi(midi))
    key = estimate_key(onsets)
    grid = quantize(onsets, ppq, track_ticks)
    plans = infer_rhythm_plans(grid)
    sequence = fill_sequence(key, num_measures, plans=plans)
    write_events(track, expand_sequence(sequence, ppq, velocity))

Instead of inferring the rhythm, one of five canned comping templates
(``freddy_green``, ``charleston``, ``upbeat_1_3``, ``upbeat_2_4``, ``whole``)
can be stamped over every measure.

Only 4/4 meter and PPQ based files are supported.
"""

__version__ = "0.1.0"

import json
import logging
import os
from pathlib import Path

# Default path for storing user preferences. The file lives in the user's
# home directory so settings persist between runs.
env_path = os.environ.get("COMP_GENERATOR_SETTINGS_FILE")
if env_path:
    DEFAULT_SETTINGS_FILE = Path(env_path).expanduser()
else:
    DEFAULT_SETTINGS_FILE = Path.home() / ".comp_generator_settings.json"

# Pitch class names indexed by ``pitch % 12``.
NOTE_NAMES = ("C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B")

# Both sharp and flat spellings map to a semitone so ``note_to_midi`` accepts
# either (e.g. ``Ab4`` and ``G#4``).
NOTE_TO_SEMITONE = {
    "C": 0,
    "B#": 0,
    "C#": 1,
    "Db": 1,
    "D": 2,
    "D#": 3,
    "Eb": 3,
    "E": 4,
    "Fb": 4,
    "F": 5,
    "E#": 5,
    "F#": 6,
    "Gb": 6,
    "G": 7,
    "G#": 8,
    "Ab": 8,
    "A": 9,
    "A#": 10,
    "Bb": 10,
    "B": 11,
    "Cb": 11,
}


def load_settings(path: Path = DEFAULT_SETTINGS_FILE) -> dict:
    """Load saved user settings from ``path`` if it exists.

    @param path (Path): Location of the settings file.
    @returns dict: Loaded settings or an empty dictionary when unavailable.
    """
    # Prefer the user's saved options but fall back to an empty dictionary
    # when the settings file is missing or unreadable.
    path = Path(path)
    if path.is_file():
        try:
            with open(path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError) as exc:
            logging.error(f"Could not load settings: {exc}")
            return {}
        if isinstance(data, dict):
            return data
        logging.error("Settings file %s does not contain a JSON object", path)
    return {}


def save_settings(settings: dict, path: Path = DEFAULT_SETTINGS_FILE) -> None:
    """Save user ``settings`` to ``path`` as JSON.

    @param settings (dict): Options to be persisted.
    @param path (Path): Destination file path.
    @returns None: Function does not return a value.
    """
    # Failing to save preferences is logged but never stops generation.
    try:
        with open(path, "w", encoding="utf-8") as fh:
            json.dump(settings, fh, indent=2)
    except OSError as exc:
        logging.error(f"Could not save settings: {exc}")


from .errors import (  # noqa: E402
    CompError,
    EmptyChord,
    EmptyInput,
    InvalidModifier,
    LengthMismatch,
    UnsupportedDivision,
)
from .note_utils import midi_to_note, note_to_midi, pitch_class_name  # noqa: E402
from .chord import Chord  # noqa: E402
from .events import RawEvent, TimedEvent, events_from_midi, extract_events  # noqa: E402
from .quantizer import DEFAULT_SUBDIVISIONS, quantize  # noqa: E402
from .rhythm_engine import (  # noqa: E402
    CANNED_PATTERNS,
    DEFAULT_PATTERN,
    PATTERN_NAMES,
    SILENT,
    Hit,
    canonical_pattern,
    infer_rhythm,
    infer_rhythm_plans,
    plan_from_arrays,
)
from .harmony_generator import chord_for_measure, estimate_key, generate_progression  # noqa: E402
from .sequencer import (  # noqa: E402
    expand_sequence,
    fill_sequence,
    format_measure,
    generate_measure,
    measures_in_track,
)
from .midi_io import (  # noqa: E402
    backing_for_solo,
    create_backing_file,
    load_midi,
    write_events,
    write_on_solo,
)


def run_cli():
    """Proxy to :func:`comp_generator.cli.run_cli`."""
    from .cli import run_cli as _run_cli

    return _run_cli()


def main():
    """Proxy to :func:`comp_generator.cli.main`."""
    from .cli import main as _main

    return _main()


__all__ = [
    "__version__",
    "DEFAULT_SETTINGS_FILE",
    "NOTE_NAMES",
    "NOTE_TO_SEMITONE",
    "load_settings",
    "save_settings",
    "CompError",
    "EmptyChord",
    "EmptyInput",
    "InvalidModifier",
    "LengthMismatch",
    "UnsupportedDivision",
    "midi_to_note",
    "note_to_midi",
    "pitch_class_name",
    "Chord",
    "RawEvent",
    "TimedEvent",
    "events_from_midi",
    "extract_events",
    "DEFAULT_SUBDIVISIONS",
    "quantize",
    "CANNED_PATTERNS",
    "DEFAULT_PATTERN",
    "PATTERN_NAMES",
    "SILENT",
    "Hit",
    "canonical_pattern",
    "infer_rhythm",
    "infer_rhythm_plans",
    "plan_from_arrays",
    "chord_for_measure",
    "estimate_key",
    "generate_progression",
    "expand_sequence",
    "fill_sequence",
    "format_measure",
    "generate_measure",
    "measures_in_track",
    "backing_for_solo",
    "create_backing_file",
    "load_midi",
    "write_events",
    "write_on_solo",
    "run_cli",
    "main",
]
