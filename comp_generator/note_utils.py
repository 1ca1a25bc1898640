"""Utility functions for translating between note names and MIDI numbers.

The accompaniment engine works purely with integer pitches, but users think in
note names. These helpers are shared by the CLI (``--key Ab4``) and by the
per-measure debug output so both agree on spelling.

Example
-------
>>> from comp_generator.note_utils import note_to_midi, pitch_class_name
>>> note_to_midi("Ab4")
68
>>> pitch_class_name(70)
'A#'
"""

from __future__ import annotations

import logging
import re
from functools import lru_cache

from . import NOTE_NAMES, NOTE_TO_SEMITONE

__all__ = ["note_to_midi", "midi_to_note", "pitch_class_name", "parse_pitch"]

# Spellings that cross the B/C boundary: Cb4 is B3 and B#4 is C5.
_OCTAVE_SHIFT = {"Cb": -1, "B#": 1}


def pitch_class_name(pitch: int) -> str:
    """Return the sharp-spelled pitch class of ``pitch``.

    No octave range is enforced; Python's modulo keeps negative pitches on the
    same cyclic table.
    """

    return NOTE_NAMES[pitch % 12]


@lru_cache(maxsize=None)
def note_to_midi(note: str) -> int:
    """Convert a note string such as ``C#4`` into a MIDI number.

    Parameters
    ----------
    note:
        Note name including octave. Flats are accepted and normalised to
        their sharp equivalents.

    Returns
    -------
    int
        MIDI note number in the range ``0-127``.

    Raises
    ------
    ValueError
        If ``note`` is malformed or falls outside ``0-127``.
    """

    match = re.fullmatch(r"([A-Ga-g][#b]?)(-?\d+)", note.strip())
    if not match:
        logging.error("Invalid note format: %s", note)
        raise ValueError(f"Invalid note format: {note}")

    note_name, octave_str = match.groups()
    note_name = note_name.capitalize()
    # MIDI octave numbers are offset by one relative to scientific pitch.
    octave = int(octave_str) + 1 + _OCTAVE_SHIFT.get(note_name, 0)

    try:
        note_idx = NOTE_TO_SEMITONE[note_name]
    except KeyError:
        logging.error("Unknown note name: %s", note_name)
        raise ValueError(f"Unknown note name: {note_name}")

    midi_val = note_idx + octave * 12
    if not 0 <= midi_val <= 127:
        logging.error("MIDI value out of range: %s -> %d", note, midi_val)
        raise ValueError(
            f"Computed MIDI value {midi_val} out of range 0-127 for note {note}"
        )
    return midi_val


def midi_to_note(midi_note: int) -> str:
    """Convert a MIDI number into a note name using sharps.

    >>> midi_to_note(60)
    'C4'
    """

    if not 0 <= midi_note <= 127:
        raise ValueError(f"MIDI note {midi_note} out of range 0-127")
    octave = midi_note // 12 - 1
    return f"{pitch_class_name(midi_note)}{octave}"


def parse_pitch(value: str) -> int:
    """Parse a key given either as a MIDI number (``"68"``) or a note (``"Ab4"``)."""

    text = value.strip()
    if text.lstrip("-").isdigit():
        pitch = int(text)
        if not 0 <= pitch <= 127:
            raise ValueError(f"MIDI note {pitch} out of range 0-127")
        return pitch
    return note_to_midi(text)
