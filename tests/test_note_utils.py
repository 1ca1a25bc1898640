"""Unit tests for note ↔ MIDI conversion helpers.

These tests exercise :func:`note_to_midi`, :func:`midi_to_note` and the key
parser used by the command line. Invalid inputs must raise descriptive errors
instead of silently producing a wrong pitch."""

import importlib
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

note_utils = importlib.import_module("comp_generator.note_utils")


@pytest.mark.parametrize(
    "note, expected",
    [
        ("C4", 60),
        ("Ab4", 68),
        ("G#4", 68),
        ("a4", 69),
        ("C-1", 0),
        ("G9", 127),
        ("Bb3", 58),
        ("Cb4", 59),
        ("B#4", 72),
        ("B#3", 60),
    ],
)
def test_note_to_midi(note, expected):
    assert note_utils.note_to_midi(note) == expected


@pytest.mark.parametrize("note", ["H4", "C", "C#x", "", "G#9", "Cb-1", "B#9"])
def test_note_to_midi_invalid(note):
    with pytest.raises(ValueError):
        note_utils.note_to_midi(note)


def test_midi_to_note_uses_sharps():
    assert note_utils.midi_to_note(68) == "G#4"
    assert note_utils.midi_to_note(0) == "C-1"


def test_midi_to_note_out_of_range():
    with pytest.raises(ValueError):
        note_utils.midi_to_note(128)


@pytest.mark.parametrize("pitch, name", [(60, "C"), (70, "A#"), (71, "B"), (-1, "B")])
def test_pitch_class_name(pitch, name):
    assert note_utils.pitch_class_name(pitch) == name


@pytest.mark.parametrize("value, expected", [("68", 68), (" 0 ", 0), ("Ab4", 68), ("Eb3", 51)])
def test_parse_pitch(value, expected):
    assert note_utils.parse_pitch(value) == expected


@pytest.mark.parametrize("value", ["128", "-3", "Ab", "sixty"])
def test_parse_pitch_invalid(value):
    with pytest.raises(ValueError):
        note_utils.parse_pitch(value)
