"""Tests for the ii–V–I harmony cycle and the key estimator."""

import importlib
import sys
from collections import deque
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

harmony = importlib.import_module("comp_generator.harmony_generator")
from comp_generator.errors import EmptyInput  # noqa: E402
from comp_generator.events import RawEvent  # noqa: E402


def test_cycle_positions_in_c():
    """Key 60 cycles Dm, G, C, C."""

    chords = harmony.generate_progression(60, 4)
    assert [c.tones for c in chords] == [
        (62, 65, 69),
        (67, 71, 74),
        (60, 64, 67),
        (60, 64, 67),
    ]
    assert [c.label for c in chords] == ["D", "G", "C", "C"]


@pytest.mark.parametrize("key", [48, 60, 68, 75])
def test_cycle_has_period_four(key):
    for i in range(16):
        assert harmony.chord_for_measure(key, i) == harmony.chord_for_measure(key, i + 4)


def test_ab_first_measure_is_minor_on_70():
    chord = harmony.chord_for_measure(68, 0)
    assert chord.root == 70
    assert chord.tones == (70, 73, 77)


def test_progression_chords_are_independent():
    """Each measure receives its own chord object."""

    chords = harmony.generate_progression(60, 8)
    assert chords[2] == chords[3]
    assert chords[2] is not chords[3]


def test_progression_rejects_negative_length():
    with pytest.raises(ValueError):
        harmony.generate_progression(60, -1)


def test_estimate_key_uses_last_onset():
    onsets = deque([RawEvent(0, 0x90, 60, 90), RawEvent(100, 0x90, 67, 90)])
    assert harmony.estimate_key(onsets) == 67
    # The queue is left intact for the quantizer.
    assert len(onsets) == 2


def test_estimate_key_empty_queue():
    with pytest.raises(EmptyInput):
        harmony.estimate_key(deque())


def test_estimate_key_rejects_non_channel_message():
    onsets = [RawEvent(0, 0x90, 60, 90), RawEvent(10, 0xFF, 0x2F, 0)]
    with pytest.raises(EmptyInput):
        harmony.estimate_key(onsets)
