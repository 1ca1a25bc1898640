"""Unit tests for rhythm plans, canned templates and rhythm inference."""

import importlib
import random
import sys
from pathlib import Path

import numpy as np
import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

rhythm = importlib.import_module("comp_generator.rhythm_engine")
from comp_generator.errors import LengthMismatch  # noqa: E402

Hit = rhythm.Hit
SILENT = rhythm.SILENT


def _measure(sounding, cells=24):
    """Return a grid row with pitch 60 at every index in ``sounding``."""

    row = [0] * cells
    for i in sounding:
        row[i] = 60
    return row


def test_busy_measure_gets_short_downbeat_only():
    """A melody with no rests leaves room only for the downbeat."""

    plan = rhythm.infer_rhythm(None, _measure(range(24)), None)
    assert plan == (Hit(8),) + (SILENT,) * 7


def test_silent_measure_gets_short_downbeat_only():
    plan = rhythm.infer_rhythm(None, [0] * 24, None)
    assert rhythm.onsets(plan) == [1, 0, 0, 0, 0, 0, 0, 0]
    assert rhythm.lengths(plan) == [8, 0, 0, 0, 0, 0, 0, 0]


def test_gap_of_exactly_a_quarter_is_ignored():
    """Six empty cells (a quarter of the measure) is not enough space."""

    plan = rhythm.infer_rhythm(None, _measure([0, 7]), None)
    assert rhythm.onsets(plan) == [1, 0, 0, 0, 0, 0, 0, 0]


def test_early_gap_places_hit_and_short_downbeat():
    """Seven empty cells before cell 8 put a hit on slot 1."""

    plan = rhythm.infer_rhythm(None, _measure([0, 8]), None)
    assert plan[1] == Hit(8)
    assert plan[0] == Hit(8)


def test_late_first_hit_sustains_downbeat():
    """When the first comp hit lands on slot 2 or later the downbeat rings longer."""

    # Cells 1-9 are the only rest; the melody sounds from cell 10 onwards.
    plan = rhythm.infer_rhythm(None, _measure([0, *range(10, 24)]), None)
    assert rhythm.onsets(plan) == [1, 0, 1, 0, 0, 0, 0, 0]
    assert rhythm.lengths(plan) == [4, 0, 8, 0, 0, 0, 0, 0]


def test_two_gaps_place_two_hits():
    plan = rhythm.infer_rhythm(None, _measure([0, 10, 11, 20]), None)
    assert rhythm.onsets(plan) == [1, 0, 1, 0, 0, 1, 0, 0]
    assert plan[0] == Hit(4)


def test_neighbours_do_not_affect_result():
    """Previous and next measures are accepted but not read."""

    row = _measure([0, 10, 20])
    alone = rhythm.infer_rhythm(None, row, None)
    busy = _measure(range(24))
    assert rhythm.infer_rhythm(busy, row, [0] * 24) == alone


def test_other_subdivision_counts():
    """With 8 cells per measure each cell is one slot."""

    plan = rhythm.infer_rhythm(None, [60, 0, 0, 0, 62, 0, 0, 0], None)
    assert rhythm.onsets(plan) == [1, 0, 0, 1, 0, 0, 0, 0]
    assert plan[0] == Hit(4)


@pytest.mark.parametrize("cells", [0, 12, 20])
def test_measure_length_must_be_multiple_of_eight(cells):
    with pytest.raises(ValueError):
        rhythm.infer_rhythm(None, [0] * cells, None)


def test_plan_invariant_holds_for_random_grids():
    """``length == 0`` exactly where ``onset == 0`` and slot 0 always sounds."""

    rng = random.Random(7)
    grid = np.array(
        [[rng.choice([0, 0, 0, 60, 64]) for _ in range(24)] for _ in range(50)]
    )
    plans = rhythm.infer_rhythm_plans(grid)
    assert len(plans) == 50
    for plan in plans:
        on, dur = rhythm.onsets(plan), rhythm.lengths(plan)
        assert len(plan) == 8
        assert on[0] == 1
        assert all((o == 0) == (d == 0) for o, d in zip(on, dur))


def test_infer_rhythm_plans_handles_single_row():
    plans = rhythm.infer_rhythm_plans(np.zeros((1, 24), dtype=int))
    assert plans == [(Hit(8),) + (SILENT,) * 7]


def test_canned_charleston():
    plan = rhythm.CANNED_PATTERNS["charleston"]
    assert rhythm.onsets(plan) == [1, 0, 0, 1, 0, 0, 0, 0]
    assert rhythm.lengths(plan) == [3, 0, 0, 8, 0, 0, 0, 0]


@pytest.mark.parametrize(
    "name, expected",
    [
        ("Charleston", "charleston"),
        ("Freddy Green", "freddy_green"),
        ("upbeat-2-4", "upbeat_2_4"),
        (4, "whole"),
        ("2", "upbeat_1_3"),
    ],
)
def test_canonical_pattern(name, expected):
    assert rhythm.canonical_pattern(name) == expected


@pytest.mark.parametrize("name", ["bossa", 5, "-1", ""])
def test_canonical_pattern_unknown(name):
    with pytest.raises(ValueError):
        rhythm.canonical_pattern(name)


def test_plan_from_arrays_rejects_hit_without_length():
    with pytest.raises(LengthMismatch):
        rhythm.plan_from_arrays([1, 0, 1, 0, 0, 0, 0, 0], [4, 0, 0, 0, 0, 0, 0, 0])


def test_plan_from_arrays_rejects_unequal_arrays():
    with pytest.raises(LengthMismatch):
        rhythm.plan_from_arrays([1, 0, 0], [4, 0])


def test_plan_from_arrays_ignores_length_on_silent_slot():
    """A duration on a silent slot carries no meaning and is dropped."""

    plan = rhythm.plan_from_arrays([1, 0, 0, 0, 0, 0, 0, 0], [8, 4, 0, 0, 0, 0, 0, 0])
    assert plan == (Hit(8),) + (SILENT,) * 7


@pytest.mark.parametrize("slots", [3, 7, 9, 16])
def test_plan_from_arrays_requires_eight_slots(slots):
    """Plans of any other size would shift every later measure of a sequence."""

    with pytest.raises(LengthMismatch):
        rhythm.plan_from_arrays([1] + [0] * (slots - 1), [4] + [0] * (slots - 1))


def test_hit_requires_positive_duration():
    with pytest.raises(LengthMismatch):
        Hit(0)
