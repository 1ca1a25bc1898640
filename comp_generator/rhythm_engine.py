"""Comping rhythm patterns and density based rhythm inference.

A *rhythm plan* describes one 4/4 measure of accompaniment as eight eighth
note slots. Each slot is either a :class:`Hit` carrying the duration code of
the chord struck there, or :data:`SILENT`. Encoding the slot as a single
tagged value means a hit can never lose its duration and a silent slot can
never carry one.

Plans come from two places:

* five built-in *canned* templates (Freddy Green quarter notes, the
  Charleston, two upbeat patterns and a single whole-measure hit);
* :func:`infer_rhythm`, which looks for breathing room in the melody. Wherever
  the soloist rests for more than a quarter of a measure, a short comp hit is
  placed just before the melody comes back in. The downbeat is always struck;
  it is short when the first inferred hit comes early and sustained otherwise.

The inference is a density heuristic, not harmonic analysis.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, List, Optional, Sequence, Tuple, Union

from .errors import LengthMismatch

__all__ = [
    "SLOTS_PER_MEASURE",
    "Hit",
    "Silent",
    "SILENT",
    "RhythmPlan",
    "CANNED_PATTERNS",
    "PATTERN_NAMES",
    "DEFAULT_PATTERN",
    "canonical_pattern",
    "plan_from_arrays",
    "onsets",
    "lengths",
    "infer_rhythm",
    "infer_rhythm_plans",
]

SLOTS_PER_MEASURE = 8


@dataclass(frozen=True)
class Hit:
    """A chord struck in a slot, lasting ``duration_code`` subdivisions of a measure."""

    duration_code: int

    def __post_init__(self) -> None:
        if self.duration_code <= 0:
            raise LengthMismatch("A hit needs a positive duration code")


class Silent:
    """Marker for a slot without a chord."""

    _instance: Optional["Silent"] = None

    def __new__(cls) -> "Silent":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "SILENT"


SILENT = Silent()

Slot = Union[Hit, Silent]
RhythmPlan = Tuple[Slot, ...]


def plan_from_arrays(beat: Sequence[int], beat_lengths: Sequence[int]) -> RhythmPlan:
    """Build a plan from parallel onset and duration arrays.

    ``beat[i]`` is non-zero where a chord should be struck and
    ``beat_lengths[i]`` gives that hit's duration code. Both arrays hold one
    entry per eighth-note slot of a measure.

    Raises
    ------
    LengthMismatch
        If the arrays do not both have eight slots or a hit has a zero
        duration.
    """

    if len(beat) != len(beat_lengths):
        raise LengthMismatch("Beats and lengths must have the same number of slots")
    if len(beat) != SLOTS_PER_MEASURE:
        raise LengthMismatch(
            f"A rhythm plan needs {SLOTS_PER_MEASURE} slots, got {len(beat)}"
        )
    plan: List[Slot] = []
    for onset, length in zip(beat, beat_lengths):
        if onset == 0:
            plan.append(SILENT)
            continue
        if length == 0:
            raise LengthMismatch("Beats and lengths must match up")
        plan.append(Hit(length))
    return tuple(plan)


def onsets(plan: RhythmPlan) -> List[int]:
    """Return the ``0``/``1`` onset view of ``plan``."""

    return [1 if isinstance(slot, Hit) else 0 for slot in plan]


def lengths(plan: RhythmPlan) -> List[int]:
    """Return the duration code view of ``plan`` (``0`` for silent slots)."""

    return [slot.duration_code if isinstance(slot, Hit) else 0 for slot in plan]


# Canned comping templates, index order matters for numeric selection.
_CANNED_ARRAYS: Tuple[Tuple[str, Tuple[int, ...], Tuple[int, ...]], ...] = (
    ("freddy_green", (1, 0, 1, 0, 1, 0, 1, 0), (4, 0, 4, 0, 4, 0, 4, 0)),
    ("charleston", (1, 0, 0, 1, 0, 0, 0, 0), (3, 0, 0, 8, 0, 0, 0, 0)),
    ("upbeat_1_3", (0, 1, 0, 0, 0, 1, 0, 0), (0, 8, 0, 0, 0, 8, 0, 0)),
    ("upbeat_2_4", (0, 0, 0, 1, 0, 0, 0, 1), (0, 0, 0, 8, 0, 0, 0, 8)),
    ("whole", (1, 0, 0, 0, 0, 0, 0, 0), (1, 0, 0, 0, 0, 0, 0, 0)),
)

CANNED_PATTERNS: Dict[str, RhythmPlan] = {
    name: plan_from_arrays(beat, beat_lengths)
    for name, beat, beat_lengths in _CANNED_ARRAYS
}
PATTERN_NAMES: Tuple[str, ...] = tuple(name for name, _, _ in _CANNED_ARRAYS)
DEFAULT_PATTERN = "upbeat_1_3"


@lru_cache(maxsize=None)
def canonical_pattern(name: Union[str, int]) -> str:
    """Return the canonical template name for ``name``.

    Lookups ignore case and treat spaces and dashes as underscores, so
    ``"Freddy Green"`` and ``"freddy-green"`` both resolve. An integer (or
    digit string) selects a template by index.

    Raises
    ------
    ValueError
        If ``name`` does not refer to a known template.
    """

    if isinstance(name, int) or (isinstance(name, str) and name.strip().isdigit()):
        index = int(name)
        if not 0 <= index < len(PATTERN_NAMES):
            raise ValueError(f"Unknown rhythm pattern: {name}")
        return PATTERN_NAMES[index]
    key = name.strip().lower().replace(" ", "_").replace("-", "_")
    if key not in CANNED_PATTERNS:
        raise ValueError(f"Unknown rhythm pattern: {name}")
    return key


def infer_rhythm(
    prev_measure: Optional[Sequence[int]],
    measure: Sequence[int],
    next_measure: Optional[Sequence[int]],
) -> RhythmPlan:
    """Infer a comping plan for ``measure`` from the gaps in the melody.

    Parameters
    ----------
    prev_measure, next_measure:
        Neighbouring grid rows, ``None`` at the start or end of the track.
        They are accepted for look-ahead smoothing but not read yet.
    measure:
        One grid row; its length must be a positive multiple of eight.

    Returns
    -------
    RhythmPlan
        Eight slots with slot ``0`` always a hit.
    """

    cells = len(measure)
    if cells == 0 or cells % SLOTS_PER_MEASURE:
        raise ValueError("measure length must be a positive multiple of 8")
    cells_per_slot = cells // SLOTS_PER_MEASURE

    plan: List[Slot] = [SILENT] * SLOTS_PER_MEASURE
    in_gap = False
    gap_length = 0
    first_chord = 0
    for i, pitch in enumerate(measure):
        if pitch == 0:
            in_gap = True
            gap_length += 1
        elif in_gap:
            in_gap = False
            # Rest longer than a quarter of the measure: comp just before the
            # melody re-enters.
            if gap_length > cells_per_slot * 2:
                slot = i // cells_per_slot - 1
                plan[slot] = Hit(8)
                first_chord = slot if first_chord == 0 else first_chord
            gap_length = 0

    plan[0] = Hit(8 if first_chord < 2 else 4)
    return tuple(plan)


def infer_rhythm_plans(grid: Sequence[Sequence[int]]) -> List[RhythmPlan]:
    """Run :func:`infer_rhythm` over every row of ``grid`` with its neighbours."""

    rows = len(grid)
    plans: List[RhythmPlan] = []
    for i in range(rows):
        prev_measure = grid[i - 1] if i > 0 else None
        next_measure = grid[i + 1] if i + 1 < rows else None
        plans.append(infer_rhythm(prev_measure, grid[i], next_measure))
    return plans
