"""Assemble chords and rhythm plans into a timed backing sequence.

A *sequence* is a flat list with one entry per eighth-note slot of the whole
track (eight per measure). Each entry is either ``None`` (no chord struck) or
a :class:`~comp_generator.chord.Chord` whose ``duration_code`` says how long
the voicing rings.

:func:`fill_sequence` builds a sequence from the harmony cycle and either a
canned template or per-measure inferred plans. :func:`expand_sequence` turns
it into absolute-tick :class:`~comp_generator.events.TimedEvent` pairs. Every
onset is shifted one tick late so comp hits never coincide exactly with a
melody event on the same tick.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Union

from .chord import Chord
from .errors import LengthMismatch
from .events import TimedEvent
from .harmony_generator import chord_for_measure
from .quantizer import BEATS_PER_MEASURE
from .rhythm_engine import (
    CANNED_PATTERNS,
    DEFAULT_PATTERN,
    SLOTS_PER_MEASURE,
    Hit,
    RhythmPlan,
    canonical_pattern,
)

__all__ = [
    "generate_measure",
    "fill_sequence",
    "expand_sequence",
    "measures_in_track",
    "format_measure",
]


def generate_measure(chord: Chord, plan: RhythmPlan) -> List[Optional[Chord]]:
    """Stamp ``chord`` over ``plan``.

    Every hit receives its own copy of ``chord`` so later changes to one
    slot's duration never leak into another slot.

    Raises
    ------
    LengthMismatch
        If ``plan`` does not have exactly eight slots.
    """

    if len(plan) != SLOTS_PER_MEASURE:
        raise LengthMismatch(
            f"A rhythm plan needs {SLOTS_PER_MEASURE} slots, got {len(plan)}"
        )
    return [
        chord.with_duration(slot.duration_code) if isinstance(slot, Hit) else None
        for slot in plan
    ]


def measures_in_track(track_ticks: int, ppq: int) -> int:
    """Return the number of complete 4/4 measures in ``track_ticks``."""

    if ppq <= 0:
        raise ValueError("ppq must be a positive integer")
    return track_ticks // ppq // BEATS_PER_MEASURE


def fill_sequence(
    key: int,
    num_measures: int,
    *,
    pattern: Union[str, int, None] = None,
    plans: Optional[Sequence[RhythmPlan]] = None,
) -> List[Optional[Chord]]:
    """Return the backing sequence for ``num_measures`` measures in ``key``.

    Parameters
    ----------
    key:
        Root pitch of the harmony cycle.
    num_measures:
        Number of measures to fill.
    pattern:
        Name or index of a canned template. Used when ``plans`` is ``None``;
        defaults to :data:`~comp_generator.rhythm_engine.DEFAULT_PATTERN`.
    plans:
        Inferred per-measure plans. When given, measure ``i`` uses
        ``plans[i]`` instead of a canned template.

    Raises
    ------
    ValueError
        If both ``pattern`` and ``plans`` are supplied, the pattern name is
        unknown, or fewer plans than measures are supplied.
    """

    if num_measures < 0:
        raise ValueError("num_measures must be non-negative")
    if plans is not None and pattern is not None:
        raise ValueError("pass either a canned pattern or inferred plans, not both")
    if plans is not None and len(plans) < num_measures:
        raise ValueError(
            f"{num_measures} measures need rhythm plans but only {len(plans)} were given"
        )
    canned: Optional[RhythmPlan] = None
    if plans is None:
        name = canonical_pattern(pattern if pattern is not None else DEFAULT_PATTERN)
        canned = CANNED_PATTERNS[name]

    sequence: List[Optional[Chord]] = []
    for i in range(num_measures):
        plan = plans[i] if plans is not None else canned
        measure = generate_measure(chord_for_measure(key, i), plan)
        logging.debug("measure %d: %s", i, format_measure(measure))
        sequence.extend(measure)
    return sequence


def expand_sequence(
    sequence: Sequence[Optional[Chord]], ppq: int, velocity: int = 94
) -> List[TimedEvent]:
    """Expand ``sequence`` into onset/release events at resolution ``ppq``.

    Slot ``i`` starts at ``i * (ppq // 2) + 1``; a chord with duration code
    ``d`` is released ``ppq * 4 // d`` ticks later. Events are returned in
    slot order with each tone's onset followed by its release.

    Raises
    ------
    ValueError
        If a chord has a tone outside the MIDI range ``0-127``, which happens
        when the key lies near the top of the keyboard.
    """

    slot_ticks = ppq // 2
    measure_ticks = ppq * BEATS_PER_MEASURE
    events: List[TimedEvent] = []
    for i, chord in enumerate(sequence):
        if chord is None:
            continue
        if not all(0 <= pitch <= 127 for pitch in chord.tones):
            logging.error("Chord %r in slot %d is outside the MIDI range", chord, i)
            raise ValueError(
                f"Chord {chord.label} {list(chord.tones)} in slot {i} has tones "
                "outside the MIDI range 0-127"
            )
        start = i * slot_ticks + 1
        end = i * slot_ticks + measure_ticks // chord.duration_code + 1
        for pitch in chord.tones:
            events.append(TimedEvent(start, pitch, velocity, True))
            events.append(TimedEvent(end, pitch, velocity, False))
    return events


def format_measure(measure: Sequence[Optional[Chord]]) -> str:
    """Render one measure as text, ``-`` for silence and the label for hits."""

    return "".join("-" if chord is None else chord.label for chord in measure)
