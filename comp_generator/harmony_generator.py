"""Fixed ii–V–I harmony cycle and a placeholder key estimator.

The accompaniment does not analyse the melody's harmony. Instead every measure
receives a chord from a four-measure jazz cadence relative to a single key
pitch::

    measure % 4 == 0  ->  ii  (minor triad on key + 2)
    measure % 4 == 1  ->  V   (major triad on key + 7)
    measure % 4 == 2  ->  I   (major triad on key)
    measure % 4 == 3  ->  I

The key itself comes from :func:`estimate_key`, which simply takes the pitch
of the last note of the solo. Tunes overwhelmingly end on the tonic, so this
is good enough for a backing track, but it is a placeholder rather than a key
detection algorithm.

Example
-------
>>> [c.label for c in generate_progression(60, 4)]
['D', 'G', 'C', 'C']
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

from .chord import Chord
from .errors import EmptyInput
from .events import RawEvent

__all__ = ["CYCLE", "chord_for_measure", "generate_progression", "estimate_key"]

# (offset from key, triad modifier) for each position of the cycle.
CYCLE: Tuple[Tuple[int, Optional[str]], ...] = (
    (2, "m"),  # ii
    (7, None),  # V
    (0, None),  # I
    (0, None),  # I
)


def chord_for_measure(key: int, index: int) -> Chord:
    """Return a fresh chord for measure ``index`` of a tune in ``key``."""

    offset, modifier = CYCLE[index % len(CYCLE)]
    return Chord.triad(key + offset, modifier)


def generate_progression(key: int, num_measures: int) -> List[Chord]:
    """Return one chord per measure for ``num_measures`` measures.

    Raises
    ------
    ValueError
        If ``num_measures`` is negative.
    """

    if num_measures < 0:
        raise ValueError("num_measures must be non-negative")
    return [chord_for_measure(key, i) for i in range(num_measures)]


def estimate_key(onsets: Iterable[RawEvent]) -> int:
    """Return the pitch of the last onset in ``onsets``.

    Raises
    ------
    EmptyInput
        If ``onsets`` is empty or its last element is not a channel voice
        message.
    """

    events = list(onsets)
    if not events:
        raise EmptyInput("Cannot estimate a key without any note onsets")
    last = events[-1]
    if not isinstance(last, RawEvent) or not last.is_channel_voice:
        raise EmptyInput("Onset queue must end with a channel voice message")
    return last.pitch
