"""Chord model used by the harmony cycle and the sequence synthesizer.

A :class:`Chord` is a set of simultaneous pitches with a label and a
*duration code*. The code is the number of equal subdivisions of a 4/4 measure
the voicing should last (``1`` whole measure, ``3`` roughly a dotted quarter,
``4`` quarter, ``8`` eighth). It is later used as a divisor when the chord is
expanded into MIDI ticks, so it must be positive whenever the chord sounds.

Chords are cheap value objects. The synthesizer never shares one instance
between two sequence slots; :meth:`Chord.with_duration` hands out an
independent copy carrying the slot's own duration code.
"""

from __future__ import annotations

import copy
from typing import Dict, Iterable, Optional, Tuple

from .errors import EmptyChord, InvalidModifier
from .note_utils import pitch_class_name

__all__ = ["Chord", "TRIAD_OFFSETS", "MAJOR_OFFSETS"]

MAJOR_OFFSETS: Tuple[int, int, int] = (0, 4, 7)

# Interval offsets from the root for every supported triad quality.
TRIAD_OFFSETS: Dict[str, Tuple[int, int, int]] = {
    "m": (0, 3, 7),
    "dim": (0, 3, 6),
    "sus2": (0, 2, 7),
    "sus4": (0, 5, 7),
}


class Chord:
    """Simultaneous pitches sharing one label and one duration code."""

    def __init__(self, tones: Iterable[int], duration_code: int = 1) -> None:
        tones = tuple(int(t) for t in tones)
        if not tones:
            raise EmptyChord("Chord must contain at least 1 note")
        self._tones = tones
        self.root = tones[0]
        self.label = pitch_class_name(self.root)
        self.duration_code = duration_code

    @classmethod
    def from_pitches(cls, pitches: Iterable[int]) -> "Chord":
        """Build a custom chord whose root is the first pitch."""

        return cls(pitches)

    @classmethod
    def major(cls, root: int) -> "Chord":
        """Return the major triad on ``root``."""

        return cls(root + offset for offset in MAJOR_OFFSETS)

    @classmethod
    def triad(cls, root: int, modifier: Optional[str] = None) -> "Chord":
        """Return a triad on ``root`` with the quality named by ``modifier``.

        ``None`` yields a major triad. Otherwise ``modifier`` must be one of
        ``"m"``, ``"dim"``, ``"sus2"`` or ``"sus4"``.

        Raises
        ------
        InvalidModifier
            If ``modifier`` is not a recognised quality.
        """

        if modifier is None:
            return cls.major(root)
        try:
            offsets = TRIAD_OFFSETS[modifier]
        except (KeyError, TypeError):
            raise InvalidModifier(f"Need a valid modifier, got {modifier!r}") from None
        return cls(root + offset for offset in offsets)

    @property
    def tones(self) -> Tuple[int, ...]:
        return self._tones

    @tones.setter
    def tones(self, value: Iterable[int]) -> None:
        """Replace the voicing; the first tone becomes the new root and label."""

        value = tuple(int(t) for t in value)
        if not value:
            raise EmptyChord("Chord must contain at least 1 note")
        self._tones = value
        self.root = value[0]
        self.label = pitch_class_name(self.root)

    def with_duration(self, duration_code: int) -> "Chord":
        """Return an independent copy of this chord lasting ``duration_code``."""

        clone = copy.copy(self)
        clone.duration_code = duration_code
        return clone

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Chord):
            return NotImplemented
        return (
            self._tones == other._tones
            and self.label == other.label
            and self.duration_code == other.duration_code
        )

    def __repr__(self) -> str:
        return (
            f"Chord(label={self.label!r}, tones={list(self._tones)}, "
            f"duration_code={self.duration_code})"
        )
