"""Exception types raised by the accompaniment pipeline.

Every error derives from :class:`CompError`, which itself subclasses
``ValueError``. Callers that already guard pipeline calls with
``except ValueError`` (as the CLI does for argument validation) therefore keep
working, while code that wants to react to one specific failure can catch the
narrower type.

None of these errors are retried anywhere in the package. They signal a
malformed input file or a programming mistake by the caller and abort the
synthesis for the affected track.
"""

from __future__ import annotations

__all__ = [
    "CompError",
    "EmptyChord",
    "InvalidModifier",
    "LengthMismatch",
    "UnsupportedDivision",
    "EmptyInput",
]


class CompError(ValueError):
    """Base class for all accompaniment errors."""


class EmptyChord(CompError):
    """A custom chord was built from zero pitches."""


class InvalidModifier(CompError):
    """A triad was requested with an unknown quality string."""


class LengthMismatch(CompError):
    """A custom rhythm requested a hit without a matching duration code."""


class UnsupportedDivision(CompError):
    """The MIDI file uses SMPTE (frame based) timing instead of PPQ."""


class EmptyInput(CompError):
    """Key estimation was attempted on an empty or malformed onset queue."""
