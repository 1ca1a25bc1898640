"""Map the onset stream onto a fixed per-measure grid.

Each measure of a 4/4 performance is split into ``subdivisions`` equal cells
(24 by default, i.e. sixteenth-note triplets). A cell holds ``0`` when no note
starts inside it, otherwise the pitch of the *last* onset that falls inside
it. Several onsets inside one cell therefore collapse into one value; the
rhythm inference that reads the grid is tuned against exactly this density
signature, so the overwrite policy must not change.
"""

from __future__ import annotations

import math
from typing import Deque

import numpy as np

from .events import RawEvent

__all__ = ["BEATS_PER_MEASURE", "DEFAULT_SUBDIVISIONS", "measure_count", "quantize"]

# Only 4/4 is supported; ticks per measure is always ``4 * resolution``.
BEATS_PER_MEASURE = 4
DEFAULT_SUBDIVISIONS = 24


def measure_count(track_ticks: int, resolution: int) -> int:
    """Return the number of (possibly partial) measures spanned by ``track_ticks``."""

    return math.ceil(track_ticks / (BEATS_PER_MEASURE * resolution))


def quantize(
    onsets: Deque[RawEvent],
    resolution: int,
    track_ticks: int,
    subdivisions: int = DEFAULT_SUBDIVISIONS,
) -> np.ndarray:
    """Return the measure grid for ``onsets``.

    Parameters
    ----------
    onsets:
        Onset queue in time order. It is consumed: every event that lands in a
        cell is popped from the left.
    resolution:
        Ticks per quarter note of the source file.
    track_ticks:
        Total length of the performance in ticks.
    subdivisions:
        Number of cells per measure.

    Returns
    -------
    numpy.ndarray
        Integer array of shape ``(ceil(track_ticks / (4 * resolution)),
        subdivisions)``.
    """

    if resolution <= 0:
        raise ValueError("resolution must be a positive integer")
    if subdivisions <= 0:
        raise ValueError("subdivisions must be a positive integer")
    if track_ticks < 0:
        raise ValueError("track_ticks must be non-negative")

    rows = measure_count(track_ticks, resolution)
    grid = np.zeros((rows, subdivisions), dtype=np.int64)
    ticks_per_measure = BEATS_PER_MEASURE * resolution
    for m in range(rows):
        for n in range(subdivisions):
            # Exclusive end tick of the cell.
            boundary = (m * subdivisions + n + 1) * ticks_per_measure // subdivisions
            while onsets and onsets[0].tick < boundary:
                grid[m, n] = onsets.popleft().pitch
    return grid
