"""Timed event types and onset/release extraction.

The engine reads a performance as a stream of :class:`RawEvent` objects, one
per short MIDI message, each carrying an absolute tick. The stream is split
into two queues:

* **onsets** – ``0x90`` (note on) messages with a non-zero velocity;
* **releases** – ``0x80`` (note off) messages and ``0x90`` messages with a
  velocity of zero, which the MIDI standard treats as note off.

All other messages are ignored. The split preserves arrival order; callers
rely on arrival order being time order, which :func:`events_from_midi`
guarantees by merging every track of a file with :func:`mido.merge_tracks`.

:class:`TimedEvent` is the output side of the pipeline: a note onset or
release at an absolute tick, ready to be written into a track.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Deque, Iterable, List, Tuple

import mido

__all__ = [
    "NOTE_ON",
    "NOTE_OFF",
    "RawEvent",
    "TimedEvent",
    "extract_events",
    "events_from_midi",
]

NOTE_ON = 0x90
NOTE_OFF = 0x80


@dataclass(frozen=True)
class RawEvent:
    """A short MIDI message at an absolute tick position."""

    tick: int
    status: int
    data1: int = 0
    data2: int = 0

    @property
    def command(self) -> int:
        return self.status & 0xF0

    @property
    def channel(self) -> int:
        return self.status & 0x0F

    @property
    def pitch(self) -> int:
        return self.data1

    @property
    def velocity(self) -> int:
        return self.data2

    @property
    def is_channel_voice(self) -> bool:
        return 0x80 <= self.status < 0xF0

    @property
    def is_onset(self) -> bool:
        return self.command == NOTE_ON and self.data2 != 0

    @property
    def is_release(self) -> bool:
        return self.command == NOTE_OFF or (self.command == NOTE_ON and self.data2 == 0)


@dataclass(frozen=True)
class TimedEvent:
    """A synthesized note onset or release at an absolute tick."""

    tick: int
    pitch: int
    velocity: int
    is_onset: bool


def extract_events(events: Iterable[RawEvent]) -> Tuple[Deque[RawEvent], Deque[RawEvent]]:
    """Split ``events`` into ``(onsets, releases)`` queues.

    Order within each queue matches the order of ``events``. Messages that are
    neither note on nor note off are dropped.
    """

    onsets: Deque[RawEvent] = deque()
    releases: Deque[RawEvent] = deque()
    for event in events:
        if event.is_onset:
            onsets.append(event)
        elif event.is_release:
            releases.append(event)
    return onsets, releases


def events_from_midi(midi: mido.MidiFile) -> List[RawEvent]:
    """Return every non-meta message of ``midi`` as a time ordered RawEvent list.

    Tracks are merged first so a type 1 file with the solo spread over several
    tracks still yields a single stream in time order. Delta times are
    accumulated into absolute ticks.
    """

    events: List[RawEvent] = []
    tick = 0
    for msg in mido.merge_tracks(midi.tracks):
        tick += msg.time
        if msg.is_meta:
            continue
        data = msg.bytes()
        events.append(
            RawEvent(
                tick=tick,
                status=data[0],
                data1=data[1] if len(data) > 1 else 0,
                data2=data[2] if len(data) > 2 else 0,
            )
        )
    return events
