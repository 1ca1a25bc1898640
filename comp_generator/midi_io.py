"""Reading solos from and writing backing tracks to MIDI files.

This module is the only place that touches :mod:`mido`. It provides the two
collaborators of the accompaniment engine:

* the *input* side, :func:`load_midi`, which reads a Standard MIDI File and
  rejects SMPTE (frame based) timing since all of the engine's arithmetic is
  expressed in ticks per quarter note;
* the *output* side, :func:`create_backing_file` (a standalone chord track)
  and :func:`write_on_solo` (comping merged into the solo's own tracks).

A generated file is only saved once every track has been synthesized, so an
error part way through never leaves a half-written file behind.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from mido import Message, MetaMessage, MidiFile, MidiTrack

from .chord import Chord
from .errors import UnsupportedDivision
from .events import TimedEvent, events_from_midi, extract_events
from .harmony_generator import estimate_key
from .note_utils import pitch_class_name
from .quantizer import DEFAULT_SUBDIVISIONS, quantize
from .rhythm_engine import RhythmPlan, infer_rhythm_plans
from .sequencer import expand_sequence, fill_sequence, measures_in_track

__all__ = [
    "TRACK_NAME",
    "BACKING_VELOCITY",
    "SOLO_COMP_VELOCITY",
    "load_midi",
    "track_length",
    "setup_messages",
    "write_events",
    "create_backing_file",
    "write_on_solo",
    "backing_for_solo",
]

TRACK_NAME = "midifile track"
# Standalone backing files are louder than comping layered under a solo.
BACKING_VELOCITY = 94
SOLO_COMP_VELOCITY = 60

# Universal non-real-time "General MIDI system on"; mido adds the F0/F7 framing.
_GM_RESET = (0x7E, 0x7F, 0x09, 0x01)
_OMNI_ON = 0x7D
_POLY_ON = 0x7F
# The header stores SMPTE divisions as a negative 16-bit value.
_SMPTE_FLAG = 0x8000


def load_midi(path: Union[str, Path]) -> Tuple[MidiFile, int]:
    """Read ``path`` and return ``(midi, ppq)``.

    Raises
    ------
    UnsupportedDivision
        If the file uses frame based timing instead of ticks per quarter note.
    OSError
        If the file cannot be read.
    """

    midi = MidiFile(str(Path(path).expanduser()))
    ppq = midi.ticks_per_beat
    if ppq <= 0 or ppq & _SMPTE_FLAG:
        logging.error("Unsupported time division %r in %s", ppq, path)
        raise UnsupportedDivision("Cannot handle divisions that are not PPQ")
    return midi, ppq


def track_length(track: Iterable[Message]) -> int:
    """Return the total length of ``track`` in ticks."""

    return sum(msg.time for msg in track)


def _has_notes(track: Iterable[Message]) -> bool:
    return any(msg.type in ("note_on", "note_off") for msg in track)


def setup_messages(program: int = 0) -> List[Message]:
    """Return the messages opening every standalone backing track.

    These reset the device to General MIDI, name the track, switch on omni and
    poly mode and select ``program`` (acoustic grand piano by default).
    """

    if not 0 <= program <= 127:
        raise ValueError("program must be between 0 and 127")
    return [
        Message("sysex", data=_GM_RESET, time=0),
        MetaMessage("track_name", name=TRACK_NAME, time=0),
        Message("control_change", control=_OMNI_ON, value=0, time=0),
        Message("control_change", control=_POLY_ON, value=0, time=0),
        Message("program_change", program=program, time=0),
    ]


def _to_message(event: TimedEvent) -> Message:
    msg_type = "note_on" if event.is_onset else "note_off"
    return Message(msg_type, note=event.pitch, velocity=event.velocity, time=0)


def write_events(
    track: MidiTrack, events: Sequence[TimedEvent], end_tick: int = 0
) -> None:
    """Merge ``events`` into ``track`` in place.

    The existing messages and the new events are placed on one absolute
    timeline, stably sorted by tick and converted back to delta times. Any
    existing ``end_of_track`` is replaced by a single terminal one at
    ``end_tick``, the old end of track or the last event, whichever is latest.
    """

    merged: List[Tuple[int, Message]] = []
    current = 0
    for msg in track:
        current += msg.time
        if msg.type == "end_of_track":
            end_tick = max(end_tick, current)
            continue
        merged.append((current, msg))
    merged.extend((event.tick, _to_message(event)) for event in events)
    merged.sort(key=lambda p: p[0])

    track.clear()
    last = 0
    for tick, msg in merged:
        track.append(msg.copy(time=tick - last))
        last = tick
    track.append(MetaMessage("end_of_track", time=max(0, end_tick - last)))


def create_backing_file(
    sequence: Sequence[Optional[Chord]],
    ppq: int,
    output_file: Union[str, Path],
    *,
    velocity: int = BACKING_VELOCITY,
    program: int = 0,
) -> MidiFile:
    """Write ``sequence`` to ``output_file`` as a single-track MIDI file.

    The end of track is placed at ``(len(sequence) + 8) * ppq`` ticks, well
    past the final slot, so the last chord can ring out.
    The parent directory is created when missing.

    Returns
    -------
    MidiFile
        The in-memory file that was saved.
    """

    if ppq <= 0:
        raise ValueError("ppq must be a positive integer")
    _check_velocity(velocity)
    mid = MidiFile(type=1, ticks_per_beat=ppq)
    track = MidiTrack(setup_messages(program))
    mid.tracks.append(track)
    write_events(
        track,
        expand_sequence(sequence, ppq, velocity),
        end_tick=(len(sequence) + 8) * ppq,
    )

    path = Path(output_file).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    mid.save(str(path))
    logging.info("Backing track saved to %s", output_file)
    return mid


def write_on_solo(
    input_file: Union[str, Path],
    output_file: Union[str, Path, None] = None,
    *,
    pattern: Union[str, int, None] = None,
    key: Optional[int] = None,
    subdivisions: int = DEFAULT_SUBDIVISIONS,
    velocity: int = SOLO_COMP_VELOCITY,
) -> MidiFile:
    """Add a comping part to every melodic track of ``input_file``.

    Parameters
    ----------
    input_file:
        Solo performance to accompany.
    output_file:
        Where to save the combined file. When ``None`` nothing is written and
        only the in-memory result is returned.
    pattern:
        Canned template name or index. ``None`` infers a rhythm per measure
        from the gaps in the solo.
    key:
        Root pitch of the harmony cycle. ``None`` estimates it from the last
        note of the solo.
    subdivisions:
        Grid cells per measure used by rhythm inference.
    velocity:
        Velocity of every comp note.

    Raises
    ------
    UnsupportedDivision
        If the file uses SMPTE timing.
    EmptyInput
        If ``key`` is ``None`` and the solo contains no notes.
    """

    _check_velocity(velocity)
    midi, ppq = load_midi(input_file)
    key, plans = _analyse_solo(midi, ppq, pattern=pattern, key=key, subdivisions=subdivisions)

    for index, track in enumerate(midi.tracks):
        if not _has_notes(track):
            continue
        num_measures = measures_in_track(track_length(track), ppq)
        # Each track gets freshly built chords; nothing is shared between runs.
        sequence = fill_sequence(key, num_measures, pattern=pattern, plans=plans)
        write_events(track, expand_sequence(sequence, ppq, velocity))
        logging.debug("Track %d: comped %d measures", index, num_measures)

    if output_file is not None:
        path = Path(output_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        midi.save(str(path))
        logging.info("Comped solo saved to %s", output_file)
    return midi


def backing_for_solo(
    input_file: Union[str, Path],
    output_file: Union[str, Path],
    *,
    pattern: Union[str, int, None] = None,
    key: Optional[int] = None,
    subdivisions: int = DEFAULT_SUBDIVISIONS,
    velocity: int = BACKING_VELOCITY,
    program: int = 0,
) -> MidiFile:
    """Write the comping for ``input_file`` to a separate file.

    Analysis is identical to :func:`write_on_solo`, but the chords are written
    through :func:`create_backing_file` at the solo's resolution and span the
    longest track of the solo.
    """

    _check_velocity(velocity)
    midi, ppq = load_midi(input_file)
    key, plans = _analyse_solo(midi, ppq, pattern=pattern, key=key, subdivisions=subdivisions)
    num_measures = measures_in_track(_total_ticks(midi), ppq)
    sequence = fill_sequence(key, num_measures, pattern=pattern, plans=plans)
    return create_backing_file(
        sequence, ppq, output_file, velocity=velocity, program=program
    )


def _total_ticks(midi: MidiFile) -> int:
    return max((track_length(t) for t in midi.tracks), default=0)


def _analyse_solo(
    midi: MidiFile,
    ppq: int,
    *,
    pattern: Union[str, int, None],
    key: Optional[int],
    subdivisions: int,
) -> Tuple[int, Optional[List[RhythmPlan]]]:
    """Return the key root and, unless a canned ``pattern`` is used, inferred plans."""

    onsets, releases = extract_events(events_from_midi(midi))
    logging.debug("Read %d onsets and %d releases", len(onsets), len(releases))

    if key is None:
        key = estimate_key(onsets)
        logging.info("Estimated key root: %s (%d)", pitch_class_name(key), key)

    plans = None
    if pattern is None:
        grid = quantize(onsets, ppq, _total_ticks(midi), subdivisions)
        plans = infer_rhythm_plans(grid)
    return key, plans


def _check_velocity(velocity: int) -> None:
    # A note on with velocity 0 would be read back as a release.
    if not 1 <= velocity <= 127:
        raise ValueError("velocity must be between 1 and 127")
