from __future__ import annotations
import logging
from typing import List, Union

from .composition import Composition, Track
from .playback import MessageKind, PlaybackMessage
from .timeline import (
    DEFAULT_TPB, EndOfTrackEvent, EventFormat, MidiEvent, MidiEventFile,
    NoteOffEvent, NoteOnEvent, PatchChangeEvent,
)

logger = logging.getLogger(__name__)

DEFAULT_END_OF_TRACK_OFFSET = 100

def _check_range(name: str, value: int, hi: int):
    if not 0 <= value <= hi:
        raise ValueError(f"{name} {value} outside 0-{hi}")

def message_to_event(message: PlaybackMessage, time: int) -> Union[NoteOnEvent, NoteOffEvent]:
    """Playback message -> channel-voice event at 'time'. ValueError if not representable."""
    _check_range("channel", message.channel, 15)
    _check_range("pitch", message.pitch, 127)
    _check_range("velocity", message.velocity, 127)
    if message.kind == MessageKind.START:
        return NoteOnEvent(time, message.channel, message.pitch, message.velocity)
    if message.kind == MessageKind.STOP:
        return NoteOffEvent(time, message.channel, message.pitch, message.velocity)
    raise ValueError(f"unknown message kind {message.kind!r}")

def track_to_events(track: Track,
                    end_of_track_offset: int = DEFAULT_END_OF_TRACK_OFFSET,
                    emit_program_change: bool = False) -> List[MidiEvent]:
    """
    Raw events of one track in playback order, closed by an end-of-track marker.
    Messages that cannot be converted are skipped.
    """
    events: List[MidiEvent] = []
    if emit_program_change:
        events.append(PatchChangeEvent(0, track.channel, track.instrument))

    info = track.generate_playback_info()
    for time, messages in info.items():
        for m in messages:
            try:
                events.append(message_to_event(m, time))
            except ValueError as exc:
                logger.debug("channel %d: skipping message at %d: %s", track.channel, time, exc)

    # last note still sounding -> close it where it started
    if events and isinstance(events[-1], NoteOnEvent):
        on = events[-1]
        events.append(NoteOffEvent(on.time, on.channel, on.pitch, on.velocity))

    end_time = events[-1].time + end_of_track_offset if events else 0
    events.append(EndOfTrackEvent(end_time))
    return events

def build_event_file(composition: Composition,
                     ticks_per_quarter_note: int = DEFAULT_TPB,
                     end_of_track_offset: int = DEFAULT_END_OF_TRACK_OFFSET,
                     emit_program_change: bool = False) -> MidiEventFile:
    """One event list per track, in track order."""
    tracks = [track_to_events(t, end_of_track_offset, emit_program_change)
              for t in composition.tracks]
    logger.info("export: %d tracks, %d events", len(tracks), sum(len(t) for t in tracks))
    return MidiEventFile(
        ticks_per_quarter_note=ticks_per_quarter_note,
        format=EventFormat.GROUPED,
        tracks=tracks,
        name=composition.name,
    )
