from __future__ import annotations
import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

import mido

from .composition import Composition
from .config import get_export_options, get_ticks_per_beat
from .process import build_event_file
from .timeline import (
    EndOfTrackEvent, EventFormat, MidiEvent, MidiEventFile,
    NoteOffEvent, NoteOnEvent, PatchChangeEvent, TempoEvent,
)

logger = logging.getLogger(__name__)

# ---------- interne Helfer ----------

def _to_messages(events: Iterable[MidiEvent]) -> List[Tuple[int, int, Any]]:
    """(abs_tick, order, mido message without delta). Note-ons with a length get their note-off here."""
    out = []
    for i, e in enumerate(events):
        if isinstance(e, TempoEvent):
            out.append((e.time, i, mido.MetaMessage("set_tempo", tempo=int(e.micros_per_beat))))
        elif isinstance(e, PatchChangeEvent):
            out.append((e.time, i, mido.Message("program_change", channel=e.channel, program=e.patch)))
        elif isinstance(e, NoteOnEvent):
            out.append((e.time, i, mido.Message("note_on", channel=e.channel, note=e.pitch, velocity=e.velocity)))
            if e.length is not None:
                out.append((e.time + e.length, i,
                            mido.Message("note_off", channel=e.channel, note=e.pitch, velocity=0)))
        elif isinstance(e, NoteOffEvent):
            out.append((e.time, i, mido.Message("note_off", channel=e.channel, note=e.pitch, velocity=e.velocity)))
        elif isinstance(e, EndOfTrackEvent):
            out.append((e.time, i, mido.MetaMessage("end_of_track")))
    return out

def _emit_track_events(mt: mido.MidiTrack, events: Iterable[MidiEvent]):
    """Typed events -> delta times. Equal ticks keep input order: a length-derived
    note-off stays ahead of a later re-strike, a note closed at its own tick stays after it."""
    last = 0
    for tick, _, msg in sorted(_to_messages(events), key=lambda x: (x[0], x[1])):
        mt.append(msg.copy(time=tick - last))
        last = tick

# ---------- öffentliche Writer-APIs ----------

def write_midi_events(event_file: MidiEventFile, out_path: Union[str, Path]):
    """Serialise an event file; MERGED becomes a single type-0 track."""
    os.makedirs(os.path.dirname(os.path.abspath(str(out_path))), exist_ok=True)
    if event_file.format == EventFormat.MERGED:
        mid = mido.MidiFile(type=0, ticks_per_beat=event_file.ticks_per_quarter_note)
        mt = mido.MidiTrack()
        _emit_track_events(mt, event_file.all_events())
        mid.tracks.append(mt)
    else:
        mid = mido.MidiFile(type=1, ticks_per_beat=event_file.ticks_per_quarter_note)
        for events in event_file.tracks:
            mt = mido.MidiTrack()
            _emit_track_events(mt, events)
            mid.tracks.append(mt)
    mid.save(str(out_path))
    logger.info("wrote %s (%d tracks)", out_path, len(mid.tracks))

def save_midi(composition: Composition, out_path: Union[str, Path],
              cfg: Optional[Dict[str, Any]] = None) -> MidiEventFile:
    """Export a Composition to a MIDI file; returns the event file that was written."""
    cfg = cfg or {}
    opts = get_export_options(cfg)
    ef = build_event_file(
        composition,
        ticks_per_quarter_note=get_ticks_per_beat(cfg),
        end_of_track_offset=opts["end_of_track_offset"],
        emit_program_change=opts["emit_program_change"],
    )
    write_midi_events(ef, out_path)
    return ef
