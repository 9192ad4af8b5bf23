from __future__ import annotations
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import mido

from .analyze import load_composition, notes_from_event_list, sampled_notes_from_event_list
from .composition import Composition
from .config import get_import_options
from .note import Note
from .timeline import (
    DEFAULT_TPB, EventFormat, MidiEvent, MidiEventFile, NoteOnEvent, PatchChangeEvent, TempoEvent,
)

logger = logging.getLogger(__name__)

def _read_track(track: mido.MidiTrack) -> List[MidiEvent]:
    """mido delta-time messages -> typed events with absolute ticks and note lengths."""
    events: List[MidiEvent] = []
    # (channel, pitch) -> open note-ons, oldest first
    active: Dict[Tuple[int, int], List[NoteOnEvent]] = {}
    abs_tick = 0
    for msg in track:
        abs_tick += int(msg.time)

        if msg.type == "set_tempo":
            events.append(TempoEvent(abs_tick, int(msg.tempo)))
        elif msg.type == "program_change":
            events.append(PatchChangeEvent(abs_tick, int(msg.channel), int(msg.program)))
        elif msg.type == "note_on" and int(msg.velocity) > 0:
            on = NoteOnEvent(abs_tick, int(msg.channel), int(msg.note), int(msg.velocity))
            active.setdefault((on.channel, on.pitch), []).append(on)
            events.append(on)
        elif msg.type in ("note_off", "note_on"):
            pending = active.get((int(msg.channel), int(msg.note)))
            if pending:
                on = pending.pop(0)
                on.length = abs_tick - on.time

    dangling = sum(len(v) for v in active.values())
    if dangling:
        logger.debug("%d note-ons without note-off", dangling)
    return events

def read_midi(path: Union[str, Path]) -> MidiEventFile:
    path = Path(path)
    if not path.exists() or not path.is_file():
        raise FileNotFoundError(f"midi file not found: {path}")

    mid = mido.MidiFile(str(path))
    tpq = int(getattr(mid, "ticks_per_beat", DEFAULT_TPB) or DEFAULT_TPB)
    fmt = EventFormat.MERGED if mid.type == 0 else EventFormat.GROUPED
    tracks = [_read_track(tr) for tr in mid.tracks]
    logger.info("read %s: type=%d tpq=%d tracks=%d", path.name, mid.type, tpq, len(tracks))
    return MidiEventFile(ticks_per_quarter_note=tpq, format=fmt, tracks=tracks, name=path.stem)

def load_midi(path: Union[str, Path], cfg: Optional[Dict[str, Any]] = None,
              mode: Optional[str] = None) -> Composition:
    """Read a MIDI file and import it as a Composition."""
    opts = get_import_options(cfg or {})
    return load_composition(read_midi(path), mode or opts["mode"], opts["default_bpm"])

def load_notes(path: Union[str, Path], track: int = 0,
               cfg: Optional[Dict[str, Any]] = None) -> List[Note]:
    """All terminated notes of one track of a MIDI file, as a flat list."""
    opts = get_import_options(cfg or {})
    return notes_from_event_list(read_midi(path), track, opts["default_bpm"])

def load_sampled_notes(path: Union[str, Path], spaced: bool = False,
                       cfg: Optional[Dict[str, Any]] = None) -> List[Note]:
    opts = get_import_options(cfg or {})
    return sampled_notes_from_event_list(read_midi(path), spaced, opts["default_bpm"])
