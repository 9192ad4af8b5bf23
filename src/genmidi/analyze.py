# src/genmidi/analyze.py
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .composition import Composition, Track, DEFAULT_INSTRUMENT
from .note import Chord, Note
from .sequence import HarmonySequence, MelodySequence
from .timeline import (
    EventFormat, MidiEventFile, NoteOnEvent, NoteOffEvent, PatchChangeEvent, TempoEvent,
)
from .util.time import DEFAULT_IMPORT_BPM, ticks_from_midi

logger = logging.getLogger(__name__)

IMPORT_MODES = ("auto", "grouped", "merged")

def _usable_tempo(e: TempoEvent, where: str) -> bool:
    # a zero or negative tempo has no bpm; the previous tempo stays in effect
    if e.micros_per_beat > 0:
        return True
    logger.debug("%s: tempo %d at tick %d ignored", where, e.micros_per_beat, e.time)
    return False

def load_grouped(event_file: MidiEventFile, default_bpm: float = DEFAULT_IMPORT_BPM) -> Composition:
    """
    One harmony track per event list. Note-ons starting together with the same
    converted length are folded into one chord.
    A patch change repeating the active instrument ends the scan of that list
    (looped/duplicated region); lists without duration are dropped.
    """
    comp = Composition(event_file.name)
    tpq = event_file.ticks_per_quarter_note

    for idx, events in enumerate(event_file.tracks, start=1):
        track = Track(DEFAULT_INSTRUMENT, idx % 16)
        seq = HarmonySequence()
        tempo = float(default_bpm)
        last_abs_time = -1
        chord_notes: List[int] = []
        chord_duration = 0
        instrument: Optional[int] = None

        for e in events:
            if isinstance(e, TempoEvent):
                if _usable_tempo(e, f"list {idx}"):
                    tempo = e.bpm
                continue

            if isinstance(e, PatchChangeEvent):
                if e.patch == instrument:
                    logger.debug("list %d: patch %d repeated at tick %d, stopping", idx, e.patch, e.time)
                    break
                track.instrument = e.patch
                instrument = e.patch
                continue

            if not isinstance(e, NoteOnEvent):
                continue
            if not e.terminated:
                logger.debug("list %d: unterminated note %d at tick %d ignored", idx, e.pitch, e.time)
                continue

            new_duration = ticks_from_midi(e.length, tpq, tempo)
            if e.time == last_abs_time and chord_duration == new_duration:
                chord_notes.append(e.pitch)
            else:
                # flush the chord in progress, start a new one
                if chord_notes:
                    seq.add_chord(Chord(tuple(chord_notes), chord_duration))
                chord_notes = [e.pitch]
            chord_duration = new_duration
            last_abs_time = e.time

        if chord_notes:
            seq.add_chord(Chord(tuple(chord_notes), chord_duration))

        track.add_sequence(seq)
        if track.duration > 0:
            comp.add(track)
        else:
            logger.debug("list %d: no duration, dropped", idx)

    logger.info("grouped import: %d of %d lists kept", len(comp.tracks), len(event_file.tracks))
    return comp

# --- merged (interleaved) import ---

@dataclass
class _ChannelState:
    track: Track
    seq: MelodySequence = field(default_factory=MelodySequence)
    tempo: float = DEFAULT_IMPORT_BPM

def _event_channel(e) -> Optional[int]:
    if isinstance(e, (NoteOnEvent, NoteOffEvent, PatchChangeEvent)):
        return e.channel
    if isinstance(e, TempoEvent):
        return e.channel
    return None

def load_merged(event_file: MidiEventFile, default_bpm: float = DEFAULT_IMPORT_BPM) -> Composition:
    """
    One melody track per channel. Pass 1 finds the highest channel, pass 2 routes
    every event (in time order) to its channel. Gaps before a note become rests.
    """
    comp = Composition(event_file.name)
    tpq = event_file.ticks_per_quarter_note

    events = event_file.all_events()
    if len(event_file.tracks) > 1:
        events = sorted(events, key=lambda ev: ev.time)  # stable: file order on ties

    # Pass 1
    channels = [c for c in (_event_channel(e) for e in events) if c is not None]
    n_channels = max(channels) + 1 if channels else 0
    states = [_ChannelState(track=Track(DEFAULT_INSTRUMENT, ch), tempo=float(default_bpm))
              for ch in range(n_channels)]

    # Pass 2
    for e in events:
        if isinstance(e, TempoEvent):
            if not _usable_tempo(e, "merged"):
                continue
            targets = states if e.channel is None else states[e.channel:e.channel + 1]
            for st in targets:
                st.tempo = e.bpm
            continue

        if isinstance(e, PatchChangeEvent):
            states[e.channel].track.instrument = e.patch
            continue

        if not isinstance(e, NoteOnEvent):
            continue
        if not e.terminated:
            logger.debug("channel %d: unterminated note %d at tick %d ignored", e.channel, e.pitch, e.time)
            continue

        st = states[e.channel]
        total = ticks_from_midi(e.time, tpq, st.tempo)
        if total > st.seq.duration:
            st.seq.add_pause(total - st.seq.duration)
        st.seq.add_note(Note(e.pitch, ticks_from_midi(e.length, tpq, st.tempo), e.velocity))

    for st in states:
        if len(st.seq) > 0:
            st.track.add_sequence(st.seq)
            comp.add(st.track)

    logger.info("merged import: %d channels, %d tracks", n_channels, len(comp.tracks))
    return comp

# --- flat note extraction ---

def notes_from_event_list(event_file: MidiEventFile, track: int = 0,
                          default_bpm: float = DEFAULT_IMPORT_BPM) -> List[Note]:
    """
    Every terminated note of one event list, in list order, as plain notes.
    Tempo is tracked like the grouped import; overlaps and gaps are not kept.
    """
    if not 0 <= track < len(event_file.tracks):
        raise ValueError(f"event list {track} out of range (file has {len(event_file.tracks)})")
    tpq = event_file.ticks_per_quarter_note
    tempo = float(default_bpm)
    notes: List[Note] = []
    for e in event_file.tracks[track]:
        if isinstance(e, TempoEvent):
            if _usable_tempo(e, f"list {track}"):
                tempo = e.bpm
        elif isinstance(e, NoteOnEvent) and e.terminated:
            notes.append(Note(e.pitch, ticks_from_midi(e.length, tpq, tempo), e.velocity))
    return notes

def sampled_notes_from_event_list(event_file: MidiEventFile, spaced: bool = False,
                                  default_bpm: float = DEFAULT_IMPORT_BPM) -> List[Note]:
    """
    Reduce all event lists, in time order, to one line of notes on a grid of
    quarter-note windows.

    With ``spaced`` the first note starting in a window is taken and the rest
    of that window is skipped. Otherwise the window only moves on to the one
    in which the taken note ends: short notes inside one window are all kept,
    notes starting in an earlier window than that one are dropped.
    """
    tpq = event_file.ticks_per_quarter_note
    interval = max(1, tpq)
    events = sorted(event_file.all_events(), key=lambda ev: ev.time)
    tempo = float(default_bpm)
    start = 0
    notes: List[Note] = []
    for e in events:
        if isinstance(e, TempoEvent):
            if _usable_tempo(e, "sampled"):
                tempo = e.bpm
            continue
        if not isinstance(e, NoteOnEvent) or not e.terminated:
            continue

        while e.time > start + interval:
            start += interval
        if e.time < start:
            continue  # window already taken

        notes.append(Note(e.pitch, ticks_from_midi(e.length, tpq, tempo), e.velocity))
        if spaced:
            start += interval
        else:
            while start + interval < e.time + e.length:
                start += interval
    logger.debug("sampled %d notes (spaced=%s)", len(notes), spaced)
    return notes

def load_composition(event_file: MidiEventFile, mode: str = "auto",
                     default_bpm: float = DEFAULT_IMPORT_BPM) -> Composition:
    if mode not in IMPORT_MODES:
        raise ValueError(f"unknown import mode {mode!r}, expected one of {IMPORT_MODES}")
    if mode == "auto":
        mode = "grouped" if event_file.format == EventFormat.GROUPED else "merged"
    if mode == "grouped":
        return load_grouped(event_file, default_bpm)
    return load_merged(event_file, default_bpm)
