from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union

from .util.time import bpm_from_micros

DEFAULT_TPB = 480
DEFAULT_TEMPO_US = 1_000_000   # 60 bpm

# --- typed raw events (absolute ticks) ---

@dataclass
class TempoEvent:
    time: int
    micros_per_beat: int
    channel: Optional[int] = None    # None: applies to every channel

    @property
    def bpm(self) -> float:
        return bpm_from_micros(self.micros_per_beat)

@dataclass
class PatchChangeEvent:
    time: int
    channel: int
    patch: int

@dataclass
class NoteOnEvent:
    time: int
    channel: int
    pitch: int
    velocity: int
    length: Optional[int] = None     # None: no matching note-off

    @property
    def terminated(self) -> bool:
        return self.length is not None

@dataclass
class NoteOffEvent:
    time: int
    channel: int
    pitch: int
    velocity: int = 0

@dataclass
class EndOfTrackEvent:
    time: int

MidiEvent = Union[TempoEvent, PatchChangeEvent, NoteOnEvent, NoteOffEvent, EndOfTrackEvent]

# --- container ---

class EventFormat(Enum):
    GROUPED = 1   # one event list per channel (SMF type 1)
    MERGED = 0    # all channels interleaved (SMF type 0)

@dataclass
class MidiEventFile:
    ticks_per_quarter_note: int = DEFAULT_TPB
    format: EventFormat = EventFormat.GROUPED
    tracks: List[List[MidiEvent]] = field(default_factory=list)
    name: str = ""

    def all_events(self) -> List[MidiEvent]:
        """Every event of every list, lists in order."""
        return [e for tr in self.tracks for e in tr]
