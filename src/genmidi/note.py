from __future__ import annotations
import math
from dataclasses import dataclass, replace
from typing import Iterable, List, Tuple, Union

from .util.time import (
    Durations, duration_name, nearest_standard_duration, number_of_dots,
    ticks_to_real_seconds,
)

REST = -1
MAX_VELOCITY = 127

NOTE_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]

@dataclass(frozen=True)
class Note:
    """
    Quantised note value. Durations are internal ticks (qn == 8).
    A note is a rest if pitch is REST or the velocity is not positive.
    """
    pitch: int
    duration: int
    velocity: int = MAX_VELOCITY

    def __post_init__(self):
        if self.duration < 0:
            raise ValueError(f"duration must be >= 0, got {self.duration}")

    @classmethod
    def rest(cls, duration: int) -> "Note":
        return cls(REST, duration, 0)

    @classmethod
    def from_name(cls, name: str, octave: int, duration: Union[Durations, int],
                  velocity: int = MAX_VELOCITY) -> "Note":
        return cls(NOTE_NAMES.index(name) + 12 * octave, int(duration), velocity)

    @property
    def is_rest(self) -> bool:
        return self.pitch == REST or self.velocity <= 0

    @property
    def octave(self) -> int:
        if self.pitch < 0:
            return 0
        return self.pitch // 12

    @property
    def note_pitch(self) -> int:
        """Chromatic class 0..11 (-1 for the rest sentinel)."""
        if self.pitch < 0:
            return REST
        return self.pitch % 12

    @property
    def name(self) -> str:
        if self.note_pitch < 0:
            return "!"
        return NOTE_NAMES[self.note_pitch]

    @property
    def real_duration(self) -> float:
        return ticks_to_real_seconds(self.duration)

    @property
    def number_of_dots(self) -> int:
        return number_of_dots(self.duration)

    @property
    def dedup_key(self) -> Tuple[int, int]:
        return (self.pitch, self.duration)

    def same_as(self, other: "Note") -> bool:
        """Pitch and duration match; velocity is ignored."""
        if other is None:
            return False
        return self.dedup_key == other.dedup_key

    def difference(self, other: "Note") -> float:
        return math.sqrt((self.pitch - other.pitch) ** 2 + (self.duration - other.duration) ** 2)

    def transpose(self, semitones: int) -> "Note":
        if self.is_rest:
            return self
        return replace(self, pitch=self.pitch + semitones)

    def octave_up(self) -> "Note":
        return self.transpose(12)

    def octave_down(self) -> "Note":
        return self.transpose(-12)

    def scale_velocity(self, factor: float) -> "Note":
        return replace(self, velocity=int(self.velocity * factor))

    def with_octave(self, octave: int) -> "Note":
        if self.pitch < 0:
            return self
        return replace(self, pitch=octave * 12 + self.note_pitch)

    def quantized(self) -> "Note":
        return replace(self, duration=int(nearest_standard_duration(self.duration)))

    def normalized(self, octave: int) -> "Note":
        return self.quantized().with_octave(octave)

    def __str__(self) -> str:
        return f"({self.name}{self.octave}-{duration_name(self.duration)})"


@dataclass(frozen=True)
class Chord:
    """Pitches sounding together for one shared duration."""
    pitches: Tuple[int, ...]
    duration: int

    def __post_init__(self):
        ps = tuple(sorted(set(int(p) for p in self.pitches)))
        if not ps:
            raise ValueError("a chord needs at least one pitch")
        if self.duration < 0:
            raise ValueError(f"duration must be >= 0, got {self.duration}")
        object.__setattr__(self, "pitches", ps)

    @property
    def is_rest(self) -> bool:
        return all(p == REST for p in self.pitches)

    @property
    def root(self) -> int:
        return self.pitches[0]

    def notes(self, velocity: int = MAX_VELOCITY) -> List[Note]:
        return [Note(p, self.duration, velocity) for p in self.pitches]

    def transpose(self, semitones: int) -> "Chord":
        if self.is_rest:
            return self
        return Chord(tuple(p if p == REST else p + semitones for p in self.pitches), self.duration)

    def quantized(self) -> "Chord":
        return Chord(self.pitches, int(nearest_standard_duration(self.duration)))

    def __contains__(self, pitch: int) -> bool:
        return pitch in self.pitches

    def __str__(self) -> str:
        names = " ".join(f"{n.name}{n.octave}" for n in self.notes())
        return f"[{names}-{duration_name(self.duration)}]"


def chord_from_notes(notes: Iterable[Note]) -> Chord:
    notes = list(notes)
    if not notes:
        raise ValueError("a chord needs at least one note")
    return Chord(tuple(n.pitch for n in notes), notes[0].duration)
