from __future__ import annotations
from typing import Iterable, Iterator, List, Optional, Protocol, Tuple, runtime_checkable

import numpy as np

from .note import Chord, Note, MAX_VELOCITY
from .playback import MessageKind, PlaybackInfo, PlaybackMessage
from .util.time import ticks_to_real_seconds

def _elapsed_ms(ticks: int) -> int:
    return int(1000 * ticks_to_real_seconds(ticks))

def _pitch_stats(pitches: List[int]) -> Tuple[float, float]:
    if not pitches:
        return float("nan"), float("nan")
    arr = np.asarray(pitches, dtype=float)
    return float(arr.mean()), float(arr.std())


@runtime_checkable
class Sequence(Protocol):
    """What Track needs from a melody or harmony sequence."""
    duration: int

    def __len__(self) -> int: ...
    def __iter__(self): ...
    def generate_playback_info(self, channel: int, start_time: int = 0) -> PlaybackInfo: ...
    def transpose(self, semitones: int) -> None: ...
    def pitch_average(self) -> float: ...
    def pitch_std(self) -> float: ...
    def clone(self): ...


class MelodySequence:
    """Ordered notes; rests are explicit elements."""

    def __init__(self, notes: Optional[Iterable[Note]] = None):
        self._notes: List[Note] = []
        self.duration = 0
        if notes is not None:
            self.add_notes(notes)

    @property
    def notes(self) -> Tuple[Note, ...]:
        return tuple(self._notes)

    @property
    def real_duration(self) -> float:
        return ticks_to_real_seconds(self.duration)

    def _recount(self):
        self.duration = sum(n.duration for n in self._notes)

    # --- building ---

    def add_note(self, note: Note):
        self._notes.append(note)
        self.duration += note.duration

    def add_notes(self, notes: Iterable[Note]):
        for n in notes:
            self.add_note(n)

    def add_pause(self, ticks: int):
        self.add_note(Note.rest(ticks))

    def add_sequence(self, other: "MelodySequence"):
        self.add_notes(other.notes)

    def remove_last_note(self):
        # keeps at least one note
        if len(self._notes) > 1:
            last = self._notes.pop()
            self.duration -= last.duration

    def trim(self, new_size: int):
        if new_size < len(self._notes):
            del self._notes[new_size:]
            self._recount()

    def trim_leading_rests(self):
        i = 0
        while i < len(self._notes) and self._notes[i].is_rest:
            i += 1
        if i:
            del self._notes[:i]
            self._recount()

    def split(self, n: int) -> List["MelodySequence"]:
        """Consecutive windows of exactly n notes; a shorter tail is dropped."""
        if n <= 0:
            raise ValueError(f"window size must be positive, got {n}")
        return [MelodySequence(self._notes[i:i + n])
                for i in range(0, len(self._notes) - n + 1, n)]

    # --- element-wise edits ---

    def _map(self, fn):
        self._notes = [fn(n) for n in self._notes]
        self._recount()

    def transpose(self, semitones: int):
        self._map(lambda n: n.transpose(semitones))

    def octave_up(self):
        self.transpose(12)

    def octave_down(self):
        self.transpose(-12)

    def scale_velocity(self, factor: float):
        self._map(lambda n: n.scale_velocity(factor))

    def standardize_duration(self):
        self._map(lambda n: n.quantized())

    def normalize_notes(self, octave: int):
        self._map(lambda n: n.normalized(octave))

    def double_speed(self):
        self._map(lambda n: Note(n.pitch, n.duration // 2, n.velocity))

    def halve_speed(self):
        self._map(lambda n: Note(n.pitch, n.duration * 2, n.velocity))

    # --- queries ---

    def total_note_duration(self) -> int:
        return sum(n.duration for n in self._notes if not n.is_rest)

    def total_rest_duration(self) -> int:
        return sum(n.duration for n in self._notes if n.is_rest)

    def average_octave(self) -> int:
        octaves = [n.octave for n in self._notes if not n.is_rest]
        if not octaves:
            return 0
        return int(sum(octaves) / len(octaves))

    def pitch_average(self) -> float:
        return _pitch_stats([n.pitch for n in self._notes])[0]

    def pitch_std(self) -> float:
        return _pitch_stats([n.pitch for n in self._notes])[1]

    def generate_playback_info(self, channel: int, start_time: int = 0) -> PlaybackInfo:
        info = PlaybackInfo()
        time = start_time
        for n in self._notes:
            if n.is_rest:
                time += _elapsed_ms(n.duration)
                continue
            info.add(time, PlaybackMessage(MessageKind.START, channel, n.velocity, n.pitch, n.duration))
            time += _elapsed_ms(n.duration)
            info.add(time, PlaybackMessage(MessageKind.STOP, channel, n.velocity, n.pitch))
            time += 1
        return info

    def clone(self) -> "MelodySequence":
        return MelodySequence(self._notes)

    def __len__(self) -> int:
        return len(self._notes)

    def __iter__(self) -> Iterator[Note]:
        return iter(list(self._notes))

    def __getitem__(self, idx):
        return self._notes[idx]

    def __eq__(self, other) -> bool:
        if not isinstance(other, MelodySequence):
            return NotImplemented
        return self._notes == other._notes

    def __str__(self) -> str:
        return "".join(str(n) for n in self._notes)

    def __repr__(self) -> str:
        return f"MelodySequence({len(self)} notes, duration={self.duration})"


class HarmonySequence:
    """Ordered chords. No pause concept; a rest chord fills that role."""

    def __init__(self, chords: Optional[Iterable[Chord]] = None, velocity: int = MAX_VELOCITY):
        self._chords: List[Chord] = []
        self.duration = 0
        self.velocity = velocity
        if chords is not None:
            self.add_chords(chords)

    @property
    def chords(self) -> Tuple[Chord, ...]:
        return tuple(self._chords)

    @property
    def real_duration(self) -> float:
        return ticks_to_real_seconds(self.duration)

    def add_chord(self, chord: Chord):
        self._chords.append(chord)
        self.duration += chord.duration

    def add_chords(self, chords: Iterable[Chord]):
        for c in chords:
            self.add_chord(c)

    def transpose(self, semitones: int):
        self._chords = [c.transpose(semitones) for c in self._chords]

    def standardize_duration(self):
        self._chords = [c.quantized() for c in self._chords]
        self.duration = sum(c.duration for c in self._chords)

    def _pitches(self) -> List[int]:
        return [p for c in self._chords for p in c.pitches]

    def pitch_average(self) -> float:
        return _pitch_stats(self._pitches())[0]

    def pitch_std(self) -> float:
        return _pitch_stats(self._pitches())[1]

    def generate_playback_info(self, channel: int, start_time: int = 0) -> PlaybackInfo:
        info = PlaybackInfo()
        time = start_time
        for c in self._chords:
            if c.is_rest:
                time += _elapsed_ms(c.duration)
                continue
            for p in c.pitches:
                info.add(time, PlaybackMessage(MessageKind.START, channel, self.velocity, p, c.duration))
            time += _elapsed_ms(c.duration)
            for p in c.pitches:
                info.add(time, PlaybackMessage(MessageKind.STOP, channel, self.velocity, p))
            time += 1
        return info

    def clone(self) -> "HarmonySequence":
        return HarmonySequence(self._chords, self.velocity)

    def __len__(self) -> int:
        return len(self._chords)

    def __iter__(self) -> Iterator[Chord]:
        return iter(list(self._chords))

    def __getitem__(self, idx):
        return self._chords[idx]

    def __eq__(self, other) -> bool:
        if not isinstance(other, HarmonySequence):
            return NotImplemented
        return self._chords == other._chords

    def __str__(self) -> str:
        return "".join(str(c) for c in self._chords)

    def __repr__(self) -> str:
        return f"HarmonySequence({len(self)} chords, duration={self.duration})"
