from __future__ import annotations
from typing import List, Optional

from .playback import PlaybackInfo
from .sequence import Sequence
from .util.time import ticks_to_real_seconds

DEFAULT_INSTRUMENT = 0   # GM Acoustic Grand Piano

class Track:
    """One output channel: instrument plus sequences played back to back."""

    def __init__(self, instrument: int = DEFAULT_INSTRUMENT, channel: int = 0):
        if not 0 <= int(channel) <= 15:
            raise ValueError(f"channel must be 0-15, got {channel}")
        if not 0 <= int(instrument) <= 127:
            raise ValueError(f"instrument must be 0-127, got {instrument}")
        self.instrument = int(instrument)
        self.channel = int(channel)
        self.sequences: List[Sequence] = []
        self._main = 0

    def add_sequence(self, seq: Sequence, main: bool = False):
        self.sequences.append(seq)
        if main:
            self._main = len(self.sequences) - 1

    @property
    def main_sequence(self) -> Optional[Sequence]:
        if not self.sequences:
            return None
        return self.sequences[self._main]

    @property
    def duration(self) -> int:
        return sum(s.duration for s in self.sequences)

    @property
    def real_duration(self) -> float:
        return ticks_to_real_seconds(self.duration)

    def generate_playback_info(self, start_time: int = 0) -> PlaybackInfo:
        info = PlaybackInfo()
        offset = start_time
        for seq in self.sequences:
            info = info + seq.generate_playback_info(self.channel, offset)
            offset += int(1000 * ticks_to_real_seconds(seq.duration))
        return info

    def __str__(self) -> str:
        return " | ".join(str(s) for s in self.sequences)

    def __repr__(self) -> str:
        return (f"Track(channel={self.channel}, instrument={self.instrument}, "
                f"sequences={len(self.sequences)}, duration={self.duration})")


class Composition:
    """Ordered tracks; track order is export order."""

    def __init__(self, name: str = ""):
        self.name = name
        self.tracks: List[Track] = []

    def add(self, track: Track):
        self.tracks.append(track)

    @property
    def duration(self) -> int:
        return max((t.duration for t in self.tracks), default=0)

    def generate_playback_info(self) -> PlaybackInfo:
        info = PlaybackInfo()
        for t in self.tracks:
            info = info + t.generate_playback_info()
        return info

    def longest_track(self) -> Optional[Track]:
        """First track with the maximal duration."""
        best = None
        for t in self.tracks:
            if best is None or t.duration > best.duration:
                best = t
        return best

    def __len__(self) -> int:
        return len(self.tracks)

    def __iter__(self):
        return iter(self.tracks)

    def __str__(self) -> str:
        body = " || ".join(f"({t})" for t in self.tracks)
        if self.name:
            return f"{self.name} {body}"
        return body
