from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, List, Tuple

class MessageKind(Enum):
    START = "start"
    STOP = "stop"

@dataclass(frozen=True)
class PlaybackMessage:
    kind: MessageKind
    channel: int
    velocity: int
    pitch: int
    duration: int = 0   # internal ticks, informational (START only)

class PlaybackInfo:
    """
    Time-ordered multimap: absolute time (ms) -> messages at that instant.
    Built by insertion; merging never touches the operands.
    """

    def __init__(self):
        self.messages: Dict[int, List[PlaybackMessage]] = {}

    def add(self, time: int, message: PlaybackMessage):
        self.messages.setdefault(int(time), []).append(message)

    def times(self) -> List[int]:
        return sorted(self.messages)

    def items(self) -> Iterator[Tuple[int, List[PlaybackMessage]]]:
        for t in self.times():
            yield t, self.messages[t]

    def merge(self, other: "PlaybackInfo") -> "PlaybackInfo":
        """Union of time keys; at shared keys self's messages come first."""
        out = PlaybackInfo()
        for src in (self, other):
            for t, msgs in src.messages.items():
                out.messages.setdefault(t, []).extend(msgs)
        return out

    def __add__(self, other: "PlaybackInfo") -> "PlaybackInfo":
        return self.merge(other)

    def shifted(self, offset: int) -> "PlaybackInfo":
        out = PlaybackInfo()
        for t, msgs in self.messages.items():
            out.messages[t + offset] = list(msgs)
        return out

    @property
    def message_count(self) -> int:
        return sum(len(m) for m in self.messages.values())

    @property
    def end_time(self) -> int:
        return max(self.messages) if self.messages else 0

    def __len__(self) -> int:
        return len(self.messages)

    def __contains__(self, time: int) -> bool:
        return time in self.messages

    def __getitem__(self, time: int) -> List[PlaybackMessage]:
        return self.messages[time]

    def __repr__(self) -> str:
        return f"PlaybackInfo(times={len(self)}, messages={self.message_count})"
