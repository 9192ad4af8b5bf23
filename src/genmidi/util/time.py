from __future__ import annotations
import math
from enum import IntEnum
from typing import List, Optional, Tuple, Union

DEFAULT_BPM = 120
DEFAULT_IMPORT_BPM = 60.0

class Durations(IntEnum):
    tn = 1
    sn = 2
    en = 4
    qn = 8
    hn = 16
    wn = 32
    bn = 64

# float noise below this still counts as the next integer when truncating
_EPS = 1e-9

def _trunc(x: float) -> int:
    if x >= 0:
        return int(math.floor(x + _EPS))
    return -int(math.floor(-x + _EPS))

def tick_duration(unit: Union[Durations, str, int]) -> int:
    """Internal tick count of a standard duration ("qn", Durations.qn, 8)."""
    if isinstance(unit, str):
        return int(Durations[unit])
    return int(Durations(unit))

def ticks_to_real_seconds(ticks: int, bpm: float = DEFAULT_BPM) -> float:
    # wn (32 ticks) spans four beats
    return ticks * 60.0 * 4.0 / 32.0 / bpm

def real_seconds_to_ticks(seconds: float, bpm: float = DEFAULT_BPM) -> float:
    return seconds / 60.0 / 4.0 * 32.0 * bpm

def bpm_from_micros(micros_per_beat: int) -> float:
    return 60_000_000.0 / float(micros_per_beat)

def micros_from_bpm(bpm: float) -> int:
    return int(round(60_000_000 / max(1e-6, float(bpm))))

def ticks_from_midi(midi_ticks: int, ticks_per_quarter_note: int, tempo_bpm: float) -> int:
    """MIDI ticks at the given resolution -> internal ticks (qn == 8 at 60 bpm)."""
    return _trunc(float(midi_ticks) / float(ticks_per_quarter_note) * int(Durations.qn) * (60.0 / tempo_bpm))

def midi_from_ticks(ticks: int, ticks_per_quarter_note: int, tempo_bpm: float) -> int:
    """Inverse of ticks_from_midi."""
    return _trunc(float(ticks_per_quarter_note) * float(ticks) / int(Durations.qn) / (60.0 / tempo_bpm))

def nearest_standard_duration(ticks: int) -> Durations:
    """
    Standard duration with the smallest squared distance to 'ticks'.
    Scan in enumeration order with strict '<': on a tie the shorter value wins.
    """
    best = 0
    smallest = math.inf
    durations = list(Durations)
    for i, d in enumerate(durations):
        err = (ticks - int(d)) ** 2
        if err < smallest:
            smallest = err
            best = i
    return durations[best]

def nearest_lower_duration_with_remainder(ticks: int) -> Tuple[Durations, int]:
    """
    Like nearest_standard_duration, but only durations strictly below 'ticks' qualify.
    If none does (ticks <= tn) the scan keeps its start index, i.e. tn, and the
    remainder is ticks - tn (zero or negative).
    """
    best = 0
    smallest = math.inf
    durations = list(Durations)
    for i, d in enumerate(durations):
        err = (ticks - int(d)) ** 2
        if err < smallest and int(d) < ticks:
            smallest = err
            best = i
    dur = durations[best]
    return dur, ticks - int(dur)

def number_of_dots(ticks: int) -> int:
    dur, remainder = nearest_lower_duration_with_remainder(ticks)
    half = int(dur) // 2
    if half > 0:
        return remainder // half
    return 0

def standard_note_duration(ticks: int) -> Union[Durations, int]:
    """Clamp to [tn, wn]; values in between are returned as-is."""
    if ticks <= Durations.tn:
        return Durations.tn
    if ticks >= Durations.wn:
        return Durations.wn
    try:
        return Durations(ticks)
    except ValueError:
        return ticks

def duration_range(low: Optional[int] = None, high: Optional[int] = None) -> List[int]:
    out = []
    for d in Durations:
        if low is not None and int(d) < low:
            continue
        if high is not None and int(d) > high:
            continue
        out.append(int(d))
    return out

def duration_name(ticks: int) -> str:
    """'qn' for standard values, the raw tick count otherwise."""
    try:
        return Durations(ticks).name
    except ValueError:
        return str(ticks)
