import pytest

from genmidi.composition import Composition, Track
from genmidi.note import Note
from genmidi.playback import MessageKind, PlaybackInfo, PlaybackMessage
from genmidi.process import build_event_file, message_to_event, track_to_events
from genmidi.sequence import MelodySequence
from genmidi.timeline import (
    EndOfTrackEvent, EventFormat, NoteOffEvent, NoteOnEvent, PatchChangeEvent,
)


def _track(*notes, channel=0, instrument=0):
    t = Track(instrument, channel)
    t.add_sequence(MelodySequence(notes))
    return t


class _StartOnly:
    """Sequence stand-in whose playback ends on a start message."""
    duration = 8

    def __len__(self):
        return 1

    def __iter__(self):
        return iter(())

    def generate_playback_info(self, channel, start_time=0):
        info = PlaybackInfo()
        info.add(start_time + 40, PlaybackMessage(MessageKind.START, channel, 80, 72))
        return info


def test_single_note_exports_start_stop_and_marker():
    comp = Composition("one")
    comp.add(_track(Note(60, 8)))
    ef = build_event_file(comp)
    assert ef.format == EventFormat.GROUPED
    assert ef.ticks_per_quarter_note == 480
    assert ef.name == "one"
    [events] = ef.tracks
    assert [type(e) for e in events] == [NoteOnEvent, NoteOffEvent, EndOfTrackEvent]
    on, off, end = events
    assert (on.time, on.pitch, on.velocity) == (0, 60, 127)
    assert off.time == 500 and off.pitch == 60
    assert end.time == 600
    assert on.time <= off.time <= end.time


def test_empty_track_gets_marker_at_zero():
    assert track_to_events(Track()) == [EndOfTrackEvent(0)]
    rest_only = Track()
    rest_only.add_sequence(MelodySequence([Note.rest(8)]))
    assert track_to_events(rest_only) == [EndOfTrackEvent(0)]


def test_unconvertible_messages_are_skipped():
    events = track_to_events(_track(Note(200, 8), Note(60, 8)))
    assert [type(e) for e in events] == [NoteOnEvent, NoteOffEvent, EndOfTrackEvent]
    assert events[0].time == 501
    assert events[1].time == 1001
    assert events[2].time == 1101


def test_hanging_start_gets_closed():
    t = Track(channel=3)
    t.add_sequence(_StartOnly())
    events = track_to_events(t)
    assert [type(e) for e in events] == [NoteOnEvent, NoteOffEvent, EndOfTrackEvent]
    assert events[1] == NoteOffEvent(40, 3, 72, 80)
    assert events[2].time == 140


def test_every_start_has_a_stop():
    t = _track(Note(60, 8), Note.rest(4), Note(62, 2), Note(64, 16), channel=5)
    events = track_to_events(t)
    ons = [(e.channel, e.pitch) for e in events if isinstance(e, NoteOnEvent)]
    offs = [(e.channel, e.pitch) for e in events if isinstance(e, NoteOffEvent)]
    assert ons == offs == [(5, 60), (5, 62), (5, 64)]
    times = [e.time for e in events]
    assert times == sorted(times)


def test_track_order_and_options():
    comp = Composition()
    comp.add(_track(Note(60, 8), channel=9, instrument=0))
    comp.add(_track(Note(40, 8), channel=2, instrument=33))
    ef = build_event_file(comp, ticks_per_quarter_note=960, end_of_track_offset=10,
                          emit_program_change=True)
    assert ef.ticks_per_quarter_note == 960
    assert [tr[1].channel for tr in ef.tracks] == [9, 2]
    assert ef.tracks[1][0] == PatchChangeEvent(0, 2, 33)
    assert ef.tracks[0][-1] == EndOfTrackEvent(510)


def test_message_to_event_validates():
    msg = PlaybackMessage(MessageKind.START, 16, 100, 60)
    with pytest.raises(ValueError):
        message_to_event(msg, 0)
    ok = message_to_event(PlaybackMessage(MessageKind.STOP, 0, 100, 60), 7)
    assert ok == NoteOffEvent(7, 0, 60, 100)
