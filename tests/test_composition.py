import pytest

from genmidi.composition import Composition, Track
from genmidi.note import Note
from genmidi.playback import MessageKind
from genmidi.sequence import MelodySequence


def _track(channel, *notes, instrument=0):
    t = Track(instrument, channel)
    t.add_sequence(MelodySequence(notes))
    return t


def test_track_duration_and_main_sequence():
    t = Track(channel=2)
    first = MelodySequence([Note(60, 8)])
    second = MelodySequence([Note(62, 16)])
    t.add_sequence(first)
    t.add_sequence(second)
    assert t.duration == 24
    assert t.main_sequence is first
    third = MelodySequence([Note(64, 4)])
    t.add_sequence(third, main=True)
    assert t.main_sequence is third
    assert Track().main_sequence is None


def test_track_validates_channel_and_instrument():
    with pytest.raises(ValueError):
        Track(channel=16)
    with pytest.raises(ValueError):
        Track(instrument=128)


def test_track_playback_chains_sequences():
    t = Track(channel=4)
    t.add_sequence(MelodySequence([Note(60, 8)]))
    t.add_sequence(MelodySequence([Note(64, 8)]))
    info = t.generate_playback_info()
    assert info.times() == [0, 500, 1000]
    assert [(m.kind, m.pitch) for m in info[500]] == [(MessageKind.STOP, 60), (MessageKind.START, 64)]
    assert all(m.channel == 4 for _, ms in info.items() for m in ms)


def test_composition_playback_merges_in_track_order():
    comp = Composition("song")
    comp.add(_track(0, Note(60, 8)))
    comp.add(_track(1, Note(67, 16)))
    info = comp.generate_playback_info()
    assert [m.channel for m in info[0]] == [0, 1]
    assert info.times() == [0, 500, 1000]


def test_longest_track_first_wins_ties():
    comp = Composition()
    assert comp.longest_track() is None
    a = _track(0, Note(60, 8))
    b = _track(1, Note(62, 16))
    c = _track(2, Note(64, 16))
    for t in (a, b, c):
        comp.add(t)
    assert comp.longest_track() is b
    assert comp.duration == 16


def test_rendering():
    comp = Composition("song")
    comp.add(_track(0, Note(60, 8)))
    comp.add(_track(1, Note(64, 8)))
    assert str(comp) == "song ((C5-qn)) || ((E5-qn))"
    assert len(comp) == 2
    assert [t.channel for t in comp] == [0, 1]
