import mido
import pytest


@pytest.fixture
def make_midi(tmp_path):
    """Write a mido file from (delta, message) track lists and return its path."""
    def _make(tracks, type=1, ticks_per_beat=480, name="song.mid"):
        mid = mido.MidiFile(type=type, ticks_per_beat=ticks_per_beat)
        for msgs in tracks:
            mt = mido.MidiTrack()
            mt.extend(msgs)
            mid.tracks.append(mt)
        path = tmp_path / name
        mid.save(str(path))
        return path
    return _make
