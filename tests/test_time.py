import pytest

from genmidi.util.time import (
    Durations, bpm_from_micros, duration_name, duration_range, micros_from_bpm,
    midi_from_ticks, nearest_lower_duration_with_remainder, nearest_standard_duration,
    number_of_dots, real_seconds_to_ticks, standard_note_duration, tick_duration,
    ticks_from_midi, ticks_to_real_seconds,
)


def test_duration_values_are_powers_of_two():
    assert [int(d) for d in Durations] == [1, 2, 4, 8, 16, 32, 64]
    assert tick_duration("qn") == 8
    assert tick_duration(Durations.wn) == 32


def test_real_time_scale():
    # a whole note spans four beats
    assert ticks_to_real_seconds(32) == pytest.approx(2.0)
    assert ticks_to_real_seconds(32, bpm=60) == pytest.approx(4.0)
    assert ticks_to_real_seconds(8) == pytest.approx(0.5)
    assert real_seconds_to_ticks(0.5) == pytest.approx(8.0)
    assert real_seconds_to_ticks(ticks_to_real_seconds(13, 90), 90) == pytest.approx(13.0)


def test_tempo_conversion():
    assert bpm_from_micros(500000) == pytest.approx(120.0)
    assert micros_from_bpm(120) == 500000
    assert micros_from_bpm(60) == 1_000_000


def test_ticks_from_midi():
    assert ticks_from_midi(480, 480, 60) == 8
    assert ticks_from_midi(480, 480, 120) == 4
    assert ticks_from_midi(960, 480, 60) == 16
    assert ticks_from_midi(100, 480, 60) == 1  # truncates


@pytest.mark.parametrize("resolution", [96, 480, 960])
@pytest.mark.parametrize("tempo", [60, 90, 100, 120, 140])
def test_midi_ticks_round_trip_for_standard_durations(resolution, tempo):
    for d in Durations:
        assert ticks_from_midi(midi_from_ticks(int(d), resolution, tempo), resolution, tempo) == int(d)


def test_nearest_standard_duration_exact_members():
    for d in Durations:
        assert nearest_standard_duration(int(d)) is d


def test_nearest_standard_duration_ties_pick_shorter():
    assert nearest_standard_duration(6) is Durations.en
    assert nearest_standard_duration(3) is Durations.sn
    assert nearest_standard_duration(12) is Durations.qn
    assert nearest_standard_duration(0) is Durations.tn
    assert nearest_standard_duration(1000) is Durations.bn


def test_nearest_lower_duration_with_remainder():
    assert nearest_lower_duration_with_remainder(12) == (Durations.qn, 4)
    assert nearest_lower_duration_with_remainder(8) == (Durations.en, 4)
    assert nearest_lower_duration_with_remainder(24) == (Durations.hn, 8)


def test_nearest_lower_without_candidate_keeps_first_index():
    assert nearest_lower_duration_with_remainder(1) == (Durations.tn, 0)
    assert nearest_lower_duration_with_remainder(0) == (Durations.tn, -1)


def test_number_of_dots():
    assert number_of_dots(12) == 1   # dotted quarter
    assert number_of_dots(24) == 1   # dotted half
    assert number_of_dots(8) == 2
    assert number_of_dots(1) == 0
    assert number_of_dots(2) == 0    # tn has no half


def test_duration_range_and_clamp():
    assert duration_range() == [1, 2, 4, 8, 16, 32, 64]
    assert duration_range(4, 16) == [4, 8, 16]
    assert standard_note_duration(0) is Durations.tn
    assert standard_note_duration(40) is Durations.wn
    assert standard_note_duration(8) is Durations.qn
    assert standard_note_duration(12) == 12


def test_duration_name():
    assert duration_name(8) == "qn"
    assert duration_name(12) == "12"
