"""Tests for the playback clock."""
from __future__ import annotations

import pytest

from flyover_engine.core.playback import PlaybackClock


def test_duration_scales_with_route_length():
    assert PlaybackClock(50.0).duration == pytest.approx(300.0)
    assert PlaybackClock(200.0).duration == pytest.approx(1200.0)


def test_duration_has_a_floor():
    assert PlaybackClock(10.0).duration == pytest.approx(180.0)
    assert PlaybackClock(0.0).duration == pytest.approx(180.0)


def test_half_way_after_half_the_duration():
    clock = PlaybackClock(50.0)
    clock.play()
    for _ in range(1500):
        clock.advance(0.1, 1.0)
    assert clock.progress == pytest.approx(0.5, abs=1e-6)


def test_speed_multiplier_scales_increment():
    clock = PlaybackClock(50.0)
    clock.play()
    clock.advance(30.0, 0.25)
    assert clock.progress == pytest.approx(30.0 / 300.0 * 0.25)


def test_paused_clock_does_not_advance():
    clock = PlaybackClock(50.0)
    assert clock.advance(10.0, 1.0) == 0.0


def test_reaching_the_end_stops_playback():
    clock = PlaybackClock(50.0)
    clock.play()
    clock.advance(1000.0, 1.0)
    assert clock.progress == 1.0
    assert not clock.playing


def test_play_at_end_restarts():
    clock = PlaybackClock(50.0)
    clock.seek(1.0)
    clock.play()
    assert clock.progress == 0.0
    assert clock.playing


def test_seek_clamps_and_ignores_non_finite():
    clock = PlaybackClock(50.0)
    assert clock.seek(1.5) == 1.0
    assert clock.seek(-0.2) == 0.0
    clock.seek(0.3)
    assert clock.seek(float('nan')) == pytest.approx(0.3)


def test_speed_presets():
    clock = PlaybackClock(50.0)
    assert clock.speed_for('2') == 0.5
    assert clock.speed_for(4) == 1.0
    assert clock.speed_for('8') is None


def test_numeric_speed_presets_match_by_value():
    clock = PlaybackClock(50.0)
    assert clock.speed_for(2.0) == 0.5
    assert clock.speed_for('4.0') == 1.0
    assert clock.speed_for(0.5) == 0.125
    assert clock.speed_for('fast') is None
    assert clock.speed_for(None) is None
