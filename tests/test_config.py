"""Tests for configuration loading."""
from __future__ import annotations

import json
from pathlib import Path

from flyover_engine.core.config import Config


def test_defaults_without_file():
    config = Config()
    assert config.get('playback.min_duration') == 180.0
    assert config.get('camera.modes.cinematic.transition_duration') == 1.5
    assert config.get('smoothing.missing', 'fallback') == 'fallback'


def test_missing_file_is_created(tmp_path: Path):
    path = tmp_path / "nested" / "flyover.json"
    config = Config(str(path))
    assert path.exists()
    assert json.loads(path.read_text())['terrain']['terrain_clearance'] == 100.0
    assert config.get('override.grace_period') == 2.0


def test_file_values_merge_over_defaults(tmp_path: Path):
    path = tmp_path / "flyover.json"
    path.write_text(json.dumps({'smoothing': {'max_altitude_change': 10.0}}))
    config = Config(str(path))
    assert config.get('smoothing.max_altitude_change') == 10.0
    assert config.get('smoothing.max_bearing_change') == 4.0


def test_broken_file_falls_back_to_defaults(tmp_path: Path):
    path = tmp_path / "flyover.json"
    path.write_text("{not json")
    config = Config(str(path))
    assert config.get('camera.initial_mode') == 'cinematic'


def test_set_and_section():
    config = Config()
    config.set('camera.zoom', 1.5)
    config.set('extra.value', 3)
    assert config.get('camera.zoom') == 1.5
    assert config.get('extra.value') == 3
    section = config.section('override')
    section['grace_period'] = 99.0
    assert config.get('override.grace_period') == 2.0
    assert config.section('camera.zoom') == {}
