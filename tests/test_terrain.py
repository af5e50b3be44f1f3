"""Tests for the terrain oracles."""
from __future__ import annotations

import numpy as np
import pytest

from flyover_engine.route.terrain import CachedTerrainOracle, GridTerrain, ProceduralTerrain


def test_cache_serves_stale_value_on_failure(terrain_from):
    state = {'fail': False}

    def source(lng, lat):
        if state['fail']:
            raise ConnectionError("offline")
        return 1234.0

    oracle = terrain_from(source)
    cached = CachedTerrainOracle(oracle)
    assert cached.elevation_at(8.00001, 46.00001) == 1234.0

    state['fail'] = True
    # Same rounded cell
    assert cached.elevation_at(8.00002, 46.00002) == 1234.0
    assert cached.failures == 1
    # Never seen
    assert cached.elevation_at(9.0, 47.0) is None


def test_cache_serves_stale_value_when_unknown(terrain_from):
    answers = iter([500.0, None, float('nan')])
    cached = CachedTerrainOracle(terrain_from(lambda lng, lat: next(answers)))
    assert cached.elevation_at(8.0, 46.0) == 500.0
    assert cached.elevation_at(8.0, 46.0) == 500.0
    assert cached.elevation_at(8.0, 46.0) == 500.0


def test_cache_is_bounded(terrain_from):
    cached = CachedTerrainOracle(terrain_from(lambda lng, lat: lng), max_entries=3)
    for i in range(5):
        cached.elevation_at(float(i), 0.0)
    assert len(cached._cache) == 3


def test_grid_terrain_bilinear():
    grid = GridTerrain(np.array([[0.0, 100.0], [200.0, 300.0]]), 8.0, 46.0, 8.1, 46.1)
    assert grid.elevation_at(8.0, 46.0) == pytest.approx(0.0)
    assert grid.elevation_at(8.1, 46.1) == pytest.approx(300.0)
    assert grid.elevation_at(8.05, 46.05) == pytest.approx(150.0)
    assert grid.elevation_at(7.9, 46.05) is None


def test_grid_terrain_rejects_bad_heightmap():
    with pytest.raises(ValueError):
        GridTerrain(np.zeros(4), 0.0, 0.0, 1.0, 1.0)


def test_procedural_terrain_is_deterministic():
    a = ProceduralTerrain(seed=3)
    b = ProceduralTerrain(seed=3)
    samples = [(8.0 + i * 0.01, 46.0 + i * 0.007) for i in range(20)]
    heights = [a.elevation_at(*s) for s in samples]
    assert heights == [b.elevation_at(*s) for s in samples]
    assert all(np.isfinite(h) for h in heights)
    assert len(set(round(h, 3) for h in heights)) > 1


def test_procedural_terrain_is_continuous_and_seeded():
    terrain = ProceduralTerrain(seed=3)
    rng = np.random.default_rng(4)
    for lng, lat in zip(rng.uniform(7.5, 8.5, 50), rng.uniform(45.5, 46.5, 50)):
        # ~0.1 m apart
        assert abs(terrain.elevation_at(lng, lat) - terrain.elevation_at(lng + 1e-6, lat)) < 5.0

    other = ProceduralTerrain(seed=4)
    assert terrain.elevation_at(8.0, 46.0) != other.elevation_at(8.0, 46.0)
