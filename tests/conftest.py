"""Shared fixtures for the flyover engine test suite."""
from __future__ import annotations

from typing import Callable, Optional

import pytest

from flyover_engine.camera.flyover_controller import CameraController
from flyover_engine.core.config import Config
from flyover_engine.rendering.renderer import RecordingRenderer
from flyover_engine.route.path_sampler import PathSampler, PolylinePathSampler
from flyover_engine.route.route_track import RouteTrack
from flyover_engine.route.terrain import TerrainOracle
from flyover_engine.utils.geo import destination

ORIGIN = (8.0, 46.0)


class FunctionTerrain(TerrainOracle):
    """Terrain given by a plain function of (lng, lat)."""

    def __init__(self, fn: Callable[[float, float], Optional[float]]):
        self.fn = fn
        self.calls = 0

    def elevation_at(self, lng, lat):
        self.calls += 1
        return self.fn(lng, lat)


class FailingTerrain(TerrainOracle):
    """Oracle that always raises."""

    def elevation_at(self, lng, lat):
        raise ConnectionError("elevation service unreachable")


class GappySampler(PathSampler):
    """Sampler with no data at all, as if the route had not loaded."""

    @property
    def total_distance_km(self):
        return 10.0

    def sample_at(self, distance_km):
        return None


def straight_coordinates(length_km: float = 50.0, step_m: float = 500.0, alt: float = 100.0,
                         bearing: float = 0.0, origin=ORIGIN):
    lng, lat = origin
    coordinates = [[lng, lat, alt]]
    steps = int(round(length_km * 1000.0 / step_m))
    for _ in range(steps):
        lng, lat = destination(lng, lat, step_m, bearing)
        coordinates.append([lng, lat, alt])
    return coordinates


def circle_coordinates(radius_m: float = 2000.0, step_deg: float = 5.0, alt: float = 0.0, origin=ORIGIN):
    coordinates = []
    angle = 0.0
    while angle <= 360.0:
        lng, lat = destination(origin[0], origin[1], radius_m, angle)
        coordinates.append([lng, lat, alt])
        angle += step_deg
    return coordinates


@pytest.fixture
def straight_sampler() -> PolylinePathSampler:
    """A 50 km route heading due north at 100 m altitude."""
    return PolylinePathSampler(straight_coordinates())


@pytest.fixture
def short_sampler() -> PolylinePathSampler:
    """A 10 km route heading due north at 100 m altitude."""
    return PolylinePathSampler(straight_coordinates(length_km=10.0, step_m=250.0))


@pytest.fixture
def circle_sampler() -> PolylinePathSampler:
    return PolylinePathSampler(circle_coordinates())


@pytest.fixture
def straight_track(straight_sampler) -> RouteTrack:
    return RouteTrack(straight_sampler, look_ahead_distance=50.0)


@pytest.fixture
def flat_terrain() -> FunctionTerrain:
    return FunctionTerrain(lambda lng, lat: 0.0)


@pytest.fixture
def renderer() -> RecordingRenderer:
    return RecordingRenderer()


@pytest.fixture
def make_controller(renderer):
    """Factory: controller over a sampler with optional terrain and config values."""

    def _make(sampler, terrain=None, render=None, **settings) -> CameraController:
        config = Config()
        for path, value in settings.items():
            config.set(path.replace('__', '.'), value)
        return CameraController(sampler, render or renderer, terrain=terrain, config=config)

    return _make


@pytest.fixture
def terrain_from():
    """Factory: terrain oracle backed by a function of (lng, lat)."""
    return FunctionTerrain


@pytest.fixture
def failing_terrain() -> FailingTerrain:
    return FailingTerrain()


@pytest.fixture
def gappy_sampler() -> GappySampler:
    return GappySampler()


@pytest.fixture
def route_coordinates():
    """Factories for synthetic coordinate lists."""
    return {'straight': straight_coordinates, 'circle': circle_coordinates}
