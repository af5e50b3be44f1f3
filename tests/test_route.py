"""Tests for route sampling and tracking frames."""
from __future__ import annotations

import pytest

from flyover_engine.route.path_sampler import PolylinePathSampler
from flyover_engine.route.route_track import RouteTrack
from flyover_engine.utils.geo import shortest_angle_delta


def test_total_distance(straight_sampler):
    assert straight_sampler.total_distance_km == pytest.approx(50.0, rel=1e-6)


def test_samples_outside_route_are_none(straight_sampler):
    assert straight_sampler.sample_at(-0.5) is None
    assert straight_sampler.sample_at(50.5) is None
    assert straight_sampler.sample_at(float('nan')) is None
    assert straight_sampler.sample_at(straight_sampler.total_distance_km) is not None


def test_sample_interpolates_altitude():
    sampler = PolylinePathSampler([[8.0, 46.0, 100.0], [8.0, 46.01, 300.0]])
    mid = sampler.sample_at(sampler.total_distance_km / 2.0)
    assert mid.alt == pytest.approx(200.0)
    assert mid.lat == pytest.approx(46.005)


def test_missing_altitude_defaults_to_zero():
    sampler = PolylinePathSampler([[8.0, 46.0], [8.0, 46.01]])
    assert sampler.sample_at(0.0).alt == 0.0


def test_single_point_route_is_rejected():
    with pytest.raises(ValueError):
        PolylinePathSampler([[8.0, 46.0, 0.0]])


def test_bounds_and_initial_bearing(straight_sampler):
    (min_lng, min_lat), (max_lng, max_lat) = straight_sampler.bounds()
    assert min_lat == pytest.approx(46.0)
    assert max_lat > min_lat
    assert abs(shortest_angle_delta(straight_sampler.initial_bearing(), 0.0)) < 1e-6
    assert straight_sampler.average_elevation() == pytest.approx(100.0)


def test_frame_looks_forward(straight_track):
    frame = straight_track.frame_at(0.5, zoom=2.0, dt=0.1)
    assert frame.distance_km == pytest.approx(25.0, rel=1e-6)
    assert frame.look_ahead_point.lat > frame.tracked_point.lat
    assert abs(shortest_angle_delta(frame.forward_bearing, 0.0)) < 1e-6
    assert frame.zoom == 2.0
    assert frame.dt == 0.1


def test_frame_at_route_end_uses_point_behind(straight_track):
    frame = straight_track.frame_at(1.0)
    assert frame is not None
    assert abs(shortest_angle_delta(frame.forward_bearing, 0.0)) < 1e-6


def test_frame_outside_route_is_none(straight_sampler):
    track = RouteTrack(straight_sampler)
    assert track.frame_at_distance(60.0) is None
