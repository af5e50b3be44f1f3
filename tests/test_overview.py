"""Tests for overview framing during scrubbing."""
from __future__ import annotations

import pytest

from flyover_engine.camera.camera_pose import CameraPose, PathPoint
from flyover_engine.camera.overview import OverviewFramer
from flyover_engine.utils.geo import shortest_angle_delta


def test_scrub_frame_contains_both_points(straight_sampler):
    framer = OverviewFramer(straight_sampler)
    a = straight_sampler.sample_at(0.0)
    b = straight_sampler.sample_at(10.0)

    bounds = framer.scrub_bounds(a, b)
    pose = framer.frame_points(a, b)

    assert bounds.contains(a.lng, a.lat)
    assert bounds.contains(b.lng, b.lat)
    assert pose.alt >= 500.0
    assert pose.pitch == -60.0
    assert bounds.contains(pose.lng, pose.lat)
    assert abs(shortest_angle_delta(pose.bearing, 0.0)) < 1e-6


def test_wide_scrub_climbs_above_the_floor(straight_sampler):
    framer = OverviewFramer(straight_sampler)
    a = straight_sampler.sample_at(0.0)
    b = straight_sampler.sample_at(10.0)
    # ~9 km of latitude plus 20% padding each side, times 0.8
    assert framer.frame_points(a, b).alt - 100.0 > 9000.0


def test_close_scrub_uses_altitude_floor():
    framer = OverviewFramer()
    point = PathPoint(8.0, 46.0, 250.0)
    pose = framer.frame_points(point, point)
    assert pose.alt == pytest.approx(750.0)
    assert pose.bearing == 0.0


def test_minimum_padding_for_degenerate_spans():
    framer = OverviewFramer()
    bounds = framer.padded_bounds(8.0, 46.0, 8.0, 46.0)
    assert bounds.max_lng - bounds.min_lng == pytest.approx(0.002)
    assert bounds.max_lat - bounds.min_lat == pytest.approx(0.002)


def test_full_route_frame(straight_sampler):
    framer = OverviewFramer(straight_sampler)
    pose = framer.frame_route()
    (min_lng, min_lat), (max_lng, max_lat) = straight_sampler.bounds()

    assert pose.lat == pytest.approx((min_lat + max_lat) / 2.0)
    assert pose.alt > straight_sampler.average_elevation() + 500.0
    assert abs(shortest_angle_delta(pose.bearing, straight_sampler.initial_bearing())) < 1e-9
    assert OverviewFramer().frame_route() is None


def test_entering_blends_from_start_pose(straight_sampler):
    framer = OverviewFramer(straight_sampler)
    start_point = straight_sampler.sample_at(5.0)
    start_pose = CameraPose(lng=start_point.lng, lat=start_point.lat - 0.002, alt=250.0,
                            bearing=0.0, pitch=-15.0)
    state = framer.begin(start_point, start_pose)
    assert not state.full_route

    first = framer.step(state, start_point, 0.0)
    assert first == start_pose

    framer.step(state, start_point, 0.2)
    assert 0.0 < state.transition_progress < 1.0

    settled = framer.step(state, start_point, 0.2)
    assert state.transition_progress == 1.0
    assert settled == framer.frame_points(start_point, start_point)


def test_dragging_chases_target_gradually(straight_sampler):
    framer = OverviewFramer(straight_sampler)
    start_point = straight_sampler.sample_at(5.0)
    state = framer.begin(start_point, None)
    framer.step(state, start_point, 0.016)

    far_point = straight_sampler.sample_at(15.0)
    before = state.current_target_pose
    target = framer.frame_points(start_point, far_point)
    pose = framer.step(state, far_point, 0.016)

    assert pose.alt == pytest.approx(before.alt + (target.alt - before.alt) * 0.15)


def test_released_scrub_holds_pose(straight_sampler):
    framer = OverviewFramer(straight_sampler)
    start_point = straight_sampler.sample_at(5.0)
    state = framer.begin(start_point, None)
    held = framer.step(state, start_point, 0.016)

    state.dragging = False
    assert framer.step(state, straight_sampler.sample_at(20.0), 0.016) == held


def test_missing_start_point_frames_whole_route(straight_sampler):
    framer = OverviewFramer(straight_sampler)
    state = framer.begin(None, None)
    assert state.full_route
    assert framer.step(state, None, 0.016) == framer.frame_route()
