"""Tests for the per-tick rate limiters."""
from __future__ import annotations

import numpy as np
import pytest

from flyover_engine.camera.camera_modes import CameraMode
from flyover_engine.camera.camera_pose import CameraPose
from flyover_engine.camera.smoothing import SmoothingStage
from flyover_engine.utils.geo import destination, haversine_distance, shortest_angle_delta


def _pose(alt=100.0, bearing=0.0, lng=8.0, lat=46.0) -> CameraPose:
    return CameraPose(lng=lng, lat=lat, alt=alt, bearing=bearing, pitch=-20.0)


def test_first_pose_passes_through():
    stage = SmoothingStage()
    pose = _pose(alt=5000.0, bearing=123.0)
    assert stage.apply(pose, CameraMode.CHASE) == pose


def test_altitude_change_is_capped():
    stage = SmoothingStage()
    stage.apply(_pose(alt=100.0), CameraMode.CHASE)
    assert stage.apply(_pose(alt=200.0), CameraMode.CHASE).alt == pytest.approx(130.0)
    assert stage.apply(_pose(alt=0.0), CameraMode.CHASE).alt == pytest.approx(100.0)


def test_floor_beats_altitude_cap():
    stage = SmoothingStage()
    stage.apply(_pose(alt=100.0), CameraMode.CHASE)
    assert stage.apply(_pose(alt=200.0), CameraMode.CHASE, floor=180.0).alt == pytest.approx(180.0)


def test_bearing_wraps_the_short_way():
    stage = SmoothingStage()
    stage.apply(_pose(bearing=350.0), CameraMode.CHASE)
    assert stage.apply(_pose(bearing=20.0), CameraMode.CHASE).bearing == pytest.approx(354.0)


def test_birds_eye_bearing_limit_is_tighter():
    stage = SmoothingStage()
    stage.apply(_pose(bearing=350.0), CameraMode.BIRDS_EYE)
    assert stage.apply(_pose(bearing=20.0), CameraMode.BIRDS_EYE).bearing == pytest.approx(350.5)


def test_position_is_pulled_back_along_direction():
    stage = SmoothingStage()
    stage.apply(_pose(), CameraMode.CHASE)

    lng, lat = destination(8.0, 46.0, 100.0, 45.0)
    limited = stage.apply(_pose(lng=lng, lat=lat), CameraMode.CHASE)

    moved = float(haversine_distance(8.0, 46.0, limited.lng, limited.lat))
    assert moved == pytest.approx(20.0, rel=1e-2)
    assert (limited.lng - 8.0) / (lng - 8.0) == pytest.approx((limited.lat - 46.0) / (lat - 46.0))


def test_reset_exempts_next_tick():
    stage = SmoothingStage()
    stage.apply(_pose(alt=100.0, bearing=0.0), CameraMode.CHASE)
    stage.reset()
    pose = _pose(alt=900.0, bearing=180.0)
    assert stage.apply(pose, CameraMode.CHASE) == pose
    assert not stage.state.is_empty()


def test_consecutive_deltas_respect_limits():
    rng = np.random.default_rng(3)
    stage = SmoothingStage()
    previous = None
    for _ in range(500):
        mode = CameraMode.BIRDS_EYE if rng.random() < 0.3 else CameraMode.CHASE
        pose = stage.apply(_pose(alt=float(rng.uniform(0.0, 3000.0)),
                                 bearing=float(rng.uniform(0.0, 360.0))), mode)
        if previous is not None:
            assert abs(pose.alt - previous.alt) <= 30.0 + 1e-9
            assert abs(shortest_angle_delta(previous.bearing, pose.bearing)) <= stage.bearing_limit(mode) + 1e-9
        previous = pose
