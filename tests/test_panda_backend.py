"""Tests for the Panda3D camera adapter (skipped without panda3d)."""
from __future__ import annotations

import pytest

pytest.importorskip("panda3d.core")

from flyover_engine.camera.camera_pose import CameraPose, PathPoint
from flyover_engine.rendering.panda_backend import PandaCameraRenderer
from flyover_engine.rendering.renderer import ViewRequest
from flyover_engine.utils.geo import shortest_angle_delta

ORIGIN = PathPoint(8.0, 46.0, 400.0)


def test_pose_round_trip():
    renderer = PandaCameraRenderer(ORIGIN)
    pose = CameraPose(lng=8.01, lat=46.005, alt=900.0, bearing=30.0, pitch=-20.0)
    renderer.set_pose(pose, PathPoint(8.01, 46.01, 450.0))

    current = renderer.current_pose()
    assert current.lng == pytest.approx(pose.lng, abs=1e-6)
    assert current.lat == pytest.approx(pose.lat, abs=1e-6)
    assert current.alt == pytest.approx(pose.alt, abs=1e-2)
    assert abs(shortest_angle_delta(current.bearing, pose.bearing)) < 1e-3
    assert current.pitch == pytest.approx(pose.pitch, abs=1e-3)


def test_local_frame_is_east_north_up():
    renderer = PandaCameraRenderer(ORIGIN)
    x, y, z = renderer.to_local(8.001, 46.001, 500.0)
    assert x > 0.0
    assert y > 0.0
    assert z == pytest.approx(100.0)


def test_view_fallback_places_camera_above_center():
    renderer = PandaCameraRenderer(ORIGIN)
    renderer.set_view(ViewRequest(center=(8.0, 46.0), zoom=14.0, pitch=15.0, bearing=0.0))
    current = renderer.current_pose()
    assert current.alt > ORIGIN.alt
    # Looking north from south of the center
    assert current.lat < ORIGIN.lat
    assert current.pitch < 0.0
