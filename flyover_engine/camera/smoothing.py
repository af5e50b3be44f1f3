# flyover_engine/camera/smoothing.py

from dataclasses import dataclass
from typing import Optional
import numpy as np
from flyover_engine.camera.camera_modes import CameraMode
from flyover_engine.camera.camera_pose import CameraPose
from flyover_engine.utils.geo import meters_per_degree, normalize_bearing, shortest_angle_delta


@dataclass
class SmoothingState:
    """Last emitted value per axis. None means no previous value."""

    alt: Optional[float] = None
    bearing: Optional[float] = None
    lng: Optional[float] = None
    lat: Optional[float] = None

    def is_empty(self) -> bool:
        return self.alt is None and self.bearing is None and self.lng is None


class SmoothingStage:
    """
    Per-tick rate limiters for altitude, horizontal position and bearing.
    Limits are per tick, not per second: they bound how far the camera may
    move between two consecutive emitted frames.
    """

    def __init__(self, max_altitude_change: float = 30.0, max_position_change: float = 20.0,
                 max_bearing_change: float = 4.0, max_bearing_change_birds_eye: float = 0.5):
        self.max_altitude_change = max_altitude_change
        self.max_position_change = max_position_change
        self.max_bearing_change = max_bearing_change
        self.max_bearing_change_birds_eye = max_bearing_change_birds_eye

        self.state = SmoothingState()

    def reset(self):
        """Forget previous values; the next tick passes through unchanged."""
        self.state = SmoothingState()

    def bearing_limit(self, mode: CameraMode) -> float:
        if mode == CameraMode.BIRDS_EYE:
            return self.max_bearing_change_birds_eye
        return self.max_bearing_change

    def apply(self, pose: CameraPose, mode: CameraMode, floor: Optional[float] = None) -> CameraPose:
        """
        Rate-limit a guarded pose.
        `floor` is the terrain guard minimum; the altitude limiter never holds
        the camera below it.
        """
        alt = self._limit_altitude(pose.alt)
        if floor is not None and alt < floor:
            alt = float(floor)
        lng, lat = self._limit_position(pose.lng, pose.lat)
        bearing = self._limit_bearing(pose.bearing, self.bearing_limit(mode))

        self.state = SmoothingState(alt=alt, bearing=bearing, lng=lng, lat=lat)
        return CameraPose(lng=lng, lat=lat, alt=alt, bearing=bearing, pitch=pose.pitch)

    def _limit_altitude(self, alt: float) -> float:
        last = self.state.alt
        if last is None:
            return alt
        delta = alt - last
        if abs(delta) > self.max_altitude_change:
            return float(last + np.sign(delta) * self.max_altitude_change)
        return alt

    def _limit_position(self, lng: float, lat: float):
        last_lng, last_lat = self.state.lng, self.state.lat
        if last_lng is None or last_lat is None:
            return lng, lat

        m_lng, m_lat = meters_per_degree(lat)
        d_east = (lng - last_lng) * m_lng
        d_north = (lat - last_lat) * m_lat
        distance = float(np.hypot(d_east, d_north))

        if distance > self.max_position_change:
            # Pull back along the same direction
            scale = self.max_position_change / distance
            return last_lng + (lng - last_lng) * scale, last_lat + (lat - last_lat) * scale
        return lng, lat

    def _limit_bearing(self, bearing: float, limit: float) -> float:
        last = self.state.bearing
        if last is None:
            return bearing
        delta = shortest_angle_delta(last, bearing)
        if abs(delta) > limit:
            return normalize_bearing(float(last + np.sign(delta) * limit))
        return bearing
