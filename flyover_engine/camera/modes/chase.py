# flyover_engine/camera/modes/chase.py

import numpy as np
from flyover_engine.camera.camera_modes import CameraMode, ChaseConfig, PITCH_MIN, PITCH_MAX
from flyover_engine.camera.camera_pose import CameraPose
from flyover_engine.camera.mode_strategy import ModeStrategy
from flyover_engine.route.route_track import TrackingFrame
from flyover_engine.utils.geo import destination, normalize_bearing


class ChaseStrategy(ModeStrategy):
    """
    Chase cam: behind the tracked point, looking along the direction of travel.
    Height follows from the pitch so the framing stays consistent as the pitch changes.
    """

    mode = CameraMode.CHASE

    def __init__(self, config: ChaseConfig = None):
        super().__init__(config or ChaseConfig())
        self._pitch = float(np.clip(self.config.pitch, PITCH_MIN, PITCH_MAX))

    @property
    def pitch(self) -> float:
        return self._pitch

    @pitch.setter
    def pitch(self, value: float):
        self._pitch = float(np.clip(value, PITCH_MIN, PITCH_MAX))

    def compute(self, frame: TrackingFrame) -> CameraPose:
        self.jumped = False
        point = frame.tracked_point

        # tan(pitch) = height / horizontal distance
        offset_behind = self.config.offset_behind * frame.zoom
        height = offset_behind * np.tan(np.radians(abs(self._pitch)))

        behind_bearing = normalize_bearing(frame.forward_bearing + 180.0)
        lng, lat = destination(point.lng, point.lat, offset_behind, behind_bearing)

        return CameraPose(
            lng=lng,
            lat=lat,
            alt=point.alt + float(height),
            bearing=frame.forward_bearing,
            pitch=self._pitch,
        )
