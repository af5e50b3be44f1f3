# flyover_engine/camera/modes/cinematic.py

import numpy as np
from flyover_engine.camera.camera_modes import CameraMode, CinematicConfig
from flyover_engine.camera.camera_pose import CameraPose
from flyover_engine.camera.mode_strategy import ModeStrategy
from flyover_engine.route.route_track import TrackingFrame
from flyover_engine.utils.geo import destination, lerp, normalize_bearing
from flyover_engine.core.logging import get_logger

logger = get_logger()


class CinematicStrategy(ModeStrategy):
    """
    Cinematic orbit around the tracked point.
    Height and pitch drift sinusoidally as the orbit advances.
    """

    mode = CameraMode.CINEMATIC

    def __init__(self, config: CinematicConfig = None):
        super().__init__(config or CinematicConfig())

        # Orbit phase in radians; only grows
        self.angle = 0.0

    def on_enter(self):
        self.angle = 0.0
        logger.debug("Cinematic orbit restarted")

    def compute(self, frame: TrackingFrame) -> CameraPose:
        self.jumped = False
        point = frame.tracked_point

        if frame.dt > 0:
            self.angle += self.config.orbit_speed * frame.dt

        orbit_bearing = normalize_bearing(np.degrees(self.angle))
        lng, lat = destination(point.lng, point.lat, self.config.orbit_radius * frame.zoom, orbit_bearing)

        height_t = (np.sin(self.angle * 0.5) + 1.0) / 2.0
        height = lerp(self.config.height_min * frame.zoom, self.config.height_max * frame.zoom, height_t)

        pitch_t = (np.sin(self.angle * 0.3) + 1.0) / 2.0

        return CameraPose(
            lng=lng,
            lat=lat,
            alt=point.alt + float(height),
            bearing=normalize_bearing(orbit_bearing + 180.0),
            pitch=float(lerp(self.config.pitch_min, self.config.pitch_max, pitch_t)),
        )
