# flyover_engine/camera/modes/birds_eye.py

from flyover_engine.camera.camera_modes import CameraMode, BirdsEyeConfig
from flyover_engine.camera.camera_pose import CameraPose
from flyover_engine.camera.mode_strategy import ModeStrategy
from flyover_engine.route.route_track import TrackingFrame
from flyover_engine.utils.geo import destination, normalize_bearing


class BirdsEyeStrategy(ModeStrategy):
    """
    Nearly overhead camera facing the direction of travel.
    """

    mode = CameraMode.BIRDS_EYE

    def __init__(self, config: BirdsEyeConfig = None):
        super().__init__(config or BirdsEyeConfig())

    def compute(self, frame: TrackingFrame) -> CameraPose:
        self.jumped = False
        point = frame.tracked_point

        # Small step back keeps the look-at vector from going vertical
        behind_bearing = normalize_bearing(frame.forward_bearing + 180.0)
        lng, lat = destination(point.lng, point.lat, self.config.offset_behind * frame.zoom, behind_bearing)

        return CameraPose(
            lng=lng,
            lat=lat,
            alt=point.alt + self.config.offset_up * frame.zoom,
            bearing=frame.forward_bearing,
            pitch=self.config.pitch,
        )
