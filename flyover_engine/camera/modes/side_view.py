# flyover_engine/camera/modes/side_view.py

from typing import Optional, Tuple
from flyover_engine.camera.camera_modes import CameraMode, SideViewConfig, SideViewMode
from flyover_engine.camera.camera_pose import CameraPose
from flyover_engine.camera.mode_strategy import ModeStrategy
from flyover_engine.route.route_track import RouteTrack, TrackingFrame
from flyover_engine.route.terrain import TerrainOracle
from flyover_engine.utils.geo import destination, normalize_bearing
from flyover_engine.core.logging import get_logger

logger = get_logger()

LEFT = 'left'
RIGHT = 'right'


class SideViewStrategy(ModeStrategy):
    """
    Camera abeam of the tracked point, on the valley side.

    In AUTO the side only changes when the other side is lower by more than
    switch_threshold AND stays at least comparable over the next
    look_ahead_distance meters; LEFT/RIGHT pin the side.
    """

    mode = CameraMode.SIDE_VIEW

    def __init__(self, config: SideViewConfig = None, terrain: Optional[TerrainOracle] = None,
                 route: Optional[RouteTrack] = None, side_mode: SideViewMode = SideViewMode.AUTO):
        super().__init__(config or SideViewConfig())
        self.terrain = terrain
        self.route = route
        self.side_mode = side_mode
        self.current_side = LEFT

    def compute(self, frame: TrackingFrame) -> CameraPose:
        point = frame.tracked_point
        offset_side = self.config.offset_side * frame.zoom

        left_bearing = normalize_bearing(frame.forward_bearing + 90.0)
        right_bearing = normalize_bearing(frame.forward_bearing - 90.0)
        left_point = destination(point.lng, point.lat, offset_side, left_bearing)
        right_point = destination(point.lng, point.lat, offset_side, right_bearing)

        chosen = self._choose_side(frame, left_point, right_point, offset_side)
        self.jumped = chosen != self.current_side
        if self.jumped:
            logger.debug(f"Side view switched {self.current_side} -> {chosen} at {frame.distance_km:.2f} km")
        self.current_side = chosen

        if chosen == RIGHT:
            side_bearing, (lng, lat) = right_bearing, right_point
        else:
            side_bearing, (lng, lat) = left_bearing, left_point

        return CameraPose(
            lng=lng,
            lat=lat,
            alt=point.alt + self.config.offset_up * frame.zoom,
            bearing=normalize_bearing(side_bearing + 180.0),  # look back across at the point
            pitch=self.config.pitch,
        )

    def _choose_side(self, frame: TrackingFrame, left_point, right_point, offset_side: float) -> str:
        if self.side_mode == SideViewMode.LEFT:
            return LEFT
        if self.side_mode == SideViewMode.RIGHT:
            return RIGHT

        left_terrain, right_terrain = self._query_pair(left_point, right_point)
        if left_terrain is None or right_terrain is None:
            return self.current_side

        threshold = self.config.switch_threshold
        candidate = self.current_side
        if self.current_side == LEFT and right_terrain < left_terrain - threshold:
            candidate = RIGHT
        elif self.current_side == RIGHT and left_terrain < right_terrain - threshold:
            candidate = LEFT

        if candidate != self.current_side and self._switch_holds(frame, candidate, offset_side):
            return candidate
        return self.current_side

    def _switch_holds(self, frame: TrackingFrame, new_side: str, offset_side: float) -> bool:
        """Check that the new side does not become clearly worse just ahead."""
        if self.route is None:
            return True

        samples = max(int(self.config.look_ahead_samples), 1)
        margin = self.config.switch_threshold / 2.0
        total = self.route.total_distance_km

        for i in range(1, samples + 1):
            ahead_km = frame.distance_km + (self.config.look_ahead_distance / 1000.0) * (i / samples)
            if ahead_km > total:
                break

            ahead = self.route.frame_at_distance(ahead_km, frame.zoom)
            if ahead is None:
                continue

            ahead_left = destination(ahead.tracked_point.lng, ahead.tracked_point.lat, offset_side,
                                     normalize_bearing(ahead.forward_bearing + 90.0))
            ahead_right = destination(ahead.tracked_point.lng, ahead.tracked_point.lat, offset_side,
                                      normalize_bearing(ahead.forward_bearing - 90.0))
            left_terrain, right_terrain = self._query_pair(ahead_left, ahead_right)
            if left_terrain is None or right_terrain is None:
                continue

            if new_side == RIGHT and left_terrain < right_terrain - margin:
                return False
            if new_side == LEFT and right_terrain < left_terrain - margin:
                return False

        return True

    def _query_pair(self, left_point, right_point) -> Tuple[Optional[float], Optional[float]]:
        if self.terrain is None:
            return None, None
        try:
            return (self.terrain.elevation_at(*left_point),
                    self.terrain.elevation_at(*right_point))
        except Exception as e:
            logger.debug(f"Side view terrain query failed, keeping {self.current_side}: {e}")
            return None, None
