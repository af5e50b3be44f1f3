# flyover_engine/camera/overview.py

from dataclasses import dataclass
from typing import Optional
from flyover_engine.camera.camera_pose import CameraPose, PathPoint, lerp_pose
from flyover_engine.route.path_sampler import PathSampler
from flyover_engine.utils.geo import bearing_between, ease_in_out_cubic, meters_per_degree
from flyover_engine.core.logging import get_logger

logger = get_logger()


@dataclass(frozen=True)
class Bounds:
    min_lng: float
    min_lat: float
    max_lng: float
    max_lat: float

    @property
    def center(self):
        return (self.min_lng + self.max_lng) / 2.0, (self.min_lat + self.max_lat) / 2.0

    def contains(self, lng: float, lat: float) -> bool:
        return self.min_lng <= lng <= self.max_lng and self.min_lat <= lat <= self.max_lat


@dataclass
class ScrubFrameState:
    """Overview framing while (and after) the position scrubber is dragged."""

    start_point: Optional[PathPoint]
    start_pose: Optional[CameraPose]
    current_target_pose: Optional[CameraPose] = None
    transition_progress: float = 0.0
    dragging: bool = True
    full_route: bool = False


class OverviewFramer:
    """
    Frames either the whole route or the stretch between the scrub start and
    the current scrub position, looking steeply down.
    """

    def __init__(self, sampler: Optional[PathSampler] = None, padding: float = 0.2,
                 min_padding_degrees: float = 0.001, min_altitude: float = 500.0,
                 altitude_scale: float = 0.8, pitch: float = -60.0, blend_factor: float = 0.15,
                 enter_speed: float = 3.0):
        self.sampler = sampler
        self.padding = padding
        self.min_padding_degrees = min_padding_degrees
        self.min_altitude = min_altitude
        self.altitude_scale = altitude_scale  # altitude per meter of span (~60 degree FOV)
        self.pitch = pitch
        self.blend_factor = blend_factor
        self.enter_speed = enter_speed  # transitions per second

    def padded_bounds(self, min_lng: float, min_lat: float, max_lng: float, max_lat: float) -> Bounds:
        lng_pad = (max_lng - min_lng) * self.padding or self.min_padding_degrees
        lat_pad = (max_lat - min_lat) * self.padding or self.min_padding_degrees
        return Bounds(min_lng - lng_pad, min_lat - lat_pad, max_lng + lng_pad, max_lat + lat_pad)

    def scrub_bounds(self, start: PathPoint, current: PathPoint) -> Bounds:
        return self.padded_bounds(
            min(start.lng, current.lng), min(start.lat, current.lat),
            max(start.lng, current.lng), max(start.lat, current.lat),
        )

    def altitude_for(self, bounds: Bounds) -> float:
        """Height above the framed ground needed to see the whole box."""
        _, center_lat = bounds.center
        m_lng, m_lat = meters_per_degree(center_lat)
        lng_meters = abs(bounds.max_lng - bounds.min_lng) * m_lng
        lat_meters = abs(bounds.max_lat - bounds.min_lat) * m_lat
        return max(self.min_altitude, max(lng_meters, lat_meters) * self.altitude_scale)

    def frame_bounds(self, bounds: Bounds, ground_elevation: float, bearing: float) -> CameraPose:
        center_lng, center_lat = bounds.center
        return CameraPose(
            lng=center_lng,
            lat=center_lat,
            alt=self.altitude_for(bounds) + ground_elevation,
            bearing=bearing,
            pitch=self.pitch,
        )

    def frame_points(self, start: PathPoint, current: PathPoint) -> CameraPose:
        """Local overview of the scrubbed stretch, facing from start to current."""
        bounds = self.scrub_bounds(start, current)
        if (start.lng, start.lat) == (current.lng, current.lat):
            bearing = 0.0
        else:
            bearing = bearing_between(start.lng, start.lat, current.lng, current.lat)
        return self.frame_bounds(bounds, (start.alt + current.alt) / 2.0, bearing)

    def frame_route(self) -> Optional[CameraPose]:
        """Overview of the full route, facing the initial heading."""
        if self.sampler is None:
            return None
        route_bounds = self.sampler.bounds()
        if route_bounds is None:
            return None
        (min_lng, min_lat), (max_lng, max_lat) = route_bounds
        bounds = self.padded_bounds(min_lng, min_lat, max_lng, max_lat)
        return self.frame_bounds(bounds, self.sampler.average_elevation(), self.sampler.initial_bearing())

    def begin(self, start_point: Optional[PathPoint], start_pose: Optional[CameraPose],
              full_route: bool = False) -> ScrubFrameState:
        state = ScrubFrameState(start_point=start_point, start_pose=start_pose,
                                full_route=full_route or start_point is None)
        logger.debug(f"Overview framing started ({'route' if state.full_route else 'local'})")
        return state

    def target_for(self, state: ScrubFrameState, current_point: Optional[PathPoint]) -> Optional[CameraPose]:
        if state.full_route:
            return self.frame_route()
        return self.frame_points(state.start_point, current_point or state.start_point)

    def step(self, state: ScrubFrameState, current_point: Optional[PathPoint], dt: float) -> Optional[CameraPose]:
        """
        Pose for this tick. Entering eases from the start pose; once in the
        overview the pose chases the recomputed target by blend_factor per tick.
        A released (not dragging) scrub holds its last pose.
        """
        if not state.dragging and state.current_target_pose is not None:
            return state.current_target_pose

        target = self.target_for(state, current_point)
        if target is None:
            return state.current_target_pose or state.start_pose

        if state.start_pose is not None and state.transition_progress < 1.0:
            state.transition_progress = min(1.0, state.transition_progress + self.enter_speed * max(dt, 0.0))
            pose = lerp_pose(state.start_pose, target, ease_in_out_cubic(state.transition_progress))
        elif state.current_target_pose is not None:
            pose = lerp_pose(state.current_target_pose, target, self.blend_factor)
        else:
            state.transition_progress = 1.0
            pose = target

        state.current_target_pose = pose
        return pose
