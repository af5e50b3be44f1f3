# flyover_engine/route/route_track.py

from dataclasses import dataclass
from typing import Optional
from flyover_engine.camera.camera_pose import PathPoint
from flyover_engine.route.path_sampler import PathSampler
from flyover_engine.utils.geo import bearing_between

# Below this separation (km) the look-ahead point is treated as coincident
_MIN_LOOK_AHEAD_KM = 1e-6


@dataclass(frozen=True)
class TrackingFrame:
    """Everything a mode strategy needs about the route on one tick."""

    tracked_point: PathPoint
    look_ahead_point: PathPoint
    distance_km: float
    forward_bearing: float
    zoom: float = 1.0
    dt: float = 0.0


class RouteTrack:
    """
    Maps progress in [0, 1] onto route positions.
    Wraps a PathSampler with the look-ahead used for forward bearings.
    """

    def __init__(self, sampler: PathSampler, look_ahead_distance: float = 50.0):
        self.sampler = sampler
        self.look_ahead_km = look_ahead_distance / 1000.0

    @property
    def total_distance_km(self) -> float:
        return self.sampler.total_distance_km

    def distance_at(self, progress: float) -> float:
        return progress * self.total_distance_km

    def point_at(self, progress: float) -> Optional[PathPoint]:
        return self.sampler.sample_at(self.distance_at(progress))

    def frame_at_distance(self, distance_km: float, zoom: float = 1.0, dt: float = 0.0) -> Optional[TrackingFrame]:
        """Tracked point, look-ahead point and forward bearing at a distance."""
        total = self.total_distance_km
        tracked = self.sampler.sample_at(distance_km)
        if tracked is None:
            return None

        ahead_km = min(distance_km + self.look_ahead_km, total)
        look_ahead = self.sampler.sample_at(ahead_km)
        if look_ahead is None:
            return None

        if ahead_km - distance_km > _MIN_LOOK_AHEAD_KM:
            forward = bearing_between(tracked.lng, tracked.lat, look_ahead.lng, look_ahead.lat)
        else:
            # End of route: derive the heading from a point behind
            behind = self.sampler.sample_at(max(distance_km - self.look_ahead_km, 0.0))
            if behind is None or distance_km <= _MIN_LOOK_AHEAD_KM:
                forward = 0.0
            else:
                forward = bearing_between(behind.lng, behind.lat, tracked.lng, tracked.lat)

        return TrackingFrame(
            tracked_point=tracked,
            look_ahead_point=look_ahead,
            distance_km=distance_km,
            forward_bearing=forward,
            zoom=zoom,
            dt=dt,
        )

    def frame_at(self, progress: float, zoom: float = 1.0, dt: float = 0.0) -> Optional[TrackingFrame]:
        return self.frame_at_distance(self.distance_at(progress), zoom, dt)
