# flyover_engine/route/path_sampler.py

from abc import ABC, abstractmethod
from typing import Optional, Sequence, Tuple
import numpy as np
from flyover_engine.camera.camera_pose import PathPoint
from flyover_engine.utils.geo import haversine_distance, bearing_between
from flyover_engine.core.logging import get_logger

logger = get_logger()

# Tolerance for floating point drift at the route ends (km)
_RANGE_EPSILON = 1e-9


class PathSampler(ABC):
    """
    Distance-parameterized route geometry.
    sample_at() returns None outside [0, total_distance_km].
    """

    @property
    @abstractmethod
    def total_distance_km(self) -> float:
        pass

    @abstractmethod
    def sample_at(self, distance_km: float) -> Optional[PathPoint]:
        """Point at a distance along the route."""
        pass

    def bounds(self) -> Optional[Tuple[Tuple[float, float], Tuple[float, float]]]:
        """((min_lng, min_lat), (max_lng, max_lat)) of the route, if known."""
        return None

    def initial_bearing(self) -> float:
        """Heading at the start of the route."""
        start = self.sample_at(0.0)
        ahead = self.sample_at(min(0.05, self.total_distance_km))
        if start is None or ahead is None:
            return 0.0
        return bearing_between(start.lng, start.lat, ahead.lng, ahead.lat)

    def average_elevation(self) -> float:
        return 0.0


class PolylinePathSampler(PathSampler):
    """
    Samples a polyline of (lng, lat, alt) coordinates.
    Segment lengths are great-circle distances; positions and altitudes
    are interpolated linearly within a segment.
    """

    def __init__(self, coordinates: Sequence[Sequence[float]]):
        coords = np.asarray([self._as_xyz(c) for c in coordinates], dtype=np.float64)
        if coords.ndim != 2 or len(coords) < 2:
            raise ValueError("route needs at least two coordinates")

        self.coordinates = coords

        segment_m = haversine_distance(coords[:-1, 0], coords[:-1, 1], coords[1:, 0], coords[1:, 1])
        self._cumulative_km = np.concatenate([[0.0], np.cumsum(segment_m) / 1000.0])
        self._total_km = float(self._cumulative_km[-1])

        logger.debug(f"Route sampler built: {len(coords)} points, {self._total_km:.2f} km")

    @staticmethod
    def _as_xyz(coord) -> Tuple[float, float, float]:
        if len(coord) >= 3 and coord[2] is not None:
            return float(coord[0]), float(coord[1]), float(coord[2])
        return float(coord[0]), float(coord[1]), 0.0

    @property
    def total_distance_km(self) -> float:
        return self._total_km

    def sample_at(self, distance_km: float) -> Optional[PathPoint]:
        if distance_km is None or not np.isfinite(distance_km):
            return None
        if distance_km < -_RANGE_EPSILON or distance_km > self._total_km + _RANGE_EPSILON:
            return None

        d = min(max(float(distance_km), 0.0), self._total_km)
        lng = np.interp(d, self._cumulative_km, self.coordinates[:, 0])
        lat = np.interp(d, self._cumulative_km, self.coordinates[:, 1])
        alt = np.interp(d, self._cumulative_km, self.coordinates[:, 2])
        return PathPoint(float(lng), float(lat), float(alt))

    def bounds(self):
        mins = self.coordinates[:, :2].min(axis=0)
        maxs = self.coordinates[:, :2].max(axis=0)
        return (float(mins[0]), float(mins[1])), (float(maxs[0]), float(maxs[1]))

    def initial_bearing(self) -> float:
        """Heading from the first coordinate to the tenth (or last)."""
        end = self.coordinates[min(10, len(self.coordinates) - 1)]
        start = self.coordinates[0]
        return bearing_between(start[0], start[1], end[0], end[1])

    def average_elevation(self) -> float:
        return float(self.coordinates[:, 2].mean())
