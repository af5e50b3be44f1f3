# flyover_engine/camera/terrain_guard.py

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional
import numpy as np
from flyover_engine.camera.camera_pose import CameraPose, PathPoint
from flyover_engine.route.terrain import TerrainOracle
from flyover_engine.utils.geo import haversine_distance
from flyover_engine.core.logging import get_logger

logger = get_logger()


@dataclass
class GuardResult:
    """Outcome of applying a constraint to a candidate pose."""

    pose: CameraPose
    adjusted: bool = False
    terrain_elevation: Optional[float] = None
    min_altitude: Optional[float] = None


@dataclass
class TerrainCache:
    """Last known-good terrain sample."""

    elevation: Optional[float] = None
    lng: Optional[float] = None
    lat: Optional[float] = None


class CameraConstraint(ABC):
    """
    Base class for camera constraints.
    Constraints correct a candidate pose after the mode strategy produced it.
    """

    def __init__(self):
        self.enabled = True

    @abstractmethod
    def apply(self, pose: CameraPose, tracked_point: PathPoint) -> GuardResult:
        """Apply constraint to a candidate pose."""
        pass


class TerrainGuard(CameraConstraint):
    """
    Keeps the camera above the terrain under it and above the tracked point.

    Where the terrain under the camera is higher than the tracked point the
    terrain clearance grows by slope_factor of the difference, so the camera
    lifts over intervening high ground.
    """

    def __init__(self, terrain: Optional[TerrainOracle] = None, terrain_clearance: float = 100.0,
                 rider_clearance: float = 100.0, slope_factor: float = 0.5,
                 max_cache_distance: float = 5000.0):
        super().__init__()
        self.terrain = terrain
        self.terrain_clearance = terrain_clearance
        self.rider_clearance = rider_clearance
        self.slope_factor = slope_factor
        self.max_cache_distance = max_cache_distance  # meters

        self.cache = TerrainCache()

    def apply(self, pose: CameraPose, tracked_point: PathPoint) -> GuardResult:
        if not self.enabled:
            return GuardResult(pose=pose)

        terrain_elevation = self.terrain_at(pose.lng, pose.lat)

        clearance = self.terrain_clearance
        if terrain_elevation is not None and terrain_elevation > tracked_point.alt:
            clearance += (terrain_elevation - tracked_point.alt) * self.slope_factor

        min_from_rider = tracked_point.alt + self.rider_clearance
        if terrain_elevation is None:
            min_altitude = min_from_rider
        else:
            min_altitude = max(terrain_elevation + clearance, min_from_rider)

        if pose.alt < min_altitude:
            return GuardResult(
                pose=pose.with_alt(min_altitude),
                adjusted=True,
                terrain_elevation=terrain_elevation,
                min_altitude=min_altitude,
            )

        return GuardResult(pose=pose, terrain_elevation=terrain_elevation, min_altitude=min_altitude)

    def terrain_at(self, lng: float, lat: float) -> Optional[float]:
        """Terrain elevation at a position, falling back to a nearby cached sample."""
        elevation = None
        if self.terrain is not None:
            try:
                elevation = self.terrain.elevation_at(lng, lat)
            except Exception as e:
                logger.debug(f"Terrain oracle failed at ({lng:.5f}, {lat:.5f}): {e}")
                elevation = None

        if elevation is not None and np.isfinite(elevation):
            self.cache = TerrainCache(elevation=float(elevation), lng=lng, lat=lat)
            return float(elevation)

        return self._cached_near(lng, lat)

    def _cached_near(self, lng: float, lat: float) -> Optional[float]:
        if self.cache.elevation is None:
            return None
        distance = float(haversine_distance(self.cache.lng, self.cache.lat, lng, lat))
        if distance > self.max_cache_distance:
            return None
        return self.cache.elevation
