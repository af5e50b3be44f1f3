# flyover_engine/route/terrain.py

from abc import ABC, abstractmethod
from typing import Dict, Optional, Tuple
import numpy as np
from flyover_engine.utils.geo import METERS_PER_DEGREE, lerp
from flyover_engine.core.logging import get_logger

logger = get_logger()


class TerrainOracle(ABC):
    """
    Terrain elevation source.
    elevation_at() returns meters, or None when the elevation is unknown.
    """

    @abstractmethod
    def elevation_at(self, lng: float, lat: float) -> Optional[float]:
        pass


class CachedTerrainOracle(TerrainOracle):
    """
    Synchronous, always-returning façade over a slow or flaky oracle.
    Answers are cached per rounded coordinate; when the wrapped oracle
    fails or has no answer, the last known value for that cell is returned.
    """

    def __init__(self, oracle: TerrainOracle, precision: int = 4, max_entries: int = 50000):
        self.oracle = oracle
        self.precision = precision  # decimal places, 4 ~= 11 m
        self.max_entries = max_entries
        self._cache: Dict[Tuple[float, float], float] = {}
        self.failures = 0

    def _key(self, lng: float, lat: float) -> Tuple[float, float]:
        return round(lng, self.precision), round(lat, self.precision)

    def elevation_at(self, lng: float, lat: float) -> Optional[float]:
        key = self._key(lng, lat)

        try:
            elevation = self.oracle.elevation_at(lng, lat)
        except Exception as e:
            self.failures += 1
            logger.debug(f"Terrain query failed at ({lng:.5f}, {lat:.5f}): {e}")
            return self._cache.get(key)

        if elevation is None or not np.isfinite(elevation):
            return self._cache.get(key)

        if len(self._cache) >= self.max_entries and key not in self._cache:
            # Drop the oldest entry (dicts keep insertion order)
            self._cache.pop(next(iter(self._cache)))
        self._cache[key] = float(elevation)
        return float(elevation)


class GridTerrain(TerrainOracle):
    """
    Elevation grid covering a lng/lat rectangle (e.g. a DEM tile).
    Row 0 is the southern edge, column 0 the western edge.
    """

    def __init__(self, heightmap: np.ndarray, min_lng: float, min_lat: float, max_lng: float, max_lat: float):
        self.heightmap = np.asarray(heightmap, dtype=np.float32)
        if self.heightmap.ndim != 2 or min(self.heightmap.shape) < 2:
            raise ValueError("heightmap must be a 2D grid of at least 2x2")
        self.min_lng, self.min_lat = min_lng, min_lat
        self.max_lng, self.max_lat = max_lng, max_lat

    def elevation_at(self, lng: float, lat: float) -> Optional[float]:
        if not (self.min_lng <= lng <= self.max_lng and self.min_lat <= lat <= self.max_lat):
            return None

        rows, cols = self.heightmap.shape
        local_x = (lng - self.min_lng) / (self.max_lng - self.min_lng) * (cols - 1)
        local_y = (lat - self.min_lat) / (self.max_lat - self.min_lat) * (rows - 1)

        # Bilinear interpolation
        x0, y0 = int(np.floor(local_x)), int(np.floor(local_y))
        x1, y1 = min(x0 + 1, cols - 1), min(y0 + 1, rows - 1)

        h00 = self.heightmap[y0, x0]
        h01 = self.heightmap[y0, x1]
        h10 = self.heightmap[y1, x0]
        h11 = self.heightmap[y1, x1]

        tx = local_x - x0
        ty = local_y - y0

        south = lerp(h00, h01, tx)
        north = lerp(h10, h11, tx)
        return float(lerp(south, north, ty))


class ProceduralTerrain(TerrainOracle):
    """
    Deterministic mountain terrain from layered gradient noise, sampled in
    local meters so the relief looks the same at any latitude.
    Used by the demo and for testing without a DEM.
    """

    # Offset of the ridge layer in noise space, so it does not line up with the base layer
    RIDGE_OFFSET = (71.3, 19.7)

    def __init__(self, seed: int = 0, base_elevation: float = 400.0, relief: float = 1500.0,
                 feature_size: float = 8000.0):
        self.seed = seed
        self.base_elevation = base_elevation
        self.relief = relief
        self.feature_size = feature_size  # meters per noise cell

        rng = np.random.RandomState(seed)
        self._lattice = np.tile(rng.permutation(256), 2)
        angles = rng.uniform(0.0, 2.0 * np.pi, 256)
        self._gradients = np.column_stack([np.cos(angles), np.sin(angles)])

    def elevation_at(self, lng: float, lat: float) -> Optional[float]:
        x = lng * METERS_PER_DEGREE * np.cos(np.radians(lat)) / self.feature_size
        y = lat * METERS_PER_DEGREE / self.feature_size

        base = self._layered(x * 0.5, y * 0.5, octaves=2)
        ridges = self._layered(x + self.RIDGE_OFFSET[0], y + self.RIDGE_OFFSET[1], octaves=4, ridged=True)

        height = self.base_elevation + base * self.relief * 0.3
        if base > -0.2:
            # Mountains rise out of the higher ground only
            height += ridges * self.relief * min((base + 0.2) * 1.5, 1.0)
        return float(height)

    def _layered(self, x: float, y: float, octaves: int, ridged: bool = False) -> float:
        """Octave sum normalised by total amplitude; ridged layers fold the noise into crests in [0, 1]."""
        total = 0.0
        weight = 0.0
        amplitude = 1.0
        frequency = 1.0
        for _ in range(octaves):
            n = self._gradient_noise(x * frequency, y * frequency)
            if ridged:
                n = (1.0 - abs(n)) ** 2
            total += n * amplitude
            weight += amplitude
            amplitude *= 0.5
            frequency *= 2.0
        return total / weight

    def _gradient_noise(self, x: float, y: float) -> float:
        cell_x, cell_y = np.floor(x), np.floor(y)
        fx, fy = x - cell_x, y - cell_y
        i, j = int(cell_x) & 255, int(cell_y) & 255

        def corner(di: int, dj: int) -> float:
            gx, gy = self._gradients[self._lattice[self._lattice[i + di] + j + dj]]
            return gx * (fx - di) + gy * (fy - dj)

        # Quintic fade keeps slopes continuous across cell edges
        u = fx * fx * fx * (fx * (fx * 6.0 - 15.0) + 10.0)
        v = fy * fy * fy * (fy * (fy * 6.0 - 15.0) + 10.0)
        south = lerp(corner(0, 0), corner(1, 0), u)
        north = lerp(corner(0, 1), corner(1, 1), u)
        return float(lerp(south, north, v))
