# flyover_engine/camera/camera_pose.py

import dataclasses
from dataclasses import dataclass
from flyover_engine.utils.geo import lerp, lerp_bearing, normalize_bearing


@dataclass(frozen=True)
class PathPoint:
    """A sampled route position. Altitude in meters."""

    lng: float
    lat: float
    alt: float = 0.0


@dataclass(frozen=True)
class CameraPose:
    """
    Full camera placement.
    Bearing in degrees [0, 360), pitch in degrees (negative looks down).
    """

    lng: float
    lat: float
    alt: float
    bearing: float
    pitch: float

    def __post_init__(self):
        object.__setattr__(self, 'bearing', normalize_bearing(self.bearing))

    def with_alt(self, alt: float) -> 'CameraPose':
        return dataclasses.replace(self, alt=float(alt))


def lerp_pose(start: CameraPose, end: CameraPose, t: float) -> CameraPose:
    """Interpolate two poses; bearing takes the shortest arc."""
    if t <= 0.0:
        return start
    if t >= 1.0:
        return end
    return CameraPose(
        lng=lerp(start.lng, end.lng, t),
        lat=lerp(start.lat, end.lat, t),
        alt=lerp(start.alt, end.alt, t),
        bearing=lerp_bearing(start.bearing, end.bearing, t),
        pitch=lerp(start.pitch, end.pitch, t),
    )
