# flyover_engine/utils/geo.py

import numpy as np
from typing import Tuple

EARTH_RADIUS = 6371008.8  # meters
METERS_PER_DEGREE = 111000.0


def lerp(a: float, b: float, t: float) -> float:
    """Linear interpolation."""
    return a + (b - a) * t


def ease_out_cubic(t: float) -> float:
    """Fast start, smooth deceleration."""
    t = min(max(t, 0.0), 1.0)
    return 1.0 - (1.0 - t) ** 3


def ease_in_out_cubic(t: float) -> float:
    """Smooth at both ends."""
    t = min(max(t, 0.0), 1.0)
    if t < 0.5:
        return 4.0 * t * t * t
    return 1.0 - ((-2.0 * t + 2.0) ** 3) / 2.0


def normalize_bearing(bearing: float) -> float:
    """Wrap a bearing into [0, 360)."""
    wrapped = float(bearing) % 360.0
    # -1e-15 % 360 rounds to 360.0
    return 0.0 if wrapped >= 360.0 else wrapped


def shortest_angle_delta(from_bearing: float, to_bearing: float) -> float:
    """Signed shortest rotation from one bearing to another, in (-180, 180]."""
    delta = (float(to_bearing) - float(from_bearing)) % 360.0
    if delta > 180.0:
        delta -= 360.0
    return delta


def lerp_bearing(a: float, b: float, t: float) -> float:
    """Interpolate bearings along the shortest arc."""
    if t >= 1.0:
        return normalize_bearing(b)
    return normalize_bearing(a + shortest_angle_delta(a, b) * t)


def bearing_between(lng1: float, lat1: float, lng2: float, lat2: float) -> float:
    """
    Initial great-circle bearing from point 1 to point 2.
    Returns degrees in [0, 360).
    """
    phi1, phi2 = np.radians(lat1), np.radians(lat2)
    d_lambda = np.radians(lng2 - lng1)

    y = np.sin(d_lambda) * np.cos(phi2)
    x = np.cos(phi1) * np.sin(phi2) - np.sin(phi1) * np.cos(phi2) * np.cos(d_lambda)

    return normalize_bearing(float(np.degrees(np.arctan2(y, x))))


def destination(lng: float, lat: float, distance: float, bearing: float) -> Tuple[float, float]:
    """
    Point reached travelling `distance` meters from (lng, lat) on `bearing`.
    Returns (lng, lat).
    """
    delta = distance / EARTH_RADIUS
    theta = np.radians(bearing)
    phi1 = np.radians(lat)
    lambda1 = np.radians(lng)

    phi2 = np.arcsin(np.sin(phi1) * np.cos(delta) + np.cos(phi1) * np.sin(delta) * np.cos(theta))
    lambda2 = lambda1 + np.arctan2(
        np.sin(theta) * np.sin(delta) * np.cos(phi1),
        np.cos(delta) - np.sin(phi1) * np.sin(phi2)
    )

    out_lng = (float(np.degrees(lambda2)) + 540.0) % 360.0 - 180.0
    return out_lng, float(np.degrees(phi2))


def haversine_distance(lng1, lat1, lng2, lat2):
    """Great-circle distance in meters. Accepts scalars or numpy arrays."""
    phi1, phi2 = np.radians(lat1), np.radians(lat2)
    d_phi = phi2 - phi1
    d_lambda = np.radians(np.asarray(lng2) - np.asarray(lng1))

    a = np.sin(d_phi / 2.0) ** 2 + np.cos(phi1) * np.cos(phi2) * np.sin(d_lambda / 2.0) ** 2
    return 2.0 * EARTH_RADIUS * np.arcsin(np.sqrt(np.clip(a, 0.0, 1.0)))


def meters_per_degree(lat: float) -> Tuple[float, float]:
    """
    Local scale at a latitude.
    Returns (meters per degree longitude, meters per degree latitude).
    """
    return METERS_PER_DEGREE * float(np.cos(np.radians(lat))), METERS_PER_DEGREE


def local_offset_meters(lng: float, lat: float, origin_lng: float, origin_lat: float) -> Tuple[float, float]:
    """East/north offset of a point from an origin using the origin's local scale."""
    m_lng, m_lat = meters_per_degree(origin_lat)
    return (lng - origin_lng) * m_lng, (lat - origin_lat) * m_lat
