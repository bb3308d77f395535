from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

EARTH_RADIUS_M = 6_371_000
EARTH_RADIUS_KM = 6371.0
# Fixed approximation used for the coarse box; slightly under the spherical value, so
# the box is never narrower than the exact circle in latitude.
METERS_PER_DEGREE_LAT = 111_000.0
# Below this cos(lat) the longitude delta is unbounded.
POLE_COS_EPSILON = 1e-12

LonRange = Tuple[float, float]
FULL_LON_RANGE: LonRange = (-180.0, 180.0)


def _central_angle(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    return 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in meters on a 6,371 km sphere."""
    return EARTH_RADIUS_M * _central_angle(lat1, lon1, lat2, lon2)


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    return EARTH_RADIUS_KM * _central_angle(lat1, lon1, lat2, lon2)


@dataclass(frozen=True)
class BoundingBox:
    """Coarse lat/lon window around a point.

    ``lon_ranges`` holds one range, or two when the window wraps across the
    antimeridian. Each range is inclusive on both ends.
    """

    min_lat: float
    max_lat: float
    lon_ranges: Tuple[LonRange, ...]

    @property
    def is_lon_unbounded(self) -> bool:
        return self.lon_ranges == (FULL_LON_RANGE,)

    def contains(self, lat: float, lon: float) -> bool:
        if lat < self.min_lat or lat > self.max_lat:
            return False
        return any(lo <= lon <= hi for lo, hi in self.lon_ranges)


def bounding_box(center_lat: float, center_lon: float, radius_m: float) -> BoundingBox:
    lat_delta = radius_m / METERS_PER_DEGREE_LAT
    min_lat = center_lat - lat_delta
    max_lat = center_lat + lat_delta

    cos_lat = math.cos(math.radians(center_lat))
    if abs(cos_lat) < POLE_COS_EPSILON or min_lat <= -90.0 or max_lat >= 90.0:
        # the circle reaches a pole, every meridian can hold a match
        return BoundingBox(max(-90.0, min_lat), min(90.0, max_lat), (FULL_LON_RANGE,))

    # widest meridian offset reached by a spherical cap of this radius
    spread = math.sin(radius_m / EARTH_RADIUS_M) / abs(cos_lat)
    if spread >= 1.0:
        return BoundingBox(min_lat, max_lat, (FULL_LON_RANGE,))
    lon_delta = math.degrees(math.asin(spread))

    lo = center_lon - lon_delta
    hi = center_lon + lon_delta
    if lo < -180.0:
        ranges: Tuple[LonRange, ...] = ((-180.0, hi), (lo + 360.0, 180.0))
    elif hi > 180.0:
        ranges = ((lo, 180.0), (-180.0, hi - 360.0))
    else:
        ranges = ((lo, hi),)
    return BoundingBox(min_lat, max_lat, ranges)
