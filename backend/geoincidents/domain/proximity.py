from __future__ import annotations

from typing import Iterable, List, Optional

from .geo import BoundingBox, bounding_box, haversine_m
from .models import Incident


def find_nearby(
    center_lat: float,
    center_lon: float,
    radius_m: float,
    incidents: Iterable[Incident],
    box: Optional[BoundingBox] = None,
) -> List[Incident]:
    """Incidents within ``radius_m`` meters of the center, in input order.

    The bounding box only trims candidates; membership is decided by the
    haversine distance. Pass ``box`` when the store already applied the same
    window so it is not rebuilt.
    """
    if radius_m <= 0:
        return []
    snapshot = list(incidents)
    if not snapshot:
        return []
    if box is None:
        box = bounding_box(center_lat, center_lon, radius_m)
    candidates = [incident for incident in snapshot if box.contains(incident.lat, incident.lon)]
    return [
        incident
        for incident in candidates
        if haversine_m(center_lat, center_lon, incident.lat, incident.lon) <= radius_m
    ]
