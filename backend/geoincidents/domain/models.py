from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Optional, Tuple


class IncidentType(str, Enum):
    THEFT = "theft"
    ASSAULT = "assault"
    VANDALISM = "vandalism"
    BURGLARY = "burglary"
    OTHER = "other"

    @property
    def label(self) -> str:
        return _TYPE_DISPLAY[self][0]

    @property
    def color(self) -> str:
        return _TYPE_DISPLAY[self][1]


class IncidentStatus(str, Enum):
    PENDING = "pending"
    INVESTIGATING = "investigating"
    RESOLVED = "resolved"
    DISMISSED = "dismissed"

    @property
    def label(self) -> str:
        return _STATUS_DISPLAY[self][0]

    @property
    def color(self) -> str:
        return _STATUS_DISPLAY[self][1]


class RiskLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"

    @property
    def rank(self) -> int:
        return _RISK_ORDER.index(self)

    @property
    def color(self) -> str:
        return _RISK_COLORS[self]


_TYPE_DISPLAY = {
    IncidentType.THEFT: ("Theft", "#FF5733"),
    IncidentType.ASSAULT: ("Assault", "#C70039"),
    IncidentType.VANDALISM: ("Vandalism", "#FFC300"),
    IncidentType.BURGLARY: ("Burglary", "#900C3F"),
    IncidentType.OTHER: ("Other", "#581845"),
}

_STATUS_DISPLAY = {
    IncidentStatus.PENDING: ("Pending", "#FFC107"),
    IncidentStatus.INVESTIGATING: ("Investigating", "#2196F3"),
    IncidentStatus.RESOLVED: ("Resolved", "#4CAF50"),
    IncidentStatus.DISMISSED: ("Dismissed", "#9E9E9E"),
}

_RISK_ORDER = (RiskLevel.LOW, RiskLevel.MEDIUM, RiskLevel.HIGH, RiskLevel.CRITICAL)

_RISK_COLORS = {
    RiskLevel.LOW: "#4CAF50",
    RiskLevel.MEDIUM: "#FFC107",
    RiskLevel.HIGH: "#FF5722",
    RiskLevel.CRITICAL: "#F44336",
}


def validate_coordinates(lat, lon) -> Tuple[float, float]:
    """Return ``(lat, lon)`` as floats or raise ``ValueError``.

    Missing, non-numeric, non-finite and out-of-range values are rejected; nothing
    is coerced to ``0, 0``.
    """
    if lat is None or lon is None:
        raise ValueError("lat and lon are required")
    try:
        lat_f = float(lat)
        lon_f = float(lon)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"coordinates must be numeric: {lat!r}, {lon!r}") from exc
    if not (math.isfinite(lat_f) and math.isfinite(lon_f)):
        raise ValueError(f"coordinates must be finite: {lat_f}, {lon_f}")
    if not -90.0 <= lat_f <= 90.0:
        raise ValueError(f"lat out of range [-90, 90]: {lat_f}")
    if not -180.0 <= lon_f <= 180.0:
        raise ValueError(f"lon out of range [-180, 180]: {lon_f}")
    return lat_f, lon_f


@dataclass(frozen=True)
class Incident:
    id: str
    lat: float
    lon: float
    type: IncidentType
    created_at: datetime
    title: str = ""
    description: str = ""
    status: IncidentStatus = IncidentStatus.PENDING
    address: Optional[str] = None
    image_url: Optional[str] = None
    user_id: Optional[str] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if not self.id:
            raise ValueError("id is required")
        if self.created_at is None:
            raise ValueError("created_at is required")
        lat, lon = validate_coordinates(self.lat, self.lon)
        object.__setattr__(self, "lat", lat)
        object.__setattr__(self, "lon", lon)
        object.__setattr__(self, "type", IncidentType(self.type))
        object.__setattr__(self, "status", IncidentStatus(self.status))


@dataclass(frozen=True)
class Hotspot:
    center: Tuple[float, float]
    incidents: Tuple[Incident, ...]
    radius_m: float
    risk_level: RiskLevel
    counts_by_type: Dict[str, int] = field(default_factory=dict)

    @property
    def count(self) -> int:
        return len(self.incidents)

    @property
    def incident_ids(self) -> list[str]:
        return [incident.id for incident in self.incidents]
