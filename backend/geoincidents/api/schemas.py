from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from geoincidents.domain.models import Hotspot, Incident, IncidentStatus, IncidentType


class IncidentCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    type: IncidentType
    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)
    address: Optional[str] = None
    image_url: Optional[str] = None
    user_id: Optional[str] = None


class StatusUpdate(BaseModel):
    status: IncidentStatus


def _to_iso(dt):
    return dt.isoformat() if dt else None


def serialize_incident(incident: Incident, distance_m: Optional[float] = None) -> dict:
    payload = {
        "id": incident.id,
        "title": incident.title,
        "description": incident.description,
        "type": incident.type.value,
        "status": incident.status.value,
        "lat": incident.lat,
        "lon": incident.lon,
        "address": incident.address,
        "image_url": incident.image_url,
        "user_id": incident.user_id,
        "created_at": _to_iso(incident.created_at),
        "updated_at": _to_iso(incident.updated_at),
    }
    if distance_m is not None:
        payload["distance_m"] = round(distance_m, 2)
    return payload


def serialize_hotspot(hotspot: Hotspot) -> dict:
    return {
        "center": {"lat": hotspot.center[0], "lon": hotspot.center[1]},
        "count": hotspot.count,
        "radius_m": round(hotspot.radius_m, 2),
        "risk_level": hotspot.risk_level.value,
        "counts_by_type": hotspot.counts_by_type,
        "incident_ids": hotspot.incident_ids,
    }
