from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from geoincidents.api.deps import get_repository
from geoincidents.api.schemas import IncidentCreate, StatusUpdate, serialize_incident
from geoincidents.domain.analytics import export_incidents_csv
from geoincidents.domain.geo import bounding_box, haversine_m
from geoincidents.domain.proximity import find_nearby
from geoincidents.infra.db.incidents_repository import IncidentsRepository

logger = logging.getLogger(__name__)
router = APIRouter(tags=["incidents"])

DEFAULT_RADIUS_M = 2000.0


@router.get("/incidents")
def list_incidents(
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lon: Optional[float] = Query(None, ge=-180, le=180),
    radius_m: float = Query(DEFAULT_RADIUS_M, gt=0),
    repo: IncidentsRepository = Depends(get_repository),
):
    """
    Incidents within ``radius_m`` of (lat, lon), most recent first.
    Without a location, every incident is returned.
    """
    if lat is None and lon is None:
        return [serialize_incident(incident) for incident in repo.list_incidents()]
    if lat is None or lon is None:
        raise HTTPException(status_code=400, detail="lat and lon must be provided together")
    box = bounding_box(lat, lon, radius_m)
    candidates = repo.list_incidents_in_box(box)
    nearby = find_nearby(lat, lon, radius_m, candidates, box=box)
    return [
        serialize_incident(incident, distance_m=haversine_m(lat, lon, incident.lat, incident.lon))
        for incident in nearby
    ]


@router.post("/incidents", status_code=201)
def create_incident(body: IncidentCreate, repo: IncidentsRepository = Depends(get_repository)):
    incident = repo.create_incident(body.model_dump())
    logger.info("incident created id=%s type=%s", incident.id, incident.type.value)
    return serialize_incident(incident)


@router.get("/incidents/export")
def export_incidents(repo: IncidentsRepository = Depends(get_repository)):
    content = export_incidents_csv(repo.list_incidents())
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="incidents.csv"'},
    )


@router.get("/incidents/{incident_id}")
def get_incident(incident_id: str, repo: IncidentsRepository = Depends(get_repository)):
    incident = repo.get_incident(incident_id)
    if incident is None:
        raise HTTPException(status_code=404, detail="Incident not found")
    return serialize_incident(incident)


@router.patch("/incidents/{incident_id}")
def update_incident_status(
    incident_id: str,
    body: StatusUpdate,
    repo: IncidentsRepository = Depends(get_repository),
):
    incident = repo.update_status(incident_id, body.status)
    if incident is None:
        raise HTTPException(status_code=404, detail="Incident not found")
    logger.info("incident status changed id=%s status=%s", incident_id, incident.status.value)
    return serialize_incident(incident)


@router.delete("/incidents/{incident_id}")
def delete_incident(incident_id: str, repo: IncidentsRepository = Depends(get_repository)):
    if not repo.delete_incident(incident_id):
        raise HTTPException(status_code=404, detail="Incident not found")
    logger.info("incident deleted id=%s", incident_id)
    return {"success": True}


@router.get("/users/{user_id}/incidents")
def list_user_incidents(user_id: str, repo: IncidentsRepository = Depends(get_repository)):
    return [serialize_incident(incident) for incident in repo.list_user_incidents(user_id)]
