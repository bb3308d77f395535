from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from geoincidents.api.deps import get_hotspot_config, get_repository
from geoincidents.api.schemas import serialize_hotspot, serialize_incident
from geoincidents.domain.hotspots import HotspotConfig, compute_hotspots, incidents_in_hotspot
from geoincidents.infra.db.incidents_repository import IncidentsRepository

router = APIRouter(tags=["hotspots"])


@router.get("/hotspots")
def list_hotspots(
    repo: IncidentsRepository = Depends(get_repository),
    config: HotspotConfig = Depends(get_hotspot_config),
):
    hotspots = compute_hotspots(repo.list_incidents(), config)
    return {
        "threshold_m": config.threshold_m,
        "min_cluster_size": config.min_cluster_size,
        "hotspots": [serialize_hotspot(hs) for hs in hotspots],
    }


@router.get("/hotspots/incidents")
def list_hotspot_incidents(
    lat: float = Query(..., ge=-90, le=90),
    lon: float = Query(..., ge=-180, le=180),
    radius_m: float = Query(..., gt=0),
    repo: IncidentsRepository = Depends(get_repository),
):
    members = incidents_in_hotspot(repo.list_incidents(), (lat, lon), radius_m)
    return [serialize_incident(incident) for incident in members]
