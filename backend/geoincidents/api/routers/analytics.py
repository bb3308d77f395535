from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from geoincidents.api.deps import get_hotspot_config, get_repository
from geoincidents.domain.analytics import summarize
from geoincidents.domain.hotspots import HotspotConfig, compute_hotspots
from geoincidents.infra.db.incidents_repository import IncidentsRepository

router = APIRouter(tags=["analytics"])


@router.get("/analytics")
def get_analytics(
    timeframe: str = Query("month", pattern="^(week|month|year)$"),
    repo: IncidentsRepository = Depends(get_repository),
    config: HotspotConfig = Depends(get_hotspot_config),
):
    incidents = repo.list_incidents()
    summary = summarize(incidents, timeframe)
    summary["hotspot_count"] = len(compute_hotspots(incidents, config))
    return summary
