from __future__ import annotations

from fastapi import Depends, HTTPException, Request
from sqlalchemy.engine import Engine

from geoincidents.domain.hotspots import HotspotConfig
from geoincidents.infra.db.incidents_repository import IncidentsRepository


def get_engine(request: Request) -> Engine:
    engine = getattr(request.app.state, "db_engine", None)
    if engine is None:
        raise HTTPException(status_code=500, detail="Database engine not configured")
    return engine


def get_repository(engine: Engine = Depends(get_engine)) -> IncidentsRepository:
    return IncidentsRepository(engine)


def get_hotspot_config(request: Request) -> HotspotConfig:
    config = getattr(request.app.state, "hotspot_config", None)
    return config if config is not None else HotspotConfig.from_env()
