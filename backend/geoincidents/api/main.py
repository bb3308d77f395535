from __future__ import annotations

import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from geoincidents.api.routers import analytics, hotspots, incidents
from geoincidents.domain.hotspots import HotspotConfig
from geoincidents.infra.database import build_engine, ensure_schema


def create_app(engine=None, hotspot_config: HotspotConfig | None = None) -> FastAPI:
    app = FastAPI(title="Incident Hotspots API", version="0.1.0")
    if engine is None:
        database_url = os.getenv("DATABASE_URL")
        engine = ensure_schema(build_engine(database_url)) if database_url else None
    app.state.db_engine = engine
    app.state.hotspot_config = hotspot_config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[os.getenv("FRONTEND_ORIGIN", "http://localhost:5173")],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(incidents.router, prefix="/api")
    app.include_router(hotspots.router, prefix="/api")
    app.include_router(analytics.router, prefix="/api")

    @app.get("/")
    def read_root():
        return {"message": "Incident hotspots API"}

    return app


app = create_app()
