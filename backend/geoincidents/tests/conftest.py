from __future__ import annotations

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine

from geoincidents.api.deps import get_engine
from geoincidents.api.main import create_app
from geoincidents.domain.hotspots import HotspotConfig
from geoincidents.infra.db.incidents_repository import IncidentsRepository
from geoincidents.infra.db.tables import metadata


def _utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


# inc-1..inc-3 sit within ~150 m of each other; inc-4 is ~27 km away and inc-5 ~2.1 km away.
SEED_INCIDENTS = [
    {
        "id": "inc-1",
        "title": "Phone snatched",
        "description": "Phone taken near the bus stop",
        "type": "theft",
        "lat": 35.600,
        "lon": -80.810,
        "user_id": "user-1",
        "created_at": _utc(2026, 3, 1, 20, 0),
    },
    {
        "id": "inc-2",
        "title": "Graffiti",
        "description": "Tagged storefront",
        "type": "vandalism",
        "lat": 35.601,
        "lon": -80.809,
        "user_id": "user-2",
        "created_at": _utc(2026, 3, 1, 19, 0),
    },
    {
        "id": "inc-3",
        "title": "Wallet stolen",
        "description": "Wallet stolen at the market",
        "type": "theft",
        "lat": 35.6005,
        "lon": -80.8095,
        "user_id": "user-1",
        "created_at": _utc(2026, 3, 1, 18, 0),
    },
    {
        "id": "inc-4",
        "title": "Garage break-in",
        "description": "Tools taken from garage",
        "type": "burglary",
        "lat": 35.800,
        "lon": -81.000,
        "user_id": "user-2",
        "created_at": _utc(2026, 2, 28, 12, 0),
    },
    {
        "id": "inc-5",
        "title": "Fight outside bar",
        "description": "Two people injured",
        "type": "assault",
        "lat": 35.610,
        "lon": -80.790,
        "user_id": "user-3",
        "created_at": _utc(2026, 2, 27, 9, 0),
    },
]


@pytest.fixture()
def engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'incidents.db'}",
        connect_args={"check_same_thread": False},
        future=True,
    )
    metadata.create_all(engine)
    yield engine
    metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture()
def repo(engine):
    return IncidentsRepository(engine)


@pytest.fixture()
def seeded_repo(repo):
    for payload in SEED_INCIDENTS:
        repo.create_incident(dict(payload))
    return repo


@pytest.fixture()
def api_client(engine, seeded_repo):
    app = create_app(engine=engine, hotspot_config=HotspotConfig())
    app.dependency_overrides[get_engine] = lambda: engine
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture()
def empty_api_client(engine):
    app = create_app(engine=engine, hotspot_config=HotspotConfig())
    app.dependency_overrides[get_engine] = lambda: engine
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
