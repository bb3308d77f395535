import json
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer

from geoincidents.domain.geo import haversine_m
from geoincidents.domain.hotspots import (
    DEFAULT_MIN_CLUSTER_SIZE,
    DEFAULT_THRESHOLD_M,
    HotspotConfig,
    compute_hotspots,
)
from geoincidents.domain.models import Incident
from geoincidents.domain.proximity import find_nearby
from geoincidents.jobs.import_csv import import_incidents_from_csv

app = typer.Typer(help="CLI for incident proximity queries and hotspots")

_DEMO_INCIDENTS = [
    {
        "id": "demo-1",
        "title": "Bike stolen",
        "type": "theft",
        "created_at": "2026-02-10T19:00:00",
        "lat": 35.600,
        "lon": -80.810,
    },
    {
        "id": "demo-2",
        "title": "Window smashed",
        "type": "vandalism",
        "created_at": "2026-02-10T18:30:00",
        "lat": 35.601,
        "lon": -80.809,
    },
    {
        "id": "demo-3",
        "title": "Shed broken into",
        "type": "burglary",
        "created_at": "2026-02-09T22:15:00",
        "lat": 35.800,
        "lon": -81.000,
    },
]


def _load_incidents(file: Optional[Path]) -> list[Incident]:
    if file is None:
        payload = _DEMO_INCIDENTS
    else:
        try:
            payload = json.loads(file.read_text())
        except (OSError, json.JSONDecodeError) as exc:
            typer.echo(f"Cannot read incidents from {file}: {exc}", err=True)
            raise typer.Exit(code=1)
    incidents = []
    try:
        for item in payload:
            incidents.append(
                Incident(
                    id=str(item["id"]),
                    lat=item.get("lat"),
                    lon=item.get("lon"),
                    type=item.get("type", "other"),
                    created_at=datetime.fromisoformat(item["created_at"]),
                    title=item.get("title", ""),
                    description=item.get("description", ""),
                    status=item.get("status", "pending"),
                    address=item.get("address"),
                )
            )
    except (KeyError, TypeError, ValueError) as exc:
        typer.echo(f"Invalid incident record: {exc}", err=True)
        raise typer.Exit(code=1)
    return incidents


@app.command("hotspots")
def cli_hotspots(
    file: Optional[Path] = typer.Option(None, help="JSON file with a list of incidents"),
    threshold_m: Optional[float] = typer.Option(
        None, help=f"Linkage distance in meters (default HOTSPOT_THRESHOLD_M or {DEFAULT_THRESHOLD_M:.0f})"
    ),
    min_size: Optional[int] = typer.Option(
        None, help=f"Minimum incidents per hotspot (default HOTSPOT_MIN_SIZE or {DEFAULT_MIN_CLUSTER_SIZE})"
    ),
):
    overrides = {}
    if threshold_m is not None:
        overrides["threshold_m"] = threshold_m
    if min_size is not None:
        overrides["min_cluster_size"] = min_size
    try:
        config = replace(HotspotConfig.from_env(), **overrides)
    except ValueError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1)
    incidents = _load_incidents(file)
    hotspots = compute_hotspots(incidents, config)
    if not hotspots:
        typer.echo("No hotspots found")
        raise typer.Exit(code=0)
    typer.echo("lat\tlon\tcount\tradius_m\trisk")
    for hs in hotspots:
        typer.echo(f"{hs.center[0]:.5f}\t{hs.center[1]:.5f}\t{hs.count}\t{hs.radius_m:.0f}\t{hs.risk_level.value}")


@app.command("nearby")
def cli_nearby(
    lat: float = typer.Option(..., min=-90, max=90, help="Center latitude"),
    lon: float = typer.Option(..., min=-180, max=180, help="Center longitude"),
    radius_m: float = typer.Option(2000.0, help="Search radius in meters"),
    file: Optional[Path] = typer.Option(None, help="JSON file with a list of incidents"),
):
    incidents = _load_incidents(file)
    nearby = find_nearby(lat, lon, radius_m, incidents)
    if not nearby:
        typer.echo("No incidents found in that radius")
        raise typer.Exit(code=0)
    typer.echo("id\ttype\tdistance_m")
    for incident in nearby:
        distance = haversine_m(lat, lon, incident.lat, incident.lon)
        typer.echo(f"{incident.id}\t{incident.type.value}\t{distance:.1f}")


@app.command("import")
def cli_import(
    file: Path = typer.Option(..., help="CSV file with incidents"),
    database_url: Optional[str] = typer.Option(None, help="SQLAlchemy URL (defaults to DATABASE_URL)"),
):
    try:
        count = import_incidents_from_csv(file, database_url=database_url)
    except (FileNotFoundError, RuntimeError) as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Imported {count} incidents")


if __name__ == "__main__":
    app()
