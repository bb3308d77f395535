from __future__ import annotations

import csv
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from geoincidents.domain.models import IncidentStatus, IncidentType, validate_coordinates
from geoincidents.infra.database import build_engine, ensure_schema
from geoincidents.infra.db.incidents_repository import IncidentsRepository

DEFAULT_CSV_PATH = Path(os.getenv("IMPORT_CSV_PATH", "/data/incidents_seed.csv"))


def import_incidents_from_csv(
    csv_path: str | Path | None = None,
    *,
    engine=None,
    database_url: Optional[str] = None,
) -> int:
    path = _resolve_csv_path(csv_path)

    if engine is None:
        if database_url is None:
            database_url = os.getenv("DATABASE_URL")
        if not database_url:
            raise RuntimeError("DATABASE_URL required if engine not provided")
        engine = build_engine(database_url)
    ensure_schema(engine)
    repo = IncidentsRepository(engine)

    count = 0
    skipped = 0
    for row in _read_csv(path):
        label = row.get("id") or row.get("title")
        try:
            payload = _row_to_payload(row)
        except (ValueError, TypeError) as exc:
            print(f"[import_csv] WARNING: skipping incident {label} due to invalid data: {exc}")
            skipped += 1
            continue
        if payload.get("id") and repo.get_incident(payload["id"]) is not None:
            print(f"[import_csv] WARNING: skipping incident {label}: already exists")
            skipped += 1
            continue
        repo.create_incident(payload)
        count += 1

    db_url = getattr(engine, "url", database_url or os.getenv("DATABASE_URL"))
    print(f"[import_csv] Import complete database={db_url} incidents={count} skipped={skipped}")
    return count


def _resolve_csv_path(csv_path: str | Path | None) -> Path:
    candidate = DEFAULT_CSV_PATH if csv_path is None else Path(csv_path)
    if not candidate.is_absolute():
        candidate = (Path.cwd() / candidate).resolve()
    if not candidate.exists():
        raise FileNotFoundError(f"CSV file not found: {candidate}")
    return candidate


def _row_to_payload(row: dict) -> dict:
    lat, lon = validate_coordinates(_blank_to_none(row.get("lat")), _blank_to_none(row.get("lon")))
    return {
        "id": _blank_to_none(row.get("id")),
        "title": (row.get("title") or "").strip(),
        "description": (row.get("description") or "").strip(),
        "type": IncidentType((row.get("type") or "").strip().lower()),
        "status": IncidentStatus((row.get("status") or "pending").strip().lower()),
        "lat": lat,
        "lon": lon,
        "address": _blank_to_none(row.get("address")),
        "user_id": _blank_to_none(row.get("user_id")),
        "created_at": _parse_dt(row.get("created_at")),
    }


def _blank_to_none(value):
    if value is None:
        return None
    value = value.strip()
    return value or None


def _parse_dt(value: Optional[str]) -> Optional[datetime]:
    if not value or not value.strip():
        return None
    dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _read_csv(path: Path):
    with path.open(newline="", encoding="utf-8") as handle:
        yield from csv.DictReader(handle)


def main() -> None:
    import_incidents_from_csv()


if __name__ == "__main__":
    main()
