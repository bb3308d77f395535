from __future__ import annotations

import csv
import io
from collections import Counter
from datetime import date, datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional

from .models import Incident, IncidentStatus, IncidentType

TIMEFRAME_DAYS = {
    "week": 7,
    "month": 30,
}
YEAR_MONTHS = 12

EXPORT_COLUMNS = [
    "ID",
    "Title",
    "Type",
    "Status",
    "Latitude",
    "Longitude",
    "Address",
    "Created At",
    "Updated At",
]


def _to_utc_naive(dt: Optional[datetime]) -> Optional[datetime]:
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def incidents_by_type(incidents: Iterable[Incident]) -> Dict[str, int]:
    counts = Counter(incident.type.value for incident in incidents)
    return {t.value: counts.get(t.value, 0) for t in IncidentType}


def incidents_by_status(incidents: Iterable[Incident]) -> Dict[str, int]:
    counts = Counter(incident.status.value for incident in incidents)
    return {s.value: counts.get(s.value, 0) for s in IncidentStatus}


def incidents_by_hour(incidents: Iterable[Incident]) -> Dict[int, int]:
    counts = Counter(_to_utc_naive(incident.created_at).hour for incident in incidents)
    return {hour: counts.get(hour, 0) for hour in range(24)}


def resolution_rate(incidents: List[Incident]) -> float:
    """Percentage of incidents in ``resolved`` status."""
    if not incidents:
        return 0.0
    resolved = sum(1 for incident in incidents if incident.status is IncidentStatus.RESOLVED)
    return resolved * 100.0 / len(incidents)


def average_resolution_hours(incidents: Iterable[Incident]) -> Optional[float]:
    durations = []
    for incident in incidents:
        if incident.status is not IncidentStatus.RESOLVED or incident.updated_at is None:
            continue
        delta = _to_utc_naive(incident.updated_at) - _to_utc_naive(incident.created_at)
        durations.append(max(0.0, delta.total_seconds() / 3600.0))
    if not durations:
        return None
    return sum(durations) / len(durations)


def _month_key(day: date) -> str:
    return f"{day.year}-{day.month:02d}"


def _shift_month(day: date, months: int) -> date:
    index = day.year * 12 + (day.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def time_series(
    incidents: Iterable[Incident],
    timeframe: str = "month",
    today: Optional[date] = None,
) -> List[dict]:
    """Incident counts per day (``week``/``month``) or per month (``year``).

    Buckets are ordered oldest first and include empty ones.
    """
    today = today or datetime.now(timezone.utc).date()
    if timeframe == "year":
        first = _shift_month(today.replace(day=1), -(YEAR_MONTHS - 1))
        keys = [_month_key(_shift_month(first, i)) for i in range(YEAR_MONTHS)]
        counts = Counter(_month_key(_to_utc_naive(i.created_at).date()) for i in incidents)
    elif timeframe in TIMEFRAME_DAYS:
        days = TIMEFRAME_DAYS[timeframe]
        first_day = today - timedelta(days=days - 1)
        keys = [(first_day + timedelta(days=i)).isoformat() for i in range(days)]
        counts = Counter(_to_utc_naive(i.created_at).date().isoformat() for i in incidents)
    else:
        raise ValueError(f"unknown timeframe: {timeframe}")
    return [{"period": key, "count": counts.get(key, 0)} for key in keys]


def summarize(
    incidents: Iterable[Incident],
    timeframe: str = "month",
    today: Optional[date] = None,
) -> dict:
    snapshot = list(incidents)
    avg_hours = average_resolution_hours(snapshot)
    return {
        "total_incidents": len(snapshot),
        "resolution_rate": round(resolution_rate(snapshot), 2),
        "avg_resolution_hours": round(avg_hours, 2) if avg_hours is not None else None,
        "by_type": incidents_by_type(snapshot),
        "by_status": incidents_by_status(snapshot),
        "by_hour": incidents_by_hour(snapshot),
        "timeframe": timeframe,
        "time_series": time_series(snapshot, timeframe, today=today),
    }


def _to_iso(dt: Optional[datetime]) -> str:
    return dt.isoformat() if dt else ""


def export_incidents_csv(incidents: Iterable[Incident]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(EXPORT_COLUMNS)
    for incident in incidents:
        writer.writerow(
            [
                incident.id,
                incident.title,
                incident.type.value,
                incident.status.value,
                incident.lat,
                incident.lon,
                incident.address or "",
                _to_iso(incident.created_at),
                _to_iso(incident.updated_at),
            ]
        )
    return buffer.getvalue()
