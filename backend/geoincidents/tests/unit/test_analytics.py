import csv
import io
from datetime import date, datetime, timedelta

import pytest

from geoincidents.domain import analytics
from geoincidents.domain.models import Incident

TODAY = date(2026, 3, 15)


def incident(incident_id, created_at, **overrides):
    payload = {
        "id": incident_id,
        "lat": 35.6,
        "lon": -80.8,
        "type": "theft",
        "created_at": created_at,
    }
    payload.update(overrides)
    return Incident(**payload)


@pytest.fixture()
def incidents():
    return [
        incident("a", datetime(2026, 3, 15, 9, 0), type="theft", status="resolved",
                 updated_at=datetime(2026, 3, 15, 13, 0)),
        incident("b", datetime(2026, 3, 14, 22, 0), type="assault", status="pending"),
        incident("c", datetime(2026, 3, 10, 9, 30), type="theft", status="resolved",
                 updated_at=datetime(2026, 3, 11, 9, 30)),
        incident("d", datetime(2025, 12, 1, 8, 0), type="vandalism", status="dismissed",
                 title='Broken "sign", corner', address="1 Main St, Town"),
    ]


def test_counts_include_every_category(incidents):
    by_type = analytics.incidents_by_type(incidents)
    assert by_type == {"theft": 2, "assault": 1, "vandalism": 1, "burglary": 0, "other": 0}
    by_status = analytics.incidents_by_status(incidents)
    assert by_status == {"pending": 1, "investigating": 0, "resolved": 2, "dismissed": 1}


def test_counts_by_hour(incidents):
    by_hour = analytics.incidents_by_hour(incidents)
    assert len(by_hour) == 24
    assert by_hour[9] == 2
    assert by_hour[22] == 1
    assert by_hour[8] == 1
    assert by_hour[0] == 0


def test_resolution_metrics(incidents):
    assert analytics.resolution_rate(incidents) == pytest.approx(50.0)
    # 4h and 24h
    assert analytics.average_resolution_hours(incidents) == pytest.approx(14.0)


def test_resolution_metrics_on_empty_input():
    assert analytics.resolution_rate([]) == 0.0
    assert analytics.average_resolution_hours([]) is None


def test_week_series(incidents):
    series = analytics.time_series(incidents, "week", today=TODAY)
    assert len(series) == 7
    assert series[0]["period"] == (TODAY - timedelta(days=6)).isoformat()
    assert series[-1] == {"period": "2026-03-15", "count": 1}
    counts = {item["period"]: item["count"] for item in series}
    assert counts["2026-03-14"] == 1
    assert counts["2026-03-10"] == 1
    assert sum(counts.values()) == 3


def test_year_series(incidents):
    series = analytics.time_series(incidents, "year", today=TODAY)
    assert [item["period"] for item in series][:2] == ["2025-04", "2025-05"]
    assert series[-1] == {"period": "2026-03", "count": 3}
    counts = {item["period"]: item["count"] for item in series}
    assert counts["2025-12"] == 1


def test_unknown_timeframe_is_rejected(incidents):
    with pytest.raises(ValueError):
        analytics.time_series(incidents, "decade", today=TODAY)


def test_summary(incidents):
    summary = analytics.summarize(incidents, "month", today=TODAY)
    assert summary["total_incidents"] == 4
    assert summary["resolution_rate"] == 50.0
    assert summary["avg_resolution_hours"] == 14.0
    assert len(summary["time_series"]) == 30


def test_export_csv_quotes_fields(incidents):
    content = analytics.export_incidents_csv(incidents)
    rows = list(csv.reader(io.StringIO(content)))
    assert rows[0] == analytics.EXPORT_COLUMNS
    assert len(rows) == 5
    last = rows[-1]
    assert last[0] == "d"
    assert last[1] == 'Broken "sign", corner'
    assert last[6] == "1 Main St, Town"
    assert last[7] == "2025-12-01T08:00:00"
    assert last[8] == ""
