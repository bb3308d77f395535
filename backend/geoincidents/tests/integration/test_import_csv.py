from __future__ import annotations

import pytest
from sqlalchemy import create_engine, text

from geoincidents.domain.models import IncidentStatus
from geoincidents.jobs.import_csv import import_incidents_from_csv

HEADER = "id,title,description,type,status,lat,lon,address,user_id,created_at\n"


def _write_csv(path, rows):
    path.write_text(HEADER + "".join(row + "\n" for row in rows), encoding="utf-8")
    return path


def test_import_loads_valid_rows(tmp_path, engine, repo, capsys):
    csv_path = _write_csv(
        tmp_path / "incidents.csv",
        [
            'csv-1,Bike stolen,From rack,theft,pending,35.600,-80.810,"1 Main St, Town",user-1,2026-03-01T20:00:00Z',
            "csv-2,Graffiti,Wall,Vandalism,resolved,35.601,-80.809,,user-2,2026-03-01T19:00:00",
        ],
    )
    count = import_incidents_from_csv(csv_path, engine=engine)
    assert count == 2
    listed = repo.list_incidents()
    assert [i.id for i in listed] == ["csv-1", "csv-2"]
    assert listed[0].address == "1 Main St, Town"
    assert listed[1].status is IncidentStatus.RESOLVED
    assert "[import_csv] Import complete" in capsys.readouterr().out


def test_import_skips_invalid_rows(tmp_path, engine, repo, capsys):
    csv_path = _write_csv(
        tmp_path / "incidents.csv",
        [
            "ok-1,Fine,Fine,theft,pending,35.6,-80.8,,,2026-03-01T10:00:00",
            "bad-lat,Bad,Bad,theft,pending,123.0,-80.8,,,2026-03-01T10:00:00",
            "bad-lon,Bad,Bad,theft,pending,35.6,,,,2026-03-01T10:00:00",
            "bad-type,Bad,Bad,arson,pending,35.6,-80.8,,,2026-03-01T10:00:00",
            "bad-date,Bad,Bad,theft,pending,35.6,-80.8,,,yesterday",
        ],
    )
    assert import_incidents_from_csv(csv_path, engine=engine) == 1
    assert [i.id for i in repo.list_incidents()] == ["ok-1"]
    out = capsys.readouterr().out
    assert out.count("[import_csv] WARNING") == 4


def test_import_is_not_duplicated(tmp_path, engine, repo):
    csv_path = _write_csv(
        tmp_path / "incidents.csv",
        ["dup-1,Fine,Fine,theft,pending,35.6,-80.8,,,2026-03-01T10:00:00"],
    )
    assert import_incidents_from_csv(csv_path, engine=engine) == 1
    assert import_incidents_from_csv(csv_path, engine=engine) == 0
    assert len(repo.list_incidents()) == 1


def test_import_requires_existing_file(tmp_path, engine):
    with pytest.raises(FileNotFoundError):
        import_incidents_from_csv(tmp_path / "missing.csv", engine=engine)


def test_import_requires_database(tmp_path, monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    csv_path = _write_csv(tmp_path / "incidents.csv", [])
    with pytest.raises(RuntimeError):
        import_incidents_from_csv(csv_path)


def test_import_with_database_url(tmp_path):
    csv_path = _write_csv(
        tmp_path / "incidents.csv",
        ["url-1,Fine,Fine,other,pending,10.0,10.0,,,2026-03-01T10:00:00"],
    )
    database_url = f"sqlite:///{tmp_path / 'from_url.db'}"
    assert import_incidents_from_csv(csv_path, database_url=database_url) == 1


def test_import_creates_incidents_table(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'tables.db'}", future=True)
    csv_path = _write_csv(tmp_path / "incidents.csv", [])

    assert import_incidents_from_csv(csv_path, engine=engine) == 0

    with engine.connect() as conn:
        rows = conn.execute(
            text("SELECT name FROM sqlite_master WHERE type='table'")
        ).fetchall()
    assert "incidents" in {row[0] for row in rows}
