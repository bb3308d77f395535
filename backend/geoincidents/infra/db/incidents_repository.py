from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import and_, delete, insert, or_, select, update
from sqlalchemy.engine import Engine

from geoincidents.domain.geo import BoundingBox
from geoincidents.domain.models import Incident, IncidentStatus, IncidentType, validate_coordinates

from .tables import incidents_table


INCIDENT_COLUMNS = [
    "title",
    "description",
    "type",
    "status",
    "lat",
    "lon",
    "address",
    "image_url",
    "user_id",
]


class IncidentsRepository:
    def __init__(self, engine: Engine):
        if engine is None:
            raise ValueError("engine is required")
        self.engine = engine

    def create_incident(self, incident_data: Dict[str, Any]) -> Incident:
        resolved = {col: incident_data.get(col) for col in INCIDENT_COLUMNS}
        resolved["lat"], resolved["lon"] = validate_coordinates(resolved["lat"], resolved["lon"])
        resolved["type"] = IncidentType(resolved["type"]).value
        resolved["status"] = IncidentStatus(resolved.get("status") or IncidentStatus.PENDING).value
        resolved["title"] = resolved.get("title") or ""
        resolved["description"] = resolved.get("description") or ""
        now = datetime.now(timezone.utc)
        incident_id = incident_data.get("id") or uuid.uuid4().hex
        created_at = incident_data.get("created_at") or now
        updated_at = incident_data.get("updated_at") or created_at
        with self.engine.begin() as conn:
            conn.execute(
                insert(incidents_table).values(
                    id=incident_id,
                    **resolved,
                    created_at=created_at,
                    updated_at=updated_at,
                )
            )
        return self.get_incident(incident_id)

    def get_incident(self, incident_id: str) -> Optional[Incident]:
        with self.engine.begin() as conn:
            row = conn.execute(
                select(incidents_table).where(incidents_table.c.id == incident_id)
            ).mappings().first()
        return _row_to_incident(row) if row else None

    def list_incidents(self) -> List[Incident]:
        return self._select()

    def list_user_incidents(self, user_id: str) -> List[Incident]:
        return self._select(incidents_table.c.user_id == user_id)

    def list_incidents_in_box(self, box: BoundingBox) -> List[Incident]:
        """Coarse range query; callers still apply the exact distance filter."""
        filters = [
            incidents_table.c.lat >= box.min_lat,
            incidents_table.c.lat <= box.max_lat,
        ]
        if not box.is_lon_unbounded:
            filters.append(
                or_(
                    *(
                        and_(incidents_table.c.lon >= lo, incidents_table.c.lon <= hi)
                        for lo, hi in box.lon_ranges
                    )
                )
            )
        return self._select(*filters)

    def update_status(self, incident_id: str, status: IncidentStatus | str) -> Optional[Incident]:
        status = IncidentStatus(status)
        with self.engine.begin() as conn:
            result = conn.execute(
                update(incidents_table)
                .where(incidents_table.c.id == incident_id)
                .values(status=status.value, updated_at=datetime.now(timezone.utc))
            )
        if result.rowcount == 0:
            return None
        return self.get_incident(incident_id)

    def delete_incident(self, incident_id: str) -> bool:
        with self.engine.begin() as conn:
            result = conn.execute(delete(incidents_table).where(incidents_table.c.id == incident_id))
        return result.rowcount > 0

    def _select(self, *filters) -> List[Incident]:
        stmt = select(incidents_table).order_by(
            incidents_table.c.created_at.desc(), incidents_table.c.id
        )
        if filters:
            stmt = stmt.where(*filters)
        with self.engine.begin() as conn:
            rows = conn.execute(stmt).mappings().all()
        return [_row_to_incident(row) for row in rows]


def _row_to_incident(row) -> Incident:
    return Incident(
        id=row["id"],
        lat=row["lat"],
        lon=row["lon"],
        type=row["type"],
        created_at=row["created_at"],
        title=row["title"],
        description=row["description"],
        status=row["status"],
        address=row.get("address"),
        image_url=row.get("image_url"),
        user_id=row.get("user_id"),
        updated_at=row.get("updated_at"),
    )
