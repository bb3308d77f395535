from __future__ import annotations

from sqlalchemy import Column, DateTime, Float, Index, MetaData, Table, Text

metadata = MetaData()

incidents_table = Table(
    "incidents",
    metadata,
    Column("id", Text, primary_key=True),
    Column("title", Text, nullable=False),
    Column("description", Text, nullable=False),
    Column("type", Text, nullable=False),
    Column("status", Text, nullable=False),
    Column("lat", Float, nullable=False),
    Column("lon", Float, nullable=False),
    Column("address", Text),
    Column("image_url", Text),
    Column("user_id", Text),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
    Index("ix_incidents_lat_lon", "lat", "lon"),
    Index("ix_incidents_created_at", "created_at"),
)
