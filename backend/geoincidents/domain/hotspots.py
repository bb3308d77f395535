"""
Greedy hotspot detection over reported incidents.

Incidents are visited most recent first. Each unassigned incident seeds a
neighbourhood of the still-unassigned incidents closer than ``threshold_m``; a
neighbourhood of at least ``min_cluster_size`` becomes a hotspot and its members
leave the pool. The pass is not transitive and depends on visit order, so the
recency sort is part of the contract.

Tunable via env (read by ``HotspotConfig.from_env``):
- HOTSPOT_THRESHOLD_M: linkage distance in meters (default 1000).
- HOTSPOT_MIN_SIZE: minimum members per hotspot (default 2).
- HOTSPOT_MIN_RADIUS_M: floor for the reported radius (default 300).
- HOTSPOT_RISK_BANDS: comma-separated low,medium,high maxima (default 3,5,10).
"""

from __future__ import annotations

import logging
import math
import os
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Tuple

from .geo import haversine_m
from .models import Hotspot, Incident, RiskLevel

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD_M = 1000.0
DEFAULT_MIN_CLUSTER_SIZE = 2
DEFAULT_MIN_RADIUS_M = 300.0


@dataclass(frozen=True)
class RiskBands:
    low_max: int = 3
    medium_max: int = 5
    high_max: int = 10

    def __post_init__(self):
        if not (0 < self.low_max < self.medium_max < self.high_max):
            raise ValueError(
                f"risk bands must be strictly increasing and positive: "
                f"{self.low_max}, {self.medium_max}, {self.high_max}"
            )


@dataclass(frozen=True)
class HotspotConfig:
    threshold_m: float = DEFAULT_THRESHOLD_M
    min_cluster_size: int = DEFAULT_MIN_CLUSTER_SIZE
    min_radius_m: float = DEFAULT_MIN_RADIUS_M
    risk_bands: RiskBands = field(default_factory=RiskBands)

    def __post_init__(self):
        if not (math.isfinite(self.threshold_m) and math.isfinite(self.min_radius_m)):
            raise ValueError(f"distances must be finite: {self.threshold_m}, {self.min_radius_m}")
        if self.threshold_m <= 0:
            raise ValueError(f"threshold_m must be positive: {self.threshold_m}")
        if self.min_cluster_size < 2:
            raise ValueError(f"min_cluster_size must be at least 2: {self.min_cluster_size}")
        if self.min_radius_m < 0:
            raise ValueError(f"min_radius_m must not be negative: {self.min_radius_m}")

    @classmethod
    def from_env(cls) -> "HotspotConfig":
        return cls(
            threshold_m=_env_float("HOTSPOT_THRESHOLD_M", DEFAULT_THRESHOLD_M, minimum=0.0, strict=True),
            min_cluster_size=_env_int("HOTSPOT_MIN_SIZE", DEFAULT_MIN_CLUSTER_SIZE, minimum=2),
            min_radius_m=_env_float("HOTSPOT_MIN_RADIUS_M", DEFAULT_MIN_RADIUS_M, minimum=0.0),
            risk_bands=_env_bands("HOTSPOT_RISK_BANDS"),
        )


def _env_float(name: str, default: float, *, minimum: float, strict: bool = False) -> float:
    v = os.environ.get(name)
    if v is None or v.strip() == "":
        return default
    try:
        value = float(v.strip())
    except ValueError:
        logger.warning("ignoring %s=%r: not a number", name, v)
        return default
    if not math.isfinite(value):
        logger.warning("ignoring %s=%r: not finite", name, v)
        return default
    if value < minimum or (strict and value == minimum):
        logger.warning("ignoring %s=%r: out of range", name, v)
        return default
    return value


def _env_int(name: str, default: int, *, minimum: int) -> int:
    v = os.environ.get(name)
    if v is None or v.strip() == "":
        return default
    try:
        value = int(v.strip())
    except ValueError:
        logger.warning("ignoring %s=%r: not an integer", name, v)
        return default
    if value < minimum:
        logger.warning("ignoring %s=%r: below %d", name, v, minimum)
        return default
    return value


def _env_bands(name: str) -> RiskBands:
    v = os.environ.get(name)
    if v is None or v.strip() == "":
        return RiskBands()
    parts = [p.strip() for p in v.split(",") if p.strip()]
    try:
        if len(parts) != 3:
            raise ValueError("expected three values")
        return RiskBands(*(int(p) for p in parts))
    except ValueError as exc:
        logger.warning("ignoring %s=%r: %s", name, v, exc)
        return RiskBands()


def determine_risk_level(count: int, bands: Optional[RiskBands] = None) -> RiskLevel:
    bands = bands or RiskBands()
    if count <= bands.low_max:
        return RiskLevel.LOW
    if count <= bands.medium_max:
        return RiskLevel.MEDIUM
    if count <= bands.high_max:
        return RiskLevel.HIGH
    return RiskLevel.CRITICAL


def count_by_type(incidents: Iterable[Incident]) -> Dict[str, int]:
    counts = Counter(incident.type.value for incident in incidents)
    return dict(counts)


def _to_utc_naive(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def sort_by_recency(incidents: Iterable[Incident]) -> List[Incident]:
    """Most recent first; equal timestamps keep their input order."""
    return sorted(incidents, key=lambda incident: _to_utc_naive(incident.created_at), reverse=True)


def _centroid(members: Tuple[Incident, ...]) -> Tuple[float, float]:
    n = len(members)
    return (
        sum(m.lat for m in members) / n,
        sum(m.lon for m in members) / n,
    )


def _build_hotspot(members: Tuple[Incident, ...], config: HotspotConfig) -> Hotspot:
    center = _centroid(members)
    spread = max(haversine_m(center[0], center[1], m.lat, m.lon) for m in members)
    return Hotspot(
        center=center,
        incidents=members,
        radius_m=max(config.min_radius_m, spread),
        risk_level=determine_risk_level(len(members), config.risk_bands),
        counts_by_type=count_by_type(members),
    )


def compute_hotspots(
    incidents: Iterable[Incident],
    config: Optional[HotspotConfig] = None,
) -> List[Hotspot]:
    config = config or HotspotConfig()
    ordered = sort_by_recency(incidents)
    processed: set[str] = set()
    hotspots: List[Hotspot] = []

    for seed in ordered:
        if seed.id in processed:
            continue
        # includes the seed itself (distance 0); members keep recency order
        neighbours = tuple(
            candidate
            for candidate in ordered
            if candidate.id not in processed
            and haversine_m(seed.lat, seed.lon, candidate.lat, candidate.lon) < config.threshold_m
        )
        if len(neighbours) < config.min_cluster_size:
            continue
        processed.update(member.id for member in neighbours)
        hotspots.append(_build_hotspot(neighbours, config))

    logger.debug(
        "computed %d hotspots from %d incidents (threshold=%.1fm, min_size=%d)",
        len(hotspots),
        len(ordered),
        config.threshold_m,
        config.min_cluster_size,
    )
    return hotspots


def incidents_in_hotspot(
    incidents: Iterable[Incident],
    center: Tuple[float, float],
    radius_m: float,
) -> List[Incident]:
    """Incidents whose distance to ``center`` is at most ``radius_m``."""
    return [
        incident
        for incident in incidents
        if haversine_m(center[0], center[1], incident.lat, incident.lon) <= radius_m
    ]
