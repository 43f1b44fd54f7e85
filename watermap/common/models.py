"""Data models shared by the geo components and pipeline stages."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

from watermap.common.constants import CATEGORY_SEWER, CATEGORY_WATER


@dataclass(frozen=True)
class Point:
    lat: float | None
    lon: float | None

    def to_geojson(self) -> list[float | None]:
        return [self.lon, self.lat]

    def to_dict(self) -> dict[str, float | None]:
        return {"lat": self.lat, "lon": self.lon}


def is_valid_point(point: Point | None) -> bool:
    """True when the point has finite WGS-84 coordinates inside their ranges."""
    if point is None:
        return False
    lat, lon = point.lat, point.lon
    if lat is None or lon is None:
        return False
    try:
        if not (math.isfinite(lat) and math.isfinite(lon)):
            return False
    except TypeError:
        return False
    return -90 <= lat <= 90 and -180 <= lon <= 180


@dataclass(frozen=True)
class Polyline:
    vertices: tuple[Point, ...]
    line_id: Any = None

    def __len__(self) -> int:
        return len(self.vertices)


@dataclass(frozen=True)
class Team:
    team_id: Any
    name: str


@dataclass(frozen=True)
class ApplicationRecord:
    application_id: Any
    point: Point | None
    status: str
    team: Team | None = None
    line_id: Any = None


@dataclass(frozen=True)
class LayerObject:
    object_id: Any
    layer_type: str | None
    object_type: str | None
    point: Point | None = None
    polyline: Polyline | None = None
    pipe_length: float | None = None
    pipe_size: str | None = None
    pipe_material: str | None = None
    balance_delimitation: str | None = None
    valves: tuple[dict, ...] = ()


@dataclass(frozen=True)
class AssociationResult:
    is_near: bool
    min_distance: float | None


@dataclass
class ClusterGroup:
    key: tuple[int, int]
    lat: float
    lon: float
    applications: list[ApplicationRecord] = field(default_factory=list)
    category_counts: dict[str, int] = field(default_factory=dict)

    @property
    def count(self) -> int:
        return len(self.applications)

    @property
    def water_count(self) -> int:
        return self.category_counts.get(CATEGORY_WATER, 0)

    @property
    def sewer_count(self) -> int:
        return self.category_counts.get(CATEGORY_SEWER, 0)


@dataclass(frozen=True)
class ArrowPlacement:
    point: Point
    rotation: float
