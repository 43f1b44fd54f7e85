"""Storage-boundary conversion of persisted rows and GeoJSON into typed models.

GeoJSON stores positions as ``[longitude, latitude]`` while every model in
this package is ``Point(lat, lon)``. The swap happens here and nowhere else.
"""

from __future__ import annotations

import math
from typing import Any

from pyproj import CRS, Transformer

from watermap.common.models import ApplicationRecord, LayerObject, Point, Polyline, Team, is_valid_point

WGS84_EPSG = 4326


def safe_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(result):
        return None
    return result


def to_wgs84(lat: float, lon: float, source_epsg: int) -> tuple[float, float] | None:
    if source_epsg == WGS84_EPSG:
        return lat, lon
    try:
        transformer = Transformer.from_crs(CRS.from_epsg(source_epsg), CRS.from_epsg(WGS84_EPSG), always_xy=True)
        transformed_lon, transformed_lat = transformer.transform(lon, lat)
    except Exception:
        return None
    return transformed_lat, transformed_lon


def point_from_lat_lon(lat: Any, lon: Any, source_epsg: int = WGS84_EPSG) -> Point | None:
    lat_f = safe_float(lat)
    lon_f = safe_float(lon)
    if lat_f is None or lon_f is None:
        return None
    if source_epsg != WGS84_EPSG:
        transformed = to_wgs84(lat_f, lon_f, source_epsg)
        if transformed is None:
            return None
        lat_f, lon_f = transformed
    point = Point(lat=lat_f, lon=lon_f)
    return point if is_valid_point(point) else None


def point_from_geojson_coordinates(position: Any, source_epsg: int = WGS84_EPSG) -> Point | None:
    if not isinstance(position, (list, tuple)) or len(position) < 2:
        return None
    lon, lat = position[0], position[1]
    return point_from_lat_lon(lat, lon, source_epsg)


def point_from_geojson(geojson: dict | None, source_epsg: int = WGS84_EPSG) -> Point | None:
    if not isinstance(geojson, dict) or geojson.get("type") != "Point":
        return None
    return point_from_geojson_coordinates(geojson.get("coordinates"), source_epsg)


def polyline_from_geojson(geojson: dict | None, line_id: Any = None, source_epsg: int = WGS84_EPSG) -> Polyline | None:
    if not isinstance(geojson, dict) or geojson.get("type") != "LineString":
        return None
    positions = geojson.get("coordinates") or []
    vertices = []
    for position in positions:
        point = point_from_geojson_coordinates(position, source_epsg)
        if point is not None:
            vertices.append(point)
    if not vertices:
        return None
    return Polyline(vertices=tuple(vertices), line_id=line_id)


def _team_from_row(row: dict) -> Team | None:
    team = row.get("team")
    if isinstance(team, dict) and team.get("name"):
        return Team(team_id=team.get("id"), name=str(team["name"]))
    if row.get("team_name"):
        return Team(team_id=row.get("team_id"), name=str(row["team_name"]))
    return None


def application_from_row(row: dict, source_epsg: int = WGS84_EPSG) -> ApplicationRecord:
    """Build an application from either the API shape or a raw database row."""
    coordinates = row.get("coordinates")
    if isinstance(coordinates, dict):
        point = point_from_lat_lon(coordinates.get("lat"), coordinates.get("lng", coordinates.get("lon")), source_epsg)
    else:
        point = point_from_lat_lon(row.get("latitude"), row.get("longitude"), source_epsg)

    return ApplicationRecord(
        application_id=row.get("id"),
        point=point,
        status=str(row.get("status") or ""),
        team=_team_from_row(row),
        line_id=row.get("line_id") or None,
    )


def layer_object_from_row(row: dict, source_epsg: int = WGS84_EPSG) -> LayerObject:
    geojson = row.get("geojson")
    object_id = row.get("id")
    pipe_length = safe_float(row.get("pipe_length"))
    return LayerObject(
        object_id=object_id,
        layer_type=row.get("layer_type"),
        object_type=row.get("object_type"),
        point=point_from_geojson(geojson, source_epsg),
        polyline=polyline_from_geojson(geojson, line_id=object_id, source_epsg=source_epsg),
        pipe_length=pipe_length,
        pipe_size=row.get("pipe_size") or None,
        pipe_material=row.get("pipe_material") or None,
        balance_delimitation=row.get("balance_delimitation") or None,
        valves=tuple(valve for valve in row.get("valves") or () if isinstance(valve, dict)),
    )
