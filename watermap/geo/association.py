"""Point-to-polyline proximity used to tie applications to pipes.

Distances are Euclidean in ``(lat, lon)`` degree space unless ``units="meters"``
is requested, in which case the point and polyline are projected into a local
azimuthal equidistant CRS centred on the point and compared in metres.
"""

from __future__ import annotations

import math
from functools import lru_cache
from typing import Iterable, Sequence

from pyproj import CRS, Transformer

from watermap.common.models import ApplicationRecord, AssociationResult, Point, Polyline, is_valid_point

_Planar = tuple[float, float]

_WGS84 = CRS.from_epsg(4326)


def _planar_segment_distance(p: _Planar, a: _Planar, b: _Planar) -> float:
    px, py = p
    ax, ay = a
    bx, by = b
    dx = bx - ax
    dy = by - ay
    len_sq = dx * dx + dy * dy
    if len_sq == 0:
        return math.hypot(px - ax, py - ay)

    t = ((px - ax) * dx + (py - ay) * dy) / len_sq
    t = max(0.0, min(1.0, t))
    return math.hypot(px - (ax + t * dx), py - (ay + t * dy))


def _planar_min_distance(p: _Planar, vertices: Sequence[_Planar]) -> float | None:
    if not vertices:
        return None
    best = math.inf
    for start, end in zip(vertices, vertices[1:]):
        best = min(best, _planar_segment_distance(p, start, end))
    # Vertices are checked on their own so a single-vertex line still measures.
    for vertex in vertices:
        best = min(best, math.hypot(p[0] - vertex[0], p[1] - vertex[1]))
    return best


def _degree_coords(points: Iterable[Point]) -> list[_Planar]:
    return [(pt.lat, pt.lon) for pt in points if is_valid_point(pt)]


@lru_cache(maxsize=256)
def _local_transformer(lat: float, lon: float) -> Transformer:
    """WGS84 to an azimuthal equidistant plane in metres centred on ``(lat, lon)``."""
    local = CRS.from_dict({"proj": "aeqd", "lat_0": lat, "lon_0": lon, "datum": "WGS84", "units": "m"})
    return Transformer.from_crs(_WGS84, local, always_xy=True)


def _metre_coords(point: Point, vertices: Sequence[Point]) -> tuple[_Planar, list[_Planar]]:
    transformer = _local_transformer(float(point.lat), float(point.lon))
    projected = [transformer.transform(v.lon, v.lat) for v in vertices if is_valid_point(v)]
    return (0.0, 0.0), projected


def point_segment_distance(point: Point, start: Point, end: Point) -> float:
    """Distance in degrees from ``point`` to the segment ``start``-``end``."""
    return _planar_segment_distance((point.lat, point.lon), (start.lat, start.lon), (end.lat, end.lon))


def min_distance_to_polyline(point: Point | None, polyline: Polyline | None, *, units: str = "degrees") -> float | None:
    """Smallest distance from the point to any segment or vertex.

    Returns None when the point is unusable or the polyline has no valid vertex.
    """
    if not is_valid_point(point) or polyline is None:
        return None
    if units == "meters":
        origin, vertices = _metre_coords(point, polyline.vertices)
        return _planar_min_distance(origin, vertices)
    if units != "degrees":
        raise ValueError(f"Unknown distance units: {units}")
    return _planar_min_distance((point.lat, point.lon), _degree_coords(polyline.vertices))


def associate(point: Point | None, polyline: Polyline | None, tolerance: float, *, units: str = "degrees") -> AssociationResult:
    distance = min_distance_to_polyline(point, polyline, units=units)
    if distance is None:
        return AssociationResult(is_near=False, min_distance=None)
    within = math.isfinite(tolerance) and tolerance >= 0 and distance <= tolerance
    return AssociationResult(is_near=within, min_distance=distance)


def is_point_near_polyline(point: Point | None, polyline: Polyline | None, tolerance: float, *, units: str = "degrees") -> bool:
    return associate(point, polyline, tolerance, units=units).is_near


def resolve_line_id(
    application: ApplicationRecord,
    lines: Sequence[Polyline],
    tolerance: float,
    *,
    units: str = "degrees",
):
    """Line an application belongs to: explicit ``line_id`` first, then nearest within tolerance."""
    if application.line_id is not None:
        return application.line_id

    best_id = None
    best_distance = math.inf
    for line in lines:
        result = associate(application.point, line, tolerance, units=units)
        if result.is_near and result.min_distance < best_distance:
            best_id = line.line_id
            best_distance = result.min_distance
    return best_id
