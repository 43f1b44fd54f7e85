"""Pipe length, midpoint and flow-arrow geometry."""

from __future__ import annotations

import math

from watermap.common.constants import EARTH_RADIUS_M, LENGTH_DECIMALS
from watermap.common.models import ArrowPlacement, Point, Polyline, is_valid_point

MIN_ARROWS = 2
MAX_ARROWS = 5


def haversine_m(a: Point, b: Point) -> float:
    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    d_lat = lat2 - lat1
    d_lon = math.radians(b.lon - a.lon)
    h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def _segment_lengths(vertices: tuple[Point, ...]) -> list[float]:
    return [haversine_m(start, end) for start, end in zip(vertices, vertices[1:])]


def compute_polyline_length(polyline: Polyline | None) -> float | None:
    """Ground-track length in metres, rounded to centimetres.

    None for fewer than two vertices or any unusable vertex.
    """
    if polyline is None or len(polyline.vertices) < 2:
        return None
    if not all(is_valid_point(v) for v in polyline.vertices):
        return None
    return round(sum(_segment_lengths(polyline.vertices)), LENGTH_DECIMALS)


def display_pipe_length(pipe_length: float | None, polyline: Polyline | None) -> float | None:
    if pipe_length is not None and math.isfinite(pipe_length) and pipe_length > 0:
        return pipe_length
    return compute_polyline_length(polyline)


def _interpolate(start: Point, end: Point, fraction: float) -> Point:
    return Point(
        lat=start.lat + (end.lat - start.lat) * fraction,
        lon=start.lon + (end.lon - start.lon) * fraction,
    )


def line_midpoint(polyline: Polyline | None) -> Point | None:
    """Point half way along the line, measured with haversine segment lengths."""
    if polyline is None:
        return None
    vertices = tuple(v for v in polyline.vertices if is_valid_point(v))
    if not vertices:
        return None
    if len(vertices) == 1:
        return vertices[0]

    lengths = _segment_lengths(vertices)
    half = sum(lengths) / 2
    if half == 0:
        return vertices[0]

    travelled = 0.0
    for index, length in enumerate(lengths):
        if length > 0 and half <= travelled + length:
            return _interpolate(vertices[index], vertices[index + 1], (half - travelled) / length)
        travelled += length
    return vertices[-1]


def flow_rotation(polyline: Polyline) -> float:
    """Icon rotation for the first-to-last direction, degrees in [0, 360)."""
    first = polyline.vertices[0]
    last = polyline.vertices[-1]
    angle = math.degrees(math.atan2(last.lon - first.lon, last.lat - first.lat))
    return (90 - angle) % 360


def arrow_placements(polyline: Polyline | None) -> list[ArrowPlacement]:
    if polyline is None:
        return []
    vertices = tuple(v for v in polyline.vertices if is_valid_point(v))
    if len(vertices) < 2:
        return []

    # Planar degree lengths: arrows are a display hint, not a measurement.
    lengths = [math.hypot(e.lat - s.lat, e.lon - s.lon) for s, e in zip(vertices, vertices[1:])]
    total = sum(lengths)
    if total == 0:
        return []

    rotation = flow_rotation(Polyline(vertices=vertices))
    count = max(MIN_ARROWS, min(MAX_ARROWS, len(vertices) // 2))
    placements = []
    for i in range(1, count + 1):
        target = total * i / (count + 1)
        travelled = 0.0
        for index, length in enumerate(lengths):
            last_segment = index == len(lengths) - 1
            if length > 0 and (target <= travelled + length or last_segment):
                point = _interpolate(vertices[index], vertices[index + 1], (target - travelled) / length)
                placements.append(ArrowPlacement(point=point, rotation=rotation))
                break
            travelled += length
    return placements
