"""Derive cluster groups, pipe labels and highlight flags from a snapshot."""

from __future__ import annotations

from pathlib import Path

from watermap.common.config_loader import Settings
from watermap.common.errors import SnapshotError
from watermap.common.fs import read_json, write_json
from watermap.common.geometry import application_from_row, layer_object_from_row
from watermap.common.models import ClusterGroup, LayerObject, Polyline, is_valid_point
from watermap.geo.association import resolve_line_id
from watermap.geo.clustering import active_applications, group_by_location, team_category_fn
from watermap.geo.length import arrow_placements, compute_polyline_length, display_pipe_length, line_midpoint
from watermap.geo.markers import (
    application_marker_kind,
    group_marker_kind,
    lines_with_open_applications,
    new_unassigned_count,
)
from watermap.snapshot.fetch import snapshot_path

LINE_OBJECT_TYPE = "line"
POINT_OBJECT_TYPES = ("well", "chamber")


def _load_snapshot(path: Path) -> dict:
    if not path.exists():
        raise SnapshotError(f"Missing snapshot input: {path}")
    payload = read_json(path)
    if not isinstance(payload, dict):
        raise SnapshotError(f"Snapshot is not a JSON object: {path}")
    return payload


def _serialize_group(group: ClusterGroup, category_of, palette: dict[str, str]) -> dict:
    kind = group_marker_kind(group, category_of)
    return {
        "key": f"{group.key[0]}_{group.key[1]}",
        "lat": group.lat,
        "lon": group.lon,
        "count": group.count,
        "application_ids": [app.application_id for app in group.applications],
        "category_counts": dict(sorted(group.category_counts.items())),
        "water_count": group.water_count,
        "sewer_count": group.sewer_count,
        "marker_kind": kind,
        "marker_color": palette.get(kind),
    }


def _serialize_line(obj: LayerObject, highlighted: set) -> dict:
    midpoint = line_midpoint(obj.polyline)
    return {
        "id": obj.object_id,
        "layer_type": obj.layer_type,
        "pipe_size": obj.pipe_size,
        "pipe_material": obj.pipe_material,
        "balance_delimitation": obj.balance_delimitation,
        "computed_length_m": compute_polyline_length(obj.polyline),
        "display_length_m": display_pipe_length(obj.pipe_length, obj.polyline),
        "midpoint": midpoint.to_dict() if midpoint is not None else None,
        "arrows": [
            {"lat": arrow.point.lat, "lon": arrow.point.lon, "rotation": arrow.rotation}
            for arrow in arrow_placements(obj.polyline)
        ],
        "has_open_applications": obj.object_id in highlighted,
    }


def _serialize_point_object(obj: LayerObject) -> dict:
    valve_statuses: dict[str, int] = {}
    for valve in obj.valves:
        status = str(valve.get("status") or "unknown")
        valve_statuses[status] = valve_statuses.get(status, 0) + 1
    return {
        "id": obj.object_id,
        "layer_type": obj.layer_type,
        "object_type": obj.object_type,
        "point": obj.point.to_dict() if obj.point is not None else None,
        "valve_count": len(obj.valves),
        "valve_statuses": dict(sorted(valve_statuses.items())),
    }


def run_derive(settings: Settings, data_dir: Path, run_id: str) -> dict:
    snapshot = _load_snapshot(snapshot_path(data_dir, settings.snapshot))
    source_epsg = int(settings.snapshot["source_epsg"])
    tolerance = float(settings.association["tolerance"])
    units = settings.association["units"]
    category_of = team_category_fn(settings.team_categories)
    palette = settings.palette

    applications = [application_from_row(row, source_epsg) for row in snapshot.get("applications", [])]
    objects = [layer_object_from_row(row, source_epsg) for row in snapshot.get("objects", [])]

    line_objects = [obj for obj in objects if obj.object_type == LINE_OBJECT_TYPE]
    polylines: list[Polyline] = [obj.polyline for obj in line_objects if obj.polyline is not None]
    point_objects = [obj for obj in objects if obj.object_type in POINT_OBJECT_TYPES]

    clustered = applications if settings.clustering["include_completed"] else active_applications(applications)
    groups = group_by_location(clustered, float(settings.clustering["tolerance_degrees"]), category_of)
    highlighted = lines_with_open_applications(polylines, applications, tolerance, units=units)

    clusters_payload = {
        "tolerance_degrees": settings.clustering["tolerance_degrees"],
        "groups": [_serialize_group(group, category_of, palette) for group in groups],
    }
    lines_payload = {
        "lines": [_serialize_line(obj, highlighted) for obj in line_objects],
    }
    points_payload = {
        "points": [_serialize_point_object(obj) for obj in point_objects],
    }
    links_payload = {
        "links": [
            {
                "application_id": app.application_id,
                "line_id": resolve_line_id(app, polylines, tolerance, units=units),
                "explicit": app.line_id is not None,
                "marker_kind": application_marker_kind(app, category_of),
            }
            for app in applications
        ],
    }

    stats = {
        "run_id": run_id,
        "applications_total": len(applications),
        "applications_clustered": len(clustered),
        "applications_without_location": sum(1 for app in clustered if not is_valid_point(app.point)),
        "new_unassigned": new_unassigned_count(applications, category_of),
        "groups": len(groups),
        "objects_total": len(objects),
        "lines_total": len(line_objects),
        "lines_without_geometry": len(line_objects) - len(polylines),
        "lines_highlighted": len(highlighted),
        "points_total": len(point_objects),
        "points_without_geometry": sum(1 for obj in point_objects if obj.point is None),
        "valves_total": sum(len(obj.valves) for obj in point_objects),
    }

    write_json(data_dir / "out" / "clusters.json", clusters_payload)
    write_json(data_dir / "out" / "lines.json", lines_payload)
    write_json(data_dir / "out" / "points.json", points_payload)
    write_json(data_dir / "out" / "application_links.json", links_payload)
    write_json(data_dir / "intermediate" / "derive_stats.json", stats)
    return stats
