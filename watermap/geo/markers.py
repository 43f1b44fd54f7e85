"""Marker kinds for map pins and cluster badges, and pipe highlighting."""

from __future__ import annotations

from typing import Iterable, Sequence

from watermap.common.constants import (
    CATEGORY_SEWER,
    CATEGORY_WATER,
    STATUS_IN_PROGRESS,
    STATUS_NEW,
)
from watermap.common.models import ApplicationRecord, ClusterGroup, Polyline
from watermap.geo.association import is_point_near_polyline
from watermap.geo.clustering import CategoryFn, active_applications, team_category_fn

NEW_UNASSIGNED = "new_unassigned"


def _in_progress_kind(category: str) -> str:
    return f"{category}_in_progress"


def application_marker_kind(application: ApplicationRecord, category_of: CategoryFn | None = None) -> str:
    """Pin kind for one application.

    Without a team the pin is ``new_unassigned``. Any assigned team that is not
    water is painted as sewer.
    """
    category_of = category_of or team_category_fn()
    category = category_of(application)
    if category is None:
        return NEW_UNASSIGNED
    kind = CATEGORY_WATER if category == CATEGORY_WATER else CATEGORY_SEWER
    if application.status == STATUS_IN_PROGRESS:
        return _in_progress_kind(kind)
    return kind


def group_marker_kind(group: ClusterGroup, category_of: CategoryFn | None = None) -> str:
    category_of = category_of or team_category_fn()
    in_progress = {CATEGORY_WATER: 0, CATEGORY_SEWER: 0}
    for application in group.applications:
        category = category_of(application)
        if category in in_progress and application.status == STATUS_IN_PROGRESS:
            in_progress[category] += 1

    has_water = group.water_count > 0
    has_sewer = group.sewer_count > 0
    if has_water and has_sewer:
        if in_progress[CATEGORY_WATER] or in_progress[CATEGORY_SEWER]:
            if in_progress[CATEGORY_WATER] > in_progress[CATEGORY_SEWER]:
                return _in_progress_kind(CATEGORY_WATER)
            return _in_progress_kind(CATEGORY_SEWER)
        return CATEGORY_WATER
    if has_water:
        return _in_progress_kind(CATEGORY_WATER) if in_progress[CATEGORY_WATER] else CATEGORY_WATER
    if has_sewer:
        return _in_progress_kind(CATEGORY_SEWER) if in_progress[CATEGORY_SEWER] else CATEGORY_SEWER
    return NEW_UNASSIGNED


def lines_with_open_applications(
    lines: Sequence[Polyline],
    applications: Iterable[ApplicationRecord],
    tolerance: float,
    *,
    units: str = "degrees",
) -> set:
    """Ids of lines carrying at least one application that is not completed.

    An application with an explicit ``line_id`` is matched by id only; the rest
    fall back to proximity.
    """
    open_apps = active_applications(applications)
    flagged = set()
    for line in lines:
        for application in open_apps:
            if application.line_id is not None:
                matched = application.line_id == line.line_id
            else:
                matched = is_point_near_polyline(application.point, line, tolerance, units=units)
            if matched:
                flagged.add(line.line_id)
                break
    return flagged


def new_unassigned_count(applications: Iterable[ApplicationRecord], category_of: CategoryFn | None = None) -> int:
    category_of = category_of or team_category_fn()
    return sum(1 for app in applications if app.status == STATUS_NEW and category_of(app) is None)
