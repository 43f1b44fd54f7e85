"""Grid-snapped grouping of applications that share a map location.

Each coordinate is divided by the tolerance and rounded half away from zero;
the pair of integers is the bucket key. The division runs in decimal on the
shortest repr of each float, so a coordinate written exactly on a cell
boundary (0.00015 at 0.0001) always lands in the outer cell.

This is quantisation, not agglomerative clustering: two points either side of
a cell boundary stay in separate groups even when they are closer to each
other than to their own cell mates.
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Iterable

from watermap.common.constants import DEFAULT_TEAM_CATEGORIES, STATUS_COMPLETED
from watermap.common.models import ApplicationRecord, ClusterGroup, is_valid_point

CategoryFn = Callable[[ApplicationRecord], "str | None"]


def _to_decimal(value: float | Decimal) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(repr(float(value)))


def round_half_away_from_zero(value: float | Decimal) -> int:
    # ROUND_HALF_UP in decimal rounds ties away from zero for both signs.
    return int(_to_decimal(value).to_integral_value(rounding=ROUND_HALF_UP))


def bucket_key(lat: float, lon: float, tolerance_degrees: float) -> tuple[int, int]:
    step = _to_decimal(tolerance_degrees)
    return (
        round_half_away_from_zero(_to_decimal(lat) / step),
        round_half_away_from_zero(_to_decimal(lon) / step),
    )


def team_category_fn(team_categories: dict[str, str] | None = None) -> CategoryFn:
    categories = DEFAULT_TEAM_CATEGORIES if team_categories is None else team_categories

    def _category(application: ApplicationRecord) -> str | None:
        if application.team is None:
            return None
        return categories.get(application.team.name, application.team.name)

    return _category


def active_applications(applications: Iterable[ApplicationRecord]) -> list[ApplicationRecord]:
    return [app for app in applications if app.status != STATUS_COMPLETED]


def group_by_location(
    applications: Iterable[ApplicationRecord],
    tolerance_degrees: float,
    category_of: CategoryFn | None = None,
) -> list[ClusterGroup]:
    if not math.isfinite(tolerance_degrees) or tolerance_degrees <= 0:
        raise ValueError(f"tolerance_degrees must be positive, got {tolerance_degrees!r}")
    category_of = category_of or team_category_fn()

    groups: dict[tuple[int, int], ClusterGroup] = {}
    for application in applications:
        point = application.point
        if not is_valid_point(point):
            continue

        key = bucket_key(point.lat, point.lon, tolerance_degrees)
        group = groups.get(key)
        if group is None:
            group = ClusterGroup(key=key, lat=point.lat, lon=point.lon)
            groups[key] = group
        group.applications.append(application)

        category = category_of(application)
        if category:
            group.category_counts[category] = group.category_counts.get(category, 0) + 1

    return list(groups.values())
