"""UTC clock used for run ids and log and snapshot timestamps."""

from __future__ import annotations

from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


def utc_timestamp_iso(now: datetime | None = None) -> str:
    return (now or utc_now()).isoformat(timespec="milliseconds")


def generate_run_id(now: datetime | None = None) -> str:
    """Sortable run id such as ``run-20240501T101500123456Z``."""
    return (now or utc_now()).strftime("run-%Y%m%dT%H%M%S%fZ")
