"""Run report aggregation."""

from __future__ import annotations

from pathlib import Path

from watermap.common.fs import read_json, write_json

SKIP_COUNTERS = ("applications_without_location", "lines_without_geometry", "points_without_geometry")


def write_run_summary(data_dir: Path, run_id: str) -> Path:
    stats_path = data_dir / "intermediate" / "derive_stats.json"
    warnings: list[str] = []
    errors: list[str] = []
    stats: dict = {}

    if stats_path.exists():
        stats = read_json(stats_path)
        for counter in SKIP_COUNTERS:
            if int(stats.get(counter, 0)) > 0:
                warnings.append(counter.upper())
    else:
        errors.append("DERIVE_STATS_MISSING")

    status = "success"
    if errors:
        status = "error"
    elif warnings:
        status = "partial"

    summary_path = data_dir / "out" / "reports" / "run_summary.json"
    payload = {
        "run_id": run_id,
        "status": status,
        "stats": stats,
        "warnings": warnings,
        "errors": errors,
    }
    write_json(summary_path, payload)
    return summary_path
