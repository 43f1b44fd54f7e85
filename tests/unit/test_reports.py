from pathlib import Path

from watermap.common.fs import read_json, write_json
from watermap.pipeline.reports import write_run_summary


def test_summary_is_error_without_stats(tmp_path: Path):
    payload = read_json(write_run_summary(tmp_path, run_id="run-1"))

    assert payload["status"] == "error"
    assert payload["errors"] == ["DERIVE_STATS_MISSING"]


def test_summary_is_partial_when_records_were_skipped(tmp_path: Path):
    write_json(
        tmp_path / "intermediate" / "derive_stats.json",
        {"applications_total": 3, "applications_without_location": 1, "lines_without_geometry": 0},
    )

    payload = read_json(write_run_summary(tmp_path, run_id="run-2"))

    assert payload["status"] == "partial"
    assert payload["warnings"] == ["APPLICATIONS_WITHOUT_LOCATION"]
    assert payload["stats"]["applications_total"] == 3


def test_summary_flags_wells_without_geometry(tmp_path: Path):
    write_json(tmp_path / "intermediate" / "derive_stats.json", {"points_total": 2, "points_without_geometry": 1})

    payload = read_json(write_run_summary(tmp_path, run_id="run-4"))

    assert payload["status"] == "partial"
    assert payload["warnings"] == ["POINTS_WITHOUT_GEOMETRY"]


def test_summary_success(tmp_path: Path):
    write_json(
        tmp_path / "intermediate" / "derive_stats.json",
        {"applications_without_location": 0, "lines_without_geometry": 0},
    )

    assert read_json(write_run_summary(tmp_path, run_id="run-3"))["status"] == "success"
