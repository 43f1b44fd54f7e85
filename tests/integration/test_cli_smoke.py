import json
from pathlib import Path

import pytest

from watermap.cli import parse_args, run_command
from watermap.common.fs import read_json


@pytest.mark.integration
def test_cli_derive_generates_expected_artifacts(config_dir: Path, snapshot_data_dir: Path):
    args = parse_args(
        [
            "derive",
            "--config-dir",
            str(config_dir),
            "--data-dir",
            str(snapshot_data_dir),
            "--run-id",
            "run-test",
        ]
    )

    exit_code = run_command(args)

    assert exit_code == 0
    assert (snapshot_data_dir / "out" / "clusters.json").exists()
    assert (snapshot_data_dir / "out" / "lines.json").exists()
    assert (snapshot_data_dir / "out" / "application_links.json").exists()

    summary = read_json(snapshot_data_dir / "out" / "reports" / "run_summary.json")
    assert summary["status"] == "partial"
    assert summary["warnings"] == ["APPLICATIONS_WITHOUT_LOCATION"]

    log_lines = (snapshot_data_dir / "run_meta" / "run-test.log.jsonl").read_text(encoding="utf-8").splitlines()
    events = [json.loads(line)["event"] for line in log_lines]
    assert events == ["STAGE_START", "STAGE_END"]
