from __future__ import annotations

from pathlib import Path

import pytest

from watermap.common.fs import write_json

REPO_CONFIG_DIR = Path(__file__).resolve().parents[1] / "config"


def _snapshot_payload() -> dict:
    return {
        "run_id": "run-fixture",
        "applications": [
            {
                "id": 1,
                "status": "in_progress",
                "coordinates": {"lat": 56.4767, "lng": 53.8036},
                "team": {"id": 1, "name": "водосеть"},
                "line_id": None,
            },
            {
                "id": 2,
                "status": "new",
                "coordinates": {"lat": 56.4768, "lng": 53.8037},
                "team": {"id": 1, "name": "водосеть"},
                "line_id": None,
            },
            {
                "id": 3,
                "status": "new",
                "latitude": "56.4800",
                "longitude": "53.8100",
                "team_id": 2,
                "team_name": "канализация",
                "line_id": 11,
            },
            {
                "id": 4,
                "status": "new",
                "coordinates": None,
                "team": None,
                "line_id": None,
            },
            {
                "id": 5,
                "status": "completed",
                "coordinates": {"lat": 56.4900, "lng": 53.8200},
                "team": {"id": 2, "name": "канализация"},
                "line_id": None,
            },
        ],
        "objects": [
            {
                "id": 10,
                "layer_type": "water",
                "object_type": "line",
                "geojson": {"type": "LineString", "coordinates": [[53.8030, 56.4767], [53.8050, 56.4767]]},
                "pipe_length": None,
                "pipe_size": "110",
                "pipe_material": "ПЭ",
            },
            {
                "id": 11,
                "layer_type": "sewer",
                "object_type": "line",
                "geojson": {"type": "LineString", "coordinates": [[53.8200, 56.4900], [53.8300, 56.4900]]},
                "pipe_length": "250.5",
            },
            {
                "id": 12,
                "layer_type": "water",
                "object_type": "well",
                "geojson": {"type": "Point", "coordinates": [53.8040, 56.4770]},
                "valves": [{"id": 1, "valve_type": "gate", "status": "working"}],
            },
        ],
    }


@pytest.fixture
def config_dir() -> Path:
    return REPO_CONFIG_DIR


@pytest.fixture
def snapshot_data_dir(tmp_path: Path) -> Path:
    data_dir = tmp_path / "data"
    write_json(data_dir / "raw" / "snapshot.json", _snapshot_payload())
    return data_dir
