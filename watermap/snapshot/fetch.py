"""Pull a read-only snapshot of applications and layer objects from the dispatch API."""

from __future__ import annotations

import os
from pathlib import Path

from watermap.common.clock import utc_timestamp_iso
from watermap.common.errors import ConfigError, SnapshotError
from watermap.common.fs import write_json
from watermap.common.http import HttpClient, TimeoutConfig

APPLICATIONS_PATH = "/applications"
LAYER_OBJECTS_PATH = "/map/layers/objects"


def snapshot_path(data_dir: Path, snapshot_config: dict) -> Path:
    return data_dir / "raw" / snapshot_config["filename"]


def _build_client(api_config: dict) -> HttpClient:
    token = os.environ.get(api_config["token_env"]) or None
    timeout = float(api_config["timeout_seconds"])
    return HttpClient(token=token, timeout=TimeoutConfig(connect=min(10.0, timeout), read=timeout))


def _rows(payload: dict, key: str, url: str) -> list[dict]:
    rows = payload.get(key)
    if not isinstance(rows, list):
        raise SnapshotError(f"Response from {url} has no '{key}' list")
    return rows


def run_fetch(
    api_config: dict,
    snapshot_config: dict,
    data_dir: Path,
    run_id: str,
    client: HttpClient | None = None,
) -> dict:
    base_url = (api_config.get("base_url") or "").rstrip("/")
    if not base_url:
        raise ConfigError("api.base_url is not configured")

    owns_client = client is None
    client = client or _build_client(api_config)
    try:
        applications_url = base_url + APPLICATIONS_PATH
        objects_url = base_url + LAYER_OBJECTS_PATH
        applications = _rows(client.get_json(applications_url), "applications", applications_url)
        objects = _rows(client.get_json(objects_url), "objects", objects_url)
    finally:
        if owns_client:
            client.close()

    payload = {
        "run_id": run_id,
        "fetched_at": utc_timestamp_iso(),
        "source": base_url,
        "applications": applications,
        "objects": objects,
    }
    out_path = snapshot_path(data_dir, snapshot_config)
    write_json(out_path, payload)
    return {
        "path": str(out_path),
        "applications": len(applications),
        "objects": len(objects),
    }
