"""Configuration loading and validation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from watermap.common.errors import ConfigError
from watermap.common.fs import read_yaml
from watermap.common.schema import validate_settings_config

SETTINGS_FILENAME = "settings.yml"


@dataclass(frozen=True)
class Settings:
    api: dict
    snapshot: dict
    association: dict
    clustering: dict
    teams: dict
    markers: dict

    @property
    def team_categories(self) -> dict[str, str]:
        return dict(self.teams["categories"])

    @property
    def palette(self) -> dict[str, str]:
        return dict(self.markers["palette"])


def _deep_merge(base: Any, overlay: Any) -> Any:
    if isinstance(base, dict) and isinstance(overlay, dict):
        merged = dict(base)
        for key, value in overlay.items():
            if key in merged:
                merged[key] = _deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged
    return overlay


def _load_yaml_with_overlay(path: Path, overlay_path: Path | None) -> dict:
    if not path.exists():
        raise ConfigError(f"Missing config file: {path}")
    base = read_yaml(path)
    if overlay_path is None or not overlay_path.exists():
        return base
    overlay = read_yaml(overlay_path)
    if overlay is None:
        return base
    if not isinstance(overlay, dict):
        raise ConfigError(f"Overlay config must be a mapping: {overlay_path}")
    return _deep_merge(base, overlay)


def load_settings(
    config_dir: Path,
    *,
    allow_unknown: bool = False,
    overlay_config_dir: Path | None = None,
) -> Settings:
    overlay_path = None
    if overlay_config_dir is not None:
        overlay_path = overlay_config_dir / SETTINGS_FILENAME
    cfg = _load_yaml_with_overlay(config_dir / SETTINGS_FILENAME, overlay_path)
    cfg = validate_settings_config(cfg, allow_unknown=allow_unknown)
    return Settings(
        api=cfg["api"],
        snapshot=cfg["snapshot"],
        association=cfg["association"],
        clustering=cfg["clustering"],
        teams=cfg["teams"],
        markers=cfg["markers"],
    )
