"""Minimal strict schema for the settings YAML."""

from __future__ import annotations

import math

from watermap.common.constants import ASSOCIATION_UNITS, MARKER_KINDS
from watermap.common.errors import ConfigError


def _assert_mapping(obj, ctx: str) -> None:
    if not isinstance(obj, dict):
        raise ConfigError(f"{ctx} must be a mapping")


def _assert_required_keys(obj: dict, required: set[str], ctx: str) -> None:
    _assert_mapping(obj, ctx)
    missing = required - set(obj)
    if missing:
        missing_str = ", ".join(sorted(missing))
        raise ConfigError(f"Missing keys in {ctx}: {missing_str}")


def _assert_no_unknown_keys(obj: dict, known: set[str], ctx: str, allow_unknown: bool) -> None:
    if allow_unknown:
        return
    unknown = set(obj) - known
    if unknown:
        unknown_str = ", ".join(sorted(unknown))
        raise ConfigError(f"Unknown keys in {ctx}: {unknown_str}")


def _assert_positive(value, ctx: str) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value) or value <= 0:
        raise ConfigError(f"{ctx} must be a positive number, got {value!r}")


def validate_settings_config(cfg: dict, *, allow_unknown: bool = False) -> dict:
    top_required = {"api", "snapshot", "association", "clustering", "teams", "markers"}
    _assert_required_keys(cfg, top_required, "settings")
    _assert_no_unknown_keys(cfg, top_required, "settings", allow_unknown)

    _assert_required_keys(cfg["api"], {"base_url", "token_env", "timeout_seconds"}, "api")
    _assert_positive(cfg["api"]["timeout_seconds"], "api.timeout_seconds")

    _assert_required_keys(cfg["snapshot"], {"filename", "source_epsg"}, "snapshot")
    if not isinstance(cfg["snapshot"]["source_epsg"], int):
        raise ConfigError("snapshot.source_epsg must be an integer EPSG code")

    _assert_required_keys(cfg["association"], {"tolerance", "units"}, "association")
    _assert_positive(cfg["association"]["tolerance"], "association.tolerance")
    if cfg["association"]["units"] not in ASSOCIATION_UNITS:
        raise ConfigError(f"association.units must be one of {', '.join(ASSOCIATION_UNITS)}")

    _assert_required_keys(cfg["clustering"], {"tolerance_degrees", "include_completed"}, "clustering")
    _assert_positive(cfg["clustering"]["tolerance_degrees"], "clustering.tolerance_degrees")

    _assert_required_keys(cfg["teams"], {"categories"}, "teams")
    _assert_mapping(cfg["teams"]["categories"], "teams.categories")

    _assert_required_keys(cfg["markers"], {"palette"}, "markers")
    palette = cfg["markers"]["palette"]
    _assert_required_keys(palette, set(MARKER_KINDS), "markers.palette")

    return cfg
