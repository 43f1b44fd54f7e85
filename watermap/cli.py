"""CLI entrypoint for the watermap dispatch geometry pipeline."""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

from watermap.common.clock import generate_run_id
from watermap.common.config_loader import Settings, load_settings
from watermap.common.constants import EXIT_HARD_FAIL, EXIT_PARTIAL, EXIT_SUCCESS, STAGES
from watermap.common.errors import ConfigError, WatermapError
from watermap.common.logging import build_logger, close_logger, log_event
from watermap.pipeline.derive import run_derive
from watermap.pipeline.reports import write_run_summary
from watermap.snapshot.fetch import run_fetch


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("command", choices=[*STAGES, "all"])
    parser.add_argument("--run-id", default=None)
    parser.add_argument("--config-dir", default="./config")
    parser.add_argument("--overlay-config-dir", default=None)
    parser.add_argument("--data-dir", default="./data")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--strict", action="store_true")
    return parser.parse_args(argv)


def execute_stage(stage: str, settings: Settings, data_dir: Path, run_id: str) -> dict:
    if stage == "fetch":
        return run_fetch(settings.api, settings.snapshot, data_dir, run_id)
    if stage == "derive":
        return run_derive(settings, data_dir, run_id)
    raise ValueError(f"Unknown stage: {stage}")


def run_command(args: argparse.Namespace) -> int:
    run_id = args.run_id or generate_run_id()
    data_dir = Path(args.data_dir)
    overlay_config_dir = Path(args.overlay_config_dir) if args.overlay_config_dir else None

    logger = build_logger(run_id, data_dir=data_dir, level=args.log_level)
    try:
        try:
            settings = load_settings(Path(args.config_dir), overlay_config_dir=overlay_config_dir)
        except ConfigError as exc:
            log_event(logger, str(exc), run_id=run_id, event="CONFIG_FAIL", status="error", error_code=exc.error_code)
            return EXIT_HARD_FAIL

        stages = STAGES if args.command == "all" else (args.command,)
        had_partial_failure = False

        for stage in stages:
            started = time.monotonic()
            log_event(logger, "stage start", run_id=run_id, stage=stage, event="STAGE_START", status="ok")
            try:
                result = execute_stage(stage, settings, data_dir, run_id)
            except WatermapError as exc:
                had_partial_failure = True
                log_event(
                    logger,
                    f"stage {stage} failed: {exc}",
                    run_id=run_id,
                    stage=stage,
                    event="STAGE_FAIL",
                    status="error",
                    error_code=exc.error_code,
                )
                if args.strict:
                    return EXIT_HARD_FAIL
                continue
            except Exception:
                logger.exception(
                    f"unexpected failure in stage {stage}",
                    extra={"run_id": run_id, "stage": stage, "event": "STAGE_FAIL", "status": "error", "error_code": "UNEXPECTED_ERROR"},
                )
                return EXIT_HARD_FAIL

            log_event(
                logger,
                "stage end",
                run_id=run_id,
                stage=stage,
                event="STAGE_END",
                status="ok",
                duration_ms=int((time.monotonic() - started) * 1000),
                rows_in=result.get("applications_total", result.get("applications")),
                rows_out=result.get("groups"),
            )

        if "derive" in stages:
            write_run_summary(data_dir, run_id=run_id)
        if had_partial_failure:
            return EXIT_PARTIAL
        return EXIT_SUCCESS
    finally:
        close_logger(logger)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    try:
        return run_command(args)
    except WatermapError:
        return EXIT_HARD_FAIL


if __name__ == "__main__":
    raise SystemExit(main())
