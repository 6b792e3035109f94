"""Periodic scheduler that enqueues the seeds of due crawl tasks."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from scripts import pipeline_runtime
from src.config.logging_config import get_logger
from src.config.settings import get_settings
from src.domain.exceptions import InvalidTaskWindowError
from src.domain.task_schedule import validate_schedule
from src.use_cases.pipeline_factories import build_pipeline_components, create_task_scheduler

logger = get_logger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the recurring crawl task scheduler")
    parser.add_argument(
        "--interval-seconds",
        type=float,
        default=300.0,
        help="Interval between scheduling iterations",
    )
    parser.add_argument(
        "--seeds-dir",
        default=None,
        help="Directory holding seed url lists (defaults to settings)",
    )
    parser.add_argument(
        "--metrics-port",
        type=int,
        default=None,
        help="Prometheus exporter port (defaults to settings)",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit logs in JSON format",
    )
    parser.add_argument(
        "--run-once",
        action="store_true",
        help="Run a single scheduling iteration and exit",
    )
    args = parser.parse_args(argv)
    if args.interval_seconds <= 0:
        parser.error("--interval-seconds must be greater than 0")
    return args


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    settings = get_settings()
    pipeline_runtime.initialize_logging(settings, json_logs=args.json_logs)

    try:
        validate_schedule()
    except InvalidTaskWindowError as exc:
        logger.error("task_schedule_invalid", error=str(exc))
        return 1

    pipeline_runtime.start_metrics(settings, args.metrics_port)

    controller = pipeline_runtime.ShutdownController()
    controller.install()

    components = build_pipeline_components(settings=settings)
    schedule_once = create_task_scheduler(
        settings=settings,
        pool=components.pool,
        seeds_dir=args.seeds_dir,
        pending=components.pending,
    )

    pipeline_runtime.run_scheduler_loop(
        controller=controller,
        interval_seconds=args.interval_seconds,
        run_once=args.run_once,
        action=schedule_once,
    )

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
