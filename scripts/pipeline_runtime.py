"""Common runtime helpers for crawl dispatch scripts."""

from __future__ import annotations

import signal
import threading
from collections.abc import Callable, Iterable
from types import FrameType

from src.config.logging_config import get_logger, setup_logging
from src.config.settings import Settings
from src.observability.metrics import ensure_metrics_exporter

logger = get_logger(__name__)

SHUTDOWN_SIGNALS: tuple[signal.Signals, ...] = (signal.SIGTERM, signal.SIGINT)


class ShutdownController:
    """Stop flag set from signal handlers and polled by the scheduler loop."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def is_set(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: float) -> bool:
        return self._event.wait(timeout)

    def request(self, signum: int, frame: FrameType | None = None) -> None:
        logger.info("shutdown_signal_received", signal=signal.Signals(signum).name)
        self._event.set()

    def install(self, signums: Iterable[signal.Signals] = SHUTDOWN_SIGNALS) -> None:
        for signum in signums:
            signal.signal(signum, self.request)


def initialize_logging(settings: Settings, *, json_logs: bool = False) -> None:
    """Initialize structlog-based logging for scripts."""

    setup_logging(
        log_level=settings.log_level,
        json_logs=json_logs,
        instance_role=settings.instance_role,
    )
    logger.info("logging_initialized", level=settings.log_level, json_logs=json_logs)


def start_metrics(settings: Settings, port: int | None = None) -> int:
    """Start the prometheus exporter; returns the port it listens on."""

    metrics_port = port if port is not None else settings.metrics_port
    ensure_metrics_exporter(metrics_port)
    return metrics_port


def run_scheduler_loop(
    *,
    controller: ShutdownController,
    interval_seconds: float,
    run_once: bool,
    action: Callable[[], object],
) -> None:
    """Execute a scheduler callback at a fixed interval."""

    interval_seconds = max(0.1, interval_seconds)
    logger.info("scheduler_loop_started", interval=interval_seconds, run_once=run_once)
    iteration = 0
    while not controller.is_set():
        iteration += 1
        try:
            action()
        except Exception:  # noqa: BLE001
            logger.exception("scheduler_iteration_failed", iteration=iteration)
            if run_once:
                raise
        if run_once:
            break
        controller.wait(interval_seconds)

    logger.info("scheduler_loop_stopped", iterations=iteration)


__all__ = [
    "SHUTDOWN_SIGNALS",
    "ShutdownController",
    "initialize_logging",
    "run_scheduler_loop",
    "start_metrics",
]
