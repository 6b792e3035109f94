"""Factories composing the extraction pipeline and scheduler from settings."""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from src.adapters.pending_results_inmemory import InMemoryPendingResultManager
from src.adapters.status_reporter import LoggingStatusReporter
from src.config.settings import Settings
from src.domain.protocols import (
    BaseRelevanceCheck,
    ExtractorProtocol,
    PendingResultManagerProtocol,
    StatusReporterProtocol,
)
from src.observability.page_signals import PageSignalRegister
from src.services.amazon_site import AmazonSite
from src.services.document_exporter import DocumentExporter
from src.services.link_collector import AmazonLinkCollector
from src.services.queue_pool import QueuePool, get_queue_pool
from src.services.relevance_gate import RelevanceGate, accept_all, url_filter_check
from src.services.seed_loader import SeedLoader
from src.use_cases.crawl_scheduler import (
    TaskRunLedger,
    TaskScheduleResult,
    enqueue_due_tasks,
)
from src.use_cases.extraction_pipeline import ExtractionPipeline, PipelinePolicy


@dataclass(frozen=True, slots=True)
class PipelineComponents:
    """Shared collaborators of every extractor pipeline in a process."""

    pool: QueuePool
    site: AmazonSite
    signals: PageSignalRegister
    pending: PendingResultManagerProtocol
    status_reporter: StatusReporterProtocol
    exporter: DocumentExporter


def build_pipeline_components(
    *,
    settings: Settings,
    pool: QueuePool | None = None,
    pending: PendingResultManagerProtocol | None = None,
    status_reporter: StatusReporterProtocol | None = None,
) -> PipelineComponents:
    pool = pool or get_queue_pool()
    return PipelineComponents(
        pool=pool,
        site=AmazonSite(AmazonLinkCollector(pool)),
        signals=PageSignalRegister(),
        pending=pending
        or InMemoryPendingResultManager(sync_batch_size=settings.sync_batch_size),
        status_reporter=status_reporter or LoggingStatusReporter(),
        exporter=DocumentExporter(Path(settings.export_dir)),
    )


def create_extraction_pipeline(
    *,
    settings: Settings,
    extractor: ExtractorProtocol,
    components: PipelineComponents,
    url_filter: str | re.Pattern[str] | None = None,
    base_check: BaseRelevanceCheck | None = None,
) -> ExtractionPipeline:
    """Build and initialize the pipeline of one extractor.

    ``base_check`` wins over ``url_filter``; without either every page of
    the target site is relevant.
    """
    if base_check is None:
        base_check = url_filter_check(url_filter) if url_filter is not None else accept_all

    pipeline = ExtractionPipeline(
        extractor=extractor,
        gate=RelevanceGate(
            base_check,
            extractor_name=extractor.name,
            site_check=components.site.is_target_site,
        ),
        site=components.site,
        signals=components.signals,
        pending=components.pending,
        commit_config=settings.commit_config(),
        exporter=components.exporter,
        status_reporter=components.status_reporter,
        sink_collection=settings.sink_collection,
        instance_role=settings.instance_role,
        policy=PipelinePolicy(
            export_page_id_watermark=settings.export_page_id_watermark,
            low_volume_result_threshold=settings.low_volume_result_threshold,
            low_volume_sync_batch_size=settings.low_volume_sync_batch_size,
        ),
    )
    pipeline.initialize()
    return pipeline


def create_task_scheduler(
    *,
    settings: Settings,
    pool: QueuePool | None = None,
    seeds_dir: str | None = None,
    pending: PendingResultManagerProtocol | None = None,
) -> Callable[[], TaskScheduleResult]:
    """Callable running one scheduler iteration at the current crawl time.

    Each task runs at most once per period. When ``pending`` is given, every
    iteration also commits result batches whose dead time has passed.
    """

    target_pool = pool or get_queue_pool()
    seed_loader = SeedLoader(Path(seeds_dir or settings.seeds_dir))
    ledger = TaskRunLedger()
    tz = settings.timezone()

    def schedule_once() -> TaskScheduleResult:
        result = enqueue_due_tasks(target_pool, seed_loader, datetime.now(tz), ledger)
        if pending is not None:
            result.flushed = pending.flush_expired()
        return result

    return schedule_once


__all__ = [
    "PipelineComponents",
    "build_pipeline_components",
    "create_extraction_pipeline",
    "create_task_scheduler",
]
