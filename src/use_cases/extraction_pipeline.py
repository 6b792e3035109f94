"""Per-page extraction pipeline.

A fetched page moves through explicit stages::

    RECEIVED -> RELEVANCE_CHECK -> IRRELEVANT
                                -> RELEVANT -> PRE_EXTRACT_HOOK -> EXTRACT
                                            -> POST_EXTRACT_HOOK -> DONE

Irrelevant pages stop after the relevance check. Extraction and export
failures propagate to the caller; nothing else in a pass raises.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Literal

from src.config.logging_config import get_logger
from src.domain.extraction_constants import (
    DEV_SYNC_BATCH_SIZE,
    EXPORT_PAGE_ID_WATERMARK,
    LOW_VOLUME_RESULT_THRESHOLD,
    LOW_VOLUME_SYNC_BATCH_SIZE,
)
from src.domain.models import CommitConfig, FetchedPage, ResultRow
from src.domain.protocols import (
    DocumentProtocol,
    ExtractorProtocol,
    PendingResultManagerProtocol,
    SiteCapabilities,
    StatusReporterProtocol,
)
from src.domain.relevance import RelevanceState
from src.observability.metrics import EXTRACTED_RESULTS_TOTAL, PIPELINE_PAGES_TOTAL
from src.observability.page_signals import PageSignalRegister
from src.observability.tracing import page_scope
from src.services.document_exporter import DocumentExporter
from src.services.relevance_gate import RelevanceGate

logger = get_logger(__name__)

LANG_FLAG_SELECTOR = "#nav-tools .icp-nav-flag"
DISTRICT_SELECTOR = "#glow-ingress-block"

InstanceRole = Literal["prod", "dev", "test"]


class PipelineStage(StrEnum):
    RECEIVED = "received"
    RELEVANCE_CHECK = "relevance_check"
    IRRELEVANT = "irrelevant"
    RELEVANT = "relevant"
    PRE_EXTRACT_HOOK = "pre_extract_hook"
    EXTRACT = "extract"
    POST_EXTRACT_HOOK = "post_extract_hook"
    DONE = "done"


@dataclass(slots=True)
class PipelineOutcome:
    """Result of one pipeline pass."""

    state: PipelineStage
    relevance: RelevanceState
    row: ResultRow | None = None
    stages: list[PipelineStage] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class PipelinePolicy:
    """Tunable thresholds of a pipeline."""

    export_page_id_watermark: int = EXPORT_PAGE_ID_WATERMARK
    low_volume_result_threshold: int = LOW_VOLUME_RESULT_THRESHOLD
    low_volume_sync_batch_size: int = LOW_VOLUME_SYNC_BATCH_SIZE
    dev_sync_batch_size: int = DEV_SYNC_BATCH_SIZE


class ExtractionPipeline:
    """Runs relevance, hooks and extraction for the pages of one extractor."""

    def __init__(
        self,
        *,
        extractor: ExtractorProtocol,
        gate: RelevanceGate,
        site: SiteCapabilities,
        signals: PageSignalRegister,
        pending: PendingResultManagerProtocol,
        commit_config: CommitConfig,
        exporter: DocumentExporter,
        status_reporter: StatusReporterProtocol,
        sink_collection: str,
        instance_role: InstanceRole = "prod",
        policy: PipelinePolicy | None = None,
    ) -> None:
        self._extractor = extractor
        self._gate = gate
        self._site = site
        self._signals = signals
        self._pending = pending
        self._commit_config = commit_config
        self._exporter = exporter
        self._status_reporter = status_reporter
        self._sink_collection = sink_collection
        self._instance_role = instance_role
        self._policy = policy or PipelinePolicy()

    @property
    def extractor_name(self) -> str:
        return self._extractor.name

    @property
    def commit_config(self) -> CommitConfig:
        return self._commit_config

    def initialize(self) -> None:
        if self._instance_role in ("dev", "test"):
            self._commit_config.sync_batch_size = self._policy.dev_sync_batch_size
        logger.info(
            "extraction_pipeline_initialized",
            extractor=self.extractor_name,
            instance_role=self._instance_role,
            sync_batch_size=self._commit_config.sync_batch_size,
            has_sink=self._commit_config.has_sink,
        )

    def is_relevant(self, page: FetchedPage) -> RelevanceState:
        return self._gate.check(page)

    def on_before_filter(self, page: FetchedPage, document: DocumentProtocol) -> None:
        """Record page signals and size the next commit batch."""
        self._pending.sync_batch_size = self._batch_size_for(self._pending.result_count)

        lang = document.select_first_attr(LANG_FLAG_SELECTOR, "class") or ""
        district = document.select_first_text(DISTRICT_SELECTOR) or ""
        self._signals.update(lang=lang, district=district)

    def _batch_size_for(self, result_count: int) -> int:
        if result_count > self._policy.low_volume_result_threshold:
            return self._commit_config.sync_batch_size
        return self._policy.low_volume_sync_batch_size

    def check_field_requirement(
        self, url: str, page: FetchedPage, row: ResultRow
    ) -> list[str] | None:
        """Report null fields of product rows from the root extractor.

        Returns the reported field names, or None when nothing was reported.
        """
        if not self._extractor.is_root or not self._site.is_detail_page(url):
            return None

        nulls = self._site.check_fields(url, row)
        if nulls is None:
            return None

        self._status_reporter.report_extracted_null_fields(f"{nulls} | {url}")
        return nulls

    def on_after_extract(
        self, page: FetchedPage, document: DocumentProtocol, row: ResultRow | None
    ) -> ResultRow | None:
        if row is None:
            return None

        has_sink = self._commit_config.has_sink
        if has_sink:
            self._pending.add(self._sink_collection, self.extractor_name, row, page.dead_time)

        if not has_sink or page.id < self._policy.export_page_id_watermark:
            self._exporter.export(page, row)

        traits = self._site.classify(page.url, document)
        asin_extractor = self._extractor.is_root and self._site.is_detail_page(page.url)
        self._site.collect_links(page, document, row, traits, asin_extractor=asin_extractor)

        return row

    def process(self, page: FetchedPage, document: DocumentProtocol) -> PipelineOutcome:
        """Run one page through every stage of the pipeline."""
        stages = [PipelineStage.RECEIVED, PipelineStage.RELEVANCE_CHECK]

        with page_scope(page):
            relevance = self.is_relevant(page)
            if not relevance.is_ok:
                stages.append(PipelineStage.IRRELEVANT)
                PIPELINE_PAGES_TOTAL.labels(state=PipelineStage.IRRELEVANT.value).inc()
                logger.debug("page_skipped", code=relevance.code, reason=relevance.message)
                return PipelineOutcome(PipelineStage.IRRELEVANT, relevance, None, stages)

            stages.append(PipelineStage.RELEVANT)

            stages.append(PipelineStage.PRE_EXTRACT_HOOK)
            self.on_before_filter(page, document)

            stages.append(PipelineStage.EXTRACT)
            row = self._extractor.extract(page, document)
            if row is not None:
                EXTRACTED_RESULTS_TOTAL.labels(extractor=self.extractor_name).inc()
                self.check_field_requirement(page.url, page, row)

            stages.append(PipelineStage.POST_EXTRACT_HOOK)
            row = self.on_after_extract(page, document, row)

            stages.append(PipelineStage.DONE)
            PIPELINE_PAGES_TOTAL.labels(state=PipelineStage.DONE.value).inc()
            logger.debug("page_processed", extractor=self.extractor_name, has_row=row is not None)
            return PipelineOutcome(PipelineStage.DONE, relevance, row, stages)


__all__ = [
    "ExtractionPipeline",
    "PipelineOutcome",
    "PipelinePolicy",
    "PipelineStage",
]
