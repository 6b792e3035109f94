"""Status channel writing operator reports to the log."""

from __future__ import annotations

from src.config.logging_config import get_logger
from src.domain.protocols import StatusReporterProtocol
from src.observability.metrics import NULL_FIELD_REPORTS_TOTAL

logger = get_logger(__name__)


class LoggingStatusReporter(StatusReporterProtocol):
    """Emits quality reports as structured warnings."""

    def report_extracted_null_fields(self, message: str) -> None:
        NULL_FIELD_REPORTS_TOTAL.inc()
        logger.warning("extracted_null_fields", report=message)


__all__ = ["LoggingStatusReporter"]
