"""Export of extracted rows as JSON documents.

Layout: ``<export_dir>/amazon/json/<label or "other">/<url-derived>.json``.
"""

from __future__ import annotations

import hashlib
import json
import re
from pathlib import Path
from typing import Final
from urllib.parse import urlsplit

from src.config.logging_config import get_logger
from src.domain.models import FetchedPage, ResultRow
from src.domain.protocols import DocumentSinkProtocol

logger = get_logger(__name__)

EXPORT_SITE_DIR: Final[str] = "amazon"
EXPORT_FORMAT_DIR: Final[str] = "json"
DEFAULT_LABEL_DIR: Final[str] = "other"
_SITE_PREFIX: Final[str] = "amazon-com-"
_UNSAFE_CHARS: Final[re.Pattern[str]] = re.compile(r"[^A-Za-z0-9]+")
_MAX_STEM_LENGTH: Final[int] = 120


def file_name_from_url(url: str, suffix: str = ".json") -> str:
    """Build a filesystem-safe, collision-resistant file name for a url.

    Example:
        >>> file_name_from_url("https://www.amazon.com/dp/B08N5WRWNW")[:14]
        'dp-B08N5WRWNW-'
    """
    parts = urlsplit(url)
    host = (parts.hostname or "").removeprefix("www.")
    readable = _UNSAFE_CHARS.sub("-", f"{host}{parts.path}").strip("-")
    readable = readable[:_MAX_STEM_LENGTH].rstrip("-")
    digest = hashlib.md5(url.encode("utf-8"), usedforsecurity=False).hexdigest()[:12]
    return f"{readable}-{digest}{suffix}".removeprefix(_SITE_PREFIX)


def export_path(export_dir: Path, page: FetchedPage) -> Path:
    label = page.label.strip() or DEFAULT_LABEL_DIR
    return (
        export_dir
        / EXPORT_SITE_DIR
        / EXPORT_FORMAT_DIR
        / label
        / file_name_from_url(page.url)
    )


def serialize_rows(rows: list[ResultRow]) -> str:
    """Pretty JSON keeping null fields."""
    return json.dumps([dict(row) for row in rows], indent=2, ensure_ascii=False, default=str)


class FileDocumentSink(DocumentSinkProtocol):
    """Writes documents to the local filesystem, replacing existing files."""

    def save(self, text: str, path: str) -> None:
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(text, encoding="utf-8")


class DocumentExporter:
    """Serializes a page's result row and hands it to the document sink."""

    def __init__(self, export_dir: Path, sink: DocumentSinkProtocol | None = None) -> None:
        self._export_dir = export_dir
        self._sink = sink or FileDocumentSink()

    def export(self, page: FetchedPage, row: ResultRow) -> Path:
        path = export_path(self._export_dir, page)
        self._sink.save(serialize_rows([row]), str(path))
        logger.debug("result_exported", path=str(path))
        return path


__all__ = [
    "DocumentExporter",
    "FileDocumentSink",
    "export_path",
    "file_name_from_url",
    "serialize_rows",
]
