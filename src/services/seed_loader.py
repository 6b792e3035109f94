"""Seed url lists of recurring crawl tasks."""

from __future__ import annotations

from pathlib import Path

from src.config.logging_config import get_logger

logger = get_logger(__name__)

COMMENT_PREFIX = "#"


class SeedLoader:
    """Reads ``<seeds_dir>/<file_name>``, one url per line.

    Blank lines and lines starting with ``#`` are ignored. A missing file
    yields no seeds and a warning.
    """

    def __init__(self, seeds_dir: Path) -> None:
        self._seeds_dir = Path(seeds_dir)

    @property
    def seeds_dir(self) -> Path:
        return self._seeds_dir

    def load(self, file_name: str) -> list[str]:
        path = self._seeds_dir / file_name
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.warning("seed_file_missing", path=str(path))
            return []

        seeds: list[str] = []
        for line in text.splitlines():
            url = line.strip()
            if not url or url.startswith(COMMENT_PREFIX):
                continue
            seeds.append(url)

        logger.debug("seed_file_loaded", path=str(path), count=len(seeds))
        return seeds


__all__ = ["SeedLoader"]
