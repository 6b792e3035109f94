"""Structural classification of a fetched page."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class PageKind(StrEnum):
    """Structural role of a page on the target site."""

    LABELED_PORTAL = "labeled_portal"
    ITEM = "item"
    PRIMARY_REVIEW = "primary_review"
    SECONDARY_REVIEW = "secondary_review"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class PageTraits:
    """Classification of one page, created fresh for every page.

    Exactly one kind applies. ``portal_label`` and ``is_primary_portal`` are
    only meaningful for labeled portals.
    """

    kind: PageKind
    portal_label: str | None = None
    is_primary_portal: bool = False

    @property
    def is_labeled_portal(self) -> bool:
        return self.kind is PageKind.LABELED_PORTAL

    @property
    def is_item(self) -> bool:
        return self.kind is PageKind.ITEM

    @property
    def is_primary_review(self) -> bool:
        return self.kind is PageKind.PRIMARY_REVIEW

    @property
    def is_secondary_review(self) -> bool:
        return self.kind is PageKind.SECONDARY_REVIEW

    @property
    def is_other(self) -> bool:
        return self.kind is PageKind.OTHER

    @classmethod
    def portal(cls, label: str, *, primary: bool) -> PageTraits:
        return cls(kind=PageKind.LABELED_PORTAL, portal_label=label, is_primary_portal=primary)

    @classmethod
    def of(cls, kind: PageKind) -> PageTraits:
        return cls(kind=kind)


OTHER_TRAITS = PageTraits.of(PageKind.OTHER)

__all__ = ["OTHER_TRAITS", "PageKind", "PageTraits"]
