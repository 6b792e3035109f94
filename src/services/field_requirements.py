"""Quality check for extracted product rows.

Missing fields are a quality signal for operators, not a retry trigger.
"""

from __future__ import annotations

from dataclasses import dataclass

from src.domain.extraction_constants import (
    FULFILLMENT_FIELDS,
    FULFILLMENT_NULL_REPORT_MAX,
    FULFILLMENT_NULL_REPORT_MIN,
    PRIMARY_ID_FIELD,
)
from src.domain.models import ResultRow, null_fields


@dataclass(frozen=True, slots=True)
class FieldRequirementPolicy:
    """When a product row is worth reporting.

    A row is reported when the primary id is null, or when some but not all of
    the fulfillment fields are null. All fulfillment fields null usually means
    the product is unavailable, which is not an extraction problem.
    """

    primary_id_field: str = PRIMARY_ID_FIELD
    fulfillment_fields: tuple[str, ...] = FULFILLMENT_FIELDS
    report_min: int = FULFILLMENT_NULL_REPORT_MIN
    report_max: int = FULFILLMENT_NULL_REPORT_MAX

    def should_report(self, null_columns: set[str] | list[str]) -> bool:
        nulls = set(null_columns)
        if self.primary_id_field in nulls:
            return True
        missing = sum(1 for name in self.fulfillment_fields if name in nulls)
        return self.report_min <= missing <= self.report_max


def collect_null_fields(row: ResultRow, policy: FieldRequirementPolicy) -> list[str]:
    """Null fields of the row, counting absent required fields as null."""
    names = null_fields(row)
    for required in (policy.primary_id_field, *policy.fulfillment_fields):
        if required not in row and required not in names:
            names.append(required)
    return names


def check_field_requirement(
    row: ResultRow, policy: FieldRequirementPolicy | None = None
) -> list[str] | None:
    """Return the null fields when the row should be reported, else None."""
    policy = policy or FieldRequirementPolicy()
    names = collect_null_fields(row, policy)
    if policy.should_report(names):
        return names
    return None


__all__ = ["FieldRequirementPolicy", "check_field_requirement", "collect_null_fields"]
