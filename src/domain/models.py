"""Domain models for the crawl dispatch core.

Pages and commit configuration use Pydantic v2 for validation; hyperlinks are
small frozen value objects stored in queues.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field, field_validator

from src.domain.extraction_constants import DEFAULT_SYNC_BATCH_SIZE

ResultRow = Mapping[str, Any]
"""One extracted record: ordered field name -> value, values may be None."""


class FetchedPage(BaseModel):
    """A page handed over by the fetch engine.

    Only the attributes the dispatch core reads are modelled.
    """

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., description="Fetch engine page id, grows with fetch order")
    url: str = Field(..., description="Final page url")
    label: str = Field(default="", description="Task label the url was queued with")
    args: str = Field(default="", description="Load arguments of the url")
    load_status: str = Field(default="", description="Fetch engine load status")
    dead_time: AwareDatetime | None = Field(
        default=None, description="Timezone-aware instant by which results must be committed"
    )

    @field_validator("url")
    @classmethod
    def _strip_url(cls, value: str) -> str:
        return value.strip()


class CommitConfig(BaseModel):
    """Sink commit configuration shared by extractors.

    The sink counts as configured when the credential is non-blank.
    """

    model_config = ConfigDict(validate_assignment=True)

    sink_username: str = Field(default="", description="Sink database user")
    sync_batch_size: int = Field(default=DEFAULT_SYNC_BATCH_SIZE, ge=1)

    @property
    def has_sink(self) -> bool:
        return bool(self.sink_username.strip())


@dataclass(frozen=True, slots=True)
class Hyperlink:
    """A url waiting in a crawl queue together with its load arguments."""

    url: str
    label: str = ""
    referrer: str = ""
    args: str = ""


def null_fields(row: ResultRow) -> list[str]:
    """Names of fields whose value is null, in row order."""
    return [name for name, value in row.items() if value is None]


__all__ = [
    "CommitConfig",
    "FetchedPage",
    "Hyperlink",
    "ResultRow",
    "null_fields",
]
