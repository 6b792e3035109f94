"""Policy constants for relevance, extraction checks and result export.

Defaults for the corresponding settings; ``Settings`` may override the
tunable ones from ``config/main.yaml``.
"""

from typing import Final

# Relevance codes
NOT_TARGET_SITE_CODE: Final[int] = 1010
URL_FILTER_MISMATCH_CODE: Final[int] = 60
IRRELEVANT_LOG_MIN_CODE: Final[int] = 40
IRRELEVANT_SILENT_CODES: Final[frozenset[int]] = frozenset({60, 1601})

# Field requirement check on product-detail rows
PRIMARY_ID_FIELD: Final[str] = "asin"
FULFILLMENT_FIELDS: Final[tuple[str, ...]] = ("price", "soldby", "shipsfrom")
FULFILLMENT_NULL_REPORT_MIN: Final[int] = 1
FULFILLMENT_NULL_REPORT_MAX: Final[int] = 2

# Row field holding the review listing url of a product
REVIEWS_URL_FIELD: Final[str] = "reviewsurl"

# Pages below this id are always exported for inspection
EXPORT_PAGE_ID_WATERMARK: Final[int] = 500

# Commit batch sizing
LOW_VOLUME_RESULT_THRESHOLD: Final[int] = 100
LOW_VOLUME_SYNC_BATCH_SIZE: Final[int] = 10
DEFAULT_SYNC_BATCH_SIZE: Final[int] = 60
DEV_SYNC_BATCH_SIZE: Final[int] = 10
