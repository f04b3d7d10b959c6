"""
Pricing package - edit rules and the bulk price updater.
"""

from .rules import (
    EditRule,
    EditMode,
    EditDirection,
    MAX_MAGNITUDE,
    compute_new_price,
    parse_price,
    format_price,
)
from .runner import (
    BulkOutcome,
    BulkUpdateError,
    BulkUpdateReport,
    BulkUpdateRun,
    InvalidPayloadError,
    PriceChange,
    PricePreview,
    RunState,
    UpdateResult,
    UpdateStatus,
    apply_price_changes,
    plan_price_changes,
    preview_bulk_update,
    run_bulk_update,
)

__all__ = [
    "EditRule",
    "EditMode",
    "EditDirection",
    "MAX_MAGNITUDE",
    "compute_new_price",
    "parse_price",
    "format_price",
    "BulkOutcome",
    "BulkUpdateError",
    "BulkUpdateReport",
    "BulkUpdateRun",
    "InvalidPayloadError",
    "PriceChange",
    "PricePreview",
    "RunState",
    "UpdateResult",
    "UpdateStatus",
    "apply_price_changes",
    "plan_price_changes",
    "preview_bulk_update",
    "run_bulk_update",
]
