"""Core infrastructure for the MasterData export tool."""

from .cancellation import CancellationToken, check_cancelled
from .config import MAX_BATCHES, MDXConfig, get_config
from .errors import (
    ExportCancelled,
    InternalError,
    MDXError,
    NoSchemaAvailable,
    RateLimited,
    RemoteCallFailed,
    ValidationError,
)
from .total_count import parse_total_count
from .validation import (
    parse_credentials_payload,
    parse_export_payload,
    parse_page_payload,
)

__all__ = [
    # Config
    "get_config",
    "MDXConfig",
    "MAX_BATCHES",
    # Cancellation
    "CancellationToken",
    "check_cancelled",
    # Errors
    "MDXError",
    "RateLimited",
    "ValidationError",
    "RemoteCallFailed",
    "NoSchemaAvailable",
    "ExportCancelled",
    "InternalError",
    # Headers
    "parse_total_count",
    # Validation
    "parse_credentials_payload",
    "parse_export_payload",
    "parse_page_payload",
]
