"""JSON output for a finished export.

Writes the records of one ExportResult to a single file. Nothing is kept
between exports.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import orjson

from .. import __version__
from ..types.export import ExportResult, ProtocolVersion

logger = logging.getLogger(__name__)


def json_dumps(obj: Any) -> bytes:
    """Serialize object to JSON bytes using orjson."""
    return orjson.dumps(
        obj,
        option=orjson.OPT_INDENT_2 | orjson.OPT_NON_STR_KEYS,
        default=_json_default,
    )


def _json_default(obj: Any) -> Any:
    """Default serializer for non-standard types."""
    if isinstance(obj, datetime):
        return obj.isoformat()
    if hasattr(obj, "model_dump"):
        return obj.model_dump(mode="json")
    raise TypeError(f"Cannot serialize {type(obj)}")


def default_export_filename(
    entity: str,
    version: ProtocolVersion,
    schema_name: Optional[str] = None,
) -> str:
    """File name such as ``CL-v1.json`` or ``CL-profile-v2.json``."""
    schema_part = f"-{schema_name}" if schema_name else ""
    return f"{entity}{schema_part}-{version.value}.json"


def write_export(
    result: ExportResult,
    path: Path,
    include_metadata: bool = False,
) -> Path:
    """Write export records to disk.

    Args:
        result: Finished export.
        path: Destination file.
        include_metadata: Wrap records with batch/truncation metadata.

    Returns:
        Path written.
    """
    if include_metadata:
        payload: Any = {
            "tool_version": __version__,
            "strategy_used": result.strategy_used.value,
            "fallback_from": result.fallback_from.value if result.fallback_from else None,
            "batches": result.batches_issued,
            "truncated": result.truncated,
            "stop_reason": result.stop_reason.value,
            "total": result.total,
            "schema": result.schema_name,
            "exported_at": result.completed_at,
            "records": result.records,
        }
    else:
        payload = result.records

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(json_dumps(payload))
    logger.info(f"Wrote {result.record_count} records to {path}")
    return path
