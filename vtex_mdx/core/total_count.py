"""Total record count discovery from MasterData response headers."""

import re
from typing import Mapping, Optional

TOTAL_HEADER = "x-vtex-md-total"
CONTENT_RANGE_HEADER = "rest-content-range"

_RANGE_TOTAL = re.compile(r"/(\d+)$")


def _get_header(headers: Mapping[str, str], name: str) -> Optional[str]:
    """Case-insensitive header lookup for plain dicts and httpx.Headers."""
    value = headers.get(name)
    if value is not None:
        return value
    for key, candidate in headers.items():
        if key.lower() == name:
            return candidate
    return None


def parse_total_count(headers: Mapping[str, str]) -> Optional[int]:
    """Extract the total record count hint from response headers.

    Prefers the direct ``X-VTEX-MD-TOTAL`` header and falls back to a
    ``REST-Content-Range`` value such as ``resources 0-99/250``.

    Args:
        headers: Response headers.

    Returns:
        Total count, or None if neither header carries a usable number.
    """
    direct = _get_header(headers, TOTAL_HEADER)
    if direct is not None:
        try:
            total = int(direct.strip())
        except ValueError:
            total = None
        if total is not None and total >= 0:
            return total

    content_range = _get_header(headers, CONTENT_RANGE_HEADER)
    if not content_range:
        return None

    match = _RANGE_TOTAL.search(content_range.strip())
    if not match:
        return None
    return int(match.group(1))
