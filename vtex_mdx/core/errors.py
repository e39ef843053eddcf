"""Error taxonomy for export and page queries.

Every error carries the HTTP-style status code the inbound boundary
should answer with.
"""

import math
from typing import Optional

# Remote diagnostic bodies are cut to this many characters
MAX_ERROR_BODY_CHARS = 500


class MDXError(Exception):
    """Base class for all export errors."""

    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class RateLimited(MDXError):
    """Caller exceeded its request quota for the current window."""

    status_code = 429

    def __init__(self, retry_after_ms: float, message: str = "Too many requests, try again later."):
        super().__init__(message)
        self.retry_after_ms = retry_after_ms

    @property
    def retry_after_seconds(self) -> int:
        """Retry-After value rounded up to whole seconds."""
        return max(0, math.ceil(self.retry_after_ms / 1000))


class ValidationError(MDXError):
    """Malformed credentials, identifiers, version or pagination bounds."""

    status_code = 400


class RemoteCallFailed(MDXError):
    """A MasterData call returned a non-success status.

    Transport failures (timeouts, refused connections) use status 0.
    """

    def __init__(self, message: str, status_code: int, body: Optional[str] = None):
        super().__init__(message, status_code)
        if body and len(body) > MAX_ERROR_BODY_CHARS:
            body = body[:MAX_ERROR_BODY_CHARS]
        self.body = body

    def __str__(self) -> str:
        return f"{self.message} (status {self.status_code})"


class NoSchemaAvailable(MDXError):
    """No V2 schema could be resolved for the entity."""

    status_code = 400

    def __init__(self, entity: str):
        super().__init__(f"No schema available for entity '{entity}' in V2.")
        self.entity = entity


class ExportCancelled(MDXError):
    """The caller cancelled the export before it completed."""

    status_code = 499

    def __init__(self, message: str = "Export cancelled by caller."):
        super().__init__(message)


class InternalError(MDXError):
    """Any unexpected failure while serving a call."""

    status_code = 500
