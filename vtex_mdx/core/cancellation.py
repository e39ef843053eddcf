"""Cancellation token checked before every remote call."""

import threading
from typing import Optional

from .errors import ExportCancelled


class CancellationToken:
    """Flag set by the caller when it is no longer waiting for a result.

    Thread-safe, so a transport layer running in another thread may
    cancel an export driven by the event loop.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._reason: Optional[str] = None

    def cancel(self, reason: Optional[str] = None) -> None:
        """Request cancellation."""
        self._reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        """Raise ExportCancelled if cancellation was requested."""
        if self.cancelled:
            raise ExportCancelled(self._reason or "Export cancelled by caller.")


def check_cancelled(token: Optional[CancellationToken]) -> None:
    """Raise if an optional token has been cancelled."""
    if token is not None:
        token.raise_if_cancelled()
