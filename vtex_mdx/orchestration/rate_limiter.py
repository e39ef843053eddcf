"""Fixed-window rate limiter for inbound export and page calls.

Counts requests per client+operation key inside a window that resets at
a fixed instant. A burst straddling the reset can admit up to twice the
quota; that is the accepted behaviour of a fixed window.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Mapping, Optional

from ..types.export import RateLimitDecision

logger = logging.getLogger(__name__)

# Expired entries are swept once the table grows past this many keys
SWEEP_THRESHOLD = 1000

UNKNOWN_CLIENT = "unknown"


def _now_ms() -> float:
    return time.time() * 1000


@dataclass
class RateLimitEntry:
    """Request count for one key within its current window."""

    count: int
    reset_at_ms: float


class FixedWindowRateLimiter:
    """Process-wide fixed-window request counter.

    Features:
    - One entry per client+operation key
    - Window starts at the first request after the previous one expired
    - Amortized sweep of expired entries, no background timer
    - Lock-serialized access for multi-threaded hosts
    """

    def __init__(
        self,
        sweep_threshold: int = SWEEP_THRESHOLD,
        clock: Optional[Callable[[], float]] = None,
    ):
        """Initialize the rate limiter.

        Args:
            sweep_threshold: Table size above which expired entries are swept.
            clock: Returns the current time in milliseconds.
        """
        self._sweep_threshold = sweep_threshold
        self._clock = clock or _now_ms
        self._entries: dict[str, RateLimitEntry] = {}
        self._lock = threading.Lock()

    def check(self, key: str, max_requests: int, window_ms: float) -> RateLimitDecision:
        """Count a request against a key and decide whether it is allowed.

        Args:
            key: Client+operation key (e.g. "export:203.0.113.7").
            max_requests: Requests allowed per window.
            window_ms: Window length in milliseconds.

        Returns:
            RateLimitDecision with the time until the window resets.
        """
        with self._lock:
            now = self._clock()
            entry = self._entries.get(key)

            if entry is None or entry.reset_at_ms <= now:
                self._entries[key] = RateLimitEntry(count=1, reset_at_ms=now + window_ms)
                decision = RateLimitDecision(allowed=True, retry_after_ms=window_ms)

            elif entry.count >= max_requests:
                decision = RateLimitDecision(
                    allowed=False,
                    retry_after_ms=max(0.0, entry.reset_at_ms - now),
                )

            else:
                entry.count += 1
                decision = RateLimitDecision(
                    allowed=True,
                    retry_after_ms=max(0.0, entry.reset_at_ms - now),
                )

            if len(self._entries) > self._sweep_threshold:
                self._sweep(now)

        if not decision.allowed:
            logger.info(f"Rate limit exceeded for {key}")
        return decision

    def _sweep(self, now: float) -> None:
        """Delete every entry whose window has elapsed. Caller holds the lock."""
        expired = [key for key, entry in self._entries.items() if entry.reset_at_ms <= now]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug(f"Swept {len(expired)} expired rate limit entries")

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def client_key(headers: Mapping[str, str]) -> str:
    """Identify the calling client from proxy headers.

    Uses the first X-Forwarded-For entry, then X-Real-IP, else "unknown".
    """
    lowered = {name.lower(): value for name, value in headers.items()}

    forwarded_for = lowered.get("x-forwarded-for")
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first

    real_ip = (lowered.get("x-real-ip") or "").strip()
    if real_ip:
        return real_ip

    return UNKNOWN_CLIENT


def rate_limit_key(operation: str, headers: Mapping[str, str]) -> str:
    """Limiter key combining the operation name and the client identity."""
    return f"{operation}:{client_key(headers)}"


# Module-level limiter, constructed once per process
_default_limiter: Optional[FixedWindowRateLimiter] = None
_default_limiter_lock = threading.Lock()


def get_rate_limiter() -> FixedWindowRateLimiter:
    """Get or create the process-wide rate limiter."""
    global _default_limiter
    if _default_limiter is None:
        with _default_limiter_lock:
            if _default_limiter is None:
                _default_limiter = FixedWindowRateLimiter()
    return _default_limiter
