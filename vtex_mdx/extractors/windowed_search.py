"""Windowed search retrieval for MasterData V1.

Pages through ``/search`` by requesting explicit record windows with the
``REST-Range`` header, sorted by id. The remote reports the total record
count in the response headers, which bounds the loop together with the
short-batch rule.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from ..core.cancellation import CancellationToken, check_cancelled
from ..core.total_count import parse_total_count
from ..types.export import ExportResult, RetrievalRequest, StopReason, StrategyName
from .base_strategy import RetrievalStrategy, StrategyOptions, records_from_response

logger = logging.getLogger(__name__)


@dataclass
class Window:
    """One page of a windowed search and the total the remote reported."""

    records: list[dict[str, Any]]
    total: Optional[int]


def window_bounds(page: int, page_size: int) -> tuple[int, int]:
    """Inclusive record range for a 1-based page."""
    start = (page - 1) * page_size
    return start, start + page_size - 1


class WindowedSearchStrategy(RetrievalStrategy):
    """Offset-window search sorted by id."""

    name = StrategyName.WINDOWED_SEARCH
    description = "V1 search with REST-Range windows"

    def default_page_size(self) -> int:
        return self._config.window_page_size

    async def fetch_window(
        self,
        request: RetrievalRequest,
        page: int,
        page_size: int,
        cancel: Optional[CancellationToken] = None,
    ) -> Window:
        """Fetch a single window.

        Raises:
            RemoteCallFailed: If the search call fails.
        """
        start, end = window_bounds(page, page_size)
        result = await self._client.search_range(
            request.entity,
            start,
            end,
            schema=request.schema_name,
            cancel=cancel,
        )
        batch = records_from_response(result, f"search {request.entity}")
        return Window(records=batch, total=parse_total_count(result.get("headers") or {}))

    async def run(
        self,
        request: RetrievalRequest,
        options: Optional[StrategyOptions] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> ExportResult:
        """Fetch windows until a short batch, the reported total, or the cap."""
        options = options or StrategyOptions()
        page_size = self._page_size(options)
        max_batches = self._max_batches(options)
        started_at = datetime.now()

        records: list[dict[str, Any]] = []
        total: Optional[int] = None
        batches = 0
        page = 1

        while batches < max_batches:
            check_cancelled(cancel)
            batches += 1

            window = await self.fetch_window(request, page, page_size, cancel=cancel)
            records.extend(window.records)
            if window.total is not None:
                total = window.total
            self._report_progress(options, batches, len(records))

            if len(window.records) < page_size:
                stop_reason = StopReason.SHORT_BATCH
            elif total is not None and len(records) >= total:
                stop_reason = StopReason.TOTAL_REACHED
            else:
                page += 1
                continue

            return self._finish(
                records,
                batches,
                stop_reason,
                started_at,
                schema_name=request.schema_name,
                total=total,
            )

        return self._finish(
            records,
            batches,
            StopReason.BATCH_CAP,
            started_at,
            schema_name=request.schema_name,
            total=total,
        )
