"""Cursor scroll retrieval for MasterData V1.

The scroll endpoint returns an ``X-VTEX-MD-TOKEN`` header that must be
echoed on the next call to continue the scan. A token that comes back a
second time means the remote cursor stopped advancing; the loop stops at
the first repeat and flags the result as truncated.
"""

import logging
from datetime import datetime
from typing import Any, Optional

from ..clients.rest_client import get_scroll_token
from ..core.cancellation import CancellationToken, check_cancelled
from ..types.export import ExportResult, RetrievalRequest, StopReason, StrategyName
from .base_strategy import RetrievalStrategy, StrategyOptions, records_from_response

logger = logging.getLogger(__name__)


class CursorScrollStrategy(RetrievalStrategy):
    """Scroll through an entity with cursor tokens."""

    name = StrategyName.CURSOR_SCROLL
    description = "V1 scroll with cursor tokens"

    def default_page_size(self) -> int:
        return self._config.scroll_page_size

    async def run(
        self,
        request: RetrievalRequest,
        options: Optional[StrategyOptions] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> ExportResult:
        """Scroll until the cursor ends, repeats, or the batch cap is hit."""
        options = options or StrategyOptions()
        page_size = self._page_size(options)
        max_batches = self._max_batches(options)
        started_at = datetime.now()

        token: Optional[str] = None
        seen_tokens: set[str] = set()
        records: list[dict[str, Any]] = []
        batches = 0

        while batches < max_batches:
            check_cancelled(cancel)
            batches += 1

            result = await self._client.scroll(
                request.entity,
                size=page_size,
                schema=request.schema_name,
                token=token,
                cancel=cancel,
            )
            batch = records_from_response(result, f"scroll {request.entity}")
            records.extend(batch)
            self._report_progress(options, batches, len(records))

            next_token = get_scroll_token(result)

            if not batch:
                stop_reason = StopReason.EMPTY_BATCH
            elif next_token is None:
                stop_reason = StopReason.END_OF_CURSOR
            elif next_token in seen_tokens:
                logger.warning(
                    f"Scroll token repeated for {request.entity} at batch {batches}"
                )
                stop_reason = StopReason.CURSOR_CYCLE
            else:
                seen_tokens.add(next_token)
                token = next_token
                continue

            # A repeated token on an empty batch is still a cursor anomaly
            if next_token is not None and next_token in seen_tokens:
                stop_reason = StopReason.CURSOR_CYCLE

            return self._finish(
                records, batches, stop_reason, started_at, schema_name=request.schema_name
            )

        return self._finish(
            records, batches, StopReason.BATCH_CAP, started_at, schema_name=request.schema_name
        )
