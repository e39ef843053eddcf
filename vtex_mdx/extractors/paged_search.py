"""Page-numbered search retrieval for MasterData V2."""

import logging
from datetime import datetime
from typing import Any, Optional

from ..core.cancellation import CancellationToken, check_cancelled
from ..core.errors import NoSchemaAvailable
from ..types.export import ExportResult, RetrievalRequest, StopReason, StrategyName
from .base_strategy import RetrievalStrategy, StrategyOptions, records_from_response
from .schema_resolver import SchemaResolver

logger = logging.getLogger(__name__)


class PagedSearchStrategy(RetrievalStrategy):
    """V2 search by page number within one schema."""

    name = StrategyName.PAGED_SEARCH
    description = "V2 search by page number"

    def default_page_size(self) -> int:
        return self._config.paged_page_size

    async def run(
        self,
        request: RetrievalRequest,
        options: Optional[StrategyOptions] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> ExportResult:
        """Resolve the schema, then fetch pages until a short batch or the cap.

        Raises:
            NoSchemaAvailable: If no schema can be resolved. No search
                call is issued in that case.
            RemoteCallFailed: If a search call fails.
        """
        options = options or StrategyOptions()
        page_size = self._page_size(options)
        max_batches = self._max_batches(options)
        started_at = datetime.now()

        schema = await SchemaResolver(self._client).resolve(request, cancel=cancel)
        if not schema:
            raise NoSchemaAvailable(request.entity)

        records: list[dict[str, Any]] = []
        batches = 0
        page = 1

        while batches < max_batches:
            check_cancelled(cancel)
            batches += 1

            result = await self._client.search_page(
                request.entity,
                page=page,
                size=page_size,
                schema=schema,
                cancel=cancel,
            )
            batch = records_from_response(result, f"search {request.entity} page {page}")
            records.extend(batch)
            self._report_progress(options, batches, len(records))

            if len(batch) < page_size:
                return self._finish(
                    records, batches, StopReason.SHORT_BATCH, started_at, schema_name=schema
                )
            page += 1

        return self._finish(
            records, batches, StopReason.BATCH_CAP, started_at, schema_name=schema
        )
