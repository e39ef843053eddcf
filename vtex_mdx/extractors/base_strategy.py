"""Retrieval strategy interface for MasterData exports.

Each strategy drives a sequential batch loop against one pagination idiom
and aggregates the batches into an ExportResult. Call n+1 always depends
on the state returned by call n (cursor token, window, total), so batches
are never fetched concurrently.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional

from ..clients.rest_client import MasterDataClient
from ..core.cancellation import CancellationToken
from ..core.config import MAX_BATCHES, MDXConfig, get_config
from ..core.errors import RemoteCallFailed
from ..types.export import ExportResult, RetrievalRequest, StopReason, StrategyName

logger = logging.getLogger(__name__)


@dataclass
class StrategyOptions:
    """Options for configuring a strategy run."""

    # Pagination; None means the strategy's configured default
    page_size: Optional[int] = None
    max_batches: Optional[int] = None

    # Progress: (stage, batches issued, records so far)
    progress_callback: Optional[Callable[[str, int, int], None]] = None


class RetrievalStrategy(ABC):
    """Batch loop over one MasterData pagination idiom."""

    # Override in subclasses
    name: StrategyName
    description: str = "Retrieval strategy"

    def __init__(
        self,
        client: MasterDataClient,
        config: Optional[MDXConfig] = None,
    ):
        """Initialize the strategy.

        Args:
            client: MasterData client bound to the request's credentials.
            config: Export configuration.
        """
        self._client = client
        self._config = config or get_config()

    @abstractmethod
    async def run(
        self,
        request: RetrievalRequest,
        options: Optional[StrategyOptions] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> ExportResult:
        """Retrieve every record of the requested entity.

        Raises:
            RemoteCallFailed: A remote call returned a non-success status.
            ExportCancelled: The cancellation token fired between batches.
        """
        ...

    @abstractmethod
    def default_page_size(self) -> int:
        """Page size used when the options do not set one."""
        ...

    def _page_size(self, options: StrategyOptions) -> int:
        return options.page_size or self.default_page_size()

    def _max_batches(self, options: StrategyOptions) -> int:
        """Batch cap for this run, never above MAX_BATCHES."""
        cap = options.max_batches or self._config.max_batches
        return max(1, min(cap, MAX_BATCHES))

    def _report_progress(
        self,
        options: StrategyOptions,
        batches: int,
        records: int,
    ) -> None:
        """Report progress via callback if provided."""
        if options.progress_callback:
            options.progress_callback(self.name.value, batches, records)

    def _finish(
        self,
        records: list[dict[str, Any]],
        batches: int,
        stop_reason: StopReason,
        started_at: datetime,
        schema_name: Optional[str] = None,
        total: Optional[int] = None,
    ) -> ExportResult:
        """Build the immutable result of a completed batch loop."""
        truncated = stop_reason in (StopReason.CURSOR_CYCLE, StopReason.BATCH_CAP)
        if truncated:
            logger.warning(
                f"{self.name.value} stopped early ({stop_reason.value}) "
                f"after {batches} batches, {len(records)} records"
            )
        else:
            logger.info(
                f"{self.name.value} finished ({stop_reason.value}): "
                f"{batches} batches, {len(records)} records"
            )
        return ExportResult(
            records=records,
            batches_issued=batches,
            truncated=truncated,
            strategy_used=self.name,
            stop_reason=stop_reason,
            total=total,
            schema_name=schema_name,
            started_at=started_at,
            completed_at=datetime.now(),
        )


def records_from_response(result: dict[str, Any], action: str) -> list[dict[str, Any]]:
    """Return the batch carried by a response, raising on failure.

    Args:
        result: Response dict from MasterDataClient.
        action: Short description of the call, used in the error message.

    Raises:
        RemoteCallFailed: If the call failed or the body is not a list.
    """
    if not result.get("ok"):
        raise RemoteCallFailed(
            f"Failed to {action}",
            status_code=result.get("status_code", 0),
            body=result.get("error"),
        )

    data = result.get("data")
    if not isinstance(data, list):
        raise RemoteCallFailed(
            f"Unexpected response while trying to {action}",
            status_code=result.get("status_code", 0),
            body=str(data),
        )
    return data
