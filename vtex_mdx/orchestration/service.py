"""Inbound entry points for export, page browsing and entity listing.

Each call is rate limited and validated before any remote call is made.
Errors outside the MDXError taxonomy are logged and surfaced as
InternalError so callers only ever see one error family.
"""

import logging
from typing import Any, Awaitable, Mapping, Optional, TypeVar

from ..core.cancellation import CancellationToken
from ..core.config import MDXConfig, get_config
from ..core.errors import InternalError, MDXError, RateLimited
from ..core.validation import (
    parse_credentials_payload,
    parse_export_payload,
    parse_page_payload,
)
from ..extractors import StrategyOptions
from ..types.export import Entity, ExportResult, PageResult
from .entity_catalog import EntityCatalog
from .export_orchestrator import ClientFactory, ExportOrchestrator, default_client_factory
from .page_query import SinglePageQuery
from .rate_limiter import FixedWindowRateLimiter, get_rate_limiter, rate_limit_key

logger = logging.getLogger(__name__)

T = TypeVar("T")

EXPORT_OPERATION = "export"
PAGE_OPERATION = "documents"


class ExportService:
    """Rate-limited, validated access to the export engine."""

    def __init__(
        self,
        config: Optional[MDXConfig] = None,
        client_factory: Optional[ClientFactory] = None,
        rate_limiter: Optional[FixedWindowRateLimiter] = None,
    ):
        """Initialize the service.

        Args:
            config: Export configuration.
            client_factory: Builds MasterData clients; override for tests.
            rate_limiter: Limiter instance; defaults to the process-wide one.
        """
        self._config = config or get_config()
        factory = client_factory or default_client_factory(self._config)
        self._rate_limiter = rate_limiter if rate_limiter is not None else get_rate_limiter()
        self._orchestrator = ExportOrchestrator(self._config, factory)
        self._page_query = SinglePageQuery(self._config, factory)
        self._catalog = EntityCatalog(self._config, factory)

    def _enforce_rate_limit(
        self,
        operation: str,
        headers: Mapping[str, str],
        max_requests: int,
    ) -> None:
        key = rate_limit_key(operation, headers)
        decision = self._rate_limiter.check(
            key, max_requests, self._config.rate_limit_window_ms
        )
        if not decision.allowed:
            raise RateLimited(decision.retry_after_ms)

    async def _guard(self, operation: str, call: Awaitable[T]) -> T:
        """Await a call, mapping unexpected failures to InternalError."""
        try:
            return await call
        except MDXError:
            raise
        except Exception as e:
            logger.exception(f"Unhandled failure during {operation}")
            raise InternalError(f"Unexpected error during {operation}.") from e

    async def export(
        self,
        payload: Mapping[str, Any],
        headers: Optional[Mapping[str, str]] = None,
        options: Optional[StrategyOptions] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> ExportResult:
        """Export every record of the entity named in the payload.

        Args:
            payload: accountName, appKey, appToken, version, entity, schema.
            headers: Inbound request headers, used to identify the client.
            options: Strategy options.
            cancel: Stops further batches once cancelled.

        Raises:
            RateLimited, ValidationError, RemoteCallFailed,
            NoSchemaAvailable, ExportCancelled, InternalError
        """
        self._enforce_rate_limit(
            EXPORT_OPERATION, headers or {}, self._config.export_rate_limit
        )
        request = parse_export_payload(payload)
        return await self._guard(
            EXPORT_OPERATION,
            self._orchestrator.export(request, options, cancel=cancel),
        )

    async def fetch_page(
        self,
        payload: Mapping[str, Any],
        headers: Optional[Mapping[str, str]] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> PageResult:
        """Fetch one page of records for interactive browsing.

        Args:
            payload: Export payload fields plus page and pageSize.
            headers: Inbound request headers, used to identify the client.
            cancel: Checked before each remote call.
        """
        self._enforce_rate_limit(
            PAGE_OPERATION, headers or {}, self._config.page_rate_limit
        )
        request, page, page_size = parse_page_payload(payload)
        return await self._guard(
            PAGE_OPERATION,
            self._page_query.fetch_page(request, page, page_size, cancel=cancel),
        )

    async def list_entities(
        self,
        payload: Mapping[str, Any],
        cancel: Optional[CancellationToken] = None,
    ) -> list[Entity]:
        """List the account's entities (one row per schema for V2)."""
        credentials, version = parse_credentials_payload(payload)
        return await self._guard(
            "entity listing",
            self._catalog.list_entities(credentials, version, cancel=cancel),
        )
