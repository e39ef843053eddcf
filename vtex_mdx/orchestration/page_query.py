"""Single-page browsing query.

Fetches exactly one window of records and derives the pagination
metadata shown to interactive users.
"""

import logging
import math
from typing import Optional

from ..clients.rest_client import MasterDataClient
from ..core.cancellation import CancellationToken
from ..core.config import MDXConfig, get_config
from ..core.errors import NoSchemaAvailable, RemoteCallFailed
from ..extractors import SchemaResolver, Window, WindowedSearchStrategy
from ..types.export import PageResult, PaginationState, ProtocolVersion, RetrievalRequest
from .export_orchestrator import ClientFactory, default_client_factory

logger = logging.getLogger(__name__)


def build_pagination(
    page: int,
    page_size: int,
    total: Optional[int],
    returned: int,
) -> PaginationState:
    """Compute navigation metadata for a fetched page.

    Args:
        page: 1-based page number.
        page_size: Requested page size.
        total: Total reported by the remote, if any.
        returned: Number of records the page actually held.
    """
    total_pages = max(1, math.ceil(total / page_size)) if total is not None else None
    if total_pages is not None:
        has_next = page < total_pages
    else:
        has_next = returned == page_size

    return PaginationState(
        page=page,
        page_size=page_size,
        total=total,
        total_pages=total_pages,
        has_previous=page > 1,
        has_next=has_next,
    )


class SinglePageQuery:
    """One-window record fetch with pagination metadata."""

    def __init__(
        self,
        config: Optional[MDXConfig] = None,
        client_factory: Optional[ClientFactory] = None,
    ):
        self._config = config or get_config()
        self._client_factory = client_factory or default_client_factory(self._config)

    async def fetch_page(
        self,
        request: RetrievalRequest,
        page: int,
        page_size: int,
        cancel: Optional[CancellationToken] = None,
    ) -> PageResult:
        """Fetch one page of records.

        For V1, an empty first answer is retried with every schema the
        entity exposes until one of them returns records.

        Raises:
            NoSchemaAvailable: V2 entity without a resolvable schema.
            RemoteCallFailed: The search call failed.
        """
        client = self._client_factory(request.credentials)
        resolver = SchemaResolver(client)
        search = WindowedSearchStrategy(client, self._config)

        if request.version == ProtocolVersion.V2 and not request.schema_name:
            schema = await resolver.resolve(request, cancel=cancel)
            if not schema:
                raise NoSchemaAvailable(request.entity)
            request = request.with_schema(schema)

        window = await search.fetch_window(request, page, page_size, cancel=cancel)
        schema_used = request.schema_name

        if not window.records and request.version == ProtocolVersion.V1:
            probed = await self._probe_schemas(search, resolver, request, page, page_size, cancel)
            if probed is not None:
                schema_used, window = probed

        return PageResult(
            records=window.records,
            pagination=build_pagination(page, page_size, window.total, len(window.records)),
            schema_name=schema_used,
        )

    async def _probe_schemas(
        self,
        search: WindowedSearchStrategy,
        resolver: SchemaResolver,
        request: RetrievalRequest,
        page: int,
        page_size: int,
        cancel: Optional[CancellationToken],
    ) -> Optional[tuple[str, Window]]:
        """Retry the page with each discoverable schema.

        Returns:
            (schema, window) for the first schema yielding records, or None.
        """
        try:
            schemas = await resolver.list_schema_names(request.entity, cancel=cancel)
        except RemoteCallFailed as e:
            logger.info(f"Schema probe skipped for {request.entity}: {e}")
            return None

        for schema in schemas:
            if schema == request.schema_name:
                continue

            try:
                window = await search.fetch_window(
                    request.with_schema(schema), page, page_size, cancel=cancel
                )
            except RemoteCallFailed as e:
                logger.warning(f"Schema probe {schema} failed for {request.entity}: {e}")
                continue

            if window.records:
                logger.info(f"Schema {schema} returned records for {request.entity}")
                return schema, window

        return None
