"""Schema discovery for MasterData entities.

V2 searches require a ``_schema`` parameter. When the caller omits it,
the first named schema of the entity is used.
"""

import logging
from typing import Any, Optional

from ..clients.rest_client import MasterDataClient
from ..core.cancellation import CancellationToken
from ..core.errors import RemoteCallFailed
from ..types.export import RetrievalRequest

logger = logging.getLogger(__name__)


def schema_names(data: Any) -> list[str]:
    """Names of every named schema in a list-schemas response body."""
    if not isinstance(data, list):
        return []
    return [
        item["name"]
        for item in data
        if isinstance(item, dict) and isinstance(item.get("name"), str) and item["name"]
    ]


class SchemaResolver:
    """Resolves the implicit schema of an entity."""

    def __init__(self, client: MasterDataClient):
        self._client = client

    async def resolve(
        self,
        request: RetrievalRequest,
        cancel: Optional[CancellationToken] = None,
    ) -> Optional[str]:
        """Return the request's schema, discovering one if it is absent.

        A failed schema listing is not retried and resolves to None.

        Args:
            request: Retrieval request.
            cancel: Checked before the remote call.

        Returns:
            Schema name, or None if nothing could be resolved.
        """
        if request.schema_name:
            return request.schema_name

        result = await self._client.list_schemas(request.entity, cancel=cancel)
        if not result.get("ok"):
            logger.warning(
                f"Could not list schemas for {request.entity} "
                f"(status {result.get('status_code')})"
            )
            return None

        names = schema_names(result.get("data"))
        if not names:
            logger.info(f"Entity {request.entity} has no named schema")
            return None

        logger.debug(f"Resolved schema {names[0]} for {request.entity}")
        return names[0]

    async def list_schema_names(
        self,
        entity: str,
        cancel: Optional[CancellationToken] = None,
    ) -> list[str]:
        """List every named schema of an entity, in remote order.

        Raises:
            RemoteCallFailed: If the schema listing fails.
        """
        result = await self._client.list_schemas(entity, cancel=cancel)
        if not result.get("ok"):
            raise RemoteCallFailed(
                f"Failed to list schemas for entity {entity}",
                status_code=result.get("status_code", 0),
                body=result.get("error"),
            )
        return schema_names(result.get("data"))
