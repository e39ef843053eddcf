"""Entity listing for an account.

V2 entities are listed once per schema. Schema lookups are independent,
so they run concurrently; a lookup that fails leaves its entity without
schemas instead of failing the whole listing.
"""

import asyncio
import logging
from typing import Any, Optional

from ..clients.rest_client import MasterDataClient
from ..core.cancellation import CancellationToken
from ..core.config import MDXConfig, get_config
from ..core.errors import ExportCancelled, RemoteCallFailed
from ..extractors import SchemaResolver
from ..types.export import Credentials, Entity, ProtocolVersion
from .export_orchestrator import ClientFactory, default_client_factory

logger = logging.getLogger(__name__)


def _parse_entities(data: Any) -> list[Entity]:
    if not isinstance(data, list):
        return []
    entities = []
    for item in data:
        if not isinstance(item, dict) or not item.get("acronym"):
            continue
        entities.append(Entity(acronym=str(item["acronym"]), name=item.get("name")))
    return entities


class EntityCatalog:
    """Lists the data entities (and V2 schemas) of an account."""

    def __init__(
        self,
        config: Optional[MDXConfig] = None,
        client_factory: Optional[ClientFactory] = None,
        max_concurrent: int = 5,
    ):
        """Initialize the catalog.

        Args:
            config: Export configuration.
            client_factory: Builds the MasterData client for the credentials.
            max_concurrent: Concurrent schema lookups for V2 listings.
        """
        self._config = config or get_config()
        self._client_factory = client_factory or default_client_factory(self._config)
        self._max_concurrent = max_concurrent

    async def list_entities(
        self,
        credentials: Credentials,
        version: ProtocolVersion = ProtocolVersion.V1,
        cancel: Optional[CancellationToken] = None,
    ) -> list[Entity]:
        """List entities, expanded to one row per schema for V2.

        Raises:
            RemoteCallFailed: If the entity listing itself fails.
        """
        client = self._client_factory(credentials)
        result = await client.list_entities(cancel=cancel)
        if not result.get("ok"):
            raise RemoteCallFailed(
                "Failed to list MasterData entities",
                status_code=result.get("status_code", 0),
                body=result.get("error"),
            )

        entities = _parse_entities(result.get("data"))
        if version == ProtocolVersion.V1:
            return entities

        return await self._expand_schemas(client, entities, cancel)

    async def _expand_schemas(
        self,
        client: MasterDataClient,
        entities: list[Entity],
        cancel: Optional[CancellationToken],
    ) -> list[Entity]:
        resolver = SchemaResolver(client)
        semaphore = asyncio.Semaphore(self._max_concurrent)

        async def lookup(entity: Entity) -> list[str]:
            async with semaphore:
                return await resolver.list_schema_names(entity.acronym, cancel=cancel)

        settled = await asyncio.gather(
            *(lookup(entity) for entity in entities),
            return_exceptions=True,
        )

        expanded: list[Entity] = []
        for entity, outcome in zip(entities, settled):
            if isinstance(outcome, BaseException):
                if isinstance(outcome, (asyncio.CancelledError, ExportCancelled)):
                    raise outcome
                logger.warning(f"Schema lookup failed for {entity.acronym}: {outcome}")
                continue

            for schema in outcome:
                expanded.append(entity.model_copy(update={"schema_name": schema}))

        logger.info(f"Listed {len(expanded)} V2 entity schemas across {len(entities)} entities")
        return expanded
