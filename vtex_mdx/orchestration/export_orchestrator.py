"""Export orchestration across retrieval strategies.

Selects the primary strategy for the protocol version, runs it, and on a
failed remote call during the V1 scroll reruns the whole export once with
the windowed search. Every other failure is terminal.
"""

import logging
from typing import Callable, Optional

import httpx

from ..clients.rest_client import MasterDataClient
from ..core.cancellation import CancellationToken
from ..core.config import MDXConfig, get_config
from ..core.errors import RemoteCallFailed
from ..extractors import RetrievalStrategy, StrategyOptions, fallback_for, strategy_for_version
from ..types.export import Credentials, ExportResult, RetrievalRequest

logger = logging.getLogger(__name__)

ClientFactory = Callable[[Credentials], MasterDataClient]


def default_client_factory(
    config: Optional[MDXConfig] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ClientFactory:
    """Factory building one MasterDataClient per set of credentials."""

    def build(credentials: Credentials) -> MasterDataClient:
        return MasterDataClient(credentials, config=config, transport=transport)

    return build


class ExportOrchestrator:
    """Runs an export with its strategy and the single fallback hop."""

    def __init__(
        self,
        config: Optional[MDXConfig] = None,
        client_factory: Optional[ClientFactory] = None,
    ):
        """Initialize the orchestrator.

        Args:
            config: Export configuration.
            client_factory: Builds the MasterData client for a request.
        """
        self._config = config or get_config()
        self._client_factory = client_factory or default_client_factory(self._config)

    async def export(
        self,
        request: RetrievalRequest,
        options: Optional[StrategyOptions] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> ExportResult:
        """Export every record of an entity.

        Args:
            request: Validated retrieval request.
            options: Strategy options (page size, progress callback).
            cancel: Stops further batches once cancelled.

        Returns:
            ExportResult from the primary strategy, or from its fallback.

        Raises:
            RemoteCallFailed: The strategy (or its fallback) failed.
            NoSchemaAvailable: V2 entity without a resolvable schema.
            ExportCancelled: The token was cancelled.
        """
        client = self._client_factory(request.credentials)
        primary = self._build(strategy_for_version(request.version), client)

        logger.info(
            f"Exporting {request.entity} ({request.version.value}) "
            f"with {primary.name.value}"
        )

        try:
            return await primary.run(request, options, cancel=cancel)
        except RemoteCallFailed as e:
            fallback_class = fallback_for(primary.name)
            if fallback_class is None:
                logger.error(f"{primary.name.value} failed for {request.entity}: {e}")
                raise

            fallback = self._build(fallback_class, client)
            logger.warning(
                f"{primary.name.value} failed for {request.entity} ({e}); "
                f"falling back to {fallback.name.value}"
            )

        result = await fallback.run(request, options, cancel=cancel)
        return result.model_copy(update={"fallback_from": primary.name})

    def _build(
        self,
        strategy_class: type[RetrievalStrategy],
        client: MasterDataClient,
    ) -> RetrievalStrategy:
        return strategy_class(client, self._config)
