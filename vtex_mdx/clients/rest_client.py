"""REST API client for VTEX MasterData.

Every call is a single attempt bounded by the configured timeout. A failed
call ends the retrieval strategy that issued it; escalation is decided by
the export orchestrator.

Responses use a consistent dict format:
    {"ok": bool, "status_code": int, "data": ..., "headers": httpx.Headers,
     "error": str (only when not ok)}
"""

import logging
from typing import Any, Optional

import httpx

from ..core.cancellation import CancellationToken, check_cancelled
from ..core.config import MDXConfig, get_config
from ..types.export import Credentials

logger = logging.getLogger(__name__)

SCROLL_TOKEN_HEADER = "X-VTEX-MD-TOKEN"
RANGE_HEADER = "REST-Range"
ALL_FIELDS = "_all"
WINDOW_SORT = "id ASC"


class MasterDataClient:
    """Async MasterData client bound to one account and app key/token pair."""

    def __init__(
        self,
        credentials: Credentials,
        config: Optional[MDXConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the client.

        Args:
            credentials: Account name and app key/token.
            config: Export configuration. If None, loads from environment.
            transport: Optional httpx transport (used by tests).
        """
        self._credentials = credentials
        self._config = config or get_config()
        self._transport = transport
        self._debug = self._config.rest_debug

    @property
    def base_url(self) -> str:
        """Get the MasterData base URL for the bound account."""
        return self._config.base_url(self._credentials.account_name)

    def _log_request(self, method: str, url: str, **kwargs: Any) -> None:
        """Log request details if debug is enabled."""
        if self._debug:
            logger.debug(f"REST {method} {url}")
            if kwargs.get("params"):
                logger.debug(f"Query params: {kwargs['params']}")

    def _log_response(self, response: httpx.Response) -> None:
        """Log response details if debug is enabled."""
        if self._debug:
            logger.debug(f"Response status: {response.status_code}")
            logger.debug(f"Response body: {response.text[:1000]}")

    def _build_headers(self, extra: Optional[dict[str, str]] = None) -> dict[str, str]:
        """Build request headers with app key/token authentication."""
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "X-VTEX-API-AppKey": self._credentials.app_key.get_secret_value(),
            "X-VTEX-API-AppToken": self._credentials.app_token.get_secret_value(),
        }
        if extra:
            headers.update(extra)
        return headers

    def _handle_response(self, response: httpx.Response) -> dict[str, Any]:
        """Process response and return standardized format."""
        self._log_response(response)

        result: dict[str, Any] = {
            "ok": response.is_success,
            "status_code": response.status_code,
            "headers": response.headers,
        }

        try:
            result["data"] = response.json()
        except ValueError:
            result["data"] = response.text

        if not response.is_success:
            result["error"] = response.text

        return result

    async def request_async(
        self,
        method: str,
        path: str,
        headers: Optional[dict[str, str]] = None,
        cancel: Optional[CancellationToken] = None,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """Make one asynchronous MasterData request.

        Args:
            method: HTTP method.
            path: API path (e.g., "/api/dataentities/CL/search").
            headers: Extra request headers.
            cancel: Checked before the request is issued.
            **kwargs: Additional arguments passed to httpx.AsyncClient.request

        Returns:
            Dict with keys: ok, status_code, data, headers, and optionally error

        Raises:
            ExportCancelled: If the token was cancelled before the call.
        """
        check_cancelled(cancel)

        url = f"{self.base_url}{path}"
        self._log_request(method, url, **kwargs)

        try:
            async with httpx.AsyncClient(
                timeout=self._config.request_timeout,
                transport=self._transport,
            ) as client:
                response = await client.request(
                    method,
                    url,
                    headers=self._build_headers(headers),
                    **kwargs,
                )
                return self._handle_response(response)

        except httpx.TimeoutException as e:
            logger.warning(f"Request timeout for {method} {path}")
            return {"ok": False, "status_code": 0, "error": f"Request timed out: {e}"}

        except httpx.RequestError as e:
            logger.warning(f"Request error for {method} {path}: {e}")
            return {"ok": False, "status_code": 0, "error": str(e)}

    async def get_async(self, path: str, **kwargs: Any) -> dict[str, Any]:
        """Make an async GET request."""
        return await self.request_async("GET", path, **kwargs)

    # MasterData endpoints

    async def list_entities(
        self, cancel: Optional[CancellationToken] = None
    ) -> dict[str, Any]:
        """GET /api/dataentities."""
        return await self.get_async("/api/dataentities", cancel=cancel)

    async def list_schemas(
        self, entity: str, cancel: Optional[CancellationToken] = None
    ) -> dict[str, Any]:
        """GET /api/dataentities/{entity}/schemas."""
        return await self.get_async(f"/api/dataentities/{entity}/schemas", cancel=cancel)

    async def scroll(
        self,
        entity: str,
        size: int,
        schema: Optional[str] = None,
        token: Optional[str] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> dict[str, Any]:
        """One V1 scroll call; the token is echoed back on subsequent calls."""
        params = {"_size": str(size), "_fields": ALL_FIELDS}
        if schema:
            params["_schema"] = schema

        headers = {SCROLL_TOKEN_HEADER: token} if token else None
        return await self.get_async(
            f"/api/dataentities/{entity}/scroll",
            params=params,
            headers=headers,
            cancel=cancel,
        )

    async def search_range(
        self,
        entity: str,
        start: int,
        end: int,
        schema: Optional[str] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> dict[str, Any]:
        """One search call for the inclusive record window [start, end]."""
        params = {"_fields": ALL_FIELDS, "_sort": WINDOW_SORT}
        if schema:
            params["_schema"] = schema

        return await self.get_async(
            f"/api/dataentities/{entity}/search",
            params=params,
            headers={RANGE_HEADER: f"resources={start}-{end}"},
            cancel=cancel,
        )

    async def search_page(
        self,
        entity: str,
        page: int,
        size: int,
        schema: str,
        cancel: Optional[CancellationToken] = None,
    ) -> dict[str, Any]:
        """One page-numbered V2 search call."""
        params = {
            "_page": str(page),
            "_size": str(size),
            "_fields": ALL_FIELDS,
            "_schema": schema,
        }
        return await self.get_async(
            f"/api/dataentities/{entity}/search",
            params=params,
            cancel=cancel,
        )


def get_scroll_token(result: dict[str, Any]) -> Optional[str]:
    """Next scroll token from a scroll response, if the remote sent one."""
    headers = result.get("headers")
    if headers is None:
        return None
    token = headers.get(SCROLL_TOKEN_HEADER)
    return token or None
