"""Shared fixtures: an in-memory MasterData remote behind httpx.MockTransport."""

from typing import Callable

import httpx
import pytest

from vtex_mdx.clients import MasterDataClient
from vtex_mdx.core.config import MDXConfig
from vtex_mdx.orchestration import default_client_factory
from vtex_mdx.types.export import Credentials, ProtocolVersion, RetrievalRequest

Handler = Callable[[httpx.Request], httpx.Response]


class FakeMasterData:
    """Routes MasterData calls by path suffix and records every request."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.routes: dict[str, Handler] = {}

    def route(self, suffix: str, handler: Handler) -> None:
        self.routes[suffix] = handler

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for suffix, handler in self.routes.items():
            if request.url.path.endswith(suffix):
                return handler(request)
        return httpx.Response(404, text="not found")

    def calls(self, suffix: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith(suffix)]

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)


@pytest.fixture
def config():
    return MDXConfig(
        base_url_template="https://{account}.vtexcommercestable.com.br",
        scroll_page_size=100,
        window_page_size=100,
        paged_page_size=100,
    )


@pytest.fixture
def remote():
    return FakeMasterData()


@pytest.fixture
def client_factory(config, remote):
    return default_client_factory(config, transport=remote.transport)


@pytest.fixture
def credentials():
    return Credentials(account_name="acme", app_key="vtexappkey-acme-XYZ", app_token="secret-token")


@pytest.fixture
def client(credentials, config, remote):
    return MasterDataClient(credentials, config=config, transport=remote.transport)


@pytest.fixture
def make_request(credentials):
    """Build a RetrievalRequest for the test account."""

    def build(entity: str = "CL", version: str = "v1", schema_name=None) -> RetrievalRequest:
        return RetrievalRequest(
            credentials=credentials,
            version=ProtocolVersion(version),
            entity=entity,
            schema_name=schema_name,
        )

    return build


@pytest.fixture
def valid_payload():
    return {
        "accountName": "acme",
        "appKey": "vtexappkey-acme-XYZ",
        "appToken": "secret-token",
        "version": "v1",
        "entity": "CL",
    }
