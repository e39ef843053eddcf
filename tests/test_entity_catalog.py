"""Tests for entity listing."""

import httpx
import pytest

from vtex_mdx.core.errors import RemoteCallFailed
from vtex_mdx.orchestration import EntityCatalog
from vtex_mdx.types.export import ProtocolVersion

ENTITIES = [
    {"acronym": "CL", "name": "Client"},
    {"acronym": "AD", "name": "Address"},
    {"acronym": "BR", "name": "Broken"},
    {"name": "missing acronym"},
]

SCHEMAS = {
    "CL": [{"name": "profile"}, {"name": "legacy"}],
    "AD": [{"name": "shipping"}],
}


def schema_handler(request):
    entity = request.url.path.split("/")[-2]
    if entity not in SCHEMAS:
        return httpx.Response(500, text="schema service error")
    return httpx.Response(200, json=SCHEMAS[entity])


class TestEntityCatalog:
    """Tests for EntityCatalog.list_entities."""

    @pytest.fixture
    def catalog(self, config, client_factory, remote):
        remote.route("/dataentities", lambda request: httpx.Response(200, json=ENTITIES))
        remote.route("/schemas", schema_handler)
        return EntityCatalog(config, client_factory)

    @pytest.mark.asyncio
    async def test_v1_lists_entities(self, catalog, credentials, remote):
        entities = await catalog.list_entities(credentials, ProtocolVersion.V1)

        assert [(e.acronym, e.name) for e in entities] == [
            ("CL", "Client"),
            ("AD", "Address"),
            ("BR", "Broken"),
        ]
        assert remote.calls("/schemas") == []

    @pytest.mark.asyncio
    async def test_v2_one_row_per_schema(self, catalog, credentials):
        entities = await catalog.list_entities(credentials, ProtocolVersion.V2)

        assert [(e.acronym, e.schema_name) for e in entities] == [
            ("CL", "profile"),
            ("CL", "legacy"),
            ("AD", "shipping"),
        ]

    @pytest.mark.asyncio
    async def test_v2_failed_schema_lookup_is_skipped(self, catalog, credentials, remote):
        entities = await catalog.list_entities(credentials, ProtocolVersion.V2)

        assert "BR" not in {e.acronym for e in entities}
        assert len(remote.calls("/schemas")) == 3

    @pytest.mark.asyncio
    async def test_listing_failure_raises(self, config, client_factory, credentials, remote):
        remote.route("/dataentities", lambda request: httpx.Response(403, text="forbidden"))

        with pytest.raises(RemoteCallFailed) as exc_info:
            await EntityCatalog(config, client_factory).list_entities(credentials)

        assert exc_info.value.status_code == 403
