"""Tests for schema discovery and the error/cancellation primitives it relies on."""

import httpx
import pytest

from vtex_mdx.core.cancellation import CancellationToken
from vtex_mdx.core.errors import ExportCancelled, RateLimited, RemoteCallFailed
from vtex_mdx.extractors import SchemaResolver
from vtex_mdx.extractors.schema_resolver import schema_names


class TestSchemaNames:
    """Tests for schema_names."""

    def test_keeps_named_schemas_in_order(self):
        data = [{"name": "b"}, {"name": ""}, {"id": 1}, "junk", {"name": "a"}]
        assert schema_names(data) == ["b", "a"]

    def test_non_list_body(self):
        assert schema_names({"name": "x"}) == []


class TestSchemaResolver:
    """Tests for SchemaResolver."""

    @pytest.mark.asyncio
    async def test_explicit_schema_needs_no_call(self, client, remote, make_request):
        schema = await SchemaResolver(client).resolve(make_request(schema_name="given"))

        assert schema == "given"
        assert remote.requests == []

    @pytest.mark.asyncio
    async def test_first_schema_wins(self, client, remote, make_request):
        remote.route("/schemas", lambda request: httpx.Response(200, json=[{"name": "one"}, {"name": "two"}]))

        assert await SchemaResolver(client).resolve(make_request()) == "one"
        assert remote.calls("/schemas")[0].url.path == "/api/dataentities/CL/schemas"

    @pytest.mark.asyncio
    async def test_failed_listing_resolves_to_none(self, client, remote, make_request):
        remote.route("/schemas", lambda request: httpx.Response(500, text="error"))

        assert await SchemaResolver(client).resolve(make_request()) is None
        assert len(remote.calls("/schemas")) == 1

    @pytest.mark.asyncio
    async def test_list_schema_names_raises_on_failure(self, client, remote):
        remote.route("/schemas", lambda request: httpx.Response(404, text="x" * 2000))

        with pytest.raises(RemoteCallFailed) as exc_info:
            await SchemaResolver(client).list_schema_names("CL")

        assert exc_info.value.status_code == 404
        assert len(exc_info.value.body) == 500

    def test_token_state(self):
        cancel = CancellationToken()
        assert cancel.cancelled is False

        cancel.cancel()

        assert cancel.cancelled is True
        with pytest.raises(ExportCancelled, match="Export cancelled by caller."):
            cancel.raise_if_cancelled()

    @pytest.mark.asyncio
    async def test_cancelled_before_lookup(self, client, remote, make_request):
        cancel = CancellationToken()
        cancel.cancel("client went away")

        with pytest.raises(ExportCancelled, match="client went away"):
            await SchemaResolver(client).resolve(make_request(), cancel=cancel)

        assert remote.requests == []


class TestErrors:
    """Tests for error helpers."""

    def test_retry_after_rounds_up(self):
        assert RateLimited(1).retry_after_seconds == 1
        assert RateLimited(59_001).retry_after_seconds == 60
        assert RateLimited(0).retry_after_seconds == 0

    def test_remote_call_failed_str(self):
        error = RemoteCallFailed("Failed to scroll CL", status_code=502, body="upstream")
        assert str(error) == "Failed to scroll CL (status 502)"
