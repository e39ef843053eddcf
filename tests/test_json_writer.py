"""Tests for export file output."""

import orjson

from vtex_mdx.output import default_export_filename, write_export
from vtex_mdx.types.export import ExportResult, ProtocolVersion, StopReason, StrategyName


def make_result(**overrides):
    fields = {
        "records": [{"id": "1", "email": "a@example.com"}, {"id": "2", "email": None}],
        "batches_issued": 1,
        "strategy_used": StrategyName.WINDOWED_SEARCH,
        "stop_reason": StopReason.SHORT_BATCH,
        "fallback_from": StrategyName.CURSOR_SCROLL,
        "total": 2,
    }
    fields.update(overrides)
    return ExportResult(**fields)


class TestDefaultExportFilename:
    """Tests for default_export_filename."""

    def test_without_schema(self):
        assert default_export_filename("CL", ProtocolVersion.V1) == "CL-v1.json"

    def test_with_schema(self):
        assert default_export_filename("CL", ProtocolVersion.V2, "profile") == "CL-profile-v2.json"


class TestWriteExport:
    """Tests for write_export."""

    def test_records_only(self, tmp_path):
        path = write_export(make_result(), tmp_path / "out" / "CL-v1.json")

        assert orjson.loads(path.read_bytes()) == [
            {"id": "1", "email": "a@example.com"},
            {"id": "2", "email": None},
        ]

    def test_with_metadata(self, tmp_path):
        path = write_export(make_result(truncated=True), tmp_path / "CL.json", include_metadata=True)

        payload = orjson.loads(path.read_bytes())
        assert payload["strategy_used"] == "windowed_search"
        assert payload["fallback_from"] == "cursor_scroll"
        assert payload["truncated"] is True
        assert payload["batches"] == 1
        assert len(payload["records"]) == 2
        assert isinstance(payload["exported_at"], str)
