"""Tests for total record count discovery from response headers."""

import httpx

from vtex_mdx.core.total_count import parse_total_count


class TestParseTotalCount:
    """Tests for parse_total_count."""

    def test_direct_header(self):
        assert parse_total_count({"X-VTEX-MD-TOTAL": "1234"}) == 1234

    def test_direct_header_lowercase(self):
        assert parse_total_count({"x-vtex-md-total": " 7 "}) == 7

    def test_content_range_fallback(self):
        assert parse_total_count({"REST-Content-Range": "resources 0-99/250"}) == 250

    def test_direct_header_preferred(self):
        headers = {"x-vtex-md-total": "10", "rest-content-range": "resources 0-9/99"}
        assert parse_total_count(headers) == 10

    def test_unparseable_direct_header_falls_back(self):
        headers = {"x-vtex-md-total": "lots", "rest-content-range": "resources 0-9/42"}
        assert parse_total_count(headers) == 42

    def test_negative_direct_header_ignored(self):
        assert parse_total_count({"x-vtex-md-total": "-1"}) is None

    def test_malformed_range(self):
        assert parse_total_count({"rest-content-range": "resources 0-9/*"}) is None

    def test_no_headers(self):
        assert parse_total_count({}) is None

    def test_httpx_headers(self):
        headers = httpx.Headers({"Rest-Content-Range": "resources 100-199/1000"})
        assert parse_total_count(headers) == 1000
