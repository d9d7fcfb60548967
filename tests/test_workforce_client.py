"""
Workforce Client Tests for Workforce Risk.

Requests go through httpx.MockTransport; no test touches the network.
"""

import json

import httpx
import pytest

from workforce_risk.clients.workforce_client import (
    WorkforceClient,
    company_filter,
    company_ids,
    jobs_group,
    profile_slug,
)

BASE = "https://gotlivedata.io/api/people/v1/o_test"


def _client(settings, handler) -> WorkforceClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return WorkforceClient(settings=settings, http_client=http_client)


class Recorder:
    """MockTransport handler that records requests and replies with `body`."""

    def __init__(self, body=None, status_code=200):
        self.body = body if body is not None else {}
        self.status_code = status_code
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.body)

    def payload(self, index=0):
        return json.loads(self.requests[index].content)


# ============================================================================
# Helper Tests
# ============================================================================

class TestHelpers:
    """Tests for pure payload helpers."""

    @pytest.mark.parametrize(
        "url, expected",
        [
            ("https://www.linkedin.com/in/jane-doe/", "jane-doe"),
            ("linkedin.com/in/jane-doe?trk=abc", "jane-doe"),
            ("http://uk.linkedin.com/in/jane-doe", "jane-doe"),
            ("jane-doe", "jane-doe"),
        ],
    )
    def test_profile_slug(self, url, expected):
        assert profile_slug(url) == expected

    def test_company_ids_accept_either_form(self):
        assert company_ids("acme-1") == ("acme-1", "acme-1-group")
        assert company_ids("acme-1-group") == ("acme-1", "acme-1-group")

    def test_company_filter_matches_base_or_group(self):
        group = company_filter("acme-1")
        assert group["operator"] == "or"
        assert [f["field"] for f in group["filters"]] == ["jobs.company.id", "jobs.company.group_id"]

    def test_jobs_group_report_is_optional(self):
        assert "report" not in jobs_group([])
        assert jobs_group([], "ended", {"name": "x"})["jobsGroupType"] == "ended"


# ============================================================================
# Find Tests
# ============================================================================

class TestFind:
    """Tests for person lookup."""

    @pytest.mark.asyncio
    async def test_find_by_name_with_company(self, settings):
        recorder = Recorder({"matches": [{"results": [{"name": "A"}, {"name": "B"}]}]})
        client = _client(settings, recorder)

        results = await client.find_by_name("Jane Doe", "Acme")

        assert [r["name"] for r in results] == ["A", "B"]
        request = recorder.requests[0]
        assert str(request.url) == f"{BASE}/find"
        assert request.headers["Authorization"] == "Bearer test-key"
        payload = recorder.payload()
        assert payload["size"] == 3
        assert payload["matches"][0]["fields"] == [
            {"field_name": "name", "search_term": "Jane Doe"},
            {"field_name": "company.name", "search_term": "Acme"},
        ]

    @pytest.mark.asyncio
    async def test_find_by_profile_slug_returns_at_most_one(self, settings):
        recorder = Recorder({"matches": [{"results": [{"name": "A"}, {"name": "B"}]}]})
        client = _client(settings, recorder)

        results = await client.find_by_profile_slug("jane-doe")

        assert len(results) == 1
        assert recorder.payload()["size"] == 1

    @pytest.mark.asyncio
    async def test_find_without_matches(self, settings):
        client = _client(settings, Recorder({"matches": []}))
        assert await client.find_by_name("Nobody") == []


# ============================================================================
# Report Tests
# ============================================================================

class TestReports:
    """Tests for demographics and flows reports."""

    @pytest.mark.asyncio
    async def test_demographics_rows_parsed(self, settings):
        recorder = Recorder({
            "report_results": {
                "demographics": [
                    {"date": "2025-06-01", "group_values": [{"value": "Engineering"}], "count_employees": 120},
                    {"date": "2025-05-01", "group_values": [], "count_employees": 100},
                ]
            }
        })
        client = _client(settings, recorder)

        rows = await client.get_demographics("acme-1", "2023-06-15", "2025-06-15")

        assert [(r.function, r.count_employees) for r in rows] == [("Engineering", 120), ("Unknown", 100)]
        report = recorder.payload()["filters"][0]["report"]
        assert report["name"] == "demographics"
        assert report["params"]["group_by"] == ["jobs.function"]
        assert report["params"]["date_from"] == "2023-06-15"

    @pytest.mark.asyncio
    async def test_malformed_rows_are_skipped(self, settings):
        recorder = Recorder({
            "report_results": {
                "arrivals_departures": [
                    {"group_values": [{"value": "Sales and Support"}], "arrivals": 10, "departures": 8},
                    {"group_values": [{"value": "Engineering"}], "arrivals": "lots"},
                    "garbage",
                ]
            }
        })
        client = _client(settings, recorder)

        rows = await client.get_flows("acme-1", "2024-06-15", "2025-06-15")

        assert len(rows) == 1
        assert rows[0].departures == 8

    @pytest.mark.asyncio
    async def test_flows_by_level_with_functions(self, settings):
        recorder = Recorder({"report_results": {}})
        client = _client(settings, recorder)

        assert await client.get_flows_by_level("acme-1", "2024-06-15", "2025-06-15", ["Engineering"]) == []

        filters = recorder.payload()["filters"][0]["filters"]
        assert filters[1]["field"] == "jobs.function"
        assert filters[1]["string_values"] == ["Engineering"]


# ============================================================================
# Failure Handling Tests
# ============================================================================

class TestFailures:
    """The client never raises on upstream failure."""

    @pytest.mark.asyncio
    async def test_http_error(self, settings):
        client = _client(settings, Recorder({"detail": "boom"}, status_code=503))

        response = await client.search([], size=0)

        assert response.ok is False
        assert response.error == "API returned 503"
        assert await client.get_demographics("acme-1", "2024-01-01", "2025-01-01") == []
        assert await client.find_by_name("Jane") == []

    @pytest.mark.asyncio
    async def test_timeout(self, settings):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        client = _client(settings, handler)

        response = await client.search([])

        assert response.ok is False
        assert "timed out" in response.error

    @pytest.mark.asyncio
    async def test_invalid_json(self, settings):
        client = _client(settings, lambda request: httpx.Response(200, content=b"<html>"))
        assert await client.get_flows("acme-1", "2024-01-01", "2025-01-01") == []

    @pytest.mark.asyncio
    async def test_not_configured_makes_no_request(self):
        from workforce_risk.config.settings import Settings

        recorder = Recorder()
        client = _client(Settings(livedata_org_id=None, livedata_api_key=None), recorder)

        response = await client.search([])

        assert response.ok is False
        assert recorder.requests == []
