"""
Chat Tool Tests for Workforce Risk.
"""

from datetime import date

import pytest

from tests.fakes import FakeWorkforce
from workforce_risk.clients.workforce_client import SearchResponse
from workforce_risk.services.chat_tools import TOOL_DEFINITIONS, TOOL_NAMES, execute_tool

TODAY = date(2025, 6, 15)


def _report(*rows) -> SearchResponse:
    return SearchResponse(report_results={
        "arrivals_departures": [
            {"group_values": [{"value": group}], "arrivals": hires, "departures": departures}
            for group, hires, departures in rows
        ]
    })


def test_tool_definitions():
    assert TOOL_NAMES == ["search_company_hires", "search_location_hires", "search_person_moves"]
    for tool in TOOL_DEFINITIONS:
        assert tool["input_schema"]["type"] == "object"
        assert tool["input_schema"]["required"]


class TestSearchCompanyHires:
    """Tests for search_company_hires."""

    @pytest.mark.asyncio
    async def test_breakdown_by_function(self):
        workforce = FakeWorkforce(search_responses=[
            _report(("Engineering", 4, 1), ("Sales and Support", 10, 8), ("Legal", 0, 0)),
        ])

        result = await execute_tool(workforce, "search_company_hires", {"company_name": "Acme"}, TODAY)

        assert result["totalHires"] == 14
        assert result["totalDepartures"] == 9
        assert result["netChange"] == 5
        assert [r["group"] for r in result["breakdown"]] == ["Sales and Support", "Engineering"]
        assert result["period"] == "last 12 months"
        assert result["filters"] == {"title": "all", "function": "all", "level": "all", "location": "all"}

        group = workforce.searches[0]["filters"][0]
        assert group["report"]["params"]["group_by"] == ["jobs.function"]
        assert group["filters"][1]["date_from"] == "2024-06-15"

    @pytest.mark.asyncio
    async def test_title_switches_to_level_breakdown(self):
        workforce = FakeWorkforce(search_responses=[_report(("Staff", 3, 0))])

        await execute_tool(
            workforce, "search_company_hires",
            {"company_name": "Acme", "title": "Account Manager", "months_back": 3}, TODAY,
        )

        group = workforce.searches[0]["filters"][0]
        assert group["report"]["params"]["group_by"] == ["jobs.level"]
        assert group["filters"][2] == {
            "type": "must", "field": "jobs.title", "match_type": "fuzzy", "string_values": ["Account Manager"],
        }
        assert group["filters"][1]["date_from"] == "2025-03-15"

    @pytest.mark.asyncio
    async def test_no_rows(self):
        workforce = FakeWorkforce(search_responses=[SearchResponse()])
        result = await execute_tool(workforce, "search_company_hires", {"company_name": "Acme"}, TODAY)
        assert result["totalHires"] == 0
        assert "No hiring activity found for Acme" in result["message"]

    @pytest.mark.asyncio
    async def test_search_error_is_returned(self):
        workforce = FakeWorkforce(search_responses=[SearchResponse(ok=False, error="API returned 503")])
        result = await execute_tool(workforce, "search_company_hires", {"company_name": "Acme"}, TODAY)
        assert result == {"error": "API returned 503"}

    @pytest.mark.asyncio
    async def test_missing_company(self):
        workforce = FakeWorkforce()
        result = await execute_tool(workforce, "search_company_hires", {}, TODAY)
        assert "error" in result
        assert workforce.searches == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("months_back", ["soon", -3, 0, None])
    async def test_invalid_months_back_uses_default(self, months_back):
        workforce = FakeWorkforce(search_responses=[SearchResponse()])
        result = await execute_tool(
            workforce, "search_company_hires", {"company_name": "Acme", "months_back": months_back}, TODAY
        )
        assert result["period"] == "last 12 months"


class TestSearchLocationHires:
    """Tests for search_location_hires."""

    @pytest.mark.asyncio
    async def test_top_companies(self):
        workforce = FakeWorkforce(search_responses=[
            _report(("Initech", 5, 1), ("None", 30, 0), ("Freelance/Self-employed", 9, 0), ("Hooli", 7, 2)),
        ])

        result = await execute_tool(workforce, "search_location_hires", {"location": "Austin"}, TODAY)

        assert [c["company"] for c in result["topCompanies"]] == ["Hooli", "Initech"]
        assert result["totalHires"] == 12
        assert result["totalCompanies"] == 2
        assert result["period"] == "last 6 months"

    @pytest.mark.asyncio
    async def test_capped_at_twenty_five(self):
        rows = [(f"Company {i:02d}", 100 - i, 0) for i in range(40)]
        workforce = FakeWorkforce(search_responses=[_report(*rows)])

        result = await execute_tool(workforce, "search_location_hires", {"location": "Austin"}, TODAY)

        assert len(result["topCompanies"]) == 25
        assert result["totalCompanies"] == 40


class TestSearchPersonMoves:
    """Tests for search_person_moves."""

    @pytest.mark.asyncio
    async def test_departures(self):
        people = [
            {"name": f"P{i}", "position": {"title": "AE", "company": {"name": company}}}
            for i, company in enumerate(["Hooli"] * 4 + ["Initech", "acme", "None"])
        ]
        workforce = FakeWorkforce(search_responses=[SearchResponse(results=people)])

        result = await execute_tool(
            workforce, "search_person_moves", {"company_name": "Acme", "direction": "departures"}, TODAY
        )

        assert result["totalPeople"] == 7
        assert [d["company"] for d in result["topDestinations"]] == ["Hooli", "Initech"]
        assert result["topDestinations"][0]["count"] == 4
        assert len(result["topDestinations"][0]["people"]) == 3

        search = workforce.searches[0]
        assert search["size"] == 100
        group = search["filters"][0]
        assert group["jobsGroupType"] == "ended"
        assert group["filters"][1]["field"] == "jobs.ended_at"

    @pytest.mark.asyncio
    async def test_arrivals_use_start_dates(self):
        workforce = FakeWorkforce(search_responses=[SearchResponse()])

        result = await execute_tool(
            workforce, "search_person_moves", {"company_name": "Acme", "direction": "arrivals"}, TODAY
        )

        assert result["totalPeople"] == 0
        group = workforce.searches[0]["filters"][0]
        assert group["jobsGroupType"] == "any"
        assert group["filters"][1]["field"] == "jobs.started_at"

    @pytest.mark.asyncio
    async def test_bad_direction(self):
        result = await execute_tool(
            FakeWorkforce(), "search_person_moves", {"company_name": "Acme", "direction": "sideways"}, TODAY
        )
        assert "error" in result


@pytest.mark.asyncio
async def test_unknown_tool():
    workforce = FakeWorkforce()
    assert await execute_tool(workforce, "delete_everything", {}, TODAY) == {"error": "Unknown tool: delete_everything"}
    assert workforce.searches == []
