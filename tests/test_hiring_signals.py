"""
Hiring Signals Tests for Workforce Risk.
"""

from datetime import date

import pytest

from tests.fakes import FakeWorkforce, person_record
from workforce_risk.clients.workforce_client import SearchResponse
from workforce_risk.models.assessment import (
    CompanyCount,
    CompanyHires,
    EmployerFlow,
    RegionalDemand,
    SchoolNetwork,
)
from workforce_risk.models.person import Subject
from workforce_risk.services.hiring_signals import (
    collect_hiring_signals,
    employer_flow,
    multi_signal_companies,
    regional_demand,
    school_network,
)

TODAY = date(2025, 6, 15)


def _report(*pairs) -> SearchResponse:
    return SearchResponse(report_results={
        "arrivals_departures": [
            {"group_values": [{"value": name}], "arrivals": arrivals, "departures": 0}
            for name, arrivals in pairs
        ]
    })


def _alumni(*companies) -> SearchResponse:
    return SearchResponse(results=[
        {"name": f"Person {i}", "position": {"company": {"name": company}}}
        for i, company in enumerate(companies)
    ])


@pytest.fixture
def subject():
    return Subject.from_person_record(
        person_record(education=[{"degree": "BBA", "school": "UT Austin"}])
    )


class TestRegionalDemand:
    """Tests for regional_demand."""

    @pytest.mark.asyncio
    async def test_ranks_companies_and_skips_placeholders(self, subject):
        workforce = FakeWorkforce(search_responses=[
            _report(("Hooli", 3), ("Initech", 8), ("None", 20), ("Freelance/Self-employed", 4), ("Acme", 3)),
        ])

        regional = await regional_demand(workforce, subject, TODAY)

        assert [c.name for c in regional.top_companies] == ["Initech", "Acme", "Hooli"]
        assert regional.total_hires == 14
        assert regional.total_companies == 3

        group = workforce.searches[0]["filters"][0]
        assert group["isJobsGroup"] is True
        fields = [f["field"] for f in group["filters"]]
        assert fields == ["jobs.location", "jobs.function", "jobs.level", "jobs.started_at"]
        assert group["filters"][3]["date_from"] == "2024-12-15"
        assert group["report"]["params"]["group_by"] == ["jobs.company.name"]

    @pytest.mark.asyncio
    async def test_requires_location(self):
        workforce = FakeWorkforce()
        assert await regional_demand(workforce, Subject(name="No Place"), TODAY) is None
        assert workforce.searches == []

    @pytest.mark.asyncio
    async def test_failed_search(self, subject):
        workforce = FakeWorkforce(search_responses=[SearchResponse(ok=False, error="API returned 503")])
        assert await regional_demand(workforce, subject, TODAY) is None


class TestEmployerFlow:
    """Tests for employer_flow."""

    @pytest.mark.asyncio
    async def test_excludes_own_employers(self, subject):
        workforce = FakeWorkforce(search_responses=[
            _alumni("Initech", "Initech", "Acme Corp", "globex", "Hooli", "None"),
        ])

        flow = await employer_flow(workforce, subject, TODAY)

        assert flow.total_alumni == 6
        assert flow.top_destinations == [
            CompanyCount(name="Initech", count=2),
            CompanyCount(name="Hooli", count=1),
        ]
        search = workforce.searches[0]
        assert search["size"] == 100
        group = search["filters"][0]
        assert group["jobsGroupType"] == "ended"
        assert group["filters"][0]["string_values"] == ["Acme Corp", "Globex"]

    @pytest.mark.asyncio
    async def test_no_employers(self):
        assert await employer_flow(FakeWorkforce(), Subject(name="Nobody"), TODAY) is None


class TestSchoolNetwork:
    """Tests for school_network."""

    @pytest.mark.asyncio
    async def test_school_hires(self, subject):
        workforce = FakeWorkforce(search_responses=[_report(("Initech", 2))])

        school = await school_network(workforce, subject, TODAY)

        assert school.total_hires == 2
        assert workforce.searches[0]["filters"][0]["filters"][0]["string_values"] == ["UT Austin"]

    @pytest.mark.asyncio
    async def test_no_schools(self, sales_subject):
        assert await school_network(FakeWorkforce(), sales_subject, TODAY) is None


class TestMultiSignal:
    """Tests for multi_signal_companies and collect_hiring_signals."""

    def test_needs_two_signals(self):
        regional = RegionalDemand(top_companies=[CompanyHires(name="Initech", hires=5), CompanyHires(name="Hooli", hires=1)])
        employer = EmployerFlow(top_destinations=[CompanyCount(name="Initech", count=2), CompanyCount(name="Hooli", count=1)])
        school = SchoolNetwork(top_companies=[CompanyHires(name="Initech", hires=1), CompanyHires(name="Vandelay", hires=9)])

        matches = multi_signal_companies(regional, employer, school)

        assert [(m.name, m.signals) for m in matches] == [
            ("Initech", ["regional", "employer", "school"]),
            ("Hooli", ["regional", "employer"]),
        ]

    def test_none_signals(self):
        assert multi_signal_companies(None, None, None) == []

    @pytest.mark.asyncio
    async def test_collect_all(self, subject):
        workforce = FakeWorkforce(search_responses=[
            _report(("Initech", 8)),
            _alumni("Initech", "Hooli"),
            _report(("Vandelay", 1)),
        ])

        signals = await collect_hiring_signals(workforce, subject, TODAY)

        assert len(workforce.searches) == 3
        assert signals.geo_region == "Austin, Texas"
        assert signals.schools == ["UT Austin"]
        assert [m.name for m in signals.multi_signal] == ["Initech"]

    @pytest.mark.asyncio
    async def test_collect_partial_failure(self, subject):
        workforce = FakeWorkforce(search_responses=[
            SearchResponse(ok=False, error="down"),
            _alumni("Initech"),
            SearchResponse(ok=False, error="down"),
        ])

        signals = await collect_hiring_signals(workforce, subject, TODAY)

        assert signals.regional is None
        assert signals.school is None
        assert signals.employer_flow.total_alumni == 1
        assert signals.schools == []

    @pytest.mark.asyncio
    async def test_collect_nothing(self):
        signals = await collect_hiring_signals(FakeWorkforce(), Subject(name="Nobody"), TODAY)
        assert signals is None
