"""
Company Summary Tests for Workforce Risk.
"""

import random
from datetime import date

import pytest

from workforce_risk.models.company import CompanySummary, DemographicsRow, FlowsRow
from workforce_risk.services.company_summary import (
    churn_pct,
    summarize_company,
    summarize_demographics,
    summarize_flows,
    summarize_flows_by_level,
)


def _month(index: int) -> date:
    """First of the month, index 0 = July 2023."""
    year, month_index = divmod(2023 * 12 + 6 + index, 12)
    return date(year, month_index + 1, 1)


@pytest.fixture
def demographics():
    rows = []
    for i in range(24):
        rows.append(DemographicsRow(date=_month(i), function="Engineering", count_employees=400 - i * 5))
        rows.append(DemographicsRow(date=_month(i), function="Sales and Support", count_employees=600 - i * 5))
    return rows


class TestSummarizeDemographics:
    """Tests for summarize_demographics."""

    def test_totals_and_growth(self, demographics):
        summary = summarize_demographics(demographics, "Engineering")
        assert summary.earliest_headcount == 1000
        assert summary.total_headcount == 770
        assert summary.growth_pct == -23
        assert summary.dept_name == "Engineering"
        assert summary.dept_headcount == 285

    def test_timeline_is_last_twelve_months(self, demographics):
        summary = summarize_demographics(demographics, "Engineering")
        assert len(summary.headcount_timeline) == 12
        assert summary.headcount_timeline[-1].date == "Jun 25"
        assert summary.headcount_timeline[-1].count == 770
        assert summary.headcount_timeline[-1].dept == 285

    def test_breakdown_per_function(self, demographics):
        breakdown = summarize_demographics(demographics, None).function_breakdown
        assert breakdown["Sales and Support"].earliest == 600
        assert breakdown["Sales and Support"].current == 485

    def test_function_absent(self, demographics):
        summary = summarize_demographics(demographics, "Legal")
        assert summary.dept_headcount is None
        assert summary.headcount_timeline[0].dept is None

    def test_duplicate_rows_are_summed(self):
        rows = [
            DemographicsRow(date=date(2025, 1, 1), function="Engineering", count_employees=10),
            DemographicsRow(date=date(2025, 1, 1), function="Engineering", count_employees=5),
        ]
        summary = summarize_demographics(rows, "Engineering")
        assert summary.total_headcount == 15
        assert summary.growth_pct == 0

    def test_empty(self):
        assert summarize_demographics([], "Engineering") == CompanySummary(dept_name="Engineering")

    def test_order_insensitive(self, demographics):
        shuffled = list(demographics)
        random.Random(7).shuffle(shuffled)
        assert summarize_demographics(shuffled, "Engineering") == summarize_demographics(demographics, "Engineering")


class TestFlows:
    """Tests for flows summaries."""

    def test_churn_pct(self):
        assert churn_pct(10, 8) == 80.0
        assert churn_pct(3, 1) == 33.3
        assert churn_pct(0, 5) == 0.0

    def test_summarize_flows_sorted_by_function(self):
        flows = summarize_flows([
            FlowsRow(group="Sales and Support", arrivals=10, departures=8),
            FlowsRow(group="Engineering", arrivals=4, departures=1),
        ])
        assert [f.function for f in flows] == ["Engineering", "Sales and Support"]
        assert flows[1].net == 2
        assert flows[1].churn_pct == 80.0

    def test_levels_in_ladder_order(self):
        rows = [
            FlowsRow(group="VP", arrivals=1),
            FlowsRow(group="Mystery", arrivals=2),
            FlowsRow(group="Staff", arrivals=30, departures=10),
            FlowsRow(group="Manager", arrivals=5),
        ]
        levels = summarize_flows_by_level(rows)
        assert [flow.level for flow in levels] == ["Staff", "Manager", "VP", "Mystery"]
        assert levels[0].net == 20

    def test_summarize_company_combines_all(self, demographics):
        summary = summarize_company(
            demographics,
            [FlowsRow(group="Engineering", arrivals=4, departures=1)],
            [FlowsRow(group="Manager", arrivals=5)],
            "Engineering",
        )
        assert summary.total_headcount == 770
        assert len(summary.flows) == 1
        assert summary.level_hiring[0].level == "Manager"
