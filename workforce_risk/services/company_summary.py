"""
Company summaries for Workforce Risk.

Aggregates raw demographics and flows rows into the CompanySummary shown
to the caller and fed to the narrative prompt. Every summary is
insensitive to the order of its input rows.
"""

import logging
from collections import defaultdict
from datetime import date
from typing import Dict, List, Optional, Sequence

from workforce_risk.common.utils import month_label, round_half_up
from workforce_risk.models.company import (
    CompanySummary,
    DemographicsRow,
    FlowsRow,
    FunctionFlow,
    FunctionHeadcount,
    LevelFlow,
    TimelinePoint,
)
from workforce_risk.models.person import LEVEL_RANK

logger = logging.getLogger(__name__)

TIMELINE_MONTHS = 12


def summarize_demographics(
    rows: Sequence[DemographicsRow],
    function: Optional[str],
) -> CompanySummary:
    """
    Headcount totals, growth, per-function breakdown and a 12-month timeline.

    Args:
        rows: Demographics rows, any order
        function: Subject's function, used for the department series

    Returns:
        CompanySummary without flows (see `summarize_company`)
    """
    by_function: Dict[str, Dict[date, int]] = defaultdict(lambda: defaultdict(int))
    by_date: Dict[date, int] = defaultdict(int)

    for row in rows:
        if row.date is None:
            continue
        by_function[row.function][row.date] += row.count_employees
        by_date[row.date] += row.count_employees

    dates = sorted(by_date)
    if not dates:
        return CompanySummary(dept_name=function)

    earliest_date, latest_date = dates[0], dates[-1]
    total = by_date[latest_date]
    earliest = by_date[earliest_date]
    growth_pct = round_half_up((total - earliest) / earliest * 100) if earliest > 0 else 0

    breakdown = {
        name: FunctionHeadcount(
            current=counts.get(latest_date, 0),
            earliest=counts.get(earliest_date, 0),
        )
        for name, counts in sorted(by_function.items())
    }

    dept_series = by_function.get(function) if function else None
    dept_headcount = dept_series.get(latest_date, 0) if dept_series is not None else None

    timeline = [
        TimelinePoint(
            date=month_label(day),
            count=by_date[day],
            dept=dept_series.get(day, 0) if dept_series is not None else None,
        )
        for day in dates[-TIMELINE_MONTHS:]
    ]

    return CompanySummary(
        total_headcount=total,
        earliest_headcount=earliest,
        growth_pct=growth_pct,
        dept_headcount=dept_headcount,
        dept_name=function,
        headcount_timeline=timeline,
        function_breakdown=breakdown,
    )


def _sum_flows(rows: Sequence[FlowsRow]) -> Dict[str, List[int]]:
    totals: Dict[str, List[int]] = defaultdict(lambda: [0, 0])
    for row in rows:
        totals[row.group][0] += row.arrivals
        totals[row.group][1] += row.departures
    return totals


def churn_pct(arrivals: int, departures: int) -> float:
    """Departures per 100 arrivals, one decimal; 0 without arrivals."""
    if arrivals <= 0:
        return 0.0
    return round_half_up(departures / arrivals * 1000) / 10


def summarize_flows(rows: Sequence[FlowsRow]) -> List[FunctionFlow]:
    """Arrivals and departures per function, sorted by function name."""
    return [
        FunctionFlow(
            function=name,
            hires=arrivals,
            departures=departures,
            net=arrivals - departures,
            churn_pct=churn_pct(arrivals, departures),
        )
        for name, (arrivals, departures) in sorted(_sum_flows(rows).items())
    ]


def summarize_flows_by_level(rows: Sequence[FlowsRow]) -> List[LevelFlow]:
    """Arrivals and departures per level, in ladder order (unknown levels last)."""
    totals = _sum_flows(rows)
    ordered = sorted(totals, key=lambda level: (LEVEL_RANK.get(level, len(LEVEL_RANK)), level))
    return [
        LevelFlow(
            level=level,
            hires=totals[level][0],
            departures=totals[level][1],
            net=totals[level][0] - totals[level][1],
        )
        for level in ordered
    ]


def summarize_company(
    demographics: Sequence[DemographicsRow],
    flows: Sequence[FlowsRow],
    flows_by_level: Sequence[FlowsRow],
    function: Optional[str],
) -> CompanySummary:
    """Full company summary: demographics plus both flows shapes."""
    summary = summarize_demographics(demographics, function)
    summary = summary.model_copy(
        update={
            "flows": summarize_flows(flows),
            "level_hiring": summarize_flows_by_level(flows_by_level),
        }
    )
    logger.debug(
        f"Company summary: headcount={summary.total_headcount}, growth={summary.growth_pct}%, "
        f"{len(summary.flows)} function flows, {len(summary.level_hiring)} level flows"
    )
    return summary
