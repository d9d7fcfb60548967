"""
Company models for Workforce Risk.

Raw report rows from the workforce service and their summaries.
"""

from datetime import date as date_type
from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator

from workforce_risk.models.base import CamelModel, parse_date


def _group_value(row: Dict[str, Any]) -> str:
    values = row.get("group_values") or []
    if values and values[0].get("value") is not None:
        return str(values[0]["value"])
    return "Unknown"


class DemographicsRow(CamelModel):
    """Active employee count for one function on one date."""
    date: Optional[date_type] = None
    function: str = "Unknown"
    count_employees: int = 0

    @field_validator("date", mode="before")
    @classmethod
    def _coerce_date(cls, value: Any) -> Optional[date_type]:
        return parse_date(value)

    @classmethod
    def from_report(cls, row: Dict[str, Any]) -> "DemographicsRow":
        return cls(
            date=row.get("date"),
            function=_group_value(row),
            count_employees=row.get("count_employees") or 0,
        )


class FlowsRow(CamelModel):
    """Arrivals and departures for one function or level over a window."""
    group: str = "Unknown"
    arrivals: int = 0
    departures: int = 0

    @classmethod
    def from_report(cls, row: Dict[str, Any]) -> "FlowsRow":
        return cls(
            group=_group_value(row),
            arrivals=row.get("arrivals") or 0,
            departures=row.get("departures") or 0,
        )


class TimelinePoint(CamelModel):
    """One month of the headcount timeline."""
    date: str
    count: int
    dept: Optional[int] = None


class FunctionHeadcount(CamelModel):
    current: int = 0
    earliest: int = 0


class FunctionFlow(CamelModel):
    """Hiring and attrition for one function."""
    function: str
    hires: int
    departures: int
    net: int
    churn_pct: float


class LevelFlow(CamelModel):
    """Hiring and attrition for one level."""
    level: str
    hires: int
    departures: int
    net: int


class CompanySummary(CamelModel):
    """
    Aggregated workforce picture of the subject's employer.

    Attributes:
        total_headcount: Total active employees at the latest date
        earliest_headcount: Total active employees at the earliest date
        growth_pct: Whole-percent growth between earliest and latest date
        dept_headcount: Latest headcount of the subject's function
        dept_name: Subject's function
        headcount_timeline: Up to 12 most recent months
        function_breakdown: Latest and earliest headcount per function
        flows: Arrivals/departures per function
        level_hiring: Arrivals/departures per level
    """
    total_headcount: int = 0
    earliest_headcount: int = 0
    growth_pct: int = 0
    dept_headcount: Optional[int] = None
    dept_name: Optional[str] = None
    headcount_timeline: List[TimelinePoint] = Field(default_factory=list)
    function_breakdown: Dict[str, FunctionHeadcount] = Field(default_factory=dict)
    flows: List[FunctionFlow] = Field(default_factory=list)
    level_hiring: List[LevelFlow] = Field(default_factory=list)
