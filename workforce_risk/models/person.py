"""
Person models for Workforce Risk.

Subject and Job are built once per assessment from the workforce service's
person record and are immutable afterwards.
"""

import logging
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import ConfigDict, Field, field_validator, model_validator

from workforce_risk.models.base import CamelModel, parse_date

logger = logging.getLogger(__name__)


class Function(str, Enum):
    """Closed set of job functions used by the workforce service."""
    SALES_AND_SUPPORT = "Sales and Support"
    MARKETING_AND_PRODUCT = "Marketing and Product"
    BUSINESS_MANAGEMENT = "Business Management"
    FINANCE_AND_ADMINISTRATION = "Finance and Administration"
    HUMAN_RESOURCES = "Human Resources"
    ENGINEERING = "Engineering"
    OPERATIONS = "Operations"
    INFORMATION_TECHNOLOGY = "Information Technology"
    CONSULTING = "Consulting"
    PROGRAM_AND_PROJECT_MANAGEMENT = "Program and Project Management"
    LEGAL = "Legal"
    RISK_SAFETY_COMPLIANCE = "Risk, Safety, Compliance"
    HEALTHCARE = "Healthcare"
    EDUCATION = "Education"


class Level(str, Enum):
    """Closed, ordered set of seniority levels."""
    INTERN = "Intern"
    STAFF = "Staff"
    SENIOR_STAFF = "Senior Staff"
    CONSULTANT = "Consultant"
    MANAGER = "Manager"
    DIRECTOR = "Director"
    VP = "VP"
    C_TEAM = "C-Team"


# Senior Staff and Consultant share a rung
LEVEL_RANK: Dict[str, int] = {
    Level.INTERN.value: 0,
    Level.STAFF.value: 1,
    Level.SENIOR_STAFF.value: 2,
    Level.CONSULTANT.value: 2,
    Level.MANAGER.value: 3,
    Level.DIRECTOR.value: 4,
    Level.VP.value: 5,
    Level.C_TEAM.value: 6,
}

LEVEL_LADDER: List[Level] = list(Level)

DEFAULT_FUNCTION = Function.SALES_AND_SUPPORT.value
DEFAULT_LEVEL = Level.STAFF.value


class Job(CamelModel):
    """
    A single role record.

    Attributes:
        title: Free-text job title
        company: Employer name
        company_id: Opaque employer identifier
        function: Job function (see Function)
        level: Seniority level (see Level)
        started_at: Start date
        ended_at: End date, None for a current role
    """
    model_config = ConfigDict(frozen=True)

    title: Optional[str] = None
    company: Optional[str] = None
    company_id: Optional[str] = None
    function: Optional[str] = None
    level: Optional[str] = None
    started_at: Optional[date] = None
    ended_at: Optional[date] = None

    @field_validator("started_at", "ended_at", mode="before")
    @classmethod
    def _coerce_date(cls, value: Any) -> Optional[date]:
        return parse_date(value)

    @model_validator(mode="before")
    @classmethod
    def _check_dates(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        start = parse_date(data.get("started_at", data.get("startedAt")))
        end = parse_date(data.get("ended_at", data.get("endedAt")))
        if start and end and end < start:
            logger.warning(
                f"Dropping end date before start date for '{data.get('title')}'"
            )
            data = {k: v for k, v in data.items() if k not in ("ended_at", "endedAt")}
        return data

    @property
    def is_current(self) -> bool:
        return self.ended_at is None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Job":
        """Build a Job from a `jobs[]` entry of a person record."""
        company = record.get("company") or {}
        company_id = company.get("id")
        return cls(
            title=record.get("title"),
            company=company.get("name"),
            company_id=str(company_id) if company_id is not None else None,
            function=record.get("function"),
            level=record.get("level"),
            started_at=record.get("started_at"),
            ended_at=record.get("ended_at"),
        )


class Subject(CamelModel):
    """
    Person under assessment.

    Current title/company/function/level come from the `position` block
    when present, otherwise from the most recent job.
    """
    model_config = ConfigDict(frozen=True)

    name: str = "Unknown"
    linkedin: Optional[str] = None
    location: Optional[str] = None
    current_title: str = "Unknown"
    current_company: str = "Unknown"
    current_company_id: Optional[str] = None
    current_function: str = DEFAULT_FUNCTION
    current_level: str = DEFAULT_LEVEL
    started_at: Optional[date] = None
    education: Optional[str] = None
    schools: List[str] = Field(default_factory=list)
    jobs: List[Job] = Field(default_factory=list)

    @field_validator("started_at", mode="before")
    @classmethod
    def _coerce_date(cls, value: Any) -> Optional[date]:
        return parse_date(value)

    @classmethod
    def from_person_record(cls, record: Dict[str, Any]) -> "Subject":
        """
        Parse a person record returned by the workforce `find` endpoint.

        Args:
            record: One entry of `matches[0].results`

        Returns:
            Subject instance
        """
        position = record.get("position") or {}
        position_company = position.get("company") or {}
        raw_jobs = record.get("jobs") or []
        first_job = raw_jobs[0] if raw_jobs else {}
        first_company = first_job.get("company") or {}

        education_entries = record.get("education") or []
        education = ", ".join(
            f"{e.get('degree') or ''} @ {e.get('school') or ''}" for e in education_entries
        ) or None
        schools = [e["school"] for e in education_entries if e.get("school")]

        company_id = position_company.get("id") or first_company.get("id")

        return cls(
            name=record.get("name") or "Unknown",
            linkedin=record.get("linkedin"),
            location=record.get("location"),
            current_title=position.get("title") or first_job.get("title") or "Unknown",
            current_company=position_company.get("name") or first_company.get("name") or "Unknown",
            current_company_id=str(company_id) if company_id else None,
            current_function=first_job.get("function") or DEFAULT_FUNCTION,
            current_level=first_job.get("level") or DEFAULT_LEVEL,
            started_at=position.get("started_at") or first_job.get("started_at"),
            education=education,
            schools=schools,
            jobs=[Job.from_record(j) for j in raw_jobs],
        )
