"""
Assessment models for Workforce Risk.

Scores, salary estimate, narrative and the top-level assessment result.
"""

from datetime import datetime
from enum import Enum
from typing import Any, List, Literal, Optional

from pydantic import Field, field_validator, model_validator

from workforce_risk.models.base import CamelModel
from workforce_risk.models.career import CareerProfile
from workforce_risk.models.company import CompanySummary
from workforce_risk.models.person import Subject


class Scores(CamelModel):
    """
    Risk scores, 0-100, higher = more risk.

    Attributes:
        ai_risk: Exposure of the current role to AI automation
        company_instability: Headcount trajectory of the employer
        promotion_ceiling: Manager-to-director hiring ratio
        tenure_volatility: Short average tenure and short stints
        function_churn: Departures relative to arrivals in the subject's function
        salary_compression: Derived from ai_risk and function_churn
        overall: Weighted combination of the six sub-scores
    """
    ai_risk: int = Field(ge=0, le=100)
    company_instability: int = Field(ge=0, le=100)
    promotion_ceiling: int = Field(ge=0, le=100)
    tenure_volatility: int = Field(ge=0, le=100)
    function_churn: int = Field(ge=0, le=100)
    salary_compression: int = Field(ge=0, le=100)
    overall: int = Field(ge=0, le=100)


class SalaryBand(CamelModel):
    low: int
    midpoint: int
    high: int
    p90: int


class LevelBand(SalaryBand):
    level: str


class PressureMagnitude(str, Enum):
    LOW = "Low"
    MODERATE = "Moderate"
    ELEVATED = "Elevated"
    HIGH = "High"


class PressureDirection(str, Enum):
    DOWNWARD = "downward"
    UPWARD = "upward"
    FLAT = "flat"


class AIPressure(CamelModel):
    """Expected effect of AI exposure on compensation."""
    magnitude: PressureMagnitude
    direction: PressureDirection
    pct_impact: int


class SalaryEstimate(CamelModel):
    estimate: SalaryBand
    progression: List[LevelBand]
    ai_pressure: AIPressure


class RetrainingPath(CamelModel):
    """One recommended career move."""
    rank: int = Field(ge=1, le=4)
    title: str
    function: str
    target_level: str
    fit_score: int = Field(ge=0, le=100)
    growth_score: int = Field(ge=0, le=100)
    ai_safe_score: int = Field(ge=0, le=100)
    rationale: str
    skills: List[str]
    time_to_transition: str
    salary_comparison: str

    @field_validator("fit_score", "growth_score", "ai_safe_score", "rank", mode="before")
    @classmethod
    def _round_number(cls, value: Any) -> Any:
        if isinstance(value, float):
            return int(round(value))
        return value


NarrativeSource = Literal["llm", "fallback", "pre_career"]


class Narrative(CamelModel):
    """
    Structured narrative of an assessment.

    Exactly four retraining paths whose ranks are a permutation of 1-4.
    """
    overview_summary: str
    career_pattern: str
    ai_threat_analysis: str
    ai_mitigating_factors: str
    company_health_summary: str
    promotion_analysis: str
    geo_market_context: str
    hiring_outlook: str
    retraining_paths: List[RetrainingPath] = Field(min_length=4, max_length=4)
    bottom_line: str
    directive: Optional[str] = None
    source: NarrativeSource = "llm"

    @model_validator(mode="after")
    def _check_ranks(self) -> "Narrative":
        ranks = sorted(path.rank for path in self.retraining_paths)
        if ranks != [1, 2, 3, 4]:
            raise ValueError(f"retraining path ranks must be 1-4, got {ranks}")
        self.retraining_paths = sorted(self.retraining_paths, key=lambda p: p.rank)
        return self


class CompanyHires(CamelModel):
    name: str
    hires: int


class CompanyCount(CamelModel):
    name: str
    count: int


class RegionalDemand(CamelModel):
    total_hires: int = 0
    total_companies: int = 0
    top_companies: List[CompanyHires] = Field(default_factory=list)


class EmployerFlow(CamelModel):
    total_alumni: int = 0
    top_destinations: List[CompanyCount] = Field(default_factory=list)


class SchoolNetwork(CamelModel):
    total_hires: int = 0
    top_companies: List[CompanyHires] = Field(default_factory=list)


class MultiSignalCompany(CamelModel):
    name: str
    signals: List[str]


class HiringSignals(CamelModel):
    """
    Where the subject's profile is being hired.

    Attributes:
        geo_region: Location used for the regional search
        regional: Hires in the subject's function/level near them
        employer_flow: Where alumni of the subject's employers went
        school: Where alumni of the subject's schools were hired
        schools: Schools searched
        multi_signal: Companies present in two or more signals
    """
    geo_region: Optional[str] = None
    regional: Optional[RegionalDemand] = None
    employer_flow: Optional[EmployerFlow] = None
    school: Optional[SchoolNetwork] = None
    schools: List[str] = Field(default_factory=list)
    multi_signal: List[MultiSignalCompany] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (
            (self.regional and self.regional.total_hires)
            or (self.employer_flow and self.employer_flow.total_alumni)
            or (self.school and self.school.total_hires)
            or self.multi_signal
        )


class AssessmentResult(CamelModel):
    """Top-level object returned by POST /assess."""
    person: Subject
    career: CareerProfile
    scores: Scores
    company: CompanySummary
    salary: SalaryEstimate
    hiring_signals: Optional[HiringSignals] = None
    narrative: Narrative
    generated_at: datetime
