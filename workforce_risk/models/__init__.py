"""
Data models for Workforce Risk.

This module contains Pydantic models for:
- person: Subject, Job, Function and Level
- career: role classification, functional profile, career stage
- company: workforce report rows and the company summary
- assessment: scores, salary, narrative and the assessment result
"""

from workforce_risk.models.assessment import (
    AIPressure,
    AssessmentResult,
    HiringSignals,
    LevelBand,
    Narrative,
    RetrainingPath,
    SalaryBand,
    SalaryEstimate,
    Scores,
)
from workforce_risk.models.career import (
    CAREER_STAGE_LABELS,
    CareerProfile,
    CareerStage,
    ClassifiedJob,
    DepthBucket,
    FunctionalProfile,
    IgnoredRole,
    InternshipRole,
    RealRole,
    RoleClassification,
)
from workforce_risk.models.company import (
    CompanySummary,
    DemographicsRow,
    FlowsRow,
)
from workforce_risk.models.person import (
    LEVEL_LADDER,
    LEVEL_RANK,
    Function,
    Job,
    Level,
    Subject,
)

__all__ = [
    # Person
    "Function",
    "Level",
    "LEVEL_RANK",
    "LEVEL_LADDER",
    "Job",
    "Subject",
    # Career
    "IgnoredRole",
    "InternshipRole",
    "RealRole",
    "RoleClassification",
    "ClassifiedJob",
    "DepthBucket",
    "FunctionalProfile",
    "CareerStage",
    "CAREER_STAGE_LABELS",
    "CareerProfile",
    # Company
    "DemographicsRow",
    "FlowsRow",
    "CompanySummary",
    # Assessment
    "Scores",
    "SalaryBand",
    "LevelBand",
    "AIPressure",
    "SalaryEstimate",
    "RetrainingPath",
    "Narrative",
    "HiringSignals",
    "AssessmentResult",
]
