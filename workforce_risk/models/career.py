"""
Career models for Workforce Risk.

Outputs of the career classifier: per-role classification, functional
profile and career stage.
"""

from enum import Enum
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import Field

from workforce_risk.models.base import CamelModel
from workforce_risk.models.person import Job


class IgnoredRole(CamelModel):
    """Student, part-time or service-industry role."""
    kind: Literal["ignore"] = "ignore"
    reason: str = ""


class InternshipRole(CamelModel):
    """Internship-like role; prestige marks a selective employer."""
    kind: Literal["internship"] = "internship"
    prestige: bool = False


class RealRole(CamelModel):
    """A career role that counts toward experience."""
    kind: Literal["real"] = "real"


RoleClassification = Annotated[
    Union[IgnoredRole, InternshipRole, RealRole],
    Field(discriminator="kind"),
]


class ClassifiedJob(CamelModel):
    """A job paired with its classification."""
    job: Job
    classification: RoleClassification

    @property
    def tag(self) -> str:
        """Short label used in prompts, e.g. `INTERNSHIP · PRESTIGE`."""
        c = self.classification
        if isinstance(c, InternshipRole):
            return "INTERNSHIP · PRESTIGE" if c.prestige else "INTERNSHIP"
        return c.kind.upper()


class DepthBucket(str, Enum):
    """How concentrated a career is in its dominant function."""
    DEEP_SPECIALIST = "deep_specialist"
    PRIMARY_WITH_EXPOSURE = "primary_with_exposure"
    MULTI_FUNCTIONAL = "multi_functional"
    GENERALIST = "generalist"


class FunctionalProfile(CamelModel):
    """
    Functional depth derived from real jobs only.

    Attributes:
        dominant_function: Function with the most accumulated years
        dominant_share: Share of total years in the dominant function (0-1)
        depth: Depth bucket derived from dominant_share
        years_by_function: Accumulated years per function
        shares_by_function: Share per function, sums to 1
        cross_functional: 3+ functions and dominant share below 0.65
        summary: One-sentence description for prompts
    """
    dominant_function: str
    dominant_share: float
    depth: DepthBucket
    years_by_function: Dict[str, float]
    shares_by_function: Dict[str, float]
    cross_functional: bool
    summary: str


class CareerStage(str, Enum):
    """Closed set of career stages."""
    PRE_CAREER = "pre_career"
    ENTRY_LEVEL = "entry_level"
    EARLY_CAREER = "early_career"
    MID_CAREER = "mid_career"
    SENIOR_LEADER = "senior_leader"
    SENIOR_EXECUTIVE = "senior_executive"
    PINNACLE = "pinnacle"


CAREER_STAGE_LABELS: Dict[CareerStage, str] = {
    CareerStage.PRE_CAREER: "Pre-career (student, intern or in transition)",
    CareerStage.ENTRY_LEVEL: "Entry level (first years of professional work)",
    CareerStage.EARLY_CAREER: "Early career (building core expertise)",
    CareerStage.MID_CAREER: "Mid career (experienced individual contributor or manager)",
    CareerStage.SENIOR_LEADER: "Senior leader (director / head-of level)",
    CareerStage.SENIOR_EXECUTIVE: "Senior executive (VP / GM level)",
    CareerStage.PINNACLE: "Pinnacle (C-suite, founder or chair)",
}


class CareerProfile(CamelModel):
    """
    Everything the classifier derives for one subject.

    Attributes:
        classified_jobs: Jobs in subject order with their classification
        first_real_job: Earliest real job, None for pre-career subjects
        years_experience: Whole years since the first real job
        functional_profile: Depth profile, None without real jobs
        stage: Career stage
        stage_label: Human-readable stage label
    """
    classified_jobs: List[ClassifiedJob] = Field(default_factory=list)
    first_real_job: Optional[Job] = None
    years_experience: int = 0
    functional_profile: Optional[FunctionalProfile] = None
    stage: CareerStage = CareerStage.PRE_CAREER
    stage_label: str = CAREER_STAGE_LABELS[CareerStage.PRE_CAREER]

    @property
    def internships(self) -> List[ClassifiedJob]:
        return [c for c in self.classified_jobs if isinstance(c.classification, InternshipRole)]

    @property
    def prestige_internships(self) -> List[ClassifiedJob]:
        return [c for c in self.internships if c.classification.prestige]

    @property
    def ignored_roles(self) -> List[ClassifiedJob]:
        return [c for c in self.classified_jobs if isinstance(c.classification, IgnoredRole)]

    @property
    def real_jobs(self) -> List[ClassifiedJob]:
        return [c for c in self.classified_jobs if isinstance(c.classification, RealRole)]
