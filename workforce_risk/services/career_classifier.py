"""
Career classification for Workforce Risk.

Turns a Subject's raw job history into a CareerProfile:
  1. Classify every job as real, internship or ignore
  2. Find the first real job and derive years of experience
  3. Accumulate years per function over real jobs (functional profile)
  4. Pick a career stage from level, title and years

Title patterns and the prestige employer list live in
data/classifier_patterns.json so they can be curated without code changes.
All functions are pure: `now` is always passed in.
"""

import json
import logging
import re
from dataclasses import dataclass
from datetime import date
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from workforce_risk.common.utils import round_half_up
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
from workforce_risk.models.person import LEVEL_RANK, Job, Level, Subject

logger = logging.getLogger(__name__)

PATTERNS_FILE = Path(__file__).resolve().parent.parent / "data" / "classifier_patterns.json"

DAYS_PER_YEAR = 365.25
MIN_JOB_YEARS = 0.25
UNKNOWN_FUNCTION = "Unknown"

# Ignore patterns never apply at or above this level
IGNORE_EXEMPT_RANK = LEVEL_RANK[Level.SENIOR_STAFF.value]

# (minimum dominant share, bucket), checked in order
DEPTH_THRESHOLDS: List[Tuple[float, DepthBucket]] = [
    (0.85, DepthBucket.DEEP_SPECIALIST),
    (0.65, DepthBucket.PRIMARY_WITH_EXPOSURE),
    (0.45, DepthBucket.MULTI_FUNCTIONAL),
]

CROSS_FUNCTIONAL_MIN_FUNCTIONS = 3
CROSS_FUNCTIONAL_MAX_SHARE = 0.65

MID_CAREER_MIN_YEARS = 8
EARLY_CAREER_MIN_YEARS = 3


@dataclass(frozen=True)
class ClassifierPatterns:
    """Compiled title patterns and the prestige employer list."""
    internship: Tuple[re.Pattern, ...]
    ignore: Tuple[Tuple[re.Pattern, str], ...]
    prestige_employers: Tuple[str, ...]
    stage_titles: Dict[str, Tuple[re.Pattern, ...]]


def _compile(patterns: Sequence[str]) -> Tuple[re.Pattern, ...]:
    return tuple(re.compile(p, re.IGNORECASE) for p in patterns)


@lru_cache()
def load_patterns(path: Optional[str] = None) -> ClassifierPatterns:
    """
    Load and compile classifier patterns (cached).

    Args:
        path: Optional override of the JSON file location

    Returns:
        ClassifierPatterns
    """
    source = Path(path) if path else PATTERNS_FILE
    with open(source, encoding="utf-8") as f:
        raw = json.load(f)

    patterns = ClassifierPatterns(
        internship=_compile(raw["internship"]),
        ignore=tuple(
            (re.compile(entry["pattern"], re.IGNORECASE), entry["reason"])
            for entry in raw["ignore"]
        ),
        prestige_employers=tuple(name.lower() for name in raw["prestige_employers"]),
        stage_titles={stage: _compile(items) for stage, items in raw["stage_titles"].items()},
    )
    logger.debug(
        f"Loaded classifier patterns: {len(patterns.internship)} internship, "
        f"{len(patterns.ignore)} ignore, {len(patterns.prestige_employers)} prestige"
    )
    return patterns


def _matches_any(text: str, patterns: Sequence[re.Pattern]) -> bool:
    return any(p.search(text) for p in patterns)


# =============================================================================
# Role classification
# =============================================================================

def is_prestige_employer(name: Optional[str]) -> bool:
    """
    Case-insensitive partial match against the prestige list, both directions.

    "Google LLC" matches "google"; "Meta" matches "meta platforms". The
    reverse direction needs at least three characters so that short names
    like "GE" do not match everything.
    """
    if not name or not name.strip():
        return False
    needle = name.strip().lower()
    for employer in load_patterns().prestige_employers:
        if employer in needle:
            return True
        if len(needle) >= 3 and needle in employer:
            return True
    return False


def classify_role(job: Job) -> RoleClassification:
    """
    Classify one job.

    Level Intern or an internship title wins, then ignore patterns
    (only below Senior Staff), everything else is a real role.
    """
    patterns = load_patterns()
    title = (job.title or "").strip()

    if job.level == Level.INTERN.value or _matches_any(title, patterns.internship):
        return InternshipRole(prestige=is_prestige_employer(job.company))

    if LEVEL_RANK.get(job.level or "", -1) >= IGNORE_EXEMPT_RANK:
        return RealRole()

    for pattern, reason in patterns.ignore:
        if pattern.search(title):
            return IgnoredRole(reason=reason)

    return RealRole()


def classify_jobs(jobs: Sequence[Job]) -> List[ClassifiedJob]:
    return [ClassifiedJob(job=job, classification=classify_role(job)) for job in jobs]


def _is_real(job: Job) -> bool:
    return isinstance(classify_role(job), RealRole)


# =============================================================================
# Experience
# =============================================================================

def first_real_job(jobs: Sequence[Job]) -> Optional[Job]:
    """Earliest real job by start date; undated jobs sort last."""
    ordered = sorted(
        jobs,
        key=lambda j: (j.started_at is None, j.started_at or date.min),
    )
    for job in ordered:
        if _is_real(job):
            return job
    return None


def years_of_experience(jobs: Sequence[Job], now: date) -> int:
    """
    Whole years since the first real job started.

    Returns 0 only when there is no real job; a real job that started
    recently (or has no start date) still counts as 1 year.
    """
    first = first_real_job(jobs)
    if first is None:
        return 0
    if first.started_at is None:
        return 1
    years = round_half_up((now - first.started_at).days / DAYS_PER_YEAR)
    return max(1, years)


def _job_years(job: Job, now: date) -> float:
    if job.started_at is None:
        return MIN_JOB_YEARS
    end = job.ended_at or now
    return max(MIN_JOB_YEARS, (end - job.started_at).days / DAYS_PER_YEAR)


def _depth_bucket(share: float) -> DepthBucket:
    for threshold, bucket in DEPTH_THRESHOLDS:
        if share >= threshold:
            return bucket
    return DepthBucket.GENERALIST


def _profile_summary(
    dominant: str,
    share: float,
    depth: DepthBucket,
    total_years: float,
    others: List[str],
) -> str:
    pct = round_half_up(share * 100)
    other_text = ", ".join(others[:3]) if others else "no other functions"
    if depth == DepthBucket.DEEP_SPECIALIST:
        return f"Deep {dominant} specialist: {pct}% of {total_years:.1f} years spent in {dominant}."
    if depth == DepthBucket.PRIMARY_WITH_EXPOSURE:
        return f"Primarily {dominant} ({pct}%) with exposure to {other_text}."
    if depth == DepthBucket.MULTI_FUNCTIONAL:
        return f"Multi-functional career anchored in {dominant} ({pct}%), also {other_text}."
    return (
        f"Generalist across {len(others) + 1} functions; {dominant} leads at only {pct}%."
    )


def functional_profile(jobs: Sequence[Job], now: date) -> Optional[FunctionalProfile]:
    """
    Accumulate years per function over real jobs.

    Each real job counts for at least a quarter year so undated current
    roles still carry weight.

    Returns:
        FunctionalProfile, or None when there is no real job
    """
    years: Dict[str, float] = {}
    for job in jobs:
        if not _is_real(job):
            continue
        function = job.function or UNKNOWN_FUNCTION
        years[function] = years.get(function, 0.0) + _job_years(job, now)

    if not years:
        return None

    total = sum(years.values())
    shares = {function: value / total for function, value in years.items()}
    ranked = sorted(years, key=lambda f: (-years[f], f))
    dominant = ranked[0]
    dominant_share = shares[dominant]
    depth = _depth_bucket(dominant_share)
    cross_functional = (
        len(years) >= CROSS_FUNCTIONAL_MIN_FUNCTIONS
        and dominant_share < CROSS_FUNCTIONAL_MAX_SHARE
    )

    return FunctionalProfile(
        dominant_function=dominant,
        dominant_share=dominant_share,
        depth=depth,
        years_by_function={f: round(years[f], 2) for f in ranked},
        shares_by_function={f: shares[f] for f in ranked},
        cross_functional=cross_functional,
        summary=_profile_summary(dominant, dominant_share, depth, total, ranked[1:]),
    )


# =============================================================================
# Career stage
# =============================================================================

def _title_matches(title: str, stage: CareerStage) -> bool:
    return _matches_any(title, load_patterns().stage_titles.get(stage.value, ()))


def career_stage(subject: Subject, years: int, first_real: Optional[Job]) -> CareerStage:
    """
    Decide the career stage. Checked in order:
    pre_career, pinnacle, senior_executive, senior_leader, mid_career,
    early_career, entry_level.
    """
    if first_real is None:
        return CareerStage.PRE_CAREER

    level = subject.current_level
    title = subject.current_title or ""

    if level == Level.C_TEAM.value or _title_matches(title, CareerStage.PINNACLE):
        return CareerStage.PINNACLE
    if level == Level.VP.value or _title_matches(title, CareerStage.SENIOR_EXECUTIVE):
        return CareerStage.SENIOR_EXECUTIVE
    if level == Level.DIRECTOR.value or _title_matches(title, CareerStage.SENIOR_LEADER):
        return CareerStage.SENIOR_LEADER
    if (
        level in (Level.MANAGER.value, Level.SENIOR_STAFF.value)
        or _title_matches(title, CareerStage.MID_CAREER)
        or years >= MID_CAREER_MIN_YEARS
    ):
        return CareerStage.MID_CAREER
    if years >= EARLY_CAREER_MIN_YEARS:
        return CareerStage.EARLY_CAREER
    return CareerStage.ENTRY_LEVEL


def build_career_profile(subject: Subject, now: date) -> CareerProfile:
    """Run every classifier step for one subject."""
    classified = classify_jobs(subject.jobs)
    first = first_real_job(subject.jobs)
    years = years_of_experience(subject.jobs, now)
    stage = career_stage(subject, years, first)

    profile = CareerProfile(
        classified_jobs=classified,
        first_real_job=first,
        years_experience=years,
        functional_profile=functional_profile(subject.jobs, now),
        stage=stage,
        stage_label=CAREER_STAGE_LABELS[stage],
    )
    logger.info(
        f"Career profile for {subject.name}: stage={stage.value}, years={years}, "
        f"real={len(profile.real_jobs)}, internships={len(profile.internships)}, "
        f"ignored={len(profile.ignored_roles)}"
    )
    return profile
