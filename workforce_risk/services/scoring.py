"""
Risk scoring engine for Workforce Risk.

Scores are 0-100 where higher = more risk. Every sub-score falls back to
a neutral value when its input is missing (50, or 40 for tenure
volatility) so a degraded workforce service still yields a complete
score card.
"""

import logging
from collections import defaultdict
from datetime import date
from typing import Dict, List, Optional, Sequence, Tuple

from workforce_risk.common.utils import clamp
from workforce_risk.models.assessment import Scores
from workforce_risk.models.company import DemographicsRow, FlowsRow
from workforce_risk.models.person import Job, Level, Subject

logger = logging.getLogger(__name__)

NEUTRAL_SCORE = 50
NEUTRAL_TENURE_SCORE = 40

# =============================================================================
# AI automation exposure
# =============================================================================

AI_RISK_BY_FUNCTION: Dict[str, int] = {
    "Sales and Support": 70,
    "Marketing and Product": 45,
    "Business Management": 30,
    "Finance and Administration": 35,
    "Human Resources": 25,
    "Engineering": 20,
    "Operations": 30,
    "Information Technology": 40,
    "Consulting": 35,
    "Program and Project Management": 25,
    "Legal": 20,
    "Risk, Safety, Compliance": 15,
    "Healthcare": 15,
    "Education": 20,
}

AI_RISK_LEVEL_MODIFIER: Dict[str, int] = {
    Level.STAFF.value: 15,
    Level.SENIOR_STAFF.value: 10,
    Level.INTERN.value: 20,
    Level.CONSULTANT.value: 10,
    Level.MANAGER.value: -5,
    Level.DIRECTOR.value: -15,
    Level.VP.value: -20,
    Level.C_TEAM.value: -25,
}

HIGH_AI_RISK_TITLES = [
    "sdr", "bdr", "sales development", "business development",
    "outbound", "lead generation", "prospecting",
    "data entry", "scheduling", "coordinator",
]
HIGH_AI_RISK_BONUS = 12

LOW_AI_RISK_TITLES = [
    "strategy", "leadership", "director", "vp", "chief",
    "enablement", "operations", "success", "relationship",
]
LOW_AI_RISK_DISCOUNT = 10

# =============================================================================
# Piecewise maps: (exclusive lower bound, score), first match wins
# =============================================================================

GROWTH_TO_INSTABILITY: List[Tuple[float, int]] = [
    (0.5, 15),
    (0.2, 25),
    (0.05, 35),
    (-0.05, 50),
    (-0.2, 70),
]
SHRINKING_INSTABILITY = 85

# (inclusive upper bound on managers per director, score)
PROMOTION_RATIO_BANDS: List[Tuple[float, int]] = [
    (2, 30),
    (3, 40),
    (4, 55),
    (6, 65),
]
CROWDED_PROMOTION_SCORE = 75
NO_MANAGER_HIRES_SCORE = 40

# (exclusive upper bound on average tenure months, score)
TENURE_BANDS: List[Tuple[float, int]] = [
    (12, 75),
    (18, 60),
    (24, 45),
    (36, 35),
]
LONG_TENURE_SCORE = 25
SHORT_STINT_MONTHS = 6
SHORT_STINT_PENALTY = 5
DAYS_PER_MONTH = 30

# (exclusive upper bound on departures / arrivals, score)
CHURN_BANDS: List[Tuple[float, int]] = [
    (0.25, 20),
    (0.35, 35),
    (0.5, 50),
    (0.65, 65),
]
HIGH_CHURN_SCORE = 78

OVERALL_WEIGHTS: Dict[str, float] = {
    "ai_risk": 0.30,
    "company_instability": 0.20,
    "promotion_ceiling": 0.15,
    "tenure_volatility": 0.10,
    "function_churn": 0.15,
    "salary_compression": 0.10,
}


def score_ai_risk(function: Optional[str], level: Optional[str], title: Optional[str]) -> int:
    """
    Exposure of the current role to AI automation.

    Function base, plus level modifier, plus/minus title keyword
    adjustments (both may apply). Unknown function starts neutral.
    """
    score = AI_RISK_BY_FUNCTION.get(function or "", NEUTRAL_SCORE)
    score += AI_RISK_LEVEL_MODIFIER.get(level or "", 0)

    lowered = (title or "").lower()
    if any(keyword in lowered for keyword in HIGH_AI_RISK_TITLES):
        score += HIGH_AI_RISK_BONUS
    if any(keyword in lowered for keyword in LOW_AI_RISK_TITLES):
        score -= LOW_AI_RISK_DISCOUNT

    return clamp(score)


def totals_by_date(rows: Sequence[DemographicsRow]) -> Dict[date, int]:
    """Sum employee counts across functions for each date."""
    totals: Dict[date, int] = defaultdict(int)
    for row in rows:
        if row.date is None:
            continue
        totals[row.date] += row.count_employees
    return dict(totals)


def score_company_instability(rows: Sequence[DemographicsRow]) -> int:
    """Headcount trajectory: growing is low risk, shrinking is high."""
    totals = totals_by_date(rows)
    if len(totals) < 2:
        return NEUTRAL_SCORE

    dates = sorted(totals)
    earliest = totals[dates[0]]
    latest = totals[dates[-1]]
    if earliest == 0:
        return NEUTRAL_SCORE

    growth = (latest - earliest) / earliest
    for lower_bound, score in GROWTH_TO_INSTABILITY:
        if growth > lower_bound:
            return score
    return SHRINKING_INSTABILITY


def score_promotion_ceiling(rows: Sequence[FlowsRow]) -> int:
    """Manager-to-director hiring ratio; few director hires means a crowded ladder."""
    if not rows:
        return NEUTRAL_SCORE

    arrivals: Dict[str, int] = defaultdict(int)
    for row in rows:
        arrivals[row.group] += row.arrivals

    managers = arrivals.get(Level.MANAGER.value, 0)
    directors = arrivals.get(Level.DIRECTOR.value, 0)

    if directors == 0 and managers > 0:
        return CROWDED_PROMOTION_SCORE
    if managers == 0:
        return NO_MANAGER_HIRES_SCORE

    ratio = managers / max(directors, 1)
    for upper_bound, score in PROMOTION_RATIO_BANDS:
        if ratio <= upper_bound:
            return score
    return CROWDED_PROMOTION_SCORE


def score_tenure_volatility(jobs: Sequence[Job]) -> int:
    """Short average tenure and short stints raise the score."""
    if len(jobs) < 2:
        return NEUTRAL_TENURE_SCORE

    tenures = []
    for job in jobs:
        if job.started_at and job.ended_at:
            months = (job.ended_at - job.started_at).days / DAYS_PER_MONTH
            if months > 0:
                tenures.append(months)

    if not tenures:
        return NEUTRAL_TENURE_SCORE

    average = sum(tenures) / len(tenures)
    short_stints = sum(1 for months in tenures if months < SHORT_STINT_MONTHS)

    score = LONG_TENURE_SCORE
    for upper_bound, band_score in TENURE_BANDS:
        if average < upper_bound:
            score = band_score
            break

    return clamp(score + SHORT_STINT_PENALTY * short_stints)


def score_function_churn(rows: Sequence[FlowsRow], function: Optional[str]) -> int:
    """Departures relative to arrivals in the subject's function."""
    if not rows:
        return NEUTRAL_SCORE

    arrivals = 0
    departures = 0
    for row in rows:
        if row.group == function:
            arrivals += row.arrivals
            departures += row.departures

    if arrivals == 0:
        return NEUTRAL_SCORE

    ratio = departures / arrivals
    for upper_bound, score in CHURN_BANDS:
        if ratio < upper_bound:
            return score
    return HIGH_CHURN_SCORE


def score_salary_compression(ai_risk: int, function_churn: int) -> int:
    return clamp(0.6 * ai_risk + 0.4 * function_churn)


def compute_overall_risk(scores: Dict[str, int]) -> int:
    """Weighted mean of the sub-scores present in `scores`."""
    total = 0.0
    total_weight = 0.0
    for key, weight in OVERALL_WEIGHTS.items():
        if scores.get(key) is not None:
            total += scores[key] * weight
            total_weight += weight
    return clamp(total / (total_weight or 1))


def compute_all_scores(
    subject: Subject,
    demographics: Sequence[DemographicsRow],
    flows: Sequence[FlowsRow],
    flows_by_level: Sequence[FlowsRow],
) -> Scores:
    """
    Compute the full score card for a subject.

    Args:
        subject: Subject under assessment
        demographics: Demographics rows over the demographics window
        flows: Flows rows grouped by function
        flows_by_level: Flows rows grouped by level

    Returns:
        Scores
    """
    ai_risk = score_ai_risk(subject.current_function, subject.current_level, subject.current_title)
    function_churn = score_function_churn(flows, subject.current_function)

    values = {
        "ai_risk": ai_risk,
        "company_instability": score_company_instability(demographics),
        "promotion_ceiling": score_promotion_ceiling(flows_by_level),
        "tenure_volatility": score_tenure_volatility(subject.jobs),
        "function_churn": function_churn,
        "salary_compression": score_salary_compression(ai_risk, function_churn),
    }
    values["overall"] = compute_overall_risk(values)

    logger.info(f"Scores for {subject.name}: {values}")
    return Scores(**values)
