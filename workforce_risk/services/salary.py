"""
Salary estimation for Workforce Risk.

Estimates are function base x level multiplier x geo multiplier. Bases are
national medians in USD aggregated from public salary surveys.
"""

import logging
from typing import Dict, List, Optional, Tuple

from workforce_risk.common.utils import round_half_up
from workforce_risk.models.assessment import (
    AIPressure,
    LevelBand,
    PressureDirection,
    PressureMagnitude,
    SalaryBand,
    SalaryEstimate,
)
from workforce_risk.models.person import LEVEL_LADDER, Subject

logger = logging.getLogger(__name__)

DEFAULT_BASE = 80000

BASE_BY_FUNCTION: Dict[str, int] = {
    "Sales and Support": 75000,
    "Engineering": 130000,
    "Marketing and Product": 95000,
    "Business Management": 85000,
    "Finance and Administration": 80000,
    "Human Resources": 72000,
    "Operations": 70000,
    "Information Technology": 90000,
    "Consulting": 95000,
    "Program and Project Management": 90000,
    "Legal": 110000,
    "Risk, Safety, Compliance": 85000,
    "Healthcare": 80000,
    "Education": 55000,
}

LEVEL_MULTIPLIER: Dict[str, float] = {
    "Intern": 0.4,
    "Staff": 0.85,
    "Senior Staff": 1.1,
    "Manager": 1.35,
    "Director": 1.75,
    "VP": 2.3,
    "C-Team": 3.0,
    "Consultant": 1.15,
}

# Substring match on the lowercased location, first entry wins
GEO_MULTIPLIER: List[Tuple[str, float]] = [
    # Major tech hubs
    ("san francisco", 1.45),
    ("san jose", 1.40),
    ("new york", 1.35),
    ("new york city", 1.35),
    ("nyc", 1.35),
    ("brooklyn", 1.32),
    ("manhattan", 1.38),
    ("seattle", 1.25),
    ("boston", 1.22),
    ("los angeles", 1.20),
    ("washington", 1.18),
    ("dc", 1.18),
    ("austin", 1.10),
    ("denver", 1.08),
    ("chicago", 1.10),
    # Secondary markets
    ("portland", 1.05),
    ("miami", 1.05),
    ("atlanta", 1.02),
    ("dallas", 1.02),
    ("houston", 1.00),
    ("phoenix", 0.95),
    ("minneapolis", 1.02),
    ("philadelphia", 1.08),
    ("san diego", 1.12),
    # International
    ("london", 1.20),
    ("tel aviv", 1.10),
    ("berlin", 0.90),
    ("toronto", 0.95),
    ("sydney", 1.05),
    ("singapore", 1.15),
]

STATE_MULTIPLIER: List[Tuple[Tuple[str, ...], float]] = [
    (("california", ", ca"), 1.25),
    (("new york", ", ny"), 1.28),
    (("washington", ", wa"), 1.18),
    (("massachusetts", ", ma"), 1.15),
    (("texas", ", tx"), 1.02),
]

DEFAULT_GEO_MULTIPLIER = 1.0

LOW_FACTOR = 0.78
HIGH_FACTOR = 1.30
P90_FACTOR = 1.55

# (exclusive upper bound on ai_risk, magnitude, direction, pct impact)
AI_PRESSURE_BANDS: List[Tuple[int, PressureMagnitude, PressureDirection, int]] = [
    (15, PressureMagnitude.LOW, PressureDirection.UPWARD, 3),
    (30, PressureMagnitude.LOW, PressureDirection.FLAT, 0),
    (50, PressureMagnitude.MODERATE, PressureDirection.DOWNWARD, -3),
    (70, PressureMagnitude.ELEVATED, PressureDirection.DOWNWARD, -8),
]
MAX_AI_PRESSURE = (PressureMagnitude.HIGH, PressureDirection.DOWNWARD, -15)


def geo_multiplier(location: Optional[str]) -> float:
    """Cost-of-labor adjustment for a free-text location."""
    if not location:
        return DEFAULT_GEO_MULTIPLIER
    loc = location.lower()
    for city, multiplier in GEO_MULTIPLIER:
        if city in loc:
            return multiplier
    for markers, multiplier in STATE_MULTIPLIER:
        if any(marker in loc for marker in markers):
            return multiplier
    return DEFAULT_GEO_MULTIPLIER


def estimate_salary(function: Optional[str], level: Optional[str], location: Optional[str]) -> SalaryBand:
    """
    Estimate a salary band.

    Args:
        function: Job function; unknown functions use the default base
        level: Seniority level; unknown levels use a 1.0 multiplier
        location: Free-text location

    Returns:
        SalaryBand with low/midpoint/high/p90
    """
    base = BASE_BY_FUNCTION.get(function or "", DEFAULT_BASE)
    level_mult = LEVEL_MULTIPLIER.get(level or "", 1.0)
    midpoint = round_half_up(base * level_mult * geo_multiplier(location))
    return SalaryBand(
        low=round_half_up(midpoint * LOW_FACTOR),
        midpoint=midpoint,
        high=round_half_up(midpoint * HIGH_FACTOR),
        p90=round_half_up(midpoint * P90_FACTOR),
    )


def comp_progression(function: Optional[str], location: Optional[str]) -> List[LevelBand]:
    """One band per level, in ladder order."""
    return [
        LevelBand(level=level.value, **estimate_salary(function, level.value, location).model_dump())
        for level in LEVEL_LADDER
    ]


def estimate_ai_salary_pressure(ai_risk: int) -> AIPressure:
    """Higher AI risk never yields a more favourable pressure."""
    for upper_bound, magnitude, direction, pct in AI_PRESSURE_BANDS:
        if ai_risk < upper_bound:
            return AIPressure(magnitude=magnitude, direction=direction, pct_impact=pct)
    magnitude, direction, pct = MAX_AI_PRESSURE
    return AIPressure(magnitude=magnitude, direction=direction, pct_impact=pct)


def build_salary_estimate(subject: Subject, ai_risk: int) -> SalaryEstimate:
    estimate = SalaryEstimate(
        estimate=estimate_salary(subject.current_function, subject.current_level, subject.location),
        progression=comp_progression(subject.current_function, subject.location),
        ai_pressure=estimate_ai_salary_pressure(ai_risk),
    )
    logger.debug(f"Salary midpoint for {subject.name}: {estimate.estimate.midpoint}")
    return estimate
