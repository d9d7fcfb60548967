"""
Narrative generation for Workforce Risk.

Builds the analyst prompt from the structured assessment, calls the LLM
for a JSON-only response and validates it against Narrative. Pre-career
subjects never reach the LLM, and every failure path ends in a
deterministic narrative from narrative_fallback.
"""

import asyncio
import json
import logging
import re
from dataclasses import dataclass
from typing import List, Optional

from pydantic import ValidationError

from workforce_risk.clients.llm_client import LLMClient, LLMError
from workforce_risk.config.settings import Settings, get_settings
from workforce_risk.models.assessment import HiringSignals, Narrative, SalaryEstimate, Scores
from workforce_risk.models.career import CareerProfile, CareerStage
from workforce_risk.models.company import CompanySummary
from workforce_risk.models.person import Subject
from workforce_risk.services.narrative_fallback import (
    directive_for,
    fallback_narrative,
    pre_career_narrative,
)

logger = logging.getLogger(__name__)

MAX_HISTORY_ROLES = 10
MAX_SIGNAL_ITEMS = 8

SYSTEM_PROMPT = (
    "You are an employment risk analyst. Respond with a single JSON object and "
    "nothing else: no markdown, no code fences, no commentary."
)

NARRATIVE_SHAPE = """{
  "overviewSummary": "2-3 sentence summary of the person's overall employment risk situation",
  "careerPattern": "1-2 sentence observation about their career trajectory pattern",
  "aiThreatAnalysis": "2-3 sentences about how AI specifically threatens their current role/function",
  "aiMitigatingFactors": "1-2 sentences about what protects them from AI displacement",
  "companyHealthSummary": "1-2 sentences on the company's growth trajectory and what it means for job security",
  "promotionAnalysis": "1-2 sentences on internal promotion prospects",
  "geoMarketContext": "1-2 sentences on their local job market and compensation",
  "hiringOutlook": "1-2 sentences on who is hiring people like them",
  "retrainingPaths": [
    {
      "rank": 1,
      "title": "Role title",
      "function": "Which function this falls under",
      "targetLevel": "Level they would enter at",
      "fitScore": 0-100,
      "growthScore": 0-100,
      "aiSafeScore": 0-100,
      "rationale": "2-3 sentences on why this is a good transition and what skills transfer",
      "skills": ["skill1", "skill2", "skill3", "skill4"],
      "timeToTransition": "e.g. 3-6 months",
      "salaryComparison": "Brief comp comparison to current role"
    }
  ],
  "bottomLine": "2-3 sentence summary tying the data together into an actionable recommendation",
  "directive": "One short imperative sentence: what to do next"
}"""

_FENCE = re.compile(r"```(?:json)?", re.IGNORECASE)


class NarrativeParseError(ValueError):
    """LLM output could not be turned into a valid Narrative."""


@dataclass
class NarrativeContext:
    """Everything the narrative is written from."""
    subject: Subject
    career: CareerProfile
    scores: Scores
    company: CompanySummary
    salary: SalaryEstimate
    hiring_signals: Optional[HiringSignals] = None


# =============================================================================
# Prompt
# =============================================================================

def _compact(data: dict) -> str:
    return json.dumps(data, separators=(",", ":"))


def _role_line(classified) -> str:
    job = classified.job
    start = job.started_at.isoformat()[:7] if job.started_at else "?"
    end = job.ended_at.isoformat()[:7] if job.ended_at else "present"
    return (
        f"- [{classified.tag}] {job.title or 'Unknown title'} @ {job.company or 'Unknown company'} "
        f"({job.function or 'Unknown function'}, {job.level or 'Unknown level'}, {start} to {end})"
    )


def _internship_summary(career: CareerProfile) -> str:
    internships = career.internships
    if not internships:
        return "None"
    prestige = [c.job.company for c in career.prestige_internships if c.job.company]
    text = f"{len(internships)} internship(s)"
    if prestige:
        text += f", including prestige employer(s): {', '.join(sorted(set(prestige)))}"
    return text


def _signal_sections(subject: Subject, signals: HiringSignals) -> List[str]:
    sections = []
    if signals.regional is not None:
        top = ", ".join(f"{c.name}({c.hires})" for c in signals.regional.top_companies[:MAX_SIGNAL_ITEMS])
        sections.append(
            f"REGIONAL DEMAND ({signals.geo_region or subject.location or 'unknown region'}):\n"
            f"- {signals.regional.total_hires} hires of {subject.current_function} "
            f"{subject.current_level} across {signals.regional.total_companies} companies. Top: {top or 'none'}"
        )
    if signals.employer_flow is not None:
        top = ", ".join(f"{d.name}({d.count})" for d in signals.employer_flow.top_destinations[:MAX_SIGNAL_ITEMS])
        sections.append(
            f"EMPLOYER NETWORK:\n- {signals.employer_flow.total_alumni} alumni of their employers tracked. "
            f"Top destinations: {top or 'none'}"
        )
    if signals.school is not None:
        top = ", ".join(f"{c.name}({c.hires})" for c in signals.school.top_companies[:MAX_SIGNAL_ITEMS])
        sections.append(
            f"SCHOOL NETWORK ({', '.join(signals.schools) or 'unknown'}):\n"
            f"- {signals.school.total_hires} alumni hired. Top: {top or 'none'}"
        )
    if signals.multi_signal:
        items = ", ".join(
            f"{c.name}[{'+'.join(c.signals)}]" for c in signals.multi_signal[:MAX_SIGNAL_ITEMS]
        )
        sections.append(f"MULTI-SIGNAL COMPANIES:\n- {items}")
    return sections


def build_prompt(context: NarrativeContext) -> str:
    """
    Build the user prompt for the narrative LLM call.

    Args:
        context: Structured assessment inputs

    Returns:
        Prompt text
    """
    subject = context.subject
    career = context.career
    scores = context.scores
    profile = career.functional_profile

    history = "\n".join(_role_line(c) for c in career.classified_jobs[:MAX_HISTORY_ROLES]) or "- None recorded"

    parts = [
        "Generate a JSON analysis of this person's employment risk.",
        "",
        "PERSON:",
        f"- Name: {subject.name}",
        f"- Title: {subject.current_title}",
        f"- Company: {subject.current_company}",
        f"- Function: {subject.current_function}",
        f"- Level: {subject.current_level}",
        f"- Location: {subject.location or 'Unknown'}",
        f"- Education: {subject.education or 'Unknown'}",
        "",
        "CAREER PROFILE:",
        f"- Career stage: {career.stage.value} ({career.stage_label})",
        f"- Years of experience: {career.years_experience}",
        f"- Functional profile: {profile.summary if profile else 'No real roles yet'}",
        f"- Internships: {_internship_summary(career)}",
        "",
        "CAREER HISTORY (most recent first):",
        history,
        "",
        "RISK SCORES (0-100, higher = more risk):",
        f"- Overall: {scores.overall}",
        f"- AI Automation: {scores.ai_risk}",
        f"- Company Instability: {scores.company_instability}",
        f"- Promotion Ceiling: {scores.promotion_ceiling}",
        f"- Tenure Volatility: {scores.tenure_volatility}",
        f"- Function Churn: {scores.function_churn}",
        f"- Salary Compression: {scores.salary_compression}",
        "",
        "COMPANY DATA:",
        _compact(context.company.to_wire()),
        "",
        "SALARY ESTIMATE:",
        _compact(context.salary.to_wire()),
    ]

    if context.hiring_signals is not None and not context.hiring_signals.is_empty:
        for section in _signal_sections(subject, context.hiring_signals):
            parts.extend(["", section])

    parts.extend([
        "",
        "RULES:",
        "- Only roles tagged [REAL] count as career experience.",
        "- Do not base retraining paths on [IGNORE] or [INTERNSHIP] roles.",
        "- Respect functional gravity: recommend paths that build on the dominant function "
        "unless the profile is multi-functional or generalist.",
        "- Match the career stage: target levels must be at or near their current seniority; "
        "never suggest entry-level roles to executives.",
        "- No executive suggestions for early-career or entry-level people: keep their target levels "
        "within one step of their current level.",
        "",
        "Return ONLY a JSON object (no markdown, no backticks) with this structure:",
        NARRATIVE_SHAPE,
        "",
        "Include exactly 4 retraining paths with ranks 1-4, ranked by fit. Be specific to this "
        "person's skills and industry. Ground the analysis in the actual scores and data provided.",
    ])
    return "\n".join(parts)


# =============================================================================
# Parsing
# =============================================================================

def strip_code_fences(text: str) -> str:
    return _FENCE.sub("", text).strip()


def extract_json_object(text: str) -> Optional[str]:
    """
    Return the first balanced {...} block of `text`, or None.

    Braces inside JSON strings (including escaped quotes) are not counted.
    """
    start = text.find("{")
    if start < 0:
        return None

    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start:index + 1]
    return None


def parse_narrative(text: str) -> Narrative:
    """
    Parse LLM output into a Narrative.

    Raises:
        NarrativeParseError: Empty output, no JSON object, invalid JSON, or
            a payload that fails Narrative validation
    """
    if not text or not text.strip():
        raise NarrativeParseError("LLM returned empty content")

    candidate = extract_json_object(strip_code_fences(text))
    if candidate is None:
        raise NarrativeParseError("No JSON object found in LLM output")

    try:
        data = json.loads(candidate)
    except json.JSONDecodeError as e:
        raise NarrativeParseError(f"Invalid JSON in LLM output: {str(e)}") from e
    if not isinstance(data, dict):
        raise NarrativeParseError("LLM output is not a JSON object")

    data["source"] = "llm"
    try:
        return Narrative.model_validate(data)
    except ValidationError as e:
        raise NarrativeParseError(f"LLM narrative failed validation: {e.error_count()} error(s)") from e


# =============================================================================
# Generator
# =============================================================================

class NarrativeGenerator:
    """
    Produces the assessment narrative.

    Never raises: any LLM or parsing failure degrades to the
    deterministic fallback.
    """

    def __init__(self, llm_client: LLMClient, settings: Optional[Settings] = None):
        self.llm_client = llm_client
        self.settings = settings or get_settings()

    def _fallback(self, context: NarrativeContext) -> Narrative:
        return fallback_narrative(
            context.subject,
            context.career,
            context.scores,
            context.company,
            context.salary,
            context.hiring_signals,
        )

    async def generate(self, context: NarrativeContext, timeout: Optional[float] = None) -> Narrative:
        """
        Generate a narrative.

        Args:
            context: Structured assessment inputs
            timeout: LLM deadline in seconds (defaults to llm_timeout_seconds)

        Returns:
            Narrative with source llm, fallback or pre_career
        """
        if context.career.stage == CareerStage.PRE_CAREER:
            return pre_career_narrative(context.subject, context.career, context.scores, context.salary)

        if not self.llm_client.configured:
            logger.warning("ANTHROPIC_API_KEY not configured, using fallback narrative")
            return self._fallback(context)

        timeout = timeout if timeout is not None else self.settings.llm_timeout_seconds
        prompt = build_prompt(context)

        try:
            response = await asyncio.wait_for(
                self.llm_client.create_message(
                    system=SYSTEM_PROMPT,
                    messages=[{"role": "user", "content": prompt}],
                    max_tokens=self.settings.narrative_max_tokens,
                    model=self.settings.narrative_model,
                    timeout=timeout,
                ),
                timeout=timeout,
            )
            narrative = parse_narrative(response.text)

        except asyncio.TimeoutError:
            logger.error(f"Narrative generation timed out after {timeout:.1f}s")
            return self._fallback(context)
        except LLMError as e:
            logger.error(f"Narrative LLM call failed: {str(e)}")
            return self._fallback(context)
        except NarrativeParseError as e:
            logger.error(f"Narrative parse failed: {str(e)}")
            return self._fallback(context)
        except Exception as e:
            logger.error(f"Unexpected error generating narrative: {str(e)}", exc_info=True)
            return self._fallback(context)

        if narrative.directive is None:
            narrative = narrative.model_copy(update={"directive": directive_for(context.scores.overall)})

        logger.info(f"Generated LLM narrative for {context.subject.name}")
        return narrative
