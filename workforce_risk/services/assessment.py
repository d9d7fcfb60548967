"""
Assessment orchestrator for Workforce Risk.

Algorithm:
1. Validate the request and resolve the subject (profile slug or name)
2. Fetch demographics, flows and flows-by-level in parallel
3. Summarize the company, classify the career, compute scores and salary
4. Collect hiring signals when enabled and the budget allows
5. Generate the narrative within the remaining budget

Only subject resolution raises. Every later step degrades on failure.
"""

import asyncio
import logging
import time
from datetime import date
from typing import List, Optional, Sequence, Tuple

from workforce_risk.api.schemas import AssessRequest
from workforce_risk.clients.workforce_client import WorkforceClient, profile_slug
from workforce_risk.common.utils import Clock, months_ago, utc_now
from workforce_risk.config.settings import Settings, get_settings
from workforce_risk.exceptions import BadRequestError, SubjectNotFoundError
from workforce_risk.models.assessment import AssessmentResult, HiringSignals
from workforce_risk.models.company import DemographicsRow, FlowsRow
from workforce_risk.models.person import Subject
from workforce_risk.services.career_classifier import build_career_profile
from workforce_risk.services.company_summary import summarize_company
from workforce_risk.services.hiring_signals import collect_hiring_signals
from workforce_risk.services.narrative import NarrativeContext, NarrativeGenerator
from workforce_risk.services.salary import build_salary_estimate
from workforce_risk.services.scoring import compute_all_scores

logger = logging.getLogger(__name__)

MISSING_IDENTIFIER_MESSAGE = "Name or LinkedIn URL required"
NOT_FOUND_MESSAGE = "Person not found. Try a different name or add their company."
NO_COMPANY_MESSAGE = "Could not determine current company. Try adding the company name."

# Narrative still gets a short LLM window when the budget is nearly spent
MIN_NARRATIVE_TIMEOUT_SECONDS = 1.0


class AssessmentService:
    """
    Runs one assessment end to end.

    Attributes:
        workforce: Workforce data client
        narrative_generator: Narrative generator (LLM with fallback)
        settings: Settings
        clock: Returns the current UTC datetime
    """

    def __init__(
        self,
        workforce: WorkforceClient,
        narrative_generator: NarrativeGenerator,
        settings: Optional[Settings] = None,
        clock: Clock = utc_now,
    ):
        self.workforce = workforce
        self.narrative_generator = narrative_generator
        self.settings = settings or get_settings()
        self.clock = clock

    async def resolve_subject(self, request: AssessRequest) -> Subject:
        """
        Resolve the request to a Subject.

        Raises:
            BadRequestError: No identifier, or no current company id
            SubjectNotFoundError: Lookup returned nothing
        """
        name = (request.name or "").strip()
        url = (request.linkedin or "").strip()
        if not name and not url:
            raise BadRequestError(MISSING_IDENTIFIER_MESSAGE)

        slug = profile_slug(url) if url else ""
        if slug:
            results = await self.workforce.find_by_profile_slug(slug)
        elif name:
            company = (request.company or "").strip() or None
            results = await self.workforce.find_by_name(name, company)
        else:
            raise BadRequestError(MISSING_IDENTIFIER_MESSAGE)

        if not results:
            raise SubjectNotFoundError(NOT_FOUND_MESSAGE)

        subject = Subject.from_person_record(results[0])
        if not subject.current_company_id:
            raise BadRequestError(NO_COMPANY_MESSAGE)
        return subject

    async def _fetch_company_data(
        self,
        company_id: str,
        today: date,
    ) -> Tuple[List[DemographicsRow], List[FlowsRow], List[FlowsRow]]:
        demographics_from = months_ago(today, self.settings.demographics_window_months)
        flows_from = months_ago(today, self.settings.flows_window_months)

        results = await asyncio.gather(
            self.workforce.get_demographics(company_id, demographics_from, today),
            self.workforce.get_flows(company_id, flows_from, today),
            self.workforce.get_flows_by_level(company_id, flows_from, today),
            return_exceptions=True,
        )

        names = ("demographics", "flows", "flows_by_level")
        cleaned: List[Sequence] = []
        for name, result in zip(names, results):
            if isinstance(result, BaseException):
                logger.error(f"Workforce {name} fetch failed for company {company_id}: {str(result)}")
                cleaned.append([])
            else:
                cleaned.append(result)
        demographics, flows, flows_by_level = cleaned
        return list(demographics), list(flows), list(flows_by_level)

    async def _hiring_signals(self, subject: Subject, today: date, remaining: float) -> Optional[HiringSignals]:
        if not self.settings.enable_hiring_signals:
            return None
        if remaining < self.settings.hiring_signals_min_budget_seconds:
            logger.info(f"Skipping hiring signals: {remaining:.1f}s of budget left")
            return None
        try:
            return await asyncio.wait_for(
                collect_hiring_signals(self.workforce, subject, today),
                timeout=remaining - self.settings.hiring_signals_min_budget_seconds / 2,
            )
        except asyncio.TimeoutError:
            logger.warning("Hiring signals timed out")
        except Exception as e:
            logger.error(f"Hiring signals failed: {str(e)}", exc_info=True)
        return None

    async def assess(self, request: AssessRequest) -> AssessmentResult:
        """
        Run the full assessment pipeline.

        Args:
            request: Name/company or profile URL

        Returns:
            AssessmentResult
        """
        deadline = time.monotonic() + self.settings.assessment_timeout_seconds

        subject = await self.resolve_subject(request)
        today = self.clock().date()
        logger.info(
            f"Assessing {subject.name} ({subject.current_title} @ {subject.current_company}, "
            f"company_id={subject.current_company_id})",
            extra={
                "subject": subject.name,
                "company_id": subject.current_company_id,
                "event_type": "assessment_start",
            },
        )

        demographics, flows, flows_by_level = await self._fetch_company_data(subject.current_company_id, today)
        logger.info(
            f"Fetched {len(demographics)} demographics, {len(flows)} flows, "
            f"{len(flows_by_level)} level flows rows"
        )

        company = summarize_company(demographics, flows, flows_by_level, subject.current_function)
        career = build_career_profile(subject, today)
        scores = compute_all_scores(subject, demographics, flows, flows_by_level)
        salary = build_salary_estimate(subject, scores.ai_risk)

        hiring_signals = await self._hiring_signals(subject, today, deadline - time.monotonic())

        narrative_timeout = min(
            self.settings.llm_timeout_seconds,
            max(MIN_NARRATIVE_TIMEOUT_SECONDS, deadline - time.monotonic()),
        )
        narrative = await self.narrative_generator.generate(
            NarrativeContext(
                subject=subject,
                career=career,
                scores=scores,
                company=company,
                salary=salary,
                hiring_signals=hiring_signals,
            ),
            timeout=narrative_timeout,
        )

        result = AssessmentResult(
            person=subject,
            career=career,
            scores=scores,
            company=company,
            salary=salary,
            hiring_signals=hiring_signals,
            narrative=narrative,
            generated_at=self.clock(),
        )
        logger.info(
            f"Assessment complete for {subject.name}: overall={scores.overall}, "
            f"stage={career.stage.value}, narrative={narrative.source}",
            extra={
                "subject": subject.name,
                "company_id": subject.current_company_id,
                "event_type": "assessment_complete",
            },
        )
        return result
