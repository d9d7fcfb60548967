"""
Chat orchestrator for Workforce Risk.

Answers follow-up questions about an assessment with an agentic loop:
the LLM may call the workforce tools in chat_tools, whose results are
fed back until it produces a final answer or the iteration cap is hit.
"""

import asyncio
import json
import logging
from typing import Any, Dict, List, Optional

from workforce_risk.api.schemas import ChatRequest
from workforce_risk.clients.llm_client import LLMClient, LLMError, LLMResponse
from workforce_risk.clients.workforce_client import WorkforceClient
from workforce_risk.common.utils import Clock, round_half_up, utc_now
from workforce_risk.config.settings import Settings, get_settings
from workforce_risk.exceptions import BadRequestError
from workforce_risk.services.chat_tools import TOOL_DEFINITIONS, execute_tool

logger = logging.getLogger(__name__)

CHAT_LIMIT_MESSAGE = "I ran into a limit processing your question. Could you try rephrasing it more specifically?"
CHAT_UNAVAILABLE_MESSAGE = "The AI assistant is not available right now. Please try again later."
CHAT_CONNECTION_MESSAGE = (
    "I'm having trouble connecting to the AI service right now. Please try again in a moment."
)
NO_RESPONSE_MESSAGE = "No response generated."
QUESTION_REQUIRED_MESSAGE = "Question required"

MAX_CONTEXT_JOBS = 6
MAX_CONTEXT_ITEMS = 8

SYSTEM_PROMPT = """You are workforce.ai, an AI workforce intelligence assistant with access to real-time workforce data tracking over 100 million professional profiles.

You are answering a follow-up question about a specific person's employment risk assessment. Answer concisely (2-4 paragraphs max) but with substance. Be direct and specific: use the person's name, company, and data when relevant.

UNDERSTANDING THE DATA MODEL:
Our data has three distinct concepts. Think carefully about which one the user means:
- TITLE = the actual job title (e.g. "Account Manager", "Software Engineer", "VP of Sales"). This is what people call themselves.
- FUNCTION = a broad category (e.g. "Sales and Support", "Engineering", "Marketing and Product"). Many different titles fall under one function.
- LEVEL = seniority tier: Staff, Manager, Director, VP, C-Team. IMPORTANT: "Manager" as a level means management-level seniority. An "Account Manager" is typically Staff-level; the word "Manager" in their title does NOT mean Manager-level seniority. Similarly, a "Director of Engineering" is Director-level, but an "Engineering Manager" is Manager-level.

When the user asks about a ROLE (like "account managers", "BDRs", "client service reps"), use the title filter. When they ask about seniority ("senior people", "leadership hires", "director-level"), use the level filter. When they ask broadly ("sales hires", "engineering"), use the function filter. Use your judgment; these are guidelines, not rigid rules.

TOOLS: You have tools to query live workforce data. USE THEM when the user asks about:
- Whether a specific company has been hiring (use search_company_hires)
- Hiring activity in a specific city or region (use search_location_hires)
- Where people from a company have gone, or who has joined a company (use search_person_moves)

Do NOT say "I don't have data on that" or "that company doesn't appear in my signals". Instead, use a tool to look it up. The pre-loaded hiring signals from the assessment are a starting point, but you can always query for more specific data.

When the user asks about a specific geographic area, use search_location_hires with that location instead of filtering your existing data mentally.

When presenting results, lead with the specific numbers. Be precise, not vague.

If a tool returns zero results, say so clearly. Consider whether a different filter might find what they're looking for (e.g. if a title search returns nothing, try a broader function search and mention what you did).

Speak in a warm, authoritative tone. No bullet points or lists: conversational paragraphs. Reference specific companies, tools, or trends by name when relevant."""


# =============================================================================
# Prompt context
# =============================================================================

def _thousands(value: Any) -> str:
    if isinstance(value, (int, float)):
        return f"${round_half_up(value / 1000)}K"
    return "?"


def _signed(value: Any) -> str:
    return f"{value:+d}" if isinstance(value, int) else "?"


def _count(value: Any) -> str:
    return f"{value:,}" if isinstance(value, int) else "?"


def _person_section(person: Dict[str, Any]) -> str:
    jobs = person.get("jobs") or []
    career = " -> ".join(
        f"{job.get('title')} @ {job.get('company')}" for job in jobs[:MAX_CONTEXT_JOBS] if isinstance(job, dict)
    )
    return (
        f"PERSON: {person.get('name') or 'Unknown'}, {person.get('currentTitle') or 'Unknown'} at "
        f"{person.get('currentCompany') or 'Unknown'}.\n"
        f"Location: {person.get('location') or 'Unknown'}. Function: {person.get('currentFunction') or 'Unknown'}. "
        f"Level: {person.get('currentLevel') or 'Unknown'}.\n"
        f"Education: {person.get('education') or 'Not available'}.\n"
        f"Career: {career}"
    )


def _scores_section(scores: Dict[str, Any]) -> str:
    return (
        f"RISK SCORES: Overall {scores.get('overall')}/100, AI Risk {scores.get('aiRisk')}/100, "
        f"Company Instability {scores.get('companyInstability')}/100, "
        f"Promotion Ceiling {scores.get('promotionCeiling')}/100, "
        f"Function Churn {scores.get('functionChurn')}/100, "
        f"Tenure Volatility {scores.get('tenureVolatility')}/100"
    )


def _company_section(person: Dict[str, Any], company: Dict[str, Any]) -> str:
    growth = company.get("growthPct")
    growth_text = f"{_signed(growth)}%"
    flows = ", ".join(
        f"{f.get('function')}: +{f.get('hires')}/-{f.get('departures')} (net {_signed(f.get('net'))})"
        for f in (company.get("flows") or [])[:MAX_CONTEXT_ITEMS]
        if isinstance(f, dict)
    )
    return (
        f"COMPANY DATA: {person.get('currentCompany')} has {_count(company.get('totalHeadcount'))} employees. "
        f"2-year growth: {growth_text}. {person.get('currentFunction')} dept: "
        f"{_count(company.get('deptHeadcount'))}.\n"
        f"Function flows: {flows}"
    )


def _salary_section(person: Dict[str, Any], salary: Dict[str, Any]) -> str:
    estimate = salary.get("estimate") or {}
    pressure = salary.get("aiPressure") or {}
    progression = ", ".join(
        f"{p.get('level')}: {_thousands(p.get('midpoint'))}"
        for p in (salary.get("progression") or [])
        if isinstance(p, dict)
    )
    return (
        f"SALARY DATA: Estimate for {person.get('currentFunction')} {person.get('currentLevel')}: "
        f"{_thousands(estimate.get('low'))} - {_thousands(estimate.get('midpoint'))} - "
        f"{_thousands(estimate.get('high'))}.\n"
        f"AI salary pressure: {pressure.get('magnitude') or 'Unknown'} "
        f"({pressure.get('direction') or '?'} {abs(pressure.get('pctImpact') or 0)}%).\n"
        f"Progression: {progression}"
    )


def _signals_section(person: Dict[str, Any], signals: Dict[str, Any]) -> str:
    parts = []
    regional = signals.get("regional")
    if regional:
        top = ", ".join(f"{c.get('name')}({c.get('hires')})" for c in (regional.get("topCompanies") or [])[:MAX_CONTEXT_ITEMS])
        parts.append(
            f"Regional demand: {regional.get('totalHires')} hires at {person.get('currentFunction')} "
            f"{person.get('currentLevel')} in {signals.get('geoRegion') or person.get('location')}. Top: {top}"
        )
    employer = signals.get("employerFlow")
    if employer:
        top = ", ".join(f"{d.get('name')}({d.get('count')})" for d in (employer.get("topDestinations") or [])[:MAX_CONTEXT_ITEMS])
        parts.append(f"Employer network: {employer.get('totalAlumni')} alumni tracked. Top destinations: {top}")
    school = signals.get("school")
    if school:
        top = ", ".join(f"{c.get('name')}({c.get('hires')})" for c in (school.get("topCompanies") or [])[:MAX_CONTEXT_ITEMS])
        parts.append(
            f"School network ({','.join(signals.get('schools') or [])}): "
            f"{school.get('totalHires')} alumni hired. Top: {top}"
        )
    multi = signals.get("multiSignal") or []
    if multi:
        items = ", ".join(f"{c.get('name')}[{'+'.join(c.get('signals') or [])}]" for c in multi[:MAX_CONTEXT_ITEMS])
        parts.append(f"Multi-signal companies: {items}")
    return "HIRING SIGNALS:\n" + "\n".join(parts)


def build_user_prompt(request: ChatRequest) -> str:
    """Assessment context for the active tab plus the question."""
    person = request.person or {}
    sections = [_person_section(person)]
    if request.scores:
        sections.append(_scores_section(request.scores))
    if request.tab == "company" and request.company:
        sections.append(_company_section(person, request.company))
    if request.tab == "salary" and request.salary:
        sections.append(_salary_section(person, request.salary))
    if request.tab == "opportunities" and request.hiring_signals:
        sections.append(_signals_section(person, request.hiring_signals))

    context = "\n\n".join(sections)
    return (
        f"ASSESSMENT CONTEXT:\n{context}\n\n"
        f"CURRENT TAB: {request.tab or 'overview'}\n"
        f"USER QUESTION: {request.question.strip()}\n\n"
        "Answer this question using the assessment data, your tools, and your knowledge. If the "
        "question involves a specific company or location, use your tools to get precise data. "
        "Don't guess. Be specific and actionable."
    )


# =============================================================================
# Loop
# =============================================================================

class ChatService:
    """
    Follow-up chat with tool use.

    The conversation is append-only: each tool round appends the
    assistant turn and then one user turn carrying every tool result.
    """

    def __init__(
        self,
        workforce: WorkforceClient,
        llm_client: LLMClient,
        settings: Optional[Settings] = None,
        clock: Clock = utc_now,
    ):
        self.workforce = workforce
        self.llm_client = llm_client
        self.settings = settings or get_settings()
        self.clock = clock

    async def _run_tools(self, response: LLMResponse) -> List[Dict[str, Any]]:
        today = self.clock().date()
        results = []
        for block in response.tool_uses:
            logger.info(
                f"Running chat tool {block.name}",
                extra={"tool_name": block.name, "event_type": "chat_tool_call"},
            )
            try:
                result = await execute_tool(self.workforce, block.name, block.input, today)
            except Exception as e:
                logger.error(
                    f"Chat tool {block.name} failed: {str(e)}",
                    extra={"tool_name": block.name, "event_type": "chat_tool_error"},
                    exc_info=True,
                )
                result = {"error": f"Tool {block.name} failed"}
            results.append({
                "type": "tool_result",
                "tool_use_id": block.id,
                "content": json.dumps(result),
            })
        return results

    async def _loop(self, messages: List[Dict[str, Any]]) -> str:
        for iteration in range(self.settings.chat_max_iterations):
            response = await self.llm_client.create_message(
                system=SYSTEM_PROMPT,
                messages=messages,
                max_tokens=self.settings.chat_max_tokens,
                model=self.settings.chat_model,
                tools=TOOL_DEFINITIONS,
            )
            logger.info(f"Chat iteration {iteration + 1}: stop_reason={response.stop_reason}")

            if response.stop_reason == "tool_use":
                tool_results = await self._run_tools(response)
                messages.append({"role": "assistant", "content": response.to_message_content()})
                messages.append({"role": "user", "content": tool_results})
                continue

            return response.text or NO_RESPONSE_MESSAGE

        logger.warning(f"Chat hit the {self.settings.chat_max_iterations}-iteration cap")
        return CHAT_LIMIT_MESSAGE

    async def answer(self, request: ChatRequest) -> str:
        """
        Answer one follow-up question.

        Args:
            request: Question plus the assessment context

        Returns:
            Answer text (fixed messages when the LLM is unavailable)

        Raises:
            BadRequestError: Empty question
        """
        if not request.question or not request.question.strip():
            raise BadRequestError(QUESTION_REQUIRED_MESSAGE)

        if not self.llm_client.configured:
            logger.warning("ANTHROPIC_API_KEY not configured, chat unavailable")
            return CHAT_UNAVAILABLE_MESSAGE

        messages: List[Dict[str, Any]] = [{"role": "user", "content": build_user_prompt(request)}]
        try:
            return await asyncio.wait_for(self._loop(messages), timeout=self.settings.chat_timeout_seconds)
        except asyncio.TimeoutError:
            logger.error(f"Chat timed out after {self.settings.chat_timeout_seconds}s")
            return CHAT_LIMIT_MESSAGE
        except LLMError as e:
            logger.error(f"Chat LLM call failed: {str(e)}")
            return CHAT_CONNECTION_MESSAGE
