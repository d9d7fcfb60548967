"""
Test doubles for Workforce Risk.

- FakeWorkforce: in-memory stand-in for WorkforceClient
- FakeLLM: scripted stand-in for LLMClient
- Builders for person records and narrative payloads
"""

import asyncio
import copy
from typing import Any, Dict, List, Optional

from workforce_risk.clients.llm_client import LLMResponse, TextBlock, ToolUseBlock
from workforce_risk.clients.workforce_client import SearchResponse


class FakeWorkforce:
    """Records every call; `fail=True` makes the report fetches raise."""

    def __init__(
        self,
        person_records: Optional[List[Dict[str, Any]]] = None,
        demographics: Optional[list] = None,
        flows: Optional[list] = None,
        flows_by_level: Optional[list] = None,
        search_responses: Optional[List[SearchResponse]] = None,
        fail: bool = False,
    ):
        self.person_records = person_records or []
        self.demographics = demographics or []
        self.flows = flows or []
        self.flows_by_level = flows_by_level or []
        self.search_responses = list(search_responses or [])
        self.fail = fail
        self.calls: List[tuple] = []
        self.searches: List[Dict[str, Any]] = []

    async def find_by_name(self, name, company=None):
        self.calls.append(("find_by_name", name, company))
        return list(self.person_records)

    async def find_by_profile_slug(self, slug):
        self.calls.append(("find_by_profile_slug", slug))
        return list(self.person_records[:1])

    async def get_demographics(self, company_id, date_from, date_to):
        self.calls.append(("get_demographics", company_id, date_from, date_to))
        if self.fail:
            raise RuntimeError("workforce service down")
        return list(self.demographics)

    async def get_flows(self, company_id, date_from, date_to):
        self.calls.append(("get_flows", company_id, date_from, date_to))
        if self.fail:
            raise RuntimeError("workforce service down")
        return list(self.flows)

    async def get_flows_by_level(self, company_id, date_from, date_to, functions=None):
        self.calls.append(("get_flows_by_level", company_id, date_from, date_to))
        if self.fail:
            raise RuntimeError("workforce service down")
        return list(self.flows_by_level)

    async def search(self, filters, size=0, return_fields=None):
        self.searches.append({"filters": filters, "size": size, "return_fields": return_fields})
        if self.search_responses:
            return self.search_responses.pop(0)
        return SearchResponse(ok=True)


class FakeLLM:
    """
    Scripted LLM client.

    `responses` are returned in order; `error` is raised on every call;
    `delay` sleeps before answering.
    """

    def __init__(
        self,
        responses: Optional[List[LLMResponse]] = None,
        configured: bool = True,
        error: Optional[Exception] = None,
        delay: float = 0.0,
        repeat_last: bool = False,
    ):
        self.responses = list(responses or [])
        self._configured = configured
        self.error = error
        self.delay = delay
        self.repeat_last = repeat_last
        self.calls: List[Dict[str, Any]] = []

    @property
    def configured(self) -> bool:
        return self._configured

    async def create_message(self, system, messages, max_tokens, model=None, tools=None, timeout=None):
        self.calls.append({
            "system": system,
            "messages": copy.deepcopy(messages),
            "max_tokens": max_tokens,
            "model": model,
            "tools": tools,
        })
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if self.repeat_last and len(self.responses) == 1:
            return self.responses[0]
        return self.responses.pop(0)


def text_response(text: str, stop_reason: str = "end_turn") -> LLMResponse:
    return LLMResponse(stop_reason=stop_reason, content=[TextBlock(text=text)] if text else [])


def tool_response(*calls: tuple) -> LLMResponse:
    """calls: (id, name, input) tuples."""
    return LLMResponse(
        stop_reason="tool_use",
        content=[TextBlock(text="Let me look that up.")]
        + [ToolUseBlock(id=call_id, name=name, input=tool_input) for call_id, name, tool_input in calls],
    )


def person_record(
    name: str = "Jane Doe",
    title: str = "Account Executive",
    company: str = "Acme Corp",
    company_id: Optional[str] = "acme-1",
    location: Optional[str] = "Austin, Texas",
    jobs: Optional[List[Dict[str, Any]]] = None,
    education: Optional[List[Dict[str, Any]]] = None,
) -> Dict[str, Any]:
    """Person record shaped like a workforce `find` result."""
    record: Dict[str, Any] = {
        "name": name,
        "linkedin": "linkedin.com/in/jane-doe",
        "location": location,
        "position": {
            "title": title,
            "company": {"name": company, "id": company_id},
            "started_at": "2021-03-01",
        },
        "jobs": jobs if jobs is not None else [
            {
                "title": title,
                "company": {"name": company, "id": company_id},
                "function": "Sales and Support",
                "level": "Staff",
                "started_at": "2021-03-01",
                "ended_at": None,
            },
            {
                "title": "Sales Development Representative",
                "company": {"name": "Globex", "id": "globex-1"},
                "function": "Sales and Support",
                "level": "Staff",
                "started_at": "2018-06-01",
                "ended_at": "2021-02-01",
            },
        ],
    }
    if education is not None:
        record["education"] = education
    return record


def narrative_payload(**overrides: Any) -> Dict[str, Any]:
    """A valid camelCase narrative as the LLM would return it."""
    paths = [
        {
            "rank": rank,
            "title": title,
            "function": "Operations",
            "targetLevel": "Manager",
            "fitScore": 80 - rank,
            "growthScore": 70,
            "aiSafeScore": 75,
            "rationale": "Builds on pipeline experience.",
            "skills": ["Forecasting", "CRM", "Analytics", "Process design"],
            "timeToTransition": "6-12 months",
            "salaryComparison": "Comparable",
        }
        for rank, title in enumerate(
            ["Revenue Operations", "Customer Success", "Sales Enablement", "People Operations"],
            start=1,
        )
    ]
    payload: Dict[str, Any] = {
        "overviewSummary": "Moderate risk driven by AI exposure.",
        "careerPattern": "Steady progression in sales.",
        "aiThreatAnalysis": "Prospecting is being automated.",
        "aiMitigatingFactors": "Relationships still matter.",
        "companyHealthSummary": "The company is growing.",
        "promotionAnalysis": "Promotion prospects are competitive.",
        "geoMarketContext": "Austin pays near the national median.",
        "hiringOutlook": "Several local companies are hiring.",
        "retrainingPaths": paths,
        "bottomLine": "Start building operations skills.",
    }
    payload.update(overrides)
    return payload
