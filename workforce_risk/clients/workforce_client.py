"""
Workforce data client for Workforce Risk.

Async HTTP client for the Live Data Technologies People API:
- find: resolve a person by name (+ company) or profile slug
- search: filtered searches with optional reports
  (demographics, arrivals_departures)

No method raises on upstream failure. Timeouts, non-2xx responses,
transport errors and malformed bodies are logged and turned into empty
results so that callers can degrade instead of aborting.
"""

import logging
import re
from datetime import date
from typing import Any, Dict, List, Optional, Sequence, Tuple, Type, TypeVar, Union

import httpx
from pydantic import BaseModel, Field, ValidationError

from workforce_risk.config.settings import Settings, get_settings
from workforce_risk.models.company import DemographicsRow, FlowsRow

logger = logging.getLogger(__name__)

PERSON_RETURN_FIELDS = [
    "name",
    "linkedin",
    "location",
    "position.title",
    "position.company.name",
    "position.company.id",
    "position.started_at",
    "jobs.title",
    "jobs.company.name",
    "jobs.company.id",
    "jobs.function",
    "jobs.level",
    "jobs.started_at",
    "jobs.ended_at",
    "education.school",
    "education.degree",
]

FIND_CONFIDENCE = "medium"
NAME_MATCH_SIZE = 3
GROUP_SUFFIX = "-group"

# Placeholder employer names that never count as a hiring company
NON_EMPLOYERS = ("None", "Freelance/Self-employed")

_PROFILE_PREFIX = re.compile(r"^(https?://)?([a-z0-9-]+\.)?linkedin\.com/in/", re.IGNORECASE)

DateLike = Union[date, str]
RowT = TypeVar("RowT", DemographicsRow, FlowsRow)


class SearchResponse(BaseModel):
    """Result of a raw search call; ok=False when the call failed."""
    ok: bool = True
    results: List[Dict[str, Any]] = Field(default_factory=list)
    report_results: Dict[str, Any] = Field(default_factory=dict)
    error: Optional[str] = None


def profile_slug(url: str) -> str:
    """
    Extract the profile slug from a professional-network profile URL.

    "https://www.linkedin.com/in/jane-doe/" -> "jane-doe". Input that is
    already a slug is returned unchanged.
    """
    slug = _PROFILE_PREFIX.sub("", url.strip())
    slug = slug.split("?", 1)[0].split("#", 1)[0]
    return slug.rstrip("/")


def company_ids(company_id: str) -> Tuple[str, str]:
    """Return (base id, group id) for either form of a company id."""
    base_id = company_id[: -len(GROUP_SUFFIX)] if company_id.endswith(GROUP_SUFFIX) else company_id
    return base_id, f"{base_id}{GROUP_SUFFIX}"


def exact_filter(field: str, values: Sequence[str]) -> Dict[str, Any]:
    return {"type": "must", "field": field, "match_type": "exact", "string_values": list(values)}


def fuzzy_filter(field: str, values: Sequence[str]) -> Dict[str, Any]:
    return {"type": "must", "field": field, "match_type": "fuzzy", "string_values": list(values)}


def date_range_filter(field: str, date_from: DateLike, date_to: DateLike) -> Dict[str, Any]:
    return {
        "type": "must",
        "field": field,
        "match_type": "fuzzy",
        "date_from": _iso(date_from),
        "date_to": _iso(date_to),
    }


def company_filter(company_id: str) -> Dict[str, Any]:
    """Match a company by its own id or its subsidiary rollup id."""
    base_id, group_id = company_ids(company_id)
    return {
        "operator": "or",
        "filters": [
            exact_filter("jobs.company.id", [base_id]),
            exact_filter("jobs.company.group_id", [group_id]),
        ],
    }


def jobs_group(
    filters: Sequence[Dict[str, Any]],
    jobs_group_type: str = "any",
    report: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Filter group whose filters must all match the same job.

    Args:
        filters: Field filters
        jobs_group_type: "any" or "ended" (departures)
        report: Optional report request attached to the group
    """
    group: Dict[str, Any] = {
        "operator": "and",
        "filters": list(filters),
        "isJobsGroup": True,
        "jobsGroupType": jobs_group_type,
        "positionStatus": "all",
    }
    if report:
        group["report"] = report
    return group


def arrivals_departures_report(date_from: DateLike, date_to: DateLike, group_by: str) -> Dict[str, Any]:
    return {
        "name": "arrivals_departures",
        "params": {"date_from": _iso(date_from), "date_to": _iso(date_to), "group_by": [group_by]},
    }


def report_rows(response: SearchResponse, report_name: str) -> List[Dict[str, Any]]:
    """Rows of a named report, [] when absent or malformed."""
    rows = response.report_results.get(report_name) or []
    if not isinstance(rows, list):
        return []
    return [row for row in rows if isinstance(row, dict)]


def _iso(value: DateLike) -> str:
    return value.isoformat() if isinstance(value, date) else str(value)


def _parse_rows(rows: List[Dict[str, Any]], model: Type[RowT], company_id: str) -> List[RowT]:
    parsed = []
    for row in rows:
        try:
            parsed.append(model.from_report(row))
        except (ValidationError, AttributeError, TypeError) as e:
            logger.error(f"Skipping malformed {model.__name__} for company {company_id}: {str(e)}")
    return parsed


class WorkforceClient:
    """
    Async client for the workforce data service.

    Pass `http_client` to control transport (tests use
    httpx.MockTransport); otherwise a client is created lazily.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        settings = settings or get_settings()
        self.base_url = settings.workforce_url
        self.api_key = settings.livedata_api_key
        self.configured = settings.workforce_configured
        self.timeout = settings.workforce_timeout_seconds
        self._client = http_client
        self._owns_client = http_client is None

        if not self.configured:
            logger.warning(
                "Workforce data credentials not configured (LIVEDATA_ORG_ID / LIVEDATA_API_KEY); "
                "all workforce calls will return empty results"
            )

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def close(self):
        """Close the HTTP client if this instance created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def _post(self, endpoint: str, payload: Dict[str, Any]) -> Tuple[Optional[Dict[str, Any]], Optional[str]]:
        """
        POST to the service.

        Returns:
            (response body, None) on success, (None, error message) on failure
        """
        if not self.configured:
            logger.warning(f"Skipping workforce {endpoint} call: credentials not configured")
            return None, "Workforce data service not configured"

        url = f"{self.base_url}/{endpoint}"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "accept": "application/json",
        }
        logger.debug(f"Workforce request: POST {url}")

        try:
            response = await self._get_client().post(
                url, headers=headers, json=payload, timeout=self.timeout
            )
            response.raise_for_status()
            data = response.json()
            if not isinstance(data, dict):
                raise TypeError(f"expected a JSON object, got {type(data).__name__}")
            return data, None

        except httpx.TimeoutException:
            logger.error(f"Timeout calling workforce {endpoint}")
            return None, "Workforce data request timed out"
        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP {e.response.status_code} error from workforce {endpoint}")
            logger.error(f"Response body: {e.response.text[:500]}")
            return None, f"API returned {e.response.status_code}"
        except httpx.HTTPError as e:
            logger.error(f"HTTP error calling workforce {endpoint}: {str(e)}")
            return None, f"Workforce data request failed: {str(e)}"
        except (KeyError, ValueError, TypeError) as e:
            logger.error(f"Error parsing workforce {endpoint} response: {str(e)}")
            return None, "Workforce data response could not be parsed"
        except Exception as e:
            logger.error(f"Unexpected error calling workforce {endpoint}: {str(e)}", exc_info=True)
            return None, "Workforce data request failed"

    # =========================================================================
    # Person lookup
    # =========================================================================

    async def _find(self, fields: List[Dict[str, str]], size: int) -> List[Dict[str, Any]]:
        payload = {
            "matches": [{"fields": fields}],
            "size": size,
            "return_fields": PERSON_RETURN_FIELDS,
            "confidence": FIND_CONFIDENCE,
        }
        data, _ = await self._post("find", payload)
        if not data:
            return []
        matches = data.get("matches") or []
        if not matches or not isinstance(matches[0], dict):
            return []
        results = matches[0].get("results") or []
        return [r for r in results if isinstance(r, dict)][:size]

    async def find_by_name(self, name: str, company: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Find up to three person records by name, optionally narrowed by company.

        Args:
            name: Person name
            company: Optional current company name

        Returns:
            Person records in service confidence order
        """
        fields = [{"field_name": "name", "search_term": name}]
        if company:
            fields.append({"field_name": "company.name", "search_term": company})
        results = await self._find(fields, NAME_MATCH_SIZE)
        logger.info(f"find_by_name('{name}', company={company!r}) -> {len(results)} result(s)")
        return results

    async def find_by_profile_slug(self, slug: str) -> List[Dict[str, Any]]:
        """Find at most one person record by profile slug."""
        results = await self._find([{"field_name": "linkedin", "search_term": slug}], 1)
        logger.info(f"find_by_profile_slug('{slug}') -> {len(results)} result(s)")
        return results

    # =========================================================================
    # Company reports
    # =========================================================================

    async def _company_report(
        self,
        company_id: str,
        report_name: str,
        params: Dict[str, Any],
        extra_filters: Optional[List[Dict[str, Any]]] = None,
    ) -> List[Dict[str, Any]]:
        filters = [company_filter(company_id)] + list(extra_filters or [])
        response = await self.search(
            [{"operator": "and", "filters": filters, "report": {"name": report_name, "params": params}}],
            size=0,
        )
        if not isinstance(response.report_results.get(report_name) or [], list):
            logger.error(f"Unexpected {report_name} report shape for company {company_id}")
        return report_rows(response, report_name)

    async def get_demographics(
        self,
        company_id: str,
        date_from: DateLike,
        date_to: DateLike,
    ) -> List[DemographicsRow]:
        """Active headcount by function over time."""
        rows = await self._company_report(
            company_id,
            "demographics",
            {
                "date_from": _iso(date_from),
                "date_to": _iso(date_to),
                "group_by": ["jobs.function"],
                "status": "active",
            },
        )
        return _parse_rows(rows, DemographicsRow, company_id)

    async def get_flows(
        self,
        company_id: str,
        date_from: DateLike,
        date_to: DateLike,
    ) -> List[FlowsRow]:
        """Arrivals and departures grouped by function."""
        rows = await self._company_report(
            company_id,
            "arrivals_departures",
            {"date_from": _iso(date_from), "date_to": _iso(date_to), "group_by": ["jobs.function"]},
        )
        return _parse_rows(rows, FlowsRow, company_id)

    async def get_flows_by_level(
        self,
        company_id: str,
        date_from: DateLike,
        date_to: DateLike,
        functions: Optional[Sequence[str]] = None,
    ) -> List[FlowsRow]:
        """
        Arrivals and departures grouped by level.

        Args:
            functions: Optional restriction to these job functions
        """
        extra = [exact_filter("jobs.function", functions)] if functions else None
        rows = await self._company_report(
            company_id,
            "arrivals_departures",
            {"date_from": _iso(date_from), "date_to": _iso(date_to), "group_by": ["jobs.level"]},
            extra_filters=extra,
        )
        return _parse_rows(rows, FlowsRow, company_id)

    # =========================================================================
    # Generic search
    # =========================================================================

    async def search(
        self,
        filters: List[Dict[str, Any]],
        size: int = 0,
        return_fields: Optional[List[str]] = None,
    ) -> SearchResponse:
        """
        Raw search pass-through used by chat tools and hiring signals.

        Args:
            filters: Top-level filter groups (may carry a `report`)
            size: Number of person records to return
            return_fields: Person fields to return

        Returns:
            SearchResponse; ok=False with `error` set on failure
        """
        payload: Dict[str, Any] = {"filters": filters, "size": size}
        if return_fields:
            payload["return_fields"] = return_fields

        data, error = await self._post("search", payload)
        if data is None:
            return SearchResponse(ok=False, error=error)

        results = data.get("results") or []
        report_results = data.get("report_results") or {}
        return SearchResponse(
            ok=True,
            results=[r for r in results if isinstance(r, dict)] if isinstance(results, list) else [],
            report_results=report_results if isinstance(report_results, dict) else {},
        )


# Singleton client instance
_workforce_client: Optional[WorkforceClient] = None


def get_workforce_client() -> WorkforceClient:
    """
    Get the singleton workforce client instance.

    Returns:
        WorkforceClient instance
    """
    global _workforce_client
    if _workforce_client is None:
        _workforce_client = WorkforceClient()
    return _workforce_client


async def reset_workforce_client():
    """Close and drop the singleton client (for testing and shutdown)."""
    global _workforce_client
    if _workforce_client:
        await _workforce_client.close()
    _workforce_client = None
