"""
Chat tools for Workforce Risk.

Tool definitions advertised to the LLM and their execution against the
workforce data service. Each tool performs exactly one search and
returns a JSON-serializable dict; failures come back as {"error": ...}
so the model can explain them instead of the loop aborting.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from workforce_risk.clients.workforce_client import (
    NON_EMPLOYERS,
    WorkforceClient,
    arrivals_departures_report,
    date_range_filter,
    exact_filter,
    fuzzy_filter,
    jobs_group,
    report_rows,
)
from workforce_risk.common.utils import months_ago

logger = logging.getLogger(__name__)

COMPANY_HIRES_MONTHS = 12
LOCATION_HIRES_MONTHS = 6
PERSON_MOVES_MONTHS = 12
LOCATION_TOP_COMPANIES = 25
MOVES_SAMPLE_SIZE = 100
MOVES_TOP_DESTINATIONS = 20
MOVES_PEOPLE_PER_COMPANY = 3

TOOL_DEFINITIONS: List[Dict[str, Any]] = [
    {
        "name": "search_company_hires",
        "description": (
            "Search for recent hires at a specific company. Returns an arrivals/departures report "
            "showing how many people were hired and departed. You can filter by function, level, "
            "title, or location. Use this when the user asks whether a specific company has been "
            "hiring, or asks about hiring at named companies."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "company_name": {
                    "type": "string",
                    "description": "The company name to search for (e.g. 'Procore', 'AppFolio', 'Salesforce')",
                },
                "title": {
                    "type": "string",
                    "description": (
                        "Optional job title filter. Use for specific roles like 'Account Manager', "
                        "'Software Engineer', 'Client Service Manager'. This searches the actual job "
                        "title, not the function or level category."
                    ),
                },
                "function": {
                    "type": "string",
                    "description": (
                        "Optional broad function category filter (e.g. 'Sales and Support', "
                        "'Engineering', 'Marketing and Product'). This is a CATEGORY, not a role. "
                        "Use 'title' instead when the user asks about a specific role."
                    ),
                },
                "level": {
                    "type": "string",
                    "description": (
                        "Optional seniority level filter: 'Staff', 'Manager', 'Director', 'VP', "
                        "'C-Team'. IMPORTANT: 'Manager' here means manager-level SENIORITY, not the "
                        "word 'Manager' in a job title. An 'Account Manager' is usually Staff-level "
                        "seniority. Only use this when the user is asking about seniority."
                    ),
                },
                "location": {
                    "type": "string",
                    "description": (
                        "Optional location filter (e.g. 'Santa Barbara', 'California', 'New York'). "
                        "Omit to see all locations."
                    ),
                },
                "months_back": {
                    "type": "number",
                    "description": "How many months back to search. Default 12.",
                },
            },
            "required": ["company_name"],
        },
    },
    {
        "name": "search_location_hires",
        "description": (
            "Search for recent hires in a specific geographic area. Returns which companies have "
            "been hiring in that location. You can filter by function, level, or title. Use this "
            "when the user asks about hiring in a specific city, region, or area."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "location": {
                    "type": "string",
                    "description": "The location to search (e.g. 'Santa Barbara', 'San Francisco', 'Boston')",
                },
                "title": {
                    "type": "string",
                    "description": (
                        "Optional job title filter for specific roles (e.g. 'Account Manager', "
                        "'Data Analyst'). Use when the user asks about a specific role, not a broad category."
                    ),
                },
                "function": {
                    "type": "string",
                    "description": (
                        "Optional broad function category (e.g. 'Sales and Support', 'Engineering'). "
                        "Use 'title' for specific roles."
                    ),
                },
                "level": {
                    "type": "string",
                    "description": (
                        "Optional seniority level: 'Staff', 'Manager', 'Director', 'VP', 'C-Team'. "
                        "Remember: 'Manager' = seniority, not a job title containing 'Manager'."
                    ),
                },
                "months_back": {
                    "type": "number",
                    "description": "How many months back to search. Default 6.",
                },
            },
            "required": ["location"],
        },
    },
    {
        "name": "search_person_moves",
        "description": (
            "Search for where people from a specific company have gone after leaving (talent "
            "outflow), or who has joined a company recently. Use this when the user asks about "
            "talent movement, alumni networks, or where people from a company end up."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "company_name": {
                    "type": "string",
                    "description": "The company name to track talent flow for",
                },
                "direction": {
                    "type": "string",
                    "enum": ["departures", "arrivals"],
                    "description": (
                        "'departures' = where did people go after leaving this company. "
                        "'arrivals' = where did new hires come from."
                    ),
                },
                "title": {
                    "type": "string",
                    "description": "Optional job title filter for specific roles",
                },
                "function": {
                    "type": "string",
                    "description": "Optional broad function category filter",
                },
                "months_back": {
                    "type": "number",
                    "description": "How many months back to search. Default 12.",
                },
            },
            "required": ["company_name", "direction"],
        },
    },
]

TOOL_NAMES = [tool["name"] for tool in TOOL_DEFINITIONS]


def _months(value: Any, default: int) -> int:
    try:
        months = int(value)
    except (TypeError, ValueError):
        return default
    return months if months > 0 else default


def _optional_filters(
    title: Optional[str] = None,
    function: Optional[str] = None,
    level: Optional[str] = None,
    location: Optional[str] = None,
) -> List[Dict[str, Any]]:
    filters = []
    if title:
        filters.append(fuzzy_filter("jobs.title", [title]))
    if function:
        filters.append(exact_filter("jobs.function", [function]))
    if level:
        filters.append(exact_filter("jobs.level", [level]))
    if location:
        filters.append(fuzzy_filter("jobs.location", [location]))
    return filters


def _flow_rows(rows: List[Dict[str, Any]], key: str) -> List[Dict[str, Any]]:
    parsed = []
    for row in rows:
        values = row.get("group_values") or []
        group = values[0].get("value") if values and isinstance(values[0], dict) else None
        hires = row.get("arrivals") or 0
        departures = row.get("departures") or 0
        parsed.append({key: group or "Unknown", "hires": hires, "departures": departures, "net": hires - departures})
    return parsed


async def search_company_hires(workforce: WorkforceClient, tool_input: Dict[str, Any], today: date) -> Dict[str, Any]:
    """Arrivals/departures at one company, broken down by level or function."""
    company_name = tool_input.get("company_name")
    if not company_name:
        return {"error": "company_name is required"}

    title = tool_input.get("title")
    function = tool_input.get("function")
    level = tool_input.get("level")
    location = tool_input.get("location")
    months_back = _months(tool_input.get("months_back"), COMPANY_HIRES_MONTHS)
    date_from = months_ago(today, months_back)
    period = f"last {months_back} months"
    applied = {
        "title": title or "all",
        "function": function or "all",
        "level": level or "all",
        "location": location or "all",
    }

    # Level breakdown when narrowed by title or function
    group_by = "jobs.level" if (title or function) else "jobs.function"
    filters = [
        fuzzy_filter("jobs.company.name", [company_name]),
        date_range_filter("jobs.started_at", date_from, today),
    ] + _optional_filters(title, function, level, location)

    response = await workforce.search(
        [jobs_group(filters, report=arrivals_departures_report(date_from, today, group_by))],
        size=0,
    )
    if not response.ok:
        return {"error": response.error}

    rows = report_rows(response, "arrivals_departures")
    if not rows:
        return {
            "company": company_name,
            "period": period,
            "totalHires": 0,
            "totalDepartures": 0,
            "message": f"No hiring activity found for {company_name} matching these filters.",
            "filters": applied,
        }

    breakdown = [r for r in _flow_rows(rows, "group") if r["hires"] > 0 or r["departures"] > 0]
    breakdown.sort(key=lambda r: -r["hires"])
    return {
        "company": company_name,
        "period": period,
        "totalHires": sum(r["hires"] for r in breakdown),
        "totalDepartures": sum(r["departures"] for r in breakdown),
        "netChange": sum(r["net"] for r in breakdown),
        "breakdown": breakdown,
        "filters": applied,
    }


async def search_location_hires(workforce: WorkforceClient, tool_input: Dict[str, Any], today: date) -> Dict[str, Any]:
    """Companies hiring in one location."""
    location = tool_input.get("location")
    if not location:
        return {"error": "location is required"}

    title = tool_input.get("title")
    function = tool_input.get("function")
    level = tool_input.get("level")
    months_back = _months(tool_input.get("months_back"), LOCATION_HIRES_MONTHS)
    date_from = months_ago(today, months_back)

    filters = [
        fuzzy_filter("jobs.location", [location]),
        date_range_filter("jobs.started_at", date_from, today),
    ] + _optional_filters(title, function, level)

    response = await workforce.search(
        [jobs_group(filters, report=arrivals_departures_report(date_from, today, "jobs.company.name"))],
        size=0,
    )
    if not response.ok:
        return {"error": response.error}

    by_company = [
        r for r in _flow_rows(report_rows(response, "arrivals_departures"), "company")
        if r["company"] not in NON_EMPLOYERS and (r["hires"] > 0 or r["departures"] > 0)
    ]
    by_company.sort(key=lambda r: -r["hires"])
    return {
        "location": location,
        "period": f"last {months_back} months",
        "totalHires": sum(r["hires"] for r in by_company),
        "totalCompanies": len(by_company),
        "topCompanies": by_company[:LOCATION_TOP_COMPANIES],
        "filters": {"title": title or "all", "function": function or "all", "level": level or "all"},
    }


async def search_person_moves(workforce: WorkforceClient, tool_input: Dict[str, Any], today: date) -> Dict[str, Any]:
    """Where people who left (or recently joined) a company are now."""
    company_name = tool_input.get("company_name")
    if not company_name:
        return {"error": "company_name is required"}

    direction = tool_input.get("direction") or "departures"
    if direction not in ("departures", "arrivals"):
        return {"error": f"Unsupported direction: {direction}"}

    title = tool_input.get("title")
    function = tool_input.get("function")
    months_back = _months(tool_input.get("months_back"), PERSON_MOVES_MONTHS)
    date_from = months_ago(today, months_back)
    period = f"last {months_back} months"
    departures = direction == "departures"

    filters = [
        fuzzy_filter("jobs.company.name", [company_name]),
        date_range_filter("jobs.ended_at" if departures else "jobs.started_at", date_from, today),
    ] + _optional_filters(title, function)

    response = await workforce.search(
        [jobs_group(filters, jobs_group_type="ended" if departures else "any")],
        size=MOVES_SAMPLE_SIZE,
        return_fields=["name", "position.title", "position.company.name", "location"],
    )
    if not response.ok:
        return {"error": response.error}

    people = response.results
    if not people:
        return {
            "company": company_name,
            "direction": direction,
            "period": period,
            "totalPeople": 0,
            "message": f"No {direction} found for {company_name} in this period.",
        }

    source = company_name.lower()
    by_company: Dict[str, Dict[str, Any]] = {}
    for person in people:
        position = person.get("position") or {}
        destination = (position.get("company") or {}).get("name")
        if not destination or destination in NON_EMPLOYERS:
            continue
        if departures and destination.lower() == source:
            continue
        entry = by_company.setdefault(destination, {"company": destination, "count": 0, "people": []})
        entry["count"] += 1
        if len(entry["people"]) < MOVES_PEOPLE_PER_COMPANY:
            entry["people"].append({"name": person.get("name"), "title": position.get("title")})

    destinations = sorted(by_company.values(), key=lambda e: -e["count"])[:MOVES_TOP_DESTINATIONS]
    return {
        "company": company_name,
        "direction": direction,
        "period": period,
        "totalPeople": len(people),
        "topDestinations": destinations,
        "filters": {"function": function or "all"},
    }


TOOL_HANDLERS = {
    "search_company_hires": search_company_hires,
    "search_location_hires": search_location_hires,
    "search_person_moves": search_person_moves,
}


async def execute_tool(
    workforce: WorkforceClient,
    name: str,
    tool_input: Dict[str, Any],
    today: date,
) -> Dict[str, Any]:
    """
    Run one tool call.

    Args:
        workforce: Workforce client
        name: Tool name from the model
        tool_input: Tool arguments from the model
        today: Window end date

    Returns:
        Tool result dict, {"error": ...} for unknown tools or failed searches
    """
    handler = TOOL_HANDLERS.get(name)
    if handler is None:
        logger.warning(f"LLM requested unknown tool: {name}")
        return {"error": f"Unknown tool: {name}"}

    logger.info(f"Executing chat tool {name} with {tool_input}")
    return await handler(workforce, tool_input or {}, today)
