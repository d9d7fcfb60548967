"""
Hiring signals for Workforce Risk.

Where people like the subject are being hired:
- regional: recent hires of the subject's function and level near them
- employer: where alumni of the subject's employers went next
- school: where alumni of the subject's schools were recently hired
- multi-signal: companies that appear in two or more of the above

Searches run sequentially through WorkforceClient.search. A failed
search drops its own signal and never aborts the others.
"""

import logging
from collections import Counter
from datetime import date
from typing import Dict, List, Optional

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
from workforce_risk.models.assessment import (
    CompanyCount,
    CompanyHires,
    EmployerFlow,
    HiringSignals,
    MultiSignalCompany,
    RegionalDemand,
    SchoolNetwork,
)
from workforce_risk.models.person import Subject

logger = logging.getLogger(__name__)

REGIONAL_MONTHS = 6
NETWORK_MONTHS = 12
TOP_COMPANIES = 10
MAX_EMPLOYERS = 3
MAX_SCHOOLS = 2
ALUMNI_SAMPLE_SIZE = 100

SIGNAL_REGIONAL = "regional"
SIGNAL_EMPLOYER = "employer"
SIGNAL_SCHOOL = "school"


def _company_hires(rows: List[Dict]) -> List[CompanyHires]:
    hires: Counter = Counter()
    for row in rows:
        values = row.get("group_values") or []
        name = values[0].get("value") if values and isinstance(values[0], dict) else None
        if not name or name in NON_EMPLOYERS:
            continue
        hires[str(name)] += row.get("arrivals") or 0
    ranked = sorted(((name, count) for name, count in hires.items() if count > 0), key=lambda x: (-x[1], x[0]))
    return [CompanyHires(name=name, hires=count) for name, count in ranked]


async def regional_demand(
    workforce: WorkforceClient,
    subject: Subject,
    today: date,
) -> Optional[RegionalDemand]:
    """Recent hires of the subject's function and level in their location."""
    if not subject.location:
        return None

    filters = [
        fuzzy_filter("jobs.location", [subject.location]),
        exact_filter("jobs.function", [subject.current_function]),
        exact_filter("jobs.level", [subject.current_level]),
        date_range_filter("jobs.started_at", months_ago(today, REGIONAL_MONTHS), today),
    ]
    report = arrivals_departures_report(months_ago(today, REGIONAL_MONTHS), today, "jobs.company.name")
    response = await workforce.search([jobs_group(filters, report=report)], size=0)
    if not response.ok:
        logger.warning(f"Regional demand search failed: {response.error}")
        return None

    companies = _company_hires(report_rows(response, "arrivals_departures"))
    return RegionalDemand(
        total_hires=sum(c.hires for c in companies),
        total_companies=len(companies),
        top_companies=companies[:TOP_COMPANIES],
    )


async def employer_flow(
    workforce: WorkforceClient,
    subject: Subject,
    today: date,
) -> Optional[EmployerFlow]:
    """Where people who left the subject's recent employers went."""
    employers: List[str] = []
    for job in subject.jobs:
        if job.company and job.company not in NON_EMPLOYERS and job.company not in employers:
            employers.append(job.company)
        if len(employers) == MAX_EMPLOYERS:
            break
    if not employers:
        return None

    filters = [
        exact_filter("jobs.company.name", employers),
        date_range_filter("jobs.ended_at", months_ago(today, NETWORK_MONTHS), today),
    ]
    response = await workforce.search(
        [jobs_group(filters, jobs_group_type="ended")],
        size=ALUMNI_SAMPLE_SIZE,
        return_fields=["name", "position.company.name"],
    )
    if not response.ok:
        logger.warning(f"Employer flow search failed: {response.error}")
        return None

    excluded = {name.lower() for name in employers}
    destinations: Counter = Counter()
    for person in response.results:
        company = ((person.get("position") or {}).get("company") or {}).get("name")
        if not company or company in NON_EMPLOYERS or company.lower() in excluded:
            continue
        destinations[company] += 1

    ranked = sorted(destinations.items(), key=lambda x: (-x[1], x[0]))
    return EmployerFlow(
        total_alumni=len(response.results),
        top_destinations=[CompanyCount(name=name, count=count) for name, count in ranked[:TOP_COMPANIES]],
    )


async def school_network(
    workforce: WorkforceClient,
    subject: Subject,
    today: date,
) -> Optional[SchoolNetwork]:
    """Companies recently hiring alumni of the subject's schools into their function."""
    schools = subject.schools[:MAX_SCHOOLS]
    if not schools:
        return None

    filters = [
        fuzzy_filter("education.school", schools),
        exact_filter("jobs.function", [subject.current_function]),
        date_range_filter("jobs.started_at", months_ago(today, NETWORK_MONTHS), today),
    ]
    report = arrivals_departures_report(months_ago(today, NETWORK_MONTHS), today, "jobs.company.name")
    response = await workforce.search([jobs_group(filters, report=report)], size=0)
    if not response.ok:
        logger.warning(f"School network search failed: {response.error}")
        return None

    companies = _company_hires(report_rows(response, "arrivals_departures"))
    return SchoolNetwork(
        total_hires=sum(c.hires for c in companies),
        top_companies=companies[:TOP_COMPANIES],
    )


def multi_signal_companies(
    regional: Optional[RegionalDemand],
    employer: Optional[EmployerFlow],
    school: Optional[SchoolNetwork],
) -> List[MultiSignalCompany]:
    """Companies present in at least two signals, most signals first."""
    signals: Dict[str, List[str]] = {}

    def add(name: str, signal: str):
        entry = signals.setdefault(name, [])
        if signal not in entry:
            entry.append(signal)

    if regional is not None:
        for company in regional.top_companies:
            add(company.name, SIGNAL_REGIONAL)
    if employer is not None:
        for destination in employer.top_destinations:
            add(destination.name, SIGNAL_EMPLOYER)
    if school is not None:
        for company in school.top_companies:
            add(company.name, SIGNAL_SCHOOL)

    matches = [(name, found) for name, found in signals.items() if len(found) >= 2]
    matches.sort(key=lambda x: (-len(x[1]), x[0]))
    return [MultiSignalCompany(name=name, signals=found) for name, found in matches]


async def collect_hiring_signals(
    workforce: WorkforceClient,
    subject: Subject,
    today: date,
) -> Optional[HiringSignals]:
    """
    Run all signal searches for a subject.

    Args:
        workforce: Workforce client
        subject: Subject under assessment
        today: Window end date

    Returns:
        HiringSignals, or None when no signal could be collected
    """
    regional = await regional_demand(workforce, subject, today)
    employer = await employer_flow(workforce, subject, today)
    school = await school_network(workforce, subject, today)

    if regional is None and employer is None and school is None:
        logger.info(f"No hiring signals collected for {subject.name}")
        return None

    signals = HiringSignals(
        geo_region=subject.location,
        regional=regional,
        employer_flow=employer,
        school=school,
        schools=subject.schools[:MAX_SCHOOLS] if school is not None else [],
        multi_signal=multi_signal_companies(regional, employer, school),
    )
    logger.info(
        f"Hiring signals for {subject.name}: regional={regional is not None}, "
        f"employer={employer is not None}, school={school is not None}, "
        f"multi_signal={len(signals.multi_signal)}"
    )
    return signals
