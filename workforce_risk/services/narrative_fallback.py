"""
Deterministic narratives for Workforce Risk.

Used when the LLM is skipped (pre-career subjects) or unavailable
(missing key, API error, timeout, unparseable output). Paths come from
stage-keyed tables; AI threat and mitigation text comes from a
function-indexed template library.
"""

import logging
from typing import Any, Dict, List, Optional

from workforce_risk.models.assessment import (
    HiringSignals,
    Narrative,
    RetrainingPath,
    SalaryEstimate,
    Scores,
)
from workforce_risk.models.career import CareerProfile, CareerStage, DepthBucket
from workforce_risk.models.company import CompanySummary
from workforce_risk.models.person import Level, Subject

logger = logging.getLogger(__name__)

# =============================================================================
# Risk bands and directives
# =============================================================================

# (minimum overall score, band label, directive)
RISK_BANDS = [
    (70, "high", "Act now: start a transition plan within 90 days and build skills for an adjacent, lower-risk role."),
    (50, "moderate-to-elevated", "Prepare: invest in one adjacent skill set this year and keep your network active."),
    (30, "moderate", "Monitor: strengthen your position in your current role while tracking adjacent openings."),
    (0, "low", "Build: you are well positioned; deepen your expertise and take on scope that compounds."),
]


def risk_band(overall: int) -> str:
    for minimum, label, _ in RISK_BANDS:
        if overall >= minimum:
            return label
    return RISK_BANDS[-1][1]


def directive_for(overall: int) -> str:
    """One-line action directive for an overall risk score."""
    for minimum, _, directive in RISK_BANDS:
        if overall >= minimum:
            return directive
    return RISK_BANDS[-1][2]


# =============================================================================
# AI threat / mitigation templates by function
# =============================================================================

DEFAULT_AI_TEMPLATE = {
    "threat": (
        "AI tools are increasingly automating the routine research, drafting and "
        "reporting work found across {function} roles."
    ),
    "mitigation": (
        "Work that depends on judgment, relationships and context specific to "
        "{company} remains difficult to automate."
    ),
}

AI_TEMPLATES: Dict[str, Dict[str, str]] = {
    "Sales and Support": {
        "threat": (
            "Prospecting, outbound sequencing, lead qualification and first-line support "
            "are among the most automated workflows in {function}; AI SDR agents and "
            "support copilots now handle volume that used to require headcount."
        ),
        "mitigation": (
            "Complex deal strategy, executive relationships and post-sale expansion still "
            "depend on trust and negotiation that AI does not replace."
        ),
    },
    "Marketing and Product": {
        "threat": (
            "Content production, campaign variants, SEO copy and routine analytics in "
            "{function} are being compressed by generative tools."
        ),
        "mitigation": (
            "Positioning, customer insight and cross-functional product decisions remain "
            "judgment-heavy and hard to hand to a model."
        ),
    },
    "Business Management": {
        "threat": (
            "Reporting, planning decks and status synthesis in {function} roles are "
            "increasingly generated by AI assistants."
        ),
        "mitigation": (
            "Accountability for outcomes, stakeholder alignment and trade-off decisions "
            "keep general management roles anchored to people."
        ),
    },
    "Finance and Administration": {
        "threat": (
            "Reconciliation, invoice processing, variance commentary and forecasting "
            "drafts in {function} are prime targets for automation."
        ),
        "mitigation": (
            "Controls ownership, audit judgment and partnering with business leaders on "
            "decisions remain human responsibilities."
        ),
    },
    "Human Resources": {
        "threat": (
            "Resume screening, scheduling, policy Q&A and onboarding paperwork in "
            "{function} are moving to AI-driven workflows."
        ),
        "mitigation": (
            "Employee relations, organisational design and sensitive conversations are "
            "among the most AI-resistant parts of the function."
        ),
    },
    "Engineering": {
        "threat": (
            "Code generation and AI review tools are raising output per engineer, which "
            "compresses demand for routine implementation work in {function}."
        ),
        "mitigation": (
            "System design, debugging production systems and owning architecture "
            "decisions still require deep human expertise."
        ),
    },
    "Operations": {
        "threat": (
            "Scheduling, coordination, exception handling and reporting in {function} "
            "are increasingly handled by workflow automation and AI agents."
        ),
        "mitigation": (
            "Process design, vendor relationships and on-the-ground problem solving are "
            "hard to automate end to end."
        ),
    },
    "Information Technology": {
        "threat": (
            "Ticket triage, provisioning, scripting and level-one support in {function} "
            "are being absorbed by AI service desks and automation platforms."
        ),
        "mitigation": (
            "Security judgment, infrastructure architecture and vendor strategy remain "
            "human-led."
        ),
    },
    "Consulting": {
        "threat": (
            "Research, benchmarking and deliverable drafting, the leverage model of "
            "{function}, are being accelerated by AI, shrinking junior team sizes."
        ),
        "mitigation": (
            "Client trust, problem framing and driving change inside organisations are "
            "what clients continue to pay people for."
        ),
    },
    "Program and Project Management": {
        "threat": (
            "Status tracking, meeting notes, timelines and risk logs in {function} are "
            "increasingly generated automatically."
        ),
        "mitigation": (
            "Negotiating scope, unblocking teams and managing stakeholders remain "
            "people-centred work."
        ),
    },
    "Legal": {
        "threat": (
            "Document review, contract first drafts and legal research in {function} "
            "are being transformed by AI review tools."
        ),
        "mitigation": (
            "Licensure, privileged advice and accountability for legal judgment keep "
            "lawyers in the loop."
        ),
    },
    "Risk, Safety, Compliance": {
        "threat": (
            "Monitoring, evidence collection and policy mapping in {function} are "
            "increasingly automated."
        ),
        "mitigation": (
            "Regulatory accountability and judgment on ambiguous cases remain human "
            "obligations."
        ),
    },
    "Healthcare": {
        "threat": (
            "Documentation, coding and administrative intake in {function} are moving "
            "to AI scribes and automation."
        ),
        "mitigation": (
            "Licensed clinical care and patient contact are among the most AI-resistant "
            "work in the economy."
        ),
    },
    "Education": {
        "threat": (
            "Content preparation, grading and tutoring support in {function} are being "
            "supplemented by AI tools."
        ),
        "mitigation": (
            "Mentorship, classroom leadership and individual student relationships "
            "remain fundamentally human."
        ),
    },
}

LEADERSHIP_LEVELS = (
    Level.MANAGER.value,
    Level.DIRECTOR.value,
    Level.VP.value,
    Level.C_TEAM.value,
)

# =============================================================================
# Retraining path tables
# =============================================================================

EXECUTIVE_PATHS: List[Dict[str, Any]] = [
    {
        "title": "Board Director",
        "function": "Business Management",
        "target_level": "C-Team",
        "fit_score": 78,
        "growth_score": 70,
        "ai_safe_score": 92,
        "rationale": (
            "Senior operating experience in {function} is exactly what boards recruit for. "
            "Governance, oversight and strategic counsel are among the least automatable roles."
        ),
        "skills": ["Corporate governance", "Audit and risk oversight", "Executive hiring", "Capital allocation"],
        "time_to_transition": "6-18 months",
        "salary_comparison": "Lower cash per seat, but portfolio of seats with equity upside",
    },
    {
        "title": "Fractional Executive",
        "function": "{function}",
        "target_level": "C-Team",
        "fit_score": 82,
        "growth_score": 80,
        "ai_safe_score": 85,
        "rationale": (
            "Growth-stage companies buy senior {function} leadership part-time. Your track "
            "record transfers directly and diversifies exposure across several employers."
        ),
        "skills": ["Rapid diagnosis", "Operating cadence design", "Team building", "Investor communication"],
        "time_to_transition": "3-6 months",
        "salary_comparison": "Comparable total compensation across 2-3 clients",
    },
    {
        "title": "Operating Partner",
        "function": "Business Management",
        "target_level": "VP",
        "fit_score": 70,
        "growth_score": 72,
        "ai_safe_score": 84,
        "rationale": (
            "Private equity and venture firms place operators with deep {function} "
            "experience alongside portfolio management teams."
        ),
        "skills": ["Value creation planning", "Due diligence", "Portfolio coaching", "Board reporting"],
        "time_to_transition": "6-12 months",
        "salary_comparison": "Similar base with carried interest upside",
    },
    {
        "title": "Chief AI Transformation Officer",
        "function": "Business Management",
        "target_level": "C-Team",
        "fit_score": 65,
        "growth_score": 88,
        "ai_safe_score": 80,
        "rationale": (
            "Companies need executives who can redesign {function} workflows around AI. "
            "Leading that change is safer than being subject to it."
        ),
        "skills": ["AI operating models", "Change management", "Vendor strategy", "Workforce redesign"],
        "time_to_transition": "6-12 months",
        "salary_comparison": "Comparable to current executive compensation",
    },
]

SENIOR_LEADER_PATHS: List[Dict[str, Any]] = [
    {
        "title": "VP of {function}",
        "function": "{function}",
        "target_level": "VP",
        "fit_score": 80,
        "growth_score": 75,
        "ai_safe_score": 78,
        "rationale": (
            "The natural next step: broaden scope within {function} at a company that is "
            "still adding senior headcount."
        ),
        "skills": ["Org design", "Budget ownership", "Executive communication", "Cross-functional planning"],
        "time_to_transition": "12-24 months",
        "salary_comparison": "30-40% higher midpoint",
    },
    {
        "title": "Head of AI Enablement",
        "function": "{function}",
        "target_level": "Director",
        "fit_score": 72,
        "growth_score": 86,
        "ai_safe_score": 80,
        "rationale": (
            "Owning how AI is adopted inside {function} turns automation exposure into a "
            "mandate and a visible leadership platform."
        ),
        "skills": ["AI tooling evaluation", "Process redesign", "Change management", "Metrics design"],
        "time_to_transition": "6-12 months",
        "salary_comparison": "Comparable with stronger growth trajectory",
    },
    {
        "title": "General Manager",
        "function": "Business Management",
        "target_level": "Director",
        "fit_score": 65,
        "growth_score": 72,
        "ai_safe_score": 82,
        "rationale": (
            "P&L ownership builds on {function} leadership and widens the range of "
            "executive roles available later."
        ),
        "skills": ["P&L management", "Go-to-market strategy", "Hiring leaders", "Operational reviews"],
        "time_to_transition": "12-18 months",
        "salary_comparison": "Higher ceiling with bonus tied to business results",
    },
    {
        "title": "Fractional {function} Leader",
        "function": "{function}",
        "target_level": "Director",
        "fit_score": 68,
        "growth_score": 70,
        "ai_safe_score": 78,
        "rationale": (
            "Startups buy director-level {function} experience part-time, which hedges "
            "against single-employer risk."
        ),
        "skills": ["Playbook building", "Advisory selling", "Interim leadership", "Hiring plans"],
        "time_to_transition": "3-6 months",
        "salary_comparison": "Variable; can match salary with 2-3 clients",
    },
]

# Adjacent roles by function for mid and early career subjects
ADJACENT_PATHS: Dict[str, List[Dict[str, Any]]] = {
    "Sales and Support": [
        {
            "title": "Revenue Operations",
            "function": "Operations",
            "fit_score": 80,
            "growth_score": 78,
            "ai_safe_score": 75,
            "rationale": (
                "Leverages pipeline and CRM knowledge while moving into a function with "
                "lower AI disruption risk and strong growth."
            ),
            "skills": ["Pipeline analytics", "CRM architecture", "Forecasting", "Sales process design"],
            "salary_comparison": "Comparable or higher compensation ceiling",
        },
        {
            "title": "Customer Success Manager",
            "function": "Sales and Support",
            "fit_score": 75,
            "growth_score": 85,
            "ai_safe_score": 65,
            "rationale": (
                "Relationship-focused role that is harder to automate and a natural move "
                "from selling to post-sale retention."
            ),
            "skills": ["Relationship building", "Retention strategy", "Expansion selling", "Account management"],
            "salary_comparison": "Similar base with expansion upside",
        },
        {
            "title": "Sales Enablement",
            "function": "Marketing and Product",
            "fit_score": 72,
            "growth_score": 70,
            "ai_safe_score": 72,
            "rationale": (
                "Hands-on knowledge of the sales motion translates directly to building "
                "playbooks and onboarding for other reps."
            ),
            "skills": ["Playbook design", "Rep onboarding", "Tool stack optimisation", "Competitive intelligence"],
            "salary_comparison": "Moderate salary increase potential",
        },
        {
            "title": "People Operations",
            "function": "Human Resources",
            "fit_score": 55,
            "growth_score": 65,
            "ai_safe_score": 80,
            "rationale": "A bigger pivot, but highly AI-resistant and built on people skills.",
            "skills": ["Team management", "Onboarding design", "People analytics", "Culture development"],
            "salary_comparison": "Slight decrease initially, strong ceiling",
        },
    ],
    "Engineering": [
        {
            "title": "Platform / Infrastructure Engineer",
            "function": "Engineering",
            "fit_score": 85,
            "growth_score": 78,
            "ai_safe_score": 78,
            "rationale": "Owning reliability and infrastructure is closer to systems judgment than routine coding.",
            "skills": ["Distributed systems", "Cloud infrastructure", "Observability", "Incident response"],
            "salary_comparison": "Comparable to higher",
        },
        {
            "title": "Machine Learning Engineer",
            "function": "Engineering",
            "fit_score": 72,
            "growth_score": 90,
            "ai_safe_score": 80,
            "rationale": "Building AI systems is the most direct hedge against being displaced by them.",
            "skills": ["Model evaluation", "Data pipelines", "LLM application design", "MLOps"],
            "salary_comparison": "10-25% higher midpoint",
        },
        {
            "title": "Security Engineer",
            "function": "Information Technology",
            "fit_score": 68,
            "growth_score": 80,
            "ai_safe_score": 82,
            "rationale": "Security demand grows with AI adoption and rewards adversarial thinking.",
            "skills": ["Threat modelling", "Application security", "Cloud security", "Incident handling"],
            "salary_comparison": "Comparable",
        },
        {
            "title": "Technical Product Manager",
            "function": "Marketing and Product",
            "fit_score": 62,
            "growth_score": 72,
            "ai_safe_score": 74,
            "rationale": "Engineering depth plus customer judgment is a durable combination.",
            "skills": ["Roadmapping", "Customer discovery", "Technical specs", "Prioritisation"],
            "salary_comparison": "Comparable",
        },
    ],
    "Marketing and Product": [
        {
            "title": "Product Marketing Manager",
            "function": "Marketing and Product",
            "fit_score": 80,
            "growth_score": 72,
            "ai_safe_score": 70,
            "rationale": "Positioning and launch strategy rely on customer insight more than content volume.",
            "skills": ["Positioning", "Launch planning", "Competitive analysis", "Sales alignment"],
            "salary_comparison": "Comparable to higher",
        },
        {
            "title": "Growth / Lifecycle Analytics",
            "function": "Marketing and Product",
            "fit_score": 72,
            "growth_score": 80,
            "ai_safe_score": 68,
            "rationale": "Owning experiments and attribution moves you from producing assets to steering spend.",
            "skills": ["Experiment design", "SQL", "Attribution modelling", "Lifecycle strategy"],
            "salary_comparison": "Comparable",
        },
        {
            "title": "Product Manager",
            "function": "Marketing and Product",
            "fit_score": 66,
            "growth_score": 78,
            "ai_safe_score": 74,
            "rationale": "Market knowledge transfers into deciding what gets built.",
            "skills": ["Discovery", "Roadmapping", "Stakeholder management", "Metrics definition"],
            "salary_comparison": "10-20% higher midpoint",
        },
        {
            "title": "Customer Insights Lead",
            "function": "Consulting",
            "fit_score": 60,
            "growth_score": 65,
            "ai_safe_score": 72,
            "rationale": "Qualitative research and synthesis remain judgment-heavy.",
            "skills": ["User research", "Survey design", "Synthesis", "Storytelling"],
            "salary_comparison": "Comparable",
        },
    ],
    "Finance and Administration": [
        {
            "title": "FP&A Business Partner",
            "function": "Finance and Administration",
            "fit_score": 80,
            "growth_score": 72,
            "ai_safe_score": 72,
            "rationale": "Partnering with leaders on decisions is harder to automate than transaction processing.",
            "skills": ["Financial modelling", "Business partnering", "Scenario planning", "Executive reporting"],
            "salary_comparison": "Comparable to higher",
        },
        {
            "title": "Finance Systems Analyst",
            "function": "Information Technology",
            "fit_score": 70,
            "growth_score": 78,
            "ai_safe_score": 70,
            "rationale": "Owning the automation stack puts you on the right side of finance automation.",
            "skills": ["ERP configuration", "Workflow automation", "Data integration", "Controls design"],
            "salary_comparison": "Comparable",
        },
        {
            "title": "Internal Audit / Controls",
            "function": "Risk, Safety, Compliance",
            "fit_score": 68,
            "growth_score": 65,
            "ai_safe_score": 80,
            "rationale": "Regulatory accountability keeps humans in the loop.",
            "skills": ["SOX controls", "Risk assessment", "Audit planning", "Process documentation"],
            "salary_comparison": "Comparable",
        },
        {
            "title": "Revenue Operations",
            "function": "Operations",
            "fit_score": 58,
            "growth_score": 75,
            "ai_safe_score": 72,
            "rationale": "Finance rigour is valued in go-to-market planning.",
            "skills": ["Forecasting", "Pricing analysis", "CRM data", "Compensation planning"],
            "salary_comparison": "Comparable",
        },
    ],
}

DEFAULT_ADJACENT_PATHS: List[Dict[str, Any]] = [
    {
        "title": "{function} Operations Lead",
        "function": "Operations",
        "fit_score": 78,
        "growth_score": 70,
        "ai_safe_score": 72,
        "rationale": "Owning how {function} work gets done is more durable than doing the routine parts of it.",
        "skills": ["Process design", "Tooling and automation", "Metrics", "Stakeholder management"],
        "salary_comparison": "Comparable",
    },
    {
        "title": "AI Workflow Specialist",
        "function": "Information Technology",
        "fit_score": 68,
        "growth_score": 85,
        "ai_safe_score": 74,
        "rationale": "Domain knowledge of {function} is what AI rollouts lack most.",
        "skills": ["Prompt and workflow design", "Automation platforms", "Change management", "Data literacy"],
        "salary_comparison": "Comparable to higher",
    },
    {
        "title": "Program Manager",
        "function": "Program and Project Management",
        "fit_score": 66,
        "growth_score": 68,
        "ai_safe_score": 70,
        "rationale": "Coordinating cross-functional work builds on {function} experience.",
        "skills": ["Planning", "Risk management", "Stakeholder alignment", "Delivery tracking"],
        "salary_comparison": "Comparable",
    },
    {
        "title": "Customer Success Manager",
        "function": "Sales and Support",
        "fit_score": 58,
        "growth_score": 75,
        "ai_safe_score": 65,
        "rationale": "Relationship-heavy work that values subject-matter credibility.",
        "skills": ["Account management", "Onboarding", "Renewals", "Executive communication"],
        "salary_comparison": "Similar base with variable upside",
    },
]

EARLY_CAREER_PATHS: List[Dict[str, Any]] = [
    {
        "title": "Customer Success Associate",
        "function": "Sales and Support",
        "target_level": "Staff",
        "fit_score": 72,
        "growth_score": 78,
        "ai_safe_score": 62,
        "rationale": "Entry point with clear progression that builds relationship skills AI does not replace.",
        "skills": ["Client communication", "Product knowledge", "Problem solving", "CRM basics"],
        "time_to_transition": "0-3 months",
        "salary_comparison": "Typical entry-level salary with bonus",
    },
    {
        "title": "Operations Analyst",
        "function": "Operations",
        "target_level": "Staff",
        "fit_score": 68,
        "growth_score": 72,
        "ai_safe_score": 66,
        "rationale": "Analytical entry role that teaches how a business actually runs.",
        "skills": ["Spreadsheet modelling", "SQL", "Process mapping", "Reporting"],
        "time_to_transition": "0-3 months",
        "salary_comparison": "Typical entry-level salary",
    },
    {
        "title": "Data Analyst",
        "function": "Information Technology",
        "target_level": "Staff",
        "fit_score": 62,
        "growth_score": 80,
        "ai_safe_score": 64,
        "rationale": "Data fluency compounds and opens doors across functions.",
        "skills": ["SQL", "Python", "Dashboards", "Statistics"],
        "time_to_transition": "3-6 months",
        "salary_comparison": "Above-average entry-level salary",
    },
    {
        "title": "Implementation Specialist",
        "function": "Consulting",
        "target_level": "Staff",
        "fit_score": 58,
        "growth_score": 68,
        "ai_safe_score": 70,
        "rationale": "Hands-on customer rollouts build technical and interpersonal credibility.",
        "skills": ["Project coordination", "Technical configuration", "Training", "Documentation"],
        "time_to_transition": "0-3 months",
        "salary_comparison": "Typical entry-level salary",
    },
]


def _fill(template: Dict[str, Any], values: Dict[str, str]) -> Dict[str, Any]:
    filled: Dict[str, Any] = {}
    for key, value in template.items():
        if isinstance(value, str):
            filled[key] = value.format(**values)
        else:
            filled[key] = value
    return filled


def _paths(templates: List[Dict[str, Any]], values: Dict[str, str], defaults: Dict[str, Any]) -> List[RetrainingPath]:
    return [
        RetrainingPath(rank=rank, **{**defaults, **_fill(template, values)})
        for rank, template in enumerate(templates, start=1)
    ]


def retraining_paths_for_stage(stage: CareerStage, function: str) -> List[RetrainingPath]:
    """
    Four paths selected by career stage.

    Executives and senior leaders get stage tables whose target levels stay
    at Director or above; mid and early career get roles adjacent to their
    dominant function.
    """
    values = {"function": function}
    if stage in (CareerStage.PINNACLE, CareerStage.SENIOR_EXECUTIVE):
        return _paths(EXECUTIVE_PATHS, values, {})
    if stage == CareerStage.SENIOR_LEADER:
        return _paths(SENIOR_LEADER_PATHS, values, {})

    templates = ADJACENT_PATHS.get(function, DEFAULT_ADJACENT_PATHS)
    if stage == CareerStage.MID_CAREER:
        defaults = {"target_level": Level.MANAGER.value, "time_to_transition": "6-12 months"}
    else:
        defaults = {"target_level": Level.SENIOR_STAFF.value, "time_to_transition": "3-9 months"}
    return _paths(templates, values, defaults)


# =============================================================================
# Narrative builders
# =============================================================================

def _dominant_function(subject: Subject, career: CareerProfile) -> str:
    if career.functional_profile is not None:
        return career.functional_profile.dominant_function
    return subject.current_function


def _career_pattern(subject: Subject, career: CareerProfile) -> str:
    profile = career.functional_profile
    real = len(career.real_jobs)
    pattern = "frequent role changes" if real > 4 else "steady progression"
    text = (
        f"{career.years_experience} years of professional experience across {real} "
        f"real role(s), showing a pattern of {pattern}."
    )
    if profile is not None:
        text += f" {profile.summary}"
        if profile.depth == DepthBucket.DEEP_SPECIALIST:
            text += " Recommendations stay close to that specialism."
    return text


def _hiring_outlook(subject: Subject, company: CompanySummary, signals: Optional[HiringSignals]) -> str:
    if signals is not None and signals.regional is not None and signals.regional.total_hires:
        top = ", ".join(c.name for c in signals.regional.top_companies[:3])
        region = signals.geo_region or subject.location or "the region"
        text = (
            f"{signals.regional.total_hires} people at a similar function and level were hired "
            f"across {signals.regional.total_companies} companies in {region} recently"
        )
        return f"{text}, led by {top}." if top else f"{text}."

    dept = next((f for f in company.flows if f.function == subject.current_function), None)
    if dept is not None:
        return (
            f"{subject.current_company} hired {dept.hires} and lost {dept.departures} people in "
            f"{subject.current_function} over the last year (net {dept.net:+d})."
        )
    return "Hiring data for this profile was not available; treat the outlook as uncertain."


def _geo_market_context(subject: Subject, salary: SalaryEstimate) -> str:
    band = salary.estimate
    location = subject.location or "this market"
    pressure = salary.ai_pressure
    return (
        f"In {location}, {subject.current_function} roles at {subject.current_level} level centre "
        f"on ${band.midpoint // 1000}K (range ${band.low // 1000}K-${band.high // 1000}K). "
        f"AI pressure on pay is {pressure.magnitude.value.lower()} ({pressure.direction.value}, "
        f"{pressure.pct_impact:+d}%)."
    )


def fallback_narrative(
    subject: Subject,
    career: CareerProfile,
    scores: Scores,
    company: CompanySummary,
    salary: SalaryEstimate,
    hiring_signals: Optional[HiringSignals] = None,
) -> Narrative:
    """
    Deterministic narrative for career-stage subjects when the LLM is unavailable.

    Args:
        subject: Subject under assessment
        career: Classifier output
        scores: Computed scores
        company: Company summary
        salary: Salary estimate
        hiring_signals: Optional hiring signals

    Returns:
        Narrative with source="fallback"
    """
    band = risk_band(scores.overall)
    function = subject.current_function
    template = AI_TEMPLATES.get(function, DEFAULT_AI_TEMPLATE)
    values = {"function": function, "company": subject.current_company}

    driver = "AI automation exposure in their function" if scores.ai_risk >= 60 else "market dynamics"
    stability = "strong near-term stability" if scores.company_instability <= 30 else "some uncertainty"

    if subject.current_level in LEADERSHIP_LEVELS:
        level_buffer = "A leadership-level position provides some buffer against direct automation."
    else:
        level_buffer = "Individual contributor roles are more exposed to direct automation."

    if scores.company_instability <= 30:
        health = "a strong growth trajectory"
    elif scores.company_instability <= 50:
        health = "stable positioning"
    else:
        health = "concerning headcount trends"

    if scores.promotion_ceiling <= 40:
        promotion = "favorable"
    elif scores.promotion_ceiling <= 60:
        promotion = "competitive"
    else:
        promotion = "challenging"

    growth_text = (
        f" Headcount moved {company.growth_pct:+d}% over the window to {company.total_headcount:,}."
        if company.total_headcount
        else ""
    )

    primary_risk = "AI disruption of their current function" if scores.ai_risk >= 60 else "market positioning"

    narrative = Narrative(
        overview_summary=(
            f"{subject.name} faces {band} employment risk (score: {scores.overall}/100), "
            f"primarily driven by {driver}. Their position as {subject.current_title} at "
            f"{subject.current_company} provides {stability}."
        ),
        career_pattern=_career_pattern(subject, career),
        ai_threat_analysis=(
            f"The {function} function faces {'significant' if scores.ai_risk >= 60 else 'moderate'} "
            f"AI disruption risk. {template['threat'].format(**values)}"
        ),
        ai_mitigating_factors=f"{template['mitigation'].format(**values)} {level_buffer}",
        company_health_summary=(
            f"{subject.current_company} shows {health} based on workforce data.{growth_text}"
        ),
        promotion_analysis=(
            f"Internal promotion prospects are {promotion} given the current ratio of "
            f"manager to director hiring."
        ),
        geo_market_context=_geo_market_context(subject, salary),
        hiring_outlook=_hiring_outlook(subject, company, hiring_signals),
        retraining_paths=retraining_paths_for_stage(career.stage, _dominant_function(subject, career)),
        bottom_line=(
            f"{subject.name}'s primary risk is {primary_risk}. Medium-term planning should focus "
            f"on roles with lower automation exposure and stronger organisational demand."
        ),
        directive=directive_for(scores.overall),
        source="fallback",
    )
    logger.info(f"Built fallback narrative for {subject.name} (stage={career.stage.value})")
    return narrative


def pre_career_narrative(
    subject: Subject,
    career: CareerProfile,
    scores: Scores,
    salary: SalaryEstimate,
) -> Narrative:
    """
    Narrative for subjects with no real job, built without the LLM.

    Text is keyed to intern, student and transitional signals. A prestige
    internship adds a conversion path at rank 1 and drops the old rank 4.
    """
    prestige = career.prestige_internships
    prestige_employers = sorted({c.job.company for c in prestige if c.job.company})
    internships = career.internships
    ignored = career.ignored_roles

    if internships:
        employers = sorted({c.job.company for c in internships if c.job.company})
        signal = (
            f"{subject.name} is at the start of their career with {len(internships)} "
            f"internship(s){' at ' + ', '.join(employers) if employers else ''}."
        )
    elif subject.education:
        signal = f"{subject.name} appears to be a student or recent graduate ({subject.education})."
    elif ignored:
        signal = (
            f"{subject.name}'s history consists of part-time, student or service roles, "
            f"which suggests a transition into professional work."
        )
    else:
        signal = f"No professional history is recorded for {subject.name} yet."

    if prestige_employers:
        prestige_text = (
            f" An internship at {', '.join(prestige_employers)} is a strong, selective signal "
            f"that employers weigh heavily for first hires."
        )
    else:
        prestige_text = ""

    paths = [p.model_dump() for p in _paths(EARLY_CAREER_PATHS, {"function": subject.current_function}, {})]
    if prestige:
        employer = prestige_employers[0] if prestige_employers else "your internship employer"
        function = prestige[0].job.function or subject.current_function
        conversion = {
            "title": f"Full-time return offer at {employer}",
            "function": function,
            "target_level": Level.STAFF.value,
            "fit_score": 88,
            "growth_score": 82,
            "ai_safe_score": 70,
            "rationale": (
                f"Converting the {employer} internship is the shortest path to a first real role "
                f"and keeps the prestige signal on the resume."
            ),
            "skills": ["Networking with former team", "Interview preparation", "Project portfolio", "Referrals"],
            "time_to_transition": "0-6 months",
            "salary_comparison": "Top-of-market entry-level compensation",
        }
        paths = [conversion] + paths[:3]

    retraining = [RetrainingPath(**{**path, "rank": rank}) for rank, path in enumerate(paths, start=1)]

    narrative = Narrative(
        overview_summary=f"{signal}{prestige_text} Risk scores are provisional until a first full-time role.",
        career_pattern="Pre-career: no full-time professional role yet, so scores rely on neutral defaults.",
        ai_threat_analysis=(
            "Entry-level tasks are the most exposed to AI automation, which makes the first "
            "role choice more important than usual."
        ),
        ai_mitigating_factors=(
            "Early-career professionals who learn to work with AI tools from day one are "
            "well placed as teams restructure around them."
        ),
        company_health_summary="Company health is not yet a factor without a current employer.",
        promotion_analysis="Promotion analysis applies once a first full-time role is in place.",
        geo_market_context=_geo_market_context(subject, salary),
        hiring_outlook=(
            "Entry-level hiring is competitive; internships, referrals and demonstrable projects "
            "carry the most weight."
        ),
        retraining_paths=retraining,
        bottom_line=(
            "Focus on landing a first full-time role in a function with clear progression and "
            "lower automation exposure."
        ),
        directive=directive_for(scores.overall),
        source="pre_career",
    )
    logger.info(
        f"Built pre-career narrative for {subject.name} "
        f"(internships={len(internships)}, prestige={len(prestige)})"
    )
    return narrative
