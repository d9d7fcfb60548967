"""
Pytest configuration and shared fixtures for Workforce Risk tests.

This file provides:
- Settings with fake workforce credentials and no LLM key
- A frozen clock
- Fake workforce and LLM clients
- Sample subjects
"""

from datetime import date, datetime, timezone

import pytest

from tests.fakes import FakeLLM, FakeWorkforce, person_record

FROZEN_NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)
TODAY = FROZEN_NOW.date()


# ============================================================================
# Settings and Clock Fixtures
# ============================================================================

@pytest.fixture
def settings():
    """Settings with workforce credentials, no Anthropic key, signals off."""
    from workforce_risk.config.settings import Settings

    return Settings(
        livedata_org_id="o_test",
        livedata_api_key="test-key",
        anthropic_api_key=None,
        datadog_api_key=None,
        enable_hiring_signals=False,
    )


@pytest.fixture
def clock():
    """Clock frozen at FROZEN_NOW."""
    return lambda: FROZEN_NOW


@pytest.fixture
def today() -> date:
    return TODAY


# ============================================================================
# Fake Client Fixtures
# ============================================================================

@pytest.fixture
def fake_workforce():
    """Workforce fake that finds Jane Doe and has no company data."""
    return FakeWorkforce(person_records=[person_record()])


@pytest.fixture
def unconfigured_llm():
    """LLM fake with no API key."""
    return FakeLLM(configured=False)


# ============================================================================
# Test Data Fixtures
# ============================================================================

@pytest.fixture
def sales_subject():
    """Account Executive with an earlier SDR role."""
    from workforce_risk.models.person import Subject

    return Subject.from_person_record(person_record())


@pytest.fixture
def vp_subject():
    """VP of Engineering with fifteen years of engineering roles."""
    from workforce_risk.models.person import Job, Subject

    return Subject(
        name="Morgan Lee",
        location="San Francisco, California",
        current_title="VP of Engineering",
        current_company="Initech",
        current_company_id="initech-1",
        current_function="Engineering",
        current_level="VP",
        jobs=[
            Job(
                title="VP of Engineering",
                company="Initech",
                function="Engineering",
                level="VP",
                started_at=date(2019, 1, 1),
            ),
            Job(
                title="Senior Software Engineer",
                company="Hooli",
                function="Engineering",
                level="Senior Staff",
                started_at=date(2010, 6, 1),
                ended_at=date(2018, 12, 1),
            ),
        ],
    )


@pytest.fixture
def intern_subject():
    """Only an internship at Google plus education."""
    from workforce_risk.models.person import Subject

    return Subject.from_person_record(
        person_record(
            name="Sam Park",
            title="Software Engineering Intern",
            company="Google",
            company_id="google-1",
            location="Mountain View, California",
            jobs=[
                {
                    "title": "Software Engineering Intern",
                    "company": {"name": "Google", "id": "google-1"},
                    "function": "Engineering",
                    "level": "Intern",
                    "started_at": "2024-06-01",
                    "ended_at": "2024-09-01",
                },
            ],
            education=[{"degree": "BS Computer Science", "school": "Stanford University"}],
        )
    )
