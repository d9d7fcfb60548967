"""
Career Classifier Tests for Workforce Risk.

Tests for:
- Role classification (real / internship / ignore)
- Prestige employer matching
- Years of experience and functional profile
- Career stage selection
"""

from datetime import date

import pytest

from workforce_risk.models.career import CareerStage, DepthBucket
from workforce_risk.models.person import Job, Subject
from workforce_risk.services.career_classifier import (
    build_career_profile,
    classify_jobs,
    classify_role,
    first_real_job,
    functional_profile,
    is_prestige_employer,
    years_of_experience,
)

NOW = date(2025, 6, 15)


def _subject(title, level, jobs):
    return Subject(
        name="Test Person",
        current_title=title,
        current_level=level,
        current_function="Engineering",
        jobs=jobs,
    )


# ============================================================================
# Role Classification Tests
# ============================================================================

class TestClassifyRole:
    """Tests for classify_role."""

    def test_intern_level_is_internship(self):
        role = classify_role(Job(title="Analyst", company="Acme", level="Intern"))
        assert role.kind == "internship"
        assert role.prestige is False

    def test_internship_title_at_prestige_employer(self):
        role = classify_role(Job(title="Software Engineering Intern", company="Google LLC"))
        assert role.kind == "internship"
        assert role.prestige is True

    def test_research_fellow_is_internship(self):
        assert classify_role(Job(title="Research Fellow")).kind == "internship"

    def test_senior_fellow_is_real(self):
        assert classify_role(Job(title="Senior Fellow")).kind == "real"

    def test_service_job_is_ignored_with_reason(self):
        role = classify_role(Job(title="Barista"))
        assert role.kind == "ignore"
        assert role.reason == "service industry"

    def test_server_pattern_is_anchored(self):
        assert classify_role(Job(title="Server")).kind == "ignore"
        assert classify_role(Job(title="Server Engineer")).kind == "real"

    def test_internship_wins_over_ignore(self):
        # "Student Intern" matches both lists
        assert classify_role(Job(title="Student Intern")).kind == "internship"

    @pytest.mark.parametrize("title,level", [
        ("Director of Student Affairs", "Director"),
        ("Part-time CFO", "C-Team"),
        ("Volunteer Program Manager", "Senior Staff"),
    ])
    def test_senior_levels_skip_ignore_patterns(self, title, level):
        assert classify_role(Job(title=title, level=level)).kind == "real"

    def test_ignore_patterns_apply_below_senior_staff(self):
        role = classify_role(Job(title="Part-time Sales Associate", level="Staff"))
        assert role.kind == "ignore"
        assert role.reason == "part-time"

    @pytest.mark.parametrize("title,expected", [
        ("Student Worker", "ignore"),
        ("Library Student Assistant", "ignore"),
        ("Student Success Coordinator", "ignore"),
        ("Coordinator, Student Success", "real"),
    ])
    def test_student_matches_student_work_only(self, title, expected):
        assert classify_role(Job(title=title)).kind == expected

    def test_senior_career_with_student_title_is_not_pre_career(self):
        job = Job(
            title="Director of Student Affairs",
            company="State University",
            function="Education",
            level="Director",
            started_at=date(2010, 1, 1),
        )
        subject = _subject("Director of Student Affairs", "Director", [job])

        profile = build_career_profile(subject, NOW)

        assert profile.years_experience == 15
        assert profile.stage != CareerStage.PRE_CAREER

    def test_missing_title_is_real(self):
        assert classify_role(Job()).kind == "real"

    def test_classification_is_total_and_stable(self):
        jobs = [Job(title="Barista"), Job(title="Engineer"), Job(title="Intern")]
        first = classify_jobs(jobs)
        second = classify_jobs(jobs)
        assert [c.classification.kind for c in first] == ["ignore", "real", "internship"]
        assert first == second


class TestPrestigeEmployer:
    """Tests for is_prestige_employer."""

    @pytest.mark.parametrize("name", ["Google", "google llc", "Meta", "Goldman Sachs & Co."])
    def test_matches(self, name):
        assert is_prestige_employer(name) is True

    @pytest.mark.parametrize("name", [None, "", "   ", "Acme Corp", "GE"])
    def test_non_matches(self, name):
        assert is_prestige_employer(name) is False


# ============================================================================
# Experience Tests
# ============================================================================

class TestExperience:
    """Tests for first_real_job and years_of_experience."""

    def test_no_jobs_is_zero_years(self):
        assert years_of_experience([], NOW) == 0

    def test_only_internships_is_zero_years(self):
        jobs = [Job(title="Intern", started_at=date(2020, 1, 1))]
        assert years_of_experience(jobs, NOW) == 0

    def test_recent_real_job_counts_one_year(self):
        jobs = [Job(title="Analyst", started_at=date(2025, 4, 1))]
        assert years_of_experience(jobs, NOW) == 1

    def test_undated_real_job_counts_one_year(self):
        assert years_of_experience([Job(title="Analyst")], NOW) == 1

    def test_years_rounded_from_first_real_job(self):
        jobs = [
            Job(title="Engineer", started_at=date(2020, 1, 1)),
            Job(title="Engineer", started_at=date(2010, 6, 15), ended_at=date(2019, 12, 1)),
            Job(title="Intern", started_at=date(2008, 6, 1), ended_at=date(2008, 9, 1)),
        ]
        assert years_of_experience(jobs, NOW) == 15

    def test_first_real_job_skips_internships_and_undated(self):
        jobs = [
            Job(title="Engineer"),
            Job(title="Developer", started_at=date(2016, 1, 1)),
            Job(title="Intern", started_at=date(2014, 6, 1)),
        ]
        assert first_real_job(jobs).title == "Developer"


class TestFunctionalProfile:
    """Tests for functional_profile."""

    def test_none_without_real_jobs(self):
        assert functional_profile([Job(title="Intern")], NOW) is None

    def test_deep_specialist(self):
        jobs = [Job(title="Engineer", function="Engineering", started_at=date(2010, 1, 1))]
        profile = functional_profile(jobs, NOW)
        assert profile.dominant_function == "Engineering"
        assert profile.depth == DepthBucket.DEEP_SPECIALIST
        assert profile.dominant_share == pytest.approx(1.0)

    def test_multi_functional_and_cross_functional(self):
        jobs = [
            Job(title="AE", function="Sales and Support",
                started_at=date(2013, 1, 1), ended_at=date(2019, 1, 1)),
            Job(title="PMM", function="Marketing and Product",
                started_at=date(2019, 1, 1), ended_at=date(2021, 1, 1)),
            Job(title="Ops", function="Operations",
                started_at=date(2021, 1, 1), ended_at=date(2023, 1, 1)),
        ]
        profile = functional_profile(jobs, NOW)
        assert profile.dominant_function == "Sales and Support"
        assert profile.depth == DepthBucket.MULTI_FUNCTIONAL
        assert profile.cross_functional is True
        assert sum(profile.shares_by_function.values()) == pytest.approx(1.0)

    def test_undated_jobs_count_minimum_weight(self):
        jobs = [Job(title="Engineer", function="Engineering"), Job(title="Analyst", function="Operations")]
        profile = functional_profile(jobs, NOW)
        assert profile.years_by_function == {"Engineering": 0.25, "Operations": 0.25}
        assert profile.depth == DepthBucket.MULTI_FUNCTIONAL


# ============================================================================
# Career Stage Tests
# ============================================================================

class TestCareerStage:
    """Tests for stage selection through build_career_profile."""

    def test_pre_career_without_real_jobs(self, intern_subject):
        profile = build_career_profile(intern_subject, NOW)
        assert profile.stage == CareerStage.PRE_CAREER
        assert profile.years_experience == 0
        assert len(profile.prestige_internships) == 1

    def test_pinnacle_from_level(self):
        subject = _subject("Founder", "C-Team", [Job(title="Founder", started_at=date(2020, 1, 1))])
        assert build_career_profile(subject, NOW).stage == CareerStage.PINNACLE

    def test_pinnacle_from_title(self):
        subject = _subject(
            "Chief Revenue Officer", "Director", [Job(title="CRO", started_at=date(2020, 1, 1))]
        )
        assert build_career_profile(subject, NOW).stage == CareerStage.PINNACLE

    def test_vice_president_is_not_pinnacle(self):
        subject = _subject(
            "Vice President, Sales", "Director", [Job(title="VP", started_at=date(2020, 1, 1))]
        )
        assert build_career_profile(subject, NOW).stage == CareerStage.SENIOR_EXECUTIVE

    def test_vp_level_is_senior_executive(self, vp_subject):
        profile = build_career_profile(vp_subject, NOW)
        assert profile.stage == CareerStage.SENIOR_EXECUTIVE
        assert profile.years_experience == 15

    def test_head_of_title_is_senior_leader(self):
        subject = _subject("Head of Data", "Staff", [Job(title="Head of Data", started_at=date(2022, 1, 1))])
        assert build_career_profile(subject, NOW).stage == CareerStage.SENIOR_LEADER

    @pytest.mark.parametrize(
        "started, expected",
        [
            (date(2024, 9, 1), CareerStage.ENTRY_LEVEL),
            (date(2021, 6, 1), CareerStage.EARLY_CAREER),
            (date(2016, 6, 1), CareerStage.MID_CAREER),
        ],
    )
    def test_staff_stage_by_years(self, started, expected):
        subject = _subject("Analyst", "Staff", [Job(title="Analyst", started_at=started)])
        assert build_career_profile(subject, NOW).stage == expected

    def test_senior_title_is_mid_career(self):
        subject = _subject(
            "Senior Analyst", "Staff", [Job(title="Senior Analyst", started_at=date(2024, 1, 1))]
        )
        assert build_career_profile(subject, NOW).stage == CareerStage.MID_CAREER

    def test_stage_label_matches_stage(self, sales_subject):
        profile = build_career_profile(sales_subject, NOW)
        assert profile.stage == CareerStage.EARLY_CAREER
        assert profile.stage_label
