"""
Tests for ats_scoring.py - the pure ATS scorers.
"""

from datetime import datetime, timezone

import pytest

from careerhub.models.ats import Opportunity, Resume, ScoringRubric
from careerhub.services.ats_scoring import (
    DEFAULT_EXPERIENCE_MINIMUM,
    DEFAULT_EXPERIENCE_PARTIAL,
    DEFAULT_EXPERIENCE_WEIGHT,
    DefaultStrategy,
    RubricStrategy,
    experience_level_match,
    extract_opportunity_keywords,
    flatten_resume_text,
    round_half_up,
    score_against_opportunity,
    score_against_rubric,
    screen_applicant,
    screening_experience_years,
    select_strategy,
    total_experience_years,
)

NOW = datetime(2025, 1, 1, tzinfo=timezone.utc)


def make_resume(**fields) -> Resume:
    doc = {
        "title": "My Resume",
        "personalInfo": {"name": "Ana Lopez", "email": "ana@example.com"},
        "skills": [],
        "experience": [],
        "education": [],
    }
    doc.update(fields)
    return Resume.model_validate(doc)


def make_rubric(**fields) -> ScoringRubric:
    return ScoringRubric.model_validate(fields)


def make_opportunity(**fields) -> Opportunity:
    doc = {"title": "", "description": None, "skillsRequired": []}
    doc.update(fields)
    return Opportunity.model_validate(doc)


def job(start: str, end: str = None, current: bool = False) -> dict:
    return {"company": "Acme", "position": "Engineer", "startDate": start, "endDate": end, "current": current}


class TestRoundHalfUp:
    """Scores round .5 upwards, never to even."""

    @pytest.mark.parametrize("value,expected", [(12.5, 13), (2.5, 3), (61.11, 61), (49.99, 50), (0.0, 0)])
    def test_rounding(self, value, expected):
        assert round_half_up(value) == expected


class TestFlattenResumeText:
    """Test the text used for keyword matching."""

    def test_text_is_lowercase_and_covers_nested_fields(self):
        resume = make_resume(experience=[{**job("2020-01-01"), "description": "Deployed Kubernetes clusters"}])

        text = flatten_resume_text(resume)

        assert "kubernetes" in text
        assert "acme" in text
        assert text == text.lower()

    def test_cached_score_is_not_part_of_the_text(self):
        resume = make_resume(atsScore=85, atsScoredAt="2031-05-05T00:00:00")

        text = flatten_resume_text(resume)

        assert "85" not in text
        assert "2031" not in text

    def test_unknown_document_fields_are_included(self):
        resume = make_resume(projects=[{"title": "Realtime chat"}])

        assert "realtime chat" in flatten_resume_text(resume)


class TestRubricScorer:
    """Test scoring against a recruiter rubric."""

    def test_weighted_skills(self):
        resume = make_resume(skills=["React"])
        rubric = make_rubric(requiredSkills=[{"skill": "React", "weight": 3}, {"skill": "Python", "weight": 2}])

        result = score_against_rubric(resume, rubric)

        assert (result.matched, result.total, result.score) == (3, 5, 60)

    def test_skill_match_is_case_sensitive(self):
        resume = make_resume(skills=["react"])
        rubric = make_rubric(requiredSkills=[{"skill": "React"}])

        result = score_against_rubric(resume, rubric)

        assert result.matched == 0
        assert result.score == 0

    def test_missing_or_zero_weight_defaults_to_one(self):
        resume = make_resume(skills=["React", "SQL"])
        rubric = make_rubric(requiredSkills=[{"skill": "React"}, {"skill": "SQL", "weight": 0}])

        result = score_against_rubric(resume, rubric)

        assert (result.matched, result.total) == (2, 2)

    def test_keyword_is_case_insensitive_substring_anywhere(self):
        resume = make_resume(experience=[{**job("2020-01-01"), "description": "Ran kubernetes in production"}])
        rubric = make_rubric(keywords=[{"keyword": "Kubernetes", "weight": 4}, {"keyword": "Terraform"}])

        result = score_against_rubric(resume, rubric)

        assert (result.matched, result.total) == (4, 5)
        assert result.score == 80

    def test_contact_info_requires_email_and_phone(self):
        rubric = make_rubric(formatRequirements={"requiresContactInfo": True})

        email_only = score_against_rubric(make_resume(), rubric)
        both = score_against_rubric(
            make_resume(personalInfo={"email": "ana@example.com", "phone": "555-0100"}), rubric
        )

        assert (email_only.matched, email_only.total) == (0, 1)
        assert (both.matched, both.total) == (1, 1)

    def test_education_requirement(self):
        rubric = make_rubric(formatRequirements={"requiresEducation": True})

        without = score_against_rubric(make_resume(), rubric)
        with_education = score_against_rubric(
            make_resume(education=[{"institution": "State U", "degree": "BSc"}]), rubric
        )

        assert without.score == 0
        assert with_education.score == 100

    def test_empty_rubric_falls_back_to_midpoint(self):
        result = score_against_rubric(make_resume(skills=["React"]), make_rubric())

        assert (result.matched, result.total, result.score) == (5, 10, 50)

    def test_format_requirements_switched_off_still_fall_back(self):
        rubric = make_rubric(formatRequirements={"requiresContactInfo": False, "requiresEducation": False})

        assert score_against_rubric(make_resume(), rubric).score == 50

    def test_score_rounds_half_up(self):
        skills = [{"skill": f"Skill{i}"} for i in range(8)]
        resume = make_resume(skills=["Skill0"])

        result = score_against_rubric(resume, make_rubric(requiredSkills=skills))

        # 1/8 = 12.5%
        assert result.score == 13

    def test_scoring_twice_gives_same_score(self):
        resume = make_resume(skills=["React"], experience=[job("2021-01-01", "2023-01-01")])
        rubric = make_rubric(
            requiredSkills=[{"skill": "React"}, {"skill": "Go"}],
            keywords=[{"keyword": "acme"}],
        )

        assert score_against_rubric(resume, rubric) == score_against_rubric(resume, rubric)

    def test_adding_a_matching_skill_never_lowers_the_score(self):
        rubric = make_rubric(
            requiredSkills=[{"skill": "React"}, {"skill": "Go", "weight": 2}],
            keywords=[{"keyword": "graphql"}],
        )
        before = score_against_rubric(make_resume(skills=["React"]), rubric)
        after = score_against_rubric(make_resume(skills=["React", "Go"]), rubric)

        assert after.matched >= before.matched
        assert after.score >= before.score

    def test_score_matches_formula_and_bounds(self):
        rubric = make_rubric(
            requiredSkills=[{"skill": "React", "weight": 2}, {"skill": "SQL"}],
            keywords=[{"keyword": "acme", "weight": 3}],
            formatRequirements={"requiresContactInfo": True, "requiresEducation": True},
        )
        resumes = [
            make_resume(),
            make_resume(skills=["SQL"]),
            make_resume(skills=["React", "SQL"], experience=[job("2020-01-01")]),
        ]

        for resume in resumes:
            result = score_against_rubric(resume, rubric)
            assert result.score == round_half_up(100 * result.matched / result.total)
            assert 0 <= result.score <= 100


class TestExperienceYears:
    """Test year-span computation used by the default and screening paths."""

    def test_current_role_runs_until_now(self):
        resume = make_resume(experience=[job("2021-01-01", current=True)])

        assert total_experience_years(resume, NOW) == pytest.approx(4.0, abs=0.01)

    def test_spans_are_summed_and_negative_spans_clamp(self):
        resume = make_resume(experience=[
            job("2018-01-01", "2019-01-01"),
            job("2020-01-01", "2019-01-01"),
        ])

        assert total_experience_years(resume, NOW) == pytest.approx(1.0)

    def test_past_role_without_end_date_counts_nothing(self):
        resume = make_resume(experience=[job("2020-01-01")])

        assert total_experience_years(resume, NOW) == 0

    def test_screening_treats_missing_end_date_as_now(self):
        resume = make_resume(experience=[job("2020-01-01"), {"company": "Undated"}])

        assert screening_experience_years(resume, NOW) == pytest.approx(5.0, abs=0.01)


class TestOpportunityKeywords:
    """Test implicit keyword extraction from the opportunity text."""

    def test_words_longer_than_three_in_order_without_duplicates(self):
        opportunity = make_opportunity(
            title="Senior Python Developer!",
            description="Build, test & ship python APIs; python rocks.",
        )

        assert extract_opportunity_keywords(opportunity) == [
            "senior", "python", "developer", "build", "test", "ship", "apis", "rocks"
        ]

    def test_punctuation_is_removed_not_split(self):
        opportunity = make_opportunity(title="Full-stack Engineer")

        assert extract_opportunity_keywords(opportunity) == ["fullstack", "engineer"]

    def test_at_most_ten_keywords(self):
        words = " ".join(f"word{chr(ord('a') + i)}" for i in range(12))
        opportunity = make_opportunity(title="", description=words)

        keywords = extract_opportunity_keywords(opportunity)

        assert len(keywords) == 10
        assert keywords[0] == "worda"
        assert keywords[-1] == "wordj"

    def test_stopwords_are_kept(self):
        opportunity = make_opportunity(title="Work with them from home")

        assert extract_opportunity_keywords(opportunity) == ["work", "with", "them", "from", "home"]


class TestStrategySelection:
    """Rubric presence picks the strategy."""

    def test_rubric_selects_rubric_strategy(self):
        strategy = select_strategy(make_rubric(requiredExperience=2))

        assert isinstance(strategy, RubricStrategy)
        assert strategy.uses_rubric

    def test_no_rubric_selects_default_strategy(self):
        strategy = select_strategy(None)

        assert isinstance(strategy, DefaultStrategy)
        assert not strategy.uses_rubric


class TestOpportunityScorerDefault:
    """Opportunity scoring without an active rubric."""

    def test_worked_example(self):
        resume = make_resume(skills=["React", "SQL"])
        opportunity = make_opportunity(
            title="Backend Engineer",
            description="Build APIs",
            skillsRequired=["React", "SQL", "Python"],
        )

        result = score_against_opportunity(resume, opportunity, now=NOW)

        assert (result.matched, result.total) == (22, 36)
        assert result.score == 61
        assert result.opportunity_title == "Backend Engineer"
        assert result.has_ats_parameters is False
        assert result.recommended_candidate is False

    @pytest.mark.parametrize("experience,earned", [
        ([job("2020-01-01", current=True)], 5),
        ([job("2022-01-01", "2024-06-01")], 3),
        ([job("2024-09-01", "2024-12-01")], 1),
        ([job("2020-01-01")], 1),
    ])
    def test_experience_years_bands(self, experience, earned):
        resume = make_resume(personalInfo={}, experience=experience)

        result = score_against_opportunity(resume, make_opportunity(), now=NOW)

        # experience (5) + email check (2)
        assert (result.matched, result.total) == (earned, 7)

    @pytest.mark.parametrize("start,earned", [
        ("2022-01-02", DEFAULT_EXPERIENCE_WEIGHT),
        ("2024-01-02", DEFAULT_EXPERIENCE_PARTIAL),
        ("2024-06-01", DEFAULT_EXPERIENCE_MINIMUM),
    ])
    def test_year_thresholds_are_inclusive(self, start, earned):
        resume = make_resume(personalInfo={}, experience=[job(start, current=True)])

        result = score_against_opportunity(resume, make_opportunity(), now=NOW)

        assert (result.matched, result.total) == (earned, DEFAULT_EXPERIENCE_WEIGHT + 2)

    def test_education_gives_full_credit(self):
        resume = make_resume(personalInfo={}, education=[{"degree": "BSc"}])

        result = score_against_opportunity(resume, make_opportunity(), now=NOW)

        assert (result.matched, result.total) == (3, 5)
        assert result.score == 60

    def test_empty_resume_only_scores_the_email_check(self):
        result = score_against_opportunity(make_resume(personalInfo={}), make_opportunity(), now=NOW)

        assert (result.matched, result.total, result.score) == (0, 2, 0)

    def test_full_match_is_capped_at_100(self):
        resume = make_resume(
            skills=["Python", "SQL"],
            experience=[{**job("2015-01-01", current=True), "description": "backend engineer"}],
            education=[{"degree": "BSc"}],
        )
        opportunity = make_opportunity(title="Backend Engineer", skillsRequired=["Python", "SQL"])

        result = score_against_opportunity(resume, opportunity, now=NOW)

        assert result.matched == result.total
        assert result.score == 100
        assert result.recommended_candidate is True


class TestOpportunityScorerWithRubric:
    """Opportunity scoring with the owner's active rubric."""

    def test_experience_counts_entries_not_years(self):
        resume = make_resume(personalInfo={}, experience=[
            job("2000-01-01", "2010-01-01"),
            job("2010-01-01", "2020-01-01"),
        ])
        rubric = make_rubric(requiredExperience=4)

        result = score_against_opportunity(resume, make_opportunity(), rubric, now=NOW)

        # round(2/4 * 8) = 4, plus email check 0/2
        assert (result.matched, result.total) == (4, 10)
        assert result.has_ats_parameters is True

    def test_enough_entries_gives_full_experience_credit(self):
        resume = make_resume(experience=[job("2024-01-01"), job("2024-06-01")])
        rubric = make_rubric(requiredExperience=2)

        result = score_against_opportunity(resume, make_opportunity(), rubric, now=NOW)

        assert (result.matched, result.total) == (10, 10)

    def test_zero_required_experience_is_skipped(self):
        rubric = make_rubric(requiredExperience=0)

        result = score_against_opportunity(make_resume(), make_opportunity(), rubric, now=NOW)

        assert result.total == 2

    @pytest.mark.parametrize("education,earned", [
        ([{"degree": "Bachelor of Science"}], 6),
        ([{"degree": "Diploma"}], 3),
        ([], 0),
    ])
    def test_education_full_partial_none(self, education, earned):
        resume = make_resume(personalInfo={}, education=education)
        rubric = make_rubric(requiredEducation="bachelor")

        result = score_against_opportunity(resume, make_opportunity(), rubric, now=NOW)

        assert (result.matched, result.total) == (earned, 8)

    def test_keywords_default_to_weight_two(self):
        resume = make_resume(personalInfo={}, skills=["Docker"])
        rubric = make_rubric(keywords=[{"keyword": "docker"}, {"keyword": "helm", "weight": 5}])

        result = score_against_opportunity(resume, make_opportunity(), rubric, now=NOW)

        assert (result.matched, result.total) == (2, 9)

    def test_format_requirements_weigh_three_each(self):
        resume = make_resume(
            personalInfo={"email": "ana@example.com", "phone": "555-0100"},
            education=[{"degree": "BSc"}],
        )
        rubric = make_rubric(formatRequirements={"requiresContactInfo": True, "requiresEducation": True})

        result = score_against_opportunity(resume, make_opportunity(), rubric, now=NOW)

        # 3 + 3 + email check 2
        assert (result.matched, result.total) == (8, 8)

    def test_default_experience_criteria_do_not_apply(self):
        resume = make_resume(experience=[job("2015-01-01", current=True)], education=[{"degree": "BSc"}])

        result = score_against_opportunity(resume, make_opportunity(), make_rubric(), now=NOW)

        assert result.total == 2


class TestScreening:
    """Test the applicant screening score."""

    @pytest.mark.parametrize("level,years,expected", [
        ("Entry-Level", 1, 1.0),
        ("Intermediate", 3, 1.0),
        ("Intermediate", 1, 0.8),
        ("Entry-Level", 4, 0.8),
        ("Advanced", 0, 0.0),
        ("Advanced", 20, 1.0),
        ("Principal", 3, 0.5),
    ])
    def test_experience_level_match(self, level, years, expected):
        assert experience_level_match(level, years) == pytest.approx(expected)

    def test_complete_matching_applicant_scores_100(self):
        resume = make_resume(
            personalInfo={"email": "ana@example.com", "phone": "555-0100"},
            skills=["python", "SQL"],
            experience=[job("2024-01-01", current=True)],
            education=[{"degree": "BSc"}],
        )
        opportunity = make_opportunity(skillsRequired=["Python", "sql"], experienceLevel="Entry-Level")

        assert screen_applicant(resume, opportunity, now=NOW) == 100

    def test_unknown_level_gets_half_credit(self):
        resume = make_resume(skills=["python"], experience=[job("2024-01-01")])
        opportunity = make_opportunity(skillsRequired=["Python"], experienceLevel="Principal")

        # (40 + 12.5 + 20 * 2/3) / 85
        assert screen_applicant(resume, opportunity, now=NOW) == 77

    def test_no_level_and_no_education_shrink_the_denominator(self):
        resume = make_resume(personalInfo={}, skills=["Go"])
        opportunity = make_opportunity(skillsRequired=["Go", "Rust"], experienceLevel=None)

        # (20 + 20 * 1/3) / 60
        assert screen_applicant(resume, opportunity, now=NOW) == 44


class TestStoredDocumentTolerance:
    """Stored skill lists may contain nulls."""

    def test_null_resume_skills_are_dropped(self):
        resume = make_resume(skills=["React", None, "SQL"])

        assert resume.skills == ["React", "SQL"]

    def test_null_required_skills_are_dropped(self):
        opportunity = make_opportunity(skillsRequired=[None, "Python"])

        assert opportunity.skills_required == ["Python"]

    def test_null_skill_list(self):
        assert make_resume(skills=None).skills == []
