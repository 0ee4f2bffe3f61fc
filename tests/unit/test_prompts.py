"""
Unit tests for prompt builders.
"""

from datetime import date

from skillswap.models.profile import Experience, Profile
from skillswap.services.suggestions.prompts import (
    NONE_SPECIFIED,
    PROMPT_MARKERS,
    build_company_prompt,
    build_job_role_prompt,
    build_mentor_prompt,
    build_skill_prompt,
    format_experience,
)


def _profile(**overrides):
    values = dict(
        user_id=1,
        current_skills=["Python"],
        target_skills=[],
        target_companies=[],
        profile_type="student",
        experience=[],
    )
    values.update(overrides)
    return Profile(**values)


def test_skill_prompt_lists_skills_and_marks_empty_fields():
    prompt = build_skill_prompt(_profile())

    assert "Python" in prompt
    assert NONE_SPECIFIED in prompt
    assert PROMPT_MARKERS["skills"] in prompt


def test_skill_prompt_is_deterministic():
    profile = _profile(target_skills=["Rust", "Go"])

    assert build_skill_prompt(profile) == build_skill_prompt(profile)


def test_profile_type_is_readable():
    prompt = build_skill_prompt(_profile(profile_type="working_professional"))

    assert "working professional" in prompt


def test_format_experience_lines():
    experience = [
        Experience(role="Data Analyst", company="Acme", from_date=date(2019, 3, 1), current=True,
                   description="Built dashboards"),
        Experience(role="Intern", company="Initech", from_date=date(2017, 6, 1), to_date=date(2018, 1, 1)),
    ]

    assert format_experience(experience) == (
        "Data Analyst at Acme (2019 - Present)\n"
        "Intern at Initech (2017 - 2018)"
    )
    assert "Built dashboards" in format_experience(experience, include_description=True)


def test_format_experience_empty():
    assert format_experience([]) == NONE_SPECIFIED


def test_job_role_prompt_includes_experience_descriptions():
    profile = _profile(experience=[
        Experience(role="Analyst", company="Acme", from_date=date(2020, 1, 1), current=True,
                   description="SQL reporting"),
    ])

    prompt = build_job_role_prompt(profile)

    assert PROMPT_MARKERS["job_roles"] in prompt
    assert "Analyst at Acme (2020 - Present): SQL reporting" in prompt


def test_company_prompt_uses_job_roles_and_target_companies():
    job_roles = [{
        "title": "Backend Developer",
        "matchScore": 72,
        "skillsMatch": [{"skill": "Python", "status": "have"}, {"skill": "Docker", "status": "missing"}],
    }]

    prompt = build_company_prompt(_profile(target_companies=["Stripe"]), job_roles)

    assert PROMPT_MARKERS["companies"] in prompt
    assert "Backend Developer (match score: 72/100)" in prompt
    assert "- Docker" in prompt
    assert "Stripe" in prompt


def test_mentor_prompt_lists_suggested_skills():
    skills = [{"skill": "Docker", "difficultyLevel": "advanced", "estimatedTimeToLearn": 30}]

    prompt = build_mentor_prompt(_profile(), skills)

    assert PROMPT_MARKERS["mentors"] in prompt
    assert "Docker (difficulty: advanced, ~30 hours)" in prompt


def test_markers_identify_exactly_one_prompt_kind():
    profile = _profile()
    prompts = {
        "skills": build_skill_prompt(profile),
        "job_roles": build_job_role_prompt(profile),
        "companies": build_company_prompt(profile, [{"title": "Dev"}]),
        "mentors": build_mentor_prompt(profile, [{"skill": "Go"}]),
    }

    for kind, prompt in prompts.items():
        matched = [k for k, marker in PROMPT_MARKERS.items() if marker in prompt]
        assert matched == [kind]
