"""
Unit tests for provider response parsing.
"""

import json

from skillswap.services.suggestions.parsing import (
    parse_company_suggestions,
    parse_job_role_suggestions,
    parse_json_list,
    parse_mentor_topics,
    parse_skill_suggestions,
    strip_code_fence,
)


class TestStripCodeFence:
    def test_json_fence(self):
        assert strip_code_fence('```json\n[1, 2]\n```') == "[1, 2]"

    def test_bare_fence(self):
        assert strip_code_fence('```\n[1]\n```') == "[1]"

    def test_surrounding_whitespace(self):
        assert strip_code_fence('  \n```json\n[]\n```\n ') == "[]"

    def test_unfenced_text_is_only_trimmed(self):
        assert strip_code_fence('  [{"a": 1}] ') == '[{"a": 1}]'

    def test_none(self):
        assert strip_code_fence(None) == ""


class TestParseJsonList:
    def test_malformed_json_yields_empty_list(self):
        assert parse_json_list("Sure! Here are some skills: Rust, Go") == []

    def test_object_instead_of_array_yields_empty_list(self):
        assert parse_json_list('{"skill": "Rust"}') == []

    def test_empty_reply_yields_empty_list(self):
        assert parse_json_list("   ") == []

    def test_deeply_nested_reply_yields_empty_list(self):
        assert parse_json_list("[" * 100000) == []
        assert parse_skill_suggestions("[" * 100000) == []


class TestParseSkillSuggestions:
    def test_fenced_minimal_skill_gets_defaults(self):
        """A bare skill name inside a json fence is completed with defaults."""
        result = parse_skill_suggestions('```json\n[{"skill":"Rust"}]\n```')

        assert result == [{
            "skill": "Rust",
            "reason": "ai_recommended",
            "marketDemand": 0,
            "difficultyLevel": "intermediate",
            "estimatedTimeToLearn": 0,
            "relatedCourses": [],
        }]

    def test_invalid_enums_fall_back_to_defaults(self):
        result = parse_skill_suggestions(json.dumps([
            {"skill": "Go", "reason": "because", "difficultyLevel": "expert"}
        ]))

        assert result[0]["reason"] == "ai_recommended"
        assert result[0]["difficultyLevel"] == "intermediate"

    def test_enum_spelling_is_normalized(self):
        result = parse_skill_suggestions(json.dumps([
            {"skill": "Go", "reason": "Career Progression", "difficultyLevel": "Advanced"}
        ]))

        assert result[0]["reason"] == "career_progression"
        assert result[0]["difficultyLevel"] == "advanced"

    def test_scores_are_clamped(self):
        result = parse_skill_suggestions(json.dumps([
            {"skill": "Go", "marketDemand": 140, "estimatedTimeToLearn": -10}
        ]))

        assert result[0]["marketDemand"] == 100
        assert result[0]["estimatedTimeToLearn"] == 0

    def test_oversized_integer_is_clamped_not_fatal(self):
        text = '[{"skill":"Rust"},{"skill":"Go","marketDemand":1' + "0" * 400 + "}]"

        result = parse_skill_suggestions(text)

        assert [s["skill"] for s in result] == ["Rust", "Go"]
        assert result[1]["marketDemand"] == 100

    def test_null_name_falls_through_to_alias(self):
        result = parse_skill_suggestions('[{"skill": null, "name": "Rust"}]')

        assert [s["skill"] for s in result] == ["Rust"]

    def test_nameless_entries_are_dropped_and_siblings_kept(self):
        result = parse_skill_suggestions(json.dumps([
            {"skill": ""},
            {"marketDemand": 50},
            "Kubernetes",
            {"skill": "Terraform"},
        ]))

        assert [s["skill"] for s in result] == ["Terraform"]

    def test_courses_are_validated(self):
        result = parse_skill_suggestions(json.dumps([{
            "skill": "Go",
            "relatedCourses": [
                {"title": "Go in Action", "rating": 9},
                {"platform": "Coursera"},
            ],
        }]))

        assert result[0]["relatedCourses"] == [
            {"title": "Go in Action", "platform": "", "url": "", "rating": 5.0}
        ]


class TestParseJobRoleSuggestions:
    def test_minimal_role_gets_defaults(self):
        result = parse_job_role_suggestions('[{"title": "Backend Developer"}]')

        assert result == [{
            "title": "Backend Developer",
            "matchScore": 0,
            "skillsMatch": [],
            "avgSalary": {"amount": 0, "currency": "USD"},
            "growthPotential": 0,
            "popularCompanies": [],
        }]

    def test_skill_status_falls_back_to_first_status(self):
        result = parse_job_role_suggestions(json.dumps([{
            "title": "SRE",
            "skillsMatch": [{"skill": "Linux", "status": "sort of"}, {"skill": "Go", "status": "Missing"}],
        }]))

        assert result[0]["skillsMatch"] == [
            {"skill": "Linux", "status": "have"},
            {"skill": "Go", "status": "missing"},
        ]

    def test_company_names_must_be_objects(self):
        result = parse_job_role_suggestions(json.dumps([{
            "title": "SRE",
            "popularCompanies": ["Google", {"name": "Netflix"}],
        }]))

        assert result[0]["popularCompanies"] == [{"name": "Netflix"}]


class TestParseCompanySuggestions:
    def test_unknown_company_size_defaults_to_medium(self):
        result = parse_company_suggestions(json.dumps([
            {"name": "Acme", "companySize": "huge", "locations": "Berlin"}
        ]))

        assert result[0]["companySize"] == "medium"
        assert result[0]["locations"] == ["Berlin"]
        assert result[0]["matchScore"] == 0

    def test_company_alias(self):
        result = parse_company_suggestions('[{"company": "Acme", "companySize": "Startup"}]')

        assert result[0]["name"] == "Acme"
        assert result[0]["companySize"] == "startup"


def test_parse_mentor_topics():
    result = parse_mentor_topics('```json\n[{"skill": "Docker", "difficultyLevel": "beginner"}, {"reason": "x"}]\n```')

    assert result == [{"skill": "Docker", "difficultyLevel": "beginner", "reason": ""}]
