"""
Integration tests for the suggestion endpoints.
"""

from datetime import datetime, timedelta

import pytest
from sqlalchemy import update

from skillswap.models.suggestion import Suggestion
from skillswap.services.provider import ProviderTimeoutError, ProviderUnavailableError, get_provider
from skillswap.main import app


async def _generate(client, headers):
    response = await client.post("/api/suggestion/skills/generate", headers=headers)
    assert response.status_code == 200, response.text
    return response.json()["suggestion"]


async def _expire_all(session_factory):
    async with session_factory() as session:
        await session.execute(update(Suggestion).values(expires_at=datetime.utcnow() - timedelta(days=1)))
        await session.commit()


class TestGenerate:
    @pytest.mark.asyncio
    async def test_generate_returns_all_kinds(self, client, signup):
        headers = await signup("alice")
        await client.put("/api/auth/update-profile", headers=headers, json={"currentSkills": ["Python"]})

        response = await client.post("/api/suggestion/skills/generate", headers=headers)

        assert response.status_code == 200
        body = response.json()
        assert body["message"]
        suggestion = body["suggestion"]
        assert [s["skill"] for s in suggestion["suggestedSkills"]] == ["Docker", "SQL"]
        assert suggestion["suggestedJobRoles"][0]["title"] == "Backend Developer"
        assert suggestion["suggestedCompanies"][0]["companySize"] == "large"
        assert suggestion["mentorSuggestions"] == []
        assert suggestion["failedGenerators"] == []
        assert suggestion["source"] == "fake"
        assert suggestion["isActive"] is True
        assert suggestion["userFeedback"] is None

    @pytest.mark.asyncio
    async def test_mentors_come_from_other_members(self, client, signup):
        mentor = await signup("mentor")
        await client.put("/api/auth/update-profile", headers=mentor, json={"currentSkills": ["Docker"]})
        headers = await signup("alice")

        suggestion = await _generate(client, headers)

        assert suggestion["mentorSuggestions"][0]["skill"] == "Docker"
        assert suggestion["mentorSuggestions"][0]["mentors"][0]["username"] == "mentor"

    @pytest.mark.asyncio
    async def test_partial_failure_still_succeeds(self, client, signup, provider):
        provider.responses["job_roles"] = ProviderTimeoutError("slow")
        headers = await signup("alice")

        suggestion = await _generate(client, headers)

        assert suggestion["suggestedJobRoles"] == []
        assert suggestion["suggestedSkills"]
        assert suggestion["failedGenerators"] == ["companies", "job_roles"]

    @pytest.mark.asyncio
    async def test_requires_auth(self, client):
        response = await client.post("/api/suggestion/skills/generate")

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_unconfigured_provider_is_503(self, client, signup):
        headers = await signup("alice")

        def unavailable():
            raise ProviderUnavailableError("OPENAI_API_KEY not found")

        app.dependency_overrides[get_provider] = unavailable
        response = await client.post("/api/suggestion/skills/generate", headers=headers)

        assert response.status_code == 503


class TestCurrentSuggestion:
    @pytest.mark.asyncio
    async def test_none_before_generation(self, client, signup):
        headers = await signup("alice")

        response = await client.get("/api/suggestion/skills", headers=headers)

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_returns_latest_generation(self, client, signup):
        headers = await signup("alice")
        await _generate(client, headers)
        latest = await _generate(client, headers)

        response = await client.get("/api/suggestion/skills", headers=headers)

        assert response.status_code == 200
        assert response.json()["id"] == latest["id"]

    @pytest.mark.asyncio
    async def test_expired_stays_gone_until_regenerated(self, client, signup, session_factory):
        headers = await signup("alice")
        await _generate(client, headers)
        await _expire_all(session_factory)

        expired = await client.get("/api/suggestion/skills", headers=headers)
        again = await client.get("/api/suggestion/skills", headers=headers)

        assert expired.status_code == 410
        assert "suggestedSkills" not in expired.json()
        assert again.status_code == 410

        fresh = await _generate(client, headers)
        current = await client.get("/api/suggestion/skills", headers=headers)
        assert current.status_code == 200
        assert current.json()["id"] == fresh["id"]

    @pytest.mark.asyncio
    async def test_users_see_only_their_own(self, client, signup):
        alice = await signup("alice")
        bob = await signup("bob")
        await _generate(client, alice)

        response = await client.get("/api/suggestion/skills", headers=bob)

        assert response.status_code == 404


class TestFeedback:
    @pytest.mark.asyncio
    async def test_feedback_is_attached(self, client, signup):
        headers = await signup("alice")
        await _generate(client, headers)

        response = await client.post(
            "/api/suggestion/skills/feedback",
            headers=headers,
            json={"rating": 5, "comments": "Spot on", "helpful": True},
        )

        assert response.status_code == 200
        assert response.json()["userFeedback"]["rating"] == 5
        current = (await client.get("/api/suggestion/skills", headers=headers)).json()
        assert current["userFeedback"]["comments"] == "Spot on"

    @pytest.mark.asyncio
    async def test_rating_out_of_range(self, client, signup):
        headers = await signup("alice")
        await _generate(client, headers)

        response = await client.post("/api/suggestion/skills/feedback", headers=headers, json={"rating": 9})

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_feedback_without_suggestions(self, client, signup):
        headers = await signup("alice")

        response = await client.post("/api/suggestion/skills/feedback", headers=headers, json={"rating": 3})

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_feedback_on_expired(self, client, signup, session_factory):
        headers = await signup("alice")
        await _generate(client, headers)
        await _expire_all(session_factory)

        response = await client.post("/api/suggestion/skills/feedback", headers=headers, json={"rating": 3})
        again = await client.post("/api/suggestion/skills/feedback", headers=headers, json={"rating": 3})

        assert response.status_code == 410
        assert again.status_code == 410


@pytest.mark.asyncio
async def test_history_lists_generations_newest_first(client, signup):
    headers = await signup("alice")
    first = await _generate(client, headers)
    second = await _generate(client, headers)

    response = await client.get("/api/suggestion/skills/history", headers=headers)

    assert response.status_code == 200
    history = response.json()["suggestions"]
    assert [s["id"] for s in history] == [second["id"], first["id"]]
    assert [s["isActive"] for s in history] == [True, False]


@pytest.mark.asyncio
async def test_health_metrics_and_correlation_header(client, signup):
    headers = await signup("alice")
    await _generate(client, headers)

    health = await client.get("/health", headers={"X-Correlation-ID": "abc-123"})
    snapshot = (await client.get("/metrics")).json()

    assert health.json() == {"status": "ok"}
    assert health.headers["X-Correlation-ID"] == "abc-123"
    assert snapshot["counters"]["suggestions.generated"] == 1
    assert "circuits" in snapshot
