"""
Shared test fixtures.

Every test gets its own in-memory SQLite database and a scripted provider;
nothing touches the network or the local skillswap.db file.
"""

import json
import os

# Settings are cached on first import, so the environment goes first
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["LOG_TO_FILE"] = "false"
os.environ["TEST_MODE"] = "false"
os.environ["OPENAI_API_KEY"] = ""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import skillswap.models  # noqa: F401  (registers tables on Base)
from skillswap.database import Base, get_db
from skillswap.main import app
from skillswap.models.profile import Profile
from skillswap.models.user import User
from skillswap.services.provider import MockSuggestionProvider, ProviderError, SuggestionProvider, get_provider
from skillswap.services.suggestions.prompts import PROMPT_MARKERS
from skillswap.utils import metrics


class FakeProvider(SuggestionProvider):
    """
    Scripted provider keyed by prompt kind.

    responses[kind] is either the reply text or an exception to raise.
    Kinds without an entry answer with the canned TEST MODE replies.
    """

    name = "fake"

    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.prompts = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        for kind, marker in PROMPT_MARKERS.items():
            if marker in prompt:
                reply = self.responses.get(kind, json.dumps(MockSuggestionProvider.RESPONSES[kind]))
                if isinstance(reply, Exception):
                    raise reply
                return reply
        raise ProviderError("Unrecognized prompt")

    def kinds_called(self):
        called = []
        for prompt in self.prompts:
            for kind, marker in PROMPT_MARKERS.items():
                if marker in prompt:
                    called.append(kind)
        return called


@pytest.fixture(autouse=True)
def reset_metrics():
    metrics.reset()
    yield
    metrics.reset()


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_provider():
    return FakeProvider


@pytest.fixture
def provider(make_provider):
    return make_provider()


@pytest.fixture
def make_member(db):
    """Factory: create an active user with a profile, committed."""

    async def _make(
        username,
        current_skills=(),
        target_skills=(),
        profile_type="other",
        experience=(),
        target_companies=(),
    ):
        user = User.create_user(username=username, email=f"{username}@example.com", password="secret123")
        db.add(user)
        await db.flush()

        profile = Profile(
            user_id=user.id,
            current_skills=list(current_skills),
            target_skills=list(target_skills),
            target_companies=list(target_companies),
            profile_type=profile_type,
            bio="",
            experience=list(experience),
        )
        db.add(profile)
        await db.commit()
        return user, profile

    return _make


@pytest.fixture
async def client(session_factory, provider):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_provider] = lambda: provider

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def signup(client):
    """Factory: register through the API and return bearer auth headers."""

    async def _signup(username="alice", email=None, password="secret123"):
        response = await client.post(
            "/api/auth/signup",
            json={"username": username, "email": email or f"{username}@example.com", "password": password},
        )
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['token']}"}

    return _signup
