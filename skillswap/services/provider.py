"""
Suggestion Provider - the external text-generation capability

    text = await provider.generate(prompt)

Providers are passed explicitly to the orchestrator (FastAPI dependency
get_provider), so tests swap in a fake without touching process state.
Every failure surfaces as a ProviderError subclass.
"""
import asyncio
import json
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Optional

from openai import AsyncOpenAI, OpenAIError

from skillswap.config import get_settings
from skillswap.services.gateway import CircuitOpenError, ServiceConfig, ServiceGateway
from skillswap.services.suggestions.prompts import PROMPT_MARKERS
from skillswap.utils.logger import get_logger
from skillswap.utils.metrics import track_duration

logger = get_logger("provider")

SYSTEM_PROMPT = "You are a career development assistant. Return only valid JSON."


class ProviderError(Exception):
    """The provider could not produce a response."""


class ProviderTimeoutError(ProviderError):
    """The provider did not answer within the configured timeout."""


class ProviderUnavailableError(ProviderError):
    """The provider is not configured or its circuit breaker is open."""


class SuggestionProvider(ABC):
    """Base class: turn a prompt into unstructured text."""

    name = "provider"

    @abstractmethod
    async def generate(self, prompt: str) -> str:
        """Return the raw reply text or raise a ProviderError."""


class OpenAISuggestionProvider(SuggestionProvider):
    """Chat-completions backed provider, guarded by a ServiceGateway."""

    name = "openai"

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4.1-mini",
        gateway: Optional[ServiceGateway] = None,
        client: Optional[AsyncOpenAI] = None,
        temperature: float = 0.7,
        max_tokens: int = 2048,
    ):
        if client is None and not api_key:
            raise ProviderUnavailableError(
                "OPENAI_API_KEY not found. Set it in the environment, "
                "or set TEST_MODE=true to use canned suggestions."
            )
        self.client = client or AsyncOpenAI(api_key=api_key)
        self.model = model
        self.gateway = gateway or ServiceGateway({self.name: ServiceConfig()})
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def _complete(self, prompt: str):
        return await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )

    async def generate(self, prompt: str) -> str:
        try:
            async with track_duration(self.name, "generate"):
                response = await self.gateway.execute(self.name, self._complete, prompt)
        except CircuitOpenError as e:
            raise ProviderUnavailableError(str(e)) from e
        except asyncio.TimeoutError as e:
            raise ProviderTimeoutError(f"{self.name} did not respond in time") from e
        except OpenAIError as e:
            raise ProviderError(f"{self.name} request failed: {type(e).__name__}: {e}") from e

        if not response.choices:
            raise ProviderError(f"{self.name} returned no choices")
        return response.choices[0].message.content or ""


class MockSuggestionProvider(SuggestionProvider):
    """TEST MODE provider: canned replies picked by prompt kind, no network."""

    name = "mock"

    RESPONSES = {
        "skills": [
            {
                "skill": "Docker",
                "reason": "market_trend",
                "marketDemand": 88,
                "difficultyLevel": "intermediate",
                "estimatedTimeToLearn": 30,
                "relatedCourses": [
                    {"title": "Docker for Developers", "platform": "Udemy", "url": "https://www.udemy.com/", "rating": 4.6}
                ],
            },
            {
                "skill": "SQL",
                "reason": "job_requirement",
                "marketDemand": 90,
                "difficultyLevel": "beginner",
                "estimatedTimeToLearn": 25,
                "relatedCourses": [],
            },
        ],
        "job_roles": [
            {
                "title": "Backend Developer",
                "matchScore": 72,
                "skillsMatch": [{"skill": "Python", "status": "have"}, {"skill": "Docker", "status": "missing"}],
                "avgSalary": {"amount": 95000, "currency": "USD"},
                "growthPotential": 80,
                "popularCompanies": [{"name": "Stripe"}, {"name": "Shopify"}],
            }
        ],
        "companies": [
            {
                "name": "Stripe",
                "reason": "Strong backend engineering culture",
                "matchScore": 78,
                "workCulture": "Remote-friendly, writing-heavy",
                "companySize": "large",
                "locations": ["San Francisco", "Dublin"],
            }
        ],
        "mentors": [
            {"skill": "Docker", "difficultyLevel": "intermediate", "reason": "Hands-on setup help"}
        ],
    }

    async def generate(self, prompt: str) -> str:
        for kind, marker in PROMPT_MARKERS.items():
            if marker in prompt:
                logger.info(f"[TEST MODE] Returning canned {kind} suggestions")
                return "```json\n" + json.dumps(self.RESPONSES[kind], indent=2) + "\n```"
        raise ProviderError("[TEST MODE] Unrecognized prompt")


@lru_cache()
def _configured_provider() -> SuggestionProvider:
    settings = get_settings()
    if settings.test_mode:
        return MockSuggestionProvider()
    gateway = ServiceGateway({
        OpenAISuggestionProvider.name: ServiceConfig(
            max_concurrent=settings.provider_max_concurrent,
            timeout_seconds=settings.provider_timeout_seconds,
            circuit_failure_threshold=settings.provider_failure_threshold,
            circuit_recovery_seconds=settings.provider_recovery_seconds,
        )
    })
    return OpenAISuggestionProvider(
        api_key=settings.openai_api_key,
        model=settings.openai_model,
        gateway=gateway,
    )


def get_provider() -> SuggestionProvider:
    """FastAPI dependency returning the configured provider."""
    return _configured_provider()
