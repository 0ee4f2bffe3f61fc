"""
Suggestion Orchestrator
Profile -> prompts -> provider -> parsers -> one new active Suggestion record

Stage 1 runs the skill and job-role generators concurrently; stage 2 runs the
company generator (needs the fresh job roles) and the mentor generator (needs
the fresh skills). Each generator is isolated: any exception is logged, its
kind is recorded in failed_generators and its result is an empty list. The
record is persisted even when every generator came back empty.
"""
import asyncio
from typing import Awaitable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from skillswap.config import Settings, get_settings
from skillswap.models.profile import Profile
from skillswap.models.suggestion import Suggestion
from skillswap.services.provider import ProviderError, SuggestionProvider
from skillswap.services.suggestion_store import activate_suggestion
from skillswap.services.suggestions.mentors import load_candidate_profiles, match_mentors_for_skills
from skillswap.services.suggestions.parsing import (
    parse_company_suggestions,
    parse_job_role_suggestions,
    parse_mentor_topics,
    parse_skill_suggestions,
)
from skillswap.services.suggestions.prompts import (
    build_company_prompt,
    build_job_role_prompt,
    build_mentor_prompt,
    build_skill_prompt,
)
from skillswap.utils.logger import get_logger
from skillswap.utils.metrics import inc

logger = get_logger("orchestrator")


class ProfileNotFoundError(Exception):
    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__(f"Profile not found for user {user_id}")


class MissingPrerequisiteError(Exception):
    """A dependent generator has nothing to build on."""


class SuggestionOrchestrator:
    def __init__(self, db: AsyncSession, provider: SuggestionProvider, settings: Optional[Settings] = None):
        self.db = db
        self.provider = provider
        self.settings = settings or get_settings()

    # ---------- generators ----------

    async def generate_skills(self, profile: Profile) -> List[dict]:
        text = await self.provider.generate(build_skill_prompt(profile))
        return parse_skill_suggestions(text)

    async def generate_job_roles(self, profile: Profile) -> List[dict]:
        text = await self.provider.generate(build_job_role_prompt(profile))
        return parse_job_role_suggestions(text)

    async def generate_companies(self, profile: Profile, job_roles: List[dict]) -> List[dict]:
        if not job_roles:
            raise MissingPrerequisiteError("No job role suggestions. Company suggestions need job roles first.")
        text = await self.provider.generate(build_company_prompt(profile, job_roles))
        return parse_company_suggestions(text)

    async def generate_mentors(self, profile: Profile, skills: List[dict]) -> List[dict]:
        if not skills:
            raise MissingPrerequisiteError("No skill suggestions. Mentor matching needs skills first.")

        topics = await self._mentor_topics(profile, skills)
        candidates = await load_candidate_profiles(self.db, exclude_user_id=profile.user_id)
        return match_mentors_for_skills(
            candidates,
            topics,
            exclude_user_id=profile.user_id,
            limit=self.settings.mentors_per_skill,
        )

    async def _mentor_topics(self, profile: Profile, skills: List[dict]) -> List[dict]:
        """
        Skills to find mentors for, in provider-ranked order.

        Topics naming a skill outside the suggestion list are ignored; when
        the provider fails or nothing usable comes back, every suggested skill
        is used at its own difficulty level.
        """
        by_name = {s["skill"].lower(): s for s in skills}
        fallback = [{"skill": s["skill"], "difficultyLevel": s["difficultyLevel"]} for s in skills]

        try:
            text = await self.provider.generate(build_mentor_prompt(profile, skills))
        except ProviderError as e:
            logger.warning(f"Mentor topic ranking unavailable, using skill list: {e}")
            return fallback

        topics = []
        for topic in parse_mentor_topics(text):
            suggestion = by_name.get(topic["skill"].lower())
            if suggestion:
                topics.append({"skill": suggestion["skill"], "difficultyLevel": topic["difficultyLevel"]})
        return topics or fallback

    # ---------- orchestration ----------

    async def _isolated(self, kind: str, user_id: int, failed: List[str], work: Awaitable[List[dict]]) -> List[dict]:
        try:
            result = await work
        except Exception as e:
            failed.append(kind)
            inc(f"suggestions.{kind}.failed")
            logger.error(
                f"{kind} generation failed for user {user_id}: {type(e).__name__}: {e}",
                extra={"user_id": user_id, "kind": kind, "error_type": type(e).__name__},
            )
            return []
        logger.info(f"Generated {len(result)} {kind} suggestions for user {user_id}", extra={"kind": kind})
        return result

    async def _load_profile(self, user_id: int) -> Profile:
        result = await self.db.execute(select(Profile).where(Profile.user_id == user_id))
        profile = result.scalar_one_or_none()
        if not profile:
            raise ProfileNotFoundError(user_id)
        return profile

    async def generate(self, user_id: int) -> Suggestion:
        """Run all four generators and persist the result as the user's active record."""
        profile = await self._load_profile(user_id)
        failed: List[str] = []

        skills, job_roles = await asyncio.gather(
            self._isolated("skills", user_id, failed, self.generate_skills(profile)),
            self._isolated("job_roles", user_id, failed, self.generate_job_roles(profile)),
        )
        companies, mentors = await asyncio.gather(
            self._isolated("companies", user_id, failed, self.generate_companies(profile, job_roles)),
            self._isolated("mentors", user_id, failed, self.generate_mentors(profile, skills)),
        )

        record = await activate_suggestion(
            self.db,
            user_id,
            suggested_skills=skills,
            suggested_job_roles=job_roles,
            suggested_companies=companies,
            mentor_suggestions=mentors,
            source=self.provider.name,
            failed_generators=sorted(failed),
            ttl_days=self.settings.suggestion_ttl_days,
        )
        inc("suggestions.generated")
        return record
