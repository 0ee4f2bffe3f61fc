"""
Mentor matching - rank other users who already have a skill

score_mentor(profile, skill, difficulty) -> 0-100, deterministic:
  40  base: the skill is in the mentor's current skills
  +30 years of experience, weighted by how hard the skill is
  +15 one of the mentor's positions mentions the skill
  +10 working professional (+5 for other, 0 for student)
  +5  the mentor is still learning fewer than 3 target skills
"""
from typing import List, Sequence, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from skillswap.models.profile import Profile
from skillswap.models.user import User

BASE_SCORE = 40
MAX_EXPERIENCE_POINTS = 30
MENTIONS_POINTS = 15
FOCUS_POINTS = 5

# Experience points per year by difficulty of the skill being taught
YEAR_WEIGHTS = {"beginner": 3, "intermediate": 5, "advanced": 6}

PROFILE_TYPE_POINTS = {"working_professional": 10, "other": 5, "student": 0}


def _mentions(profile: Profile, skill: str) -> bool:
    needle = skill.strip().lower()
    for exp in profile.experience or []:
        text = f"{exp.role or ''} {exp.description or ''}".lower()
        if needle in text:
            return True
    return False


def score_mentor(profile: Profile, skill: str, difficulty: str = "intermediate", today=None) -> int:
    """Score how well profile can mentor skill at the given difficulty."""
    if not profile.has_skill(skill):
        return 0

    years = sum(exp.years(today) for exp in profile.experience or [])
    weight = YEAR_WEIGHTS.get(difficulty, YEAR_WEIGHTS["intermediate"])
    score = BASE_SCORE + min(MAX_EXPERIENCE_POINTS, int(years * weight))

    if _mentions(profile, skill):
        score += MENTIONS_POINTS
    score += PROFILE_TYPE_POINTS.get(profile.profile_type, 0)
    if len(profile.target_skills or []) < 3:
        score += FOCUS_POINTS

    return max(0, min(100, score))


def rank_mentors(
    candidates: Sequence[Tuple[Profile, str]],
    skill: str,
    difficulty: str = "intermediate",
    exclude_user_id: int = None,
    limit: int = 3,
) -> List[dict]:
    """
    Top `limit` mentors for skill, highest score first.

    candidates are (profile, username) pairs in query order; equal scores keep
    that order (sorted() is stable).
    """
    scored = []
    for profile, username in candidates:
        if profile.user_id == exclude_user_id or not profile.has_skill(skill):
            continue
        scored.append({
            "userId": profile.user_id,
            "username": username,
            "matchScore": score_mentor(profile, skill, difficulty),
        })
    scored = sorted(scored, key=lambda m: m["matchScore"], reverse=True)
    return scored[:limit]


async def load_candidate_profiles(db: AsyncSession, exclude_user_id: int) -> List[Tuple[Profile, str]]:
    """Every other active user's profile (read-only), in insertion order."""
    result = await db.execute(
        select(Profile, User.username)
        .join(User, User.id == Profile.user_id)
        .where(Profile.user_id != exclude_user_id, User.is_active.is_(True))
        .order_by(Profile.id)
    )
    return [(profile, username) for profile, username in result.all()]


def match_mentors_for_skills(
    candidates: Sequence[Tuple[Profile, str]],
    topics: Sequence[dict],
    exclude_user_id: int,
    limit: int = 3,
) -> List[dict]:
    """One entry per topic ({skill, difficultyLevel}) that has at least one mentor."""
    suggestions = []
    seen = set()
    for topic in topics:
        skill = topic["skill"]
        key = skill.strip().lower()
        if key in seen:
            continue
        seen.add(key)
        mentors = rank_mentors(
            candidates,
            skill,
            topic.get("difficultyLevel", "intermediate"),
            exclude_user_id=exclude_user_id,
            limit=limit,
        )
        if mentors:
            suggestions.append({"skill": skill, "mentors": mentors})
    return suggestions
