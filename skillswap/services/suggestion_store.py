"""
Suggestion Store - persisted suggestion records with one active record per user

activate_suggestion() swaps the active record inside a single transaction:
lock the owning user row, deactivate whatever is active, insert the new record
as active, commit. Concurrent generations for one user serialize on the row
lock (PostgreSQL) or the database write lock (SQLite); the partial unique index
on suggestions rejects anything that slips past both. A lost race surfaces as
SuggestionConflictError after rollback; the previous active record stays.
"""
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from skillswap.models.suggestion import Suggestion
from skillswap.models.user import User
from skillswap.utils.logger import get_logger

logger = get_logger("suggestion_store")


class SuggestionConflictError(Exception):
    """The activation lost a race for the user's active slot and was rolled back."""

    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__(f"Concurrent activation conflict for user {user_id}")


async def get_active_suggestion(db: AsyncSession, user_id: int) -> Optional[Suggestion]:
    result = await db.execute(
        select(Suggestion).where(
            Suggestion.user_id == user_id,
            Suggestion.is_active.is_(True),
        )
    )
    return result.scalar_one_or_none()


async def get_latest_suggestion(db: AsyncSession, user_id: int) -> Optional[Suggestion]:
    """Newest record for the user, active or not."""
    result = await db.execute(
        select(Suggestion)
        .where(Suggestion.user_id == user_id)
        .order_by(Suggestion.generated_at.desc(), Suggestion.id.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def activate_suggestion(
    db: AsyncSession,
    user_id: int,
    *,
    suggested_skills: List[dict],
    suggested_job_roles: List[dict],
    suggested_companies: List[dict],
    mentor_suggestions: List[dict],
    source: str,
    failed_generators: List[str],
    ttl_days: int = 30,
    now: datetime = None,
) -> Suggestion:
    """Persist a new active record and deactivate the previous one atomically."""
    now = now or datetime.utcnow()

    record = Suggestion(
        user_id=user_id,
        suggested_skills=suggested_skills,
        suggested_job_roles=suggested_job_roles,
        suggested_companies=suggested_companies,
        mentor_suggestions=mentor_suggestions,
        source=source,
        failed_generators=failed_generators,
        generated_at=now,
        expires_at=now + timedelta(days=ttl_days),
        is_active=True,
    )

    try:
        # Serializes activations for this user until commit
        await db.execute(select(User.id).where(User.id == user_id).with_for_update())

        await db.execute(
            update(Suggestion)
            .where(Suggestion.user_id == user_id, Suggestion.is_active.is_(True))
            .values(is_active=False)
            .execution_options(synchronize_session="fetch")
        )
        db.add(record)
        await db.commit()
    except (IntegrityError, OperationalError) as e:
        await db.rollback()
        logger.critical(
            f"Suggestion activation conflict for user {user_id}",
            extra={"user_id": user_id, "error": str(e)[:200]},
        )
        raise SuggestionConflictError(user_id) from e

    await db.refresh(record)
    logger.info(
        f"Activated suggestion {record.id} for user {user_id}",
        extra={"user_id": user_id, "suggestion_id": record.id},
    )
    return record


async def expire_suggestion(db: AsyncSession, record: Suggestion) -> None:
    """Deactivate an expired record; no-op if something already replaced it."""
    await db.execute(
        update(Suggestion)
        .where(Suggestion.id == record.id, Suggestion.is_active.is_(True))
        .values(is_active=False)
        .execution_options(synchronize_session="fetch")
    )
    await db.commit()
    logger.info(
        f"Expired suggestion {record.id}",
        extra={"user_id": record.user_id, "suggestion_id": record.id},
    )


async def list_history(db: AsyncSession, user_id: int, limit: int = 10) -> List[Suggestion]:
    result = await db.execute(
        select(Suggestion)
        .where(Suggestion.user_id == user_id)
        .order_by(Suggestion.generated_at.desc(), Suggestion.id.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def attach_feedback(
    db: AsyncSession,
    record: Suggestion,
    rating: int,
    comments: Optional[str] = None,
    helpful: Optional[bool] = None,
) -> Suggestion:
    record.feedback_rating = rating
    record.feedback_comments = comments
    record.feedback_helpful = helpful
    record.feedback_submitted_at = datetime.utcnow()
    db.add(record)
    await db.commit()
    await db.refresh(record)
    return record
