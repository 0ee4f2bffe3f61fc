"""
Suggestion Routes
Read, generate, rate and list the caller's AI career suggestions
"""
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from skillswap.config import get_settings
from skillswap.database import get_db
from skillswap.middleware.auth import get_current_user
from skillswap.middleware.rate_limit import limiter, GENERATE_LIMIT
from skillswap.models.suggestion import Suggestion
from skillswap.models.user import User
from skillswap.schemas.suggestion import FeedbackRequest
from skillswap.services.provider import SuggestionProvider, get_provider
from skillswap.services.suggestion_store import (
    SuggestionConflictError,
    attach_feedback,
    expire_suggestion,
    get_active_suggestion,
    get_latest_suggestion,
    list_history,
)
from skillswap.services.suggestions.orchestrator import ProfileNotFoundError, SuggestionOrchestrator
from skillswap.utils.logger import get_logger

router = APIRouter()
logger = get_logger("suggestion")


async def _require_current_suggestion(db: AsyncSession, user_id: int) -> Suggestion:
    """
    Active, unexpired record or 404 / 410

    An expired record is deactivated on first sight and keeps answering 410
    until a new generation replaces it.
    """
    record = await get_active_suggestion(db, user_id)
    if record and record.is_expired():
        await expire_suggestion(db, record)
        raise _gone()
    if not record:
        latest = await get_latest_suggestion(db, user_id)
        if latest and latest.is_expired():
            raise _gone()
        raise HTTPException(
            status_code=404,
            detail="No active suggestions found. Generate suggestions first.",
        )
    return record


def _gone() -> HTTPException:
    return HTTPException(
        status_code=410,
        detail="Suggestions have expired. Generate new suggestions.",
    )


@router.get("/skills")
async def get_suggestions(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    record = await _require_current_suggestion(db, current_user.id)
    return record.to_dict()


@router.post("/skills/generate")
@limiter.limit(GENERATE_LIMIT)
async def generate_suggestions(
    request: Request,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    provider: SuggestionProvider = Depends(get_provider),
):
    """
    Generate skills, job roles, companies and mentors for the caller

    A generator that fails leaves its list empty and is named in
    failedGenerators; the request itself still succeeds.
    """
    orchestrator = SuggestionOrchestrator(db, provider, get_settings())
    try:
        record = await orchestrator.generate(current_user.id)
    except ProfileNotFoundError:
        raise HTTPException(status_code=404, detail="Profile not found for this user")
    except SuggestionConflictError:
        raise HTTPException(status_code=500, detail="Suggestion generation conflict. Please retry.")

    logger.info(
        f"Suggestions generated for user {current_user.id}",
        extra={"user_id": current_user.id, "suggestion_id": record.id},
    )
    return {
        "message": "Suggestions generated successfully",
        "suggestion": record.to_dict(),
    }


@router.post("/skills/feedback")
async def submit_feedback(
    data: FeedbackRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    record = await _require_current_suggestion(db, current_user.id)
    record = await attach_feedback(db, record, data.rating, data.comments, data.helpful)
    return {"success": True, "userFeedback": record.feedback_dict()}


@router.get("/skills/history")
async def get_history(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    records = await list_history(db, current_user.id, limit=get_settings().suggestion_history_limit)
    return {"suggestions": [r.to_dict() for r in records]}
