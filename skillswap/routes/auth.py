"""Authentication and Profile Routes"""

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from datetime import datetime

from skillswap.database import get_db
from skillswap.models.user import User
from skillswap.models.profile import Profile, Experience
from skillswap.middleware.auth import create_access_token, get_current_user
from skillswap.middleware.rate_limit import limiter, SIGNUP_LIMIT, LOGIN_LIMIT
from skillswap.schemas.profile import SignupRequest, LoginRequest, ProfileUpdate, ExperienceCreate
from skillswap.utils.logger import get_logger

router = APIRouter()
logger = get_logger("auth")


async def _get_profile(db: AsyncSession, user_id: int) -> Profile:
    result = await db.execute(select(Profile).where(Profile.user_id == user_id))
    return result.scalar_one_or_none()


async def _get_or_create_profile(db: AsyncSession, user_id: int) -> Profile:
    profile = await _get_profile(db, user_id)
    if not profile:
        profile = Profile(user_id=user_id, current_skills=[], target_skills=[], target_companies=[], bio="")
        db.add(profile)
        await db.flush()
        await db.refresh(profile, attribute_names=["experience"])
    return profile


@router.post("/signup")
@limiter.limit(SIGNUP_LIMIT)
async def signup(
    request: Request,
    data: SignupRequest,
    db: AsyncSession = Depends(get_db)
):
    """
    Register a new user with an empty profile

    Returns:
        - token: bearer token valid for one hour
    """
    result = await db.execute(select(User).where(User.email == data.email.lower()))
    if result.scalar_one_or_none():
        raise HTTPException(status_code=400, detail="User already exists")

    user = User.create_user(username=data.username, email=data.email, password=data.password)
    db.add(user)
    await db.flush()

    db.add(Profile(user_id=user.id, current_skills=[], target_skills=[], target_companies=[], bio=""))
    await db.commit()

    logger.info(f"Registered user {user.id}", extra={"user_id": user.id})
    return {
        "token": create_access_token(user.id),
        "message": "Account created successfully with empty profile",
    }


@router.post("/login")
@limiter.limit(LOGIN_LIMIT)
async def login(
    request: Request,
    data: LoginRequest,
    db: AsyncSession = Depends(get_db)
):
    result = await db.execute(select(User).where(User.email == data.email.lower()))
    user = result.scalar_one_or_none()

    if not user or not User.verify_password(data.password, user.password_hash):
        raise HTTPException(status_code=400, detail="Invalid credentials")

    if not user.is_active:
        raise HTTPException(status_code=403, detail="User account is disabled")

    user.last_login = datetime.utcnow()
    await db.commit()

    return {"token": create_access_token(user.id)}


@router.get("/me")
async def get_me(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Current user together with their profile"""
    profile = await _get_profile(db, current_user.id)
    return {
        "user": current_user.to_dict(),
        "profile": profile.to_dict() if profile else None,
    }


@router.put("/update-profile")
async def update_profile(
    data: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Apply only the fields present in the request body"""
    profile = await _get_or_create_profile(db, current_user.id)

    for field, value in data.model_dump(exclude_unset=True).items():
        if value is None and field != "bio":
            continue
        setattr(profile, field, value if value is not None else "")

    await db.commit()
    return profile.to_dict()


@router.put("/add-experience")
async def add_experience(
    data: ExperienceCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Add a position; the newest entry is listed first"""
    profile = await _get_or_create_profile(db, current_user.id)

    db.add(Experience(
        profile_id=profile.id,
        role=data.role,
        company=data.company,
        from_date=data.from_date,
        to_date=data.to_date,
        current=data.current,
        description=data.description,
    ))
    await db.commit()
    await db.refresh(profile, attribute_names=["experience"])
    return profile.to_dict()


@router.delete("/delete-experience/{experience_id}")
async def delete_experience(
    experience_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    profile = await _get_profile(db, current_user.id)
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")

    result = await db.execute(
        select(Experience).where(
            Experience.id == experience_id,
            Experience.profile_id == profile.id,
        )
    )
    experience = result.scalar_one_or_none()
    if not experience:
        raise HTTPException(status_code=404, detail="Experience not found")

    await db.delete(experience)
    await db.commit()
    await db.refresh(profile, attribute_names=["experience"])
    return profile.to_dict()
