# Database models package
from skillswap.models.user import User
from skillswap.models.profile import Profile, Experience
from skillswap.models.suggestion import Suggestion

__all__ = [
    "User",
    "Profile",
    "Experience",
    "Suggestion",
]
