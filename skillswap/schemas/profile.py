"""
Pydantic request schemas for authentication and profile editing
"""
from datetime import date
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from skillswap.models.profile import PROFILE_TYPES


def _clean_list(values: Optional[List[str]]) -> Optional[List[str]]:
    """Strip entries, drop blanks and case-insensitive duplicates, keep order."""
    if values is None:
        return None
    cleaned, seen = [], set()
    for value in values:
        item = value.strip()
        if item and item.lower() not in seen:
            seen.add(item.lower())
            cleaned.append(item)
    return cleaned


class SignupRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class ProfileUpdate(BaseModel):
    """Partial update: only fields present in the request body are applied"""
    model_config = ConfigDict(populate_by_name=True)

    current_skills: Optional[List[str]] = Field(None, alias="currentSkills", max_length=100)
    target_skills: Optional[List[str]] = Field(None, alias="targetSkills", max_length=100)
    target_companies: Optional[List[str]] = Field(None, alias="targetCompanies", max_length=100)
    bio: Optional[str] = Field(None, max_length=2000)
    profile_type: Optional[str] = Field(None, alias="profileType")

    @field_validator("current_skills", "target_skills", "target_companies")
    @classmethod
    def clean_lists(cls, v):
        return _clean_list(v)

    @field_validator("profile_type")
    @classmethod
    def valid_profile_type(cls, v):
        if v is None:
            return v
        normalized = "_".join(v.strip().lower().split())
        if normalized not in PROFILE_TYPES:
            raise ValueError(f"profileType must be one of: {', '.join(PROFILE_TYPES)}")
        return normalized


class ExperienceCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    role: str = Field(..., min_length=1, max_length=200)
    company: str = Field(..., min_length=1, max_length=200)
    from_date: date = Field(..., alias="from")
    to_date: Optional[date] = Field(None, alias="to")
    current: bool = False
    description: Optional[str] = Field(None, max_length=2000)

    @model_validator(mode="after")
    def check_dates(self):
        if self.current:
            self.to_date = None
        elif self.to_date is not None and self.to_date < self.from_date:
            raise ValueError("'to' date cannot be before 'from' date")
        return self
