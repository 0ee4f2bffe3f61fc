"""
Profile Model - a user's declared skills, goals and work history

One profile per user (unique user_id), created empty at signup. Experience
entries live in their own table so each one can be addressed by id; the
relationship lists the most recently added entry first.
"""

from sqlalchemy import Column, Integer, String, DateTime, Date, Text, Boolean, ForeignKey, JSON
from sqlalchemy.orm import relationship
from datetime import datetime
from skillswap.database import Base


PROFILE_TYPES = ("student", "working_professional", "other")


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)

    current_skills = Column(JSON, nullable=False, default=list)  # list of skill names
    target_skills = Column(JSON, nullable=False, default=list)
    target_companies = Column(JSON, nullable=False, default=list)
    profile_type = Column(String(32), nullable=False, default="other")
    bio = Column(Text, default="")

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="profile")
    experience = relationship(
        "Experience",
        back_populates="profile",
        cascade="all, delete-orphan",
        order_by="Experience.id.desc()",
        lazy="selectin",
    )

    def has_skill(self, skill: str) -> bool:
        """Case-insensitive membership test against current skills."""
        wanted = (skill or "").strip().lower()
        return bool(wanted) and any(
            isinstance(s, str) and s.strip().lower() == wanted
            for s in (self.current_skills or [])
        )

    def to_dict(self):
        return {
            "id": self.id,
            "userId": self.user_id,
            "currentSkills": list(self.current_skills or []),
            "targetSkills": list(self.target_skills or []),
            "targetCompanies": list(self.target_companies or []),
            "profileType": self.profile_type,
            "bio": self.bio or "",
            "experience": [e.to_dict() for e in self.experience],
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }


class Experience(Base):
    __tablename__ = "experiences"

    id = Column(Integer, primary_key=True, index=True)
    profile_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)

    role = Column(String(200), nullable=False)
    company = Column(String(200), nullable=False)
    from_date = Column(Date, nullable=False)
    to_date = Column(Date, nullable=True)
    current = Column(Boolean, default=False)
    description = Column(Text, nullable=True)

    profile = relationship("Profile", back_populates="experience")

    def years(self, today=None) -> float:
        """Length of this position in years; open-ended entries run until today."""
        end = self.to_date
        if self.current or end is None:
            end = today or datetime.utcnow().date()
        return max((end - self.from_date).days, 0) / 365.25

    def to_dict(self):
        return {
            "id": self.id,
            "role": self.role,
            "company": self.company,
            "from": self.from_date.isoformat() if self.from_date else None,
            "to": self.to_date.isoformat() if self.to_date else None,
            "current": bool(self.current),
            "description": self.description,
        }
