"""
Suggestion Model - one generated suggestion set per user per generation cycle

Records are never hard-deleted: a new generation deactivates the previous
active record, expiry deactivates it on read. The partial unique index on
(user_id) WHERE is_active enforces at most one active record per user at the
database level; the store takes a row lock on the owning user before swapping.
"""

from sqlalchemy import Column, Integer, String, DateTime, Text, Boolean, ForeignKey, JSON, Index, text
from sqlalchemy.orm import relationship
from datetime import datetime, timedelta
from skillswap.database import Base


DEFAULT_TTL_DAYS = 30


class Suggestion(Base):
    __tablename__ = "suggestions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Validated payloads (camelCase keys, see services/suggestions/parsing.py)
    suggested_skills = Column(JSON, nullable=False, default=list)
    suggested_job_roles = Column(JSON, nullable=False, default=list)
    suggested_companies = Column(JSON, nullable=False, default=list)
    mentor_suggestions = Column(JSON, nullable=False, default=list)

    source = Column(String(50), default="openai")
    failed_generators = Column(JSON, nullable=False, default=list)

    generated_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    expires_at = Column(
        DateTime,
        default=lambda: datetime.utcnow() + timedelta(days=DEFAULT_TTL_DAYS),
        nullable=False,
    )
    is_active = Column(Boolean, default=True, nullable=False)

    # User feedback on this suggestion set
    feedback_rating = Column(Integer, nullable=True)  # 1-5
    feedback_comments = Column(Text, nullable=True)
    feedback_helpful = Column(Boolean, nullable=True)
    feedback_submitted_at = Column(DateTime, nullable=True)

    user = relationship("User", back_populates="suggestions")

    __table_args__ = (
        Index(
            "uq_suggestions_one_active",
            "user_id",
            unique=True,
            sqlite_where=text("is_active = 1"),
            postgresql_where=text("is_active"),
        ),
        Index("ix_suggestions_user_generated", "user_id", "generated_at"),
    )

    def is_expired(self, now: datetime = None) -> bool:
        return self.expires_at <= (now or datetime.utcnow())

    def feedback_dict(self):
        if self.feedback_submitted_at is None:
            return None
        return {
            "rating": self.feedback_rating,
            "comments": self.feedback_comments,
            "helpful": self.feedback_helpful,
            "submittedAt": self.feedback_submitted_at.isoformat(),
        }

    def to_dict(self):
        return {
            "id": self.id,
            "userId": self.user_id,
            "suggestedSkills": self.suggested_skills or [],
            "suggestedJobRoles": self.suggested_job_roles or [],
            "suggestedCompanies": self.suggested_companies or [],
            "mentorSuggestions": self.mentor_suggestions or [],
            "source": self.source,
            "failedGenerators": self.failed_generators or [],
            "generatedAt": self.generated_at.isoformat() if self.generated_at else None,
            "expiresAt": self.expires_at.isoformat() if self.expires_at else None,
            "isActive": self.is_active,
            "userFeedback": self.feedback_dict(),
        }
