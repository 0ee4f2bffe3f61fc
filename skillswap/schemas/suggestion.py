"""
Pydantic schemas for suggestion feedback and for provider replies

Provider replies are untrusted. The reply models are lenient: a missing or
unusable optional field takes its default, numbers are clamped into the
field's ge/le range, enum spellings are normalized, and list fields keep only
their usable items. A record is rejected only when its name is unusable.
"""
import math
from typing import Any, ClassVar, Dict, List, Literal, Optional, Tuple, Type, TypeVar, get_args, get_origin

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic.fields import FieldInfo


# ========== Request Schemas ==========
class FeedbackRequest(BaseModel):
    """User feedback on the active suggestion set"""
    rating: int = Field(..., ge=1, le=5)
    comments: Optional[str] = Field(None, max_length=2000)
    helpful: Optional[bool] = None


# ========== Enumerations ==========
SkillReason = Literal["market_trend", "career_progression", "profile_completion", "job_requirement", "ai_recommended"]
DifficultyLevel = Literal["beginner", "intermediate", "advanced"]
SkillStatus = Literal["have", "missing", "partial"]
CompanySize = Literal["startup", "small", "medium", "large", "enterprise"]

SKILL_REASONS = get_args(SkillReason)
DIFFICULTY_LEVELS = get_args(DifficultyLevel)
SKILL_STATUSES = get_args(SkillStatus)
COMPANY_SIZES = get_args(CompanySize)

MAX_LEARNING_HOURS = 5000
MAX_SALARY = 10_000_000


# ========== Coercion helpers ==========
def normalize_choice(value: Any) -> Any:
    """'Market Trend' / 'market-trend' -> 'market_trend'; non-strings pass through"""
    if isinstance(value, str):
        return "_".join(value.strip().lower().replace("-", " ").split())
    return value


def _to_text(value: Any) -> str:
    if isinstance(value, bool):
        raise ValueError("expected text")
    if isinstance(value, (int, float)):
        value = str(value)
    if not isinstance(value, str) or not value.strip():
        raise ValueError("expected non-empty text")
    return value.strip()


def _to_number(value: Any):
    """JSON number or numeric string ('85', '85%'); ints stay exact."""
    if isinstance(value, bool):
        raise ValueError("expected a number")
    if isinstance(value, str):
        try:
            value = float(value.strip().rstrip("%"))
        except ValueError:
            raise ValueError("expected a number")
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            raise ValueError("expected a finite number")
    elif not isinstance(value, int):
        raise ValueError("expected a number")
    return value


def _clamp(number, field: FieldInfo, annotation: type):
    for constraint in field.metadata:
        low = getattr(constraint, "ge", None)
        high = getattr(constraint, "le", None)
        if low is not None:
            number = max(low, number)
        if high is not None:
            number = min(high, number)
    return int(round(number)) if annotation is int else float(number)


RecordT = TypeVar("RecordT", bound=BaseModel)


def validate_records(items: List[Any], model: Type[RecordT]) -> List[RecordT]:
    """Validate each item against model, dropping only the items that fail."""
    records = []
    for item in items:
        try:
            records.append(model.model_validate(item))
        except ValidationError:
            continue
    return records


# ========== Provider Reply Schemas ==========
class ProviderRecord(BaseModel):
    """
    Base for records parsed out of provider text.

    Field annotations drive coercion: int/float are parsed and clamped to the
    field's ge/le, str is trimmed, Literal values are normalized, and lists
    keep their usable items. ALIASES maps a field to alternate keys; the
    first non-null value wins.
    """
    model_config = ConfigDict(extra="ignore")

    ALIASES: ClassVar[Dict[str, Tuple[str, ...]]] = {}

    @model_validator(mode="before")
    @classmethod
    def resolve_aliases(cls, data: Any) -> Any:
        if not isinstance(data, dict) or not cls.ALIASES:
            return data
        data = dict(data)
        for name, aliases in cls.ALIASES.items():
            if data.get(name) is not None:
                continue
            for alias in aliases:
                if data.get(alias) is not None:
                    data[name] = data[alias]
                    break
        return data

    @field_validator("*", mode="before")
    @classmethod
    def coerce_provider_value(cls, value: Any, info: ValidationInfo) -> Any:
        field = cls.model_fields[info.field_name]
        annotation = field.annotation
        origin = get_origin(annotation)

        if annotation in (int, float):
            return _clamp(_to_number(value), field, annotation)
        if annotation is str:
            return _to_text(value)
        if origin is Literal:
            return normalize_choice(value)
        if origin is list:
            (item_type,) = get_args(annotation)
            if isinstance(value, str):
                value = [value]
            if not isinstance(value, list):
                raise ValueError("expected a list")
            if item_type is str:
                return [v.strip() for v in value if isinstance(v, str) and v.strip()]
            return validate_records(value, item_type)
        return value

    # Defined last so it wraps the coercion above
    @field_validator("*", mode="wrap")
    @classmethod
    def default_on_invalid(cls, value: Any, handler, info: ValidationInfo) -> Any:
        try:
            return handler(value)
        except (ValidationError, ValueError):
            field = cls.model_fields[info.field_name]
            if field.is_required():
                raise
            return field.get_default(call_default_factory=True)


class RelatedCourse(ProviderRecord):
    title: str
    platform: str = ""
    url: str = ""
    rating: float = Field(0.0, ge=0, le=5)


class SkillSuggestion(ProviderRecord):
    ALIASES = {"skill": ("name", "skillName")}

    skill: str
    reason: SkillReason = "ai_recommended"
    marketDemand: int = Field(0, ge=0, le=100)
    difficultyLevel: DifficultyLevel = "intermediate"
    estimatedTimeToLearn: int = Field(0, ge=0, le=MAX_LEARNING_HOURS)
    relatedCourses: List[RelatedCourse] = Field(default_factory=list)


class SkillMatch(ProviderRecord):
    skill: str
    status: SkillStatus = "have"


class AvgSalary(ProviderRecord):
    amount: int = Field(0, ge=0, le=MAX_SALARY)
    currency: str = "USD"


class CompanyName(ProviderRecord):
    name: str


class JobRoleSuggestion(ProviderRecord):
    ALIASES = {"title": ("role", "jobTitle")}

    title: str
    matchScore: int = Field(0, ge=0, le=100)
    skillsMatch: List[SkillMatch] = Field(default_factory=list)
    avgSalary: AvgSalary = Field(default_factory=AvgSalary)
    growthPotential: int = Field(0, ge=0, le=100)
    popularCompanies: List[CompanyName] = Field(default_factory=list)


class CompanySuggestion(ProviderRecord):
    ALIASES = {"name": ("company",)}

    name: str
    reason: str = ""
    matchScore: int = Field(0, ge=0, le=100)
    workCulture: str = ""
    companySize: CompanySize = "medium"
    locations: List[str] = Field(default_factory=list)


class MentorTopic(ProviderRecord):
    skill: str
    difficultyLevel: DifficultyLevel = "intermediate"
    reason: str = ""
