"""
Response parsers for the four suggestion kinds.

Provider text -> trimmed -> code fence removed -> JSON list -> each element
validated by its reply schema (skillswap/schemas/suggestion.py). Parse
failures are logged and produce an empty list; nothing raises past parse_*().
"""
import json
import re
from typing import Any, List, Type

from pydantic import BaseModel

from skillswap.schemas.suggestion import (
    CompanySuggestion,
    JobRoleSuggestion,
    MentorTopic,
    SkillSuggestion,
    validate_records,
)
from skillswap.utils.logger import get_logger

logger = get_logger("parsing")


# ========== Text handling ==========

_FENCE_RE = re.compile(r"^```[\w+-]*[ \t]*\n?(.*?)\n?[ \t]*```$", re.DOTALL)


def strip_code_fence(text: str) -> str:
    """Remove a surrounding ``` / ```json fence if the whole reply is wrapped in one."""
    cleaned = (text or "").strip()
    match = _FENCE_RE.match(cleaned)
    if match:
        return match.group(1).strip()
    return cleaned


def parse_json_list(text: str) -> List[Any]:
    """Parse provider text as a JSON array; anything else yields []."""
    cleaned = strip_code_fence(text)
    if not cleaned:
        logger.warning("Provider returned an empty response")
        return []
    try:
        data = json.loads(cleaned)
    except (ValueError, RecursionError) as e:
        logger.warning(f"Failed to parse provider response as JSON: {type(e).__name__}: {str(e)[:200]}")
        return []
    if not isinstance(data, list):
        logger.warning(f"Provider response is a {type(data).__name__}, expected a JSON array")
        return []
    return data


def _parse(text: str, model: Type[BaseModel], kind: str) -> List[dict]:
    items = parse_json_list(text)
    records = validate_records(items, model)
    if len(records) < len(items):
        logger.info(f"Dropped {len(items) - len(records)} unusable {kind} entries from provider response")
    return [record.model_dump() for record in records]


# ========== Per-kind parsers ==========

def parse_skill_suggestions(text: str) -> List[dict]:
    return _parse(text, SkillSuggestion, "skill")


def parse_job_role_suggestions(text: str) -> List[dict]:
    return _parse(text, JobRoleSuggestion, "job role")


def parse_company_suggestions(text: str) -> List[dict]:
    return _parse(text, CompanySuggestion, "company")


def parse_mentor_topics(text: str) -> List[dict]:
    return _parse(text, MentorTopic, "mentor topic")
