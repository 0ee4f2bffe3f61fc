"""Prompt builders for the four suggestion kinds (pure functions of their inputs)."""

from typing import Iterable, List, Optional

NONE_SPECIFIED = "None specified"

SKILL_COUNT = 5
JOB_ROLE_COUNT = 5
COMPANIES_PER_ROLE = "2-3"

JSON_ONLY = "Respond only with the JSON array and no other text."

# Phrase unique to each prompt kind (used by the offline provider to pick a canned reply)
PROMPT_MARKERS = {
    "skills": "skills the user should learn next",
    "job_roles": "job roles that would be a good match",
    "companies": "I need company suggestions",
    "mentors": "mentorship coordinator",
}


def _join(values: Optional[Iterable[str]]) -> str:
    cleaned = [v for v in (values or []) if isinstance(v, str) and v.strip()]
    return ", ".join(cleaned) or NONE_SPECIFIED


def _bullets(lines: List[str]) -> str:
    return "\n".join(f"- {line}" for line in lines) or NONE_SPECIFIED


def _profile_type_label(profile_type: Optional[str]) -> str:
    return (profile_type or "other").replace("_", " ")


def format_experience(experience, include_description: bool = False) -> str:
    """One line per position: 'Role at Company (2019 - Present): description'"""
    lines = []
    for exp in experience or []:
        start = exp.from_date.year if exp.from_date else "?"
        if exp.current or exp.to_date is None:
            end = "Present"
        else:
            end = exp.to_date.year
        line = f"{exp.role} at {exp.company} ({start} - {end})"
        if include_description and exp.description:
            line += f": {exp.description}"
        lines.append(line)
    return "\n".join(lines) or NONE_SPECIFIED


def _profile_block(profile, include_description: bool = False) -> str:
    return f"""Current profile information:
- Profile type: {_profile_type_label(profile.profile_type)}
- Current skills: {_join(profile.current_skills)}
- Target skills: {_join(profile.target_skills)}
- Professional experience:
{format_experience(profile.experience, include_description)}"""


def build_skill_prompt(profile) -> str:
    """Ask for the next skills this user should learn."""
    return f"""You are a career and skill development AI assistant. Based on the following profile information,
suggest {SKILL_COUNT} skills the user should learn next to advance their career.

For each skill provide:
1. The name of the skill
2. A reason for recommending it (one of: market_trend, career_progression, profile_completion, job_requirement, ai_recommended)
3. Market demand score (0-100)
4. Difficulty level (beginner, intermediate, or advanced)
5. Estimated time to learn in hours
6. 2-3 related courses with title, platform, URL, and rating (0-5)

{_profile_block(profile)}

Format your response as a valid JSON array of skill objects with the following structure:
[
  {{
    "skill": "Skill name",
    "reason": "market_trend",
    "marketDemand": 85,
    "difficultyLevel": "intermediate",
    "estimatedTimeToLearn": 40,
    "relatedCourses": [
      {{
        "title": "Course title",
        "platform": "Platform name",
        "url": "https://example.com/course",
        "rating": 4.5
      }}
    ]
  }}
]

{JSON_ONLY}"""


def build_job_role_prompt(profile) -> str:
    """Ask for job roles matching the user's current profile."""
    return f"""You are a career advisor AI assistant. Based on the following profile information,
suggest {JOB_ROLE_COUNT} job roles that would be a good match for this user.

For each job role provide:
1. The exact title of the role
2. A match score (0-100) indicating how well the user's current skills match this role
3. The skills the role needs, each with status "have", "missing" or "partial" for this user
4. Average salary information (amount and currency)
5. Growth potential score (0-100)
6. 3-5 popular companies that hire for this role

{_profile_block(profile, include_description=True)}

Format your response as a valid JSON array of job role objects with the following structure:
[
  {{
    "title": "Job Title",
    "matchScore": 75,
    "skillsMatch": [
      {{"skill": "Skill Name", "status": "have"}},
      {{"skill": "Another Skill", "status": "missing"}},
      {{"skill": "Partial Skill", "status": "partial"}}
    ],
    "avgSalary": {{"amount": 85000, "currency": "USD"}},
    "growthPotential": 80,
    "popularCompanies": [{{"name": "Company Name"}}]
  }}
]

{JSON_ONLY}"""


def build_company_prompt(profile, job_roles: List[dict]) -> str:
    """Ask for companies that hire for the freshly suggested job roles."""
    role_lines = [
        f"{role.get('title')} (match score: {role.get('matchScore', 0)}/100)"
        for role in job_roles or []
        if role.get("title")
    ]
    skills = []
    for role in job_roles or []:
        for match in role.get("skillsMatch") or []:
            skill = match.get("skill")
            if skill and skill not in skills:
                skills.append(skill)

    return f"""I need company suggestions for someone interested in the following job roles:
{_bullets(role_lines)}

Required skills for these roles include:
{_bullets(skills)}

Companies the user is already interested in: {_join(profile.target_companies)}

For each job role, suggest {COMPANIES_PER_ROLE} companies that would be a good match.
For each company suggestion, provide:
1. Company name
2. A reason why this company is a good match for the role
3. A match score (0-100) based on how well the company matches the role
4. Work culture description (brief)
5. Company size (one of: startup, small, medium, large, enterprise)
6. Key office locations (2-3 major locations)

Format your response as a valid JSON array with the following structure:
[
  {{
    "name": "Company Name",
    "reason": "Reason this company is a good match for the role",
    "matchScore": 85,
    "workCulture": "Brief description of work culture",
    "companySize": "large",
    "locations": ["Location 1", "Location 2"]
  }}
]

Focus on real, well-known companies that match these job roles. {JSON_ONLY}"""


def build_mentor_prompt(profile, skill_suggestions: List[dict]) -> str:
    """Ask which suggested skills benefit most from a mentor, and at what level."""
    skill_lines = [
        f"{s.get('skill')} (difficulty: {s.get('difficultyLevel', 'intermediate')}, "
        f"~{s.get('estimatedTimeToLearn', 0)} hours)"
        for s in skill_suggestions or []
        if s.get("skill")
    ]

    return f"""You are a mentorship coordinator for a peer skill-exchange community.
The user below plans to learn these skills next:
{_bullets(skill_lines)}

{_profile_block(profile)}

Pick the skills from that list where learning from an experienced peer mentor would help this user most,
ordered from most to least useful, and give the level of guidance they need for each.
Only use skill names exactly as listed above.

Format your response as a valid JSON array with the following structure:
[
  {{
    "skill": "Skill name from the list",
    "difficultyLevel": "beginner",
    "reason": "Why a mentor helps with this skill"
  }}
]

{JSON_ONLY}"""
