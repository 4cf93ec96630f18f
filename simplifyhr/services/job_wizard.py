"""
Job Wizard Service

Server side of the five-tab job creation wizard:
basic -> description -> interviews -> budget -> publish

Everything here is pure (no DB, no AI) so the job routes and the
JD generation stream can share it.
"""

from typing import Dict, Iterable, List, Optional, Tuple

from simplifyhr.schemas.schemas import InterviewRoundInput, JobDraft, RoundType


# Weight of each tab in the overall completion percentage
TAB_WEIGHTS = {
    "basic": 0.25,
    "description": 0.25,
    "interviews": 0.25,
    "budget": 0.15,
    "publish": 0.10,
}

ROUND_TYPES_NEEDING_INTERVIEWER = {RoundType.human, RoundType.ai_human}

BASE_ROUND_CRITERIA = {
    RoundType.ai: [
        "Algorithm problem-solving capability",
        "Code quality and best practices",
        "Technical knowledge depth",
        "Logical reasoning and approach",
    ],
    RoundType.human: [
        "Communication and presentation skills",
        "Cultural fit and team collaboration",
        "Leadership potential and mentoring ability",
        "Domain expertise and experience",
    ],
    RoundType.ai_human: [
        "Technical skills demonstration",
        "Communication effectiveness",
        "Problem-solving approach",
        "Team collaboration potential",
    ],
}

EXPERIENCE_TEXT = {
    "entry": "0-2",
    "mid": "3-5",
    "senior": "5+",
    "lead": "7+",
    "executive": "10+",
}

# (title keyword(s), skills) checked in order
SKILLS_BY_KEYWORD = [
    (("software", "developer", "engineer"), ["JavaScript", "React", "Node.js", "Git", "API Development"]),
    (("data",), ["Python", "SQL", "Data Analysis", "Machine Learning", "Statistics"]),
    (("design",), ["Figma", "Adobe Creative Suite", "UI/UX Design", "Prototyping", "User Research"]),
    (("product",), ["Product Strategy", "Market Research", "Analytics", "User Stories", "Roadmapping"]),
    (("marketing",), ["Digital Marketing", "SEO", "Content Strategy", "Analytics", "Social Media"]),
]
GENERIC_SKILLS = ["Communication", "Problem Solving", "Teamwork", "Time Management"]

BASE_REQUIREMENTS = [
    "Bachelor's degree or equivalent experience",
    "Strong communication skills",
    "Ability to work collaboratively in a team environment",
]
REQUIREMENTS_BY_LEVEL = {
    "entry": ["0-2 years of professional experience", "Eagerness to learn and grow"],
    "mid": ["3-5 years of professional experience", "Proven track record of successful projects"],
    "senior": ["5+ years of professional experience", "Leadership and mentoring experience"],
    "lead": [
        "7+ years of professional experience",
        "Team leadership experience",
        "Strategic thinking abilities",
    ],
    "executive": [
        "10+ years of professional experience",
        "Executive leadership experience",
        "Strategic vision and planning",
    ],
}

DEFAULT_SCORING_CRITERIA = [
    "Technical competency and skills demonstration",
    "Problem-solving approach and methodology",
    "Communication and collaboration skills",
    "Cultural fit and team dynamics",
    "Leadership potential and growth mindset",
]


class JobValidationError(Exception):
    """Wizard data is incomplete. ``errors`` maps field -> message."""

    def __init__(self, errors: Dict[str, str]):
        super().__init__("; ".join(errors.values()))
        self.errors = errors


def _value(enum_or_str) -> Optional[str]:
    if enum_or_str is None:
        return None
    return getattr(enum_or_str, "value", enum_or_str)


# ============================================================
# VALIDATION
# ============================================================

def validate_basic(draft: JobDraft) -> Dict[str, str]:
    errors = {}
    if not draft.title.strip():
        errors["title"] = "Job title is required"
    if not draft.company_name.strip():
        errors["company_name"] = "Company name is required"
    if draft.total_positions < 1:
        errors["total_positions"] = "Must have at least 1 position"
    return errors


def validate_description(draft: JobDraft) -> Dict[str, str]:
    if not draft.description.strip():
        return {"description": "Job description is required"}
    return {}


def validate_interviews(draft: JobDraft) -> Dict[str, str]:
    errors = {}
    for index, round_ in enumerate(draft.interview_rounds):
        if round_.type in ROUND_TYPES_NEEDING_INTERVIEWER and not round_.interviewer_profile_id:
            errors[f"round_{index}"] = f"Please select an interviewer for Round {round_.round}"
    return errors


def validate_budget(draft: JobDraft) -> Dict[str, str]:
    if draft.salary_min and draft.salary_max and draft.salary_min >= draft.salary_max:
        return {"salary": "Maximum salary must be greater than minimum salary"}
    return {}


def validate_job_draft(draft: JobDraft) -> Dict[str, str]:
    """Run every tab's checks. Empty dict means the draft can be saved."""
    errors = {}
    errors.update(validate_basic(draft))
    errors.update(validate_description(draft))
    errors.update(validate_interviews(draft))
    errors.update(validate_budget(draft))
    return errors


def ensure_valid(draft: JobDraft) -> None:
    errors = validate_job_draft(draft)
    if errors:
        raise JobValidationError(errors)


# ============================================================
# PROGRESS
# ============================================================

def compute_progress(draft: JobDraft) -> Tuple[int, Dict[str, int]]:
    """
    Per-tab completion (0-100) and the weighted overall percentage.

    Returns:
        (overall, {"basic": .., "description": .., "interviews": .., "budget": .., "publish": ..})
    """
    basic = 0
    if draft.title.strip():
        basic += 40
    if draft.company_name.strip():
        basic += 30
    if draft.location.strip():
        basic += 15
    if draft.employment_type:
        basic += 10
    if draft.experience_level:
        basic += 5

    description = 0
    if draft.description.strip():
        description += 70
    if draft.skills_required:
        description += 20
    if draft.requirements:
        description += 10

    interviews = 0
    rounds = draft.interview_rounds
    if rounds:
        interviews += 50
    valid_rounds = [
        r for r in rounds
        if r.type == RoundType.ai or r.interviewer_profile_id
    ]
    if len(valid_rounds) == len(rounds):
        interviews += 30
    if draft.scoring_criteria:
        interviews += 20

    budget = 0
    if draft.salary_min and draft.salary_max and draft.salary_min < draft.salary_max:
        budget += 80
    if draft.currency:
        budget += 20

    publish = 0
    if (draft.publish_to_simplifyhr or draft.publish_to_website
            or draft.publish_to_linkedin or draft.publish_to_vendors):
        publish = 100

    details = {
        "basic": min(basic, 100),
        "description": min(description, 100),
        "interviews": min(interviews, 100),
        "budget": min(budget, 100),
        "publish": publish,
    }
    overall = sum(details[tab] * weight for tab, weight in TAB_WEIGHTS.items())
    return round(overall), details


# ============================================================
# SUGGESTIONS / DEFAULTS
# ============================================================

def generate_round_criteria(round_type, round_number: int, global_criteria: Iterable[str] = ()) -> str:
    """
    Scoring criteria text for one interview round.

    Base list for the round type, then a round-position item, then up to two
    global criteria; the first three are joined with ", ".
    """
    try:
        round_type = RoundType(_value(round_type))
    except ValueError:
        round_type = RoundType.human
    criteria = list(BASE_ROUND_CRITERIA[round_type])

    if round_number == 1:
        criteria.append("Initial screening and basic qualifications")
    elif round_number == 2:
        criteria.append("Advanced technical assessment")
    else:
        criteria.append("Final evaluation and cultural alignment")

    criteria.extend(list(global_criteria)[:2])
    return ", ".join(criteria[:3])


def default_skills(job_title: str) -> List[str]:
    title = job_title.lower()
    for keywords, skills in SKILLS_BY_KEYWORD:
        if any(k in title for k in keywords):
            return list(skills)
    return list(GENERIC_SKILLS)


def default_requirements(experience_level: Optional[str]) -> List[str]:
    level = _value(experience_level)
    extra = REQUIREMENTS_BY_LEVEL.get(level, ["2+ years of professional experience"])
    return BASE_REQUIREMENTS + extra


def default_scoring_criteria() -> List[str]:
    return list(DEFAULT_SCORING_CRITERIA)


def experience_text(experience_level: Optional[str]) -> str:
    return EXPERIENCE_TEXT.get(_value(experience_level), "2+")


def merge_unique(existing: Iterable[str], additions: Iterable[str]) -> List[str]:
    """Append ``additions`` to ``existing``, skipping duplicates, keeping order."""
    merged = []
    for item in list(existing) + list(additions):
        if item not in merged:
            merged.append(item)
    return merged


def _format_amount(amount: float) -> str:
    return f"{amount:,.0f}"


def template_description(
    job_title: str,
    company_name: Optional[str] = None,
    industry: Optional[str] = None,
    experience_level: Optional[str] = None,
    employment_type: Optional[str] = None,
    location: Optional[str] = None,
    salary_min: Optional[float] = None,
    salary_max: Optional[float] = None,
    currency: str = "IDR"
) -> str:
    """Markdown job description used when AI generation is unavailable."""
    company = company_name or "Our company"
    industry = industry or "technology"
    level = _value(experience_level) or "skilled"
    employment = _value(employment_type) or "full-time"
    where = f"based in {location}" if location else "with flexible location options"

    if salary_min and salary_max:
        salary_range = f"{_format_amount(salary_min)} - {_format_amount(salary_max)} {currency}"
    else:
        salary_range = "Competitive salary package"

    return f"""## About {company}

{company} is a leading {industry} company committed to innovation and excellence. We're looking for talented individuals to join our dynamic team and contribute to our continued growth and success.

## Position Overview

We are seeking a {level} {job_title} to join our team. This is a {employment} position {where}. The successful candidate will play a key role in driving our technology initiatives and contributing to our company's mission.

## Key Responsibilities

• Lead and execute {job_title.lower()} initiatives and projects
• Collaborate with cross-functional teams to deliver high-quality solutions
• Participate in the full software development lifecycle
• Mentor junior team members and provide technical guidance
• Stay current with industry trends and best practices
• Work closely with product managers and stakeholders to understand requirements

## Required Qualifications

• Bachelor's degree in Computer Science, Engineering, or related field
• {experience_text(experience_level)} years of professional experience
• Strong problem-solving and analytical skills
• Excellent communication and teamwork abilities
• Ability to work in a fast-paced, agile environment

## Preferred Qualifications

• Master's degree in relevant field
• Experience with cloud platforms and modern architecture
• Experience in {industry} industry

## What We Offer

• Competitive salary: {salary_range}
• Comprehensive health and dental benefits
• Flexible working arrangements and remote work options
• Professional development opportunities and training budget
• Generous vacation policy and paid time off

## Application Process

If you're passionate about technology and want to make a meaningful impact, we'd love to hear from you. Please submit your resume along with a cover letter explaining why you're the perfect fit for this role.

{company} is an equal opportunity employer committed to diversity and inclusion."""


# ============================================================
# ROUND ROWS
# ============================================================

def build_round_rows(job_id: int, rounds: List[InterviewRoundInput]) -> Tuple[List[dict], List[int]]:
    """
    Rows for the interview_rounds table.

    (job_id, round_type) is unique, so only the first round of each type is
    kept; the round numbers of the others are returned as skipped.
    """
    rows = []
    skipped = []
    seen_types = set()

    for round_ in rounds:
        round_type = _value(round_.type)
        if round_type in seen_types:
            skipped.append(round_.round)
            continue
        seen_types.add(round_type)

        criteria = [c.strip() for c in round_.criteria.split(",") if c.strip()]
        rows.append({
            "job_id": job_id,
            "round_type": round_type,
            "round_number": round_.round,
            "scoring_criteria": {"round_specific": criteria},
            "duration_minutes": round_.duration,
            "interviewers_required": 1 if round_.interviewer_profile_id else 0,
            "interviewer_profiles": (
                [{"profile_id": round_.interviewer_profile_id}] if round_.interviewer_profile_id else []
            ),
            "is_ai_assisted": round_type in (RoundType.ai.value, RoundType.ai_human.value),
            "is_mandatory": True,
        })

    return rows, skipped


# Default three-round pipeline: (round_type, duration_minutes)
DEFAULT_ROUNDS = [
    (RoundType.ai, 30),
    (RoundType.human, 60),
    (RoundType.ai_human, 45),
]


def default_round_rows(job_id: int) -> List[dict]:
    """Rows for the standard AI -> human -> AI+human pipeline."""
    rounds = [
        InterviewRoundInput(
            round=number,
            type=round_type,
            duration=duration,
            criteria=generate_round_criteria(round_type, number)
        )
        for number, (round_type, duration) in enumerate(DEFAULT_ROUNDS, start=1)
    ]
    rows, _ = build_round_rows(job_id, rounds)
    return rows
