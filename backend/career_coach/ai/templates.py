"""
Template responses used when the AI provider cannot answer.

Each category returns content with the same shape as the AI response it
replaces, so callers store and render it without special handling.
"""
import copy
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union

from jinja2 import Environment, StrictUndefined

UNAVAILABLE_BANNER = "[AI Service Temporarily Unavailable - Using Template]"

FallbackResult = Union[str, List[Dict[str, Any]], None]


class FallbackCategory(str, Enum):
    COVER_LETTER = "coverLetter"
    RESUME_IMPROVEMENT = "resumeImprovement"
    INTERVIEW_QUESTIONS = "interviewQuestions"


_env = Environment(undefined=StrictUndefined, autoescape=False, keep_trailing_newline=False)

COVER_LETTER_TPL = _env.from_string("""{{ banner }}

Dear Hiring Manager,

I am writing to express my strong interest in the {{ job_title }} position at {{ company_name }}.

With my background in {{ industry }} and {{ experience }} years of experience, I am confident that my skills and expertise align well with your requirements. Throughout my career, I have developed strong capabilities in {{ skills or "various technical domains" }}.

I am particularly drawn to this opportunity because of {{ company_name }}'s reputation for innovation and excellence. I am excited about the prospect of contributing to your team and helping drive success.

Thank you for considering my application. I look forward to the opportunity to discuss how my background, skills, and enthusiasm can benefit your organization.

Best regards,
{{ candidate_name or "Candidate" }}""")

RESUME_IMPROVEMENT_TPL = _env.from_string(
    "Leveraged advanced technical skills in {{ skills or \"technology\" }} to drive business outcomes, "
    "resulting in measurable improvements in project delivery and team performance across "
    "{{ experience }} years of experience."
)

# Entries with "{skill}" / "{industry}" are filled from the request context.
INTERVIEW_QUESTIONS: List[Dict[str, Any]] = [
    {
        "question": "Describe your experience with {skill}.",
        "options": [
            "5+ years of professional experience",
            "2-5 years of professional experience",
            "Less than 2 years of experience",
            "No professional experience",
        ],
        "correctAnswer": "5+ years of professional experience",
        "explanation": "This question assesses your depth of experience.",
    },
    {
        "question": "What is your approach to problem-solving in {industry} projects?",
        "options": [
            "Systematic analysis followed by implementation",
            "Quick trial and error approach",
            "Asking for help immediately",
            "Avoiding complex problems",
        ],
        "correctAnswer": "Systematic analysis followed by implementation",
        "explanation": "Professional problem-solving requires a structured approach.",
    },
    {
        "question": "How do you stay updated with industry trends?",
        "options": [
            "Regular reading of industry publications and online courses",
            "Only when required by work",
            "Not really concerned about trends",
            "Rely on colleagues for information",
        ],
        "correctAnswer": "Regular reading of industry publications and online courses",
        "explanation": "Continuous learning is essential in tech fields.",
    },
    {
        "question": "Describe a challenging project you completed.",
        "options": [
            "Detailed explanation with specific metrics and learnings",
            "Vague description with few details",
            "Never worked on challenging projects",
            "Let others describe my projects",
        ],
        "correctAnswer": "Detailed explanation with specific metrics and learnings",
        "explanation": "Good candidates can articulate their achievements clearly.",
    },
    {
        "question": "How do you handle working with diverse teams?",
        "options": [
            "Actively seek different perspectives and collaborate effectively",
            "Prefer working alone",
            "Follow others' decisions",
            "Focus only on individual tasks",
        ],
        "correctAnswer": "Actively seek different perspectives and collaborate effectively",
        "explanation": "Teamwork and collaboration are critical skills.",
    },
    {
        "question": "What interests you about {industry}?",
        "options": [
            "Passion for innovation and solving real-world problems",
            "Just need a job",
            "High salary expectations",
            "Heard it was easy",
        ],
        "correctAnswer": "Passion for innovation and solving real-world problems",
        "explanation": "Genuine interest shows in an interview.",
    },
    {
        "question": "Where do you see yourself in 5 years?",
        "options": [
            "Growing as a specialist or team leader in my field",
            "Not sure",
            "Somewhere else",
            "Retired",
        ],
        "correctAnswer": "Growing as a specialist or team leader in my field",
        "explanation": "Career vision shows ambition and direction.",
    },
    {
        "question": "How do you handle failure?",
        "options": [
            "Analyze, learn, and implement improvements",
            "Blame external factors",
            "Give up",
            "Pretend it didn't happen",
        ],
        "correctAnswer": "Analyze, learn, and implement improvements",
        "explanation": "Resilience and learning from failure are important traits.",
    },
    {
        "question": "What is your greatest strength?",
        "options": [
            "Problem-solving with specific examples",
            "Everything",
            "Nothing in particular",
            "My good looks",
        ],
        "correctAnswer": "Problem-solving with specific examples",
        "explanation": "Self-awareness and concrete examples are valued.",
    },
    {
        "question": "Why should we hire you?",
        "options": [
            "Specific skills match, proven track record, and cultural fit",
            "I need the job",
            "No particular reason",
            "I'm just checking applications",
        ],
        "correctAnswer": "Specific skills match, proven track record, and cultural fit",
        "explanation": "This shows you've researched and understand value alignment.",
    },
]


def _skill_list(value: Any) -> List[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [s.strip() for s in value.split(",") if s.strip()]
    if isinstance(value, (list, tuple)):
        return [str(s) for s in value if s]
    return [str(value)]


def _text(value: Any, default: str) -> str:
    if value is None or value == "" or value == []:
        return default
    return str(value)


def _cover_letter(ctx: Mapping[str, Any]) -> str:
    return COVER_LETTER_TPL.render(
        banner=UNAVAILABLE_BANNER,
        job_title=_text(ctx.get("jobTitle"), "advertised"),
        company_name=_text(ctx.get("companyName"), "your company"),
        industry=_text(ctx.get("industry"), "technology"),
        experience=_text(ctx.get("experience"), "several"),
        skills=" and ".join(_skill_list(ctx.get("skills"))[:2]),
        candidate_name=_text(ctx.get("candidateName"), ""),
    )


def _resume_improvement(ctx: Mapping[str, Any]) -> str:
    return RESUME_IMPROVEMENT_TPL.render(
        skills=" and ".join(_skill_list(ctx.get("skills"))[:2]),
        experience=_text(ctx.get("experience"), "several"),
    )


def _interview_questions(ctx: Mapping[str, Any]) -> List[Dict[str, Any]]:
    skills = _skill_list(ctx.get("skills"))
    skill = skills[0] if skills else "the required technologies"
    industry = _text(ctx.get("industry"), "your industry")
    questions = copy.deepcopy(INTERVIEW_QUESTIONS)
    for q in questions:
        q["question"] = q["question"].format(skill=skill, industry=industry)
    return questions


_GENERATORS = {
    FallbackCategory.COVER_LETTER: _cover_letter,
    FallbackCategory.RESUME_IMPROVEMENT: _resume_improvement,
    FallbackCategory.INTERVIEW_QUESTIONS: _interview_questions,
}


def generate_template_response(category: Union[FallbackCategory, str], context: Optional[Mapping[str, Any]] = None) -> FallbackResult:
    """
    Build template content for ``category`` from ``context``.

    Returns None for an unknown category.
    """
    try:
        category = FallbackCategory(category)
    except ValueError:
        return None
    return _GENERATORS[category](context or {})
