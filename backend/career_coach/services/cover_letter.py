import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..ai.client import AIClient
from ..ai.templates import FallbackCategory
from ..config import Settings
from ..models import CoverLetter
from .ai_calls import generate_with_fallback, store_ai_interaction
from .errors import NotFoundError, diagnostics
from .user import get_user

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are an expert professional cover letter writer."

COVER_LETTER_PROMPT = """
Write a professional cover letter for a {job_title} position at {company_name}.

About the candidate:
- Industry: {industry}
- Years of Experience: {experience}
- Skills: {skills}
- Professional Background: {bio}

Job Description:
{job_description}

Requirements:
1. Use a professional, enthusiastic tone
2. Highlight relevant skills and experience
3. Show understanding of the company's needs
4. Keep it concise (max 400 words)
5. Use proper business letter formatting in markdown
6. Include specific examples of achievements
7. Relate candidate's background to job requirements

Format the letter in markdown.
"""


async def generate_cover_letter(
    db: Session,
    external_user_id: Optional[str],
    data: Dict[str, Any],
    *,
    settings: Settings,
    ai: AIClient,
) -> CoverLetter:
    user = get_user(db, external_user_id)
    prompt = COVER_LETTER_PROMPT.format(
        job_title=data["job_title"],
        company_name=data["company_name"],
        industry=user.industry or "",
        experience=user.experience if user.experience is not None else "",
        skills=", ".join(user.skills or []),
        bio=user.bio or "",
        job_description=data.get("job_description") or "",
    )
    logger.info(f"Starting cover letter generation for {data['company_name']}")

    with diagnostics("generate cover letter"):
        generation = await generate_with_fallback(
            lambda: ai.chat_completion(
                [{"role": "system", "content": SYSTEM_PROMPT}, {"role": "user", "content": prompt}],
                temperature=0.7,
                max_tokens=1000,
            ),
            settings=settings,
            category=FallbackCategory.COVER_LETTER,
            context={
                "jobTitle": data["job_title"],
                "companyName": data["company_name"],
                "industry": user.industry,
                "experience": user.experience,
                "skills": user.skills,
                "candidateName": user.name,
            },
        )
        store_ai_interaction(
            db, user_id=user.id, interaction_type="cover_letter",
            prompt=prompt, generation=generation, model=settings.openai_model,
        )
        letter = CoverLetter(
            user_id=user.id,
            content=generation.result,
            job_description=data.get("job_description"),
            company_name=data["company_name"],
            job_title=data["job_title"],
            status="completed",
        )
        db.add(letter)
        db.commit()
        return letter


def get_cover_letters(db: Session, external_user_id: Optional[str]) -> List[CoverLetter]:
    user = get_user(db, external_user_id)
    with diagnostics("fetch cover letters"):
        return (
            db.query(CoverLetter)
            .filter(CoverLetter.user_id == user.id)
            .order_by(CoverLetter.created_at.desc())
            .all()
        )


def get_cover_letter(db: Session, external_user_id: Optional[str], letter_id: str) -> Optional[CoverLetter]:
    user = get_user(db, external_user_id)
    with diagnostics("fetch cover letter"):
        return (
            db.query(CoverLetter)
            .filter(CoverLetter.id == letter_id, CoverLetter.user_id == user.id)
            .first()
        )


def delete_cover_letter(db: Session, external_user_id: Optional[str], letter_id: str) -> CoverLetter:
    letter = get_cover_letter(db, external_user_id, letter_id)
    if not letter:
        raise NotFoundError("Cover letter not found")
    with diagnostics("delete cover letter"):
        db.delete(letter)
        db.commit()
        return letter
