import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..ai.client import AIClient
from ..ai.templates import FallbackCategory
from ..config import Settings
from ..models import Resume
from .ai_calls import generate_with_fallback, store_ai_interaction
from .errors import diagnostics
from .user import get_user

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are an expert resume writer and career coach."

IMPROVE_PROMPT = """
As an expert resume writer, improve the following {type} description for a {industry} professional.
Make it more impactful, quantifiable, and aligned with industry standards.
Current content: "{current}"

Requirements:
1. Use action verbs
2. Include metrics and results where possible
3. Highlight relevant technical skills
4. Keep it concise but detailed
5. Focus on achievements over responsibilities
6. Use industry-specific keywords

Format the response as a single paragraph without any additional text or explanations.
"""


def save_resume(db: Session, external_user_id: Optional[str], content: str) -> Resume:
    user = get_user(db, external_user_id)
    with diagnostics("save resume"):
        resume = db.query(Resume).filter(Resume.user_id == user.id).first()
        if resume:
            resume.content = content
        else:
            resume = Resume(user_id=user.id, content=content)
            db.add(resume)
        db.commit()
        return resume


def get_resume(db: Session, external_user_id: Optional[str]) -> Optional[Resume]:
    user = get_user(db, external_user_id)
    return db.query(Resume).filter(Resume.user_id == user.id).first()


async def improve_with_ai(
    db: Session,
    external_user_id: Optional[str],
    current: str,
    type: str,
    *,
    settings: Settings,
    ai: AIClient,
) -> str:
    """Rewrite one resume section; degrades to a templated sentence on quota errors."""
    user = get_user(db, external_user_id)
    prompt = IMPROVE_PROMPT.format(type=type, industry=user.industry or "technology", current=current)
    logger.info(f"Starting AI resume improvement ({type})")

    with diagnostics("improve content with AI"):
        generation = await generate_with_fallback(
            lambda: ai.chat_completion(
                [{"role": "system", "content": SYSTEM_PROMPT}, {"role": "user", "content": prompt}],
                temperature=0.7,
                max_tokens=500,
            ),
            settings=settings,
            category=FallbackCategory.RESUME_IMPROVEMENT,
            context={"skills": user.skills, "experience": user.experience},
        )
        store_ai_interaction(
            db, user_id=user.id, interaction_type="resume_improvement",
            prompt=prompt, generation=generation, model=settings.openai_model,
        )
        return generation.result
