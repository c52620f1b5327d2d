"""
Interview preparation: quiz generation, scoring and assessment history.
"""
import json
import logging
from typing import Any, Dict, List, Optional, Sequence

from pydantic import ValidationError
from sqlalchemy.orm import Session

from ..ai.client import AIClient, strip_code_fences
from ..ai.errors import AIConfigurationError, CallError, OtherCallError
from ..ai.retry import retry_with_backoff
from ..ai.templates import FallbackCategory
from ..config import Settings
from ..models import Assessment
from ..schemas import QuizOut
from .ai_calls import Generation, generate_with_fallback, store_ai_interaction
from .errors import diagnostics
from .user import get_user

logger = logging.getLogger(__name__)

QUIZ_PROMPT = """
Generate 10 technical interview questions for a {industry} professional{expertise}.

Each question should be multiple choice with 4 options.

Return the response in this JSON format only, no additional text:
{{
  "questions": [
    {{
      "question": "string",
      "options": ["string", "string", "string", "string"],
      "correctAnswer": "string",
      "explanation": "string"
    }}
  ]
}}
"""

IMPROVEMENT_PROMPT = """
The user got the following {industry} technical interview questions wrong:

{wrong_questions}

Based on these mistakes, provide a concise, specific improvement tip.
Focus on the knowledge gaps revealed by these wrong answers.
Keep the response under 2 sentences and make it encouraging.
Don't explicitly mention the mistakes, instead focus on what to learn/practice.
"""


def parse_quiz(text: str) -> List[Dict[str, Any]]:
    """Parse and validate the provider's quiz JSON; malformed output is a call failure."""
    try:
        quiz = QuizOut.model_validate(json.loads(strip_code_fences(text)))
    except (json.JSONDecodeError, ValidationError) as e:
        raise OtherCallError(f"AI returned a malformed quiz: {e}") from e
    for q in quiz.questions:
        if q.correctAnswer not in q.options:
            raise OtherCallError("AI returned a quiz answer that is not one of its options")
    return [q.model_dump() for q in quiz.questions]


async def generate_quiz(db: Session, external_user_id: Optional[str], *, settings: Settings, ai: AIClient) -> List[Dict[str, Any]]:
    user = get_user(db, external_user_id)
    skills = user.skills or []
    prompt = QUIZ_PROMPT.format(
        industry=user.industry or "technology",
        expertise=f" with expertise in {', '.join(skills)}" if skills else "",
    )

    async def call():
        return parse_quiz(await ai.generate_content(prompt))

    with diagnostics("generate quiz questions"):
        generation = await generate_with_fallback(
            call,
            settings=settings,
            category=FallbackCategory.INTERVIEW_QUESTIONS,
            context={"skills": skills, "industry": user.industry},
        )
        store_ai_interaction(
            db, user_id=user.id, interaction_type="quiz",
            prompt=prompt, generation=generation, model=settings.gemini_model,
        )
        return generation.result


def score_answers(questions: Sequence[Dict[str, Any]], answers: Sequence[Optional[str]]) -> List[Dict[str, Any]]:
    results = []
    for index, q in enumerate(questions):
        user_answer = answers[index] if index < len(answers) else None
        results.append({
            "question": q["question"],
            "answer": q["correctAnswer"],
            "userAnswer": user_answer,
            "isCorrect": q["correctAnswer"] == user_answer,
            "explanation": q.get("explanation", ""),
        })
    return results


async def _improvement_tip(
    db: Session, user_id: str, industry: str, wrong: List[Dict[str, Any]], *, settings: Settings, ai: AIClient
) -> Optional[str]:
    wrong_text = "\n\n".join(
        f'Question: "{q["question"]}"\nCorrect Answer: "{q["answer"]}"\nUser Answer: "{q["userAnswer"]}"'
        for q in wrong
    )
    prompt = IMPROVEMENT_PROMPT.format(industry=industry, wrong_questions=wrong_text)
    try:
        tip = await retry_with_backoff(lambda: ai.generate_content(prompt), settings.retry_policy())
    except (CallError, AIConfigurationError) as e:
        # The assessment is still saved without a tip
        logger.error(f"Error generating improvement tip: {e}")
        return None
    store_ai_interaction(
        db, user_id=user_id, interaction_type="improvement_tip",
        prompt=prompt, generation=Generation(result=tip), model=settings.gemini_model,
    )
    return tip


async def save_quiz_result(
    db: Session,
    external_user_id: Optional[str],
    questions: Sequence[Dict[str, Any]],
    answers: Sequence[Optional[str]],
    score: float,
    *,
    settings: Settings,
    ai: AIClient,
) -> Assessment:
    user = get_user(db, external_user_id)
    results = score_answers(questions, answers)

    improvement_tip = None
    wrong = [r for r in results if not r["isCorrect"]]
    if wrong:
        improvement_tip = await _improvement_tip(db, user.id, user.industry or "technology", wrong, settings=settings, ai=ai)

    with diagnostics("save quiz result"):
        assessment = Assessment(
            user_id=user.id,
            quiz_score=score,
            questions=results,
            category="Technical",
            improvement_tip=improvement_tip,
        )
        db.add(assessment)
        db.commit()
        return assessment


def get_assessments(db: Session, external_user_id: Optional[str]) -> List[Assessment]:
    user = get_user(db, external_user_id)
    with diagnostics("fetch assessments"):
        return (
            db.query(Assessment)
            .filter(Assessment.user_id == user.id)
            .order_by(Assessment.created_at.asc())
            .all()
        )
