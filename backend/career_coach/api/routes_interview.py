from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..ai.client import AIClient
from ..config import Settings, get_settings
from ..db import get_db
from ..models import Assessment
from ..schemas import AssessmentOut, QuizOut, QuizResultIn
from ..services import interview as interview_service
from .deps import get_ai, get_user_id

router = APIRouter(prefix="/interview", tags=["interview"])


def assessment_out(a: Assessment) -> AssessmentOut:
    return AssessmentOut(id=a.id, quiz_score=a.quiz_score, questions=a.questions or [],
                         category=a.category, improvement_tip=a.improvement_tip, created_at=a.created_at)


@router.post("/quiz", response_model=QuizOut)
async def generate_quiz(user_id: Optional[str] = Depends(get_user_id),
                        db: Session = Depends(get_db),
                        settings: Settings = Depends(get_settings),
                        ai: AIClient = Depends(get_ai)):
    questions = await interview_service.generate_quiz(db, user_id, settings=settings, ai=ai)
    return QuizOut(questions=questions)


@router.post("/results", response_model=AssessmentOut)
async def save_result(body: QuizResultIn,
                      user_id: Optional[str] = Depends(get_user_id),
                      db: Session = Depends(get_db),
                      settings: Settings = Depends(get_settings),
                      ai: AIClient = Depends(get_ai)):
    questions = [q.model_dump() for q in body.questions]
    assessment = await interview_service.save_quiz_result(
        db, user_id, questions, body.answers, body.score, settings=settings, ai=ai
    )
    return assessment_out(assessment)


@router.get("/assessments", response_model=List[AssessmentOut])
def list_assessments(user_id: Optional[str] = Depends(get_user_id), db: Session = Depends(get_db)):
    return [assessment_out(a) for a in interview_service.get_assessments(db, user_id)]
