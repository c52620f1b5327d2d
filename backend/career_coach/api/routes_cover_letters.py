from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..ai.client import AIClient
from ..config import Settings, get_settings
from ..db import get_db
from ..models import CoverLetter
from ..schemas import CoverLetterCreate, CoverLetterOut
from ..services import cover_letter as cover_letter_service
from .deps import get_ai, get_user_id

router = APIRouter(prefix="/cover-letters", tags=["cover-letters"])


def letter_out(c: CoverLetter) -> CoverLetterOut:
    return CoverLetterOut(id=c.id, content=c.content, job_title=c.job_title, company_name=c.company_name,
                          job_description=c.job_description, status=c.status, created_at=c.created_at)


@router.post("", response_model=CoverLetterOut)
async def create_cover_letter(body: CoverLetterCreate,
                              user_id: Optional[str] = Depends(get_user_id),
                              db: Session = Depends(get_db),
                              settings: Settings = Depends(get_settings),
                              ai: AIClient = Depends(get_ai)):
    letter = await cover_letter_service.generate_cover_letter(db, user_id, body.model_dump(), settings=settings, ai=ai)
    return letter_out(letter)


@router.get("", response_model=List[CoverLetterOut])
def list_cover_letters(user_id: Optional[str] = Depends(get_user_id), db: Session = Depends(get_db)):
    return [letter_out(c) for c in cover_letter_service.get_cover_letters(db, user_id)]


@router.get("/{letter_id}", response_model=CoverLetterOut)
def get_cover_letter(letter_id: str, user_id: Optional[str] = Depends(get_user_id), db: Session = Depends(get_db)):
    letter = cover_letter_service.get_cover_letter(db, user_id, letter_id)
    if not letter:
        raise HTTPException(404, "cover letter not found")
    return letter_out(letter)


@router.delete("/{letter_id}")
def delete_cover_letter(letter_id: str, user_id: Optional[str] = Depends(get_user_id), db: Session = Depends(get_db)):
    letter = cover_letter_service.delete_cover_letter(db, user_id, letter_id)
    return {"ok": True, "id": letter.id}
