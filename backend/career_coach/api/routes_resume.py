from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..ai.client import AIClient
from ..config import Settings, get_settings
from ..db import get_db
from ..schemas import ImproveRequest, ImproveResponse, ResumeIn, ResumeOut
from ..services import resume as resume_service
from .deps import get_ai, get_user_id

router = APIRouter(prefix="/resume", tags=["resume"])


@router.get("", response_model=Optional[ResumeOut])
def get_resume(user_id: Optional[str] = Depends(get_user_id), db: Session = Depends(get_db)):
    r = resume_service.get_resume(db, user_id)
    if not r:
        return None
    return ResumeOut(id=r.id, content=r.content or "", updated_at=r.updated_at or r.created_at)


@router.put("", response_model=ResumeOut)
def save_resume(body: ResumeIn, user_id: Optional[str] = Depends(get_user_id), db: Session = Depends(get_db)):
    r = resume_service.save_resume(db, user_id, body.content)
    return ResumeOut(id=r.id, content=r.content, updated_at=r.updated_at or r.created_at)


@router.post("/improve", response_model=ImproveResponse)
async def improve(body: ImproveRequest,
                  user_id: Optional[str] = Depends(get_user_id),
                  db: Session = Depends(get_db),
                  settings: Settings = Depends(get_settings),
                  ai: AIClient = Depends(get_ai)):
    content = await resume_service.improve_with_ai(db, user_id, body.current, body.type, settings=settings, ai=ai)
    return ImproveResponse(content=content)
