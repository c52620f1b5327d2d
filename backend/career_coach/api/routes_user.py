from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..ai.client import AIClient
from ..config import Settings, get_settings
from ..db import get_db
from ..models import IndustryInsight, User
from ..schemas import IndustryInsightOut, OnboardingStatus, UserOut, UserUpdate, UserUpdateResponse
from ..services import user as user_service
from .deps import get_ai, get_user_id

router = APIRouter(prefix="/user", tags=["user"])


def user_out(u: User) -> UserOut:
    return UserOut(id=u.id, name=u.name, email=u.email, industry=u.industry,
                   experience=u.experience, bio=u.bio, skills=u.skills or [])


def insight_out(i: IndustryInsight) -> IndustryInsightOut:
    return IndustryInsightOut(
        industry=i.industry,
        salary_ranges=i.salary_ranges or [],
        growth_rate=i.growth_rate or 0.0,
        demand_level=i.demand_level or "MEDIUM",
        top_skills=i.top_skills or [],
        market_outlook=i.market_outlook or "NEUTRAL",
        key_trends=i.key_trends or [],
        recommended_skills=i.recommended_skills or [],
        next_update=i.next_update,
    )


@router.get("", response_model=UserOut)
def get_user(user_id: Optional[str] = Depends(get_user_id), db: Session = Depends(get_db)):
    return user_out(user_service.get_user(db, user_id))


@router.put("", response_model=UserUpdateResponse)
async def update_user(body: UserUpdate,
                      user_id: Optional[str] = Depends(get_user_id),
                      db: Session = Depends(get_db),
                      settings: Settings = Depends(get_settings),
                      ai: AIClient = Depends(get_ai)):
    user, insight = await user_service.update_user(db, user_id, body.model_dump(), settings=settings, ai=ai)
    return UserUpdateResponse(success=True, user=user_out(user), industry_insight=insight_out(insight))


@router.get("/onboarding", response_model=OnboardingStatus)
def onboarding_status(user_id: Optional[str] = Depends(get_user_id), db: Session = Depends(get_db)):
    return user_service.get_onboarding_status(db, user_id)


@router.get("/insights", response_model=IndustryInsightOut)
async def industry_insights(user_id: Optional[str] = Depends(get_user_id),
                            db: Session = Depends(get_db),
                            settings: Settings = Depends(get_settings),
                            ai: AIClient = Depends(get_ai)):
    insight = await user_service.get_industry_insights(db, user_id, settings=settings, ai=ai)
    return insight_out(insight)
