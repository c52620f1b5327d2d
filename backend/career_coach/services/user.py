"""
User profile workflows and industry insight generation.
"""
import json
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..ai.client import AIClient, strip_code_fences
from ..ai.errors import OtherCallError
from ..ai.retry import retry_with_backoff
from ..config import Settings
from ..models import IndustryInsight, User
from .ai_calls import Generation, store_ai_interaction
from .errors import NotFoundError, UnauthorizedError, diagnostics

logger = logging.getLogger(__name__)

INSIGHT_REFRESH = timedelta(days=7)

INSIGHTS_PROMPT = """
Analyze the current state of the {industry} industry and provide insights in ONLY the following JSON format without any additional notes or explanations:
{{
  "salaryRanges": [
    {{ "role": "string", "min": number, "max": number, "median": number, "location": "string" }}
  ],
  "growthRate": number,
  "demandLevel": "HIGH" | "MEDIUM" | "LOW",
  "topSkills": ["skill1", "skill2"],
  "marketOutlook": "POSITIVE" | "NEUTRAL" | "NEGATIVE",
  "keyTrends": ["trend1", "trend2"],
  "recommendedSkills": ["skill1", "skill2"]
}}

IMPORTANT: Return ONLY the JSON. No additional text, notes, or markdown formatting.
Include at least 5 common roles for salary ranges.
Growth rate should be a percentage.
Include at least 5 skills and trends.
"""


def _find_user(db: Session, external_user_id: str) -> Optional[User]:
    return db.query(User).filter(User.external_user_id == external_user_id).first()


def get_user(db: Session, external_user_id: Optional[str]) -> User:
    if not external_user_id:
        raise UnauthorizedError("Unauthorized")
    user = _find_user(db, external_user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


def ensure_user(db: Session, external_user_id: str, name: Optional[str] = None, email: Optional[str] = None) -> User:
    """Return the local user for an auth-provider id, creating it on first sight."""
    user = _find_user(db, external_user_id)
    if user:
        return user
    user = User(external_user_id=external_user_id, name=name, email=email, skills=[])
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # A concurrent first request created the same user
        db.rollback()
        user = _find_user(db, external_user_id)
        if not user:
            raise
        return user
    logger.info(f"Created user for {external_user_id}")
    return user


async def generate_industry_insights(industry: str, *, settings: Settings, ai: AIClient) -> Dict[str, Any]:
    prompt = INSIGHTS_PROMPT.format(industry=industry)

    async def call():
        text = await ai.generate_content(prompt)
        try:
            return json.loads(strip_code_fences(text))
        except json.JSONDecodeError as e:
            raise OtherCallError("AI returned malformed industry insights") from e

    return await retry_with_backoff(call, settings.retry_policy())


def _apply_insights(insight: IndustryInsight, data: Dict[str, Any]) -> IndustryInsight:
    now = datetime.now(timezone.utc)
    insight.salary_ranges = data.get("salaryRanges", [])
    insight.growth_rate = float(data.get("growthRate", 0) or 0)
    insight.demand_level = data.get("demandLevel", "MEDIUM")
    insight.top_skills = data.get("topSkills", [])
    insight.market_outlook = data.get("marketOutlook", "NEUTRAL")
    insight.key_trends = data.get("keyTrends", [])
    insight.recommended_skills = data.get("recommendedSkills", [])
    insight.last_updated = now
    insight.next_update = now + INSIGHT_REFRESH
    return insight


def is_stale(insight: IndustryInsight, now: Optional[datetime] = None) -> bool:
    if insight.next_update is None:
        return True
    next_update = insight.next_update
    # SQLite hands back naive datetimes; they were written as UTC
    if next_update.tzinfo is None:
        next_update = next_update.replace(tzinfo=timezone.utc)
    return next_update <= (now or datetime.now(timezone.utc))


def _log_insights(db: Session, user: User, insights: Dict[str, Any], settings: Settings) -> None:
    store_ai_interaction(
        db, user_id=user.id, interaction_type="industry_insights",
        prompt=INSIGHTS_PROMPT.format(industry=user.industry),
        generation=Generation(result=insights), model=settings.gemini_model,
    )


async def update_user(db: Session, external_user_id: Optional[str], data: Dict[str, Any], *, settings: Settings, ai: AIClient):
    """Update the profile; the first user of an industry triggers insight generation."""
    user = get_user(db, external_user_id)
    with diagnostics("update profile"):
        industry = data["industry"]
        insight = db.query(IndustryInsight).filter(IndustryInsight.industry == industry).first()
        insights = None
        if not insight:
            insights = await generate_industry_insights(industry, settings=settings, ai=ai)
            insight = _apply_insights(IndustryInsight(industry=industry), insights)
            db.add(insight)

        user.industry = industry
        user.experience = data.get("experience")
        user.bio = data.get("bio")
        user.skills = data.get("skills") or []
        try:
            db.commit()
        except Exception:
            db.rollback()
            raise
        if insights is not None:
            _log_insights(db, user, insights, settings)
        return user, insight


async def get_industry_insights(db: Session, external_user_id: Optional[str], *, settings: Settings, ai: AIClient) -> IndustryInsight:
    """Insights for the user's industry, generated when missing and regenerated once past next_update."""
    user = get_user(db, external_user_id)
    if not user.industry:
        raise NotFoundError("Complete onboarding to see industry insights")
    with diagnostics("fetch industry insights"):
        insight = db.query(IndustryInsight).filter(IndustryInsight.industry == user.industry).first()
        if insight and not is_stale(insight):
            return insight
        insights = await generate_industry_insights(user.industry, settings=settings, ai=ai)
        if insight is None:
            insight = IndustryInsight(industry=user.industry)
            db.add(insight)
        else:
            logger.info(f"Refreshing industry insights for {user.industry}")
        _apply_insights(insight, insights)
        db.commit()
        _log_insights(db, user, insights, settings)
        return insight


def get_onboarding_status(db: Session, external_user_id: Optional[str]) -> Dict[str, bool]:
    user = get_user(db, external_user_id)
    with diagnostics("check onboarding status"):
        return {"isOnboarded": bool(user.industry)}
