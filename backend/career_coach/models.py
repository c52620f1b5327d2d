from sqlalchemy import Column, String, DateTime, Boolean, Text, Integer, Float, JSON, ForeignKey
from .db import Base
from datetime import datetime, timezone
import uuid

def uid() -> str:
    return str(uuid.uuid4())

# Set client-side: SQLite CURRENT_TIMESTAMP only has one-second resolution
def utcnow() -> datetime:
    return datetime.now(timezone.utc)

class User(Base):
    __tablename__ = "users"
    id = Column(String, primary_key=True, default=uid)
    external_user_id = Column(String, unique=True, index=True)  # id issued by the auth provider
    email = Column(String, nullable=True)
    name = Column(String, nullable=True)
    image_url = Column(String, nullable=True)
    industry = Column(String, index=True, nullable=True)
    bio = Column(Text, nullable=True)
    experience = Column(Integer, nullable=True)  # years
    skills = Column(JSON, nullable=True)          # list[str]
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), onupdate=utcnow)

class Resume(Base):
    __tablename__ = "resumes"
    id = Column(String, primary_key=True, default=uid)
    user_id = Column(String, ForeignKey("users.id"), unique=True, index=True)  # one resume per user
    content = Column(Text)  # markdown
    ats_score = Column(Float, nullable=True)
    feedback = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), onupdate=utcnow)

class CoverLetter(Base):
    __tablename__ = "cover_letters"
    id = Column(String, primary_key=True, default=uid)
    user_id = Column(String, ForeignKey("users.id"), index=True)
    content = Column(Text)
    job_description = Column(Text, nullable=True)
    company_name = Column(String)
    job_title = Column(String)
    status = Column(String, default="draft")  # draft|completed
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), onupdate=utcnow)

class Assessment(Base):
    __tablename__ = "assessments"
    id = Column(String, primary_key=True, default=uid)
    user_id = Column(String, ForeignKey("users.id"), index=True)
    quiz_score = Column(Float)
    questions = Column(JSON)  # list of {question, answer, userAnswer, isCorrect, explanation}
    category = Column(String)  # Technical|Behavioral
    improvement_tip = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)

class IndustryInsight(Base):
    __tablename__ = "industry_insights"
    id = Column(String, primary_key=True, default=uid)
    industry = Column(String, unique=True, index=True)
    salary_ranges = Column(JSON)  # list of {role, min, max, median, location}
    growth_rate = Column(Float)
    demand_level = Column(String)  # HIGH|MEDIUM|LOW
    top_skills = Column(JSON)
    market_outlook = Column(String)  # POSITIVE|NEUTRAL|NEGATIVE
    key_trends = Column(JSON)
    recommended_skills = Column(JSON)
    last_updated = Column(DateTime(timezone=True), default=utcnow)
    next_update = Column(DateTime(timezone=True))

# Log of AI calls, including the ones answered from templates
class AIInteraction(Base):
    __tablename__ = "ai_interactions"
    id = Column(String, primary_key=True, default=uid)
    user_id = Column(String, index=True, nullable=True)
    interaction_type = Column(String)  # cover_letter|resume_improvement|quiz|improvement_tip|industry_insights
    prompt = Column(Text)
    response = Column(Text)
    model_used = Column(String)
    used_fallback = Column(Boolean, default=False)
    error_kind = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
