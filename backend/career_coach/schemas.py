from pydantic import BaseModel, Field
from typing import List, Optional, Dict, Any
from datetime import datetime

class UserUpdate(BaseModel):
    industry: str
    experience: Optional[int] = None
    bio: Optional[str] = None
    skills: Optional[List[str]] = None

class UserOut(BaseModel):
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    industry: Optional[str] = None
    experience: Optional[int] = None
    bio: Optional[str] = None
    skills: List[str] = []

class IndustryInsightOut(BaseModel):
    industry: str
    salary_ranges: List[Dict[str, Any]] = []
    growth_rate: float = 0.0
    demand_level: str = "MEDIUM"
    top_skills: List[str] = []
    market_outlook: str = "NEUTRAL"
    key_trends: List[str] = []
    recommended_skills: List[str] = []
    next_update: Optional[datetime] = None

class UserUpdateResponse(BaseModel):
    success: bool
    user: UserOut
    industry_insight: Optional[IndustryInsightOut] = None

class OnboardingStatus(BaseModel):
    isOnboarded: bool

class ResumeIn(BaseModel):
    content: str

class ResumeOut(BaseModel):
    id: str
    content: str
    updated_at: Optional[datetime] = None

class ImproveRequest(BaseModel):
    current: str
    type: str = "experience"  # experience|project|summary|education

class ImproveResponse(BaseModel):
    content: str

class CoverLetterCreate(BaseModel):
    job_title: str
    company_name: str
    job_description: Optional[str] = None

class CoverLetterOut(BaseModel):
    id: str
    content: str
    job_title: str
    company_name: str
    job_description: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None

# Same shape as the questions in the AI quiz response
class QuizQuestion(BaseModel):
    question: str
    options: List[str] = Field(min_length=4, max_length=4)
    correctAnswer: str
    explanation: str = ""

class QuizOut(BaseModel):
    questions: List[QuizQuestion]

class QuizResultIn(BaseModel):
    questions: List[QuizQuestion]
    answers: List[Optional[str]]
    score: float

class QuestionResult(BaseModel):
    question: str
    answer: str
    userAnswer: Optional[str] = None
    isCorrect: bool
    explanation: str = ""

class AssessmentOut(BaseModel):
    id: str
    quiz_score: float
    questions: List[QuestionResult]
    category: str
    improvement_tip: Optional[str] = None
    created_at: Optional[datetime] = None
