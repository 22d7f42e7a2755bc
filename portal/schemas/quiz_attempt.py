from pydantic import BaseModel
from typing import Any, List, Optional
from datetime import datetime
from portal.schemas.user import UserInfo

class AttemptCreate(BaseModel):
    # Validated by the grading engine so its messages reach the client
    answers: Any = None

class QuizRef(BaseModel):
    id: int
    title: str

class Answer(BaseModel):
    question: str
    selectedOptions: List[str]
    isCorrect: Optional[bool] = None

class QuizAttempt(BaseModel):
    id: int
    quiz: QuizRef
    student: UserInfo
    answers: List[Answer]
    score: int
    startedAt: datetime
    completedAt: Optional[datetime] = None

class QuizAttemptList(BaseModel):
    count: int
    attempts: List[QuizAttempt]

class ScoreDistribution(BaseModel):
    excellent: int
    good: int
    average: int
    poor: int

class QuizStats(BaseModel):
    totalAttempts: int
    averageScore: int
    highestScore: int
    lowestScore: int
    passRate: int
    scoreDistribution: ScoreDistribution
