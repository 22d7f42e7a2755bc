from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
from portal.schemas.course import CourseRef

# Request bodies are deliberately loose: portal.grading.rules produces the
# user-facing messages for missing or malformed fields.

class OptionCreate(BaseModel):
    text: Optional[str] = None
    isCorrect: bool = False

class QuestionCreate(BaseModel):
    text: Optional[str] = None
    type: str = "single"
    options: List[OptionCreate] = []

class QuizSettings(BaseModel):
    shuffleQuestions: bool = False
    shuffleOptions: bool = False
    showResults: bool = True
    allowRetake: bool = False

class QuizCreate(BaseModel):
    title: Optional[str] = None
    timeLimit: Optional[int] = 30
    isActive: bool = True
    settings: QuizSettings = QuizSettings()
    questions: Optional[List[QuestionCreate]] = None

class QuizUpdate(BaseModel):
    title: Optional[str] = None
    timeLimit: Optional[int] = None
    isActive: Optional[bool] = None
    settings: Optional[QuizSettings] = None
    questions: Optional[List[QuestionCreate]] = None

class Option(BaseModel):
    id: int
    text: str
    isCorrect: Optional[bool] = None  # only sent to the course owner and admins

class Question(BaseModel):
    id: int
    text: str
    type: str
    options: List[Option]

class Quiz(BaseModel):
    id: int
    course: CourseRef
    title: str
    timeLimit: int
    isActive: bool
    settings: QuizSettings
    questionCount: int
    questions: List[Question]
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

class QuizList(BaseModel):
    count: int
    quizzes: List[Quiz]
