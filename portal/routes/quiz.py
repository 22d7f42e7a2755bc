from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete
import logging
from portal.core.access import (
    can_manage,
    ensure_can_manage,
    ensure_can_view,
    get_course_or_404,
    get_quiz_or_404,
)
from portal.core.security import get_current_user, require_roles
from portal.db.session import get_db
from portal.grading.rules import validate_quiz_payload
from portal.models.quiz import Quiz, Question, Option
from portal.models.quiz_attempt import QuizAttempt
from portal.models.user import User
from portal.schemas.quiz import (
    QuizCreate,
    QuizUpdate,
    QuestionCreate,
    QuizList,
    Quiz as QuizSchema,
)
from typing import List

router = APIRouter()
logger = logging.getLogger(__name__)

def build_questions(questions: List[QuestionCreate]) -> List[Question]:
    return [
        Question(
            text=q.text.strip(),
            type=q.type,
            order=i,
            options=[
                Option(text=o.text.strip(), is_correct=o.isCorrect, order=j)
                for j, o in enumerate(q.options)
            ]
        )
        for i, q in enumerate(questions)
    ]

def serialize_quiz(quiz: Quiz, include_answers: bool) -> dict:
    """Shape a quiz row for the API; correctness flags only for managers."""
    return {
        "id": quiz.id,
        "course": {"id": quiz.course.id, "title": quiz.course.title},
        "title": quiz.title,
        "timeLimit": quiz.time_limit,
        "isActive": quiz.is_active,
        "settings": quiz.settings or {},
        "questionCount": len(quiz.questions),
        "questions": [
            {
                "id": q.id,
                "text": q.text,
                "type": q.type,
                "options": [
                    {
                        "id": o.id,
                        "text": o.text,
                        "isCorrect": o.is_correct if include_answers else None
                    }
                    for o in q.options
                ]
            }
            for q in quiz.questions
        ],
        "createdAt": quiz.created_at,
        "updatedAt": quiz.updated_at
    }

@router.get("/courses/{course_id}/quizzes", response_model=QuizList)
async def get_quizzes(
    course_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """List the quizzes of a course, newest first."""
    course = await get_course_or_404(db, course_id)
    ensure_can_view(course, current_user, "access this course")

    result = await db.execute(
        select(Quiz)
        .where(Quiz.course_id == course_id)
        .order_by(Quiz.created_at.desc(), Quiz.id.desc())
    )
    quizzes = result.scalars().all()
    include_answers = can_manage(course, current_user)

    return {
        "count": len(quizzes),
        "quizzes": [serialize_quiz(q, include_answers) for q in quizzes]
    }

@router.post("/courses/{course_id}/quizzes", response_model=QuizSchema, status_code=status.HTTP_201_CREATED)
async def create_quiz(
    course_id: int,
    quiz_data: QuizCreate,
    current_user: User = Depends(require_roles("faculty", "admin")),
    db: AsyncSession = Depends(get_db)
):
    """Create a quiz with its questions and options."""
    course = await get_course_or_404(db, course_id)
    ensure_can_manage(course, current_user, "create quiz for this course")

    validate_quiz_payload(quiz_data.title, quiz_data.questions, quiz_data.timeLimit)

    quiz = Quiz(
        course_id=course.id,
        title=quiz_data.title.strip(),
        time_limit=quiz_data.timeLimit,
        is_active=quiz_data.isActive,
        settings=quiz_data.settings.model_dump(),
        questions=build_questions(quiz_data.questions)
    )
    db.add(quiz)
    await db.commit()

    quiz = await get_quiz_or_404(db, quiz.id)
    logger.info(f"Quiz {quiz.id} created in course {course.id} by user {current_user.id}")
    return serialize_quiz(quiz, include_answers=True)

@router.get("/quizzes/{quiz_id}", response_model=QuizSchema)
async def get_quiz(
    quiz_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Get quiz details by ID."""
    quiz = await get_quiz_or_404(db, quiz_id)
    ensure_can_view(quiz.course, current_user, "access this quiz")
    return serialize_quiz(quiz, include_answers=can_manage(quiz.course, current_user))

@router.put("/quizzes/{quiz_id}", response_model=QuizSchema)
async def update_quiz(
    quiz_id: int,
    quiz_data: QuizUpdate,
    current_user: User = Depends(require_roles("faculty", "admin")),
    db: AsyncSession = Depends(get_db)
):
    """Update a quiz. A supplied question list replaces the existing one."""
    quiz = await get_quiz_or_404(db, quiz_id)
    ensure_can_manage(quiz.course, current_user, "update this quiz")

    validate_quiz_payload(quiz_data.title, quiz_data.questions, quiz_data.timeLimit, partial=True)

    if quiz_data.title is not None:
        quiz.title = quiz_data.title.strip()
    if quiz_data.timeLimit is not None:
        quiz.time_limit = quiz_data.timeLimit
    if quiz_data.isActive is not None:
        quiz.is_active = quiz_data.isActive
    if quiz_data.settings is not None:
        quiz.settings = quiz_data.settings.model_dump()
    if quiz_data.questions is not None:
        quiz.questions = build_questions(quiz_data.questions)

    await db.commit()

    quiz = await get_quiz_or_404(db, quiz_id)
    logger.info(f"Quiz {quiz.id} updated by user {current_user.id}")
    return serialize_quiz(quiz, include_answers=True)

@router.delete("/quizzes/{quiz_id}")
async def delete_quiz(
    quiz_id: int,
    current_user: User = Depends(require_roles("faculty", "admin")),
    db: AsyncSession = Depends(get_db)
):
    """Delete a quiz together with every attempt made on it."""
    quiz = await get_quiz_or_404(db, quiz_id)
    ensure_can_manage(quiz.course, current_user, "delete this quiz")

    await db.execute(delete(QuizAttempt).where(QuizAttempt.quiz_id == quiz_id))
    await db.delete(quiz)
    await db.commit()

    logger.info(f"Quiz {quiz_id} deleted by user {current_user.id}")
    return {"success": True}
