from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy import select
import logging
from portal.core.access import can_manage, ensure_can_manage, ensure_can_view, get_quiz_or_404
from portal.core.exceptions import DuplicateAttemptError, NotFoundError, ValidationError
from portal.core.security import get_current_user, require_roles
from portal.db.session import get_db
from portal.grading.definitions import QuizSettings
from portal.grading.engine import score_attempt, utcnow
from portal.grading.stats import aggregate_stats
from portal.models.quiz_attempt import QuizAttempt
from portal.models.user import User
from portal.schemas.quiz_attempt import (
    AttemptCreate,
    QuizAttemptList,
    QuizAttempt as QuizAttemptSchema,
    QuizStats,
)

router = APIRouter()
logger = logging.getLogger(__name__)

def serialize_attempt(attempt: QuizAttempt, reveal: bool) -> dict:
    """Shape an attempt row; per-question correctness is hidden unless ``reveal``."""
    return {
        "id": attempt.id,
        "quiz": {"id": attempt.quiz.id, "title": attempt.quiz.title},
        "student": {
            "id": str(attempt.student.id),
            "name": attempt.student.name,
            "email": attempt.student.email
        },
        "answers": [
            {
                "question": a["question"],
                "selectedOptions": a["selectedOptions"],
                "isCorrect": a.get("isCorrect") if reveal else None
            }
            for a in attempt.answers
        ],
        "score": attempt.score,
        "startedAt": attempt.started_at,
        "completedAt": attempt.completed_at
    }

def reveals_results(attempt: QuizAttempt, current_user: User) -> bool:
    settings = QuizSettings.from_dict(attempt.quiz.settings)
    return can_manage(attempt.quiz.course, current_user) or settings.show_results

async def find_attempt(db: AsyncSession, quiz_id: int, student_id: int):
    result = await db.execute(
        select(QuizAttempt)
        .where(
            QuizAttempt.quiz_id == quiz_id,
            QuizAttempt.student_id == student_id
        )
    )
    return result.scalar_one_or_none()

@router.post("/quizzes/{quiz_id}/attempt", response_model=QuizAttemptSchema, status_code=status.HTTP_201_CREATED)
async def submit_quiz_attempt(
    quiz_id: int,
    payload: AttemptCreate,
    current_user: User = Depends(require_roles("student")),
    db: AsyncSession = Depends(get_db)
):
    """Score and store the current student's only attempt at a quiz."""
    # Read before any commit or rollback can expire the instance
    student_id = current_user.id
    quiz = await get_quiz_or_404(db, quiz_id)
    ensure_can_view(quiz.course, current_user, "take this quiz")

    if not quiz.is_active:
        raise ValidationError("Quiz is not active", field="quiz_id")

    if await find_attempt(db, quiz_id, student_id):
        logger.warning(f"User {student_id} tried to resubmit quiz {quiz_id}")
        raise DuplicateAttemptError("You have already attempted this quiz")

    started_at = utcnow()
    try:
        scored = score_attempt(quiz.to_definition(), payload.answers)
    except ValidationError as e:
        logger.info(f"Rejected submission for quiz {quiz_id} by user {student_id}: {e.message}")
        raise

    attempt = QuizAttempt(
        quiz_id=quiz.id,
        student_id=student_id,
        answers=scored.answers(),
        score=scored.score,
        started_at=started_at,
        completed_at=scored.completed_at
    )
    db.add(attempt)
    try:
        await db.commit()
    except IntegrityError:
        # A concurrent submission for the same (quiz, student) won the race
        await db.rollback()
        logger.warning(f"Duplicate attempt for quiz {quiz_id} by user {student_id} rejected by the database")
        raise DuplicateAttemptError("You have already attempted this quiz")

    attempt.quiz = quiz
    attempt.student = current_user
    logger.info(f"User {student_id} scored {scored.score} on quiz {quiz_id}")
    return serialize_attempt(attempt, reveals_results(attempt, current_user))

@router.get("/quizzes/{quiz_id}/attempts", response_model=QuizAttemptList)
async def get_quiz_attempts(
    quiz_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """All attempts for a quiz, most recent first."""
    quiz = await get_quiz_or_404(db, quiz_id)
    ensure_can_manage(quiz.course, current_user, "view quiz attempts")

    result = await db.execute(
        select(QuizAttempt)
        .where(QuizAttempt.quiz_id == quiz_id)
        .order_by(QuizAttempt.completed_at.desc(), QuizAttempt.id.desc())
    )
    attempts = result.scalars().all()
    return {
        "count": len(attempts),
        "attempts": [serialize_attempt(a, reveal=True) for a in attempts]
    }

@router.get("/quizzes/{quiz_id}/my-attempt", response_model=QuizAttemptSchema)
async def get_my_quiz_attempt(
    quiz_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """The current user's attempt at a quiz."""
    quiz = await get_quiz_or_404(db, quiz_id)
    ensure_can_view(quiz.course, current_user, "access this quiz")

    attempt = await find_attempt(db, quiz_id, current_user.id)
    if not attempt:
        raise NotFoundError("No attempt found for this quiz", field="quiz_id")
    return serialize_attempt(attempt, reveals_results(attempt, current_user))

@router.get("/quizzes/{quiz_id}/stats", response_model=QuizStats)
async def get_quiz_stats(
    quiz_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Score statistics over every attempt at a quiz."""
    quiz = await get_quiz_or_404(db, quiz_id)
    ensure_can_manage(quiz.course, current_user, "view quiz statistics")

    result = await db.execute(select(QuizAttempt.score).where(QuizAttempt.quiz_id == quiz_id))
    return aggregate_stats(result.scalars().all()).as_dict()
