"""Lookups and ownership checks shared by the routers."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.exceptions import NotAuthorizedError, NotFoundError
from portal.models.course import Course
from portal.models.quiz import Quiz
from portal.models.user import User


async def get_course_or_404(db: AsyncSession, course_id: int) -> Course:
    result = await db.execute(
        select(Course).where(Course.id == course_id).execution_options(populate_existing=True)
    )
    course = result.scalar_one_or_none()
    if not course:
        raise NotFoundError(f"Course not found with id of {course_id}", field="course_id")
    return course


async def get_quiz_or_404(db: AsyncSession, quiz_id: int) -> Quiz:
    result = await db.execute(
        select(Quiz).where(Quiz.id == quiz_id).execution_options(populate_existing=True)
    )
    quiz = result.scalar_one_or_none()
    if not quiz:
        raise NotFoundError(f"Quiz not found with id of {quiz_id}", field="quiz_id")
    return quiz


def can_manage(course: Course, user: User) -> bool:
    return user.role == "admin" or course.is_owner(user)


def can_view(course: Course, user: User) -> bool:
    return can_manage(course, user) or course.is_enrolled(user)


def ensure_can_manage(course: Course, user: User, action: str) -> None:
    if not can_manage(course, user):
        raise NotAuthorizedError(f"Not authorized to {action}")


def ensure_can_view(course: Course, user: User, action: str) -> None:
    if not can_view(course, user):
        raise NotAuthorizedError(f"Not authorized to {action}")
