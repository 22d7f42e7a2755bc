from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
import logging
from portal.core.access import get_course_or_404
from portal.core.exceptions import ValidationError
from portal.core.security import require_roles
from portal.core.utils import generate_unique_access_code
from portal.db.session import get_db
from portal.models.course import Course
from portal.models.user import User
from portal.schemas.course import CourseCreate, CourseJoin, Course as CourseSchema

router = APIRouter()
logger = logging.getLogger(__name__)

def serialize_course(course: Course) -> dict:
    return {
        "id": course.id,
        "title": course.title,
        "description": course.description,
        "accessCode": course.access_code,
        "createdBy": {
            "id": str(course.created_by.id),
            "name": course.created_by.name,
            "email": course.created_by.email
        },
        "createdAt": course.created_at,
        "studentCount": len(course.students)
    }

@router.post("/courses", response_model=CourseSchema, status_code=status.HTTP_201_CREATED)
async def create_course(
    course_data: CourseCreate,
    current_user: User = Depends(require_roles("faculty", "admin")),
    db: AsyncSession = Depends(get_db)
):
    """Create a course with a fresh access code."""
    if not course_data.title.strip():
        raise ValidationError("Please add a course title", field="title")

    course = Course(
        title=course_data.title.strip(),
        description=course_data.description,
        access_code=await generate_unique_access_code(db),
        created_by_id=current_user.id
    )
    db.add(course)
    await db.commit()

    course = await get_course_or_404(db, course.id)
    logger.info(f"Course {course.id} created by user {current_user.id}")
    return serialize_course(course)

@router.post("/courses/{course_id}/join", response_model=CourseSchema)
async def join_course(
    course_id: int,
    payload: CourseJoin,
    current_user: User = Depends(require_roles("student")),
    db: AsyncSession = Depends(get_db)
):
    """Enrol the current student using the course access code."""
    course = await get_course_or_404(db, course_id)

    if course.access_code.upper() != payload.accessCode.strip().upper():
        raise ValidationError("Invalid course ID or access code", field="accessCode")

    if course.is_enrolled(current_user):
        raise ValidationError("Already enrolled in this course", field="accessCode")

    course.students.append(current_user)
    await db.commit()

    logger.info(f"User {current_user.id} joined course {course.id}")
    return serialize_course(course)
