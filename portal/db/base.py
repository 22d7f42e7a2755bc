# Import every model so Base.metadata is complete for alembic and create_all
from portal.db.base_class import Base  # noqa: F401
from portal.models.user import User  # noqa: F401
from portal.models.course import Course, course_enrollments  # noqa: F401
from portal.models.quiz import Quiz, Question, Option  # noqa: F401
from portal.models.quiz_attempt import QuizAttempt  # noqa: F401
