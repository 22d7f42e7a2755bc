from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Table, UniqueConstraint
from sqlalchemy.orm import relationship
from portal.grading.engine import utcnow
from portal.db.base_class import Base

course_enrollments = Table(
    "course_enrollments",
    Base.metadata,
    Column("course_id", Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False),
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
    UniqueConstraint("course_id", "user_id", name="uq_course_enrollment"),
)

class Course(Base):
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(100), nullable=False)
    description = Column(String(500))
    access_code = Column(String(6), unique=True, index=True, nullable=False)
    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime, default=utcnow)

    # Relationships
    created_by = relationship("User", lazy="selectin")
    students = relationship("User", secondary=course_enrollments, lazy="selectin")

    def is_owner(self, user) -> bool:
        return self.created_by_id == user.id

    def is_enrolled(self, user) -> bool:
        return any(student.id == user.id for student in self.students)
