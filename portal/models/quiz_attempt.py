from sqlalchemy import Column, Integer, ForeignKey, DateTime, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from portal.grading.engine import utcnow
from portal.db.base_class import Base

class QuizAttempt(Base):
    __tablename__ = "quiz_attempts"
    # One attempt per student per quiz; concurrent submits lose here
    __table_args__ = (UniqueConstraint("quiz_id", "student_id", name="uq_quiz_attempt_student"),)

    id = Column(Integer, primary_key=True, index=True)
    quiz_id = Column(Integer, ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False)
    student_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    answers = Column(JSON, nullable=False)  # [{question, selectedOptions, isCorrect}]
    score = Column(Integer, nullable=False)
    started_at = Column(DateTime, default=utcnow, nullable=False)
    completed_at = Column(DateTime)

    # Relationships
    quiz = relationship("Quiz", lazy="selectin")
    student = relationship("User", lazy="selectin")
