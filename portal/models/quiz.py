from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, JSON, DateTime
from sqlalchemy.orm import relationship
from portal.grading.engine import utcnow
from portal.db.base_class import Base
from portal.grading.definitions import (
    OptionDefinition,
    QuestionDefinition,
    QuestionType,
    QuizDefinition,
    QuizSettings,
)

class Quiz(Base):
    __tablename__ = "quizzes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), index=True, nullable=False)
    title = Column(String(200), nullable=False)
    time_limit = Column(Integer, nullable=False, default=30)  # minutes
    is_active = Column(Boolean, nullable=False, default=True)
    settings = Column(JSON)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    course = relationship("Course", lazy="selectin")
    questions = relationship(
        "Question",
        back_populates="quiz",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="Question.order",
    )

    def to_definition(self) -> QuizDefinition:
        """Detached copy of the quiz for the grading engine."""
        return QuizDefinition(
            id=self.id,
            title=self.title,
            time_limit=self.time_limit,
            is_active=self.is_active,
            settings=QuizSettings.from_dict(self.settings),
            questions=tuple(
                QuestionDefinition(
                    id=q.id,
                    text=q.text,
                    type=QuestionType(q.type),
                    options=tuple(
                        OptionDefinition(id=o.id, text=o.text, is_correct=o.is_correct)
                        for o in q.options
                    ),
                )
                for q in self.questions
            ),
        )

class Question(Base):
    __tablename__ = "questions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    quiz_id = Column(Integer, ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False)
    text = Column(String(2000), nullable=False)
    type = Column(String(20), nullable=False, default=QuestionType.SINGLE.value)
    order = Column(Integer)

    # Relationships
    quiz = relationship("Quiz", back_populates="questions")
    options = relationship(
        "Option",
        back_populates="question",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="Option.order",
    )

class Option(Base):
    __tablename__ = "options"

    id = Column(Integer, primary_key=True, autoincrement=True)
    question_id = Column(Integer, ForeignKey("questions.id", ondelete="CASCADE"), nullable=False)
    text = Column(String(500), nullable=False)
    is_correct = Column(Boolean, nullable=False, default=False)
    order = Column(Integer)

    # Relationships
    question = relationship("Question", back_populates="options")
