"""Value objects the grading engine works on.

These are detached from the ORM: the routers build them from database rows,
so the engine never touches a session.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class QuestionType(str, Enum):
    SINGLE = "single"
    MULTIPLE = "multiple"


def normalize_id(value: Any) -> str:
    """Ids may arrive as ints from the database and as strings from JSON."""
    return str(value).strip()


@dataclass(frozen=True, slots=True)
class OptionDefinition:
    id: Any
    text: str
    is_correct: bool = False


@dataclass(frozen=True, slots=True)
class QuestionDefinition:
    id: Any
    text: str
    type: QuestionType
    options: tuple[OptionDefinition, ...]

    def correct_option_ids(self) -> frozenset[str]:
        return frozenset(normalize_id(o.id) for o in self.options if o.is_correct)


@dataclass(frozen=True, slots=True)
class QuizSettings:
    shuffle_questions: bool = False
    shuffle_options: bool = False
    show_results: bool = True
    allow_retake: bool = False

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "QuizSettings":
        data = data or {}
        return cls(
            shuffle_questions=bool(data.get("shuffleQuestions", False)),
            shuffle_options=bool(data.get("shuffleOptions", False)),
            show_results=bool(data.get("showResults", True)),
            allow_retake=bool(data.get("allowRetake", False)),
        )


@dataclass(frozen=True, slots=True)
class QuizDefinition:
    id: Any
    title: str
    time_limit: int
    questions: tuple[QuestionDefinition, ...]
    is_active: bool = True
    settings: QuizSettings = field(default_factory=QuizSettings)

    def find_question(self, question_id: Any) -> Optional[QuestionDefinition]:
        wanted = normalize_id(question_id)
        return next((q for q in self.questions if normalize_id(q.id) == wanted), None)
