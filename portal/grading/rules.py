"""Checks applied to a quiz definition before it is stored."""

from __future__ import annotations

from typing import Any, Optional, Sequence

from portal.core.exceptions import ValidationError
from portal.grading.definitions import QuestionType

MIN_TIME_LIMIT = 1
MAX_TIME_LIMIT = 300
MIN_OPTIONS = 2


def _get(item: Any, name: str, default: Any = None) -> Any:
    if isinstance(item, dict):
        return item.get(name, default)
    return getattr(item, name, default)


def _blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


def _require_questions(questions: Optional[Sequence[Any]]) -> None:
    if not questions:
        raise ValidationError("At least one question is required", field="questions")


def _check_time_limit(time_limit: Optional[int]) -> None:
    if time_limit is None or time_limit < MIN_TIME_LIMIT:
        raise ValidationError("Time limit must be at least 1 minute", field="timeLimit")
    if time_limit > MAX_TIME_LIMIT:
        raise ValidationError("Time limit cannot exceed 300 minutes", field="timeLimit")


def validate_questions(questions: Sequence[Any]) -> None:
    """Per-question checks; the list is assumed non-empty."""
    for i, question in enumerate(questions, start=1):
        if _blank(_get(question, "text")):
            raise ValidationError(f"Question {i} text is required", field=f"questions[{i - 1}].text")

        raw_type = _get(question, "type", QuestionType.SINGLE)
        try:
            question_type = QuestionType(raw_type)
        except ValueError:
            raise ValidationError(f"Question {i} has an invalid type", field=f"questions[{i - 1}].type")

        options = _get(question, "options") or []
        if len(options) < MIN_OPTIONS:
            raise ValidationError(
                f"Question {i} must have at least {MIN_OPTIONS} options",
                field=f"questions[{i - 1}].options",
            )

        correct = [o for o in options if _get(o, "isCorrect", _get(o, "is_correct", False))]
        if not correct:
            raise ValidationError(
                f"Question {i} must have at least one correct answer",
                field=f"questions[{i - 1}].options",
            )
        if question_type is QuestionType.SINGLE and len(correct) > 1:
            raise ValidationError(
                f"Single choice question {i} can only have one correct answer",
                field=f"questions[{i - 1}].options",
            )

        for j, option in enumerate(options, start=1):
            if _blank(_get(option, "text")):
                raise ValidationError(
                    f"Question {i}, option {j} text is required",
                    field=f"questions[{i - 1}].options[{j - 1}].text",
                )


def validate_quiz_payload(
    title: Optional[str],
    questions: Optional[Sequence[Any]],
    time_limit: Optional[int],
    partial: bool = False,
) -> None:
    """Raise ``ValidationError`` for the first rule the payload breaks.

    Rules run in a fixed order: title, presence of questions, time limit,
    then each question in turn. On a partial update only the fields that were
    supplied are checked.
    """
    check_questions = not partial or questions is not None

    if not partial and _blank(title):
        raise ValidationError("Quiz title is required", field="title")
    if partial and title is not None and _blank(title):
        raise ValidationError("Quiz title cannot be empty", field="title")

    if check_questions:
        _require_questions(questions)

    if not partial or time_limit is not None:
        _check_time_limit(time_limit)

    if check_questions:
        validate_questions(questions)
