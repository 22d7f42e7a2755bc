"""Quiz attempt validation and scoring.

The engine is stateless: it validates a submission against a quiz definition,
decides correctness per question and computes the aggregate percentage. It
does not know about students or earlier attempts; the caller rejects duplicate
submissions before calling ``score_attempt``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from portal.core.exceptions import ValidationError
from portal.grading.definitions import (
    QuestionDefinition,
    QuestionType,
    QuizDefinition,
    normalize_id,
)

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the DateTime columns attempts are stored in."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def percentage(numerator: int, denominator: int) -> int:
    """Return ``numerator / denominator * 100`` rounded half up to an int.

    Integer arithmetic keeps ties exact: 2/3 -> 67, 1/2 -> 50, 101/200 -> 51.
    """
    if denominator <= 0:
        return 0
    return (200 * numerator + denominator) // (2 * denominator)


@dataclass(frozen=True, slots=True)
class QuestionResult:
    question_id: Any
    selected_option_ids: tuple[str, ...]
    is_correct: bool


@dataclass(frozen=True, slots=True)
class ScoredAttempt:
    results: tuple[QuestionResult, ...]
    correct_count: int
    total_questions: int
    score: int
    completed_at: datetime

    def answers(self) -> list[dict]:
        """Answer records in the shape stored on the attempt row."""
        return [
            {
                "question": normalize_id(r.question_id),
                "selectedOptions": list(r.selected_option_ids),
                "isCorrect": r.is_correct,
            }
            for r in self.results
        ]


def is_answer_correct(question: QuestionDefinition, selected_option_ids: Iterable[Any]) -> bool:
    selected = frozenset(normalize_id(i) for i in selected_option_ids)
    correct = question.correct_option_ids()
    if not correct:
        # Rejected when the quiz is saved; nothing can be right if it slips through.
        return False

    if question.type is QuestionType.SINGLE:
        return len(selected) == 1 and selected <= correct
    if question.type is QuestionType.MULTIPLE:
        return selected == correct
    raise ValueError(f"Unsupported question type: {question.type!r}")


def score_attempt(
    quiz: QuizDefinition,
    submitted_answers: Any,
    completed_at: Optional[datetime] = None,
) -> ScoredAttempt:
    """Validate ``submitted_answers`` against ``quiz`` and score them.

    ``submitted_answers`` is a list of ``{"question": id, "selectedOptions": [id, ...]}``
    entries, exactly one per question. Validation stops at the first failure and
    raises ``ValidationError``; nothing is scored for a rejected submission.
    """
    total = len(quiz.questions)
    if total == 0:
        raise ValidationError("Quiz has no questions", field="questions")

    if submitted_answers is None or not isinstance(submitted_answers, list):
        raise ValidationError("Answers are required", field="answers")

    if len(submitted_answers) != total:
        raise ValidationError("All questions must be answered", field="answers")

    results = []
    seen: set[str] = set()
    for index, answer in enumerate(submitted_answers, start=1):
        if not isinstance(answer, Mapping):
            raise ValidationError(f"Invalid answer {index}", field=f"answers[{index - 1}]")

        question_ref = answer.get("question")
        question = quiz.find_question(question_ref) if question_ref is not None else None
        if question is None:
            raise ValidationError(
                f"Invalid question ID in answer {index}",
                field=f"answers[{index - 1}].question",
            )

        question_key = normalize_id(question.id)
        if question_key in seen:
            raise ValidationError(
                f"Duplicate answer for question in answer {index}",
                field=f"answers[{index - 1}].question",
            )
        seen.add(question_key)

        selected = answer.get("selectedOptions")
        if not isinstance(selected, (list, tuple)):
            raise ValidationError(
                f"Invalid selected options for answer {index}",
                field=f"answers[{index - 1}].selectedOptions",
            )

        selected_ids = tuple(sorted({normalize_id(s) for s in selected}))
        results.append(
            QuestionResult(
                question_id=question.id,
                selected_option_ids=selected_ids,
                is_correct=is_answer_correct(question, selected_ids),
            )
        )

    correct_count = sum(1 for r in results if r.is_correct)
    score = percentage(correct_count, total)
    logger.debug(f"Scored quiz {quiz.id}: {correct_count}/{total} correct -> {score}")

    return ScoredAttempt(
        results=tuple(results),
        correct_count=correct_count,
        total_questions=total,
        score=score,
        completed_at=completed_at or utcnow(),
    )
