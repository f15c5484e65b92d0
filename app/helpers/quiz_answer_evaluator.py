from dataclasses import dataclass, field
from typing import Any, Dict, List
from uuid import UUID

from app.logging_config import get_logger
from app.models import QuestionType, QuizAnswer, QuizQuestion

logger = get_logger("quiz_answer_evaluator")


@dataclass
class EvaluationResult:
    auto_score: float
    answer_rows: List[QuizAnswer] = field(default_factory=list)
    has_essay: bool = False

    @property
    def fully_graded(self) -> bool:
        return not self.has_essay


def is_correct_choice(student_answer: str, correct_answer: str) -> bool:
    """Compare answer letters case-insensitively, ignoring surrounding whitespace."""
    if not correct_answer:
        return False
    return student_answer.strip().upper() == correct_answer.strip().upper()


def evaluate_quiz_answers(
    questions: List[QuizQuestion],
    answers_payload: Dict[str, Any],
) -> EvaluationResult:
    """
    Auto-grades the multiple-choice part of an interactive submission.

    Returns an EvaluationResult holding:
    - auto_score: points earned on multiple-choice questions
    - answer_rows: unsaved QuizAnswer rows, one per usable answer
      (multiple-choice rows are fully graded, essay rows are left NULL)
    - has_essay: whether the quiz contains an essay question, in which case
      the submission must wait for a teacher

    Answers that cannot be used (unknown question ids, null or non-string
    values) are logged and skipped rather than failing the submission.
    """
    question_map: Dict[UUID, QuizQuestion] = {q.id: q for q in questions}
    result = EvaluationResult(
        auto_score=0.0,
        has_essay=any(q.question_type == QuestionType.ESSAY for q in questions),
    )

    answered = set()
    for raw_key, raw_answer in answers_payload.items():
        try:
            question_id = UUID(str(raw_key))
        except ValueError:
            logger.warning(f"Skipping answer with malformed question id {raw_key!r}")
            continue

        question = question_map.get(question_id)
        if question is None:
            logger.warning(f"Skipping answer for question {question_id} which is not part of this quiz")
            continue

        if question_id in answered:
            logger.warning(f"Skipping repeated answer for question {question_id}")
            continue

        if raw_answer is None:
            continue

        if not isinstance(raw_answer, str):
            logger.warning(
                f"Skipping non-text answer for question {question_id}: {type(raw_answer).__name__}"
            )
            continue

        answered.add(question_id)
        if question.question_type == QuestionType.MULTIPLE_CHOICE:
            correct = is_correct_choice(raw_answer, question.correct_answer)
            points = float(question.points) if correct else 0.0
            result.auto_score += points
            result.answer_rows.append(
                QuizAnswer(
                    question_id=question.id,
                    answer=raw_answer,
                    is_correct=correct,
                    points_awarded=points,
                )
            )
        else:
            result.answer_rows.append(
                QuizAnswer(
                    question_id=question.id,
                    answer=raw_answer,
                    is_correct=None,
                    points_awarded=None,
                )
            )

    return result
