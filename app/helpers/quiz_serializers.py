from typing import Dict, List, Optional
from uuid import UUID

from app.models import Quiz, QuizAnswer, QuizQuestion, QuizSubmission
from app.schemas.quiz import QuizDetailView, QuizQuestionView
from app.schemas.quiz_submission import AnswerDetailView, StudentQuizResult
from app.helpers.score_calculator import calculate_percentage


def quiz_to_view(quiz: Quiz, reveal_answers: bool) -> QuizDetailView:
    """Students get the questions without the correct answers or essay keys."""
    return QuizDetailView(
        id=quiz.id,
        course_id=quiz.course_id,
        title=quiz.title,
        description=quiz.description,
        quiz_type=quiz.quiz_type,
        pdf_file_path=quiz.pdf_file_path,
        time_limit=quiz.time_limit,
        total_points=quiz.total_points,
        is_active=quiz.is_active,
        due_date=quiz.due_date,
        created_at=quiz.created_at,
        updated_at=quiz.updated_at,
        questions=[
            QuizQuestionView(
                id=q.id,
                question_type=q.question_type,
                points=q.points,
                question=q.question,
                options=q.options,
                correct_answer=q.correct_answer if reveal_answers else None,
                essay_answer_key=q.essay_answer_key if reveal_answers else None,
            )
            for q in quiz.questions
        ],
    )


def answer_detail_view(
    question: QuizQuestion,
    answer: Optional[QuizAnswer],
    reveal_answers: bool,
) -> AnswerDetailView:
    return AnswerDetailView(
        question_id=question.id,
        question_text=question.question,
        question_type=question.question_type,
        points=question.points,
        student_answer=answer.answer if answer else None,
        options=question.options,
        correct_answer=question.correct_answer if reveal_answers else None,
        essay_answer_key=question.essay_answer_key if reveal_answers else None,
        is_correct=answer.is_correct if answer else None,
        points_awarded=answer.points_awarded if answer else None,
    )


def answer_details_for(
    submission: QuizSubmission,
    reveal_answers: bool,
    include_unanswered: bool = False,
) -> List[AnswerDetailView]:
    """Walks the quiz questions in order and pairs each with the stored answer row."""
    answer_map: Dict[UUID, QuizAnswer] = {a.question_id: a for a in submission.answer_details}

    details = []
    for question in submission.quiz.questions:
        answer = answer_map.get(question.id)
        if answer is None and not include_unanswered:
            continue
        details.append(answer_detail_view(question, answer, reveal_answers))
    return details


def student_result(submission: QuizSubmission) -> StudentQuizResult:
    quiz = submission.quiz
    return StudentQuizResult(
        submission_id=submission.id,
        quiz_id=quiz.id,
        quiz_title=quiz.title,
        course_id=quiz.course_id,
        course_name=quiz.course.name,
        submission_type=submission.submission_type,
        score=submission.score,
        total_points=submission.total_points,
        percentage=calculate_percentage(submission.score, submission.total_points),
        is_graded=submission.is_graded,
        submitted_at=submission.submitted_at,
        graded_at=submission.graded_at,
        feedback=submission.feedback,
    )
