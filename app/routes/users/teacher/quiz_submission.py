from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import select
from sqlalchemy.orm import selectinload
from datetime import datetime
from typing import List
from uuid import UUID

from app.database import get_db, commit_or_500
from app.auth.dependencies import is_teacher
from app.auth.course_access import ensure_quiz_owner
from app.helpers.quiz_serializers import answer_details_for
from app.helpers.score_calculator import recompute_submission_score, calculate_percentage
from app.logging_config import get_logger
from app.models import Quiz, QuizAnswer, QuizSubmission, SubmissionType, User
from app.schemas.quiz_submission import (
    QuizSubmissionView, GradeSubmissionRequest, GradeSubmissionResponse,
)

logger = get_logger("routes.teacher.quiz_submission")

router = APIRouter(tags=["Teacher Quiz Submission Endpoints"])


@router.get(
    "/quizzes/{quiz_id}/submissions",
    response_model=List[QuizSubmissionView],
)
async def list_quiz_submissions(
    quiz_id: UUID,
    current_user: User = Depends(is_teacher),
    db: AsyncSession = Depends(get_db),
):
    # --------------------------
    # Fetch quiz + ownership check
    # --------------------------
    result = await db.execute(select(Quiz).where(Quiz.id == quiz_id))
    quiz = result.scalar_one_or_none()

    if not quiz:
        raise HTTPException(404, "Quiz not found")

    await ensure_quiz_owner(quiz, current_user, db)

    # --------------------------
    # Fetch submissions (newest first)
    # --------------------------
    result = await db.execute(
        select(QuizSubmission)
        .options(
            selectinload(QuizSubmission.student),
            selectinload(QuizSubmission.answer_details),
            selectinload(QuizSubmission.quiz).selectinload(Quiz.questions),
        )
        .where(QuizSubmission.quiz_id == quiz.id)
        .order_by(QuizSubmission.submitted_at.desc())
    )
    submissions = result.scalars().all()

    return [
        QuizSubmissionView(
            submission_id=sub.id,
            quiz_id=sub.quiz_id,
            student_id=sub.student_id,
            student_name=sub.student.name,
            student_roll_number=sub.student.roll_number,
            submission_type=sub.submission_type,
            answers=sub.answers,
            uploaded_file_path=sub.uploaded_file_path,
            score=sub.score,
            total_points=sub.total_points,
            percentage=calculate_percentage(sub.score, sub.total_points),
            is_graded=sub.is_graded,
            submitted_at=sub.submitted_at,
            graded_at=sub.graded_at,
            graded_by=sub.graded_by,
            feedback=sub.feedback,
            answer_details=answer_details_for(sub, reveal_answers=True),
        )
        for sub in submissions
    ]


@router.post(
    "/quiz-submissions/grade",
    response_model=GradeSubmissionResponse,
)
async def grade_submission(
    payload: GradeSubmissionRequest,
    current_user: User = Depends(is_teacher),
    db: AsyncSession = Depends(get_db),
):
    # --------------------------
    # Lock the submission row; concurrent graders queue here
    # --------------------------
    result = await db.execute(
        select(QuizSubmission)
        .options(selectinload(QuizSubmission.quiz).selectinload(Quiz.questions))
        .where(QuizSubmission.id == payload.submission_id)
        .with_for_update()
    )
    submission = result.scalar_one_or_none()

    if not submission:
        raise HTTPException(404, "Submission not found")

    await ensure_quiz_owner(submission.quiz, current_user, db)

    result = await db.execute(
        select(QuizAnswer).where(QuizAnswer.submission_id == submission.id)
    )
    answer_map = {a.question_id: a for a in result.scalars().all()}
    question_map = {q.id: q for q in submission.quiz.questions}

    # --------------------------
    # Validate every grade before writing any
    # --------------------------
    for grade in payload.grades:
        question = question_map.get(grade.question_id)
        if question is None:
            raise HTTPException(400, f"Question {grade.question_id} does not belong to this quiz")
        if grade.points_awarded > question.points:
            raise HTTPException(
                400,
                f"Question {grade.question_id} is worth at most {question.points} points"
            )
        if grade.question_id not in answer_map:
            raise HTTPException(400, f"Question {grade.question_id} was not answered in this submission")

    is_pdf = submission.submission_type == SubmissionType.PDF_UPLOAD
    if is_pdf:
        if payload.score is None:
            raise HTTPException(400, "score is required when grading a PDF submission")
        if payload.score > submission.total_points:
            raise HTTPException(400, f"score cannot exceed {submission.total_points}")

    # --------------------------
    # Apply grades, then re-derive the total from every answer row
    # --------------------------
    try:
        for grade in payload.grades:
            row = answer_map[grade.question_id]
            row.points_awarded = grade.points_awarded
            row.is_correct = grade.points_awarded > 0
        await db.flush()

        if is_pdf:
            score = float(payload.score)
        else:
            score = await recompute_submission_score(submission.id, db)
    except SQLAlchemyError:
        await db.rollback()
        logger.exception(f"Database error while grading submission {submission.id}")
        raise HTTPException(500, "Server error")

    submission.score = score
    submission.graded_at = datetime.utcnow()
    submission.graded_by = current_user.id
    if payload.feedback is not None:
        submission.feedback = payload.feedback

    await commit_or_500(db, f"grade submission {submission.id}")

    logger.info(
        f"Teacher {current_user.id} graded submission {submission.id}: "
        f"{len(payload.grades)} grades applied, score={score}/{submission.total_points}"
    )

    return GradeSubmissionResponse(
        submission_id=submission.id,
        score=score,
        total_points=submission.total_points,
        percentage=calculate_percentage(score, submission.total_points),
        graded_at=submission.graded_at,
        graded_by=current_user.id,
    )
