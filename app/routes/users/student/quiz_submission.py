from fastapi import APIRouter, Depends, HTTPException, UploadFile, File, Form
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload
from datetime import datetime
from typing import List
from uuid import UUID

from app.database import get_db
from app.auth.dependencies import is_student
from app.auth.course_access import ensure_student_enrolled
from app.helpers.due_date_parser import is_past_due
from app.helpers.file_paths import QUIZ_ANSWER_DIR, save_upload, delete_upload_safely
from app.helpers.quiz_answer_evaluator import evaluate_quiz_answers
from app.helpers.quiz_serializers import answer_details_for, student_result
from app.logging_config import get_logger
from app.models import Quiz, QuizSubmission, QuizType, SubmissionType, User
from app.schemas.quiz_submission import (
    QuizSubmitRequest, QuizSubmitResponse, SubmissionCheckResponse,
    StudentQuizResult, StudentQuizResultDetail,
)

logger = get_logger("routes.student.quiz_submission")

router = APIRouter(tags=["Student Quiz Submission Endpoints"])

ACCEPTED_SUBMISSION = {
    QuizType.INTERACTIVE: SubmissionType.INTERACTIVE,
    QuizType.PDF: SubmissionType.PDF_UPLOAD,
}


async def load_quiz_for_submission(
    quiz_id: UUID,
    submission_type: SubmissionType,
    student: User,
    db: AsyncSession,
) -> Quiz:
    """Every check that must pass before a submission row may be written."""
    result = await db.execute(
        select(Quiz)
        .options(selectinload(Quiz.questions))
        .where(Quiz.id == quiz_id)
    )
    quiz = result.scalar_one_or_none()

    if not quiz:
        raise HTTPException(404, "Quiz not found")

    await ensure_student_enrolled(quiz.course_id, student.id, db)

    if not quiz.is_active:
        raise HTTPException(400, "This quiz is not accepting submissions")

    if is_past_due(quiz.due_date):
        raise HTTPException(400, "Deadline has passed")

    if ACCEPTED_SUBMISSION[quiz.quiz_type] != submission_type:
        raise HTTPException(
            400,
            f"This quiz only accepts {ACCEPTED_SUBMISSION[quiz.quiz_type].value} submissions"
        )

    if await find_submission(quiz.id, student.id, db):
        raise HTTPException(409, "You have already submitted this quiz")

    return quiz


async def find_submission(quiz_id: UUID, student_id: UUID, db: AsyncSession):
    result = await db.execute(
        select(QuizSubmission).where(
            QuizSubmission.quiz_id == quiz_id,
            QuizSubmission.student_id == student_id,
        )
    )
    return result.scalar_one_or_none()


async def commit_submission(db: AsyncSession, quiz_id: UUID, student_id: UUID):
    """
    The unique (quiz_id, student_id) key settles concurrent attempts: the
    loser of the race gets a 409, never a silent overwrite.
    """
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.warning(f"Duplicate submission rejected for quiz {quiz_id} by student {student_id}")
        raise HTTPException(409, "You have already submitted this quiz")
    except SQLAlchemyError:
        await db.rollback()
        logger.exception(f"Database error while saving submission for quiz {quiz_id}")
        raise HTTPException(500, "Server error")


@router.post(
    "/quiz-submissions",
    response_model=QuizSubmitResponse,
    status_code=201,
)
async def submit_quiz(
    payload: QuizSubmitRequest,
    current_user: User = Depends(is_student),
    db: AsyncSession = Depends(get_db),
):
    quiz = await load_quiz_for_submission(payload.quiz_id, SubmissionType.INTERACTIVE, current_user, db)

    # --------------------------
    # Auto-grade multiple choice
    # --------------------------
    evaluation = evaluate_quiz_answers(quiz.questions, payload.answers)
    auto_graded = evaluation.fully_graded

    # --------------------------
    # Submission + answer rows in one transaction
    # --------------------------
    submission = QuizSubmission(
        quiz_id=quiz.id,
        student_id=current_user.id,
        submission_type=SubmissionType.INTERACTIVE,
        answers=payload.answers,
        total_points=quiz.total_points,
        score=evaluation.auto_score if auto_graded else None,
        graded_at=datetime.utcnow() if auto_graded else None,
        graded_by=None,
        answer_details=evaluation.answer_rows,
    )
    db.add(submission)
    await commit_submission(db, quiz.id, current_user.id)

    logger.info(
        f"Student {current_user.id} submitted quiz {quiz.id}: "
        f"{len(evaluation.answer_rows)} answers, auto_graded={auto_graded}, "
        f"multiple-choice score={evaluation.auto_score}"
    )

    return QuizSubmitResponse(
        submission_id=submission.id,
        quiz_id=quiz.id,
        submission_type=submission.submission_type,
        score=submission.score,
        total_points=submission.total_points,
        auto_graded=auto_graded,
    )


@router.post(
    "/quiz-submissions/pdf",
    response_model=QuizSubmitResponse,
    status_code=201,
)
async def submit_quiz_pdf(
    quiz_id: UUID = Form(...),
    file: UploadFile = File(...),
    current_user: User = Depends(is_student),
    db: AsyncSession = Depends(get_db),
):
    quiz = await load_quiz_for_submission(quiz_id, SubmissionType.PDF_UPLOAD, current_user, db)

    file_url = await save_upload(file, QUIZ_ANSWER_DIR, "/uploads/quiz-answers", current_user.id)

    # --------------------------
    # Always waits for a teacher
    # --------------------------
    submission = QuizSubmission(
        quiz_id=quiz.id,
        student_id=current_user.id,
        submission_type=SubmissionType.PDF_UPLOAD,
        uploaded_file_path=file_url,
        total_points=quiz.total_points,
        score=None,
    )
    db.add(submission)
    try:
        await commit_submission(db, quiz.id, current_user.id)
    except HTTPException:
        delete_upload_safely(file_url, QUIZ_ANSWER_DIR)
        raise

    logger.info(f"Student {current_user.id} uploaded answers for quiz {quiz.id}: {file_url}")

    return QuizSubmitResponse(
        submission_id=submission.id,
        quiz_id=quiz.id,
        submission_type=submission.submission_type,
        score=None,
        total_points=submission.total_points,
        auto_graded=False,
        uploaded_file_path=file_url,
    )


@router.get(
    "/quiz-submissions/check/{quiz_id}",
    response_model=SubmissionCheckResponse,
)
async def check_submission(
    quiz_id: UUID,
    current_user: User = Depends(is_student),
    db: AsyncSession = Depends(get_db),
):
    submission = await find_submission(quiz_id, current_user.id, db)

    return SubmissionCheckResponse(
        quiz_id=quiz_id,
        has_submitted=submission is not None,
        submission_id=submission.id if submission else None,
    )


@router.get(
    "/student/quiz-results",
    response_model=List[StudentQuizResult],
)
async def get_my_quiz_results(
    current_user: User = Depends(is_student),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(QuizSubmission)
        .options(selectinload(QuizSubmission.quiz).selectinload(Quiz.course))
        .where(QuizSubmission.student_id == current_user.id)
        .order_by(QuizSubmission.submitted_at.desc())
    )
    submissions = result.scalars().all()

    return [student_result(sub) for sub in submissions]


@router.get(
    "/student/quiz-results/{submission_id}",
    response_model=StudentQuizResultDetail,
)
async def get_my_quiz_result_detail(
    submission_id: UUID,
    current_user: User = Depends(is_student),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(QuizSubmission)
        .options(
            selectinload(QuizSubmission.quiz).selectinload(Quiz.course),
            selectinload(QuizSubmission.quiz).selectinload(Quiz.questions),
            selectinload(QuizSubmission.answer_details),
        )
        .where(QuizSubmission.id == submission_id)
    )
    submission = result.scalar_one_or_none()

    if not submission:
        raise HTTPException(404, "Submission not found")

    if submission.student_id != current_user.id:
        raise HTTPException(403, "You are not allowed to view this submission")

    summary = student_result(submission)

    # Answer keys stay hidden until the teacher has finished grading
    return StudentQuizResultDetail(
        **summary.model_dump(),
        uploaded_file_path=submission.uploaded_file_path,
        questions=answer_details_for(
            submission,
            reveal_answers=submission.is_graded,
            include_unanswered=True,
        ),
    )
