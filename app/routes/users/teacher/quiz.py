from fastapi import APIRouter, Depends, HTTPException, UploadFile, File
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload
from sqlalchemy import func
from typing import List
from uuid import UUID

from app.database import get_db, commit_or_500
from app.auth.dependencies import is_teacher
from app.auth.course_access import ensure_course_owner, ensure_quiz_owner
from app.helpers.file_paths import QUIZ_PDF_DIR, save_upload
from app.logging_config import get_logger
from app.models import Quiz, QuizQuestion, QuizSubmission, QuizType, User
from app.schemas.quiz import (
    QuizCreate, QuizCreateResponse, QuizUpdate, QuizQuestionCreate, PDFUploadResponse,
    resolve_total_points,
)

logger = get_logger("routes.teacher.quiz")

router = APIRouter(tags=["Teacher Quiz Endpoints"])


def build_questions(questions_in: List[QuizQuestionCreate]) -> List[QuizQuestion]:
    return [
        QuizQuestion(
            question_type=q.question_type,
            points=q.points,
            question=q.question,
            option_a=q.option_a or None,
            option_b=q.option_b or None,
            option_c=q.option_c or None,
            option_d=q.option_d or None,
            correct_answer=q.correct_answer,
            essay_answer_key=q.essay_answer_key or None,
            position=position,
        )
        for position, q in enumerate(questions_in)
    ]


async def count_submissions(quiz_id: UUID, db: AsyncSession) -> int:
    result = await db.execute(
        select(func.count(QuizSubmission.id)).where(QuizSubmission.quiz_id == quiz_id)
    )
    return result.scalar() or 0


@router.post(
    "/courses/{course_id}/quizzes",
    response_model=QuizCreateResponse,
    status_code=201
)
async def create_quiz(
    course_id: UUID,
    quiz_in: QuizCreate,
    current_user: User = Depends(is_teacher),
    db: AsyncSession = Depends(get_db),
):
    # --------------------------
    # Ownership check
    # --------------------------
    course = await ensure_course_owner(course_id, current_user, db)

    result = await db.execute(
        select(func.coalesce(func.max(Quiz.position), -1) + 1).where(Quiz.course_id == course.id)
    )
    position = result.scalar()

    # --------------------------
    # Quiz + questions in one transaction
    # --------------------------
    quiz = Quiz(
        course_id=course.id,
        title=quiz_in.title,
        description=quiz_in.description,
        quiz_type=quiz_in.quiz_type,
        pdf_file_path=quiz_in.pdf_file_path or None,
        time_limit=quiz_in.time_limit,
        total_points=quiz_in.total_points,
        is_active=quiz_in.is_active,
        due_date=quiz_in.due_date,
        position=position,
        questions=build_questions(quiz_in.questions),
    )
    db.add(quiz)
    await commit_or_500(db, "create quiz")

    logger.info(
        f"Teacher {current_user.id} created quiz {quiz.id} in course {course.id} "
        f"with {len(quiz_in.questions)} questions"
    )

    return QuizCreateResponse(
        id=quiz.id,
        title=quiz.title,
        quiz_type=quiz.quiz_type,
        total_points=quiz.total_points,
        question_count=len(quiz_in.questions),
    )


@router.put(
    "/quizzes/{quiz_id}",
    response_model=QuizCreateResponse,
)
async def update_quiz(
    quiz_id: UUID,
    quiz_in: QuizUpdate,
    current_user: User = Depends(is_teacher),
    db: AsyncSession = Depends(get_db),
):
    # --------------------------
    # Fetch quiz + ownership check
    # --------------------------
    result = await db.execute(
        select(Quiz)
        .options(selectinload(Quiz.questions))
        .where(Quiz.id == quiz_id)
    )
    quiz = result.scalar_one_or_none()

    if not quiz:
        raise HTTPException(404, "Quiz not found")

    await ensure_quiz_owner(quiz, current_user, db)

    # --------------------------
    # Validate before touching the row
    # --------------------------
    fields = quiz_in.model_dump(exclude_unset=True, exclude={"questions"})
    for required in ("title", "is_active"):
        if required in fields and fields[required] is None:
            raise HTTPException(400, f"{required} cannot be null")

    requested_total = fields.pop("total_points", None)

    if quiz_in.questions is not None:
        if await count_submissions(quiz.id, db):
            raise HTTPException(409, "Cannot change questions after students have submitted")
        if quiz.quiz_type == QuizType.PDF and quiz_in.questions:
            raise HTTPException(400, "PDF quizzes cannot contain questions")

    questions_for_total = quiz_in.questions if quiz_in.questions is not None else quiz.questions
    new_total = requested_total
    # a supplied question list, even an empty one, always re-derives the total
    if quiz.quiz_type == QuizType.INTERACTIVE and (quiz_in.questions is not None or questions_for_total):
        try:
            new_total = resolve_total_points(quiz.quiz_type, requested_total, questions_for_total)
        except ValueError as e:
            raise HTTPException(400, str(e))

    # --------------------------
    # Apply changes
    # --------------------------
    for key, value in fields.items():
        setattr(quiz, key, value)
    if new_total is not None:
        quiz.total_points = new_total
    if quiz_in.questions is not None:
        # delete-orphan removes the previous questions on flush
        quiz.questions = build_questions(quiz_in.questions)

    await commit_or_500(db, "update quiz")
    logger.info(f"Teacher {current_user.id} updated quiz {quiz.id}")

    return QuizCreateResponse(
        id=quiz.id,
        title=quiz.title,
        quiz_type=quiz.quiz_type,
        total_points=quiz.total_points,
        question_count=len(quiz.questions),
    )


@router.delete(
    "/quizzes/{quiz_id}",
    status_code=204
)
async def delete_quiz(
    quiz_id: UUID,
    current_user: User = Depends(is_teacher),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(Quiz)
        .options(selectinload(Quiz.questions), selectinload(Quiz.submissions))
        .where(Quiz.id == quiz_id)
    )
    quiz = result.scalar_one_or_none()

    if not quiz:
        raise HTTPException(404, "Quiz not found")

    await ensure_quiz_owner(quiz, current_user, db)

    # --------------------------
    # Grading history must survive
    # --------------------------
    if quiz.submissions:
        raise HTTPException(409, "Cannot delete quiz after students have submitted")

    await db.delete(quiz)
    await commit_or_500(db, "delete quiz")
    logger.info(f"Teacher {current_user.id} deleted quiz {quiz_id}")

    return None


@router.post(
    "/quizzes/upload-pdf",
    response_model=PDFUploadResponse,
)
async def upload_quiz_pdf(
    file: UploadFile = File(...),
    current_user: User = Depends(is_teacher),
):
    if not (file.filename or "").lower().endswith(".pdf"):
        raise HTTPException(400, "Only PDF files are allowed")

    file_path = await save_upload(file, QUIZ_PDF_DIR, "/uploads/quiz-pdfs", current_user.id)
    logger.info(f"Teacher {current_user.id} uploaded quiz PDF {file_path}")

    return PDFUploadResponse(file_path=file_path, message="PDF uploaded successfully")
