from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import selectinload
from typing import List
from uuid import UUID

from app.database import get_db
from app.models import Quiz, User, UserRole
from app.auth.dependencies import get_current_user
from app.auth.course_access import check_course_access
from app.schemas.quiz import QuizDetailView
from app.helpers.quiz_serializers import quiz_to_view

router = APIRouter(tags=["Quiz Endpoints"])


def _reveal_answers(course, current_user: User) -> bool:
    return current_user.role == UserRole.ADMIN or course.instructor_id == current_user.id


@router.get(
    "/courses/{course_id}/quizzes",
    response_model=List[QuizDetailView],
)
async def list_course_quizzes(
    course_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    # --------------------------
    # Access control
    # --------------------------
    course = await check_course_access(course_id, current_user, db)

    # --------------------------
    # Fetch quizzes + questions (creation order)
    # --------------------------
    result = await db.execute(
        select(Quiz)
        .options(selectinload(Quiz.questions))
        .where(Quiz.course_id == course.id)
        .order_by(Quiz.position, Quiz.created_at)
    )
    quizzes = result.scalars().all()

    reveal = _reveal_answers(course, current_user)
    return [quiz_to_view(quiz, reveal_answers=reveal) for quiz in quizzes]


@router.get(
    "/quizzes/{quiz_id}",
    response_model=QuizDetailView,
)
async def get_quiz(
    quiz_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(Quiz)
        .options(selectinload(Quiz.questions))
        .where(Quiz.id == quiz_id)
    )
    quiz = result.scalar_one_or_none()

    if not quiz:
        raise HTTPException(404, "Quiz not found")

    course = await check_course_access(quiz.course_id, current_user, db)

    return quiz_to_view(quiz, reveal_answers=_reveal_answers(course, current_user))
