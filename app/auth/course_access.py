from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from app.models import Course, Quiz, course_students, User, UserRole


async def is_student_enrolled(course_id: UUID, student_id: UUID, db: AsyncSession) -> bool:
    result = await db.execute(
        select(course_students).where(
            course_students.c.course_id == course_id,
            course_students.c.student_id == student_id,
        )
    )
    return result.first() is not None


async def check_course_access(course_id: UUID, current_user: User, db: AsyncSession) -> Course:
    """Allows access to the course instructor, an enrolled student, or an admin."""

    result = await db.execute(select(Course).where(Course.id == course_id))
    course = result.scalar_one_or_none()

    if not course:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Course not found")

    if current_user.role == UserRole.ADMIN or course.instructor_id == current_user.id:
        return course

    if current_user.role == UserRole.STUDENT and await is_student_enrolled(course.id, current_user.id, db):
        return course

    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="You don't have access to this course."
    )


async def ensure_student_enrolled(course_id: UUID, student_id: UUID, db: AsyncSession):
    if not await is_student_enrolled(course_id, student_id, db):
        raise HTTPException(status.HTTP_403_FORBIDDEN, "You are not enrolled in this course")


async def ensure_course_owner(course_id: UUID, teacher: User, db: AsyncSession) -> Course:
    result = await db.execute(select(Course).where(Course.id == course_id))
    course = result.scalar_one_or_none()

    if not course:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Course not found")

    if course.instructor_id != teacher.id:
        raise HTTPException(
            status.HTTP_403_FORBIDDEN,
            "You don't have permission to manage quizzes for this course"
        )
    return course


async def ensure_quiz_owner(quiz: Quiz, teacher: User, db: AsyncSession) -> Course:
    """Ownership runs through the course: teacher owns course owns quiz."""
    return await ensure_course_owner(quiz.course_id, teacher, db)
