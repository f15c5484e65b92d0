from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from app.database import get_db, commit_or_500
from app.logging_config import get_logger
from app.models import Course, User, course_students
from app.auth.dependencies import is_student
from app.auth.course_access import is_student_enrolled
from app.schemas.course import EnrollmentResponse

logger = get_logger("routes.student.course")

router = APIRouter(
    prefix="/student/course",
    tags=["Student Course Endpoints"]
)


@router.post("/enroll-course/{course_id}", response_model=EnrollmentResponse)
async def enroll_student(
    course_id: UUID,
    current_user: User = Depends(is_student),
    db: AsyncSession = Depends(get_db)
):
    """
    Enroll a student into a course.
    Only STUDENTS can enroll.
    """

    # 1. Check if course exists
    result = await db.execute(select(Course).where(Course.id == course_id))
    course = result.scalar_one_or_none()

    if not course:
        raise HTTPException(status_code=404, detail="Course not found")

    # 2. Check if already enrolled
    if await is_student_enrolled(course.id, current_user.id, db):
        raise HTTPException(409, "Already enrolled in this course")

    # 3. Insert enrollment
    await db.execute(
        course_students.insert().values(
            course_id=course.id,
            student_id=current_user.id
        )
    )

    await commit_or_500(db, "enroll student")
    logger.info(f"Student {current_user.id} enrolled in course {course.id}")

    return EnrollmentResponse(
        message="Enrolled successfully",
        course_id=course.id,
        student_id=current_user.id
    )
