from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy.future import select

from app.database import get_db
from app.logging_config import get_logger
from app.models import Course, User
from app.schemas.course import CourseCreate, CourseCreateResponse
from app.auth.dependencies import is_teacher

logger = get_logger("routes.teacher.course")

router = APIRouter(
    prefix="/teacher/course",
    tags=["Teacher Course Endpoints"]
    )


@router.post("/create-course", response_model=CourseCreateResponse, status_code=201)
async def create_course(
    course_in: CourseCreate,
    current_user: User = Depends(is_teacher),
    db: AsyncSession = Depends(get_db),
):
    existing = await db.execute(
        select(Course).where(Course.code == course_in.code)
    )
    if existing.scalars().first():
        raise HTTPException(400, "Course code already exists")

    # --------------------------
    # Create course
    # --------------------------
    new_course = Course(
        code=course_in.code,
        name=course_in.name,
        description=course_in.description,
        instructor_id=current_user.id,
    )
    db.add(new_course)

    try:
        await db.commit()
    except IntegrityError:
        # lost a race with another create for the same code
        await db.rollback()
        raise HTTPException(400, "Course code already exists")

    logger.info(f"Teacher {current_user.id} created course {new_course.id} ({new_course.code})")

    return CourseCreateResponse(
        message="Course created successfully",
        course_id=new_course.id,
    )
