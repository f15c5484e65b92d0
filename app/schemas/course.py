from pydantic import BaseModel, Field
from typing import Optional
from uuid import UUID


class CourseCreate(BaseModel):
    code: str = Field(min_length=1)
    name: str = Field(min_length=1)
    description: Optional[str] = None


class CourseCreateResponse(BaseModel):
    message: str
    course_id: UUID


class EnrollmentResponse(BaseModel):
    message: str
    course_id: UUID
    student_id: UUID
