from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
from uuid import UUID
from datetime import datetime

from app.models import QuestionType, SubmissionType

#for students
class QuizSubmitRequest(BaseModel):
    quiz_id: UUID
    answers: Dict[str, Any] = {}


class QuizSubmitResponse(BaseModel):
    submission_id: UUID
    quiz_id: UUID
    submission_type: SubmissionType
    score: Optional[float]
    total_points: int
    auto_graded: bool
    uploaded_file_path: Optional[str] = None


class SubmissionCheckResponse(BaseModel):
    quiz_id: UUID
    has_submitted: bool
    submission_id: Optional[UUID] = None


class AnswerDetailView(BaseModel):
    question_id: UUID
    question_text: str
    question_type: QuestionType
    points: int
    student_answer: Optional[str]
    options: Optional[Dict[str, Optional[str]]] = None
    correct_answer: Optional[str] = None
    essay_answer_key: Optional[str] = None
    is_correct: Optional[bool] = None
    points_awarded: Optional[float] = None


class StudentQuizResult(BaseModel):
    submission_id: UUID
    quiz_id: UUID
    quiz_title: str
    course_id: UUID
    course_name: str
    submission_type: SubmissionType
    score: Optional[float]
    total_points: int
    percentage: Optional[float]
    is_graded: bool
    submitted_at: datetime
    graded_at: Optional[datetime]
    feedback: Optional[str]


class StudentQuizResultDetail(StudentQuizResult):
    uploaded_file_path: Optional[str]
    questions: List[AnswerDetailView]


#for teachers
class QuizSubmissionView(BaseModel):
    submission_id: UUID
    quiz_id: UUID
    student_id: UUID
    student_name: str
    student_roll_number: Optional[str]
    submission_type: SubmissionType
    answers: Optional[Dict[str, Any]]
    uploaded_file_path: Optional[str]
    score: Optional[float]
    total_points: int
    percentage: Optional[float]
    is_graded: bool
    submitted_at: datetime
    graded_at: Optional[datetime]
    graded_by: Optional[UUID]
    feedback: Optional[str]
    answer_details: List[AnswerDetailView]


class QuestionGrade(BaseModel):
    question_id: UUID
    points_awarded: float = Field(ge=0)


class GradeSubmissionRequest(BaseModel):
    submission_id: UUID
    grades: List[QuestionGrade] = []
    feedback: Optional[str] = None
    # whole-submission score, only for PDF uploads
    score: Optional[float] = Field(default=None, ge=0)


class GradeSubmissionResponse(BaseModel):
    submission_id: UUID
    score: float
    total_points: int
    percentage: Optional[float]
    graded_at: datetime
    graded_by: UUID
