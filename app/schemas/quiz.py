from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List, Dict
from datetime import datetime
from uuid import UUID

from app.models import QuizType, QuestionType
from app.helpers.due_date_parser import parse_due_date

CHOICE_LETTERS = ("A", "B", "C", "D")


class QuizQuestionCreate(BaseModel):
    question_type: QuestionType = QuestionType.MULTIPLE_CHOICE
    points: int = Field(default=10, ge=0)
    question: str = Field(min_length=1)
    option_a: Optional[str] = None
    option_b: Optional[str] = None
    option_c: Optional[str] = None
    option_d: Optional[str] = None
    correct_answer: Optional[str] = None
    essay_answer_key: Optional[str] = None

    @field_validator("correct_answer", mode="before")
    @classmethod
    def normalize_correct_answer(cls, value):
        if value is None:
            return None
        value = str(value).strip().upper()
        return value or None

    @model_validator(mode="after")
    def check_answer_shape(self):
        if self.question_type == QuestionType.MULTIPLE_CHOICE:
            if self.correct_answer not in CHOICE_LETTERS:
                raise ValueError(
                    f"Question '{self.question}' needs a correct_answer between A and D"
                )
            option_text = getattr(self, f"option_{self.correct_answer.lower()}")
            if not option_text:
                raise ValueError(
                    f"Question '{self.question}' marks option {self.correct_answer} as correct but it is empty"
                )
        else:
            self.correct_answer = None
        return self


def resolve_total_points(
    quiz_type: QuizType,
    total_points: Optional[int],
    questions: Optional[List[QuizQuestionCreate]],
) -> int:
    """Interactive quizzes are worth exactly the sum of their questions."""
    if quiz_type == QuizType.INTERACTIVE and questions:
        question_sum = sum(q.points for q in questions)
        if total_points is not None and total_points != question_sum:
            raise ValueError(
                f"total_points ({total_points}) must equal the sum of question points ({question_sum})"
            )
        return question_sum
    return total_points if total_points is not None else 100


class QuizCreate(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    quiz_type: QuizType = QuizType.INTERACTIVE
    pdf_file_path: Optional[str] = None
    time_limit: Optional[int] = Field(default=None, gt=0)
    total_points: Optional[int] = Field(default=None, ge=0)
    is_active: bool = True
    due_date: Optional[datetime] = None
    questions: List[QuizQuestionCreate] = []

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due(cls, value):
        return parse_due_date(value)

    @model_validator(mode="after")
    def check_quiz_shape(self):
        if self.quiz_type == QuizType.PDF and self.questions:
            raise ValueError("PDF quizzes cannot contain questions")
        self.total_points = resolve_total_points(self.quiz_type, self.total_points, self.questions)
        return self


class QuizUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    pdf_file_path: Optional[str] = None
    time_limit: Optional[int] = Field(default=None, gt=0)
    total_points: Optional[int] = Field(default=None, ge=0)
    is_active: Optional[bool] = None
    due_date: Optional[datetime] = None
    questions: Optional[List[QuizQuestionCreate]] = None

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due(cls, value):
        return parse_due_date(value)


class QuizCreateResponse(BaseModel):
    id: UUID
    title: str
    quiz_type: QuizType
    total_points: int
    question_count: int


class PDFUploadResponse(BaseModel):
    file_path: str
    message: str


#Listing quizzes and their questions

class QuizQuestionView(BaseModel):
    id: UUID
    question_type: QuestionType
    points: int
    question: str
    options: Optional[Dict[str, Optional[str]]] = None
    correct_answer: Optional[str] = None
    essay_answer_key: Optional[str] = None


class QuizDetailView(BaseModel):
    id: UUID
    course_id: UUID
    title: str
    description: Optional[str]
    quiz_type: QuizType
    pdf_file_path: Optional[str]
    time_limit: Optional[int]
    total_points: int
    is_active: bool
    due_date: Optional[datetime]
    created_at: datetime
    updated_at: datetime
    questions: List[QuizQuestionView]
