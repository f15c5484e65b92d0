import uuid
import enum
from datetime import datetime
from sqlalchemy import (
    Column, String, Boolean, DateTime, Integer, Float, Enum, ForeignKey, Table, Text, JSON, UniqueConstraint
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from app.database import Base


# ---------------------------
# Enums
# ---------------------------
class UserRole(str, enum.Enum):
    ADMIN = "admin"
    STUDENT = "student"
    TEACHER = "teacher"


class QuizType(str, enum.Enum):
    INTERACTIVE = "interactive"
    PDF = "pdf"


class QuestionType(str, enum.Enum):
    MULTIPLE_CHOICE = "multiple_choice"
    ESSAY = "essay"


class SubmissionType(str, enum.Enum):
    INTERACTIVE = "interactive"
    PDF_UPLOAD = "pdf_upload"


# ---------------------------
# User Model
# ---------------------------
class User(Base):
    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    role = Column(Enum(UserRole, name="user_role_enum"), nullable=False)
    name = Column(String(255), nullable=False)
    roll_number = Column(String(50), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    last_login = Column(DateTime, nullable=True)


# ---------------------------
# Course Model
# ---------------------------
class Course(Base):
    __tablename__ = "courses"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    code = Column(String(50), unique=True, nullable=False)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    instructor_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    instructor = relationship("User", backref="courses_taught")

    students = relationship(
        "User",
        secondary="course_students",
        backref="enrolled_courses"
    )

    quizzes = relationship("Quiz", back_populates="course", cascade="all, delete-orphan")


# ---------------------------
# Association Table
# ---------------------------
course_students = Table(
    "course_students",
    Base.metadata,
    Column("course_id", UUID(as_uuid=True), ForeignKey("courses.id"), primary_key=True),
    Column("student_id", UUID(as_uuid=True), ForeignKey("users.id"), primary_key=True),
)


# ---------------------------
# Quiz Model
# ---------------------------
class Quiz(Base):
    __tablename__ = "quizzes"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    course_id = Column(UUID(as_uuid=True), ForeignKey("courses.id"), nullable=False)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    quiz_type = Column(Enum(QuizType, name="quiz_type_enum"), nullable=False, default=QuizType.INTERACTIVE)
    pdf_file_path = Column(String(255), nullable=True)
    time_limit = Column(Integer, nullable=True)  # minutes
    total_points = Column(Integer, nullable=False, default=100)
    is_active = Column(Boolean, nullable=False, default=True)
    due_date = Column(DateTime(timezone=True), nullable=True)
    position = Column(Integer, nullable=False, default=0)  # creation ordinal within the course

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    course = relationship("Course", back_populates="quizzes")
    questions = relationship(
        "QuizQuestion",
        back_populates="quiz",
        cascade="all, delete-orphan",
        order_by="QuizQuestion.position",
    )
    submissions = relationship("QuizSubmission", back_populates="quiz", cascade="all, delete-orphan")


class QuizQuestion(Base):
    __tablename__ = "quiz_questions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    quiz_id = Column(UUID(as_uuid=True), ForeignKey("quizzes.id"), nullable=False)

    question_type = Column(
        Enum(QuestionType, name="question_type_enum"),
        nullable=False,
        default=QuestionType.MULTIPLE_CHOICE,
    )
    points = Column(Integer, nullable=False, default=10)
    question = Column(Text, nullable=False)

    option_a = Column(String(255), nullable=True)
    option_b = Column(String(255), nullable=True)
    option_c = Column(String(255), nullable=True)
    option_d = Column(String(255), nullable=True)
    correct_answer = Column(String(1), nullable=True)  # A-D, multiple choice only
    essay_answer_key = Column(Text, nullable=True)

    position = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)

    quiz = relationship("Quiz", back_populates="questions")

    @property
    def options(self):
        if self.question_type != QuestionType.MULTIPLE_CHOICE:
            return None
        return {
            "A": self.option_a,
            "B": self.option_b,
            "C": self.option_c,
            "D": self.option_d,
        }


class QuizSubmission(Base):
    __tablename__ = "quiz_submissions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    quiz_id = Column(UUID(as_uuid=True), ForeignKey("quizzes.id"), nullable=False)
    student_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False)

    submission_type = Column(
        Enum(SubmissionType, name="submission_type_enum"),
        nullable=False,
        default=SubmissionType.INTERACTIVE,
    )
    answers = Column(JSON, nullable=True)
    uploaded_file_path = Column(String(255), nullable=True)

    # NULL until every answer has been graded
    score = Column(Float, nullable=True)
    total_points = Column(Integer, nullable=False)

    submitted_at = Column(DateTime, default=datetime.utcnow)
    graded_at = Column(DateTime, nullable=True)
    graded_by = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=True)
    feedback = Column(Text, nullable=True)

    quiz = relationship("Quiz", back_populates="submissions")
    student = relationship("User", foreign_keys=[student_id])
    grader = relationship("User", foreign_keys=[graded_by])
    answer_details = relationship("QuizAnswer", back_populates="submission", cascade="all, delete-orphan")

    __table_args__ = (
        UniqueConstraint("quiz_id", "student_id", name="unique_quiz_submission"),
    )

    @property
    def is_graded(self) -> bool:
        return self.score is not None and self.graded_at is not None


class QuizAnswer(Base):
    __tablename__ = "quiz_answers"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    submission_id = Column(UUID(as_uuid=True), ForeignKey("quiz_submissions.id"), nullable=False)
    question_id = Column(UUID(as_uuid=True), ForeignKey("quiz_questions.id"), nullable=False)

    answer = Column(Text, nullable=False)
    is_correct = Column(Boolean, nullable=True)
    points_awarded = Column(Float, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)

    submission = relationship("QuizSubmission", back_populates="answer_details")
    question = relationship("QuizQuestion")

    __table_args__ = (
        UniqueConstraint("submission_id", "question_id", name="unique_quiz_answer"),
    )
