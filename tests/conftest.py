from __future__ import annotations

import os
import tempfile

# Settings are read at import time, so the environment must be ready first.
_TEST_ROOT = tempfile.mkdtemp(prefix="quiz-grading-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_TEST_ROOT, 'app.sqlite')}"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["UPLOADS_DIR"] = os.path.join(_TEST_ROOT, "uploads")

from typing import Any, AsyncGenerator, Awaitable, Callable, Dict  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from app.auth.jwt import create_access_token  # noqa: E402
from app.auth.password_security import hash_password  # noqa: E402
from app.database import Base, get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models import Course, User, UserRole, course_students  # noqa: E402


@pytest.fixture()
def test_app() -> FastAPI:
    return app


@pytest.fixture()
def test_db_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'test_quiz.sqlite'}"


@pytest_asyncio.fixture()
async def engine(test_db_url: str):
    engine = create_async_engine(test_db_url, future=True)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest_asyncio.fixture()
async def db_session(engine) -> AsyncGenerator[AsyncSession, None]:
    async_session = sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )
    async with async_session() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture()
async def client(test_app: FastAPI, db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    async def _get_test_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    test_app.dependency_overrides[get_db] = _get_test_db

    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client

    test_app.dependency_overrides.clear()


@pytest.fixture()
def upload_dirs(tmp_path, monkeypatch) -> Dict[str, Any]:
    """Points every upload route at a per-test directory."""
    from app.routes.users.student import quiz_submission as student_routes
    from app.routes.users.teacher import quiz as teacher_routes

    pdf_dir = tmp_path / "quiz-pdfs"
    answer_dir = tmp_path / "quiz-answers"
    monkeypatch.setattr(teacher_routes, "QUIZ_PDF_DIR", str(pdf_dir))
    monkeypatch.setattr(student_routes, "QUIZ_ANSWER_DIR", str(answer_dir))
    return {"pdf": pdf_dir, "answers": answer_dir}


# ---------------------------
# Seed helpers
# ---------------------------
@pytest.fixture()
def make_user(db_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    async def _make_user(role: UserRole, roll_number: str, name: str = "Test User", password: str = "secret123") -> User:
        user = User(
            role=role,
            name=name,
            roll_number=roll_number,
            password_hash=hash_password(password),
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return _make_user


@pytest_asyncio.fixture()
async def teacher(make_user) -> User:
    return await make_user(UserRole.TEACHER, "T-001", name="Grace Teacher")


@pytest_asyncio.fixture()
async def other_teacher(make_user) -> User:
    return await make_user(UserRole.TEACHER, "T-002", name="Other Teacher")


@pytest_asyncio.fixture()
async def student(make_user) -> User:
    return await make_user(UserRole.STUDENT, "S-001", name="Sam Student")


@pytest_asyncio.fixture()
async def outsider_student(make_user) -> User:
    return await make_user(UserRole.STUDENT, "S-999", name="Not Enrolled")


@pytest_asyncio.fixture()
async def course(db_session: AsyncSession, teacher: User, student: User) -> Course:
    course = Course(code="CS101", name="Intro to Computing", instructor_id=teacher.id)
    db_session.add(course)
    await db_session.flush()
    await db_session.execute(
        course_students.insert().values(course_id=course.id, student_id=student.id)
    )
    await db_session.commit()
    return course


@pytest.fixture()
def auth_headers() -> Callable[[User], Dict[str, str]]:
    def _headers(user: User) -> Dict[str, str]:
        token = create_access_token({"user_id": str(user.id), "role": user.role.value})
        return {"Authorization": f"Bearer {token}"}

    return _headers


def mc_question(text: str, correct: str, points: int = 10) -> Dict[str, Any]:
    return {
        "question_type": "multiple_choice",
        "question": text,
        "points": points,
        "option_a": "Alpha",
        "option_b": "Bravo",
        "option_c": "Charlie",
        "option_d": "Delta",
        "correct_answer": correct,
    }


def essay_question(text: str, points: int = 20) -> Dict[str, Any]:
    return {
        "question_type": "essay",
        "question": text,
        "points": points,
        "essay_answer_key": "Mentions both trade-offs",
    }


@pytest.fixture()
def question_payloads():
    return {"mc": mc_question, "essay": essay_question}


@pytest.fixture()
def create_quiz(client: AsyncClient, auth_headers, teacher: User, course: Course):
    """Creates a quiz through the API and returns the teacher's view of it."""

    async def _create_quiz(**overrides) -> Dict[str, Any]:
        payload = {"title": "Week 1 Quiz", "questions": []}
        payload.update(overrides)
        response = await client.post(
            f"/courses/{course.id}/quizzes", json=payload, headers=auth_headers(teacher)
        )
        assert response.status_code == 201, response.text
        quiz_id = response.json()["id"]

        detail = await client.get(f"/quizzes/{quiz_id}", headers=auth_headers(teacher))
        assert detail.status_code == 200, detail.text
        return detail.json()

    return _create_quiz


@pytest.fixture()
def mixed_quiz(create_quiz, question_payloads):
    """Two multiple-choice questions (A and C, 10 points each) and one 20-point essay."""

    async def _mixed_quiz(with_essay: bool = True) -> Dict[str, Any]:
        questions = [
            question_payloads["mc"]("Pick A", "A"),
            question_payloads["mc"]("Pick C", "C"),
        ]
        if with_essay:
            questions.append(question_payloads["essay"]("Discuss caching"))
        return await create_quiz(questions=questions)

    return _mixed_quiz
