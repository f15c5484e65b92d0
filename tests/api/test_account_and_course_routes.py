from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import sessionmaker

from app.auth.jwt import verify_token
from app.models import Course, User, UserRole


async def test_root(client):
    response = await client.get("/")

    assert response.status_code == 200
    assert "running" in response.json()["message"].lower()


async def test_register_user(client, db_session):
    response = await client.post(
        "/user/register",
        json={"role": "student", "name": "Ada", "roll_number": "S-100", "password": "secret123"},
    )

    assert response.status_code == 201, response.text
    assert response.json()["role"] == "student"
    user = (await db_session.execute(select(User).where(User.roll_number == "S-100"))).scalar_one()
    assert user.password_hash != "secret123"


async def test_register_rejects_taken_roll_number_and_admins(client, student):
    taken = await client.post(
        "/user/register",
        json={"role": "teacher", "name": "Copy", "roll_number": student.roll_number, "password": "secret123"},
    )
    admin = await client.post(
        "/user/register",
        json={"role": "admin", "name": "Root", "roll_number": "A-1", "password": "secret123"},
    )
    short_password = await client.post(
        "/user/register",
        json={"role": "student", "name": "Short", "roll_number": "S-101", "password": "123"},
    )

    assert taken.status_code == 400
    assert admin.status_code == 400
    assert short_password.status_code == 422


async def test_login_issues_tokens(client, student):
    response = await client.post("/user/login", json={"roll_number": "S-001", "password": "secret123"})

    assert response.status_code == 200, response.text
    body = response.json()
    assert body["role"] == "student"
    assert body["token_type"] == "bearer"
    assert verify_token(body["access_token"])["user_id"] == str(student.id)
    assert verify_token(body["refresh_token"], expected_type="refresh")["user_id"] == str(student.id)
    assert student.last_login is not None


async def test_refresh_token_is_not_an_access_token(client, student, mixed_quiz):
    login = await client.post("/user/login", json={"roll_number": "S-001", "password": "secret123"})
    quiz = await mixed_quiz()

    response = await client.get(
        f"/quizzes/{quiz['id']}",
        headers={"Authorization": f"Bearer {login.json()['refresh_token']}"},
    )

    assert response.status_code == 401


async def test_login_rejects_bad_credentials(client, student):
    wrong_password = await client.post("/user/login", json={"roll_number": "S-001", "password": "nope-nope"})
    unknown = await client.post("/user/login", json={"roll_number": "S-404", "password": "secret123"})

    assert wrong_password.status_code == 401
    assert unknown.status_code == 401


async def test_garbage_token_is_unauthorized(client, course):
    response = await client.get(
        f"/courses/{course.id}/quizzes",
        headers={"Authorization": "Bearer not-a-jwt"},
    )

    assert response.status_code == 401


async def test_teacher_creates_course(client, auth_headers, teacher, student, db_session):
    payload = {"code": "MATH200", "name": "Linear Algebra", "description": "Vectors"}

    created = await client.post("/teacher/course/create-course", json=payload, headers=auth_headers(teacher))
    duplicate = await client.post("/teacher/course/create-course", json=payload, headers=auth_headers(teacher))
    as_student = await client.post("/teacher/course/create-course", json=payload, headers=auth_headers(student))

    assert created.status_code == 201, created.text
    assert duplicate.status_code == 400
    assert as_student.status_code == 403
    course = await db_session.get(Course, uuid.UUID(created.json()["course_id"]))
    assert course.instructor_id == teacher.id


async def test_student_enrollment(client, auth_headers, teacher, outsider_student, course):
    enrolled = await client.post(f"/student/course/enroll-course/{course.id}", headers=auth_headers(outsider_student))
    again = await client.post(f"/student/course/enroll-course/{course.id}", headers=auth_headers(outsider_student))
    unknown = await client.post(f"/student/course/enroll-course/{uuid.uuid4()}", headers=auth_headers(outsider_student))
    as_teacher = await client.post(f"/student/course/enroll-course/{course.id}", headers=auth_headers(teacher))

    assert enrolled.status_code == 200, enrolled.text
    assert enrolled.json()["student_id"] == str(outsider_student.id)
    assert again.status_code == 409
    assert unknown.status_code == 404
    assert as_teacher.status_code == 403

    quizzes = await client.get(f"/courses/{course.id}/quizzes", headers=auth_headers(outsider_student))
    assert quizzes.status_code == 200


async def test_admin_reads_any_course(client, auth_headers, make_user, mixed_quiz, course):
    admin = await make_user(UserRole.ADMIN, "A-001", name="Admin")
    await mixed_quiz()

    response = await client.get(f"/courses/{course.id}/quizzes", headers=auth_headers(admin))

    assert response.status_code == 200
    assert [q["correct_answer"] for q in response.json()[0]["questions"]] == ["A", "C", None]


async def test_create_admin_script(engine, monkeypatch):
    import create_admin

    test_sessions = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    monkeypatch.setattr(create_admin, "AsyncSessionLocal", test_sessions)

    assert await create_admin.create_admin("A-100", "Root", "secret123") is True
    assert await create_admin.create_admin("A-100", "Root again", "secret123") is False

    async with test_sessions() as session:
        admin = (await session.execute(select(User).where(User.roll_number == "A-100"))).scalar_one()
    assert admin.role == UserRole.ADMIN
