from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.logging_config import setup_logging, get_logger

from app.routes.users.user_creation import router as user_registration_router
from app.routes.users.user_login import router as user_login_router
from app.routes.users.quiz import router as user_quiz_router

from app.routes.users.teacher.course import router as teacher_course_router
from app.routes.users.teacher.quiz import router as teacher_quiz_router
from app.routes.users.teacher.quiz_submission import router as teacher_quiz_submission_router

from app.routes.users.student.course import router as student_course_router
from app.routes.users.student.quiz_submission import router as student_quiz_submission_router


setup_logging()
logger = get_logger("main")


app=FastAPI(
    title="Quiz Grading Service"
)

@app.get("/")
def root():
    return {
        "message":"Quiz Grading Service is Running!"
        }


# Pydantic validation errors
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(
        f"Validation Error on {request.method} {request.url.path}: "
        f"{len(exc.errors())} field(s) failed validation"
    )
    return await request_validation_exception_handler(request, exc)


# Database errors that escaped a route
@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.error(
        f"Database error on {request.method} {request.url.path}",
        exc_info=exc,
    )
    return JSONResponse(status_code=500, content={"detail": "Server error"})


app.include_router(user_registration_router)
app.include_router(user_login_router)
app.include_router(user_quiz_router)

app.include_router(teacher_course_router)
app.include_router(teacher_quiz_router)
app.include_router(teacher_quiz_submission_router)

app.include_router(student_course_router)
app.include_router(student_quiz_submission_router)
