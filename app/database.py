from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from app.config import DATABASE_URL, DB_ECHO
from app.logging_config import get_logger

logger = get_logger("database")

# ---------------------------
# Engine
# ---------------------------
engine = create_async_engine(
    DATABASE_URL,
    echo=DB_ECHO,  # set DB_ECHO=true for SQL debug logs
    future=True
)

# ---------------------------
# Session Local
# ---------------------------
AsyncSessionLocal = sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
    autocommit=False,
)

# ---------------------------
# Base model
# ---------------------------
Base = declarative_base()

# ---------------------------
# Dependency for FastAPI
# ---------------------------
async def get_db():
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


# ---------------------------
# Commit helper for route handlers
# ---------------------------
async def commit_or_500(db: AsyncSession, action: str):
    """
    Commit the request's transaction. On failure the whole unit of work is
    rolled back, the cause is logged and the caller only sees a 500.
    """
    try:
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception(f"Database error while trying to {action}")
        raise HTTPException(500, "Server error")
