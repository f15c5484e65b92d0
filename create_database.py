import asyncio
from app.database import engine, Base
from app.logging_config import setup_logging, get_logger

# Import all models here so SQLAlchemy knows them
from app.models import User, Course, Quiz, QuizQuestion, QuizSubmission, QuizAnswer, course_students  # noqa: F401

logger = get_logger("create_database")


async def create_tables(drop_existing: bool = False):
    async with engine.begin() as conn:
        if drop_existing:
            logger.warning("Dropping all tables...")
            await conn.run_sync(Base.metadata.drop_all)
        logger.info("Creating database tables...")
        await conn.run_sync(Base.metadata.create_all)
        logger.info("All tables created successfully")
    await engine.dispose()


if __name__ == "__main__":
    import sys

    setup_logging()
    asyncio.run(create_tables(drop_existing="--drop" in sys.argv))
