import asyncio
from getpass import getpass
from sqlalchemy.future import select
from app.database import AsyncSessionLocal
from app.logging_config import setup_logging, get_logger
from app.models import User, UserRole
from app.auth.password_security import hash_password

logger = get_logger("create_admin")


async def create_admin(roll_number: str, name: str, password: str) -> bool:
    """
    Create an admin user. Returns False if the roll number is already taken.
    """
    async with AsyncSessionLocal() as session:
        existing = await session.execute(select(User).where(User.roll_number == roll_number))
        if existing.scalars().first():
            logger.warning(f"User with roll number {roll_number} already exists")
            return False

        admin_user = User(
            role=UserRole.ADMIN,
            roll_number=roll_number,
            name=name,
            password_hash=hash_password(password)
        )
        session.add(admin_user)
        await session.commit()
        logger.info(f"Admin created successfully: {roll_number}")
        return True


async def create_admin_interactive():
    """
    Interactively create a new admin user in the database.
    """
    roll_number = input("Enter admin login id: ").strip()
    name = input("Enter admin name: ").strip() or "Administrator"
    password = getpass("Enter admin password: ").strip()
    password_confirm = getpass("Confirm password: ").strip()

    if password != password_confirm:
        logger.error("Passwords do not match. Exiting.")
        return

    await create_admin(roll_number, name, password)


if __name__ == "__main__":
    setup_logging()
    asyncio.run(create_admin_interactive())
