from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.database import get_db, commit_or_500
from app.logging_config import get_logger
from app.models import User, UserRole
from app.schemas.user import UserCreate, UserCreateResponse
from app.auth.password_security import hash_password

logger = get_logger("routes.user_creation")

router = APIRouter(prefix="/user", tags=["User Registration"])


@router.post("/register", response_model=UserCreateResponse, status_code=201)
async def register_user(data: UserCreate, db: AsyncSession = Depends(get_db)):
    # Admins are provisioned with create_admin.py
    if data.role == UserRole.ADMIN:
        raise HTTPException(400, "Admin accounts cannot be self-registered")

    result = await db.execute(select(User).where(User.roll_number == data.roll_number))
    if result.scalars().first():
        raise HTTPException(400, "Roll number already exists")

    user = User(
        role=data.role,
        name=data.name,
        roll_number=data.roll_number,
        password_hash=hash_password(data.password),
    )

    db.add(user)
    await commit_or_500(db, "register user")

    logger.info(f"Registered {user.role.value} {user.id} ({user.roll_number})")

    return UserCreateResponse(
        message="User registered successfully",
        user_id=user.id,
        role=user.role,
    )
