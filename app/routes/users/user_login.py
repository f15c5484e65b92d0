from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from datetime import datetime

from app.database import get_db, commit_or_500
from app.logging_config import get_logger
from app.models import User
from app.auth.password_security import verify_password
from app.auth.jwt import create_access_token, create_refresh_token
from app.schemas.user import TokenResponse, UserLoginRequest

logger = get_logger("routes.user_login")

router = APIRouter(tags=["User Login"])


# ---------------------------
# User login route
# ---------------------------
@router.post("/user/login", response_model=TokenResponse)
async def user_login(request: UserLoginRequest, db: AsyncSession = Depends(get_db)):
    """
    Authenticate a user using roll_number and password.
    Returns access and refresh JWT tokens on success.
    Raises 401 if credentials are invalid or the account is disabled.
    """
    result = await db.execute(select(User).where(User.roll_number == request.roll_number))
    user = result.scalars().first()

    if not user or not user.is_active:
        logger.warning(f"Login rejected for roll number {request.roll_number}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid roll number or password"
        )

    # Verify password
    matches, new_hash = verify_password(request.password, user.password_hash)
    if not matches:
        logger.warning(f"Login rejected for roll number {request.roll_number}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid roll number or password"
        )

    if new_hash:
        user.password_hash = new_hash

    # Update last login
    user.last_login = datetime.utcnow()
    await commit_or_500(db, "record login")

    # Generate tokens
    claims = {"user_id": str(user.id), "role": user.role.value}
    access_token = create_access_token(claims)
    refresh_token = create_refresh_token(claims)

    return TokenResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        role=user.role.value
    )
