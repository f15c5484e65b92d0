from pydantic import BaseModel, Field
from uuid import UUID
from app.models import UserRole


class UserCreate(BaseModel):
    role: UserRole
    name: str = Field(min_length=1)
    roll_number: str = Field(min_length=1)
    password: str = Field(min_length=6)


class UserCreateResponse(BaseModel):
    message: str
    user_id: UUID
    role: UserRole


class UserLoginRequest(BaseModel):
    roll_number: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    role: str
