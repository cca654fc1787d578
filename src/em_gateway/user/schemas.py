"""Pydantic request/response schemas for em_gateway.

All responses are wrapped in ApiResponse at the router layer.
"""

import re

from pydantic import BaseModel, EmailStr, Field, field_validator

from src.em_common.enums import Role
from src.em_gateway.user.db_models import UserModel

PHONE_PATTERN = r"^\+?[0-9 \-]{6,20}$"


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=64, pattern=r"^[a-zA-Z0-9_]+$")
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=72)
    phone: str | None = Field(None, pattern=PHONE_PATTERN)

    @field_validator("password")
    @classmethod
    def password_complexity(cls, v: str) -> str:
        """Enforce: at least one uppercase, one lowercase, one digit."""
        if not re.search(r"[A-Z]", v):
            raise ValueError("Password must contain at least one uppercase letter")
        if not re.search(r"[a-z]", v):
            raise ValueError("Password must contain at least one lowercase letter")
        if not re.search(r"\d", v):
            raise ValueError("Password must contain at least one digit")
        return v


class LoginRequest(BaseModel):
    username: str
    password: str


class RefreshRequest(BaseModel):
    refresh_token: str


class SelectRoleRequest(BaseModel):
    role: Role


class UpdateContactRequest(BaseModel):
    phone: str | None = Field(None, pattern=PHONE_PATTERN)
    email: EmailStr | None = None


class UserInfo(BaseModel):
    user_id: str
    username: str
    email: str
    phone: str | None
    roles: list[str]
    is_active: bool = True

    @classmethod
    def from_model(cls, user: UserModel) -> "UserInfo":
        return cls(
            user_id=str(user.id),
            username=user.username,
            email=user.email,
            phone=user.phone,
            roles=list(user.roles or []),
            is_active=user.is_active,
        )


class RegisterResponse(BaseModel):
    user: UserInfo
    created_at: str


class LoginResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int = 1800  # 30 minutes in seconds
    user: UserInfo


class RefreshResponse(BaseModel):
    access_token: str
    expires_in: int = 1800
