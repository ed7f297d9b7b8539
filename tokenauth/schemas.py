"""Auth request/response schemas."""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

_DIGIT = re.compile(r"\d")
_LETTER = re.compile(r"[a-zA-Z]")


def _check_password_strength(value: str) -> str:
    if not _DIGIT.search(value):
        raise ValueError("invalid-password-number")
    if not _LETTER.search(value):
        raise ValueError("invalid-password-letter")
    return value


class ApiResponse(BaseModel):
    success: bool
    message: str
    data: dict[str, Any] | None = None


class RegisterRequest(BaseModel):
    username: str = Field(min_length=3, max_length=30, pattern=r"^[a-zA-Z0-9_]+$")
    email: EmailStr
    # bcrypt only looks at the first 72 bytes
    password: str = Field(min_length=6, max_length=72)

    @field_validator("username", mode="before")
    @classmethod
    def strip_username(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("password")
    @classmethod
    def password_strength(cls, value: str) -> str:
        return _check_password_strength(value)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=72)


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(min_length=1, max_length=72)
    new_password: str = Field(min_length=6, max_length=72)

    @field_validator("new_password")
    @classmethod
    def password_strength(cls, value: str) -> str:
        return _check_password_strength(value)

    @model_validator(mode="after")
    def passwords_differ(self) -> "ChangePasswordRequest":
        if self.new_password == self.current_password:
            raise ValueError("new-password-same")
        return self


class AuthUser(BaseModel):
    id: str
    username: str | None = None
    email: EmailStr
    is_verified: bool = False


class TokenResponse(BaseModel):
    user_id: str
    access_token: str
    access_expires_at: int
