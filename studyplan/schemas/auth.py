"""
Auth Schemas

Registration, login and token payloads.
"""

import re
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


def _collapse_spaces(value: str) -> str:
    return " ".join(value.split())


# ============================================================
# Requests
# ============================================================

class UserRegister(BaseModel):
    model_config = ConfigDict(json_schema_extra={
        "example": {
            "email": "student@university.edu",
            "password": "SecurePass123",
            "first_name": "Emily",
            "last_name": "Chen",
        }
    })

    email: EmailStr
    password: str = Field(min_length=8, max_length=100)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(default="", max_length=100)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.lower()

    @field_validator("password")
    @classmethod
    def letters_and_digits(cls, v: str) -> str:
        """At least one letter and one digit."""
        if not re.search(r"[A-Za-z]", v) or not re.search(r"\d", v):
            raise ValueError("Password must contain at least one letter and one digit")
        return v

    @field_validator("first_name", "last_name")
    @classmethod
    def normalize_name(cls, v: str) -> str:
        return _collapse_spaces(v)


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class RefreshTokenRequest(BaseModel):
    refresh_token: str


# ============================================================
# Responses
# ============================================================

class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: EmailStr
    first_name: str
    last_name: str
    full_name: str
    is_active: bool
    created_at: datetime
    last_login: Optional[datetime] = None


class AccessTokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(description="Access token lifetime in seconds")


class TokenResponse(AccessTokenResponse):
    refresh_token: str
    user: UserResponse


class ErrorResponse(BaseModel):
    """Body of every 4xx/5xx response."""
    detail: str
