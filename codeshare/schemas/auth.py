"""
Pydantic schemas for authentication endpoints.

Pydantic validates shape and lengths before any route runs (FastAPI answers
422 for a malformed body). Business rules such as the phone format and
uniqueness are enforced in the service layer.
"""

from typing import Literal

from pydantic import BaseModel, EmailStr, Field


class UserSignupRequest(BaseModel):
    """Request body for POST /auth/signup."""
    username: str = Field(min_length=3, max_length=50)
    password: str = Field(min_length=6, max_length=64)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=20)
    # Admins are never self-registered
    role: Literal["candidate", "hr"] = "candidate"
    real_name: str | None = Field(default=None, max_length=50)
    gender: Literal["0", "1", "2"] | None = None


class UserLoginRequest(BaseModel):
    """Request body for POST /auth/login. Exactly one identifier is used."""
    username: str | None = None
    email: str | None = None
    phone: str | None = None
    password: str


class EmailCodeRequest(BaseModel):
    """Request body for POST /auth/email-code."""
    email: EmailStr


class EmailLoginRequest(BaseModel):
    """Request body for POST /auth/email-login."""
    email: EmailStr
    code: str = Field(min_length=1, max_length=12)


class TokenResponse(BaseModel):
    token: str
    token_type: str = "bearer"


class SignupResponse(BaseModel):
    """Response body for successful signup — user info + JWT."""
    user_uuid: str
    username: str
    role: str
    token: str
    token_type: str = "bearer"
