"""Authentication-related Pydantic models."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, EmailStr, Field


class UserCreate(BaseModel):
    """Request model for user registration."""

    email: EmailStr
    password: str = Field(..., min_length=6)
    name: str | None = None


class UserResponse(BaseModel):
    """Response model for user data."""

    id: str
    email: str
    name: str | None = None
    status: Literal["active", "disabled"]
    created_at: datetime


class AuthResponse(BaseModel):
    """Response model for authentication endpoints."""

    access_token: str
    token_type: str
    user: UserResponse


class LoginRequest(BaseModel):
    """Request model for login."""

    email: EmailStr
    password: str
