"""Pydantic schemas for authentication endpoints."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field


class SignUpRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    username: str = Field(..., min_length=3, max_length=32)


class SignInRequest(BaseModel):
    email: EmailStr
    password: str


class AuthResponse(BaseModel):
    access_token: str
    user_id: str
    email: str
    token_type: str = "bearer"


class SessionResponse(BaseModel):
    user_id: str
    email: str
    expires_at: datetime


__all__ = ["SignUpRequest", "SignInRequest", "AuthResponse", "SessionResponse"]
