"""Pydantic request/response schemas for zp_gateway.

All responses are wrapped in ApiResponse at the router layer.
"""

import re

from pydantic import BaseModel, EmailStr, Field, field_validator


class SignUpRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    full_name: str = Field(..., min_length=1, max_length=120)
    username: str = Field(..., min_length=3, max_length=32, pattern=r"^[a-zA-Z0-9_]+$")
    phone_number: str

    @field_validator("username")
    @classmethod
    def lowercase_username(cls, v: str) -> str:
        return v.lower()

    @field_validator("phone_number")
    @classmethod
    def phone_shape(cls, v: str) -> str:
        """At least 10 digits, optionally '+'-prefixed, spaces and dashes allowed."""
        if not re.fullmatch(r"\+?[\d\s-]{10,}", v):
            raise ValueError("Please enter a valid phone number (10+ digits)")
        return v


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class UserInfo(BaseModel):
    """Minimal user info embedded in responses."""

    user_id: str
    email: str


class SignUpResponse(BaseModel):
    user_id: str
    email: str
    username: str
    phone_number: str


class LoginResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int
    user: UserInfo
