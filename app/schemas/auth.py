"""Pydantic schemas for authentication endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator


def _check_email(value: str) -> str:
    value = value.strip().lower()
    local, _, domain = value.partition("@")
    if not local or "." not in domain:
        raise ValueError("Please provide a valid email address")
    return value


class LoginRequest(BaseModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class RegisterRequest(BaseModel):
    email: str
    username: str = Field(min_length=1, max_length=64)
    password: str = Field(min_length=6)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return _check_email(value)

    @field_validator("username")
    @classmethod
    def strip_username(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Username cannot be blank")
        return value


class UserSummary(BaseModel):
    """Public view of an account, returned by login and register."""

    id: int
    email: str
    username: str
    display_name: str | None
    avatar: str | None

    model_config = {"from_attributes": True}


class UserResponse(UserSummary):
    github_id: str | None
    created_at: datetime
    updated_at: datetime


class MessageResponse(BaseModel):
    detail: str
