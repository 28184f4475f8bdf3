"""Pydantic schemas for profile endpoints."""

from pydantic import BaseModel, Field


class ProfileUpdate(BaseModel):
    display_name: str | None = Field(default=None, max_length=256)
    username: str | None = Field(default=None, min_length=1, max_length=64)


class DirectoryResponse(BaseModel):
    detail: str
    path: str
