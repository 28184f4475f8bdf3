"""Pydantic schemas for peer group endpoints."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

Category = Literal["leetcode", "project", "learning", "other"]


class PeerGroupCreate(BaseModel):
    name: str = Field(min_length=1, max_length=50)
    description: str = Field(min_length=1, max_length=500)
    category: Category
    max_members: int = Field(default=5, ge=2, le=20)
    is_public: bool = True


class MemberSummary(BaseModel):
    id: int
    username: str
    display_name: str | None
    avatar: str | None


class PeerGroupResponse(BaseModel):
    id: int
    name: str
    description: str
    category: str
    max_members: int
    is_public: bool
    creator: MemberSummary | None
    member_count: int
    members: list[MemberSummary] | None = None
    created_at: datetime
    updated_at: datetime


class JoinResponse(BaseModel):
    detail: str
    peer_group: PeerGroupResponse
