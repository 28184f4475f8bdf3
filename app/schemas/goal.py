"""Pydantic schemas for goal endpoints."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

GoalStatus = Literal["active", "completed", "failed"]


class GoalCreate(BaseModel):
    title: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1, max_length=500)
    deadline: datetime
    stake_amount: float = Field(ge=0)
    peer_group_id: int | None = None


class GoalUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, min_length=1, max_length=500)
    deadline: datetime | None = None
    status: GoalStatus | None = None


class GoalResponse(BaseModel):
    id: int
    title: str
    description: str
    deadline: datetime
    stake_amount: float
    status: str
    user_id: int
    peer_group_id: int | None
    peer_group_name: str | None = None
    created_at: datetime
    updated_at: datetime
