"""Goal model."""

from datetime import datetime

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String

from app.database import Base

GOAL_STATUSES = ("active", "completed", "failed")


class Goal(Base):
    """A challenge a user commits to, backed by a stake."""

    __tablename__ = "goal"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("user.id"), nullable=False, index=True)
    peer_group_id = Column(Integer, ForeignKey("peer_group.id"), nullable=True, index=True)
    title = Column(String(100), nullable=False)
    description = Column(String(500), nullable=False)
    deadline = Column(DateTime, nullable=False)
    stake_amount = Column(Float, nullable=False)
    status = Column(String(32), nullable=False, default="active")  # active, completed, failed
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
