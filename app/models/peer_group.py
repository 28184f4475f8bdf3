"""Peer group and membership models."""

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, UniqueConstraint

from app.database import Base

CATEGORIES = ("leetcode", "project", "learning", "other")
DEFAULT_MAX_MEMBERS = 5


class PeerGroup(Base):
    """Group of users holding each other to their goals."""

    __tablename__ = "peer_group"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), nullable=False)
    description = Column(String(500), nullable=False)
    creator_id = Column(Integer, ForeignKey("user.id"), nullable=False, index=True)
    max_members = Column(Integer, nullable=False, default=DEFAULT_MAX_MEMBERS)
    is_public = Column(Boolean, nullable=False, default=True)
    category = Column(String(32), nullable=False, default="other")  # leetcode, project, learning, other
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)


class PeerGroupMember(Base):
    """Membership of a user in a peer group."""

    __tablename__ = "peer_group_member"
    __table_args__ = (UniqueConstraint("peer_group_id", "user_id", name="uq_peer_group_member"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    peer_group_id = Column(Integer, ForeignKey("peer_group.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("user.id"), nullable=False, index=True)
    joined_at = Column(DateTime, nullable=False, default=datetime.utcnow)
