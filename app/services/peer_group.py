"""Peer group service for group creation and membership."""

import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.peer_group import PeerGroup, PeerGroupMember
from app.models.user import User
from app.schemas.peer_group import PeerGroupCreate

logger = logging.getLogger("peerstake")


class MembershipError(ValueError):
    """Join/leave refused. Carries the HTTP status to answer with."""

    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message)
        self.status_code = status_code


def _user_summary(user: User) -> dict:
    return {
        "id": user.id,
        "username": user.username,
        "display_name": user.display_name,
        "avatar": user.avatar,
    }


class PeerGroupService:
    """Handles peer groups and their member lists."""

    def create_group(self, db: Session, creator_id: int, data: PeerGroupCreate) -> dict:
        """Create a group with its creator as the first member."""
        group = PeerGroup(
            name=data.name.strip(),
            description=data.description.strip(),
            creator_id=creator_id,
            max_members=data.max_members,
            is_public=data.is_public,
            category=data.category,
        )
        db.add(group)
        db.flush()
        db.add(PeerGroupMember(peer_group_id=group.id, user_id=creator_id))
        db.commit()
        db.refresh(group)

        logger.info("Peer group %d (%s) created by user %d", group.id, group.name, creator_id)
        return self.to_dict(db, group, include_members=True)

    def get_public_groups(self, db: Session, category: str | None = None) -> list[dict]:
        """Public groups, newest first. Member lists are left out."""
        query = db.query(PeerGroup).filter(PeerGroup.is_public.is_(True))
        if category:
            query = query.filter(PeerGroup.category == category)
        groups = query.order_by(PeerGroup.created_at.desc(), PeerGroup.id.desc()).all()
        return [self.to_dict(db, g, include_members=False) for g in groups]

    def get_user_groups(self, db: Session, user_id: int) -> list[dict]:
        """Groups the user belongs to, newest first."""
        groups = (
            db.query(PeerGroup)
            .join(PeerGroupMember, PeerGroupMember.peer_group_id == PeerGroup.id)
            .filter(PeerGroupMember.user_id == user_id)
            .order_by(PeerGroup.created_at.desc(), PeerGroup.id.desc())
            .all()
        )
        return [self.to_dict(db, g, include_members=True) for g in groups]

    def get_group(self, db: Session, group_id: int) -> PeerGroup | None:
        return db.query(PeerGroup).filter(PeerGroup.id == group_id).first()

    def member_ids(self, db: Session, group_id: int) -> list[int]:
        rows = (
            db.query(PeerGroupMember.user_id)
            .filter(PeerGroupMember.peer_group_id == group_id)
            .order_by(PeerGroupMember.id)
            .all()
        )
        return [user_id for (user_id,) in rows]

    def is_member(self, db: Session, group_id: int, user_id: int) -> bool:
        return (
            db.query(PeerGroupMember)
            .filter(PeerGroupMember.peer_group_id == group_id, PeerGroupMember.user_id == user_id)
            .first()
            is not None
        )

    def join_group(self, db: Session, group: PeerGroup, user_id: int) -> dict:
        """Add the user to a public group with free seats. Raises MembershipError."""
        if not group.is_public:
            raise MembershipError("Cannot join a private group", status_code=403)

        members = self.member_ids(db, group.id)
        if len(members) >= group.max_members:
            raise MembershipError("Group is full")
        if user_id in members:
            raise MembershipError("You are already a member of this group")

        db.add(PeerGroupMember(peer_group_id=group.id, user_id=user_id))
        db.commit()
        logger.info("User %d joined peer group %d", user_id, group.id)
        return self.to_dict(db, group, include_members=True)

    def leave_group(self, db: Session, group: PeerGroup, user_id: int) -> None:
        """Remove a non-creator member. Raises MembershipError."""
        membership = (
            db.query(PeerGroupMember)
            .filter(PeerGroupMember.peer_group_id == group.id, PeerGroupMember.user_id == user_id)
            .first()
        )
        if not membership:
            raise MembershipError("You are not a member of this group")
        if group.creator_id == user_id:
            raise MembershipError("Creators cannot leave their groups. Delete the group instead.")

        db.delete(membership)
        db.commit()
        logger.info("User %d left peer group %d", user_id, group.id)

    def to_dict(self, db: Session, group: PeerGroup, include_members: bool) -> dict:
        creator = db.query(User).filter(User.id == group.creator_id).first()
        member_count = (
            db.query(func.count(PeerGroupMember.id)).filter(PeerGroupMember.peer_group_id == group.id).scalar() or 0
        )
        data = {
            "id": group.id,
            "name": group.name,
            "description": group.description,
            "category": group.category,
            "max_members": group.max_members,
            "is_public": group.is_public,
            "creator": _user_summary(creator) if creator else None,
            "member_count": member_count,
            "members": None,
            "created_at": group.created_at,
            "updated_at": group.updated_at,
        }
        if include_members:
            users = (
                db.query(User)
                .join(PeerGroupMember, PeerGroupMember.user_id == User.id)
                .filter(PeerGroupMember.peer_group_id == group.id)
                .order_by(PeerGroupMember.id)
                .all()
            )
            data["members"] = [_user_summary(u) for u in users]
        return data


_peer_group_service: PeerGroupService | None = None


def get_peer_group_service() -> PeerGroupService:
    """Get singleton peer group service instance."""
    global _peer_group_service
    if _peer_group_service is None:
        _peer_group_service = PeerGroupService()
    return _peer_group_service
