"""Goal service for creation, retrieval and status changes."""

import logging

from sqlalchemy.orm import Session

from app.models.goal import Goal
from app.models.peer_group import PeerGroup
from app.schemas.goal import GoalCreate, GoalUpdate

logger = logging.getLogger("peerstake")


class GoalService:
    """Handles a user's goals. Every lookup is scoped to the owner."""

    def create_goal(self, db: Session, user_id: int, data: GoalCreate) -> dict:
        """Create an active goal. Raises ValueError for an unknown peer group."""
        peer_group_name = None
        if data.peer_group_id is not None:
            group = db.query(PeerGroup).filter(PeerGroup.id == data.peer_group_id).first()
            if not group:
                raise ValueError("Invalid peer group ID")
            peer_group_name = group.name

        goal = Goal(
            user_id=user_id,
            peer_group_id=data.peer_group_id,
            title=data.title.strip(),
            description=data.description.strip(),
            deadline=data.deadline,
            stake_amount=data.stake_amount,
            status="active",
        )
        db.add(goal)
        db.commit()
        db.refresh(goal)

        logger.info("Goal %d created by user %d (stake %.2f)", goal.id, user_id, goal.stake_amount)
        return self.to_dict(goal, peer_group_name)

    def get_user_goals(self, db: Session, user_id: int) -> list[dict]:
        """All goals of a user, newest first, with the peer group name."""
        results = (
            db.query(Goal, PeerGroup.name)
            .outerjoin(PeerGroup, Goal.peer_group_id == PeerGroup.id)
            .filter(Goal.user_id == user_id)
            .order_by(Goal.created_at.desc(), Goal.id.desc())
            .all()
        )
        return [self.to_dict(goal, name) for goal, name in results]

    def get_goal(self, db: Session, goal_id: int, user_id: int) -> Goal | None:
        return db.query(Goal).filter(Goal.id == goal_id, Goal.user_id == user_id).first()

    def get_goal_detail(self, db: Session, goal_id: int, user_id: int) -> dict | None:
        result = (
            db.query(Goal, PeerGroup.name)
            .outerjoin(PeerGroup, Goal.peer_group_id == PeerGroup.id)
            .filter(Goal.id == goal_id, Goal.user_id == user_id)
            .first()
        )
        if not result:
            return None
        goal, name = result
        return self.to_dict(goal, name)

    def update_goal(self, db: Session, goal: Goal, data: GoalUpdate) -> Goal:
        """Apply a partial update.

        A goal that is no longer active may only be re-marked completed or failed.
        Raises ValueError otherwise.
        """
        if goal.status != "active" and data.status not in ("completed", "failed"):
            raise ValueError("Cannot update a completed or failed goal")

        if data.title:
            goal.title = data.title.strip()
        if data.description:
            goal.description = data.description.strip()
        if data.deadline:
            goal.deadline = data.deadline
        if data.status:
            goal.status = data.status

        db.commit()
        db.refresh(goal)
        return goal

    def delete_goal(self, db: Session, goal_id: int, user_id: int) -> bool:
        """Delete an active goal. Returns False if none matched."""
        goal = (
            db.query(Goal)
            .filter(Goal.id == goal_id, Goal.user_id == user_id, Goal.status == "active")
            .first()
        )
        if not goal:
            return False
        db.delete(goal)
        db.commit()
        logger.info("Goal %d deleted by user %d", goal_id, user_id)
        return True

    def to_dict(self, goal: Goal, peer_group_name: str | None = None) -> dict:
        return {
            "id": goal.id,
            "title": goal.title,
            "description": goal.description,
            "deadline": goal.deadline,
            "stake_amount": goal.stake_amount,
            "status": goal.status,
            "user_id": goal.user_id,
            "peer_group_id": goal.peer_group_id,
            "peer_group_name": peer_group_name,
            "created_at": goal.created_at,
            "updated_at": goal.updated_at,
        }


_goal_service: GoalService | None = None


def get_goal_service() -> GoalService:
    """Get singleton goal service instance."""
    global _goal_service
    if _goal_service is None:
        _goal_service = GoalService()
    return _goal_service
