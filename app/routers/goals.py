"""Goal API endpoints."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import CurrentUser, get_current_user
from app.schemas.auth import MessageResponse
from app.schemas.goal import GoalCreate, GoalResponse, GoalUpdate
from app.services.goal import get_goal_service

router = APIRouter(prefix="/api/goals", tags=["Goals"])


@router.post("", response_model=GoalResponse, status_code=201)
def create_goal(
    body: GoalCreate,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> GoalResponse:
    """Create a new goal for the current user."""
    service = get_goal_service()
    try:
        goal = service.create_goal(db, user.user_id, body)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from None
    return GoalResponse(**goal)


@router.get("", response_model=list[GoalResponse])
def list_goals(
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[GoalResponse]:
    """List the current user's goals, newest first."""
    service = get_goal_service()
    return [GoalResponse(**g) for g in service.get_user_goals(db, user.user_id)]


@router.get("/{goal_id}", response_model=GoalResponse)
def get_goal(
    goal_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> GoalResponse:
    """Get a single goal owned by the current user."""
    service = get_goal_service()
    goal = service.get_goal_detail(db, goal_id, user.user_id)
    if not goal:
        raise HTTPException(status_code=404, detail="Goal not found")
    return GoalResponse(**goal)


@router.put("/{goal_id}", response_model=GoalResponse)
def update_goal(
    goal_id: int,
    body: GoalUpdate,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> GoalResponse:
    """Update title, description, deadline or status of a goal."""
    service = get_goal_service()
    goal = service.get_goal(db, goal_id, user.user_id)
    if not goal:
        raise HTTPException(status_code=404, detail="Goal not found")
    try:
        service.update_goal(db, goal, body)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from None
    return GoalResponse(**service.get_goal_detail(db, goal_id, user.user_id))  # type: ignore[arg-type]


@router.delete("/{goal_id}", response_model=MessageResponse)
def delete_goal(
    goal_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MessageResponse:
    """Delete an active goal."""
    service = get_goal_service()
    if not service.delete_goal(db, goal_id, user.user_id):
        raise HTTPException(status_code=404, detail="Goal not found or cannot be deleted")
    return MessageResponse(detail="Goal deleted successfully")
