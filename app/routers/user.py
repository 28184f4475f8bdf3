"""User profile API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import CurrentUser, get_current_user
from app.schemas.auth import UserResponse, UserSummary
from app.schemas.user import DirectoryResponse, ProfileUpdate
from app.services.user import get_user_service

router = APIRouter(prefix="/api/user", tags=["User"])


@router.get("/profile", response_model=UserResponse)
def get_profile(user: CurrentUser = Depends(get_current_user)) -> UserResponse:
    """Get the current user's profile."""
    return UserResponse.model_validate(user.user)


@router.put("/profile", response_model=UserSummary)
def update_profile(
    body: ProfileUpdate,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> UserSummary:
    """Change display name and/or username."""
    service = get_user_service()
    try:
        updated = service.update_profile(db, user.user, display_name=body.display_name, username=body.username)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from None
    return UserSummary.model_validate(updated)


@router.post("/directory", response_model=DirectoryResponse, status_code=201)
def create_directory(
    response: Response,
    user: CurrentUser = Depends(get_current_user),
) -> DirectoryResponse:
    """Create the user's personal directory served under /index."""
    service = get_user_service()
    created, path = service.create_directory(user.user)
    if not created:
        response.status_code = 200
        return DirectoryResponse(detail="Directory already exists", path=path)
    return DirectoryResponse(detail="Directory created successfully", path=path)
