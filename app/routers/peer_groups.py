"""Peer group API endpoints."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import CurrentUser, get_current_user
from app.schemas.auth import MessageResponse
from app.schemas.peer_group import Category, JoinResponse, PeerGroupCreate, PeerGroupResponse
from app.services.peer_group import MembershipError, get_peer_group_service

router = APIRouter(prefix="/api/peer-groups", tags=["Peer Groups"])


@router.get("/public", response_model=list[PeerGroupResponse])
def list_public_groups(
    category: Category | None = None,
    db: Session = Depends(get_db),
) -> list[PeerGroupResponse]:
    """List public groups. No authentication required."""
    service = get_peer_group_service()
    return [PeerGroupResponse(**g) for g in service.get_public_groups(db, category)]


@router.post("", response_model=PeerGroupResponse, status_code=201)
def create_group(
    body: PeerGroupCreate,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> PeerGroupResponse:
    """Create a peer group owned by the current user."""
    service = get_peer_group_service()
    return PeerGroupResponse(**service.create_group(db, user.user_id, body))


@router.get("", response_model=list[PeerGroupResponse])
def list_my_groups(
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[PeerGroupResponse]:
    """List groups the current user belongs to."""
    service = get_peer_group_service()
    return [PeerGroupResponse(**g) for g in service.get_user_groups(db, user.user_id)]


@router.get("/{group_id}", response_model=PeerGroupResponse)
def get_group(
    group_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> PeerGroupResponse:
    """Get a group. Private groups are visible to members only."""
    service = get_peer_group_service()
    group = service.get_group(db, group_id)
    if not group:
        raise HTTPException(status_code=404, detail="Peer group not found")
    if not group.is_public and not service.is_member(db, group.id, user.user_id):
        raise HTTPException(status_code=403, detail="Not authorized to view this group")
    return PeerGroupResponse(**service.to_dict(db, group, include_members=True))


@router.post("/{group_id}/join", response_model=JoinResponse)
def join_group(
    group_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> JoinResponse:
    """Join a public group."""
    service = get_peer_group_service()
    group = service.get_group(db, group_id)
    if not group:
        raise HTTPException(status_code=404, detail="Peer group not found")
    try:
        data = service.join_group(db, group, user.user_id)
    except MembershipError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e)) from None
    return JoinResponse(detail="Successfully joined the group", peer_group=PeerGroupResponse(**data))


@router.post("/{group_id}/leave", response_model=MessageResponse)
def leave_group(
    group_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MessageResponse:
    """Leave a group. Creators cannot leave."""
    service = get_peer_group_service()
    group = service.get_group(db, group_id)
    if not group:
        raise HTTPException(status_code=404, detail="Peer group not found")
    try:
        service.leave_group(db, group, user.user_id)
    except MembershipError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e)) from None
    return MessageResponse(detail="Successfully left the group")
