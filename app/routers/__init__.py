"""API routers."""

from app.routers.auth import router as auth_router
from app.routers.goals import router as goals_router
from app.routers.peer_groups import router as peer_groups_router
from app.routers.user import router as user_router

__all__ = ["auth_router", "user_router", "goals_router", "peer_groups_router"]
