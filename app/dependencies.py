"""Session cookie handling and the authentication dependency."""

import logging
from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request, Response
from sqlalchemy.orm import Session

from app.config import get_settings
from app.database import get_db
from app.models.user import User
from app.services.auth import get_auth_service
from app.services.jwt import get_jwt_service

logger = logging.getLogger("peerstake")

AUTH_COOKIE_NAME = "token"
COOKIE_MAX_AGE = 30 * 24 * 60 * 60  # 30 days


@dataclass
class CurrentUser:
    """Authenticated request context."""

    user_id: int
    user: User


class InvalidTokenError(HTTPException):
    """401 whose response also clears the session cookie."""

    def __init__(self, detail: str = "Invalid token") -> None:
        super().__init__(status_code=401, detail=detail)


def get_request_token(request: Request) -> str | None:
    """Token from the session cookie, falling back to a Bearer header."""
    token = request.cookies.get(AUTH_COOKIE_NAME)
    if token:
        return token
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header[7:].strip() or None
    return None


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
) -> CurrentUser:
    """Resolve the request's token to a user. Raises 401/404 on failure."""
    token = get_request_token(request)
    if not token:
        logger.info("Rejected %s %s: no token", request.method, request.url.path)
        raise HTTPException(status_code=401, detail="Authentication required")

    jwt_service = get_jwt_service()
    payload = jwt_service.decode_token(token)
    if payload is None:
        logger.info("Rejected %s %s: invalid or expired token", request.method, request.url.path)
        raise InvalidTokenError()

    user_id = jwt_service.get_subject(payload)
    if user_id is None:
        logger.info("Rejected %s %s: token has no usable subject", request.method, request.url.path)
        raise InvalidTokenError("Invalid token format")

    user = get_auth_service().get_user(db, user_id)
    if not user:
        logger.warning("Rejected %s %s: user %s not found", request.method, request.url.path, user_id)
        raise HTTPException(status_code=404, detail="User not found")

    return CurrentUser(user_id=user.id, user=user)


def set_auth_cookie(response: Response, token: str) -> None:
    """Set the session cookie. Cross-site and secure-only in production."""
    production = get_settings().is_production
    response.set_cookie(
        key=AUTH_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=production,
        samesite="none" if production else "lax",
        max_age=COOKIE_MAX_AGE,
        path="/",
    )


def clear_auth_cookie(response: Response) -> None:
    """Overwrite the session cookie with an empty, already-expired value."""
    production = get_settings().is_production
    response.delete_cookie(
        key=AUTH_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=production,
        samesite="none" if production else "lax",
    )
