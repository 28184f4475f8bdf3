"""Authentication API endpoints."""

import logging
import secrets
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.orm import Session

from app.config import get_settings
from app.database import get_db
from app.dependencies import (
    AUTH_COOKIE_NAME,
    CurrentUser,
    clear_auth_cookie,
    get_current_user,
    get_request_token,
    set_auth_cookie,
)
from app.rate_limit import limiter
from app.schemas.auth import LoginRequest, MessageResponse, RegisterRequest, UserResponse, UserSummary
from app.services.auth import get_auth_service
from app.services.github import OAuthError, get_github_client
from app.services.jwt import get_jwt_service

logger = logging.getLogger("peerstake")

router = APIRouter(prefix="/api/auth", tags=["Authentication"])

OAUTH_STATE_COOKIE = "oauth_state"
OAUTH_STATE_MAX_AGE = 10 * 60


@router.post("/register", response_model=UserSummary, status_code=201)
@limiter.limit("5/minute")
def register(request: Request, response: Response, body: RegisterRequest, db: Session = Depends(get_db)) -> UserSummary:
    """Register a new user account and start a session."""
    auth_service = get_auth_service()
    result = auth_service.register(db, body.email, body.username, body.password)

    if not result.success:
        raise HTTPException(status_code=400, detail=result.error)

    token = get_jwt_service().create_token(result.user.id)  # type: ignore[union-attr]
    set_auth_cookie(response, token)
    return UserSummary.model_validate(result.user)


@router.post("/login", response_model=UserSummary)
@limiter.limit("10/minute")
def login(request: Request, response: Response, body: LoginRequest, db: Session = Depends(get_db)) -> UserSummary:
    """Authenticate with email and password and start a session."""
    auth_service = get_auth_service()
    result = auth_service.authenticate(db, body.email, body.password)

    if not result.success:
        logger.info("Failed login attempt")
        raise HTTPException(status_code=401, detail=result.error)

    token = get_jwt_service().create_token(result.user.id)  # type: ignore[union-attr]
    set_auth_cookie(response, token)
    return UserSummary.model_validate(result.user)


@router.post("/logout", response_model=MessageResponse)
def logout(response: Response) -> MessageResponse:
    """Clear the session cookie. The token itself stays valid until it expires."""
    clear_auth_cookie(response)
    return MessageResponse(detail="Logged out successfully")


@router.get("/me", response_model=UserResponse)
def me(current: CurrentUser = Depends(get_current_user)) -> UserResponse:
    """Return the authenticated user."""
    return UserResponse.model_validate(current.user)


@router.get("/debug")
def auth_debug(request: Request) -> dict:
    """Report how the request is authenticated, without revealing credentials."""
    token = get_request_token(request)
    payload = get_jwt_service().decode_token(token) if token else None
    return {
        "has_cookie": AUTH_COOKIE_NAME in request.cookies,
        "has_auth_header": request.headers.get("Authorization", "").startswith("Bearer "),
        "token_valid": payload is not None,
        "github_configured": get_settings().github_configured,
    }


def _client_redirect(path: str, **params: str) -> RedirectResponse:
    url = f"{get_settings().CLIENT_URL}{path}"
    if params:
        url = f"{url}?{urlencode(params)}"
    return RedirectResponse(url=url, status_code=302)


@router.get("/github", response_model=None)
def github_login() -> Response:
    """Send the browser to GitHub's consent screen."""
    client = get_github_client()
    if client is None:
        return JSONResponse(
            status_code=503,
            content={
                "detail": "GitHub authentication is not configured on the server",
                "error": "Missing GitHub OAuth credentials",
            },
        )

    state = secrets.token_urlsafe(24)
    response = RedirectResponse(url=client.authorization_url(state), status_code=302)
    response.set_cookie(
        key=OAUTH_STATE_COOKIE,
        value=state,
        httponly=True,
        secure=get_settings().is_production,
        samesite="lax",
        max_age=OAUTH_STATE_MAX_AGE,
        path="/api/auth/github",
    )
    return response


@router.get("/github/callback")
async def github_callback(
    request: Request,
    code: str | None = None,
    state: str | None = None,
    db: Session = Depends(get_db),
) -> RedirectResponse:
    """Finish GitHub login. Failures are reported to the browser as query parameters."""
    client = get_github_client()
    if client is None:
        return _client_redirect("/login", error="github_not_configured")

    expected_state = request.cookies.get(OAUTH_STATE_COOKIE)
    if not code or not state or not expected_state or not secrets.compare_digest(state, expected_state):
        logger.warning("GitHub callback rejected: missing code or state mismatch")
        response = _client_redirect("/login", error="github_auth_failed")
        response.delete_cookie(OAUTH_STATE_COOKIE, path="/api/auth/github")
        return response

    try:
        profile = await client.fetch_profile(code)
        user = get_auth_service().resolve_github_user(db, profile)
    except OAuthError as e:
        logger.warning("GitHub login failed (%s): %s", e.code, e.message)
        response = _client_redirect("/login", error=e.code)
    except Exception as e:
        logger.exception("GitHub login crashed")
        response = _client_redirect("/login", error="server_error", message=str(e))
    else:
        if user.id is None:
            logger.error("GitHub login failed: resolved user has no id")
            response = _client_redirect("/login", error="user_id_missing")
        else:
            response = _client_redirect("/challenges")
            set_auth_cookie(response, get_jwt_service().create_token(user.id))
            logger.info("GitHub login succeeded for user %d", user.id)

    response.delete_cookie(OAUTH_STATE_COOKIE, path="/api/auth/github")
    return response
