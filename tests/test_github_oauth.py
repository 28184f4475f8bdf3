"""Tests for GitHub OAuth login."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch
from urllib.parse import parse_qs, urlparse

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.models.user import User
from app.services.auth import AuthService
from app.services.github import GitHubOAuthClient, GitHubProfile, OAuthError

CLIENT_URL = "http://localhost:5173"

PROFILE = GitHubProfile(
    id="9001",
    login="octocat",
    email="octocat@github.com",
    name="The Octocat",
    avatar_url="https://avatars.githubusercontent.com/u/9001",
)


def _fake_github(profile: GitHubProfile | None = None, error: Exception | None = None) -> MagicMock:
    fake = MagicMock(spec=GitHubOAuthClient)
    fake.authorization_url.side_effect = lambda state: f"https://github.com/login/oauth/authorize?state={state}"
    fake.fetch_profile = AsyncMock(return_value=profile, side_effect=error)
    return fake


def _callback(client: TestClient, state: str = "s3cret", code: str | None = "abc"):
    client.cookies.set("oauth_state", state)
    params = {"state": state}
    if code:
        params["code"] = code
    return client.get("/api/auth/github/callback", params=params, follow_redirects=False)


def _error_of(response) -> dict:
    return parse_qs(urlparse(response.headers["location"]).query)


class TestResolveGitHubUser:
    """Mapping GitHub profiles onto local accounts."""

    def test_creates_user_without_password(self, db_session: Session):
        user = AuthService().resolve_github_user(db_session, PROFILE)
        assert user.id is not None
        assert user.github_id == "9001"
        assert user.username == "octocat"
        assert user.display_name == "The Octocat"
        assert user.avatar == PROFILE.avatar_url
        assert user.password_hash is None

    def test_repeated_logins_reuse_account(self, db_session: Session):
        service = AuthService()
        first = service.resolve_github_user(db_session, PROFILE)
        second = service.resolve_github_user(db_session, PROFILE)
        assert first.id == second.id
        assert db_session.query(User).filter(User.github_id == "9001").count() == 1

    def test_display_name_falls_back_to_login(self, db_session: Session):
        profile = GitHubProfile(id="1", login="noname", email="noname@example.com")
        user = AuthService().resolve_github_user(db_session, profile)
        assert user.display_name == "noname"

    def test_missing_email(self, db_session: Session):
        profile = GitHubProfile(id="2", login="ghost")
        with pytest.raises(OAuthError) as exc_info:
            AuthService().resolve_github_user(db_session, profile)
        assert exc_info.value.code == "email_missing"

    def test_conflict_with_local_account(self, db_session: Session, test_user: dict):
        profile = GitHubProfile(id="3", login="someone", email="test@example.com")
        with pytest.raises(OAuthError) as exc_info:
            AuthService().resolve_github_user(db_session, profile)
        assert exc_info.value.code == "account_conflict"


class TestGitHubRoutesNotConfigured:
    def test_login_returns_503(self, client: TestClient):
        response = client.get("/api/auth/github", follow_redirects=False)
        assert response.status_code == 503
        assert "not configured" in response.json()["detail"]

    def test_callback_redirects_with_error(self, client: TestClient):
        response = client.get("/api/auth/github/callback?code=abc", follow_redirects=False)
        assert response.status_code == 302
        assert response.headers["location"] == f"{CLIENT_URL}/login?error=github_not_configured"


class TestGitHubRoutes:
    def test_login_redirects_to_github_with_state(self, client: TestClient):
        fake = _fake_github(PROFILE)
        with patch("app.routers.auth.get_github_client", return_value=fake):
            response = client.get("/api/auth/github", follow_redirects=False)
        assert response.status_code == 302
        assert response.headers["location"].startswith("https://github.com/login/oauth/authorize")
        state = parse_qs(urlparse(response.headers["location"]).query)["state"][0]
        assert f"oauth_state={state}" in response.headers["set-cookie"]

    def test_callback_creates_user_and_sets_cookie(self, client: TestClient, db_session: Session):
        fake = _fake_github(PROFILE)
        with patch("app.routers.auth.get_github_client", return_value=fake):
            response = _callback(client)
        assert response.status_code == 302
        assert response.headers["location"] == f"{CLIENT_URL}/challenges"
        assert "token" in response.cookies
        fake.fetch_profile.assert_awaited_once_with("abc")

        assert db_session.query(User).filter(User.github_id == "9001").count() == 1
        me = client.get("/api/auth/me")
        assert me.status_code == 200
        assert me.json()["username"] == "octocat"

    def test_repeated_callbacks_create_one_user(self, client: TestClient, db_session: Session):
        fake = _fake_github(PROFILE)
        with patch("app.routers.auth.get_github_client", return_value=fake):
            _callback(client)
            _callback(client)
        assert db_session.query(User).count() == 1

    def test_state_mismatch(self, client: TestClient, db_session: Session):
        fake = _fake_github(PROFILE)
        client.cookies.set("oauth_state", "expected")
        with patch("app.routers.auth.get_github_client", return_value=fake):
            response = client.get(
                "/api/auth/github/callback",
                params={"code": "abc", "state": "forged"},
                follow_redirects=False,
            )
        assert _error_of(response)["error"] == ["github_auth_failed"]
        fake.fetch_profile.assert_not_awaited()
        assert db_session.query(User).count() == 0

    def test_missing_code(self, client: TestClient):
        fake = _fake_github(PROFILE)
        with patch("app.routers.auth.get_github_client", return_value=fake):
            response = _callback(client, code=None)
        assert response.status_code == 302
        assert _error_of(response)["error"] == ["github_auth_failed"]

    def test_provider_failure_redirects(self, client: TestClient):
        fake = _fake_github(error=OAuthError("github_auth_failed", "GitHub rejected the authorization"))
        with patch("app.routers.auth.get_github_client", return_value=fake):
            response = _callback(client)
        assert response.status_code == 302
        assert response.headers["location"].startswith(f"{CLIENT_URL}/login?")
        assert _error_of(response)["error"] == ["github_auth_failed"]
        assert "token" not in response.cookies

    def test_unexpected_error_redirects_with_message(self, client: TestClient):
        fake = _fake_github(error=RuntimeError("boom"))
        with patch("app.routers.auth.get_github_client", return_value=fake):
            response = _callback(client)
        query = _error_of(response)
        assert query["error"] == ["server_error"]
        assert query["message"] == ["boom"]

    def test_profile_without_email(self, client: TestClient):
        fake = _fake_github(GitHubProfile(id="77", login="private"))
        with patch("app.routers.auth.get_github_client", return_value=fake):
            response = _callback(client)
        assert _error_of(response)["error"] == ["email_missing"]


class TestGitHubOAuthClient:
    """The code exchange itself, against a mocked GitHub."""

    def _client(self, handler) -> GitHubOAuthClient:
        return GitHubOAuthClient(
            client_id="id",
            client_secret="secret",
            callback_url="http://localhost:5000/api/auth/github/callback",
            transport=httpx.MockTransport(handler),
        )

    def test_authorization_url(self):
        url = self._client(lambda request: httpx.Response(200)).authorization_url("xyz")
        query = parse_qs(urlparse(url).query)
        assert query["client_id"] == ["id"]
        assert query["state"] == ["xyz"]
        assert query["scope"] == ["user:email"]
        assert query["redirect_uri"] == ["http://localhost:5000/api/auth/github/callback"]

    def test_fetch_profile_with_private_email(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/login/oauth/access_token":
                return httpx.Response(200, json={"access_token": "gho_123"})
            assert request.headers["Authorization"] == "Bearer gho_123"
            if request.url.path == "/user":
                return httpx.Response(200, json={"id": 5, "login": "mona", "email": None, "name": "Mona"})
            if request.url.path == "/user/emails":
                return httpx.Response(
                    200,
                    json=[
                        {"email": "old@example.com", "primary": False, "verified": True},
                        {"email": "mona@example.com", "primary": True, "verified": True},
                    ],
                )
            return httpx.Response(404)

        profile = asyncio.run(self._client(handler).fetch_profile("code"))
        assert profile.id == "5"
        assert profile.login == "mona"
        assert profile.email == "mona@example.com"

    def test_fetch_profile_no_access_token(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"error": "bad_verification_code"})

        with pytest.raises(OAuthError):
            asyncio.run(self._client(handler).fetch_profile("code"))

    def test_fetch_profile_http_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500)

        with pytest.raises(OAuthError) as exc_info:
            asyncio.run(self._client(handler).fetch_profile("code"))
        assert exc_info.value.code == "github_auth_failed"
