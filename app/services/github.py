"""GitHub OAuth client."""

import logging
from dataclasses import dataclass
from urllib.parse import urlencode

import httpx

from app.config import get_settings

logger = logging.getLogger("peerstake")

AUTHORIZE_URL = "https://github.com/login/oauth/authorize"
TOKEN_URL = "https://github.com/login/oauth/access_token"
USER_URL = "https://api.github.com/user"
EMAILS_URL = "https://api.github.com/user/emails"
SCOPE = "user:email"


class OAuthError(Exception):
    """OAuth step failed. `code` is safe to put in a redirect URL."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


@dataclass
class GitHubProfile:
    """The parts of a GitHub account mapped onto a local user."""

    id: str
    login: str
    email: str | None = None
    name: str | None = None
    avatar_url: str | None = None

    @classmethod
    def from_api(cls, data: dict) -> "GitHubProfile":
        if not data.get("id") or not data.get("login"):
            raise OAuthError("github_auth_failed", "GitHub profile is missing id or login")
        return cls(
            id=str(data["id"]),
            login=data["login"],
            email=data.get("email"),
            name=data.get("name"),
            avatar_url=data.get("avatar_url"),
        )


class GitHubOAuthClient:
    """Runs the authorization-code exchange against GitHub."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        callback_url: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.callback_url = callback_url
        self.timeout = timeout
        self.transport = transport

    def authorization_url(self, state: str) -> str:
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.callback_url,
            "scope": SCOPE,
            "state": state,
        }
        return f"{AUTHORIZE_URL}?{urlencode(params)}"

    async def fetch_profile(self, code: str) -> GitHubProfile:
        """Exchange an authorization code for the user's GitHub profile."""
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, follow_redirects=False, transport=self.transport
            ) as client:
                token_response = await client.post(
                    TOKEN_URL,
                    data={
                        "client_id": self.client_id,
                        "client_secret": self.client_secret,
                        "code": code,
                        "redirect_uri": self.callback_url,
                    },
                    headers={"Accept": "application/json"},
                )
                token_response.raise_for_status()
                access_token = token_response.json().get("access_token")
                if not access_token:
                    raise OAuthError("github_auth_failed", "GitHub did not return an access token")

                headers = {
                    "Authorization": f"Bearer {access_token}",
                    "Accept": "application/vnd.github+json",
                }
                user_response = await client.get(USER_URL, headers=headers)
                user_response.raise_for_status()
                profile = GitHubProfile.from_api(user_response.json())

                # Private emails are not on /user
                if not profile.email:
                    emails_response = await client.get(EMAILS_URL, headers=headers)
                    if emails_response.status_code == 200:
                        profile.email = next(
                            (e["email"] for e in emails_response.json() if e.get("primary") and e.get("verified")),
                            None,
                        )
        except httpx.HTTPStatusError as e:
            logger.warning("GitHub OAuth HTTP error %d: %s", e.response.status_code, e)
            raise OAuthError("github_auth_failed", "GitHub rejected the authorization") from e
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("GitHub OAuth request failed: %s", e)
            raise OAuthError("github_auth_failed", "Could not reach GitHub") from e

        logger.info("GitHub OAuth exchange succeeded for %s", profile.login)
        return profile


_github_client: GitHubOAuthClient | None = None


def get_github_client() -> GitHubOAuthClient | None:
    """Get singleton GitHub client, or None when OAuth is not configured."""
    global _github_client
    settings = get_settings()
    if not settings.github_configured:
        return None
    if _github_client is None:
        _github_client = GitHubOAuthClient(
            client_id=settings.GITHUB_CLIENT_ID,
            client_secret=settings.GITHUB_CLIENT_SECRET,
            callback_url=f"{settings.SERVER_URL}/api/auth/github/callback",
        )
    return _github_client
