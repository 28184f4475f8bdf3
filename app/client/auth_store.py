"""Client-side authentication state.

`AuthStore` holds the one piece of state every screen of a PeerStake client
reads: who is signed in, whether a request is in flight, and the last error.
Views get it passed in, read `store.state`, and `subscribe` to re-render.

The store talks to the API through an injected `httpx.Client` whose cookie
jar carries the session cookie between calls::

    store = AuthStore(httpx.Client(base_url="http://localhost:5000"))
    store.initialize()
    store.login("a@b.com", "secret1")
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Any

import httpx

logger = logging.getLogger("peerstake")


@dataclass(frozen=True)
class AuthState:
    """Immutable snapshot of the client's authentication state."""

    user: dict[str, Any] | None = None
    loading: bool = True
    error: str | None = None


Listener = Callable[[AuthState], None]


class AuthStore:
    """Owns the AuthState and the calls that change it."""

    def __init__(self, http: httpx.Client) -> None:
        self._http = http
        self._state = AuthState()
        self._listeners: list[Listener] = []

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def is_authenticated(self) -> bool:
        return self._state.user is not None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call `listener` on every state change. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set(self, **changes: Any) -> None:
        self._state = replace(self._state, **changes)
        for listener in list(self._listeners):
            listener(self._state)

    def initialize(self) -> None:
        """Ask the server who is signed in. Any failure leaves the user unset."""
        user = None
        try:
            response = self._http.get("/api/auth/me")
            if response.is_success:
                user = _user_or_none(response)
        except httpx.HTTPError as e:
            logger.warning("Failed to check authentication status: %s", e)
        finally:
            self._set(user=user, loading=False)

    def login(self, email: str, password: str) -> None:
        self._submit("/api/auth/login", {"email": email, "password": password}, "Failed to login")

    def register(self, email: str, username: str, password: str) -> None:
        self._submit(
            "/api/auth/register",
            {"email": email, "username": username, "password": password},
            "Failed to register",
        )

    def logout(self) -> None:
        """End the session. The user is cleared even when the server call fails."""
        self._set(loading=True)
        try:
            response = self._http.post("/api/auth/logout")
            if not response.is_success:
                logger.warning("Logout returned %d", response.status_code)
        except httpx.HTTPError as e:
            logger.warning("Logout error: %s", e)
        finally:
            # Drop the local copy too; the server cannot clear it when unreachable
            self._http.cookies.clear()
            self._set(user=None, loading=False)

    def clear_error(self) -> None:
        self._set(error=None)

    def _submit(self, path: str, body: dict[str, str], default_error: str) -> None:
        self._set(loading=True, error=None)
        try:
            response = self._http.post(path, json=body)
            if response.is_success:
                user = _user_or_none(response)
                if user is None:
                    logger.warning("%s returned %d without a user", path, response.status_code)
                    self._set(error=default_error, loading=False)
                else:
                    self._set(user=user, loading=False)
            else:
                detail = _json_or_empty(response).get("detail")
                self._set(error=detail if isinstance(detail, str) and detail else default_error, loading=False)
        except httpx.HTTPError as e:
            self._set(error=str(e) or default_error, loading=False)


def _json_or_empty(response: httpx.Response) -> dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _user_or_none(response: httpx.Response) -> dict[str, Any] | None:
    """The user document in a response body, or None if there isn't one."""
    data = _json_or_empty(response)
    return data if data.get("id") is not None else None
