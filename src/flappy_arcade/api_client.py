"""
api_client.py: HTTP client for the score server and the player's session.

Nothing in here may raise into the game loop: BackendClient raises ApiError
subclasses, UserSession catches them and keeps a user-visible message.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import List, Optional, Tuple

import httpx

from .constants import API_URL, LEADERBOARD_DEFAULT_LIMIT
from .data_models import User

logger = logging.getLogger("flappy.api")


# ----------------- Errors -----------------

class ApiError(Exception):
    """Base class for every failure at the backend boundary."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ValidationError(ApiError):
    """The request was rejected as invalid (user-correctable)."""


class AuthError(ApiError):
    """Missing, expired or foreign session; the player should log in again."""


class NotFoundError(ApiError):
    pass


class ServerError(ApiError):
    pass


class TransportError(ApiError):
    """The server could not be reached at all."""


def error_for_status(status_code: int, message: str) -> ApiError:
    if status_code in (401, 403):
        return AuthError(message, status_code)
    if status_code == 404:
        return NotFoundError(message, status_code)
    if status_code >= 500:
        return ServerError(message, status_code)
    return ValidationError(message, status_code)


# ----------------- Backend client -----------------

class BackendClient:
    """Thin JSON wrapper over the score server. The session cookie lives on the httpx client."""

    def __init__(self, base_url: str = API_URL, timeout_s: float = 5.0,
                 transport: Optional[httpx.BaseTransport] = None):
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            timeout=httpx.Timeout(timeout_s),
            transport=transport,
        )

    def close(self):
        self._client.close()

    def _request(self, method: str, path: str, **kwargs) -> dict:
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.TransportError as e:
            raise TransportError(f"Network error: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = {}

        if response.is_error:
            message = data.get("error") if isinstance(data, dict) else None
            raise error_for_status(
                response.status_code, message or f"Request failed ({response.status_code})")
        return data

    def login(self, display_name: str) -> User:
        data = self._request("POST", "/api/login", json={"displayName": display_name})
        return User.from_dict(data["user"])

    def login_with_password(self, username: str, password: str) -> User:
        data = self._request(
            "POST", "/api/login", json={"username": username, "password": password})
        return User.from_dict(data["user"])

    def register(self, username: str, password: str, display_name: str) -> User:
        data = self._request("POST", "/api/register", json={
            "username": username,
            "password": password,
            "displayName": display_name,
        })
        return User.from_dict(data["user"])

    def logout(self):
        self._request("POST", "/api/logout")

    def submit_score(self, score: int) -> dict:
        return self._request("POST", "/api/scores", json={"score": score})["score"]

    def leaderboard(self, limit: int = LEADERBOARD_DEFAULT_LIMIT) -> List[dict]:
        return self._request("GET", "/api/leaderboard", params={"limit": limit})["leaderboard"]

    def me(self) -> User:
        return User.from_dict(self._request("GET", "/api/me")["user"])

    def user(self, user_id: int) -> User:
        return User.from_dict(self._request("GET", f"/api/users/{user_id}")["user"])

    def user_scores(self, user_id: int) -> List[dict]:
        return self._request("GET", f"/api/users/{user_id}/scores")["scores"]


# ----------------- Session -----------------

class UserSession:
    """
    The logged-in identity used to attribute scores. Passed explicitly to the
    controller; network work happens on a single background worker.
    """

    def __init__(self, client: BackendClient):
        self.client = client
        self.user: Optional[User] = None
        self.error: Optional[str] = None
        self.leaderboard: List[Tuple[str, int]] = []
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="flappy-net")

    @property
    def logged_in(self) -> bool:
        return self.user is not None

    def clear_error(self):
        self.error = None

    def _fail(self, action: str, error: ApiError) -> bool:
        self.error = error.message
        if isinstance(error, AuthError):
            self.user = None
        logger.warning("%s failed: %s", action, error.message)
        return False

    def login(self, display_name: str) -> bool:
        self.error = None
        name = display_name.strip()
        if not name:
            self.error = "Name is required"
            return False
        try:
            self.user = self.client.login(name)
        except ApiError as e:
            return self._fail("Login", e)
        logger.info("Logged in as %s (id=%d)", self.user.display_name, self.user.id)
        return True

    def logout(self):
        try:
            self.client.logout()
        except ApiError as e:
            logger.warning("Logout request failed: %s", e.message)
        self.user = None
        self.error = None

    def submit_score(self, score: int) -> bool:
        if self.user is None:
            self.error = "You must be logged in to submit scores"
            return False
        try:
            record = self.client.submit_score(score)
        except ApiError as e:
            return self._fail("Score submission", e)
        logger.info("Submitted score %d (record %s)", score, record.get("id"))
        return True

    def submit_score_async(self, score: int) -> Future:
        """Fire-and-forget submission; the returned future resolves to True on success."""
        return self._executor.submit(self.submit_score, score)

    def refresh_leaderboard(self, limit: int = LEADERBOARD_DEFAULT_LIMIT) -> bool:
        try:
            rows = self.client.leaderboard(limit)
        except ApiError as e:
            return self._fail("Leaderboard", e)
        self.leaderboard = [(row["user"]["displayName"], row["score"]) for row in rows]
        return True

    def refresh_leaderboard_async(self, limit: int = LEADERBOARD_DEFAULT_LIMIT) -> Future:
        return self._executor.submit(self.refresh_leaderboard, limit)

    def close(self):
        """Lets queued submissions finish before the HTTP client goes away."""
        self._executor.shutdown(wait=True)
        self.client.close()
