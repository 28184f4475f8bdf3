"""JWT Token Service."""

from datetime import datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from app.config import get_settings


class JWTService:
    """Issues and verifies the stateless session tokens."""

    def __init__(self) -> None:
        settings = get_settings()
        self.secret_key = settings.JWT_SECRET_KEY
        self.algorithm = settings.JWT_ALGORITHM
        self.expire_days = settings.JWT_EXPIRE_DAYS

    def create_token(self, user_id: int, expires_delta: timedelta | None = None) -> str:
        """Create a token whose subject is the given user id."""
        if expires_delta is None:
            expires_delta = timedelta(days=self.expire_days)
        payload = {
            "sub": str(user_id),
            "exp": datetime.utcnow() + expires_delta,
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def decode_token(self, token: str) -> dict[str, Any] | None:
        """Verify signature and expiry. Returns None if invalid."""
        try:
            return jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError:
            return None

    @staticmethod
    def get_subject(payload: dict[str, Any]) -> int | None:
        """User id carried by a decoded payload, or None if absent or malformed."""
        try:
            return int(payload["sub"])
        except (KeyError, TypeError, ValueError):
            return None


_jwt_service: JWTService | None = None


def get_jwt_service() -> JWTService:
    """Get singleton JWT service instance."""
    global _jwt_service
    if _jwt_service is None:
        _jwt_service = JWTService()
    return _jwt_service
