"""Configuration settings for PeerStake."""

import os
import secrets
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./peerstake.db")

    # JWT
    JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", "")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_EXPIRE_DAYS: int = int(os.getenv("JWT_EXPIRE_DAYS", "30"))

    # URLs
    CLIENT_URL: str = os.getenv("CLIENT_URL", "http://localhost:5173").rstrip("/")
    SERVER_URL: str = os.getenv("SERVER_URL", "http://localhost:5000").rstrip("/")

    # GitHub OAuth
    GITHUB_CLIENT_ID: str = os.getenv("GITHUB_CLIENT_ID", "")
    GITHUB_CLIENT_SECRET: str = os.getenv("GITHUB_CLIENT_SECRET", "")

    # Personal directories
    INDEX_DIR: str = os.getenv("INDEX_DIR", "index")

    # Application
    APP_ENV: str = os.getenv("APP_ENV", "development")
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    def __init__(self) -> None:
        self.jwt_secret_generated = not self.JWT_SECRET_KEY
        if self.jwt_secret_generated:
            self.JWT_SECRET_KEY = secrets.token_urlsafe(32)

    @property
    def is_production(self) -> bool:
        return self.APP_ENV.lower() == "production"

    @property
    def github_configured(self) -> bool:
        return bool(self.GITHUB_CLIENT_ID and self.GITHUB_CLIENT_SECRET)

    def validate(self) -> list[str]:
        """Validate settings and return list of warnings."""
        errors = []
        if self.jwt_secret_generated:
            errors.append("JWT_SECRET_KEY is not set - using auto-generated key (not persistent across restarts)")
        if not self.github_configured:
            errors.append("GitHub OAuth is not configured - set GITHUB_CLIENT_ID and GITHUB_CLIENT_SECRET to enable it")
        return errors


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
