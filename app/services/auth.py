"""Authentication service."""

import logging
from dataclasses import dataclass

import bcrypt
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.user import User
from app.services.github import GitHubProfile, OAuthError

logger = logging.getLogger("peerstake")


@dataclass
class AuthResult:
    """Result of a registration or login attempt."""

    success: bool
    error: str | None = None
    user: User | None = None


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def check_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))


class AuthService:
    """Handles user registration, password login and GitHub account mapping."""

    def register(self, db: Session, email: str, username: str, password: str) -> AuthResult:
        """Register a new user. Fails if the email or username is taken."""
        email = email.lower().strip()
        username = username.strip()
        existing = (
            db.query(User)
            .filter(or_(func.lower(User.email) == email, User.username == username))
            .first()
        )
        if existing:
            return AuthResult(success=False, error="User already exists")

        user = User(
            email=email,
            username=username,
            password_hash=hash_password(password),
            display_name=username,
        )
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            # Lost a race against a concurrent registration
            db.rollback()
            return AuthResult(success=False, error="User already exists")
        db.refresh(user)

        logger.info("Registered user id=%s username=%s", user.id, user.username)
        return AuthResult(success=True, user=user)

    def authenticate(self, db: Session, email: str, password: str) -> AuthResult:
        """Authenticate a user by email and password."""
        user = db.query(User).filter(func.lower(User.email) == email.lower().strip()).first()
        if not user or not user.password_hash:
            return AuthResult(success=False, error="Invalid credentials")

        if not check_password(password, user.password_hash):
            return AuthResult(success=False, error="Invalid credentials")

        return AuthResult(success=True, user=user)

    def get_user(self, db: Session, user_id: int) -> User | None:
        return db.query(User).filter(User.id == user_id).first()

    def resolve_github_user(self, db: Session, profile: GitHubProfile) -> User:
        """Return the local account for a GitHub profile, creating it on first login.

        Raises OAuthError when the profile cannot be mapped to a new account.
        """
        user = db.query(User).filter(User.github_id == profile.id).first()
        if user:
            return user

        if not profile.email:
            raise OAuthError("email_missing", "GitHub account has no verified email address")

        email = profile.email.lower().strip()
        clash = (
            db.query(User)
            .filter(or_(func.lower(User.email) == email, User.username == profile.login))
            .first()
        )
        if clash:
            raise OAuthError("account_conflict", "An account with this email or username already exists")

        user = User(
            github_id=profile.id,
            email=email,
            username=profile.login,
            display_name=profile.name or profile.login,
            avatar=profile.avatar_url,
        )
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            # A concurrent callback for the same GitHub id may have won
            user = db.query(User).filter(User.github_id == profile.id).first()
            if user:
                return user
            raise OAuthError("account_conflict", "An account with this email or username already exists") from None
        db.refresh(user)

        logger.info("Created user id=%s from GitHub account %s", user.id, profile.login)
        return user


_auth_service: AuthService | None = None


def get_auth_service() -> AuthService:
    """Get singleton auth service instance."""
    global _auth_service
    if _auth_service is None:
        _auth_service = AuthService()
    return _auth_service
