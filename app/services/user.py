"""Profile updates and personal directories."""

import logging
from pathlib import Path

from fastapi.templating import Jinja2Templates
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import get_settings
from app.models.user import User

logger = logging.getLogger("peerstake")

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))


class UserService:
    """Handles profile edits and the static per-user directory."""

    def update_profile(
        self, db: Session, user: User, display_name: str | None = None, username: str | None = None
    ) -> User:
        """Update display name and/or username. Raises ValueError if the username is taken."""
        if username:
            username = username.strip()
        if username and username != user.username:
            taken = db.query(User).filter(User.username == username).first()
            if taken:
                raise ValueError("Username already taken")
            user.username = username

        if display_name:
            user.display_name = display_name.strip()

        try:
            db.commit()
        except IntegrityError:
            # Lost a race against a concurrent rename or registration
            db.rollback()
            raise ValueError("Username already taken") from None
        db.refresh(user)
        return user

    def create_directory(self, user: User) -> tuple[bool, str]:
        """Create INDEX_DIR/<user id>/index.html. Returns (created, public path)."""
        public_path = f"/index/{user.id}"
        dir_path = Path(get_settings().INDEX_DIR) / str(user.id)
        page = dir_path / "index.html"
        if page.exists():
            return False, public_path

        dir_path.mkdir(parents=True, exist_ok=True)
        html = templates.get_template("personal_space.html").render(
            name=user.display_name or user.username or "User"
        )
        page.write_text(html, encoding="utf-8")

        logger.info("Created personal directory %s for user %d", dir_path, user.id)
        return True, public_path


_user_service: UserService | None = None


def get_user_service() -> UserService:
    """Get singleton user service instance."""
    global _user_service
    if _user_service is None:
        _user_service = UserService()
    return _user_service
