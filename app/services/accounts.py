"""Account registration, login and profile service."""

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.errors import DuplicateEmail, InternalError, InvalidCredentials, NotFound, NotificationFailure
from app.models.user import User
from app.services.notifier import Notifier
from app.services.passwords import PasswordHasher

logger = logging.getLogger("campus_connect")


@dataclass
class UserView:
    """Public view of a user. Never carries the password hash."""

    username: str
    email: str
    profile_pic: str = ""

    @classmethod
    def from_user(cls, user: User, fallback_pic: str | None = None) -> "UserView":
        return cls(
            username=user.username,
            email=user.email,
            profile_pic=user.profile_pic or fallback_pic or "",
        )


def normalize_email(email: str) -> str:
    return email.strip().lower()


def find_user_by_email(db: Session, email: str) -> User | None:
    try:
        return db.query(User).filter(User.email == normalize_email(email)).first()
    except SQLAlchemyError as e:
        logger.exception("User lookup failed")
        raise InternalError() from e


def commit_or_raise(db: Session, action: str) -> None:
    """Commit the session, rolling back and raising InternalError on failure."""
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("%s failed", action)
        raise InternalError() from e


class AccountService:
    """Handles user registration, authentication and profile updates."""

    def __init__(self, hasher: PasswordHasher, notifier: Notifier) -> None:
        self.hasher = hasher
        self.notifier = notifier

    def register(self, db: Session, username: str, email: str, password: str) -> UserView:
        """Create an account. Raises DuplicateEmail if the email is taken."""
        email = normalize_email(email)
        if find_user_by_email(db, email):
            raise DuplicateEmail()

        user = User(
            username=username.strip(),
            email=email,
            password_hash=self.hasher.hash(password),
            is_active=True,
        )
        db.add(user)
        try:
            db.commit()
        except IntegrityError as e:
            # Lost a race with a concurrent registration for the same email
            db.rollback()
            raise DuplicateEmail() from e
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception("Registration failed")
            raise InternalError() from e
        db.refresh(user)

        try:
            self.notifier.send_welcome(user.email, user.username)
        except NotificationFailure:
            logger.warning("Welcome email to %s failed, continuing", user.email)

        return UserView.from_user(user)

    def authenticate(self, db: Session, email: str, password: str) -> UserView:
        """Check email and password. Both failure cases raise InvalidCredentials."""
        user = find_user_by_email(db, email)
        if not user or not self.hasher.verify(password, user.password_hash):
            raise InvalidCredentials()
        return UserView.from_user(user)

    def change_password(self, db: Session, email: str, current_password: str, new_password: str) -> None:
        user = self._get_user(db, email)
        if not self.hasher.verify(current_password, user.password_hash):
            raise InvalidCredentials("Current password is incorrect.")

        user.password_hash = self.hasher.hash_strong(new_password)
        commit_or_raise(db, "Password change")

    def get_profile(self, db: Session, email: str) -> UserView:
        return UserView.from_user(self._get_user(db, email))

    def update_username(self, db: Session, email: str, username: str) -> UserView:
        user = self._get_user(db, email)
        user.username = username.strip()
        commit_or_raise(db, "Username update")
        return UserView.from_user(user)

    def update_profile_pic(self, db: Session, email: str, profile_pic: str) -> UserView:
        user = self._get_user(db, email)
        user.profile_pic = profile_pic
        commit_or_raise(db, "Profile picture update")
        return UserView.from_user(user)

    def update_activity(self, db: Session, email: str, is_active: bool = True) -> None:
        """Record a heartbeat: bump last_active_at and set the active flag."""
        user = self._get_user(db, email)
        user.last_active_at = datetime.utcnow()
        user.is_active = is_active
        commit_or_raise(db, "Activity update")

    def _get_user(self, db: Session, email: str) -> User:
        user = find_user_by_email(db, email)
        if not user:
            raise NotFound()
        return user
