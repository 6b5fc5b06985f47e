"""Password reset token lifecycle."""

import logging
import secrets
from datetime import datetime, timedelta

from fastapi import BackgroundTasks
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.errors import InternalError, InvalidOrExpiredToken, NotificationFailure
from app.models.reset_token import ResetToken
from app.models.user import User
from app.services.accounts import commit_or_raise, find_user_by_email
from app.services.notifier import Notifier
from app.services.passwords import PasswordHasher

logger = logging.getLogger("campus_connect")

MASKED_RESET_MESSAGE = "If this email exists, you will receive reset instructions."
RESET_SENT_MESSAGE = "Reset instructions sent to your email."


def reset_request_message(issued: bool, mask: bool = True) -> str:
    """Message returned for a reset request.

    With ``mask`` on, a known and an unknown email get the same text.
    """
    if mask or not issued:
        return MASKED_RESET_MESSAGE
    return RESET_SENT_MESSAGE


class PasswordResetService:
    """Issues and redeems single-use password reset tokens."""

    def __init__(self, hasher: PasswordHasher, notifier: Notifier, expire_minutes: int = 60) -> None:
        self.hasher = hasher
        self.notifier = notifier
        self.expire_minutes = expire_minutes

    def request_reset(self, db: Session, email: str, background_tasks: BackgroundTasks | None = None) -> str | None:
        """Create a reset token for the given email and email the link.

        Returns the token if the user exists, None otherwise. With
        ``background_tasks`` the email goes out after the response and a
        delivery failure is only logged. Without it the email is sent inline
        and NotificationFailure propagates.
        """
        user = find_user_by_email(db, email)
        if not user:
            logger.info("Password reset requested for unregistered email")
            return None

        token = secrets.token_hex(32)
        db.add(
            ResetToken(
                user_id=user.id,
                token=token,
                expires_at=datetime.utcnow() + timedelta(minutes=self.expire_minutes),
                used=False,
            )
        )
        commit_or_raise(db, "Reset token creation")
        logger.info("Reset token issued for user %s", user.id)

        if background_tasks is not None:
            background_tasks.add_task(self._send_reset_email, user.email, user.username, token)
        else:
            self.notifier.send_password_reset(user.email, user.username, token)
        return token

    def _send_reset_email(self, to: str, username: str, token: str) -> None:
        try:
            self.notifier.send_password_reset(to, username, token)
        except NotificationFailure:
            logger.error("Reset email to %s failed; the token stays valid until it expires", to)

    def redeem(self, db: Session, token: str, new_password: str) -> None:
        """Set a new password using a reset token.

        The token is claimed with a conditional update and the password is
        written in the same transaction, so either both happen or neither.
        """
        password_hash = self.hasher.hash_strong(new_password)
        now = datetime.utcnow()

        try:
            claimed = db.execute(
                update(ResetToken)
                .where(
                    ResetToken.token == token,
                    ResetToken.used.is_(False),
                    ResetToken.expires_at > now,
                )
                .values(used=True)
                .execution_options(synchronize_session=False)
            )
            if claimed.rowcount != 1:
                db.rollback()
                raise InvalidOrExpiredToken()

            user_id = db.query(ResetToken.user_id).filter(ResetToken.token == token).scalar()
            updated = db.execute(
                update(User)
                .where(User.id == user_id)
                .values(password_hash=password_hash)
                .execution_options(synchronize_session=False)
            )
            if updated.rowcount != 1:
                db.rollback()
                logger.warning("Reset token points at missing user %s", user_id)
                raise InvalidOrExpiredToken()
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception("Password reset failed")
            raise InternalError() from e

        commit_or_raise(db, "Password reset")
        logger.info("Password reset completed for user %s", user_id)
