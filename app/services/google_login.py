"""Google sign-in: ID token verification and account linking."""

import logging
from dataclasses import dataclass

from google.auth import exceptions as google_exceptions
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.errors import InternalError, InvalidAssertion, NotificationFailure
from app.models.user import User
from app.services.accounts import UserView, find_user_by_email, normalize_email
from app.services.notifier import Notifier
from app.services.passwords import PasswordHasher

logger = logging.getLogger("campus_connect")


@dataclass
class IdentityClaims:
    """Verified claims from a Google ID token."""

    email: str
    name: str
    picture: str = ""


class GoogleIdentityVerifier:
    """Verifies Google ID tokens against the configured OAuth client id."""

    def __init__(self, client_id: str) -> None:
        self.client_id = client_id
        self._request = google_requests.Request()

    def verify(self, credential: str) -> IdentityClaims:
        """Validate signature, audience, issuer and expiry. Raises InvalidAssertion."""
        if not self.client_id:
            logger.error("GOOGLE_CLIENT_ID is not configured")
            raise InternalError()

        try:
            payload = id_token.verify_oauth2_token(credential, self._request, self.client_id)
        except ValueError as e:
            raise InvalidAssertion(str(e)) from e
        except google_exceptions.TransportError as e:
            logger.error("Google certificate fetch failed: %s", e)
            raise InternalError() from e
        except google_exceptions.GoogleAuthError as e:
            # Wrong issuer and similar claim failures
            raise InvalidAssertion(str(e)) from e

        return claims_from_payload(payload)


def claims_from_payload(payload: dict) -> IdentityClaims:
    email = payload.get("email")
    if not email:
        raise InvalidAssertion("Token has no email claim")
    if payload.get("email_verified") is False:
        raise InvalidAssertion("Email address is not verified")
    return IdentityClaims(
        email=email,
        name=payload.get("name") or email.split("@")[0],
        picture=payload.get("picture") or "",
    )


class GoogleLoginService:
    """Exchanges a Google credential for a local account, creating it on first use.

    An existing account is never modified. When it has no stored picture the
    Google picture is shown in the returned view but not saved.
    """

    def __init__(self, verifier: GoogleIdentityVerifier, hasher: PasswordHasher, notifier: Notifier) -> None:
        self.verifier = verifier
        self.hasher = hasher
        self.notifier = notifier

    def login(self, db: Session, credential: str) -> UserView:
        claims = self.verifier.verify(credential)

        user = find_user_by_email(db, claims.email)
        if user:
            return UserView.from_user(user, fallback_pic=claims.picture)

        user = User(
            username=claims.name,
            email=normalize_email(claims.email),
            password_hash=self.hasher.hash(self.hasher.generate_secret()),
            profile_pic=claims.picture,
            is_active=True,
        )
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            # A concurrent sign-in created the account first
            db.rollback()
            existing = find_user_by_email(db, claims.email)
            if not existing:
                raise InternalError() from None
            return UserView.from_user(existing, fallback_pic=claims.picture)
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception("Google account creation failed")
            raise InternalError() from e
        db.refresh(user)
        logger.info("Created account %s from Google sign-in", user.id)

        try:
            self.notifier.send_google_welcome(user.email, user.username)
        except NotificationFailure:
            logger.warning("Welcome email to %s failed, continuing", user.email)

        return UserView.from_user(user)
