"""Dependency providers for FastAPI routes.

Collaborators (hasher, notifier, identity verifier, completion client) are
built once at startup and stored on ``app.state``. Tests replace them through
``app.dependency_overrides``.
"""

from fastapi import Depends, Request

from app.config import Settings, get_settings
from app.services.accounts import AccountService
from app.services.completion import GeminiCompletionService
from app.services.google_login import GoogleIdentityVerifier, GoogleLoginService
from app.services.notifier import Notifier
from app.services.password_reset import PasswordResetService
from app.services.passwords import PasswordHasher


def get_hasher(request: Request) -> PasswordHasher:
    return request.app.state.hasher


def get_notifier(request: Request) -> Notifier:
    return request.app.state.notifier


def get_identity_verifier(request: Request) -> GoogleIdentityVerifier:
    return request.app.state.identity_verifier


def get_completion_service(request: Request) -> GeminiCompletionService:
    return request.app.state.completion_service


def get_account_service(
    hasher: PasswordHasher = Depends(get_hasher),
    notifier: Notifier = Depends(get_notifier),
) -> AccountService:
    return AccountService(hasher, notifier)


def get_password_reset_service(
    hasher: PasswordHasher = Depends(get_hasher),
    notifier: Notifier = Depends(get_notifier),
    settings: Settings = Depends(get_settings),
) -> PasswordResetService:
    return PasswordResetService(hasher, notifier, expire_minutes=settings.RESET_TOKEN_EXPIRE_MINUTES)


def get_google_login_service(
    verifier: GoogleIdentityVerifier = Depends(get_identity_verifier),
    hasher: PasswordHasher = Depends(get_hasher),
    notifier: Notifier = Depends(get_notifier),
) -> GoogleLoginService:
    return GoogleLoginService(verifier, hasher, notifier)
