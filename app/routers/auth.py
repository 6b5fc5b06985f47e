"""Authentication API endpoints."""

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from sqlalchemy.orm import Session

from app.config import Settings, get_settings
from app.database import get_db
from app.dependencies import get_account_service, get_google_login_service, get_password_reset_service
from app.rate_limit import limiter
from app.schemas.auth import (
    ForgotPasswordRequest,
    GoogleLoginRequest,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    ResetPasswordRequest,
    UserData,
)
from app.services.accounts import AccountService, UserView
from app.services.google_login import GoogleLoginService
from app.services.password_reset import PasswordResetService, reset_request_message

router = APIRouter(prefix="/api", tags=["Authentication"])


def _login_response(message: str, view: UserView, settings: Settings) -> LoginResponse:
    return LoginResponse(
        message=message,
        redirect_path=settings.REDIRECT_PATH,
        user_data=UserData(username=view.username, email=view.email, profile_pic=view.profile_pic),
    )


@router.post("/register", response_model=MessageResponse)
def register(
    body: RegisterRequest,
    db: Session = Depends(get_db),
    service: AccountService = Depends(get_account_service),
) -> MessageResponse:
    """Create a new account."""
    service.register(db, body.username, body.email, body.password)
    return MessageResponse(message="Registration successful!")


@router.post("/login", response_model=LoginResponse)
def login(
    body: LoginRequest,
    db: Session = Depends(get_db),
    service: AccountService = Depends(get_account_service),
    settings: Settings = Depends(get_settings),
) -> LoginResponse:
    """Log in with email and password."""
    view = service.authenticate(db, body.email, body.password)
    return _login_response("Login successful!", view, settings)


@router.post("/google-login", response_model=LoginResponse)
def google_login(
    body: GoogleLoginRequest,
    db: Session = Depends(get_db),
    service: GoogleLoginService = Depends(get_google_login_service),
    settings: Settings = Depends(get_settings),
) -> LoginResponse:
    """Log in with a Google ID token, creating the account on first use."""
    view = service.login(db, body.credential)
    return _login_response("Google login successful", view, settings)


@router.post("/forgot-password", response_model=MessageResponse)
@limiter.limit(get_settings().FORGOT_PASSWORD_RATE_LIMIT)
def forgot_password(
    request: Request,
    body: ForgotPasswordRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    service: PasswordResetService = Depends(get_password_reset_service),
    settings: Settings = Depends(get_settings),
) -> MessageResponse:
    """Email a reset link. The reply does not reveal whether the account exists."""
    token = service.request_reset(
        db, body.email, background_tasks=background_tasks if settings.RESET_EMAIL_IN_BACKGROUND else None
    )
    return MessageResponse(message=reset_request_message(token is not None, mask=settings.MASK_ACCOUNT_EXISTENCE))


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(
    body: ResetPasswordRequest,
    db: Session = Depends(get_db),
    service: PasswordResetService = Depends(get_password_reset_service),
) -> MessageResponse:
    """Set a new password with a reset token."""
    service.redeem(db, body.token, body.new_password)
    return MessageResponse(message="Password reset successful.")
