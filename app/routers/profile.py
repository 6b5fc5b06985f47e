"""Profile and account settings endpoints."""

from fastapi import APIRouter, Depends, Query
from pydantic import EmailStr
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_account_service
from app.schemas.auth import MessageResponse
from app.schemas.profile import (
    ChangePasswordRequest,
    ProfilePicResponse,
    ProfileResponse,
    UpdateActivityRequest,
    UpdateProfilePicRequest,
    UpdateUsernameRequest,
    UsernameResponse,
)
from app.services.accounts import AccountService

router = APIRouter(prefix="/api", tags=["Profile"])


@router.post("/change-password", response_model=MessageResponse)
def change_password(
    body: ChangePasswordRequest,
    db: Session = Depends(get_db),
    service: AccountService = Depends(get_account_service),
) -> MessageResponse:
    """Change password after checking the current one."""
    service.change_password(db, body.email, body.current_password, body.new_password)
    return MessageResponse(message="Password updated successfully.")


@router.get("/user-profile", response_model=ProfileResponse)
def user_profile(
    email: EmailStr = Query(...),
    db: Session = Depends(get_db),
    service: AccountService = Depends(get_account_service),
) -> ProfileResponse:
    view = service.get_profile(db, email)
    return ProfileResponse(username=view.username, email=view.email, profile_pic=view.profile_pic)


@router.post("/update-username", response_model=UsernameResponse)
def update_username(
    body: UpdateUsernameRequest,
    db: Session = Depends(get_db),
    service: AccountService = Depends(get_account_service),
) -> UsernameResponse:
    view = service.update_username(db, body.email, body.new_username)
    return UsernameResponse(username=view.username)


@router.post("/update-profile-pic", response_model=ProfilePicResponse)
def update_profile_pic(
    body: UpdateProfilePicRequest,
    db: Session = Depends(get_db),
    service: AccountService = Depends(get_account_service),
) -> ProfilePicResponse:
    view = service.update_profile_pic(db, body.email, body.profile_pic)
    return ProfilePicResponse(profile_pic=view.profile_pic)


@router.post("/update-activity")
def update_activity(
    body: UpdateActivityRequest,
    db: Session = Depends(get_db),
    service: AccountService = Depends(get_account_service),
) -> dict:
    """Heartbeat from the dashboard."""
    service.update_activity(db, body.email, body.is_active)
    return {"success": True}
