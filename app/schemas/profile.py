"""Pydantic schemas for profile endpoints."""

from pydantic import EmailStr, Field

from app.schemas.auth import CamelModel, Password


class ChangePasswordRequest(CamelModel):
    email: EmailStr
    current_password: Password = Field(alias="currentPassword")
    new_password: Password = Field(alias="newPassword")


class UpdateUsernameRequest(CamelModel):
    email: EmailStr
    new_username: str = Field(alias="newUsername", min_length=1, max_length=256)


class UpdateProfilePicRequest(CamelModel):
    email: EmailStr
    profile_pic: str = Field(alias="profilePic", max_length=2048)


class UpdateActivityRequest(CamelModel):
    email: EmailStr
    is_active: bool = Field(default=True, alias="isActive")


class ProfileResponse(CamelModel):
    success: bool = True
    username: str
    email: str
    profile_pic: str = Field(default="", alias="profilePic")


class UsernameResponse(CamelModel):
    success: bool = True
    message: str = "Username updated successfully"
    username: str


class ProfilePicResponse(CamelModel):
    success: bool = True
    message: str = "Profile picture updated successfully"
    profile_pic: str = Field(alias="profilePic")
