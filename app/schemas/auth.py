"""Pydantic schemas for authentication endpoints."""

from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field

PASSWORD_MAX_BYTES = 72  # bcrypt's input limit


def _within_bcrypt_limit(value: str) -> str:
    if len(value.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise ValueError(f"Password must be at most {PASSWORD_MAX_BYTES} bytes")
    return value


Password = Annotated[str, Field(min_length=1), AfterValidator(_within_bcrypt_limit)]


class CamelModel(BaseModel):
    """Accepts and emits the camelCase names the web client uses."""

    model_config = ConfigDict(populate_by_name=True)


class RegisterRequest(BaseModel):
    username: str = Field(min_length=1, max_length=256)
    email: EmailStr
    password: Password


class LoginRequest(BaseModel):
    email: EmailStr
    password: Password


class GoogleLoginRequest(BaseModel):
    credential: str = Field(min_length=1)


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(CamelModel):
    token: str = Field(min_length=1, max_length=128)
    new_password: Password = Field(alias="newPassword")


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class UserData(CamelModel):
    username: str
    email: str
    profile_pic: str = Field(default="", alias="profilePic")


class LoginResponse(CamelModel):
    success: bool = True
    message: str
    redirect_path: str = Field(alias="redirectPath")
    user_data: UserData = Field(alias="userData")
