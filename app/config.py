"""Configuration settings for Campus Connect."""

import os
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./campus_connect.db")

    # Password hashing (bcrypt cost factors)
    BCRYPT_ROUNDS_DEFAULT: int = int(os.getenv("BCRYPT_ROUNDS_DEFAULT", "10"))
    BCRYPT_ROUNDS_STRONG: int = int(os.getenv("BCRYPT_ROUNDS_STRONG", "12"))

    # Password reset
    RESET_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("RESET_TOKEN_EXPIRE_MINUTES", "60"))
    FORGOT_PASSWORD_RATE_LIMIT: str = os.getenv("FORGOT_PASSWORD_RATE_LIMIT", "3 per 15 minutes")
    MASK_ACCOUNT_EXISTENCE: bool = os.getenv("MASK_ACCOUNT_EXISTENCE", "true").lower() == "true"
    # Deliver reset mail after the response is sent
    RESET_EMAIL_IN_BACKGROUND: bool = os.getenv("RESET_EMAIL_IN_BACKGROUND", "true").lower() == "true"
    SITE_URL: str = os.getenv("SITE_URL", "http://localhost:3000")

    # Google sign-in
    GOOGLE_CLIENT_ID: str = os.getenv("GOOGLE_CLIENT_ID", "")

    # Mail
    MAIL_BACKEND: str = os.getenv("MAIL_BACKEND", "console")
    SMTP_HOST: str = os.getenv("SMTP_HOST", "smtp.gmail.com")
    SMTP_PORT: int = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USERNAME: str = os.getenv("SMTP_USERNAME", "")
    SMTP_PASSWORD: str = os.getenv("SMTP_PASSWORD", "")
    SMTP_FROM: str = os.getenv("SMTP_FROM", "VIT Connect <no-reply@localhost>")
    SMTP_USE_TLS: bool = os.getenv("SMTP_USE_TLS", "true").lower() == "true"

    # Gemini chat
    GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
    GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-pro")
    GEMINI_API_URL: str = os.getenv("GEMINI_API_URL", "https://generativelanguage.googleapis.com/v1beta")
    GEMINI_TIMEOUT_SECONDS: float = float(os.getenv("GEMINI_TIMEOUT_SECONDS", "30"))

    # Application
    AUTO_CREATE_TABLES: bool = os.getenv("AUTO_CREATE_TABLES", "false").lower() == "true"
    APP_ENV: str = os.getenv("APP_ENV", "development")
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    REDIRECT_PATH: str = os.getenv("REDIRECT_PATH", "/dashboard/index.html")
    CORS_ORIGINS: list[str] = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

    def validate(self) -> list[str]:
        """Validate settings and return list of warnings."""
        errors = []
        if self.BCRYPT_ROUNDS_STRONG < self.BCRYPT_ROUNDS_DEFAULT:
            errors.append("BCRYPT_ROUNDS_STRONG is lower than BCRYPT_ROUNDS_DEFAULT - password changes use the weaker cost")
        if not self.GOOGLE_CLIENT_ID:
            errors.append("GOOGLE_CLIENT_ID is not set - Google sign-in will fail")
        if not self.GEMINI_API_KEY:
            errors.append("GEMINI_API_KEY is not set - /api/chat will return errors")
        if self.MAIL_BACKEND == "smtp" and not (self.SMTP_USERNAME and self.SMTP_PASSWORD):
            errors.append("SMTP credentials are not set - outgoing mail will likely be rejected")
        return errors


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
