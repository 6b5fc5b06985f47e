"""Domain errors raised by the account services.

Each error carries the HTTP status and the client-safe message the API
returns for it. Expected failures use status 200 with ``success: false``.
"""


class AccountError(Exception):
    """Base class for account failures surfaced to API clients."""

    status_code: int = 200
    message: str = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.message
        super().__init__(self.message)


class DuplicateEmail(AccountError):
    message = "Email already registered"


class InvalidCredentials(AccountError):
    """Unknown email and wrong password share this error and its message."""

    message = "Invalid credentials"


class InvalidOrExpiredToken(AccountError):
    status_code = 400
    message = "Invalid or expired reset token."


class InvalidAssertion(AccountError):
    """The identity provider rejected the sign-in credential."""

    message = "Google login failed"

    def __init__(self, reason: str | None = None) -> None:
        super().__init__()
        self.reason = reason or "Invalid identity token"


class NotFound(AccountError):
    message = "User not found"


class NotificationFailure(AccountError):
    message = "An error occurred. Please try again later."


class InternalError(AccountError):
    status_code = 500
    message = "An internal error occurred. Please try again later."


class HashingError(InternalError):
    pass


class CompletionError(Exception):
    """Base class for chat completion failures."""

    status_code: int = 500
    message: str = "Failed to generate response"


class CompletionNotConfigured(CompletionError):
    message = "AI service not configured"


class CompletionFailure(CompletionError):
    pass
