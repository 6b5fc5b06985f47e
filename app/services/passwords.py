"""Password hashing and verification."""

import secrets

import bcrypt

from app.errors import HashingError


class PasswordHasher:
    """bcrypt hashing with two cost factors.

    ``default_rounds`` is used when an account is created, ``strong_rounds``
    when a password is changed or reset.
    """

    def __init__(self, default_rounds: int = 10, strong_rounds: int = 12) -> None:
        self.default_rounds = default_rounds
        self.strong_rounds = max(strong_rounds, default_rounds)

    def hash(self, password: str, rounds: int | None = None) -> str:
        """Hash a password. Raises HashingError if bcrypt rejects the input."""
        try:
            salt = bcrypt.gensalt(rounds=rounds or self.default_rounds)
            return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")
        except ValueError as e:
            raise HashingError() from e

    def hash_strong(self, password: str) -> str:
        return self.hash(password, self.strong_rounds)

    def verify(self, password: str, password_hash: str) -> bool:
        """Check a password against a stored hash in constant time."""
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except ValueError as e:
            raise HashingError() from e

    @staticmethod
    def generate_secret() -> str:
        """Random password for accounts that sign in through Google only."""
        return secrets.token_hex(16)
