"""Pytest configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.errors import InvalidAssertion, NotificationFailure
from app.models.reset_token import ResetToken  # noqa: F401
from app.models.user import User  # noqa: F401
from app.services.accounts import AccountService
from app.services.google_login import IdentityClaims
from app.services.notifier import Notifier
from app.services.passwords import PasswordHasher


class RecordingNotifier(Notifier):
    """Keeps sent emails in memory. Set ``fail`` to simulate an SMTP outage."""

    def __init__(self) -> None:
        super().__init__("http://testserver")
        self.sent: list[dict] = []
        self.reset_tokens: list[str] = []
        self.fail = False

    def deliver(self, to: str, subject: str, html: str) -> None:
        if self.fail:
            raise NotificationFailure()
        self.sent.append({"to": to, "subject": subject, "html": html})

    def send_password_reset(self, to: str, username: str, token: str) -> None:
        super().send_password_reset(to, username, token)
        self.reset_tokens.append(token)


class FakeIdentityVerifier:
    """Accepts credentials registered in ``tokens``, rejects everything else."""

    def __init__(self) -> None:
        self.tokens: dict[str, IdentityClaims] = {}

    def verify(self, credential: str) -> IdentityClaims:
        if credential not in self.tokens:
            raise InvalidAssertion("Wrong number of segments in token")
        return self.tokens[credential]


class FakeCompletionService:
    def __init__(self) -> None:
        self.messages: list[str] = []

    def complete(self, message: str) -> str:
        self.messages.append(message)
        return f"echo: {message}"


@pytest.fixture(name="db_session")
def db_session_fixture():
    """Create an in-memory SQLite database for tests."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    testing_session_local = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(name="hasher")
def hasher_fixture() -> PasswordHasher:
    """Minimum bcrypt cost keeps the suite fast."""
    return PasswordHasher(default_rounds=4, strong_rounds=5)


@pytest.fixture(name="notifier")
def notifier_fixture() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture(name="identity_verifier")
def identity_verifier_fixture() -> FakeIdentityVerifier:
    return FakeIdentityVerifier()


@pytest.fixture(name="completion_service")
def completion_service_fixture() -> FakeCompletionService:
    return FakeCompletionService()


@pytest.fixture(name="client")
def client_fixture(
    db_session: Session,
    hasher: PasswordHasher,
    notifier: RecordingNotifier,
    identity_verifier: FakeIdentityVerifier,
    completion_service: FakeCompletionService,
):
    """Create a test client with overridden collaborators and disabled rate limiting."""
    from app.dependencies import get_completion_service, get_hasher, get_identity_verifier, get_notifier
    from app.rate_limit import limiter
    from main import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_hasher] = lambda: hasher
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_identity_verifier] = lambda: identity_verifier
    app.dependency_overrides[get_completion_service] = lambda: completion_service
    limiter.enabled = False
    with TestClient(app) as c:
        yield c
    limiter.enabled = True
    app.dependency_overrides.clear()


@pytest.fixture(name="test_user")
def test_user_fixture(db_session: Session, hasher: PasswordHasher, notifier: RecordingNotifier) -> dict:
    """Register a test user and return its credentials."""
    AccountService(hasher, notifier).register(db_session, "Test User", "test@example.com", "password123")
    notifier.sent.clear()
    return {"username": "Test User", "email": "test@example.com", "password": "password123"}
