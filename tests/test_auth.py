"""Tests for registration and credential login."""

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.models.user import User


class TestRegistration:
    """Tests for user registration."""

    def test_register_success(self, client: TestClient, db_session: Session):
        """Register a new user and store only a bcrypt hash."""
        response = client.post(
            "/api/register",
            json={"username": "Alice", "email": "alice@x.edu", "password": "pw123"},
        )
        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Registration successful!"}

        user = db_session.query(User).filter(User.email == "alice@x.edu").one()
        assert user.username == "Alice"
        assert user.password_hash != "pw123"
        assert user.password_hash.startswith("$2b$")
        assert user.profile_pic == ""
        assert user.is_active is True

    def test_register_sends_welcome_email(self, client: TestClient, notifier):
        client.post("/api/register", json={"username": "Alice", "email": "alice@x.edu", "password": "pw123"})
        assert len(notifier.sent) == 1
        assert notifier.sent[0]["to"] == "alice@x.edu"
        assert "Hi Alice" in notifier.sent[0]["html"]

    def test_register_succeeds_when_welcome_email_fails(self, client: TestClient, notifier, db_session: Session):
        """Welcome email failure does not fail registration."""
        notifier.fail = True
        response = client.post(
            "/api/register",
            json={"username": "Alice", "email": "alice@x.edu", "password": "pw123"},
        )
        assert response.json()["success"] is True
        assert db_session.query(User).count() == 1

    def test_register_duplicate_email(self, client: TestClient, test_user: dict, db_session: Session):
        """Second registration with the same email fails and leaves the first record alone."""
        original_hash = db_session.query(User).one().password_hash

        response = client.post(
            "/api/register",
            json={"username": "Impostor", "email": "test@example.com", "password": "other"},
        )
        assert response.status_code == 200
        assert response.json() == {"success": False, "message": "Email already registered"}

        db_session.expire_all()
        user = db_session.query(User).one()
        assert user.username == "Test User"
        assert user.password_hash == original_hash

    def test_register_duplicate_email_different_case(self, client: TestClient, test_user: dict):
        response = client.post(
            "/api/register",
            json={"username": "Dup", "email": "TEST@Example.com", "password": "other"},
        )
        assert response.json()["success"] is False

    def test_register_missing_field(self, client: TestClient):
        """Structurally invalid bodies are rejected with 400."""
        response = client.post("/api/register", json={"username": "Alice", "password": "pw123"})
        assert response.status_code == 400
        data = response.json()
        assert data["success"] is False
        assert any(d["field"] == "email" for d in data["details"])

    def test_register_invalid_email(self, client: TestClient):
        response = client.post(
            "/api/register",
            json={"username": "Alice", "email": "not-an-email", "password": "pw123"},
        )
        assert response.status_code == 400

    def test_register_multibyte_password_over_byte_limit(self, client: TestClient, db_session: Session):
        """50 characters but 100 UTF-8 bytes, past what bcrypt accepts."""
        response = client.post(
            "/api/register",
            json={"username": "Eloise", "email": "eloise@x.edu", "password": "é" * 50},
        )
        assert response.status_code == 400
        data = response.json()
        assert data["success"] is False
        assert any(d["field"] == "password" for d in data["details"])
        assert db_session.query(User).count() == 0

    def test_register_multibyte_password_at_byte_limit(self, client: TestClient):
        response = client.post(
            "/api/register",
            json={"username": "Eloise", "email": "eloise@x.edu", "password": "é" * 36},
        )
        assert response.status_code == 200
        assert response.json()["success"] is True

        login = client.post("/api/login", json={"email": "eloise@x.edu", "password": "é" * 36})
        assert login.json()["success"] is True

    def test_login_multibyte_password_over_byte_limit(self, client: TestClient, test_user: dict):
        response = client.post("/api/login", json={"email": "test@example.com", "password": "ü" * 40})
        assert response.status_code == 400

    def test_validation_error_does_not_echo_password(self, client: TestClient):
        response = client.post(
            "/api/register",
            json={"username": "", "email": "alice@x.edu", "password": "s3cret-value"},
        )
        assert response.status_code == 400
        assert "s3cret-value" not in response.text


class TestLogin:
    """Tests for credential login."""

    def test_login_success(self, client: TestClient, test_user: dict):
        response = client.post(
            "/api/login",
            json={"email": "test@example.com", "password": "password123"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["redirectPath"] == "/dashboard/index.html"
        assert data["userData"] == {"username": "Test User", "email": "test@example.com", "profilePic": ""}

    def test_login_never_returns_hash(self, client: TestClient, test_user: dict):
        response = client.post(
            "/api/login",
            json={"email": "test@example.com", "password": "password123"},
        )
        assert "$2b$" not in response.text
        assert "password" not in response.json()["userData"]

    def test_login_wrong_password(self, client: TestClient, test_user: dict):
        response = client.post(
            "/api/login",
            json={"email": "test@example.com", "password": "wrongpassword"},
        )
        assert response.status_code == 200
        assert response.json() == {"success": False, "message": "Invalid credentials"}

    def test_login_unknown_email_same_response(self, client: TestClient, test_user: dict):
        """Unknown email and wrong password are indistinguishable."""
        wrong_password = client.post(
            "/api/login",
            json={"email": "test@example.com", "password": "wrongpassword"},
        )
        unknown_email = client.post(
            "/api/login",
            json={"email": "nobody@example.com", "password": "password123"},
        )
        assert unknown_email.status_code == wrong_password.status_code
        assert unknown_email.json() == wrong_password.json()

    def test_login_case_insensitive(self, client: TestClient, test_user: dict):
        response = client.post(
            "/api/login",
            json={"email": "TEST@EXAMPLE.COM", "password": "password123"},
        )
        assert response.json()["success"] is True

    def test_register_then_login(self, client: TestClient):
        client.post("/api/register", json={"username": "Bob", "email": "bob@x.edu", "password": "hunter2"})

        ok = client.post("/api/login", json={"email": "bob@x.edu", "password": "hunter2"})
        bad = client.post("/api/login", json={"email": "bob@x.edu", "password": "hunter3"})
        assert ok.json()["success"] is True
        assert bad.json()["success"] is False


class TestHealthCheck:
    """Tests for health check endpoint."""

    def test_health_check(self, client: TestClient):
        response = client.get("/api/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["app"] == "campus-connect"

    def test_security_headers(self, client: TestClient):
        response = client.get("/api/health")
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"

    def test_unknown_route_json_error(self, client: TestClient):
        response = client.get("/api/nope")
        assert response.status_code == 404
        assert response.json()["success"] is False
