from fastapi.testclient import TestClient

from inventory_api.config import Settings
from inventory_api.database import Database
from inventory_api.main import create_app
from inventory_api.models.user import User

PASSWORD = "Password123"


def make_settings(**overrides) -> Settings:
    values = dict(
        ENVIRONMENT="test",
        DATABASE_URL="sqlite://",
        JWT_SECRET="test-secret-key",
        BCRYPT_ROUNDS=4,
        LOG_LEVEL="WARNING",
        RATE_LIMIT_GENERAL_MAX=1000,
        RATE_LIMIT_AUTH_MAX=1000,
    )
    values.update(overrides)
    return Settings(**values)


def make_database() -> Database:
    database = Database("sqlite://")
    database.create_all()
    return database


def add_user(db, username="alice", email="alice@example.com", role="user", is_active=True) -> User:
    user = User(
        username=username,
        email=email,
        password_hash="not-a-real-hash",
        role=role,
        is_active=is_active,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


class ApiTestMixin:
    """Starts a fresh app with an in-memory database for every test."""

    settings_overrides: dict = {}

    def setUp(self):
        self.app = create_app(make_settings(**self.settings_overrides))
        self.client = TestClient(self.app)
        self.client.__enter__()
        self.addCleanup(self.client.__exit__, None, None, None)

    def register(self, username="alice", email="alice@example.com", password=PASSWORD, **extra):
        payload = {"username": username, "email": email, "password": password}
        payload.update(extra)
        return self.client.post("/api/auth/register", json=payload)

    def register_token(self, username="alice", email="alice@example.com") -> str:
        response = self.register(username=username, email=email)
        assert response.status_code == 201, response.text
        return response.json()["token"]

    @staticmethod
    def auth(token: str) -> dict:
        return {"Authorization": "Bearer {}".format(token)}
