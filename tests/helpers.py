"""Shared builders for the API tests: an isolated app on in-memory SQLite."""

import io
import unittest
from typing import Any

from fastapi.testclient import TestClient
from PIL import Image

from campus_pulse.core.config import Settings
from campus_pulse.core.security import create_access_token
from campus_pulse.main import create_app
from campus_pulse.models import Ping, User
from campus_pulse.services.users import create_user

TEST_SECRET = "test-secret-key"


def make_settings(**overrides: Any) -> Settings:
    """Settings for tests: in-memory DB, fast bcrypt, no .env file."""
    values: dict[str, Any] = {
        "APP_ENV": "dev",
        "DATABASE_URL": "sqlite://",
        "DB_CREATE_ALL": True,
        "JWT_SECRET": TEST_SECRET,
        "BCRYPT_ROUNDS": 4,
        "LOG_LEVEL": "WARNING",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def image_bytes(width: int, height: int, fmt: str = "PNG", mode: str = "RGB") -> bytes:
    color = (200, 30, 30, 128) if mode == "RGBA" else (200, 30, 30)
    buf = io.BytesIO()
    Image.new(mode, (width, height), color).save(buf, format=fmt)
    return buf.getvalue()


class ApiTestCase(unittest.TestCase):
    """Starts a fresh app (and database) per test through the TestClient lifespan."""

    settings_overrides: dict[str, Any] = {}

    def setUp(self) -> None:
        self.settings = make_settings(**self.settings_overrides)
        self.app = create_app(self.settings)
        self.client = TestClient(self.app)
        self.client.__enter__()
        self.addCleanup(self.client.__exit__, None, None, None)

    def session(self):
        db = self.app.state.database.session()
        self.addCleanup(db.close)
        return db

    def make_user(self, username: str, role: str = "student", password: str = "secret-pw") -> User:
        db = self.session()
        return create_user(db, username, password, role, rounds=self.settings.BCRYPT_ROUNDS)

    def headers_for(self, user: User) -> dict[str, str]:
        token = create_access_token(user.id, user.username, user.role, self.settings)
        return {"Authorization": f"Bearer {token}"}

    def post_ping(
        self,
        headers: dict[str, str],
        content: str | None = "Free pizza in the library",
        image: bytes | None = None,
        **fields: str,
    ):
        data = dict(fields)
        if content is not None:
            data["content"] = content
        files = {"image": ("photo.png", image, "image/png")} if image is not None else None
        return self.client.post("/pings", data=data, files=files, headers=headers)

    def stored_ping(self, ping_id: int) -> Ping | None:
        return self.session().get(Ping, ping_id)
