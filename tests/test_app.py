"""Application wiring: banner, health, error envelopes, CORS and lifespan."""

import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient

from campus_pulse.core.database import Database
from campus_pulse.main import create_app
from helpers import ApiTestCase, make_settings


class TestBannerAndHealth(ApiTestCase):
    def test_banner(self) -> None:
        response = self.client.get("/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"message": "Campus Pulse API is running!"})

    def test_health(self) -> None:
        body = self.client.get("/health").json()
        self.assertEqual(body["status"], "ok")
        self.assertEqual(body, {"status": "ok", "environment": "dev", "database": "connected"})


class TestErrorEnvelope(ApiTestCase):
    def test_unknown_route(self) -> None:
        response = self.client.get("/nope")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"message": "Route not found"})

    def test_non_integer_id_is_400(self) -> None:
        user = self.make_user("someone")
        response = self.client.delete("/pings/abc", headers=self.headers_for(user))
        self.assertEqual(response.status_code, 400)
        self.assertIn("message", response.json())

    def test_unhandled_error_hides_details(self) -> None:
        @self.app.get("/boom")
        def boom() -> None:
            raise RuntimeError("secret internals")

        client = TestClient(self.app, raise_server_exceptions=False)
        with self.assertLogs("campus_pulse.core.errors", level="ERROR"):
            response = client.get("/boom")
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"message": "Internal Server Error"})
        self.assertNotIn("secret internals", response.text)


class TestCors(ApiTestCase):
    settings_overrides = {"CORS_ALLOWED_ORIGINS": ["http://localhost:5173"]}

    def test_allowed_origin_is_echoed(self) -> None:
        response = self.client.get("/", headers={"Origin": "http://localhost:5173"})
        self.assertEqual(
            response.headers.get("access-control-allow-origin"), "http://localhost:5173"
        )

    def test_other_origin_gets_no_header(self) -> None:
        response = self.client.get("/", headers={"Origin": "https://evil.example"})
        self.assertNotIn("access-control-allow-origin", response.headers)

    def test_preflight(self) -> None:
        response = self.client.options(
            "/pings",
            headers={
                "Origin": "http://localhost:5173",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "Authorization",
            },
        )
        self.assertEqual(response.status_code, 200)
        self.assertIn("POST", response.headers["access-control-allow-methods"])


class TestLifespan(unittest.TestCase):
    def test_pool_disposed_on_shutdown(self) -> None:
        app = create_app(make_settings())
        with patch.object(Database, "dispose", autospec=True) as dispose:
            with TestClient(app) as client:
                self.assertEqual(client.get("/health").status_code, 200)
                dispose.assert_not_called()
            dispose.assert_called_once()

    def test_each_app_gets_its_own_database(self) -> None:
        first, second = create_app(make_settings()), create_app(make_settings())
        with TestClient(first), TestClient(second):
            self.assertIsNot(first.state.database, second.state.database)


if __name__ == "__main__":
    unittest.main()
