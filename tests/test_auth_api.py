"""API tests for POST /register, POST /login and bearer-token enforcement."""

import unittest
from datetime import UTC, datetime, timedelta

import jwt

from campus_pulse.core.security import TokenValid, verify_access_token
from helpers import TEST_SECRET, ApiTestCase


class TestRegister(ApiTestCase):
    def test_duplicate_username_is_rejected(self) -> None:
        body = {"username": "casey", "password": "pw123456"}
        first = self.client.post("/register", json=body)
        self.assertEqual(first.status_code, 201)
        self.assertEqual(first.json(), {"message": "User registered successfully"})

        second = self.client.post("/register", json=body)
        self.assertEqual(second.status_code, 400)
        self.assertIn("taken", second.json()["message"])

    def test_missing_fields(self) -> None:
        for body in ({}, {"username": "casey"}, {"password": "pw"}, {"username": " ", "password": "pw"}):
            response = self.client.post("/register", json=body)
            self.assertEqual(response.status_code, 400, body)
            self.assertEqual(response.json()["message"], "Username and password required")

    def test_role_defaults_to_student(self) -> None:
        self.client.post("/register", json={"username": "casey", "password": "pw"})
        login = self.client.post("/login", json={"username": "casey", "password": "pw"})
        self.assertEqual(login.json()["role"], "student")

    def test_unknown_role_is_rejected(self) -> None:
        response = self.client.post(
            "/register", json={"username": "casey", "password": "pw", "role": "superuser"}
        )
        self.assertEqual(response.status_code, 400)

    def test_password_is_not_stored_in_plain_text(self) -> None:
        self.client.post("/register", json={"username": "casey", "password": "pw123456"})
        from campus_pulse.services.users import get_user_by_username

        user = get_user_by_username(self.session(), "casey")
        self.assertIsNotNone(user)
        self.assertNotEqual(user.password_hash, "pw123456")
        self.assertTrue(user.password_hash.startswith("$2"))


class TestLogin(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.user = self.make_user("casey", role="admin", password="pw123456")

    def test_success_returns_token_for_user(self) -> None:
        response = self.client.post("/login", json={"username": "casey", "password": "pw123456"})
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["username"], "casey")
        self.assertEqual(data["role"], "admin")

        result = verify_access_token(data["token"], self.settings)
        self.assertIsInstance(result, TokenValid)
        self.assertEqual(result.claims.user_id, self.user.id)
        self.assertEqual(result.claims.username, "casey")
        self.assertEqual(result.claims.role, "admin")

    def test_wrong_password_and_unknown_user_look_identical(self) -> None:
        wrong_password = self.client.post(
            "/login", json={"username": "casey", "password": "nope"}
        )
        unknown_user = self.client.post(
            "/login", json={"username": "nobody", "password": "pw123456"}
        )
        self.assertEqual(wrong_password.status_code, 401)
        self.assertEqual(unknown_user.status_code, 401)
        self.assertEqual(wrong_password.json(), unknown_user.json())
        self.assertEqual(wrong_password.json(), {"message": "Invalid username or password"})

    def test_missing_credentials(self) -> None:
        response = self.client.post("/login", json={})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"message": "Invalid username or password"})

    def test_no_body_matches_bad_credentials(self) -> None:
        response = self.client.post("/login")
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"message": "Invalid username or password"})


class TestAuthRateLimit(ApiTestCase):
    settings_overrides = {"AUTH_RATE_LIMIT_MAX": 3}

    def test_login_and_register_share_the_budget(self) -> None:
        ok = self.client.post("/register", json={"username": "casey", "password": "pw"})
        self.assertEqual(ok.status_code, 201)
        self.assertEqual(ok.headers["RateLimit-Limit"], "3")
        self.assertEqual(ok.headers["RateLimit-Remaining"], "2")

        self.client.post("/login", json={"username": "casey", "password": "pw"})
        self.client.post("/login", json={"username": "casey", "password": "wrong"})
        blocked = self.client.post("/login", json={"username": "casey", "password": "pw"})
        self.assertEqual(blocked.status_code, 429)
        self.assertIn("Too many login/register attempts", blocked.json()["message"])
        self.assertIn("Retry-After", blocked.headers)

    def test_other_routes_are_not_limited(self) -> None:
        for _ in range(5):
            self.assertEqual(self.client.get("/pings").status_code, 200)


class TestBearerToken(ApiTestCase):
    def test_missing_token_is_401(self) -> None:
        response = self.client.post("/pings", data={"content": "hello"})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.headers.get("WWW-Authenticate"), "Bearer")

    def test_bad_token_is_403(self) -> None:
        response = self.client.post(
            "/pings", data={"content": "hello"}, headers={"Authorization": "Bearer garbage"}
        )
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json(), {"message": "Invalid token"})

    def test_expired_token_is_403(self) -> None:
        user = self.make_user("casey")
        token = jwt.encode(
            {
                "sub": str(user.id),
                "username": "casey",
                "role": "student",
                "exp": datetime.now(UTC) - timedelta(seconds=5),
            },
            TEST_SECRET,
            algorithm="HS256",
        )
        response = self.client.post(
            "/pings", data={"content": "hello"}, headers={"Authorization": f"Bearer {token}"}
        )
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json(), {"message": "Token expired"})

    def test_token_signed_elsewhere_is_403(self) -> None:
        token = jwt.encode(
            {
                "sub": "1",
                "username": "casey",
                "role": "admin",
                "exp": datetime.now(UTC) + timedelta(hours=1),
            },
            "not-the-server-secret",
            algorithm="HS256",
        )
        response = self.client.delete("/pings/1", headers={"Authorization": f"Bearer {token}"})
        self.assertEqual(response.status_code, 403)


if __name__ == "__main__":
    unittest.main()
