"""HTTP tests for the users API."""

from fastapi.testclient import TestClient

from src.userauth.core.storage.user_store import InMemoryUserStore
from tests.fixtures.api import API


def register(client: TestClient, payload: dict):
    return client.post(f"{API}/register", json=payload)


def login(client: TestClient, email="a@x.com", password="secret1"):
    return client.post(f"{API}/login", json={"email": email, "password": password})


class TestRegisterLoginRefreshScenario:
    def test_register_login_refresh(
        self, client: TestClient, api_store: InMemoryUserStore, registration_payload
    ):
        """Register, log in, then rotate the refresh token."""
        response = register(client, registration_payload)

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["statusCode"] == 201
        assert body["data"]["emailVerified"] is False
        assert "passwordHash" not in body["data"]
        stored = api_store.find_one(email="a@x.com")
        assert stored.email_verified is False

        response = login(client)

        assert response.status_code == 200
        tokens = response.json()["data"]
        assert tokens["accessToken"]
        assert tokens["refreshToken"]
        assert tokens["accessToken"] != tokens["refreshToken"]

        response = client.post(
            f"{API}/tokens/refresh", json={"refreshToken": tokens["refreshToken"]}
        )

        assert response.status_code == 200
        rotated = response.json()["data"]
        assert rotated["refreshToken"] != tokens["refreshToken"]


class TestRegister:
    def test_duplicate_email(self, client: TestClient, registration_payload):
        register(client, registration_payload)

        response = register(client, {**registration_payload, "phone": "+2000"})

        assert response.status_code == 409
        body = response.json()
        assert body == {
            "success": False,
            "statusCode": 409,
            "message": body["message"],
            "errors": [
                {"field": "email", "value": "a@x.com", "message": "email is already in use"}
            ],
        }

    def test_password_mismatch(self, client: TestClient, registration_payload):
        response = register(client, {**registration_payload, "confirmPassword": "other"})

        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_missing_fields(self, client: TestClient):
        response = register(client, {"email": "a@x.com"})

        assert response.status_code == 400
        fields = {e["field"] for e in response.json()["errors"]}
        assert fields == {"firstName", "password", "confirmPassword", "phone"}

    def test_malformed_body_is_bad_request(self, client: TestClient):
        response = client.post(f"{API}/register", json={"email": ["not", "a", "string"]})

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "email"


class TestLogin:
    def test_sets_http_only_cookies(self, client: TestClient, registration_payload):
        register(client, registration_payload)

        response = login(client)

        set_cookie = response.headers.get_list("set-cookie")
        assert any(c.startswith("auth_token=") and "HttpOnly" in c for c in set_cookie)
        assert any(c.startswith("session_token=") and "HttpOnly" in c for c in set_cookie)

    def test_wrong_password(self, client: TestClient, registration_payload):
        register(client, registration_payload)

        response = login(client, password="wrong")

        assert response.status_code == 401
        assert "set-cookie" not in response.headers

    def test_unknown_email(self, client: TestClient):
        assert login(client, email="nobody@x.com").status_code == 404


class TestSession:
    def test_profile_with_cookie(self, client: TestClient, registration_payload):
        register(client, registration_payload)
        login(client)

        response = client.get(f"{API}/profile")

        assert response.status_code == 200
        assert response.json()["data"]["email"] == "a@x.com"

    def test_profile_with_bearer_token(self, client: TestClient, registration_payload):
        register(client, registration_payload)
        access = login(client).json()["data"]["accessToken"]
        client.cookies.clear()

        response = client.get(f"{API}/profile", headers={"Authorization": f"Bearer {access}"})

        assert response.status_code == 200

    def test_profile_requires_auth(self, client: TestClient):
        response = client.get(f"{API}/profile")

        assert response.status_code == 401
        assert response.json()["success"] is False

    def test_refresh_from_cookie(self, client: TestClient, registration_payload):
        register(client, registration_payload)
        first = login(client).json()["data"]

        response = client.post(f"{API}/tokens/refresh")

        assert response.status_code == 200
        assert response.json()["data"]["refreshToken"] != first["refreshToken"]
        assert client.cookies.get("session_token") == response.json()["data"]["refreshToken"]

    def test_superseded_refresh_token(self, client: TestClient, registration_payload):
        register(client, registration_payload)
        first = login(client).json()["data"]
        client.post(f"{API}/tokens/refresh")
        client.cookies.clear()

        response = client.post(
            f"{API}/tokens/refresh", json={"refreshToken": first["refreshToken"]}
        )

        assert response.status_code == 401

    def test_refresh_without_token(self, client: TestClient):
        assert client.post(f"{API}/tokens/refresh").status_code == 401

    def test_logout(self, client: TestClient, registration_payload, api_store):
        register(client, registration_payload)
        tokens = login(client).json()["data"]

        response = client.post(f"{API}/logout")

        assert response.status_code == 200
        assert api_store.find_one(email="a@x.com").refresh_token is None
        cleared = response.headers.get_list("set-cookie")
        assert any(c.startswith("auth_token=") and "Max-Age=0" in c for c in cleared)
        response = client.post(
            f"{API}/tokens/refresh", json={"refreshToken": tokens["refreshToken"]}
        )
        assert response.status_code == 401

    def test_logout_requires_auth(self, client: TestClient):
        assert client.post(f"{API}/logout").status_code == 401


class TestProfile:
    def test_update_profile(self, client: TestClient, registration_payload):
        register(client, registration_payload)
        login(client)

        response = client.patch(f"{API}/profile", json={"lastName": "Smith"})

        assert response.status_code == 200
        assert response.json()["data"]["lastName"] == "smith"

    def test_update_profile_conflict(self, client: TestClient, registration_payload):
        register(client, registration_payload)
        register(client, {**registration_payload, "email": "b@x.com", "phone": "+2000"})
        login(client, email="b@x.com")

        response = client.patch(f"{API}/profile", json={"email": "a@x.com"})

        assert response.status_code == 409

    def test_delete_account(self, client: TestClient, registration_payload, api_store):
        register(client, registration_payload)
        access = login(client).json()["data"]["accessToken"]

        response = client.delete(f"{API}/profile")

        assert response.status_code == 200
        assert api_store.find_one(email="a@x.com") is None
        response = client.get(f"{API}/profile", headers={"Authorization": f"Bearer {access}"})
        assert response.status_code == 401

    def test_change_password(self, client: TestClient, registration_payload):
        register(client, registration_payload)
        login(client)

        response = client.post(
            f"{API}/password",
            json={
                "oldPassword": "secret1",
                "newPassword": "newpass1",
                "confirmPassword": "newpass1",
            },
        )

        assert response.status_code == 200
        assert login(client, password="newpass1").status_code == 200
        assert login(client, password="secret1").status_code == 401

    def test_change_password_wrong_old(self, client: TestClient, registration_payload):
        register(client, registration_payload)
        login(client)

        response = client.post(
            f"{API}/password",
            json={"oldPassword": "nope", "newPassword": "n1", "confirmPassword": "n1"},
        )

        assert response.status_code == 401
        assert "nope" not in response.text


class TestVerification:
    def test_email_verification_flow(
        self, client: TestClient, registration_payload, api_store: InMemoryUserStore
    ):
        register(client, registration_payload)

        response = client.post(f"{API}/email-verification/send", json={"email": "a@x.com"})

        assert response.status_code == 200
        assert response.json()["data"] is None
        token = api_store.find_one(email="a@x.com").email_verification_token

        response = client.post(f"{API}/email-verification/{token}")

        assert response.status_code == 200
        assert response.json()["data"]["emailVerified"] is True
        assert client.post(f"{API}/email-verification/{token}").status_code == 401

    def test_email_verification_wrong_token(
        self, client: TestClient, registration_payload, api_store: InMemoryUserStore
    ):
        register(client, registration_payload)

        response = client.post(f"{API}/email-verification/deadbeef")

        assert response.status_code == 401
        assert api_store.find_one(email="a@x.com").email_verified is False

    def test_send_to_unknown_email(self, client: TestClient):
        response = client.post(f"{API}/email-verification/send", json={"email": "x@x.com"})

        assert response.status_code == 401

    def test_phone_verification_flow(
        self, client: TestClient, registration_payload, api_store: InMemoryUserStore
    ):
        register(client, registration_payload)
        client.post(f"{API}/phone-verification/send", json={"phone": "+1000"})
        token = api_store.find_one(phone="+1000").phone_verification_token

        response = client.post(f"{API}/phone-verification", json={"token": token})

        assert response.status_code == 200
        assert response.json()["data"]["phoneVerified"] is True

    def test_phone_verification_blank_token(self, client: TestClient):
        response = client.post(f"{API}/phone-verification", json={})

        assert response.status_code == 400


class TestApplication:
    def test_health(self, client: TestClient):
        assert client.get("/health").json()["status"] == "healthy"

    def test_ready(self, client: TestClient):
        response = client.get("/ready")

        assert response.status_code == 200
        assert response.json()["checks"]["user_store"]["status"] == "healthy"

    def test_not_ready_when_store_unavailable(
        self,
        monkeypatch,
        client: TestClient,
        api_store: InMemoryUserStore,
    ):
        monkeypatch.setattr(api_store, "is_available", lambda: False)

        response = client.get("/ready")

        assert response.status_code == 503
        assert response.json()["status"] == "not_ready"

    def test_security_and_request_id_headers(self, client: TestClient):
        response = client.get("/health", headers={"X-Request-ID": "req-1"})

        assert response.headers["X-Request-ID"] == "req-1"
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"

    def test_unknown_route_uses_envelope(self, client: TestClient):
        response = client.get(f"{API}/nope")

        assert response.status_code == 404
        assert response.json()["success"] is False

    def test_unexpected_error_is_500_envelope(
        self, client: TestClient, api_store: InMemoryUserStore, monkeypatch, registration_payload
    ):
        def boom(*args, **kwargs):
            raise RuntimeError("database on fire")

        monkeypatch.setattr(api_store, "find_any", boom)

        response = register(client, registration_payload)

        assert response.status_code == 500
        assert response.json()["message"] == "Something went wrong"
        assert "fire" not in response.text
