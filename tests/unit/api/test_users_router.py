"""Tests for the /users endpoints."""

import pytest


def _create(client, email="ana@example.com", password="secret1", role_id=1):
    return client.post(
        "/users", json={"roleId": role_id, "email": email, "password": password}
    )


class TestCreateUser:
    """POST /users."""

    def test_created(self, client):
        response = _create(client)

        assert response.status_code == 201
        body = response.json()
        assert set(body) == {"uid", "roleId", "personUid", "email"}
        assert body["email"] == "ana@example.com"
        assert body["roleId"] == 1
        assert body["personUid"] is None

    def test_stored_password_is_hashed(self, client, fake_gateway):
        uid = _create(client).json()["uid"]

        stored = fake_gateway.rows[uid]
        assert stored.password.startswith("$argon2id$")

    @pytest.mark.parametrize(
        ("payload", "code"),
        [
            ({"email": "a@example.com", "password": "secret1"}, "ROLE_REQUIRED"),
            ({"roleId": 1, "email": " ", "password": "secret1"}, "EMAIL_REQUIRED"),
            ({"roleId": 1, "email": "a@example.com", "password": ""}, "PASSWORD_REQUIRED"),
            ({"roleId": 1, "email": "a@example.com", "password": "1234"}, "PASSWORD_TOO_SHORT"),
        ],
    )
    def test_policy_violations(self, client, fake_gateway, payload, code):
        response = client.post("/users", json=payload)

        assert response.status_code == 400
        assert response.json()["code"] == code
        assert fake_gateway.rows == {}

    def test_duplicate_email_conflicts(self, client):
        _create(client)

        response = _create(client, password="another1")

        assert response.status_code == 409
        assert response.json()["code"] == "EMAIL_NOT_UNIQUE"

    def test_error_body_never_echoes_password(self, client):
        response = _create(client, password="p#w")

        assert response.status_code == 400
        assert "p#w" not in response.text

    def test_storage_failure(self, client, fake_gateway):
        fake_gateway.fail_on.add("insert")

        response = _create(client)

        assert response.status_code == 500
        assert response.json()["code"] == "PERSISTENCE_ERROR"


class TestReadUsers:
    """GET /users and GET /users/{uid}."""

    def test_list_in_registration_order(self, client):
        for email in ["b@example.com", "a@example.com"]:
            _create(client, email=email)

        response = client.get("/users")

        assert response.status_code == 200
        assert [u["email"] for u in response.json()] == ["b@example.com", "a@example.com"]
        assert all("password" not in u for u in response.json())

    def test_get_one(self, client):
        uid = _create(client).json()["uid"]

        response = client.get(f"/users/{uid}")

        assert response.status_code == 200
        assert response.json()["uid"] == uid

    def test_get_missing(self, client):
        response = client.get("/users/missing")

        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"

    def test_list_storage_failure(self, client, fake_gateway):
        fake_gateway.fail_on.add("find_many")

        response = client.get("/users")

        assert response.status_code == 500
        assert response.json()["detail"] == "A storage error occurred"


class TestAttachPerson:
    """PUT /users/{uid}/person."""

    def test_attach(self, client):
        uid = _create(client).json()["uid"]

        response = client.put(f"/users/{uid}/person", json={"personUid": "p-1"})

        assert response.status_code == 200
        assert response.json()["personUid"] == "p-1"

    def test_attach_missing_user(self, client):
        response = client.put("/users/missing/person", json={"personUid": "p-1"})

        assert response.status_code == 404

    def test_attach_requires_person_uid(self, client):
        uid = _create(client).json()["uid"]

        response = client.put(f"/users/{uid}/person", json={"personUid": ""})

        assert response.status_code == 422

    def test_attach_failure_leaves_user_unchanged(self, client, fake_gateway):
        uid = _create(client).json()["uid"]
        fake_gateway.fail_after.add("update")

        response = client.put(f"/users/{uid}/person", json={"personUid": "p-1"})

        assert response.status_code == 500
        fake_gateway.fail_after.clear()
        assert client.get(f"/users/{uid}").json()["personUid"] is None


class TestDeleteUser:
    """DELETE /users/{uid}."""

    def test_delete(self, client):
        uid = _create(client).json()["uid"]

        response = client.delete(f"/users/{uid}")

        assert response.status_code == 200
        assert response.json() == {"message": "User deleted"}
        assert client.get(f"/users/{uid}").status_code == 404

    def test_delete_missing_is_ok(self, client):
        assert client.delete("/users/missing").status_code == 200

    def test_email_reusable_after_delete(self, client):
        uid = _create(client).json()["uid"]
        client.delete(f"/users/{uid}")

        assert _create(client).status_code == 201


class TestMiddleware:
    """Cross-cutting HTTP behaviour."""

    def test_request_id_generated(self, client):
        response = client.get("/users")

        assert response.headers["X-Request-ID"]

    def test_request_id_propagated_to_errors(self, client):
        response = client.get("/users/missing", headers={"X-Request-ID": "req-42"})

        assert response.headers["X-Request-ID"] == "req-42"
        assert response.json()["request_id"] == "req-42"

    @pytest.fixture
    def expired_timeout(self, monkeypatch):
        from src.salsila.runtime.context import get_config

        config = get_config().model_copy(deep=True)
        config.app.request_timeout_seconds = 0
        monkeypatch.setattr("src.salsila.api.http.app.get_config", lambda: config)

    def test_reads_time_out(self, client, expired_timeout):
        response = client.get("/users")

        assert response.status_code == 504
        assert response.json()["detail"] == "Request timed out"

    def test_writes_are_not_timed(self, client, fake_gateway, expired_timeout):
        response = _create(client)

        assert response.status_code == 201
        assert len(fake_gateway.rows) == 1

    def test_security_headers(self, client):
        response = client.get("/health")

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
