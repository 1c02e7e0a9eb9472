"""
test_api_extend_user.py - Extend User API E2E 테스트

엔드포인트:
- PUT/GET /api/v2/extend/user/{username}/expression
- GET/DELETE /api/v2/extend/user/{username}/expression/{expression_name}
- GET /api/v2/extend/user/{username}/ssh-key/system
- GET/PUT /api/v2/extend/user/{username}/ssh-key/custom
- DELETE /api/v2/extend/user/{username}/ssh-key/custom/{ssh_key_name}
"""

from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.app.main import app, load_config
from src.core.user_store import UserStore

PREFIX = "/api/v2/extend/user"

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def client(extend_app: FastAPI):
    """FastAPI TestClient."""
    with TestClient(extend_app) as client:
        yield client


# =============================================================================
# 인증
# =============================================================================


class TestAuth:
    """token_check + 사용자 접근 테스트."""

    def test_missing_token(self, client):
        response = client.get(f"{PREFIX}/alice/expression")

        assert response.status_code == 401
        assert response.json()["detail"]["code"] == "UNAUTHORIZED"

    def test_invalid_token(self, client):
        response = client.get(
            f"{PREFIX}/alice/expression", headers={"Authorization": "Bearer nope"}
        )

        assert response.status_code == 401

    def test_other_user_forbidden(self, client):
        response = client.get(
            f"{PREFIX}/alice/expression", headers={"Authorization": "Bearer bob-token"}
        )

        assert response.status_code == 403
        assert response.json()["detail"]["code"] == "FORBIDDEN"

    def test_admin_can_access(self, client, admin_headers):
        response = client.get(f"{PREFIX}/alice/expression", headers=admin_headers)

        assert response.status_code == 200

    def test_auth_checked_before_body(self, client):
        """토큰 없음 + 잘못된 바디 → 401."""
        response = client.put(f"{PREFIX}/alice/expression", json={"bad": 1})

        assert response.status_code == 401


# =============================================================================
# Expressions
# =============================================================================


class TestExpressionApi:
    """expression API 테스트."""

    def test_create_and_get(self, client, alice_headers, public_key):
        response = client.put(
            f"{PREFIX}/alice/expression",
            json={"name": "ssh-key", "value": public_key},
            headers=alice_headers,
        )
        assert response.status_code == 201
        assert response.json()["name"] == "ssh-key"

        response = client.get(f"{PREFIX}/alice/expression/ssh-key", headers=alice_headers)
        assert response.status_code == 200
        assert response.json() == {"name": "ssh-key", "value": public_key}

    def test_list(self, client, alice_headers):
        for name in ["a", "b"]:
            client.put(
                f"{PREFIX}/alice/expression",
                json={"name": name, "value": name.upper()},
                headers=alice_headers,
            )

        response = client.get(f"{PREFIX}/alice/expression", headers=alice_headers)

        assert response.json() == [
            {"name": "a", "value": "A"},
            {"name": "b", "value": "B"},
        ]

    def test_get_missing(self, client, alice_headers):
        response = client.get(f"{PREFIX}/alice/expression/missing", headers=alice_headers)

        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "EXPRESSION_NOT_FOUND"

    def test_delete(self, client, alice_headers, user_store: UserStore):
        user_store.put_expression("alice", "a", "1")

        response = client.delete(f"{PREFIX}/alice/expression/a", headers=alice_headers)

        assert response.status_code == 200
        assert user_store.list_expressions("alice") == []

    def test_delete_missing(self, client, alice_headers):
        response = client.delete(f"{PREFIX}/alice/expression/a", headers=alice_headers)

        assert response.status_code == 404

    @pytest.mark.parametrize(
        "body",
        [
            {"name": "has space", "value": "x"},
            {"name": "ok"},
            {"value": "x"},
            {"name": "ok", "value": "x", "extra": True},
        ],
    )
    def test_invalid_body(self, client, alice_headers, body):
        """스키마 위반 바디 → 422."""
        response = client.put(f"{PREFIX}/alice/expression", json=body, headers=alice_headers)

        assert response.status_code == 422

    def test_corrupt_record(self, client, alice_headers, users_root: Path):
        """깨진 사용자 레코드 → 500 STORE_CORRUPT."""
        (users_root / "alice.json").write_text("{broken", encoding="utf-8")

        response = client.get(f"{PREFIX}/alice/expression", headers=alice_headers)

        assert response.status_code == 500
        assert response.json()["detail"]["code"] == "STORE_CORRUPT"

    def test_invalid_expression_name_in_path(self, client, alice_headers):
        response = client.get(f"{PREFIX}/alice/expression/bad.name", headers=alice_headers)

        assert response.status_code == 422


# =============================================================================
# SSH Keys
# =============================================================================


class TestSshKeyApi:
    """SSH 키 API 테스트."""

    def test_custom_key_crud(self, client, alice_headers, public_key):
        response = client.put(
            f"{PREFIX}/alice/ssh-key/custom",
            json={"title": "laptop", "value": public_key},
            headers=alice_headers,
        )
        assert response.status_code == 201

        response = client.get(f"{PREFIX}/alice/ssh-key/custom", headers=alice_headers)
        keys = response.json()
        assert [(k["title"], k["value"]) for k in keys] == [("laptop", public_key)]
        assert keys[0]["time"]

        response = client.delete(f"{PREFIX}/alice/ssh-key/custom/laptop", headers=alice_headers)
        assert response.status_code == 200

        response = client.get(f"{PREFIX}/alice/ssh-key/custom", headers=alice_headers)
        assert response.json() == []

    def test_custom_key_empty_value(self, client, alice_headers):
        response = client.put(
            f"{PREFIX}/alice/ssh-key/custom",
            json={"title": "laptop", "value": ""},
            headers=alice_headers,
        )

        assert response.status_code == 422

    def test_delete_missing_custom_key(self, client, alice_headers):
        response = client.delete(f"{PREFIX}/alice/ssh-key/custom/laptop", headers=alice_headers)

        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "SSH_KEY_NOT_FOUND"

    def test_system_key(self, client, alice_headers, user_store: UserStore, public_key):
        user_store.set_system_ssh_key("alice", public_key, private="PRIVATE")

        response = client.get(f"{PREFIX}/alice/ssh-key/system", headers=alice_headers)

        assert response.status_code == 200
        assert response.json() == {"username": "alice", "public": public_key}
        assert "PRIVATE" not in response.text

    def test_system_key_missing(self, client, alice_headers):
        response = client.get(f"{PREFIX}/alice/ssh-key/system", headers=alice_headers)

        assert response.status_code == 404


# =============================================================================
# 앱 진입점
# =============================================================================


class TestMainApp:
    """main.app 라우트 등록 / 설정 테스트."""

    def test_health(self, tmp_path: Path):
        app.state.config = {}
        app.state.user_store = UserStore(tmp_path)
        with TestClient(app) as client:
            assert client.get("/health").json() == {"status": "ok"}
            assert client.get(f"{PREFIX}/alice/expression").status_code == 401

    def test_load_config_missing_file(self, tmp_path: Path):
        assert load_config(tmp_path / "missing.yaml") == {}

    def test_load_config(self, tmp_path: Path):
        config_path = tmp_path / "default.yaml"
        config_path.write_text("store:\n  lock_timeout: 2.5\n", encoding="utf-8")

        assert load_config(config_path) == {"store": {"lock_timeout": 2.5}}

    def test_load_config_empty_file(self, tmp_path: Path):
        config_path = tmp_path / "default.yaml"
        config_path.write_text("", encoding="utf-8")

        assert load_config(config_path) == {}
