"""
Pytest fixtures for the user extend tests.

테스트 구성:
- extras 문서 샘플 (ssh 없음, 다른 plugin 포함, ssh 활성화)
- tmp_path 기반 UserStore
- 토큰 설정 + FastAPI 테스트 앱
"""

from pathlib import Path
from typing import Any

import pytest
from fastapi import FastAPI

from src.app.routes import extend_user
from src.core.user_store import UserStore
from src.domain.constants import PAI_PLUGIN

# =============================================================================
# Extras Fixtures
# =============================================================================

SAMPLE_PUBLIC_KEY = "ssh-rsa AAAAB3NzaC1yc2EAAAADAQABAAABAQC7 alice@host"


@pytest.fixture
def public_key() -> str:
    """테스트용 SSH 공개키."""
    return SAMPLE_PUBLIC_KEY


@pytest.fixture
def gpu_extras() -> dict[str, Any]:
    """ssh 없이 다른 plugin만 있는 extras."""
    return {
        "submitFrom": "submit-job-v2",
        PAI_PLUGIN: [
            {"plugin": "gpu", "count": 2},
        ],
    }


@pytest.fixture
def ssh_extras(public_key: str) -> dict[str, Any]:
    """ssh 활성화된 extras (앞뒤로 다른 plugin 포함)."""
    return {
        PAI_PLUGIN: [
            {"plugin": "tensorboard", "parameters": {"port": 6006}},
            {"plugin": "ssh", "userssh": {"type": "custom", "value": public_key}},
            {"plugin": "gpu", "count": 2},
        ],
    }


# =============================================================================
# Store / App Fixtures
# =============================================================================

@pytest.fixture
def users_root(tmp_path: Path) -> Path:
    """users/ 루트 디렉토리."""
    root = tmp_path / "users"
    root.mkdir()
    return root


@pytest.fixture
def user_store(users_root: Path) -> UserStore:
    """tmp_path 기반 UserStore."""
    return UserStore(users_root, lock_timeout=1.0)


@pytest.fixture
def test_config() -> dict:
    """테스트용 설정 (토큰 3개: alice, bob, admin)."""
    return {
        "store": {"lock_timeout": 1.0},
        "auth": {
            "tokens": {
                "alice-token": {"username": "alice"},
                "bob-token": {"username": "bob"},
                "admin-token": {"username": "root", "admin": True},
            },
        },
    }


@pytest.fixture
def extend_app(test_config: dict, user_store: UserStore) -> FastAPI:
    """확장 API만 올린 테스트용 FastAPI 앱."""
    app = FastAPI()
    app.include_router(extend_user.api_router, prefix="/api/v2/extend/user")
    app.state.config = test_config
    app.state.user_store = user_store
    return app


@pytest.fixture
def alice_headers() -> dict[str, str]:
    return {"Authorization": "Bearer alice-token"}


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return {"Authorization": "Bearer admin-token"}
