"""
FastAPI 애플리케이션 진입점.

실행:
- 개발: uv run uvicorn src.app.main:app --reload
- 프로덕션: uv run uvicorn src.app.main:app
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import yaml
from fastapi import FastAPI

# Routes
from src.app.routes import extend_user
from src.core.user_store import UserStore

PROJECT_ROOT = Path(__file__).parent.parent.parent

# =============================================================================
# Configuration
# =============================================================================


def load_config(config_path: Path | None = None) -> dict:
    """설정 파일 로드."""
    if config_path is None:
        # 프로젝트 루트의 default.yaml
        config_path = PROJECT_ROOT / "default.yaml"

    if not config_path.exists():
        return {}

    with open(config_path, encoding="utf-8") as f:
        data: dict[Any, Any] = yaml.safe_load(f) or {}
        return data


def resolve_users_root(config: dict) -> Path:
    """paths.users_root (상대 경로는 프로젝트 루트 기준)."""
    users_root = Path(config.get("paths", {}).get("users_root", "users"))
    if not users_root.is_absolute():
        users_root = PROJECT_ROOT / users_root
    return users_root


# =============================================================================
# Lifespan
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    애플리케이션 생명주기 관리.

    시작 시: 설정 로드, UserStore 생성
    테스트에서 app.state를 미리 채워두면 그 값을 유지
    """
    # Startup
    if getattr(app.state, "config", None) is None:
        app.state.config = load_config()
    if getattr(app.state, "user_store", None) is None:
        app.state.user_store = UserStore(
            resolve_users_root(app.state.config),
            lock_timeout=app.state.config.get("store", {}).get("lock_timeout"),
        )

    yield


# =============================================================================
# App Instance
# =============================================================================

app = FastAPI(
    title="PAI User Extend",
    description="사용자 expression / SSH 키 확장 API",
    version="0.1.0",
    lifespan=lifespan,
)


# =============================================================================
# Routes
# =============================================================================

app.include_router(
    extend_user.api_router, prefix="/api/v2/extend/user", tags=["Extend User API"]
)


# =============================================================================
# Root Endpoints
# =============================================================================


@app.get("/")
async def root() -> dict[str, Any]:
    """엔드포인트 안내."""
    return {
        "message": "PAI User Extend",
        "endpoints": {
            "extend_user": "/api/v2/extend/user/{username}",
        },
    }


@app.get("/health")
async def health() -> dict[str, str]:
    """헬스 체크."""
    return {"status": "ok"}


# =============================================================================
# CLI Entry Point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.app.main:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
    )
