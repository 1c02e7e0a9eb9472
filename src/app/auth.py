"""
Token check: Bearer 토큰 → 사용자.

설정 (default.yaml):
auth:
  tokens:
    <token>: {username: alice, admin: false}

규칙:
- 토큰 없음/모름 → 401
- admin이 아니면 자기 리소스만 접근 → 403
"""

from dataclasses import dataclass
from typing import Any

from fastapi import Header, HTTPException, Request

from src.domain.errors import ErrorCodes, ExtendError


@dataclass
class AuthUser:
    """인증된 사용자."""
    username: str
    admin: bool = False


def _token_table(request: Request) -> dict[str, Any]:
    config = getattr(request.app.state, "config", None) or {}
    return config.get("auth", {}).get("tokens", {}) or {}


def resolve_token(tokens: dict[str, Any], authorization: str | None) -> AuthUser:
    """
    Authorization 헤더 해석.

    Raises:
        ExtendError: UNAUTHORIZED
    """
    if not authorization or not authorization.startswith("Bearer "):
        raise ExtendError(ErrorCodes.UNAUTHORIZED, "Missing bearer token")

    token = authorization.removeprefix("Bearer ").strip()
    entry = tokens.get(token)
    if not entry or not entry.get("username"):
        raise ExtendError(ErrorCodes.UNAUTHORIZED, "Invalid token")

    return AuthUser(username=entry["username"], admin=bool(entry.get("admin", False)))


def check_user_access(user: AuthUser, username: str) -> None:
    """
    Raises:
        ExtendError: FORBIDDEN
    """
    if not user.admin and user.username != username:
        raise ExtendError(
            ErrorCodes.FORBIDDEN,
            f"User '{user.username}' cannot access resources of '{username}'",
            username=username,
        )


async def token_check(
    request: Request,
    authorization: str | None = Header(None),
) -> AuthUser:
    """FastAPI dependency: 토큰 검증."""
    try:
        return resolve_token(_token_table(request), authorization)
    except ExtendError as e:
        raise HTTPException(
            status_code=401,
            detail={"code": e.code, "message": e.message},
            headers={"WWW-Authenticate": "Bearer"},
        ) from e
