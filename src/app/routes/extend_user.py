"""
Extend User Routes: 사용자별 expression / SSH 키.

- PUT    /{username}/expression                   → expression 생성/교체
- GET    /{username}/expression                   → expression 목록
- GET    /{username}/expression/{expression_name} → expression 조회
- DELETE /{username}/expression/{expression_name} → expression 삭제
- GET    /{username}/ssh-key/system               → 시스템 SSH 공개키
- GET    /{username}/ssh-key/custom               → custom SSH 키 목록
- PUT    /{username}/ssh-key/custom               → custom SSH 키 생성/교체
- DELETE /{username}/ssh-key/custom/{ssh_key_name} → custom SSH 키 삭제

모든 라우트: token_check + 사용자 접근 확인.
쓰기 라우트: pydantic 스키마로 바디 검증 (실패 시 422).
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Path, Request

from src.app.auth import AuthUser, check_user_access, token_check
from src.core.user_store import UserStore
from src.domain.constants import RESOURCE_NAME_PATTERN
from src.domain.errors import ERROR_STATUS_CODES, ExtendError
from src.domain.schemas import UserExpressionCreateInput, UserSshKeyCreateInput

api_router = APIRouter()
logger = logging.getLogger(__name__)


def get_user_store(request: Request) -> UserStore:
    """Request에서 UserStore 가져오기."""
    return request.app.state.user_store


def _to_http_error(e: ExtendError) -> HTTPException:
    status_code = ERROR_STATUS_CODES.get(e.code, 400)
    if status_code >= 500:
        logger.error(f"User store failure: {e}", exc_info=e)
    return HTTPException(status_code=status_code, detail={"code": e.code, "message": e.message})


def _authorize(user: AuthUser, username: str) -> None:
    try:
        check_user_access(user, username)
    except ExtendError as e:
        raise _to_http_error(e) from e


# =============================================================================
# Expressions
# =============================================================================

@api_router.put("/{username}/expression", status_code=201)
async def create_user_expression(
    body: UserExpressionCreateInput,
    request: Request,
    username: str = Path(..., pattern=RESOURCE_NAME_PATTERN),
    user: AuthUser = Depends(token_check),
) -> dict[str, Any]:
    """expression 생성 (같은 이름이면 교체)."""
    _authorize(user, username)
    try:
        expression = get_user_store(request).put_expression(username, body.name, body.value)
    except ExtendError as e:
        raise _to_http_error(e) from e
    return {"message": f"Expression '{expression.name}' saved", **expression.to_dict()}


@api_router.get("/{username}/expression")
async def get_all_user_expression(
    request: Request,
    username: str = Path(..., pattern=RESOURCE_NAME_PATTERN),
    user: AuthUser = Depends(token_check),
) -> list[dict[str, Any]]:
    """expression 목록."""
    _authorize(user, username)
    try:
        expressions = get_user_store(request).list_expressions(username)
    except ExtendError as e:
        raise _to_http_error(e) from e
    return [e.to_dict() for e in expressions]


@api_router.get("/{username}/expression/{expression_name}")
async def get_user_expression(
    request: Request,
    username: str = Path(..., pattern=RESOURCE_NAME_PATTERN),
    expression_name: str = Path(..., pattern=RESOURCE_NAME_PATTERN),
    user: AuthUser = Depends(token_check),
) -> dict[str, Any]:
    """expression 조회."""
    _authorize(user, username)
    try:
        expression = get_user_store(request).get_expression(username, expression_name)
    except ExtendError as e:
        raise _to_http_error(e) from e
    return expression.to_dict()


@api_router.delete("/{username}/expression/{expression_name}")
async def delete_user_expression(
    request: Request,
    username: str = Path(..., pattern=RESOURCE_NAME_PATTERN),
    expression_name: str = Path(..., pattern=RESOURCE_NAME_PATTERN),
    user: AuthUser = Depends(token_check),
) -> dict[str, Any]:
    """expression 삭제."""
    _authorize(user, username)
    try:
        get_user_store(request).delete_expression(username, expression_name)
    except ExtendError as e:
        raise _to_http_error(e) from e
    return {"message": f"Expression '{expression_name}' deleted"}


# =============================================================================
# SSH Keys
# =============================================================================

@api_router.get("/{username}/ssh-key/system")
async def get_user_system_ssh_key(
    request: Request,
    username: str = Path(..., pattern=RESOURCE_NAME_PATTERN),
    user: AuthUser = Depends(token_check),
) -> dict[str, Any]:
    """시스템 SSH 공개키 (private는 노출 안 함)."""
    _authorize(user, username)
    try:
        public = get_user_store(request).get_system_ssh_public_key(username)
    except ExtendError as e:
        raise _to_http_error(e) from e
    return {"username": username, "public": public}


@api_router.get("/{username}/ssh-key/custom")
async def get_user_custom_ssh_key(
    request: Request,
    username: str = Path(..., pattern=RESOURCE_NAME_PATTERN),
    user: AuthUser = Depends(token_check),
) -> list[dict[str, Any]]:
    """custom SSH 키 목록."""
    _authorize(user, username)
    try:
        ssh_keys = get_user_store(request).list_custom_ssh_keys(username)
    except ExtendError as e:
        raise _to_http_error(e) from e
    return [k.to_dict() for k in ssh_keys]


@api_router.put("/{username}/ssh-key/custom", status_code=201)
async def create_user_custom_ssh_key(
    body: UserSshKeyCreateInput,
    request: Request,
    username: str = Path(..., pattern=RESOURCE_NAME_PATTERN),
    user: AuthUser = Depends(token_check),
) -> dict[str, Any]:
    """custom SSH 키 생성 (같은 제목이면 교체)."""
    _authorize(user, username)
    try:
        ssh_key = get_user_store(request).put_custom_ssh_key(username, body.title, body.value)
    except ExtendError as e:
        raise _to_http_error(e) from e
    return {"message": f"SSH key '{ssh_key.title}' saved", **ssh_key.to_dict()}


@api_router.delete("/{username}/ssh-key/custom/{ssh_key_name}")
async def delete_user_custom_ssh_key(
    request: Request,
    username: str = Path(..., pattern=RESOURCE_NAME_PATTERN),
    ssh_key_name: str = Path(..., pattern=RESOURCE_NAME_PATTERN),
    user: AuthUser = Depends(token_check),
) -> dict[str, Any]:
    """custom SSH 키 삭제."""
    _authorize(user, username)
    try:
        get_user_store(request).delete_custom_ssh_key(username, ssh_key_name)
    except ExtendError as e:
        raise _to_http_error(e) from e
    return {"message": f"SSH key '{ssh_key_name}' deleted"}
