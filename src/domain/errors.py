"""
Error definitions for the user extension service.

규칙:
- 조용한 실패 금지 → ExtendError로 명시적 실패 (REST 레이어)
- extras 조정(core/reconciler)은 예외를 던지지 않음 → 여기 에러 사용 안 함
"""

from typing import Any


class ExtendError(Exception):
    """
    사용자 확장 리소스(expression, ssh key) 처리 중 발생하는 에러.

    routes 레이어에서 HTTPException으로 변환됨:
    - *_NOT_FOUND → 404
    - UNAUTHORIZED → 401, FORBIDDEN → 403
    - INVALID_* → 400
    - STORE_LOCK_TIMEOUT → 409

    Usage:
        raise ExtendError(ErrorCodes.EXPRESSION_NOT_FOUND, "Expression not found", name="ssh-key")
    """

    def __init__(self, code: str, message: str, **context: Any) -> None:
        self.code = code
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
        base = f"[{self.code}] {self.message}"
        return f"{base} ({ctx_str})" if ctx_str else base

    def to_dict(self) -> dict[str, Any]:
        """로그/JSON 직렬화용."""
        return {
            "code": self.code,
            "message": self.message,
            **self.context,
        }


# =============================================================================
# Error Codes
# =============================================================================

class ErrorCodes:
    """에러 코드 상수."""

    # === Auth ===
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"

    # === Input ===
    INVALID_NAME = "INVALID_NAME"

    # === Resources ===
    EXPRESSION_NOT_FOUND = "EXPRESSION_NOT_FOUND"
    SSH_KEY_NOT_FOUND = "SSH_KEY_NOT_FOUND"
    SYSTEM_SSH_KEY_NOT_FOUND = "SYSTEM_SSH_KEY_NOT_FOUND"

    # === Store ===
    STORE_LOCK_TIMEOUT = "STORE_LOCK_TIMEOUT"
    STORE_CORRUPT = "STORE_CORRUPT"


# HTTP 상태 코드 매핑 (routes에서 사용)
ERROR_STATUS_CODES: dict[str, int] = {
    ErrorCodes.UNAUTHORIZED: 401,
    ErrorCodes.FORBIDDEN: 403,
    ErrorCodes.INVALID_NAME: 400,
    ErrorCodes.EXPRESSION_NOT_FOUND: 404,
    ErrorCodes.SSH_KEY_NOT_FOUND: 404,
    ErrorCodes.SYSTEM_SSH_KEY_NOT_FOUND: 404,
    ErrorCodes.STORE_LOCK_TIMEOUT: 409,
    ErrorCodes.STORE_CORRUPT: 500,
}
