"""
Default SSH key lookup: job 제출 폼이 소비하는 "기본 SSH 키" 조회.

기본 키 = 사용자 expression 중 이름이 ssh-key인 항목의 value.

조회 방식:
- StoreDefaultKeyLookup: 같은 프로세스의 UserStore 직접 조회
- RestDefaultKeyLookup: 확장 REST API 호출 (GET /{username}/expression/ssh-key)

규칙:
- 키 없음(404) → None
- 그 외 실패는 호출자(ExtrasReconciler)가 로그 후 "기본 키 없음"으로 처리
"""

import asyncio
import logging

import httpx

from src.core.user_store import UserStore
from src.domain.constants import DEFAULT_SSH_KEY_EXPRESSION
from src.domain.errors import ErrorCodes, ExtendError

logger = logging.getLogger(__name__)


class StoreDefaultKeyLookup:
    """UserStore 기반 조회."""

    def __init__(self, store: UserStore, expression_name: str = DEFAULT_SSH_KEY_EXPRESSION):
        self.store = store
        self.expression_name = expression_name

    async def __call__(self, username: str) -> str | None:
        try:
            expression = await asyncio.to_thread(
                self.store.get_expression, username, self.expression_name
            )
        except ExtendError as e:
            if e.code == ErrorCodes.EXPRESSION_NOT_FOUND:
                return None
            raise
        return expression.value or None


class RestDefaultKeyLookup:
    """
    확장 REST API 기반 조회.

    Args:
        base_url: 확장 API 루트 (예: http://host/api/v2/extend/user)
        token: Bearer 토큰
        expression_name: 기본 키 expression 이름
        timeout: 요청 timeout (초)
        transport: 테스트용 httpx transport
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        expression_name: str = DEFAULT_SSH_KEY_EXPRESSION,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.expression_name = expression_name
        self.timeout = timeout
        self._transport = transport

    async def __call__(self, username: str) -> str | None:
        url = f"{self.base_url}/{username}/expression/{self.expression_name}"
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.get(url, headers={"Authorization": f"Bearer {self.token}"})

        if response.status_code == 404:
            logger.info(f"No default SSH key registered for user '{username}'")
            return None
        response.raise_for_status()

        try:
            value = response.json()["value"]
        except (KeyError, TypeError, ValueError) as e:
            raise httpx.DecodingError(f"Malformed expression response: {e}") from e
        return value or None
