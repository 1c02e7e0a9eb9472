"""
test_auth.py - 토큰 검증 테스트
"""

import pytest

from src.app.auth import AuthUser, check_user_access, resolve_token
from src.domain.errors import ErrorCodes, ExtendError

TOKENS = {
    "alice-token": {"username": "alice"},
    "admin-token": {"username": "root", "admin": True},
    "broken-token": {"admin": True},
}


class TestResolveToken:
    """resolve_token 함수 테스트."""

    def test_valid_token(self):
        assert resolve_token(TOKENS, "Bearer alice-token") == AuthUser("alice", admin=False)

    def test_admin_token(self):
        assert resolve_token(TOKENS, "Bearer admin-token").admin

    @pytest.mark.parametrize(
        "authorization",
        [None, "", "alice-token", "Basic alice-token", "Bearer unknown", "Bearer broken-token"],
    )
    def test_rejected(self, authorization):
        with pytest.raises(ExtendError) as exc_info:
            resolve_token(TOKENS, authorization)

        assert exc_info.value.code == ErrorCodes.UNAUTHORIZED


class TestCheckUserAccess:
    """check_user_access 함수 테스트."""

    def test_own_resource(self):
        check_user_access(AuthUser("alice"), "alice")

    def test_admin_any_resource(self):
        check_user_access(AuthUser("root", admin=True), "alice")

    def test_other_user_forbidden(self):
        with pytest.raises(ExtendError) as exc_info:
            check_user_access(AuthUser("bob"), "alice")

        assert exc_info.value.code == ErrorCodes.FORBIDDEN
