"""
User store: 사용자별 expression / SSH 키 저장소.

구조:
users/
├── .locks/<username>.lock
└── <username>.json      # UserRecord

규칙:
- 사용자별 FileLock으로 읽기-수정-쓰기 직렬화
- 원자적 쓰기: temp → fsync → rename
- 이름 규칙 위반 → ExtendError(INVALID_NAME), 없는 리소스 → *_NOT_FOUND
- 같은 이름으로 다시 PUT → 같은 위치에서 교체
"""

import json
import logging
import os
import tempfile
from collections.abc import Generator
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from filelock import FileLock, Timeout

from src.domain.constants import RESOURCE_NAME_RE, USER_LOCKS_DIR, USER_STORE_SUFFIX
from src.domain.errors import ErrorCodes, ExtendError
from src.domain.schemas import UserExpression, UserRecord, UserSshKey

logger = logging.getLogger(__name__)

# =============================================================================
# Atomic Write
# =============================================================================


def atomic_write_json(path: Path, data: dict) -> None:
    """
    원자적 JSON 쓰기.

    - 중간 상태 없음: temp → rename
    - fsync 실패 시 경고 남기고 계속 진행
    - 실패 시 temp 파일 삭제, 기존 파일 유지
    """
    dir_path = path.parent
    dir_path.mkdir(parents=True, exist_ok=True)

    temp_path = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            dir=dir_path,
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        ) as f:
            temp_path = Path(f.name)
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.flush()
            try:
                os.fsync(f.fileno())
            except OSError as e:
                logger.warning(f"File fsync failed for {path}: {e}")

        os.replace(temp_path, path)

    except Exception:
        if temp_path and temp_path.exists():
            try:
                temp_path.unlink()
            except OSError:
                pass
        raise


# =============================================================================
# Validation
# =============================================================================


def validate_name(name: str, kind: str = "name") -> None:
    """
    리소스 이름 검증: [a-zA-Z0-9_-]+

    Raises:
        ExtendError: INVALID_NAME
    """
    if not name or not RESOURCE_NAME_RE.fullmatch(name):
        raise ExtendError(
            ErrorCodes.INVALID_NAME,
            f"Invalid {kind}: must match [a-zA-Z0-9_-]+",
            **{kind: name},
        )


# =============================================================================
# User Store
# =============================================================================


class UserStore:
    """사용자 확장 리소스 저장소."""

    # 락 timeout (초)
    LOCK_TIMEOUT = 10.0

    def __init__(self, users_root: Path, lock_timeout: float | None = None):
        """
        Args:
            users_root: users/ 루트 경로
            lock_timeout: 사용자 락 timeout (초)
        """
        self.users_root = users_root
        self.lock_timeout = lock_timeout if lock_timeout is not None else self.LOCK_TIMEOUT
        self._locks_dir = users_root / USER_LOCKS_DIR

    def _user_path(self, username: str) -> Path:
        validate_name(username, "username")
        return self.users_root / f"{username}{USER_STORE_SUFFIX}"

    @contextmanager
    def _user_lock(self, username: str) -> Generator[None, None, None]:
        """
        사용자별 락 획득.

        Raises:
            ExtendError: STORE_LOCK_TIMEOUT
        """
        validate_name(username, "username")
        self._locks_dir.mkdir(parents=True, exist_ok=True)
        lock = FileLock(self._locks_dir / f"{username}.lock", timeout=self.lock_timeout)
        try:
            lock.acquire()
        except Timeout:
            raise ExtendError(
                ErrorCodes.STORE_LOCK_TIMEOUT,
                f"Failed to acquire lock for user '{username}'",
                username=username,
                timeout=self.lock_timeout,
            ) from None
        try:
            yield
        finally:
            lock.release()

    # =========================================================================
    # Record I/O
    # =========================================================================

    def load(self, username: str) -> UserRecord:
        """
        사용자 레코드 로드 (파일 없으면 빈 레코드).

        Raises:
            ExtendError: STORE_CORRUPT
        """
        path = self._user_path(username)
        if not path.exists():
            return UserRecord(username=username)
        try:
            data: dict[str, Any] = json.loads(path.read_text(encoding="utf-8"))
            return UserRecord.from_dict(data)
        except (json.JSONDecodeError, KeyError, TypeError) as e:
            raise ExtendError(
                ErrorCodes.STORE_CORRUPT,
                f"User record is corrupt: {e}",
                username=username,
            ) from e

    def save(self, record: UserRecord) -> Path:
        path = self._user_path(record.username)
        atomic_write_json(path, record.to_dict())
        return path

    # =========================================================================
    # Expressions
    # =========================================================================

    def put_expression(self, username: str, name: str, value: str) -> UserExpression:
        validate_name(name)
        expression = UserExpression(name=name, value=value)
        with self._user_lock(username):
            record = self.load(username)
            for index, existing in enumerate(record.expressions):
                if existing.name == name:
                    record.expressions[index] = expression
                    break
            else:
                record.expressions.append(expression)
            self.save(record)
        logger.info(f"Saved expression '{name}' for user '{username}'")
        return expression

    def list_expressions(self, username: str) -> list[UserExpression]:
        return self.load(username).expressions

    def get_expression(self, username: str, name: str) -> UserExpression:
        """
        Raises:
            ExtendError: EXPRESSION_NOT_FOUND
        """
        validate_name(name)
        for expression in self.load(username).expressions:
            if expression.name == name:
                return expression
        raise ExtendError(
            ErrorCodes.EXPRESSION_NOT_FOUND,
            f"Expression '{name}' not found",
            username=username,
            name=name,
        )

    def delete_expression(self, username: str, name: str) -> None:
        validate_name(name)
        with self._user_lock(username):
            record = self.load(username)
            remaining = [e for e in record.expressions if e.name != name]
            if len(remaining) == len(record.expressions):
                raise ExtendError(
                    ErrorCodes.EXPRESSION_NOT_FOUND,
                    f"Expression '{name}' not found",
                    username=username,
                    name=name,
                )
            record.expressions = remaining
            self.save(record)
        logger.info(f"Deleted expression '{name}' for user '{username}'")

    # =========================================================================
    # SSH Keys
    # =========================================================================

    def put_custom_ssh_key(self, username: str, title: str, value: str) -> UserSshKey:
        validate_name(title, "title")
        ssh_key = UserSshKey(title=title, value=value, time=datetime.now(UTC).isoformat())
        with self._user_lock(username):
            record = self.load(username)
            for index, existing in enumerate(record.custom_ssh_keys):
                if existing.title == title:
                    record.custom_ssh_keys[index] = ssh_key
                    break
            else:
                record.custom_ssh_keys.append(ssh_key)
            self.save(record)
        logger.info(f"Saved custom SSH key '{title}' for user '{username}'")
        return ssh_key

    def list_custom_ssh_keys(self, username: str) -> list[UserSshKey]:
        return self.load(username).custom_ssh_keys

    def delete_custom_ssh_key(self, username: str, title: str) -> None:
        validate_name(title, "title")
        with self._user_lock(username):
            record = self.load(username)
            remaining = [k for k in record.custom_ssh_keys if k.title != title]
            if len(remaining) == len(record.custom_ssh_keys):
                raise ExtendError(
                    ErrorCodes.SSH_KEY_NOT_FOUND,
                    f"SSH key '{title}' not found",
                    username=username,
                    title=title,
                )
            record.custom_ssh_keys = remaining
            self.save(record)
        logger.info(f"Deleted custom SSH key '{title}' for user '{username}'")

    def get_system_ssh_public_key(self, username: str) -> str:
        """
        시스템 생성 SSH 공개키.

        Raises:
            ExtendError: SYSTEM_SSH_KEY_NOT_FOUND
        """
        system_key = self.load(username).system_ssh_key or {}
        public = system_key.get("public")
        if not public:
            raise ExtendError(
                ErrorCodes.SYSTEM_SSH_KEY_NOT_FOUND,
                f"System SSH key for user '{username}' not found",
                username=username,
            )
        return public

    def set_system_ssh_key(self, username: str, public: str, private: str | None = None) -> None:
        """외부 키 프로비저너용: 시스템 키 기록."""
        with self._user_lock(username):
            record = self.load(username)
            record.system_ssh_key = {"public": public}
            if private is not None:
                record.system_ssh_key["private"] = private
            self.save(record)
