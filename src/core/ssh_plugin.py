"""
SSH plugin view: userssh 블록의 타입 있는 읽기 전용 투영.

userssh 블록:
- {} → SSH 비활성화
- {"type": <selection type>, "value": <공개키 텍스트>}

불변 업데이트만 허용 (이전 렌더와 공유될 수 있음).
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from src.core.plugins import config_of, plugins_of
from src.domain.constants import (
    PLUGIN_NAME_FIELD,
    SSH_PLUGIN_NAME,
    USERSSH_FIELD,
    USERSSH_INVALID_VALUE_MESSAGE,
    USERSSH_TYPE_CUSTOM,
    USERSSH_TYPE_NONE,
)


def normalize_userssh(config: Any) -> dict[str, Any]:
    """
    userssh 블록 정규화.

    - 매핑 아님/빈 값 → {}
    - type 누락/None → "none" (키 미선택), 빈 문자열 등 다른 값은 그대로
    - value 누락/None → ""
    """
    if not isinstance(config, Mapping) or not config:
        return {}
    normalized = dict(config)
    if normalized.get("type") is None:
        normalized["type"] = USERSSH_TYPE_NONE
    if normalized.get("value") is None:
        normalized["value"] = ""
    return normalized


@dataclass(frozen=True)
class SSHPluginView:
    """userssh 블록 뷰."""
    userssh: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_config(cls, config: Any) -> "SSHPluginView":
        return cls(userssh=normalize_userssh(config))

    @classmethod
    def from_protocol(cls, extras: Mapping[str, Any] | None) -> "SSHPluginView":
        """extras 문서의 ssh 항목에서 뷰 생성 (없으면 비활성화)."""
        return cls.from_config(config_of(plugins_of(extras), SSH_PLUGIN_NAME))

    def to_protocol(self) -> dict[str, Any]:
        """plugin 목록 항목 형식."""
        return {PLUGIN_NAME_FIELD: SSH_PLUGIN_NAME, USERSSH_FIELD: dict(self.userssh)}

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    @property
    def type(self) -> str | None:
        return self.userssh.get("type")

    @property
    def value(self) -> str:
        return self.userssh.get("value", "")

    def is_enabled(self) -> bool:
        return bool(self.userssh)

    def get_user_ssh_value(self) -> str:
        """
        실제 사용될 키 텍스트.

        비활성화 또는 type == "none" → ""
        그 외 value 그대로 (빈 값 = 아직 입력 안 됨, 비활성화와 다름)
        """
        if not self.is_enabled() or self.type == USERSSH_TYPE_NONE:
            return ""
        return self.value

    def validation_message(self) -> str | None:
        """활성화인데 키가 비어 있으면 필드 에러 메시지."""
        if self.is_enabled() and not self.get_user_ssh_value():
            return USERSSH_INVALID_VALUE_MESSAGE
        return None

    # -------------------------------------------------------------------------
    # Immutable setters
    # -------------------------------------------------------------------------

    def with_config(self, config: Mapping[str, Any]) -> "SSHPluginView":
        return SSHPluginView.from_config(config)

    def with_type(self, selection_type: str) -> "SSHPluginView":
        return self.with_config({**self.userssh, "type": selection_type, "value": self.value})

    def with_value(self, value: str) -> "SSHPluginView":
        # 비활성화 상태에서 값 입력 → custom으로 활성화
        base = self.userssh or {"type": USERSSH_TYPE_CUSTOM}
        return self.with_config({**base, "value": value})
