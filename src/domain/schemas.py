"""
Data schemas for the user extension service.

규칙:
- 저장 레코드: dataclass + to_dict/from_dict (user store JSON과 필드명 동일)
- 요청 바디: pydantic 모델 (쓰기 라우트에서 스키마 검증)
"""

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.domain.constants import RESOURCE_NAME_PATTERN

# =============================================================================
# Stored Records
# =============================================================================

@dataclass
class UserExpression:
    """사용자 expression (이름 → 값)."""
    name: str
    value: str

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "value": self.value}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UserExpression":
        return cls(name=data["name"], value=data.get("value", ""))


@dataclass
class UserSshKey:
    """사용자 custom SSH 공개키."""
    title: str
    value: str
    time: str = ""  # ISO 8601, 등록 시각

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "value": self.value, "time": self.time}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UserSshKey":
        return cls(
            title=data["title"],
            value=data.get("value", ""),
            time=data.get("time", ""),
        )


@dataclass
class UserRecord:
    """
    사용자별 저장 레코드 (users/<username>.json).

    system_ssh_key는 외부 프로비저너가 기록함:
    {"public": "...", "private": "..."} (public만 노출)
    """
    username: str
    expressions: list[UserExpression] = field(default_factory=list)
    custom_ssh_keys: list[UserSshKey] = field(default_factory=list)
    system_ssh_key: dict[str, str] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "username": self.username,
            "expressions": [e.to_dict() for e in self.expressions],
            "custom_ssh_keys": [k.to_dict() for k in self.custom_ssh_keys],
            "system_ssh_key": self.system_ssh_key,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UserRecord":
        system_ssh_key = data.get("system_ssh_key")
        if system_ssh_key is not None and not isinstance(system_ssh_key, dict):
            raise TypeError(f"system_ssh_key must be a mapping, got {type(system_ssh_key).__name__}")
        return cls(
            username=data["username"],
            expressions=[UserExpression.from_dict(e) for e in data.get("expressions", [])],
            custom_ssh_keys=[UserSshKey.from_dict(k) for k in data.get("custom_ssh_keys", [])],
            system_ssh_key=system_ssh_key,
        )


# =============================================================================
# Request Schemas (PUT 바디 검증)
# =============================================================================

class UserExpressionCreateInput(BaseModel):
    """PUT /{username}/expression 바디."""
    model_config = ConfigDict(extra="forbid")

    name: str = Field(pattern=RESOURCE_NAME_PATTERN, max_length=64)
    value: str


class UserSshKeyCreateInput(BaseModel):
    """PUT /{username}/ssh-key/custom 바디."""
    model_config = ConfigDict(extra="forbid")

    title: str = Field(pattern=RESOURCE_NAME_PATTERN, max_length=64)
    value: str = Field(min_length=1)
