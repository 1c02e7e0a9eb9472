"""
Plugin list 모델: extras 문서의 runtime plugin 목록.

규칙:
- 목록 순서 = 삽입 순서, 이름은 upsert로만 유일성 보장
- 중복 이름이 이미 있으면 첫 번째 항목만 매칭
- upsert는 config 교체 (deep merge 아님), 항목 삭제 없음
- 인식 못 하는 항목(plugin 이름 없음 포함)은 그대로 통과
- 모든 연산은 total: 예외 없음
"""

import copy
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, ClassVar

from src.domain.constants import (
    PAI_PLUGIN,
    PLUGIN_NAME_FIELD,
    SSH_PLUGIN_NAME,
    USERSSH_FIELD,
)

# =============================================================================
# Plugin Entries (tagged union)
# =============================================================================

# raw 없음 표시 (None은 목록 안의 유효한 원본 값)
_NO_RAW: Any = object()


@dataclass(frozen=True)
class PluginEntry:
    """
    plugin 목록의 한 항목.

    name: plugin 이름 (없으면 None, 매칭 대상 아님)
    config: 이름을 뺀 나머지 설정
    raw: 파싱 원본. 변경되지 않은 항목은 원본 그대로 직렬화됨
    """
    name: str | None
    config: dict[str, Any]
    raw: Any = _NO_RAW

    def to_protocol(self) -> Any:
        if self.raw is not _NO_RAW:
            return copy.deepcopy(self.raw)
        return self._encode()

    def _encode(self) -> dict[str, Any]:
        return {PLUGIN_NAME_FIELD: self.name, **copy.deepcopy(self.config)}


@dataclass(frozen=True)
class UnknownPluginEntry(PluginEntry):
    """이 모듈이 해석하지 않는 plugin (passthrough)."""

    @classmethod
    def parse(cls, raw: Any) -> "UnknownPluginEntry":
        if not isinstance(raw, Mapping):
            return cls(name=None, config={}, raw=raw)
        name = raw.get(PLUGIN_NAME_FIELD)
        config = {k: v for k, v in raw.items() if k != PLUGIN_NAME_FIELD}
        return cls(
            name=name if isinstance(name, str) else None,
            config=config,
            raw=raw,
        )


@dataclass(frozen=True)
class SSHPluginEntry(PluginEntry):
    """
    ssh plugin.

    프로토콜: {"plugin": "ssh", "userssh": {...}}
    config는 userssh 블록 자체 ({} = 비활성화)
    """
    NAME: ClassVar[str] = SSH_PLUGIN_NAME

    @classmethod
    def parse(cls, raw: Mapping[str, Any]) -> "SSHPluginEntry":
        userssh = raw.get(USERSSH_FIELD)
        config = dict(userssh) if isinstance(userssh, Mapping) else {}
        return cls(name=cls.NAME, config=config, raw=raw)

    def _encode(self) -> dict[str, Any]:
        return {PLUGIN_NAME_FIELD: self.NAME, USERSSH_FIELD: copy.deepcopy(self.config)}


# 이름 → 전용 entry 타입. 등록 안 된 이름은 UnknownPluginEntry
PLUGIN_ENTRY_TYPES: dict[str, type[PluginEntry]] = {
    SSH_PLUGIN_NAME: SSHPluginEntry,
}


def parse_entry(raw: Any) -> PluginEntry:
    """프로토콜 dict → PluginEntry."""
    if isinstance(raw, Mapping) and raw.get(PLUGIN_NAME_FIELD) == SSHPluginEntry.NAME:
        return SSHPluginEntry.parse(raw)
    return UnknownPluginEntry.parse(raw)


def make_entry(name: str, config: Mapping[str, Any]) -> PluginEntry:
    """새 항목 생성 (raw 없음 → 직렬화 시 인코딩)."""
    entry_type = PLUGIN_ENTRY_TYPES.get(name, UnknownPluginEntry)
    return entry_type(name=name, config=dict(config))


# =============================================================================
# List Operations
# =============================================================================


def parse_plugins(raw_list: Any) -> list[PluginEntry]:
    """
    프로토콜 목록 → PluginEntry 목록.

    None/리스트 아님 → 빈 목록
    """
    if not isinstance(raw_list, list):
        return []
    return [parse_entry(raw) for raw in raw_list]


def serialize_plugins(entries: list[PluginEntry]) -> list[Any]:
    """PluginEntry 목록 → 프로토콜 목록."""
    return [entry.to_protocol() for entry in entries]


def find_index(entries: list[PluginEntry], name: str) -> int:
    """name과 일치하는 첫 항목의 위치 (없으면 -1)."""
    for index, entry in enumerate(entries):
        if entry.name == name:
            return index
    return -1


def upsert(
    entries: list[PluginEntry],
    name: str,
    config: Mapping[str, Any],
) -> list[PluginEntry]:
    """
    name 항목의 config 교체 또는 추가.

    - 있으면: 같은 위치에서 config 교체 (기존 필드 유지 안 함)
    - 없으면: 끝에 추가
    - 다른 항목은 그대로, 입력 목록은 변경하지 않음

    Args:
        entries: 현재 plugin 목록
        name: plugin 이름
        config: 새 config

    Returns:
        새 plugin 목록
    """
    updated = list(entries)
    new_entry = make_entry(name, config)
    index = find_index(updated, name)
    if index >= 0:
        updated[index] = new_entry
    else:
        updated.append(new_entry)
    return updated


def config_of(entries: list[PluginEntry], name: str) -> dict[str, Any] | None:
    """name 항목의 config (없으면 None)."""
    index = find_index(entries, name)
    if index < 0:
        return None
    return copy.deepcopy(entries[index].config)


# =============================================================================
# Extras Document
# =============================================================================


def plugins_of(extras: Mapping[str, Any] | None) -> list[PluginEntry]:
    """extras 문서의 예약 필드에서 plugin 목록 읽기."""
    if not extras:
        return []
    return parse_plugins(extras.get(PAI_PLUGIN))


def upsert_extras(
    extras: Mapping[str, Any] | None,
    name: str,
    config: Mapping[str, Any],
) -> dict[str, Any]:
    """
    extras 문서에 plugin upsert 적용.

    입력 문서는 변경하지 않고 deep copy에 반영.
    예약 필드가 없거나 리스트가 아니면 새 목록으로 시작.
    """
    updated = copy.deepcopy(dict(extras)) if extras else {}
    entries = upsert(plugins_of(updated), name, config)
    updated[PAI_PLUGIN] = serialize_plugins(entries)
    return updated
