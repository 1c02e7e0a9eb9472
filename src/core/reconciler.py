"""
Extras reconciler: SSH 블록 편집 + 기본 SSH 키 비동기 로드 조정.

두 이벤트 흐름을 하나의 reduce()로 처리:
- 동기: 외부 문서 변경, 토글, 타입/값 변경, 키 생성기 결과
- 비동기: 기본 키 로드 (컴포넌트 수명 동안 1회)

우선순위 규칙:
- 외부 문서 변경은 항상 로컬 뷰를 덮어씀
- 기본 키가 도착하면 활성화된 블록의 value를 무조건 덮어씀 (last-writer-wins)
  → 먼저 입력된 사용자 값은 사라질 수 있음 (DESIGN.md 참조)

상태: 마지막 extras, 마지막 뷰, 마지막 기본 키. 그 외 영속 상태 없음.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from src.core.plugins import upsert_extras
from src.core.ssh_plugin import SSHPluginView
from src.domain.constants import (
    SSH_PLUGIN_NAME,
    USERSSH_TYPE_CUSTOM,
    USERSSH_TYPE_OPTIONS,
)

logger = logging.getLogger(__name__)

# username → 공개키 (없으면 None/"")
DefaultKeyLookup = Callable[[str], Awaitable[str | None]]
ExtrasChangeCallback = Callable[[dict[str, Any]], None]

# =============================================================================
# Events
# =============================================================================


@dataclass(frozen=True)
class ExternalDocumentChanged:
    extras: Mapping[str, Any] | None


@dataclass(frozen=True)
class DefaultKeyLoaded:
    key: str | None


@dataclass(frozen=True)
class ToggleEnabled:
    checked: bool


@dataclass(frozen=True)
class TypeChanged:
    selection_type: str


@dataclass(frozen=True)
class ValueChanged:
    value: str


@dataclass(frozen=True)
class KeysGenerated:
    """외부 SSH 키 생성기 결과 (공개키만 사용)."""
    public_key: str


ReconcilerEvent = (
    ExternalDocumentChanged
    | DefaultKeyLoaded
    | ToggleEnabled
    | TypeChanged
    | ValueChanged
    | KeysGenerated
)

# =============================================================================
# State + Reducer
# =============================================================================


@dataclass(frozen=True)
class ReconcilerState:
    extras: dict[str, Any] = field(default_factory=dict)
    view: SSHPluginView = field(default_factory=SSHPluginView)
    default_key: str | None = None
    default_key_loaded: bool = False


def initial_state(extras: Mapping[str, Any] | None) -> ReconcilerState:
    return ReconcilerState(
        extras=dict(extras) if extras else {},
        view=SSHPluginView.from_protocol(extras),
    )


def initial_state_from(state: ReconcilerState, extras: Mapping[str, Any] | None) -> ReconcilerState:
    """외부 문서로 extras/뷰 재유도 (기본 키 상태는 유지)."""
    fresh = initial_state(extras)
    return replace(state, extras=fresh.extras, view=fresh.view)


def _commit(state: ReconcilerState, view: SSHPluginView) -> tuple[ReconcilerState, dict[str, Any]]:
    """뷰를 plugin 목록에 upsert하고 새 문서 반환."""
    extras = upsert_extras(state.extras, SSH_PLUGIN_NAME, view.userssh)
    return replace(state, extras=extras, view=view), extras


def reduce(
    state: ReconcilerState,
    event: ReconcilerEvent,
) -> tuple[ReconcilerState, dict[str, Any] | None]:
    """
    이벤트 1건 적용.

    Returns:
        (새 상태, 호출자에게 알릴 extras 문서 또는 None)
    """
    view = state.view

    if isinstance(event, ExternalDocumentChanged):
        return initial_state_from(state, event.extras), None

    if isinstance(event, DefaultKeyLoaded):
        if state.default_key_loaded:
            return state, None
        state = replace(state, default_key_loaded=True)
        if not event.key:
            return state, None
        state = replace(state, default_key=event.key)
        if not view.is_enabled():
            return state, None
        return _commit(state, view.with_value(event.key))

    if isinstance(event, ToggleEnabled):
        if not event.checked:
            return _commit(state, view.with_config({}))
        # 토글 시점의 최신 기본 키 사용
        return _commit(
            state,
            view.with_config({"type": USERSSH_TYPE_CUSTOM, "value": state.default_key or ""}),
        )

    if isinstance(event, TypeChanged):
        return _commit(state, view.with_config({"type": event.selection_type, "value": ""}))

    if isinstance(event, ValueChanged):
        return _commit(state, view.with_value(event.value))

    if isinstance(event, KeysGenerated):
        return _commit(state, view.with_value(event.public_key))

    logger.warning(f"Ignoring unknown reconciler event: {event!r}")
    return state, None


# =============================================================================
# Reconciler
# =============================================================================


class ExtrasReconciler:
    """
    job 제출 폼의 SSH 섹션 상태 관리자.

    사용법:
        reconciler = ExtrasReconciler("alice", extras, on_extras_change=form.set_extras)
        reconciler.start_default_key_load(lookup)
        reconciler.on_toggle_enabled(True)

    모든 변경은 plugin 목록 upsert 후 on_extras_change(새 extras)로 전달됨.
    """

    def __init__(
        self,
        username: str,
        extras: Mapping[str, Any] | None = None,
        on_extras_change: ExtrasChangeCallback | None = None,
    ):
        """
        Args:
            username: 기본 키 조회에 사용할 사용자 (명시적 주입)
            extras: 초기 extras 문서
            on_extras_change: 변경된 extras 문서를 받을 콜백
        """
        self.username = username
        self._on_extras_change = on_extras_change
        self._state = initial_state(extras)
        self._load_started = False
        self._closed = False

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def state(self) -> ReconcilerState:
        return self._state

    @property
    def view(self) -> SSHPluginView:
        return self._state.view

    @property
    def extras(self) -> dict[str, Any]:
        return self._state.extras

    @property
    def default_key(self) -> str | None:
        return self._state.default_key

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def editor_visible(self) -> bool:
        """키 편집기 표시 여부: 활성화 + 기본 키 없음."""
        return self.view.is_enabled() and not self.default_key

    @property
    def type_selector_disabled(self) -> bool:
        return len(USERSSH_TYPE_OPTIONS) <= 1

    @property
    def validation_message(self) -> str | None:
        return self.view.validation_message()

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    def dispatch(self, event: ReconcilerEvent) -> dict[str, Any] | None:
        """이벤트 적용 + 변경 문서가 있으면 콜백 호출."""
        self._state, emitted = reduce(self._state, event)
        if emitted is not None and self._on_extras_change is not None:
            self._on_extras_change(emitted)
        return emitted

    def on_external_document_changed(self, extras: Mapping[str, Any] | None) -> None:
        self.dispatch(ExternalDocumentChanged(extras))

    def on_default_key_loaded(self, key: str | None) -> dict[str, Any] | None:
        return self.dispatch(DefaultKeyLoaded(key))

    def on_toggle_enabled(self, checked: bool) -> dict[str, Any] | None:
        return self.dispatch(ToggleEnabled(checked))

    def on_type_changed(self, selection_type: str) -> dict[str, Any] | None:
        return self.dispatch(TypeChanged(selection_type))

    def on_value_changed(self, value: str) -> dict[str, Any] | None:
        return self.dispatch(ValueChanged(value))

    def on_keys_generated(self, public_key: str) -> dict[str, Any] | None:
        return self.dispatch(KeysGenerated(public_key))

    # -------------------------------------------------------------------------
    # Default key (async, 1회)
    # -------------------------------------------------------------------------

    async def load_default_key(self, lookup: DefaultKeyLookup) -> None:
        """
        기본 SSH 키 조회 후 반영.

        - 수명 동안 1회만 조회 (재호출 무시)
        - 조회 실패 → 로그 후 "기본 키 없음"으로 처리
        - close() 이후 도착한 결과는 버림
        """
        if self._load_started:
            logger.debug(f"Default SSH key already requested for user '{self.username}'")
            return
        self._load_started = True

        try:
            key = await lookup(self.username)
        except Exception as e:
            logger.warning(f"Default SSH key lookup failed for user '{self.username}': {e}")
            key = None

        if self._closed:
            logger.debug(f"Discarding default SSH key for closed reconciler (user '{self.username}')")
            return

        self.on_default_key_loaded(key)

    def start_default_key_load(self, lookup: DefaultKeyLookup) -> asyncio.Task[None]:
        """실행 중인 이벤트 루프에서 fire-and-forget으로 조회 시작."""
        return asyncio.get_running_loop().create_task(self.load_default_key(lookup))

    def close(self) -> None:
        """컴포넌트 종료. 이후 기본 키 결과는 무시됨."""
        self._closed = True
