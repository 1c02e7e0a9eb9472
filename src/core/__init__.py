"""
Core layer: extras 조정 + 사용자 저장소.

역할:
- plugin 목록 upsert, SSH 블록 뷰, 기본 키 조정 (네트워크 I/O 없음)
- 사용자별 expression / SSH 키 저장 (락 + 원자적 쓰기)
"""

from .plugins import config_of, parse_plugins, plugins_of, serialize_plugins, upsert, upsert_extras
from .reconciler import ExtrasReconciler, ReconcilerState, reduce
from .ssh_plugin import SSHPluginView
from .user_store import UserStore, atomic_write_json

__all__ = [
    # plugins
    "upsert",
    "upsert_extras",
    "config_of",
    "plugins_of",
    "parse_plugins",
    "serialize_plugins",
    # ssh_plugin
    "SSHPluginView",
    # reconciler
    "ExtrasReconciler",
    "ReconcilerState",
    "reduce",
    # user_store
    "UserStore",
    "atomic_write_json",
]
