"""
Domain Constants: extras 문서 / 사용자 확장 리소스 전역 상수.

job 제출 extras 문서의 예약 필드명, SSH 플러그인 타입, REST 이름 규칙 등
시스템 전반에서 사용되는 값들.
"""

import re

# =============================================================================
# Extras Document (job 제출 extras 구조)
# =============================================================================
# extras 문서 예:
# {
#   "com.microsoft.pai.runtimeplugin": [
#     {"plugin": "ssh", "userssh": {"type": "custom", "value": "<pubkey>"}},
#     {"plugin": "gpu", "count": 2}
#   ]
# }

PAI_PLUGIN = "com.microsoft.pai.runtimeplugin"
PLUGIN_NAME_FIELD = "plugin"

SSH_PLUGIN_NAME = "ssh"
USERSSH_FIELD = "userssh"

# =============================================================================
# User SSH Selection Types (userssh.type)
# =============================================================================
# none: 예약값, "아직 키 선택 안 됨"

USERSSH_TYPE_CUSTOM = "custom"
USERSSH_TYPE_EXPRESSION = "expression"
USERSSH_TYPE_NONE = "none"

# 드롭다운 옵션 (옵션이 1개 이하면 선택 비활성화)
USERSSH_TYPE_OPTIONS: list[dict[str, str]] = [
    {"key": USERSSH_TYPE_CUSTOM, "text": "Custom"},
]


# 활성화 + 빈 값일 때 필드 에러 메시지
USERSSH_INVALID_VALUE_MESSAGE = "Please Enter Valid SSH public key"

# 기본 SSH 키를 담는 사용자 expression 이름
DEFAULT_SSH_KEY_EXPRESSION = "ssh-key"

# =============================================================================
# User Extension Resources (REST 이름 규칙)
# =============================================================================
# expression 이름 / custom ssh key 제목: [a-zA-Z0-9_-]+

RESOURCE_NAME_PATTERN = r"^[a-zA-Z0-9_\-]+$"
RESOURCE_NAME_RE = re.compile(RESOURCE_NAME_PATTERN)

USER_STORE_SUFFIX = ".json"
USER_LOCKS_DIR = ".locks"
