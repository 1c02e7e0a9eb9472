"""
Application Services.

역할:
- default_key: job 제출 폼용 기본 SSH 키 조회
"""

from .default_key import RestDefaultKeyLookup, StoreDefaultKeyLookup

__all__ = [
    "StoreDefaultKeyLookup",
    "RestDefaultKeyLookup",
]
