"""
FastAPI Routes.

API 라우트 (REST)
"""

from . import extend_user

__all__ = ["extend_user"]
