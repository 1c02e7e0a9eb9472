"""Domain layer: constants, errors and schemas."""

from .errors import ErrorCodes, ExtendError
from .schemas import (
    UserExpression,
    UserExpressionCreateInput,
    UserRecord,
    UserSshKey,
    UserSshKeyCreateInput,
)

__all__ = [
    "ErrorCodes",
    "ExtendError",
    "UserExpression",
    "UserSshKey",
    "UserRecord",
    "UserExpressionCreateInput",
    "UserSshKeyCreateInput",
]
