"""
Shared business codes used across layers (Domain/Core/API).

Single source of truth for the integer codes carried in the unified
error envelope; the HTTP status mapping lives in core.exceptions.
"""
from enum import IntEnum


class BusinessCode(IntEnum):
    """Unified business status codes."""

    # Success
    SUCCESS = 0

    # Parameter errors (1xxxx)
    PARAM_ERROR = 10000
    PARAM_MISSING = 10001
    PARAM_TYPE_ERROR = 10002
    PARAM_VALIDATION_ERROR = 10003

    # Business errors (2xxxx)
    BUSINESS_ERROR = 20000
    TOKEN_INVALID = 20004
    TOKEN_EXPIRED = 20005
    NOT_FOUND = 20006  # Generic resource not found
    MEMBERSHIP_NOT_FOUND = 20007
    PROJECT_NOT_FOUND = 20008
    TEAM_NOT_FOUND = 20009
    MEMBER_ALREADY_EXISTS = 20010

    # Authorization errors (3xxxx)
    PERMISSION_ERROR = 30000
    UNAUTHORIZED = 30001
    FORBIDDEN = 30002

    # System errors (4xxxx)
    SYSTEM_ERROR = 40000
    DATABASE_ERROR = 40001
    SERVICE_UNAVAILABLE = 40003


__all__ = ["BusinessCode"]
