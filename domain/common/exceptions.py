"""领域层业务异常定义，供领域与基础设施使用。

核心（core）层仅负责全局映射与异常处理，尽量避免领域层反向依赖核心层。
"""
from __future__ import annotations

from typing import Optional
from shared.codes import BusinessCode


class BusinessException(Exception):
    """业务异常基类"""

    def __init__(
        self,
        code: int,
        message: str,
        error_type: str = "BusinessError",
        details: Optional[dict] = None,
        field: Optional[str] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.error_type = error_type
        self.details = details
        self.field = field
        super().__init__(self.message)


class MembershipNotFoundException(BusinessException):
    """No membership row for (team, user) or (project, user)."""

    def __init__(self, *, user_id: str, team_id: Optional[str] = None, project_id: Optional[str] = None):
        details = {"user_id": user_id}
        if team_id is not None:
            details["team_id"] = team_id
        if project_id is not None:
            details["project_id"] = project_id
        super().__init__(
            code=BusinessCode.MEMBERSHIP_NOT_FOUND,
            message="Membership not found",
            error_type="MembershipNotFound",
            details=details,
        )


class ProjectNotFoundException(BusinessException):
    def __init__(self, project_id: str):
        super().__init__(
            code=BusinessCode.PROJECT_NOT_FOUND,
            message="Project not found",
            error_type="ProjectNotFound",
            details={"project_id": project_id},
        )


class TeamNotFoundException(BusinessException):
    def __init__(self, team_id: str):
        super().__init__(
            code=BusinessCode.TEAM_NOT_FOUND,
            message="Team not found",
            error_type="TeamNotFound",
            details={"team_id": team_id},
        )


class MemberAlreadyExistsException(BusinessException):
    def __init__(self, *, user_id: str, team_id: Optional[str] = None, project_id: Optional[str] = None):
        details = {"user_id": user_id}
        if team_id is not None:
            details["team_id"] = team_id
        if project_id is not None:
            details["project_id"] = project_id
        super().__init__(
            code=BusinessCode.MEMBER_ALREADY_EXISTS,
            message="User is already a member",
            error_type="MemberAlreadyExists",
            details=details,
        )


class AccessForbiddenException(BusinessException):
    """Caller has no effective role on the resource."""

    def __init__(self, message: str = "Access denied", *, details: Optional[dict] = None):
        super().__init__(
            code=BusinessCode.FORBIDDEN,
            message=message,
            error_type="AccessForbidden",
            details=details,
        )


class InsufficientPermissionException(BusinessException):
    """Caller has a role, but it ranks below the one required."""

    def __init__(self, *, role_flags: int, required_flags: int, message: str = "Insufficient permissions"):
        super().__init__(
            code=BusinessCode.PERMISSION_ERROR,
            message=message,
            error_type="InsufficientPermission",
            details={"role_flags": role_flags, "required_flags": required_flags},
        )


class DomainValidationException(BusinessException):
    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(
            code=BusinessCode.PARAM_VALIDATION_ERROR,
            message=message,
            error_type="DomainValidationError",
            details=details,
            field=field,
        )
