"""
成员角色解析 - 团队/项目的有效角色与权限校验

Every mutating operation resolves the caller's effective role here and
then applies ``has_permission``. Keep this the only place that does so.
"""
from __future__ import annotations

from .repository import MembershipRepository, ProjectRepository
from .roles import has_permission
from domain.common.exceptions import (
    AccessForbiddenException,
    BusinessException,
    InsufficientPermissionException,
    MembershipNotFoundException,
    ProjectNotFoundException,
)


class MembershipResolver:
    """Resolve effective role flags for (team, user) and (project, user)."""

    def __init__(self, memberships: MembershipRepository, projects: ProjectRepository):
        self._memberships = memberships
        self._projects = projects

    async def get_team_role(self, team_id: str, user_id: str) -> int:
        member = await self._memberships.find_team_membership(team_id, user_id)
        if member is None:
            raise MembershipNotFoundException(user_id=user_id, team_id=team_id)
        return member.role_flags

    async def get_project_role(self, project_id: str, user_id: str) -> int:
        """
        项目角色解析顺序：
        1. 项目成员记录（显式授权）
        2. 项目所属团队的成员角色
        3. 个人项目且无成员记录 -> 拒绝访问，不存在默认角色
        """
        member = await self._memberships.find_project_membership(project_id, user_id)
        if member is not None:
            return member.role_flags

        project = await self._projects.get_by_id(project_id)
        if project is None:
            raise ProjectNotFoundException(project_id)
        if project.is_personal:
            raise AccessForbiddenException(details={"project_id": project_id})
        return await self.get_team_role(project.team_id, user_id)

    async def require_team_role(self, team_id: str, user_id: str, required_flags: int) -> int:
        try:
            flags = await self.get_team_role(team_id, user_id)
        except BusinessException as exc:
            raise AccessForbiddenException(details={"team_id": team_id}) from exc
        return self._check(flags, required_flags)

    async def require_project_role(self, project_id: str, user_id: str, required_flags: int) -> int:
        try:
            flags = await self.get_project_role(project_id, user_id)
        except BusinessException as exc:
            raise AccessForbiddenException(details={"project_id": project_id}) from exc
        return self._check(flags, required_flags)

    @staticmethod
    def _check(flags: int, required_flags: int) -> int:
        if not has_permission(flags, required_flags):
            raise InsufficientPermissionException(role_flags=flags, required_flags=int(required_flags))
        return flags
