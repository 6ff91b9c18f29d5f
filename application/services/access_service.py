"""
访问控制应用服务 - HTTP 路由与实时连接共用的唯一授权入口
"""
from typing import Callable

from domain.common.unit_of_work import AbstractUnitOfWork
from domain.membership import MembershipResolver, RoleFlag


class AccessService:
    """Resolve and enforce roles inside a read-only unit of work."""

    def __init__(self, uow_factory: Callable[..., AbstractUnitOfWork]):
        self._uow_factory = uow_factory

    async def get_team_role(self, team_id: str, user_id: str) -> int:
        async with self._uow_factory(readonly=True) as uow:
            return await self._resolver(uow).get_team_role(team_id, user_id)

    async def get_project_role(self, project_id: str, user_id: str) -> int:
        async with self._uow_factory(readonly=True) as uow:
            return await self._resolver(uow).get_project_role(project_id, user_id)

    async def require_team_role(
        self, team_id: str, user_id: str, required: int = RoleFlag.VIEWER
    ) -> int:
        async with self._uow_factory(readonly=True) as uow:
            return await self._resolver(uow).require_team_role(team_id, user_id, required)

    async def require_project_role(
        self, project_id: str, user_id: str, required: int = RoleFlag.VIEWER
    ) -> int:
        async with self._uow_factory(readonly=True) as uow:
            return await self._resolver(uow).require_project_role(project_id, user_id, required)

    @staticmethod
    def _resolver(uow: AbstractUnitOfWork) -> MembershipResolver:
        return MembershipResolver(uow.membership_repository, uow.project_repository)
