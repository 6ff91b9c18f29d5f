"""
团队/项目成员应用服务 - 创建、删除与成员角色管理

每个写操作都先经 MembershipResolver 做角色校验，再在同一事务内执行。
"""
from typing import Callable, List

from domain.common.exceptions import (
    MemberAlreadyExistsException,
    MembershipNotFoundException,
    ProjectNotFoundException,
    TeamNotFoundException,
)
from domain.common.unit_of_work import AbstractUnitOfWork
from domain.membership import (
    MembershipResolver,
    Project,
    ProjectMember,
    RoleFlag,
    Team,
    TeamMember,
    role_name,
)
from domain.membership.entity import default_flags
from application.dto import (
    MemberAddDTO,
    MemberDTO,
    MemberRoleDTO,
    ProjectArchiveDTO,
    ProjectCreateDTO,
    ProjectDTO,
    TeamCreateDTO,
    TeamDTO,
)
from core.logging_config import get_logger


logger = get_logger(__name__)


def _team_dto(team: Team) -> TeamDTO:
    return TeamDTO(
        id=team.id,
        name=team.name,
        workspace_id=team.workspace_id,
        created_by=team.created_by,
        created_at=team.created_at,
    )


def _project_dto(project: Project) -> ProjectDTO:
    return ProjectDTO(
        id=project.id,
        team_id=project.team_id,
        name=project.name,
        description=project.description,
        is_public=project.is_public,
        is_archived=project.is_archived,
        created_by=project.created_by,
        created_at=project.created_at,
    )


class MembershipApplicationService:
    def __init__(self, uow_factory: Callable[..., AbstractUnitOfWork]):
        self._uow_factory = uow_factory

    @staticmethod
    def _resolver(uow: AbstractUnitOfWork) -> MembershipResolver:
        return MembershipResolver(uow.membership_repository, uow.project_repository)

    # -------------------- teams --------------------
    async def create_team(self, user_id: str, data: TeamCreateDTO) -> TeamDTO:
        team = Team.create(name=data.name, created_by=user_id, workspace_id=data.workspace_id)
        async with self._uow_factory() as uow:
            team = await uow.team_repository.create(team)
            await uow.membership_repository.add_team_member(
                TeamMember(team_id=team.id, user_id=user_id, role_flags=int(RoleFlag.OWNER))
            )
        logger.info("team_created", team_id=team.id, user_id=user_id)
        return _team_dto(team)

    async def delete_team(self, team_id: str, user_id: str) -> None:
        async with self._uow_factory() as uow:
            await self._resolver(uow).require_team_role(team_id, user_id, RoleFlag.OWNER)
            removed = await uow.membership_repository.delete_team_members(team_id)
            if not await uow.team_repository.delete(team_id):
                raise TeamNotFoundException(team_id)
        logger.info("team_deleted", team_id=team_id, user_id=user_id, members_removed=removed)

    async def list_team_members(self, team_id: str, user_id: str) -> List[MemberDTO]:
        async with self._uow_factory(readonly=True) as uow:
            await self._resolver(uow).require_team_role(team_id, user_id, RoleFlag.VIEWER)
            members = await uow.membership_repository.list_team_members(team_id)
        return [MemberDTO.from_team_member(m) for m in members]

    async def add_team_member(self, team_id: str, actor_id: str, data: MemberAddDTO) -> MemberDTO:
        async with self._uow_factory() as uow:
            await self._resolver(uow).require_team_role(team_id, actor_id, RoleFlag.ADMIN)
            if await uow.membership_repository.find_team_membership(team_id, data.user_id):
                raise MemberAlreadyExistsException(user_id=data.user_id, team_id=team_id)
            member = await uow.membership_repository.add_team_member(
                TeamMember(
                    team_id=team_id,
                    user_id=data.user_id,
                    role_flags=default_flags(data.role_flags),
                    invited_by=actor_id,
                )
            )
        logger.info("team_member_added", team_id=team_id, user_id=data.user_id, role_flags=member.role_flags)
        return MemberDTO.from_team_member(member)

    async def update_team_member_role(
        self, team_id: str, actor_id: str, user_id: str, role_flags: int
    ) -> MemberRoleDTO:
        async with self._uow_factory() as uow:
            await self._resolver(uow).require_team_role(team_id, actor_id, RoleFlag.ADMIN)
            if not await uow.membership_repository.set_team_role(team_id, user_id, role_flags):
                raise MembershipNotFoundException(user_id=user_id, team_id=team_id)
        return MemberRoleDTO(user_id=user_id, role_flags=role_flags, role_name=role_name(role_flags))

    async def remove_team_member(self, team_id: str, actor_id: str, user_id: str) -> None:
        async with self._uow_factory() as uow:
            await self._resolver(uow).require_team_role(team_id, actor_id, RoleFlag.ADMIN)
            if not await uow.membership_repository.remove_team_member(team_id, user_id):
                raise MembershipNotFoundException(user_id=user_id, team_id=team_id)
        logger.info("team_member_removed", team_id=team_id, user_id=user_id, actor_id=actor_id)

    # -------------------- projects --------------------
    async def create_team_project(self, team_id: str, user_id: str, data: ProjectCreateDTO) -> ProjectDTO:
        project = Project.create(
            name=data.name,
            created_by=user_id,
            team_id=team_id,
            description=data.description,
            is_public=data.is_public,
        )
        async with self._uow_factory() as uow:
            await self._resolver(uow).require_team_role(team_id, user_id, RoleFlag.EDITOR)
            project = await uow.project_repository.create(project)
        logger.info("project_created", project_id=project.id, team_id=team_id, user_id=user_id)
        return _project_dto(project)

    async def create_personal_project(self, user_id: str, data: ProjectCreateDTO) -> ProjectDTO:
        project = Project.create(
            name=data.name,
            created_by=user_id,
            description=data.description,
            is_public=data.is_public,
        )
        async with self._uow_factory() as uow:
            project = await uow.project_repository.create(project)
            await uow.membership_repository.add_project_member(
                ProjectMember(project_id=project.id, user_id=user_id, role_flags=int(RoleFlag.OWNER))
            )
        logger.info("project_created", project_id=project.id, team_id=None, user_id=user_id)
        return _project_dto(project)

    async def delete_project(self, project_id: str, user_id: str) -> None:
        async with self._uow_factory() as uow:
            await self._resolver(uow).require_project_role(project_id, user_id, RoleFlag.OWNER)
            await uow.membership_repository.delete_project_members(project_id)
            await uow.whiteboard_repository.delete_by_project(project_id)
            if not await uow.project_repository.delete(project_id):
                raise ProjectNotFoundException(project_id)
        logger.info("project_deleted", project_id=project_id, user_id=user_id)

    async def toggle_project_archive(self, project_id: str, user_id: str) -> ProjectArchiveDTO:
        """归档状态取反（Admin 及以上）"""
        async with self._uow_factory() as uow:
            await self._resolver(uow).require_project_role(project_id, user_id, RoleFlag.ADMIN)
            project = await uow.project_repository.get_by_id(project_id)
            if project is None:
                raise ProjectNotFoundException(project_id)
            archived = not project.is_archived
            if not await uow.project_repository.set_archived(project_id, archived):
                raise ProjectNotFoundException(project_id)
        logger.info("project_archive_toggled", project_id=project_id, user_id=user_id, is_archived=archived)
        return ProjectArchiveDTO(id=project_id, is_archived=archived)

    async def list_project_members(self, project_id: str, user_id: str) -> List[MemberDTO]:
        async with self._uow_factory(readonly=True) as uow:
            await self._resolver(uow).require_project_role(project_id, user_id, RoleFlag.VIEWER)
            members = await uow.membership_repository.list_project_members(project_id)
        return [MemberDTO.from_project_member(m) for m in members]

    async def add_project_member(self, project_id: str, actor_id: str, data: MemberAddDTO) -> MemberDTO:
        async with self._uow_factory() as uow:
            await self._resolver(uow).require_project_role(project_id, actor_id, RoleFlag.ADMIN)
            if await uow.membership_repository.find_project_membership(project_id, data.user_id):
                raise MemberAlreadyExistsException(user_id=data.user_id, project_id=project_id)
            member = await uow.membership_repository.add_project_member(
                ProjectMember(
                    project_id=project_id,
                    user_id=data.user_id,
                    role_flags=default_flags(data.role_flags),
                )
            )
        logger.info("project_member_added", project_id=project_id, user_id=data.user_id)
        return MemberDTO.from_project_member(member)

    async def update_project_member_role(
        self, project_id: str, actor_id: str, user_id: str, role_flags: int
    ) -> MemberRoleDTO:
        async with self._uow_factory() as uow:
            await self._resolver(uow).require_project_role(project_id, actor_id, RoleFlag.ADMIN)
            if not await uow.membership_repository.set_project_role(project_id, user_id, role_flags):
                raise MembershipNotFoundException(user_id=user_id, project_id=project_id)
        return MemberRoleDTO(user_id=user_id, role_flags=role_flags, role_name=role_name(role_flags))

    async def remove_project_member(self, project_id: str, actor_id: str, user_id: str) -> None:
        async with self._uow_factory() as uow:
            await self._resolver(uow).require_project_role(project_id, actor_id, RoleFlag.ADMIN)
            if not await uow.membership_repository.remove_project_member(project_id, user_id):
                raise MembershipNotFoundException(user_id=user_id, project_id=project_id)
        logger.info("project_member_removed", project_id=project_id, user_id=user_id, actor_id=actor_id)
