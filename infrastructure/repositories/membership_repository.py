"""SQLAlchemy-backed repositories for teams, projects and membership rows."""
from __future__ import annotations

from typing import Optional

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from domain.membership import (
    MembershipRepository,
    Project,
    ProjectMember,
    ProjectRepository,
    Team,
    TeamMember,
    TeamRepository,
)
from infrastructure.models.membership import (
    ProjectMemberModel,
    ProjectModel,
    TeamMemberModel,
    TeamModel,
)


class SQLAlchemyTeamRepository(TeamRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    @staticmethod
    def _to_entity(model: TeamModel) -> Team:
        return Team(
            id=model.id,
            name=model.name,
            created_by=model.created_by,
            workspace_id=model.workspace_id or "",
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    async def create(self, team: Team) -> Team:
        model = TeamModel(
            id=team.id,
            name=team.name,
            workspace_id=team.workspace_id,
            created_by=team.created_by,
            created_at=team.created_at,
            updated_at=team.updated_at,
        )
        self.session.add(model)
        await self.session.flush()
        await self.session.refresh(model)
        return self._to_entity(model)

    async def get_by_id(self, team_id: str) -> Optional[Team]:
        model = await self.session.get(TeamModel, team_id)
        return self._to_entity(model) if model else None

    async def delete(self, team_id: str) -> bool:
        result = await self.session.execute(delete(TeamModel).where(TeamModel.id == team_id))
        return (result.rowcount or 0) > 0


class SQLAlchemyProjectRepository(ProjectRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    @staticmethod
    def _to_entity(model: ProjectModel) -> Project:
        return Project(
            id=model.id,
            name=model.name,
            created_by=model.created_by,
            team_id=model.team_id,
            description=model.description or "",
            is_public=bool(model.is_public),
            is_archived=bool(model.is_archived),
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    async def create(self, project: Project) -> Project:
        model = ProjectModel(
            id=project.id,
            team_id=project.team_id,
            name=project.name,
            description=project.description,
            is_public=project.is_public,
            is_archived=project.is_archived,
            created_by=project.created_by,
            created_at=project.created_at,
            updated_at=project.updated_at,
        )
        self.session.add(model)
        await self.session.flush()
        await self.session.refresh(model)
        return self._to_entity(model)

    async def get_by_id(self, project_id: str) -> Optional[Project]:
        model = await self.session.get(ProjectModel, project_id)
        return self._to_entity(model) if model else None

    async def set_archived(self, project_id: str, archived: bool) -> bool:
        stmt = update(ProjectModel).where(ProjectModel.id == project_id).values(is_archived=archived)
        result = await self.session.execute(stmt)
        return (result.rowcount or 0) > 0

    async def delete(self, project_id: str) -> bool:
        result = await self.session.execute(delete(ProjectModel).where(ProjectModel.id == project_id))
        return (result.rowcount or 0) > 0


class SQLAlchemyMembershipRepository(MembershipRepository):
    """团队/项目成员关系（每个实体每个用户一行）"""

    def __init__(self, session: AsyncSession):
        self.session = session

    @staticmethod
    def _team_member(model: TeamMemberModel) -> TeamMember:
        return TeamMember(
            id=model.id,
            team_id=model.team_id,
            user_id=model.user_id,
            role_flags=model.role_flags,
            invited_by=model.invited_by,
            joined_at=model.joined_at,
        )

    @staticmethod
    def _project_member(model: ProjectMemberModel) -> ProjectMember:
        return ProjectMember(
            id=model.id,
            project_id=model.project_id,
            user_id=model.user_id,
            role_flags=model.role_flags,
            added_at=model.added_at,
        )

    async def find_team_membership(self, team_id: str, user_id: str) -> Optional[TeamMember]:
        stmt = select(TeamMemberModel).where(
            TeamMemberModel.team_id == team_id,
            TeamMemberModel.user_id == user_id,
        )
        model = (await self.session.execute(stmt)).scalar_one_or_none()
        return self._team_member(model) if model else None

    async def find_project_membership(self, project_id: str, user_id: str) -> Optional[ProjectMember]:
        stmt = select(ProjectMemberModel).where(
            ProjectMemberModel.project_id == project_id,
            ProjectMemberModel.user_id == user_id,
        )
        model = (await self.session.execute(stmt)).scalar_one_or_none()
        return self._project_member(model) if model else None

    async def list_team_members(self, team_id: str) -> list[TeamMember]:
        stmt = (
            select(TeamMemberModel)
            .where(TeamMemberModel.team_id == team_id)
            .order_by(TeamMemberModel.joined_at, TeamMemberModel.id)
        )
        rows = (await self.session.execute(stmt)).scalars().all()
        return [self._team_member(m) for m in rows]

    async def list_project_members(self, project_id: str) -> list[ProjectMember]:
        stmt = (
            select(ProjectMemberModel)
            .where(ProjectMemberModel.project_id == project_id)
            .order_by(ProjectMemberModel.added_at, ProjectMemberModel.id)
        )
        rows = (await self.session.execute(stmt)).scalars().all()
        return [self._project_member(m) for m in rows]

    async def add_team_member(self, member: TeamMember) -> TeamMember:
        model = TeamMemberModel(
            id=member.id,
            team_id=member.team_id,
            user_id=member.user_id,
            role_flags=member.role_flags,
            invited_by=member.invited_by,
            joined_at=member.joined_at,
        )
        self.session.add(model)
        await self.session.flush()
        return self._team_member(model)

    async def add_project_member(self, member: ProjectMember) -> ProjectMember:
        model = ProjectMemberModel(
            id=member.id,
            project_id=member.project_id,
            user_id=member.user_id,
            role_flags=member.role_flags,
            added_at=member.added_at,
        )
        self.session.add(model)
        await self.session.flush()
        return self._project_member(model)

    async def set_team_role(self, team_id: str, user_id: str, role_flags: int) -> bool:
        result = await self.session.execute(
            update(TeamMemberModel)
            .where(TeamMemberModel.team_id == team_id, TeamMemberModel.user_id == user_id)
            .values(role_flags=role_flags)
        )
        return (result.rowcount or 0) > 0

    async def set_project_role(self, project_id: str, user_id: str, role_flags: int) -> bool:
        result = await self.session.execute(
            update(ProjectMemberModel)
            .where(ProjectMemberModel.project_id == project_id, ProjectMemberModel.user_id == user_id)
            .values(role_flags=role_flags)
        )
        return (result.rowcount or 0) > 0

    async def remove_team_member(self, team_id: str, user_id: str) -> bool:
        result = await self.session.execute(
            delete(TeamMemberModel).where(
                TeamMemberModel.team_id == team_id,
                TeamMemberModel.user_id == user_id,
            )
        )
        return (result.rowcount or 0) > 0

    async def remove_project_member(self, project_id: str, user_id: str) -> bool:
        result = await self.session.execute(
            delete(ProjectMemberModel).where(
                ProjectMemberModel.project_id == project_id,
                ProjectMemberModel.user_id == user_id,
            )
        )
        return (result.rowcount or 0) > 0

    async def delete_team_members(self, team_id: str) -> int:
        result = await self.session.execute(delete(TeamMemberModel).where(TeamMemberModel.team_id == team_id))
        return result.rowcount or 0

    async def delete_project_members(self, project_id: str) -> int:
        result = await self.session.execute(
            delete(ProjectMemberModel).where(ProjectMemberModel.project_id == project_id)
        )
        return result.rowcount or 0
