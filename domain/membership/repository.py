"""Repository contracts for teams, projects and membership rows."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from .entity import Project, ProjectMember, Team, TeamMember


class TeamRepository(ABC):
    @abstractmethod
    async def create(self, team: Team) -> Team:
        ...

    @abstractmethod
    async def get_by_id(self, team_id: str) -> Optional[Team]:
        ...

    @abstractmethod
    async def delete(self, team_id: str) -> bool:
        ...


class ProjectRepository(ABC):
    @abstractmethod
    async def create(self, project: Project) -> Project:
        ...

    @abstractmethod
    async def get_by_id(self, project_id: str) -> Optional[Project]:
        ...

    @abstractmethod
    async def set_archived(self, project_id: str, archived: bool) -> bool:
        """Return False when no row matched."""

    @abstractmethod
    async def delete(self, project_id: str) -> bool:
        ...


class MembershipRepository(ABC):
    """Team and project membership rows; one row per (entity, user)."""

    @abstractmethod
    async def find_team_membership(self, team_id: str, user_id: str) -> Optional[TeamMember]:
        ...

    @abstractmethod
    async def find_project_membership(self, project_id: str, user_id: str) -> Optional[ProjectMember]:
        ...

    @abstractmethod
    async def list_team_members(self, team_id: str) -> list[TeamMember]:
        """Members ordered by join time."""

    @abstractmethod
    async def list_project_members(self, project_id: str) -> list[ProjectMember]:
        ...

    @abstractmethod
    async def add_team_member(self, member: TeamMember) -> TeamMember:
        ...

    @abstractmethod
    async def add_project_member(self, member: ProjectMember) -> ProjectMember:
        ...

    @abstractmethod
    async def set_team_role(self, team_id: str, user_id: str, role_flags: int) -> bool:
        """Return False when no row matched."""

    @abstractmethod
    async def set_project_role(self, project_id: str, user_id: str, role_flags: int) -> bool:
        ...

    @abstractmethod
    async def remove_team_member(self, team_id: str, user_id: str) -> bool:
        ...

    @abstractmethod
    async def remove_project_member(self, project_id: str, user_id: str) -> bool:
        ...

    @abstractmethod
    async def delete_team_members(self, team_id: str) -> int:
        ...

    @abstractmethod
    async def delete_project_members(self, project_id: str) -> int:
        ...
