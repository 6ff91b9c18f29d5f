"""Pytest bootstrap configuration.

Ensure mandatory environment variables are set before test collection
and module imports that depend on application settings, and provide
in-memory repositories behind the unit-of-work seam.
"""
import asyncio
import os
from dataclasses import replace
from typing import Optional

# Mandatory secret key for settings validation
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("DATABASE__URL", "sqlite+aiosqlite:///:memory:")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from domain.chat import ChatMessage, ChatMessageRepository  # noqa: E402
from domain.common.unit_of_work import AbstractUnitOfWork  # noqa: E402
from domain.membership import (  # noqa: E402
    MembershipRepository,
    Project,
    ProjectMember,
    ProjectRepository,
    Team,
    TeamMember,
    TeamRepository,
)
from domain.whiteboard import Whiteboard, WhiteboardRepository  # noqa: E402


class InMemoryStore:
    """Shared state behind every fake unit of work of one test."""

    def __init__(self) -> None:
        self.teams: dict[str, Team] = {}
        self.projects: dict[str, Project] = {}
        self.team_members: dict[tuple[str, str], TeamMember] = {}
        self.project_members: dict[tuple[str, str], ProjectMember] = {}
        self.chat_messages: list[ChatMessage] = []
        self.whiteboards: dict[str, Whiteboard] = {}
        # chat persistence fault injection
        self.chat_delay: float = 0.0
        self.chat_error: Optional[Exception] = None

    def add_team(self, team_id: str, members: Optional[dict[str, int]] = None) -> Team:
        team = Team(id=team_id, name=f"team {team_id}", created_by="seed")
        self.teams[team_id] = team
        for user_id, flags in (members or {}).items():
            self.team_members[(team_id, user_id)] = TeamMember(team_id=team_id, user_id=user_id, role_flags=flags)
        return team

    def add_project(
        self,
        project_id: str,
        *,
        team_id: Optional[str] = None,
        members: Optional[dict[str, int]] = None,
    ) -> Project:
        project = Project(id=project_id, name=f"project {project_id}", created_by="seed", team_id=team_id)
        self.projects[project_id] = project
        for user_id, flags in (members or {}).items():
            self.project_members[(project_id, user_id)] = ProjectMember(
                project_id=project_id, user_id=user_id, role_flags=flags
            )
        return project


class FakeTeamRepository(TeamRepository):
    def __init__(self, store: InMemoryStore):
        self.store = store

    async def create(self, team: Team) -> Team:
        self.store.teams[team.id] = team
        return team

    async def get_by_id(self, team_id: str) -> Optional[Team]:
        return self.store.teams.get(team_id)

    async def delete(self, team_id: str) -> bool:
        return self.store.teams.pop(team_id, None) is not None


class FakeProjectRepository(ProjectRepository):
    def __init__(self, store: InMemoryStore):
        self.store = store

    async def create(self, project: Project) -> Project:
        self.store.projects[project.id] = project
        return project

    async def get_by_id(self, project_id: str) -> Optional[Project]:
        return self.store.projects.get(project_id)

    async def set_archived(self, project_id: str, archived: bool) -> bool:
        project = self.store.projects.get(project_id)
        if project is None:
            return False
        self.store.projects[project_id] = replace(project, is_archived=archived)
        return True

    async def delete(self, project_id: str) -> bool:
        return self.store.projects.pop(project_id, None) is not None


class FakeMembershipRepository(MembershipRepository):
    def __init__(self, store: InMemoryStore):
        self.store = store

    async def find_team_membership(self, team_id, user_id):
        return self.store.team_members.get((team_id, user_id))

    async def find_project_membership(self, project_id, user_id):
        return self.store.project_members.get((project_id, user_id))

    async def list_team_members(self, team_id):
        return [m for (tid, _), m in self.store.team_members.items() if tid == team_id]

    async def list_project_members(self, project_id):
        return [m for (pid, _), m in self.store.project_members.items() if pid == project_id]

    async def add_team_member(self, member):
        self.store.team_members[(member.team_id, member.user_id)] = member
        return member

    async def add_project_member(self, member):
        self.store.project_members[(member.project_id, member.user_id)] = member
        return member

    async def set_team_role(self, team_id, user_id, role_flags):
        member = self.store.team_members.get((team_id, user_id))
        if member is None:
            return False
        self.store.team_members[(team_id, user_id)] = replace(member, role_flags=role_flags)
        return True

    async def set_project_role(self, project_id, user_id, role_flags):
        member = self.store.project_members.get((project_id, user_id))
        if member is None:
            return False
        self.store.project_members[(project_id, user_id)] = replace(member, role_flags=role_flags)
        return True

    async def remove_team_member(self, team_id, user_id):
        return self.store.team_members.pop((team_id, user_id), None) is not None

    async def remove_project_member(self, project_id, user_id):
        return self.store.project_members.pop((project_id, user_id), None) is not None

    async def delete_team_members(self, team_id):
        keys = [k for k in self.store.team_members if k[0] == team_id]
        for k in keys:
            del self.store.team_members[k]
        return len(keys)

    async def delete_project_members(self, project_id):
        keys = [k for k in self.store.project_members if k[0] == project_id]
        for k in keys:
            del self.store.project_members[k]
        return len(keys)


class FakeChatMessageRepository(ChatMessageRepository):
    def __init__(self, store: InMemoryStore):
        self.store = store

    async def create(self, message: ChatMessage) -> ChatMessage:
        if self.store.chat_delay:
            await asyncio.sleep(self.store.chat_delay)
        if self.store.chat_error is not None:
            raise self.store.chat_error
        self.store.chat_messages.append(message)
        return message

    async def get_by_id(self, message_id: str) -> Optional[ChatMessage]:
        return next((m for m in self.store.chat_messages if m.id == message_id), None)

    async def list_recent(self, team_id, *, limit, before=None):
        rows = [m for m in self.store.chat_messages if m.team_id == team_id]
        rows.sort(key=lambda m: (m.created_at, m.id), reverse=True)
        if before is not None:
            rows = [m for m in rows if (m.created_at, m.id) < (before.created_at, before.id)]
        return rows[:limit]


class FakeWhiteboardRepository(WhiteboardRepository):
    def __init__(self, store: InMemoryStore):
        self.store = store

    async def get_by_project(self, project_id):
        return self.store.whiteboards.get(project_id)

    async def create(self, whiteboard):
        self.store.whiteboards[whiteboard.project_id] = whiteboard
        return whiteboard

    async def update(self, whiteboard):
        self.store.whiteboards[whiteboard.project_id] = whiteboard
        return whiteboard

    async def delete_by_project(self, project_id):
        return 1 if self.store.whiteboards.pop(project_id, None) is not None else 0


class FakeUnitOfWork(AbstractUnitOfWork):
    def __init__(self, store: InMemoryStore, *, readonly: bool = False) -> None:
        super().__init__(readonly=readonly)
        self.team_repository = FakeTeamRepository(store)
        self.project_repository = FakeProjectRepository(store)
        self.membership_repository = FakeMembershipRepository(store)
        self.chat_message_repository = FakeChatMessageRepository(store)
        self.whiteboard_repository = FakeWhiteboardRepository(store)
        self.rolled_back = False

    async def commit(self) -> None:
        self._committed = True

    async def rollback(self) -> None:
        self.rolled_back = True


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def uow_factory(store):
    def factory(*, readonly: bool = False) -> FakeUnitOfWork:
        return FakeUnitOfWork(store, readonly=readonly)

    return factory


@pytest.fixture
def app(uow_factory):
    from api.dependencies import get_uow_factory
    from main import app as fastapi_app

    fastapi_app.dependency_overrides[get_uow_factory] = lambda: uow_factory
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    # 同一个 TestClient 上下文内的所有连接共享一个事件循环
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_token():
    from application.services.token_service import TokenService

    service = TokenService()
    return service.create_access_token


@pytest.fixture
def auth_headers(make_token):
    def build(user_id: str) -> dict:
        return {"Authorization": f"Bearer {make_token(user_id)}"}

    return build
