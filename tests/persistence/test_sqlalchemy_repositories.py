"""SQLAlchemy repositories and unit of work against an in-memory aiosqlite database."""
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from application.dto import ProjectCreateDTO, TeamCreateDTO
from application.services.access_service import AccessService
from application.services.chat_service import ChatApplicationService
from application.services.membership_service import MembershipApplicationService
from domain.chat import ChatMessage
from domain.membership import RoleFlag
from infrastructure.models import Base
from infrastructure.unit_of_work import SQLAlchemyUnitOfWork


T0 = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)


@pytest_asyncio.fixture
async def sql_uow_factory():
    # StaticPool 让所有会话共享同一个内存库连接
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    session_factory = async_sessionmaker(engine, expire_on_commit=False)

    def factory(*, readonly: bool = False) -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(session_factory, readonly=readonly)

    yield factory
    await engine.dispose()


def _message(message_id: str, created_at: datetime, team_id: str = "t1") -> ChatMessage:
    return ChatMessage(
        id=message_id,
        team_id=team_id,
        user_id="alice",
        user_name="Alice",
        content=f"text {message_id}",
        created_at=created_at,
    )


@pytest.mark.asyncio
async def test_created_team_is_committed_and_resolvable(sql_uow_factory):
    service = MembershipApplicationService(sql_uow_factory)
    team = await service.create_team("alice", TeamCreateDTO(name="Design"))
    project = await service.create_team_project(team.id, "alice", ProjectCreateDTO(name="Board"))

    access = AccessService(sql_uow_factory)
    assert await access.get_team_role(team.id, "alice") == RoleFlag.OWNER
    # 团队项目没有成员行，回退到团队角色
    assert await access.get_project_role(project.id, "alice") == RoleFlag.OWNER


@pytest.mark.asyncio
async def test_failed_unit_of_work_rolls_back(sql_uow_factory):
    with pytest.raises(RuntimeError):
        async with sql_uow_factory() as uow:
            await uow.chat_message_repository.create(_message("m1", T0))
            raise RuntimeError("boom")

    async with sql_uow_factory(readonly=True) as uow:
        assert await uow.chat_message_repository.get_by_id("m1") is None


@pytest.mark.asyncio
async def test_list_recent_pages_by_created_at_then_id(sql_uow_factory):
    later = T0 + timedelta(seconds=1)
    async with sql_uow_factory() as uow:
        for message_id, created_at in (("m1", T0), ("m2", T0), ("m3", later), ("m4", later)):
            await uow.chat_message_repository.create(_message(message_id, created_at))
        await uow.chat_message_repository.create(_message("other", later, team_id="t2"))

    async with sql_uow_factory(readonly=True) as uow:
        repo = uow.chat_message_repository
        first = await repo.list_recent("t1", limit=2)
        assert [m.id for m in first] == ["m4", "m3"]

        cursor = await repo.get_by_id("m3")
        second = await repo.list_recent("t1", limit=2, before=cursor)
        assert [m.id for m in second] == ["m2", "m1"]


@pytest.mark.asyncio
async def test_chat_history_reads_oldest_first(sql_uow_factory):
    team = await MembershipApplicationService(sql_uow_factory).create_team("alice", TeamCreateDTO(name="Chat"))
    async with sql_uow_factory() as uow:
        for i in range(4):
            await uow.chat_message_repository.create(_message(f"m{i + 1}", T0 + timedelta(seconds=i), team.id))

    service = ChatApplicationService(sql_uow_factory)
    page = await service.history(team.id, "alice", limit=2)
    assert [m.id for m in page] == ["m3", "m4"]

    older = await service.history(team.id, "alice", limit=2, before="m3")
    assert [m.id for m in older] == ["m1", "m2"]


@pytest.mark.asyncio
async def test_set_archived_updates_row(sql_uow_factory):
    service = MembershipApplicationService(sql_uow_factory)
    project = await service.create_personal_project("alice", ProjectCreateDTO(name="Notes"))

    toggled = await service.toggle_project_archive(project.id, "alice")
    assert toggled.is_archived is True

    async with sql_uow_factory(readonly=True) as uow:
        stored = await uow.project_repository.get_by_id(project.id)
        assert stored.is_archived is True
        assert await uow.project_repository.set_archived("missing", True) is False
