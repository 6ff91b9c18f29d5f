"""SQLAlchemy Unit of Work 实现"""
from __future__ import annotations

from typing import Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from domain.common.unit_of_work import AbstractUnitOfWork
from infrastructure.database import AsyncSessionLocal
from infrastructure.repositories.chat_message_repository import SQLAlchemyChatMessageRepository
from infrastructure.repositories.membership_repository import (
    SQLAlchemyMembershipRepository,
    SQLAlchemyProjectRepository,
    SQLAlchemyTeamRepository,
)
from infrastructure.repositories.whiteboard_repository import SQLAlchemyWhiteboardRepository


class SQLAlchemyUnitOfWork(AbstractUnitOfWork):
    """基于SQLAlchemy的Unit of Work，一个实例对应一次事务"""

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession] = AsyncSessionLocal,
        session: Optional[AsyncSession] = None,
        *,
        readonly: bool = False,
    ) -> None:
        super().__init__(readonly=readonly)
        self._session_factory = session_factory
        self._external_session = session
        self.session: Optional[AsyncSession] = session

    def _bind_repositories(self, session: AsyncSession) -> None:
        self.team_repository = SQLAlchemyTeamRepository(session)
        self.project_repository = SQLAlchemyProjectRepository(session)
        self.membership_repository = SQLAlchemyMembershipRepository(session)
        self.chat_message_repository = SQLAlchemyChatMessageRepository(session)
        self.whiteboard_repository = SQLAlchemyWhiteboardRepository(session)

    def _unbind_repositories(self) -> None:
        self.team_repository = None  # type: ignore[assignment]
        self.project_repository = None  # type: ignore[assignment]
        self.membership_repository = None  # type: ignore[assignment]
        self.chat_message_repository = None  # type: ignore[assignment]
        self.whiteboard_repository = None  # type: ignore[assignment]

    async def __aenter__(self) -> "SQLAlchemyUnitOfWork":
        if self.session is None:
            self.session = self._session_factory()
        self._bind_repositories(self.session)
        # 仅在非只读模式下显式开启事务
        if not self._readonly:
            await self.session.begin()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            await super().__aexit__(exc_type, exc, tb)
        finally:
            if self._external_session is None and self.session is not None:
                await self.session.close()
                self.session = None
            self._unbind_repositories()

    async def commit(self) -> None:
        if self._readonly:
            # 只读情况下不提交
            self._committed = True
            return
        if self.session and self.session.in_transaction():
            await self.session.commit()
        self._committed = True

    async def rollback(self) -> None:
        if self.session and self.session.in_transaction():
            await self.session.rollback()
        self._committed = False
