"""Unit of Work 抽象定义"""
from __future__ import annotations

from abc import ABC, abstractmethod

from domain.chat.repository import ChatMessageRepository
from domain.membership.repository import MembershipRepository, ProjectRepository, TeamRepository
from domain.whiteboard.repository import WhiteboardRepository


class AbstractUnitOfWork(ABC):
    """应用层事务边界控制抽象"""

    team_repository: TeamRepository
    project_repository: ProjectRepository
    membership_repository: MembershipRepository
    chat_message_repository: ChatMessageRepository
    whiteboard_repository: WhiteboardRepository

    def __init__(self, *, readonly: bool = False) -> None:
        self._committed = False
        self._readonly = readonly
        self.team_repository = None  # type: ignore[assignment]
        self.project_repository = None  # type: ignore[assignment]
        self.membership_repository = None  # type: ignore[assignment]
        self.chat_message_repository = None  # type: ignore[assignment]
        self.whiteboard_repository = None  # type: ignore[assignment]

    async def __aenter__(self) -> "AbstractUnitOfWork":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if exc:
            await self.rollback()
        else:
            # 只在非只读且未显式提交时自动提交
            if not self._readonly and not self._committed:
                await self.commit()

    @abstractmethod
    async def commit(self) -> None:
        """提交事务"""
        ...

    @abstractmethod
    async def rollback(self) -> None:
        """回滚事务"""
