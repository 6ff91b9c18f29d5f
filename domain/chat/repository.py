"""Repository abstraction for chat messages."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from .entity import ChatMessage


class ChatMessageRepository(ABC):
    @abstractmethod
    async def create(self, message: ChatMessage) -> ChatMessage:
        ...

    @abstractmethod
    async def get_by_id(self, message_id: str) -> Optional[ChatMessage]:
        ...

    @abstractmethod
    async def list_recent(
        self,
        team_id: str,
        *,
        limit: int,
        before: Optional[ChatMessage] = None,
    ) -> list[ChatMessage]:
        """Newest ``limit`` messages older than ``before``, newest first."""
