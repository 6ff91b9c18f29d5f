"""SQLAlchemy-backed repository for chat messages."""
from __future__ import annotations

from typing import Optional

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.chat import ChatMessage, ChatMessageRepository
from infrastructure.models.chat_message import ChatMessageModel


class SQLAlchemyChatMessageRepository(ChatMessageRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    def _to_entity(self, model: ChatMessageModel) -> ChatMessage:
        return ChatMessage(
            id=model.id,
            team_id=model.team_id,
            user_id=model.user_id,
            user_name=model.user_name,
            content=model.content,
            created_at=model.created_at,
            reply_to=model.reply_to,
            edited_at=model.edited_at,
            deleted=bool(model.deleted),
        )

    async def create(self, message: ChatMessage) -> ChatMessage:
        model = ChatMessageModel(
            id=message.id,
            team_id=message.team_id,
            user_id=message.user_id,
            user_name=message.user_name,
            content=message.content,
            reply_to=message.reply_to,
            edited_at=message.edited_at,
            deleted=message.deleted,
            created_at=message.created_at,
        )
        self.session.add(model)
        await self.session.flush()
        return self._to_entity(model)

    async def get_by_id(self, message_id: str) -> Optional[ChatMessage]:
        model = await self.session.get(ChatMessageModel, message_id)
        return self._to_entity(model) if model else None

    async def list_recent(
        self,
        team_id: str,
        *,
        limit: int,
        before: Optional[ChatMessage] = None,
    ) -> list[ChatMessage]:
        stmt = select(ChatMessageModel).where(ChatMessageModel.team_id == team_id)
        if before is not None:
            # (created_at, id) 作为游标，同一时刻的消息按 id 续排
            stmt = stmt.where(
                or_(
                    ChatMessageModel.created_at < before.created_at,
                    and_(
                        ChatMessageModel.created_at == before.created_at,
                        ChatMessageModel.id < before.id,
                    ),
                )
            )
        stmt = stmt.order_by(ChatMessageModel.created_at.desc(), ChatMessageModel.id.desc()).limit(limit)
        rows = (await self.session.execute(stmt)).scalars().all()
        return [self._to_entity(m) for m in rows]
