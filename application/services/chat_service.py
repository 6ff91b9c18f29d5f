"""
团队聊天应用服务 - 消息组装、限时持久化、历史查询
"""
import asyncio
from typing import Callable, List, Optional

from domain.chat import ChatMessage
from domain.common.exceptions import DomainValidationException
from domain.common.unit_of_work import AbstractUnitOfWork
from domain.membership import MembershipResolver, RoleFlag
from application.dto import ChatMessageDTO
from core.config import settings
from core.logging_config import get_logger


logger = get_logger(__name__)


class ChatApplicationService:
    def __init__(self, uow_factory: Callable[..., AbstractUnitOfWork]):
        self._uow_factory = uow_factory

    @staticmethod
    def compose(*, team_id: str, user_id: str, user_name: str, content: str) -> Optional[ChatMessage]:
        """Build a message from raw client content; None when the content is rejected."""
        try:
            return ChatMessage.compose(team_id=team_id, user_id=user_id, user_name=user_name, content=content)
        except DomainValidationException as exc:
            logger.debug("chat_message_rejected", team_id=team_id, user_id=user_id, reason=exc.message)
            return None

    async def _store(self, message: ChatMessage) -> None:
        async with self._uow_factory() as uow:
            await uow.chat_message_repository.create(message)

    async def persist(self, message: ChatMessage, *, timeout: Optional[float] = None) -> bool:
        """
        写入消息，超时即放弃（不重试）。

        Returns:
            是否写入成功；失败只记录日志，调用方照常广播。
        """
        timeout = settings.realtime.chat_persist_timeout_s if timeout is None else timeout
        try:
            await asyncio.wait_for(self._store(message), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "chat_message_persist_failed",
                message_id=message.id,
                team_id=message.team_id,
                reason="timeout",
                timeout_s=timeout,
            )
            return False
        except Exception as exc:
            logger.warning(
                "chat_message_persist_failed",
                message_id=message.id,
                team_id=message.team_id,
                reason="error",
                error=str(exc),
            )
            return False
        return True

    async def history(
        self,
        team_id: str,
        user_id: str,
        *,
        limit: Optional[int] = None,
        before: Optional[str] = None,
    ) -> List[ChatMessageDTO]:
        """最近的消息（按时间正序返回），``before`` 为消息ID游标"""
        cfg = settings.realtime
        if limit is None or not 1 <= limit <= cfg.chat_history_max_limit:
            limit = cfg.chat_history_default_limit

        async with self._uow_factory(readonly=True) as uow:
            resolver = MembershipResolver(uow.membership_repository, uow.project_repository)
            await resolver.require_team_role(team_id, user_id, RoleFlag.VIEWER)

            cursor = None
            if before:
                cursor = await uow.chat_message_repository.get_by_id(before)
                # 无效游标按无游标处理
                if cursor is not None and cursor.team_id != team_id:
                    cursor = None
            messages = await uow.chat_message_repository.list_recent(team_id, limit=limit, before=cursor)

        return [ChatMessageDTO.from_entity(m) for m in reversed(messages)]
