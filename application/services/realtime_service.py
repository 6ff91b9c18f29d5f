"""Application services for the realtime WebSocket surfaces.

A session is created per connection after authentication. The transport
loop (api/routes/ws.py) calls ``open`` once, ``handle`` for every inbound
text frame and ``close`` exactly once on the way out.
"""
from __future__ import annotations

import json
from typing import Optional

from pydantic import ValidationError

from application.dto import ChatMessageDTO
from application.ports.realtime import (
    ChatInbound,
    ChatMessageFrame,
    JoinFrame,
    LeaveFrame,
    PresenceFrame,
    TypingFrame,
    UsersFrame,
    stamp_identity,
)
from application.services.chat_service import ChatApplicationService
from core.logging_config import get_logger
from infrastructure.realtime.registry import RoomRegistry
from infrastructure.realtime.room import Client, Connection, Room


logger = get_logger(__name__)


def _reject_constant(token: str):
    # 服务端帧只允许标准 JSON，NaN/Infinity 一律拒绝
    raise ValueError(f"invalid JSON constant: {token}")


class RoomSession:
    """Membership of one connection in one room."""

    surface = "room"

    def __init__(
        self,
        *,
        registry: RoomRegistry,
        room_key: str,
        connection: Connection,
        user_id: str,
        name: str,
    ) -> None:
        self.registry = registry
        self.room_key = room_key
        self.client = Client(connection=connection, user_id=user_id, name=name)
        self.room: Optional[Room] = None

    @property
    def connection(self) -> Connection:
        return self.client.connection

    async def open(self) -> None:
        self.room = await self.registry.join(self.room_key, self.client)
        logger.info("ws_connected", surface=self.surface, room=self.room_key, user_id=self.client.user_id)
        await self.on_joined(self.room)

    async def handle(self, text: str) -> None:
        if self.room is None:
            return
        await self.on_frame(self.room, text)

    async def close(self) -> None:
        room, self.room = self.room, None
        if room is None:
            return
        await room.leave(self.connection)
        try:
            await self.on_left(room)
        finally:
            await self.registry.remove_if_empty(self.room_key)
        logger.info("ws_disconnected", surface=self.surface, room=self.room_key, user_id=self.client.user_id)

    async def on_joined(self, room: Room) -> None:
        ...

    async def on_frame(self, room: Room, text: str) -> None:
        ...

    async def on_left(self, room: Room) -> None:
        ...


class WhiteboardSession(RoomSession):
    """
    白板协作：join 通知其他成员，users 快照只发给加入者；
    其余帧视为不透明 JSON 对象，覆盖身份字段后转发给其他成员。
    """

    surface = "whiteboard"

    async def on_joined(self, room: Room) -> None:
        users = await room.participants(distinct=False)
        await room.broadcast_others(
            self.connection,
            JoinFrame(user_id=self.client.user_id, name=self.client.name, users=users),
        )
        await room.send_to(self.client, UsersFrame(users=users))

    async def on_frame(self, room: Room, text: str) -> None:
        try:
            incoming = json.loads(text, parse_constant=_reject_constant)
        except ValueError:
            return
        if not isinstance(incoming, dict):
            return
        frame = stamp_identity(incoming, user_id=self.client.user_id, name=self.client.name)
        await room.broadcast_others(self.connection, frame)

    async def on_left(self, room: Room) -> None:
        users = await room.participants(distinct=False)
        await room.broadcast_all(
            LeaveFrame(user_id=self.client.user_id, name=self.client.name, users=users)
        )


class ChatSession(RoomSession):
    """团队聊天：加入/离开时向全员广播 presence 快照；消息持久化后广播给全员。"""

    surface = "chat"

    def __init__(self, *, chat_service: ChatApplicationService, **kwargs) -> None:
        super().__init__(**kwargs)
        self._chat = chat_service

    async def _broadcast_presence(self, room: Room) -> None:
        await room.broadcast_all(PresenceFrame(users=await room.participants()))

    async def on_joined(self, room: Room) -> None:
        await self._broadcast_presence(room)

    async def on_left(self, room: Room) -> None:
        await self._broadcast_presence(room)

    async def on_frame(self, room: Room, text: str) -> None:
        try:
            inbound = ChatInbound.model_validate_json(text)
        except ValidationError:
            return

        if inbound.type == "message":
            message = self._chat.compose(
                team_id=self.room_key,
                user_id=self.client.user_id,
                user_name=self.client.name,
                content=inbound.content,
            )
            if message is None:
                return
            # 持久化失败不影响广播
            await self._chat.persist(message)
            await room.broadcast_all(ChatMessageFrame(message=ChatMessageDTO.from_entity(message)))
        elif inbound.type == "typing":
            await room.broadcast_others(
                self.connection,
                TypingFrame(user_id=self.client.user_id, name=self.client.name),
            )
