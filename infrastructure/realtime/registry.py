"""Room registry: room key → Room, created on first join, dropped on last leave."""
from __future__ import annotations

import asyncio
from typing import Optional

from core.logging_config import get_logger
from .room import Client, Connection, Room


logger = get_logger(__name__)


class RoomRegistry:
    """Process-local registry of rooms for one surface (whiteboard or chat).

    Lock order is registry → room. Nothing here takes the registry lock while
    holding a room lock.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._rooms: dict[str, Room] = {}
        self._lock = asyncio.Lock()

    def __contains__(self, key: object) -> bool:
        return key in self._rooms

    def __len__(self) -> int:
        return len(self._rooms)

    def get(self, key: str) -> Optional[Room]:
        return self._rooms.get(key)

    def _get_or_create_locked(self, key: str) -> Room:
        room = self._rooms.get(key)
        if room is None:
            room = Room(key)
            self._rooms[key] = room
            logger.info("ws_room_created", registry=self.name, room=key)
        return room

    async def get_or_create_room(self, key: str) -> Room:
        async with self._lock:
            return self._get_or_create_locked(key)

    async def join(self, key: str, client: Client) -> Room:
        """Register ``client`` in the room for ``key``, creating the room if needed."""
        async with self._lock:
            room = self._get_or_create_locked(key)
            await room.join(client)
        logger.info("ws_room_joined", registry=self.name, room=key, user_id=client.user_id)
        return room

    async def remove_if_empty(self, key: str) -> bool:
        async with self._lock:
            room = self._rooms.get(key)
            if room is None or not await room.is_empty():
                return False
            del self._rooms[key]
        logger.info("ws_room_removed", registry=self.name, room=key)
        return True

    async def leave(self, key: str, connection: Connection) -> bool:
        """Deregister ``connection``; return True if the room was removed."""
        room = self._rooms.get(key)
        if room is None:
            return False
        await room.leave(connection)
        return await self.remove_if_empty(key)
