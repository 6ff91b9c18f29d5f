"""In-process room: the live connections sharing one collaborative surface."""
from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from typing import Iterable, Optional, Protocol, Union

from pydantic import BaseModel

from application.ports.realtime import Participant
from core.logging_config import get_logger


logger = get_logger(__name__)

Frame = Union[BaseModel, dict]


class Connection(Protocol):
    async def send_text(self, data: str) -> None: ...


@dataclass(eq=False)
class Client:
    """One registered connection and the identity resolved at connect time."""

    connection: Connection
    user_id: str
    name: str

    def participant(self) -> Participant:
        return Participant(user_id=self.user_id, name=self.name)


def encode_frame(frame: Frame) -> str:
    if isinstance(frame, BaseModel):
        return frame.model_dump_json()
    return json.dumps(frame, ensure_ascii=False, allow_nan=False)


class Room:
    """Connections for one room key.

    The client map is only mutated under ``_lock``. Broadcasts take a snapshot
    under the lock and perform I/O outside of it, so a slow peer never blocks
    join/leave of others.
    """

    def __init__(self, key: str) -> None:
        self.key = key
        # keyed by id(connection)
        self._clients: dict[int, Client] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._clients)

    async def join(self, client: Client) -> None:
        async with self._lock:
            self._clients[id(client.connection)] = client

    async def leave(self, connection: Connection) -> bool:
        """Remove a connection; return True when the room is now empty."""
        async with self._lock:
            self._clients.pop(id(connection), None)
            return not self._clients

    async def is_empty(self) -> bool:
        async with self._lock:
            return not self._clients

    async def participants(self, *, distinct: bool = True) -> list[Participant]:
        """Currently present users in join order, de-duplicated by user id unless ``distinct=False``."""
        async with self._lock:
            clients = list(self._clients.values())
        if not distinct:
            return [c.participant() for c in clients]
        seen: set[str] = set()
        result: list[Participant] = []
        for c in clients:
            if c.user_id in seen:
                continue
            seen.add(c.user_id)
            result.append(c.participant())
        return result

    async def broadcast_all(self, frame: Frame) -> None:
        await self._broadcast(frame, exclude=None)

    async def broadcast_others(self, sender: Connection, frame: Frame) -> None:
        await self._broadcast(frame, exclude=sender)

    async def send_to(self, client: Client, frame: Frame) -> None:
        """Send a private frame to one client."""
        await self._deliver([client], encode_frame(frame))

    async def _broadcast(self, frame: Frame, *, exclude: Optional[Connection]) -> None:
        async with self._lock:
            targets = [c for c in self._clients.values() if c.connection is not exclude]
        if not targets:
            return
        await self._deliver(targets, encode_frame(frame))

    async def _deliver(self, targets: Iterable[Client], text: str) -> None:
        # 尽力投递：单个连接失败只记录日志，不影响其他连接
        for client in targets:
            try:
                await client.connection.send_text(text)
            except Exception as exc:
                logger.warning("ws_send_failed", room=self.key, user_id=client.user_id, error=str(exc))
