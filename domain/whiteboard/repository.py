"""Repository abstraction for whiteboard snapshots."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from .entity import Whiteboard


class WhiteboardRepository(ABC):
    @abstractmethod
    async def get_by_project(self, project_id: str) -> Optional[Whiteboard]:
        ...

    @abstractmethod
    async def create(self, whiteboard: Whiteboard) -> Whiteboard:
        ...

    @abstractmethod
    async def update(self, whiteboard: Whiteboard) -> Whiteboard:
        ...

    @abstractmethod
    async def delete_by_project(self, project_id: str) -> int:
        ...
