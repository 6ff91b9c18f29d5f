"""SQLAlchemy-backed repository for whiteboard snapshots."""
from __future__ import annotations

from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.whiteboard import Whiteboard, WhiteboardRepository
from infrastructure.models.whiteboard import WhiteboardModel


class SQLAlchemyWhiteboardRepository(WhiteboardRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    def _to_entity(self, model: WhiteboardModel) -> Whiteboard:
        return Whiteboard(
            id=model.id,
            project_id=model.project_id,
            data=model.data or "",
            created_by=model.created_by,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    async def get_by_project(self, project_id: str) -> Optional[Whiteboard]:
        stmt = select(WhiteboardModel).where(WhiteboardModel.project_id == project_id)
        model = (await self.session.execute(stmt)).scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def create(self, whiteboard: Whiteboard) -> Whiteboard:
        model = WhiteboardModel(
            id=whiteboard.id,
            project_id=whiteboard.project_id,
            data=whiteboard.data,
            created_by=whiteboard.created_by,
            created_at=whiteboard.created_at,
            updated_at=whiteboard.updated_at,
        )
        self.session.add(model)
        await self.session.flush()
        return self._to_entity(model)

    async def update(self, whiteboard: Whiteboard) -> Whiteboard:
        model = await self.session.get(WhiteboardModel, whiteboard.id)
        if model is None:
            return await self.create(whiteboard)
        model.data = whiteboard.data
        model.updated_at = whiteboard.updated_at
        await self.session.flush()
        return self._to_entity(model)

    async def delete_by_project(self, project_id: str) -> int:
        result = await self.session.execute(
            delete(WhiteboardModel).where(WhiteboardModel.project_id == project_id)
        )
        return result.rowcount or 0
