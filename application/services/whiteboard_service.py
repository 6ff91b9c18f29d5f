"""Whiteboard snapshot use-cases: load and last-write-wins save."""
from typing import Callable

from domain.common.unit_of_work import AbstractUnitOfWork
from domain.membership import MembershipResolver, RoleFlag
from domain.whiteboard import Whiteboard
from application.dto import WhiteboardDTO, WhiteboardSavedDTO
from core.logging_config import get_logger


logger = get_logger(__name__)


class WhiteboardApplicationService:
    def __init__(self, uow_factory: Callable[..., AbstractUnitOfWork]):
        self._uow_factory = uow_factory

    async def get(self, project_id: str, user_id: str) -> WhiteboardDTO:
        async with self._uow_factory(readonly=True) as uow:
            resolver = MembershipResolver(uow.membership_repository, uow.project_repository)
            await resolver.require_project_role(project_id, user_id, RoleFlag.VIEWER)
            board = await uow.whiteboard_repository.get_by_project(project_id)
        if board is None:
            return WhiteboardDTO.empty(project_id)
        return WhiteboardDTO.from_entity(board)

    async def save(self, project_id: str, user_id: str, data: str) -> WhiteboardSavedDTO:
        async with self._uow_factory() as uow:
            resolver = MembershipResolver(uow.membership_repository, uow.project_repository)
            await resolver.require_project_role(project_id, user_id, RoleFlag.EDITOR)

            board = await uow.whiteboard_repository.get_by_project(project_id)
            if board is None:
                board = await uow.whiteboard_repository.create(
                    Whiteboard.create(project_id=project_id, data=data, created_by=user_id)
                )
            else:
                board.replace_data(data)
                board = await uow.whiteboard_repository.update(board)

        logger.info("whiteboard_saved", project_id=project_id, user_id=user_id, size=len(data))
        return WhiteboardSavedDTO(id=board.id, project_id=board.project_id, updated_at=board.updated_at)
