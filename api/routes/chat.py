"""
团队聊天API路由 - 历史消息
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_chat_service, get_current_user_id
from application.dto import ChatMessageDTO
from application.services.chat_service import ChatApplicationService
from core.response import Response as ApiResponse, success_response

router = APIRouter(prefix="/teams", tags=["团队聊天"])


@router.get("/{team_id}/chat", summary="聊天历史", response_model=ApiResponse[List[ChatMessageDTO]])
async def list_chat_messages(
    team_id: str,
    limit: int = Query(50, description="1-200，越界按默认值处理"),
    before: Optional[str] = Query(None, description="消息ID游标，只返回更早的消息"),
    user_id: str = Depends(get_current_user_id),
    service: ChatApplicationService = Depends(get_chat_service),
):
    """返回 ``before`` 之前最近的 ``limit`` 条消息，按时间正序"""
    messages = await service.history(team_id, user_id, limit=limit, before=before)
    return success_response(data=messages)
