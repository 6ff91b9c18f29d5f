"""WebSocket routes for the whiteboard and team chat surfaces.

Both endpoints authenticate once at connect time (token in the query string,
falling back to ``Authorization: Bearer``), optionally check the caller's
role on the room, then hand every text frame to the session.
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, WebSocket
from pydantic import BaseModel

from api.dependencies import (
    get_access_service,
    get_chat_rooms,
    get_chat_service,
    get_token_service,
    get_whiteboard_rooms,
)
from application.ports.realtime import ErrorFrame, WhiteboardErrorFrame
from application.services.access_service import AccessService
from application.services.chat_service import ChatApplicationService
from application.services.realtime_service import ChatSession, RoomSession, WhiteboardSession
from application.services.token_service import TokenService
from core.config import settings
from core.logging_config import get_logger
from domain.common.exceptions import BusinessException
from infrastructure.realtime.registry import RoomRegistry


logger = get_logger(__name__)


router = APIRouter(prefix="/ws", tags=["WebSocket"])

POLICY_VIOLATION = 1008
INTERNAL_ERROR = 1011
# normal / going away / no status received
CLEAN_CLOSE_CODES = frozenset({1000, 1001, 1005})


def _extract_token(ws: WebSocket) -> str | None:
    # Prefer query param, fallback to header `Authorization: Bearer x`
    token = ws.query_params.get("token")
    if token:
        return token
    auth = ws.headers.get("authorization") or ""
    if auth.lower().startswith("bearer "):
        return auth[7:].strip()
    return None


def _display_name(ws: WebSocket) -> str:
    return ws.query_params.get("name") or settings.realtime.default_display_name


async def _authenticate(ws: WebSocket, token_service: TokenService) -> Optional[str]:
    token = _extract_token(ws)
    if not token:
        return None
    try:
        return await token_service.verify_access_token(token)
    except BusinessException:
        # 过期令牌在实时通道里与无效令牌一样处理
        return None


async def _reject(ws: WebSocket, frame: BaseModel, *, code: int = POLICY_VIOLATION) -> None:
    try:
        await ws.send_text(frame.model_dump_json())
        await ws.close(code=code)
    except Exception as exc:
        logger.info("ws_reject_failed", error=str(exc))


async def _pump(ws: WebSocket, session: RoomSession) -> None:
    """Read frames until the peer goes away; binary frames are decoded as UTF-8."""
    while True:
        message = await ws.receive()
        if message["type"] == "websocket.disconnect":
            code = message.get("code") or 1000
            if code not in CLEAN_CLOSE_CODES:
                logger.warning(
                    "ws_closed_abnormally",
                    surface=session.surface,
                    room=session.room_key,
                    user_id=session.client.user_id,
                    code=code,
                )
            return
        text = message.get("text")
        if text is None:
            data = message.get("bytes")
            if data is None:
                continue
            try:
                text = data.decode("utf-8")
            except UnicodeDecodeError:
                continue
        await session.handle(text)


async def _run(ws: WebSocket, session: RoomSession) -> None:
    try:
        await session.open()
        await _pump(ws, session)
    except Exception as exc:
        logger.error(
            "ws_error",
            surface=session.surface,
            room=session.room_key,
            user_id=session.client.user_id,
            error=str(exc),
            exc_info=True,
        )
    finally:
        await session.close()


@router.websocket("/whiteboard/{board_id}")
async def whiteboard_endpoint(
    ws: WebSocket,
    board_id: str,
    token_service: TokenService = Depends(get_token_service),
    access: AccessService = Depends(get_access_service),
    rooms: RoomRegistry = Depends(get_whiteboard_rooms),
) -> None:
    await ws.accept()
    user_id = await _authenticate(ws, token_service)
    if not user_id:
        await _reject(ws, WhiteboardErrorFrame(payload="unauthorized"))
        return

    if settings.realtime.authorize_rooms:
        try:
            await access.require_project_role(board_id, user_id)
        except BusinessException as exc:
            logger.info("ws_forbidden", surface="whiteboard", room=board_id, user_id=user_id, error_type=exc.error_type)
            await _reject(ws, WhiteboardErrorFrame(payload="forbidden"))
            return
        except Exception as exc:
            logger.error("ws_authorize_failed", surface="whiteboard", room=board_id, error=str(exc), exc_info=True)
            await _reject(ws, WhiteboardErrorFrame(payload="internal error"), code=INTERNAL_ERROR)
            return

    session = WhiteboardSession(
        registry=rooms,
        room_key=board_id,
        connection=ws,
        user_id=user_id,
        name=_display_name(ws),
    )
    await _run(ws, session)


@router.websocket("/team/{team_id}/chat")
async def team_chat_endpoint(
    ws: WebSocket,
    team_id: str,
    token_service: TokenService = Depends(get_token_service),
    access: AccessService = Depends(get_access_service),
    chat_service: ChatApplicationService = Depends(get_chat_service),
    rooms: RoomRegistry = Depends(get_chat_rooms),
) -> None:
    await ws.accept()
    user_id = await _authenticate(ws, token_service)
    if not user_id:
        await _reject(ws, ErrorFrame(message="unauthorized"))
        return

    if settings.realtime.authorize_rooms:
        try:
            await access.require_team_role(team_id, user_id)
        except BusinessException as exc:
            logger.info("ws_forbidden", surface="chat", room=team_id, user_id=user_id, error_type=exc.error_type)
            await _reject(ws, ErrorFrame(message="forbidden"))
            return
        except Exception as exc:
            logger.error("ws_authorize_failed", surface="chat", room=team_id, error=str(exc), exc_info=True)
            await _reject(ws, ErrorFrame(message="internal error"), code=INTERNAL_ERROR)
            return

    session = ChatSession(
        chat_service=chat_service,
        registry=rooms,
        room_key=team_id,
        connection=ws,
        user_id=user_id,
        name=_display_name(ws),
    )
    await _run(ws, session)
