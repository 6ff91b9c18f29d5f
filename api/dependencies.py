"""
API依赖项 - 认证、应用服务与房间注册表
"""
from typing import Callable, Optional

from fastapi import Depends, HTTPException, Request, WebSocket, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from application.services.access_service import AccessService
from application.services.chat_service import ChatApplicationService
from application.services.membership_service import MembershipApplicationService
from application.services.token_service import TokenService
from application.services.whiteboard_service import WhiteboardApplicationService
from domain.common.unit_of_work import AbstractUnitOfWork
from infrastructure.realtime.registry import RoomRegistry
from infrastructure.unit_of_work import SQLAlchemyUnitOfWork

# HTTP Bearer for direct API calls
http_bearer = HTTPBearer(
    scheme_name="Bearer",
    description="JWT Bearer token authentication",
    auto_error=False,
)


async def get_token(
    bearer_token: Optional[HTTPAuthorizationCredentials] = Depends(http_bearer),
) -> str:
    """从 Authorization: Bearer 头中提取token"""
    if bearer_token and bearer_token.credentials:
        return bearer_token.credentials

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="未提供认证凭据",
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_uow_factory() -> Callable[..., AbstractUnitOfWork]:
    return SQLAlchemyUnitOfWork


def get_token_service() -> TokenService:
    return TokenService()


def get_access_service(uow_factory=Depends(get_uow_factory)) -> AccessService:
    return AccessService(uow_factory)


def get_membership_service(uow_factory=Depends(get_uow_factory)) -> MembershipApplicationService:
    return MembershipApplicationService(uow_factory)


def get_chat_service(uow_factory=Depends(get_uow_factory)) -> ChatApplicationService:
    return ChatApplicationService(uow_factory)


def get_whiteboard_service(uow_factory=Depends(get_uow_factory)) -> WhiteboardApplicationService:
    return WhiteboardApplicationService(uow_factory)


async def get_current_user_id(
    token: str = Depends(get_token),
    token_service: TokenService = Depends(get_token_service),
) -> str:
    """获取当前登录用户ID（过期令牌由 TokenExpiredException 统一返回 401）"""
    user_id = await token_service.verify_access_token(token)
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="无效的认证凭据",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user_id


def _registry(state, name: str) -> RoomRegistry:
    registry = getattr(state, name, None)
    if registry is None:
        raise RuntimeError(f"{name} not initialized. Ensure lifespan sets app.state.{name}.")
    return registry


def get_whiteboard_rooms(ws: WebSocket) -> RoomRegistry:
    return _registry(ws.app.state, "whiteboard_rooms")


def get_chat_rooms(ws: WebSocket) -> RoomRegistry:
    return _registry(ws.app.state, "chat_rooms")


def get_registries(request: Request) -> tuple[RoomRegistry, RoomRegistry]:
    state = request.app.state
    return _registry(state, "whiteboard_rooms"), _registry(state, "chat_rooms")
