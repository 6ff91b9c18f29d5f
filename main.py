"""
FastAPI应用主入口
"""
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.dependencies import get_registries
from api.middleware import AccessLogMiddleware, RequestIDMiddleware
from api.routes import chat as chat_routes
from api.routes import projects as project_routes
from api.routes import teams as team_routes
from api.routes import ws as ws_routes
from core.config import settings
from core.exceptions import register_exception_handlers
from core.logging_config import configure_logging, get_logger
from core.response import success_response
from infrastructure.database import create_tables, dispose_engine
from infrastructure.realtime.registry import RoomRegistry


# 初始化日志：在入口处显式配置，避免模块导入时的副作用
configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    # 启动时创建数据库表（仅开发环境）。生产应使用 Alembic 迁移
    if settings.DEBUG:
        await create_tables()
        logger.info("database_initialized", message="Database tables created (development)")
    else:
        logger.info(
            "database_migrations_required",
            message="No auto-create in production, use Alembic migrations (alembic upgrade head)",
        )

    # 房间注册表随应用创建，进程内有效
    app.state.whiteboard_rooms = RoomRegistry("whiteboard")
    app.state.chat_rooms = RoomRegistry("chat")
    logger.info("realtime_initialized", authorize_rooms=settings.realtime.authorize_rooms)

    yield

    await dispose_engine()
    logger.info("application_shutdown", message="Application shutdown")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    debug=settings.DEBUG,
    lifespan=lifespan,
    description="团队白板与聊天的实时协作服务",
)

# 添加中间件（注意顺序：从下往上执行）
app.add_middleware(AccessLogMiddleware)
app.add_middleware(RequestIDMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 注册全局异常处理器
register_exception_handlers(app)


# 注册路由
app.include_router(team_routes.router, prefix="/api/v1")
app.include_router(project_routes.router, prefix="/api/v1")
app.include_router(chat_routes.router, prefix="/api/v1")
# WebSocket 路径不带 API 前缀
app.include_router(ws_routes.router)


@app.get("/", tags=["Root"])
async def root():
    """API根路径"""
    return success_response(
        data={
            "name": settings.PROJECT_NAME,
            "version": settings.VERSION,
            "docs": "/docs",
        }
    )


@app.get("/health", tags=["Health"])
async def health_check(registries=Depends(get_registries)):
    """健康检查端点，附带当前活跃房间数"""
    whiteboard_rooms, chat_rooms = registries
    return success_response(
        data={
            "status": "healthy",
            "rooms": {"whiteboard": len(whiteboard_rooms), "chat": len(chat_rooms)},
        }
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level="debug" if settings.DEBUG else "info",
    )
