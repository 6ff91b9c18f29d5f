"""
数据库引擎与会话工厂
"""
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker

from core.config import settings
from infrastructure.models import Base

_ASYNC_DRIVERS = {
    "postgresql": "postgresql+asyncpg",
    "postgres": "postgresql+asyncpg",
    "sqlite": "sqlite+aiosqlite",
}


def build_async_url(database_url: str) -> str:
    """确保数据库URL使用异步驱动（asyncpg / aiosqlite）"""
    url = make_url(database_url)
    if "+" in url.drivername:
        return database_url
    try:
        driver = _ASYNC_DRIVERS[url.drivername]
    except KeyError:
        raise ValueError(f"不支持的数据库驱动: {url.drivername}. 请使用 async 驱动或更新 DATABASE__URL") from None
    # str(URL) 会隐藏密码
    return url.set(drivername=driver).render_as_string(hide_password=False)


engine = create_async_engine(
    build_async_url(settings.database.url),
    echo=settings.database.echo,
)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    expire_on_commit=False,
)


async def create_tables() -> None:
    """按模型定义建表（开发环境使用，生产走 Alembic 迁移）"""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    await engine.dispose()
