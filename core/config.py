"""
配置文件 - 项目配置管理
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import AliasChoices, BaseModel, Field, field_validator
from typing import Optional
from pydantic import model_validator


class DatabaseSettings(BaseModel):
    url: str = "sqlite+aiosqlite:///./collab.db"
    echo: bool = False


class RealtimeSettings(BaseModel):
    # 连接时校验团队/项目成员身份（白板按项目、聊天按团队）
    authorize_rooms: bool = True
    # 聊天消息持久化超时（秒），超时后放弃写入但仍然广播
    chat_persist_timeout_s: float = 5.0
    default_display_name: str = "Anonymous"
    chat_history_default_limit: int = 50
    chat_history_max_limit: int = 200


class Settings(BaseSettings):
    """项目配置"""

    # 基础配置
    PROJECT_NAME: str = Field(default="Collab Relay", validation_alias=AliasChoices("PROJECT_NAME", "APP_NAME"))
    VERSION: str = Field(default="1.0.0", validation_alias=AliasChoices("VERSION", "APP_VERSION"))
    DEBUG: bool = True
    ENVIRONMENT: str = "development"

    # 分组配置：嵌套模型，环境变量使用 `__` 分隔，如 DATABASE__URL
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    realtime: RealtimeSettings = Field(default_factory=RealtimeSettings)

    # 安全配置
    SECRET_KEY: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("SECRET_KEY", "JWT_SECRET_KEY"),
        description="JWT签名密钥，生产环境必须设置",
    )
    ALGORITHM: str = Field(default="HS256", validation_alias=AliasChoices("ALGORITHM", "JWT_ALGORITHM"))
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(
        default=30,
        validation_alias=AliasChoices("ACCESS_TOKEN_EXPIRE_MINUTES", "JWT_EXPIRATION_MINUTES"),
    )

    # CORS配置
    CORS_ORIGINS: list = Field(default=["http://localhost:3000", "http://localhost:5173"])

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="allow",
        env_nested_delimiter="__",
    )

    @model_validator(mode="after")
    def _validate_secret_key(self):
        # 所有环境均要求显式配置 SECRET_KEY（或 JWT_SECRET_KEY），避免重启导致 Token 全部失效
        if not self.SECRET_KEY:
            raise ValueError(
                "SECRET_KEY 未配置。请在环境变量或 .env 中设置 SECRET_KEY（或 JWT_SECRET_KEY）"
            )
        return self

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def _parse_cors_origins(cls, v):
        """允许 JSON 字符串或逗号分隔字符串两种格式。"""
        if isinstance(v, list):
            return v
        if isinstance(v, str):
            s = v.strip()
            if s.startswith("[") and s.endswith("]"):
                import json
                try:
                    arr = json.loads(s)
                    if isinstance(arr, list):
                        return arr
                except ValueError:
                    pass
            if "," in s:
                return [item.strip() for item in s.split(",") if item.strip()]
            return [s]
        return v


settings = Settings()
