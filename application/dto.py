"""
数据传输对象（DTO）- 应用层与表现层之间的数据传输
"""
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_serializer

from domain.chat import ChatMessage
from domain.membership import ProjectMember, TeamMember, role_name
from domain.whiteboard import Whiteboard


class DTOBase(BaseModel):
    """Base DTO: unify datetime serialization to UTC-Z for all subclasses."""

    @model_serializer(mode="wrap")
    def _serialize_model(self, handler):  # type: ignore[override]
        data = handler(self)

        def convert(value):
            if isinstance(value, datetime):
                ts = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
                s = ts.astimezone(timezone.utc).isoformat()
                return s.replace("+00:00", "Z")
            if isinstance(value, list):
                return [convert(v) for v in value]
            if isinstance(value, dict):
                return {k: convert(v) for k, v in value.items()}
            return value

        return convert(data)


class ChatMessageDTO(DTOBase):
    """聊天消息（存储记录的完整形态，亦用于实时广播）"""

    id: str
    team_id: str
    user_id: str
    user_name: str
    content: str
    reply_to: Optional[str] = None
    edited_at: Optional[datetime] = None
    deleted: bool = False
    created_at: datetime

    @classmethod
    def from_entity(cls, message: ChatMessage) -> "ChatMessageDTO":
        return cls(
            id=message.id,
            team_id=message.team_id,
            user_id=message.user_id,
            user_name=message.user_name,
            content=message.content,
            reply_to=message.reply_to,
            edited_at=message.edited_at,
            deleted=message.deleted,
            created_at=message.created_at,
        )


class WhiteboardDTO(DTOBase):
    """白板快照；尚未保存时 id/updated_at 为空、data 为空串"""

    id: Optional[str] = None
    project_id: str
    data: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, board: Whiteboard) -> "WhiteboardDTO":
        return cls(
            id=board.id,
            project_id=board.project_id,
            data=board.data,
            created_at=board.created_at,
            updated_at=board.updated_at,
        )

    @classmethod
    def empty(cls, project_id: str) -> "WhiteboardDTO":
        return cls(project_id=project_id)


class WhiteboardSaveDTO(DTOBase):
    data: str = Field(..., description="序列化后的白板文档")


class WhiteboardSavedDTO(DTOBase):
    id: str
    project_id: str
    updated_at: datetime


class TeamCreateDTO(DTOBase):
    name: str = Field(..., min_length=1, max_length=255)
    workspace_id: str = Field("", max_length=64)


class TeamDTO(DTOBase):
    id: str
    name: str
    workspace_id: str = ""
    created_by: str
    created_at: datetime


class ProjectCreateDTO(DTOBase):
    name: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    is_public: bool = False


class ProjectDTO(DTOBase):
    id: str
    team_id: Optional[str] = None
    name: str
    description: str = ""
    is_public: bool = False
    is_archived: bool = False
    created_by: str
    created_at: datetime


class ProjectArchiveDTO(DTOBase):
    id: str
    is_archived: bool


class MemberAddDTO(DTOBase):
    user_id: str = Field(..., min_length=1, max_length=64)
    role_flags: int = Field(0, ge=0, description="0 表示默认 Viewer")


class RoleUpdateDTO(DTOBase):
    role_flags: int = Field(..., ge=1)

    @field_validator("role_flags")
    @classmethod
    def _known_bits(cls, v: int) -> int:
        if v > 15:
            raise ValueError("role_flags must combine Viewer/Editor/Admin/Owner bits")
        return v


class MemberDTO(DTOBase):
    user_id: str
    role_flags: int
    role_name: str
    joined_at: Optional[datetime] = None

    @classmethod
    def from_team_member(cls, member: TeamMember) -> "MemberDTO":
        return cls(
            user_id=member.user_id,
            role_flags=member.role_flags,
            role_name=role_name(member.role_flags),
            joined_at=member.joined_at,
        )

    @classmethod
    def from_project_member(cls, member: ProjectMember) -> "MemberDTO":
        return cls(
            user_id=member.user_id,
            role_flags=member.role_flags,
            role_name=role_name(member.role_flags),
            joined_at=member.added_at,
        )


class MemberRoleDTO(DTOBase):
    user_id: str
    role_flags: int
    role_name: str
