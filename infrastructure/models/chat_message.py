"""Chat message table definition."""
from sqlalchemy import Boolean, Column, DateTime, Index, String, Text, text

from .base import Base, utcnow


class ChatMessageModel(Base):
    """ORM mapping for chat_messages; rows are append-only."""

    __tablename__ = "chat_messages"
    __table_args__ = (
        Index("ix_chat_messages_team_created", "team_id", "created_at"),
    )

    id = Column(String(32), primary_key=True, comment="服务端分配的消息ID")
    team_id = Column(String(32), nullable=False, comment="团队ID（房间键）")
    user_id = Column(String(64), nullable=False)
    user_name = Column(String(255), nullable=False, comment="发送时的显示名（冗余存储，不回查）")
    content = Column(Text, nullable=False)
    reply_to = Column(String(32), nullable=True)
    edited_at = Column(DateTime(timezone=True), nullable=True)
    deleted = Column(Boolean, nullable=False, default=False, server_default=text("false"))
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return f"<ChatMessageModel(id='{self.id}', team_id='{self.team_id}', user_id='{self.user_id}')>"
