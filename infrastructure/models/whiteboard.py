"""Whiteboard snapshot table definition."""
from sqlalchemy import Column, DateTime, ForeignKey, String, Text

from .base import Base, utcnow


class WhiteboardModel(Base):
    __tablename__ = "whiteboards"

    id = Column(String(32), primary_key=True)
    project_id = Column(
        String(32),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        comment="每个项目一份白板",
    )
    data = Column(Text, nullable=False, default="", comment="序列化后的白板文档（不透明）")
    created_by = Column(String(64), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
