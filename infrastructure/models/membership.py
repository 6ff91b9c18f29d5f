"""Team/project and membership table definitions."""
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)

from .base import Base, utcnow


class TeamModel(Base):
    __tablename__ = "teams"

    id = Column(String(32), primary_key=True, comment="团队ID")
    name = Column(String(255), nullable=False, comment="团队名称")
    workspace_id = Column(String(64), nullable=False, default="", server_default=text("''"), comment="工作区ID")
    created_by = Column(String(64), nullable=False, comment="创建人")
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, comment="创建时间")
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow, comment="更新时间")

    def __repr__(self) -> str:
        return f"<TeamModel(id='{self.id}', name='{self.name}')>"


class TeamMemberModel(Base):
    __tablename__ = "team_members"
    __table_args__ = (
        UniqueConstraint("team_id", "user_id", name="uq_team_members_team_user"),
        Index("ix_team_members_team_joined", "team_id", "joined_at"),
    )

    id = Column(String(32), primary_key=True)
    team_id = Column(String(32), ForeignKey("teams.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String(64), nullable=False, index=True)
    role_flags = Column(Integer, nullable=False, comment="角色位标记：1 Viewer / 2 Editor / 4 Admin / 8 Owner")
    invited_by = Column(String(64), nullable=True)
    joined_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class ProjectModel(Base):
    __tablename__ = "projects"

    id = Column(String(32), primary_key=True, comment="项目ID")
    team_id = Column(
        String(32),
        ForeignKey("teams.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
        comment="所属团队，个人项目为空",
    )
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    is_public = Column(Boolean, nullable=False, default=False, server_default=text("false"))
    is_archived = Column(Boolean, nullable=False, default=False, server_default=text("false"))
    created_by = Column(String(64), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)


class ProjectMemberModel(Base):
    __tablename__ = "project_members"
    __table_args__ = (
        UniqueConstraint("project_id", "user_id", name="uq_project_members_project_user"),
    )

    id = Column(String(32), primary_key=True)
    project_id = Column(String(32), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(64), nullable=False, index=True)
    role_flags = Column(Integer, nullable=False)
    added_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
