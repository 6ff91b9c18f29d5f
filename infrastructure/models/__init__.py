"""Infrastructure models package exports."""
from .base import Base, metadata
from .membership import TeamModel, TeamMemberModel, ProjectModel, ProjectMemberModel
from .chat_message import ChatMessageModel
from .whiteboard import WhiteboardModel

__all__ = [
    "Base",
    "metadata",
    "TeamModel",
    "TeamMemberModel",
    "ProjectModel",
    "ProjectMemberModel",
    "ChatMessageModel",
    "WhiteboardModel",
]
