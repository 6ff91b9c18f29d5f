"""Whiteboard domain exports."""
from .entity import Whiteboard
from .repository import WhiteboardRepository

__all__ = ["Whiteboard", "WhiteboardRepository"]
