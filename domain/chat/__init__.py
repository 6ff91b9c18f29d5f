"""Chat domain exports."""
from .entity import CHAT_MESSAGE_MAX_LENGTH, ChatMessage, normalize_content
from .repository import ChatMessageRepository

__all__ = ["CHAT_MESSAGE_MAX_LENGTH", "ChatMessage", "ChatMessageRepository", "normalize_content"]
