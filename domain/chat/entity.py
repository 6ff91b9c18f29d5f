"""Team chat message entity."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from domain.common.exceptions import DomainValidationException

CHAT_MESSAGE_MAX_LENGTH = 5000


def normalize_content(content: str) -> str:
    """Trim and validate message text; raises on empty or oversize content."""
    text = (content or "").strip()
    if not text:
        raise DomainValidationException("Message content is empty", field="content")
    if len(text) > CHAT_MESSAGE_MAX_LENGTH:
        raise DomainValidationException(
            "Message content too long",
            field="content",
            details={"length": len(text), "max": CHAT_MESSAGE_MAX_LENGTH},
        )
    return text


@dataclass
class ChatMessage:
    """A stored chat line.

    ``user_name`` is the display name supplied at send time and is never
    re-resolved. Messages are immutable once stored; ``reply_to``,
    ``edited_at`` and ``deleted`` are reserved.
    """

    id: str
    team_id: str
    user_id: str
    user_name: str
    content: str
    created_at: datetime
    reply_to: Optional[str] = None
    edited_at: Optional[datetime] = None
    deleted: bool = False

    @classmethod
    def compose(cls, *, team_id: str, user_id: str, user_name: str, content: str) -> "ChatMessage":
        """Build a new message with a server-assigned id and timestamp."""
        return cls(
            id=uuid4().hex,
            team_id=team_id,
            user_id=user_id,
            user_name=user_name,
            content=normalize_content(content),
            created_at=datetime.now(timezone.utc),
        )
