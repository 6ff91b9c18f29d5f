"""
Realtime wire frames (contracts-first).

Server→client frames are pydantic models so every surface serializes the
same shapes; inbound chat frames are parsed strictly, whiteboard frames are
treated as opaque JSON objects whose identity keys are overwritten by the
server.
"""
from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

from application.dto import ChatMessageDTO

# 服务端注入的保留字段，客户端提供的同名字段一律覆盖
RESERVED_IDENTITY_KEYS = ("user_id", "name")


class Participant(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str
    name: str


class UsersFrame(BaseModel):
    """Private snapshot sent to a whiteboard joiner."""

    type: Literal["users"] = "users"
    users: list[Participant]


class JoinFrame(BaseModel):
    type: Literal["join"] = "join"
    user_id: str
    name: str
    users: list[Participant]


class LeaveFrame(BaseModel):
    type: Literal["leave"] = "leave"
    user_id: str
    name: str
    users: list[Participant]


class PresenceFrame(BaseModel):
    type: Literal["presence"] = "presence"
    users: list[Participant]


class ChatMessageFrame(BaseModel):
    type: Literal["message"] = "message"
    message: ChatMessageDTO


class TypingFrame(BaseModel):
    type: Literal["typing"] = "typing"
    user_id: str
    name: str


class ErrorFrame(BaseModel):
    """Chat error frame."""

    type: Literal["error"] = "error"
    message: str


class WhiteboardErrorFrame(BaseModel):
    type: Literal["error"] = "error"
    payload: str


class ChatInbound(BaseModel):
    """Client→server chat frame: ``{"type": "message"|"typing", "content": str}``."""

    model_config = ConfigDict(strict=True, extra="ignore")

    type: str = ""
    content: str = ""


def stamp_identity(frame: dict[str, Any], *, user_id: str, name: str) -> dict[str, Any]:
    """Return a copy of ``frame`` with the authenticated identity written over it."""
    identity = dict(zip(RESERVED_IDENTITY_KEYS, (user_id, name)))
    return {**frame, **identity}


__all__ = [
    "RESERVED_IDENTITY_KEYS",
    "Participant",
    "UsersFrame",
    "JoinFrame",
    "LeaveFrame",
    "PresenceFrame",
    "ChatMessageFrame",
    "TypingFrame",
    "ErrorFrame",
    "WhiteboardErrorFrame",
    "ChatInbound",
    "stamp_identity",
]
