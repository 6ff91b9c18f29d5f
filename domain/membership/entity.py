"""Team/project aggregates and their membership rows."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from domain.common.exceptions import DomainValidationException
from .roles import RoleFlag


def new_id() -> str:
    return uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _require_name(name: str, what: str) -> str:
    name = (name or "").strip()
    if not name:
        raise DomainValidationException(f"{what} name is required", field="name")
    return name


@dataclass
class Team:
    id: str
    name: str
    created_by: str
    workspace_id: str = ""
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    @classmethod
    def create(cls, *, name: str, created_by: str, workspace_id: str = "") -> "Team":
        return cls(id=new_id(), name=_require_name(name, "Team"), created_by=created_by, workspace_id=workspace_id)


@dataclass
class Project:
    """A project; ``team_id`` is None for personal projects."""

    id: str
    name: str
    created_by: str
    team_id: Optional[str] = None
    description: str = ""
    is_public: bool = False
    is_archived: bool = False
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    @classmethod
    def create(
        cls,
        *,
        name: str,
        created_by: str,
        team_id: Optional[str] = None,
        description: str = "",
        is_public: bool = False,
    ) -> "Project":
        return cls(
            id=new_id(),
            name=_require_name(name, "Project"),
            created_by=created_by,
            team_id=team_id,
            description=description,
            is_public=is_public,
        )

    @property
    def is_personal(self) -> bool:
        return not self.team_id


@dataclass
class TeamMember:
    team_id: str
    user_id: str
    role_flags: int
    invited_by: Optional[str] = None
    id: str = field(default_factory=new_id)
    joined_at: datetime = field(default_factory=_utcnow)


@dataclass
class ProjectMember:
    project_id: str
    user_id: str
    role_flags: int
    id: str = field(default_factory=new_id)
    added_at: datetime = field(default_factory=_utcnow)


def default_flags(flags: int) -> int:
    """Adding a member without flags grants Viewer."""
    return int(flags) if flags else int(RoleFlag.VIEWER)
