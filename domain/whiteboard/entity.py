"""Whiteboard snapshot entity (one per project, last write wins)."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import uuid4


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Whiteboard:
    id: str
    project_id: str
    data: str
    created_by: str
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    @classmethod
    def create(cls, *, project_id: str, data: str, created_by: str) -> "Whiteboard":
        now = _utcnow()
        return cls(id=uuid4().hex, project_id=project_id, data=data, created_by=created_by, created_at=now, updated_at=now)

    def replace_data(self, data: str) -> None:
        self.data = data
        self.updated_at = _utcnow()
