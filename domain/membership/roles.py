"""Role flags and permission checks.

Flags are powers of two but are compared ordinally: a higher value implies
every lower tier. ``role_name`` on the other hand tests individual bits, so
the two functions deliberately read the same field differently.
"""
from __future__ import annotations

from enum import IntEnum


class RoleFlag(IntEnum):
    VIEWER = 1
    EDITOR = 2
    ADMIN = 4
    OWNER = 8


def has_permission(user_flags: int, required_flags: int) -> bool:
    """Ordinal check: ``user_flags >= required_flags``."""
    return int(user_flags) >= int(required_flags)


def role_name(flags: int) -> str:
    """Display name of the highest tier whose bit is set (Viewer otherwise)."""
    flags = int(flags)
    if flags & RoleFlag.OWNER:
        return "Owner"
    if flags & RoleFlag.ADMIN:
        return "Admin"
    if flags & RoleFlag.EDITOR:
        return "Editor"
    return "Viewer"
