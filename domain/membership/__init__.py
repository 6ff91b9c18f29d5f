"""Membership domain exports."""
from .entity import Project, ProjectMember, Team, TeamMember
from .repository import MembershipRepository, ProjectRepository, TeamRepository
from .roles import RoleFlag, has_permission, role_name
from .service import MembershipResolver

__all__ = [
    "Project",
    "ProjectMember",
    "Team",
    "TeamMember",
    "MembershipRepository",
    "ProjectRepository",
    "TeamRepository",
    "RoleFlag",
    "has_permission",
    "role_name",
    "MembershipResolver",
]
