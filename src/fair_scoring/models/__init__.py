"""Database models."""

from .base import Base
from .user import User
from .project import Project, ProjectStatus
from .assignment import JudgeAssignment
from .audit_log import AuditAction, AuditLog

__all__ = [
    "Base",
    "User",
    "Project",
    "ProjectStatus",
    "JudgeAssignment",
    "AuditAction",
    "AuditLog",
]
