"""SQLAlchemy models for ConcernDesk."""

from .support_request import SupportRequest
from .teacher_account import TeacherAccount

__all__ = [
    "SupportRequest",
    "TeacherAccount",
]
