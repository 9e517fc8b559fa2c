"""Pydantic schemas for student support requests."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import CamelModel


class SupportRequestCreate(CamelModel):
    """Request body for submitting a student concern."""

    student_first_name: str = Field(..., min_length=1, max_length=100)
    student_last_initial: str = Field(..., min_length=1, max_length=1)
    grade: str = Field(..., min_length=1)
    concern_description: str = Field(..., min_length=1)
    additional_info: Optional[str] = None
    ai_recommendations: Optional[str] = None


class SupportRequestRead(CamelModel):
    """Support request response payload."""

    id: int
    teacher: str
    teacher_email: str
    student_first_name: str
    student_last_initial: str
    grade: str
    concern_description: str
    additional_info: Optional[str] = None
    ai_recommendations: Optional[str] = None
    created_at: datetime
