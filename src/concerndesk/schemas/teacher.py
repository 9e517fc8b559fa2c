"""Pydantic schemas for teacher account administration."""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from .base import CamelModel


class TeacherCreate(CamelModel):
    """Admin payload for creating a single teacher account."""

    email: str = Field(..., min_length=3)
    name: str = Field(..., min_length=1)
    school_name: Optional[str] = None
    school_district: Optional[str] = None
    primary_grade: Optional[str] = None
    primary_subject: Optional[str] = None
    teacher_type: Optional[str] = None
    subscription_end_date: Optional[datetime] = None
    support_requests_limit: Optional[int] = Field(None, ge=0)


class TeacherUpdate(CamelModel):
    """Partial update; omitted fields are left unchanged."""

    email: Optional[str] = Field(None, min_length=3)
    name: Optional[str] = None
    school_name: Optional[str] = None
    school_district: Optional[str] = None
    primary_grade: Optional[str] = None
    primary_subject: Optional[str] = None
    teacher_type: Optional[str] = None
    subscription_end_date: Optional[datetime] = None
    support_requests_limit: Optional[int] = Field(None, ge=0)


class TeacherRead(CamelModel):
    """Teacher profile as shown to administrators."""

    id: int
    email: str
    name: Optional[str] = None
    school_name: Optional[str] = None
    school_district: Optional[str] = None
    primary_grade: Optional[str] = None
    primary_subject: Optional[str] = None
    teacher_type: str
    support_requests_used_this_month: int
    support_requests_limit: int
    additional_packages: int
    total_limit: int
    subscription_start_date: Optional[datetime] = None
    subscription_end_date: Optional[datetime] = None
    subscription_active: bool
    has_password: bool
    created_at: datetime
    updated_at: datetime


class PasswordResetRequest(CamelModel):
    """Leave ``new_password`` empty to have one generated."""

    new_password: Optional[str] = None


class PasswordResetResult(CamelModel):
    success: bool = True
    teacher_id: int
    temporary_password: str


class TeacherBulkChanges(CamelModel):
    """Fields applied to every selected account; omitted or null fields are kept."""

    subscription_end_date: Optional[datetime] = None
    support_requests_limit: Optional[int] = Field(None, ge=0)
    school_name: Optional[str] = None
    school_district: Optional[str] = None


class TeacherBulkUpdateRequest(CamelModel):
    teacher_ids: List[int]
    updates: TeacherBulkChanges


class TeacherBulkDeleteRequest(CamelModel):
    teacher_ids: List[int]


class TeacherBulkUpdateResult(CamelModel):
    success: bool
    updated_count: int
    errors: List[str] = Field(default_factory=list)


class TeacherBulkDeleteResult(CamelModel):
    success: bool
    deleted_count: int
    errors: List[str] = Field(default_factory=list)
