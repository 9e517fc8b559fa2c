"""Administrative management of teacher accounts."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..core.config import get_settings
from ..core.security import generate_password, get_password_hash
from ..models import TeacherAccount
from ..schemas import (
    TeacherBulkChanges,
    TeacherBulkDeleteResult,
    TeacherBulkUpdateResult,
    TeacherCreate,
    TeacherRead,
    TeacherUpdate,
)
from ..utils.datetime import one_year_from, to_naive_utc, utcnow

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


class TeacherRuleViolation(Exception):
    """Raised when an account change breaks a business rule."""

    def __init__(self, detail: str, status_code: int = 400) -> None:
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code


def to_read(account: TeacherAccount, now: Optional[datetime] = None) -> TeacherRead:
    """Project an account with its computed quota and subscription fields."""

    settings = get_settings()
    now = now or utcnow()
    return TeacherRead(
        id=account.id,
        email=account.email,
        name=account.name,
        school_name=account.school_name,
        school_district=account.school_district,
        primary_grade=account.primary_grade,
        primary_subject=account.primary_subject,
        teacher_type=account.teacher_type,
        support_requests_used_this_month=account.support_requests_used_this_month,
        support_requests_limit=account.support_requests_limit,
        additional_packages=account.additional_packages,
        total_limit=account.total_limit(settings.package_size),
        subscription_start_date=account.subscription_start_date,
        subscription_end_date=account.subscription_end_date,
        subscription_active=account.subscription_active(now),
        has_password=bool(account.password_hash),
        created_at=account.created_at,
        updated_at=account.updated_at,
    )


def get_by_email(session: Session, email: str) -> Optional[TeacherAccount]:
    stmt = select(TeacherAccount).where(TeacherAccount.email == email.strip().lower())
    return session.execute(stmt).scalar_one_or_none()


def _ensure_teacher(session: Session, teacher_id: int) -> TeacherAccount:
    teacher = session.get(TeacherAccount, teacher_id)
    if teacher is None:
        raise TeacherRuleViolation(f"Teacher {teacher_id} not found", status_code=404)
    return teacher


def _ensure_email_free(session: Session, email: str, *, exclude_id: Optional[int] = None) -> None:
    existing = get_by_email(session, email)
    if existing is not None and existing.id != exclude_id:
        raise TeacherRuleViolation("A user with this email already exists.", status_code=409)


def list_teachers(session: Session) -> Sequence[TeacherAccount]:
    """Return all accounts, newest first."""

    stmt = select(TeacherAccount).order_by(TeacherAccount.created_at.desc(), TeacherAccount.id.desc())
    return session.execute(stmt).scalars().all()


def create_teacher(session: Session, payload: TeacherCreate) -> TeacherAccount:
    """Create a single account without a password."""

    settings = get_settings()
    email = payload.email.strip().lower()
    _ensure_email_free(session, email)

    now = utcnow()
    end_date = to_naive_utc(payload.subscription_end_date) if payload.subscription_end_date else one_year_from(now)
    limit = payload.support_requests_limit
    teacher = TeacherAccount(
        email=email,
        name=payload.name.strip(),
        school_name=payload.school_name,
        school_district=payload.school_district,
        primary_grade=payload.primary_grade,
        primary_subject=payload.primary_subject,
        teacher_type=payload.teacher_type or "classroom",
        support_requests_limit=settings.base_support_request_limit if limit is None else limit,
        support_requests_used_this_month=0,
        additional_packages=0,
        subscription_start_date=now,
        subscription_end_date=end_date,
        usage_reset_at=now,
        created_at=now,
        updated_at=now,
    )
    session.add(teacher)
    session.flush()
    logger.info("created teacher account %s", teacher.email)
    return teacher


def update_teacher(session: Session, teacher_id: int, payload: TeacherUpdate) -> TeacherAccount:
    """Apply the fields present in ``payload``."""

    teacher = _ensure_teacher(session, teacher_id)
    changes = payload.model_dump(exclude_unset=True)

    email = changes.pop("email", None)
    if email:
        email = email.strip().lower()
        _ensure_email_free(session, email, exclude_id=teacher.id)
        teacher.email = email

    end_date = changes.pop("subscription_end_date", None)
    if end_date is not None:
        teacher.subscription_end_date = to_naive_utc(end_date)

    for field, value in changes.items():
        if value is not None:
            setattr(teacher, field, value)

    teacher.updated_at = utcnow()
    session.flush()
    return teacher


def delete_teacher(session: Session, teacher_id: int) -> None:
    """Remove the account. Support requests it authored are kept."""

    teacher = _ensure_teacher(session, teacher_id)
    session.delete(teacher)
    session.flush()
    logger.info("deleted teacher account %s", teacher.email)


def reset_password(session: Session, teacher_id: int, new_password: Optional[str] = None) -> tuple[TeacherAccount, str]:
    """Set a new password, generating one when none is supplied."""

    if new_password is not None and len(new_password) < MIN_PASSWORD_LENGTH:
        raise TeacherRuleViolation(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")

    teacher = _ensure_teacher(session, teacher_id)
    password = new_password or generate_password()
    teacher.password_hash = get_password_hash(password)
    teacher.updated_at = utcnow()
    session.flush()
    return teacher, password


def _require_ids(teacher_ids: List[int]) -> None:
    if not teacher_ids:
        raise TeacherRuleViolation("No teacher IDs provided")


def bulk_update_teachers(
    session: Session,
    teacher_ids: List[int],
    changes: TeacherBulkChanges,
) -> TeacherBulkUpdateResult:
    """Apply the same changes to many accounts, one SAVEPOINT per id.

    A failing id is reported in ``errors`` and does not affect the others.
    """

    _require_ids(teacher_ids)
    values = {field: value for field, value in changes.model_dump().items() if value is not None}
    if "subscription_end_date" in values:
        values["subscription_end_date"] = to_naive_utc(values["subscription_end_date"])

    errors: List[str] = []
    updated_count = 0
    for teacher_id in teacher_ids:
        try:
            with session.begin_nested():
                teacher = session.get(TeacherAccount, teacher_id)
                if teacher is None:
                    errors.append(f"Teacher ID {teacher_id} not found")
                    continue
                for field, value in values.items():
                    setattr(teacher, field, value)
                teacher.updated_at = utcnow()
        except Exception as exc:
            logger.exception("bulk update failed for teacher %s", teacher_id)
            errors.append(f"Failed to update teacher ID {teacher_id}: {exc}")
            continue
        updated_count += 1

    logger.info("bulk updated %s of %s teacher(s)", updated_count, len(teacher_ids))
    return TeacherBulkUpdateResult(success=not errors, updated_count=updated_count, errors=errors)


def bulk_delete_teachers(session: Session, teacher_ids: List[int]) -> TeacherBulkDeleteResult:
    """Delete many accounts, one SAVEPOINT per id. Support requests are kept."""

    _require_ids(teacher_ids)
    errors: List[str] = []
    deleted_count = 0
    for teacher_id in teacher_ids:
        try:
            with session.begin_nested():
                teacher = session.get(TeacherAccount, teacher_id)
                if teacher is None:
                    errors.append(f"Teacher ID {teacher_id} not found")
                    continue
                session.delete(teacher)
        except Exception as exc:
            logger.exception("bulk delete failed for teacher %s", teacher_id)
            errors.append(f"Failed to delete teacher ID {teacher_id}: {exc}")
            continue
        deleted_count += 1

    logger.info("bulk deleted %s of %s teacher(s)", deleted_count, len(teacher_ids))
    return TeacherBulkDeleteResult(success=not errors, deleted_count=deleted_count, errors=errors)
