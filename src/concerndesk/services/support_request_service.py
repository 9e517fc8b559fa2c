"""Domain logic for student support requests."""

from __future__ import annotations

import logging
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..core.security import AuthContext
from ..models import SupportRequest
from ..schemas import SupportRequestCreate
from . import quota_service, teacher_service

logger = logging.getLogger(__name__)


class SupportRequestRuleViolation(Exception):
    """Raised when a support request cannot be created or read."""

    def __init__(self, detail: str, status_code: int = 400) -> None:
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code


def create_support_request(
    session: Session,
    *,
    auth: AuthContext,
    payload: SupportRequestCreate,
) -> SupportRequest:
    """Insert a support request and consume one unit of allowance.

    Both happen in the caller's transaction: either the request exists and
    usage went up by one, or neither.
    """

    teacher = teacher_service.get_by_email(session, auth.email)
    unlimited = quota_service.is_unlimited(auth.email)
    if teacher is None and not unlimited:
        raise SupportRequestRuleViolation("User not found", status_code=404)

    if not quota_service.reserve_usage(session, email=auth.email):
        status = quota_service.check_limit(session, email=auth.email)
        raise SupportRequestRuleViolation(status.reason or quota_service.LIMIT_REACHED, status_code=403)

    support_request = SupportRequest(
        teacher_email=auth.email,
        teacher=(teacher.name if teacher and teacher.name else auth.email),
        student_first_name=payload.student_first_name.strip(),
        student_last_initial=payload.student_last_initial.strip().upper(),
        grade=payload.grade.strip(),
        concern_description=payload.concern_description,
        additional_info=payload.additional_info,
        ai_recommendations=payload.ai_recommendations,
    )
    session.add(support_request)
    session.flush()
    session.refresh(support_request)
    return support_request


def list_support_requests(
    session: Session,
    *,
    auth: AuthContext,
    limit: int = 50,
    offset: int = 0,
) -> Sequence[SupportRequest]:
    """Own requests for teachers, every request for admins."""

    stmt = (
        select(SupportRequest)
        .order_by(SupportRequest.created_at.desc(), SupportRequest.id.desc())
        .offset(offset)
        .limit(limit)
    )
    if not auth.is_admin:
        stmt = stmt.where(SupportRequest.teacher_email == auth.email)
    return session.execute(stmt).scalars().all()


def get_support_request(session: Session, *, auth: AuthContext, request_id: int) -> SupportRequest:
    support_request = session.get(SupportRequest, request_id)
    if support_request is None or (not auth.is_admin and support_request.teacher_email != auth.email):
        raise SupportRequestRuleViolation(f"Support request {request_id} not found", status_code=404)
    return support_request
