"""Scheduled support request usage reset."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import or_, update
from sqlalchemy.orm import Session

from ..models import TeacherAccount
from ..utils.datetime import month_bucket, to_naive_utc, utcnow


def run_monthly_reset(session: Session, *, current_time: datetime | None = None) -> dict[str, int]:
    """Zero monthly usage for accounts not yet reset this month.

    Safe to run repeatedly; accounts already stamped for the current month
    are left alone. Returns summary statistics useful for logging/testing.
    """

    now = to_naive_utc(current_time) if current_time else utcnow()
    bucket_start = datetime.combine(month_bucket(now), datetime.min.time())

    stmt = (
        update(TeacherAccount)
        .where(
            or_(
                TeacherAccount.usage_reset_at.is_(None),
                TeacherAccount.usage_reset_at < bucket_start,
            )
        )
        .values(
            support_requests_used_this_month=0,
            usage_reset_at=now,
            updated_at=now,
        )
        .execution_options(synchronize_session=False)
    )
    result = session.execute(stmt)
    session.expire_all()

    return {"accounts_reset": result.rowcount}
