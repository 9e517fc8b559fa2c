"""Monthly support request allowance: check, record and top-up."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from ..core.config import Settings, get_settings
from ..models import TeacherAccount
from ..schemas import PackagePurchaseResult, QuotaStatus, UsageIncrementResult
from ..utils.datetime import utcnow

logger = logging.getLogger(__name__)

SUBSCRIPTION_INACTIVE = "Subscription expired or inactive"
LIMIT_REACHED = "Monthly support request limit reached"


class QuotaRuleViolation(Exception):
    """Raised when a quota operation cannot be carried out."""

    def __init__(self, detail: str, status_code: int = 400) -> None:
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code


def _normalise(email: str) -> str:
    return email.strip().lower()


def is_unlimited(email: str, settings: Optional[Settings] = None) -> bool:
    """Return whether the account is on the configured unlimited tier."""

    settings = settings or get_settings()
    unlimited = {_normalise(address) for address in settings.unlimited_tier_emails}
    return _normalise(email) in unlimited


def _ensure_account(session: Session, email: str) -> TeacherAccount:
    stmt = (
        select(TeacherAccount)
        .where(TeacherAccount.email == _normalise(email))
        .execution_options(populate_existing=True)
    )
    account = session.execute(stmt).scalar_one_or_none()
    if account is None:
        raise QuotaRuleViolation("User not found", status_code=404)
    return account


def _total_limit_expr(package_size: int):
    return TeacherAccount.support_requests_limit + TeacherAccount.additional_packages * package_size


def check_limit(session: Session, *, email: str, now: Optional[datetime] = None) -> QuotaStatus:
    """Report whether ``email`` may create another support request.

    An inactive subscription wins over the numeric comparison.
    """

    settings = get_settings()
    if is_unlimited(email, settings):
        return QuotaStatus(
            can_create=True,
            used=0,
            base_limit=settings.unlimited_tier_limit,
            additional_packages=0,
            total_limit=settings.unlimited_tier_limit,
        )

    account = _ensure_account(session, email)
    now = now or utcnow()
    total_limit = account.total_limit(settings.package_size)
    used = account.support_requests_used_this_month

    if not account.subscription_active(now):
        can_create, reason = False, SUBSCRIPTION_INACTIVE
    elif used < total_limit:
        can_create, reason = True, None
    else:
        can_create, reason = False, LIMIT_REACHED

    return QuotaStatus(
        can_create=can_create,
        used=used,
        base_limit=account.support_requests_limit,
        additional_packages=account.additional_packages,
        total_limit=total_limit,
        reason=reason,
    )


def increment_usage(session: Session, *, email: str) -> UsageIncrementResult:
    """Add one to the account's monthly usage with a single UPDATE."""

    if is_unlimited(email):
        return UsageIncrementResult(new_usage_count=0)

    email = _normalise(email)
    stmt = (
        update(TeacherAccount)
        .where(TeacherAccount.email == email)
        .values(
            support_requests_used_this_month=TeacherAccount.support_requests_used_this_month + 1,
            updated_at=utcnow(),
        )
        .returning(TeacherAccount.support_requests_used_this_month)
        .execution_options(synchronize_session=False)
    )
    new_usage_count = session.execute(stmt).scalar_one_or_none()
    if new_usage_count is None:
        raise QuotaRuleViolation("User not found", status_code=404)

    return UsageIncrementResult(new_usage_count=new_usage_count)


def reserve_usage(session: Session, *, email: str, now: Optional[datetime] = None) -> bool:
    """Consume one unit of allowance if, and only if, one is available.

    Limit and subscription are evaluated inside the UPDATE itself, so two
    concurrent callers can never both take the last unit. Returns False when
    nothing was consumed; the caller decides how to report it.
    """

    if is_unlimited(email):
        return True

    settings = get_settings()
    now = now or utcnow()
    stmt = (
        update(TeacherAccount)
        .where(
            TeacherAccount.email == _normalise(email),
            TeacherAccount.subscription_end_date.is_not(None),
            TeacherAccount.subscription_end_date > now,
            TeacherAccount.support_requests_used_this_month < _total_limit_expr(settings.package_size),
        )
        .values(
            support_requests_used_this_month=TeacherAccount.support_requests_used_this_month + 1,
            updated_at=now,
        )
        .execution_options(synchronize_session=False)
    )
    reserved = session.execute(stmt).rowcount == 1
    if not reserved:
        logger.warning("usage reservation refused for %s", email)
    return reserved


def purchase_packages(session: Session, *, email: str, packages: int) -> PackagePurchaseResult:
    """Grant ``packages`` additional blocks of allowance.

    There is no payment step; the packages are added unconditionally.
    """

    settings = get_settings()
    if packages < 1 or packages > settings.max_packages_per_purchase:
        raise QuotaRuleViolation(
            f"Can purchase between 1 and {settings.max_packages_per_purchase} packages at a time"
        )

    account = _ensure_account(session, email)
    stmt = (
        update(TeacherAccount)
        .where(TeacherAccount.id == account.id)
        .values(
            additional_packages=TeacherAccount.additional_packages + packages,
            updated_at=utcnow(),
        )
        .execution_options(synchronize_session=False)
    )
    session.execute(stmt)
    session.refresh(account)

    logger.info("account %s purchased %s package(s)", account.email, packages)
    return PackagePurchaseResult(
        new_package_count=account.additional_packages,
        new_total_limit=account.total_limit(settings.package_size),
    )
