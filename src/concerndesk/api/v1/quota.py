"""Endpoints for monthly support request allowances."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...core.security import AuthContext, get_auth_context
from ...schemas import (
    PackagePurchaseRequest,
    PackagePurchaseResult,
    QuotaStatus,
    UsageIncrementRequest,
    UsageIncrementResult,
)
from ...services import quota_service
from ...services.quota_service import QuotaRuleViolation

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["usage"])


@router.get(
    "/check-limit",
    response_model=QuotaStatus,
    summary="Check support request allowance",
    responses={
        200: {
            "description": "Current allowance",
            "content": {
                "application/json": {
                    "example": {
                        "canCreate": False,
                        "used": 30,
                        "baseLimit": 20,
                        "additionalPackages": 1,
                        "totalLimit": 30,
                        "reason": "Monthly support request limit reached",
                    }
                }
            },
        },
        404: {"description": "Account not found"},
    },
)
def check_limit(
    email: str = Query(..., min_length=3, description="Account email"),
    db: Session = Depends(get_db),
) -> QuotaStatus:
    """Report whether the account may create another support request."""

    try:
        return quota_service.check_limit(db, email=email)
    except QuotaRuleViolation as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.post(
    "/increment-usage",
    response_model=UsageIncrementResult,
    summary="Record one support request against an account",
    responses={404: {"description": "Account not found"}},
)
def increment_usage(
    payload: UsageIncrementRequest,
    db: Session = Depends(get_db),
) -> UsageIncrementResult:
    """Increment monthly usage by one and return the new count."""

    try:
        result = quota_service.increment_usage(db, email=payload.email)
        db.commit()
        return result
    except QuotaRuleViolation as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.post(
    "/purchase-package",
    response_model=PackagePurchaseResult,
    summary="Buy additional support request packages",
    responses={
        200: {
            "description": "Packages granted",
            "content": {
                "application/json": {
                    "example": {"success": True, "newPackageCount": 3, "newTotalLimit": 50}
                }
            },
        },
        400: {"description": "Package count out of range"},
        404: {"description": "Account not found"},
    },
)
def purchase_package(
    payload: PackagePurchaseRequest,
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
) -> PackagePurchaseResult:
    """Add packages to the authenticated caller's own account.

    Example request body::

        {"packages": 2}
    """

    try:
        result = quota_service.purchase_packages(db, email=auth.email, packages=payload.packages)
        db.commit()
        return result
    except QuotaRuleViolation as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc
