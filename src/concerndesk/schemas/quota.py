"""Pydantic schemas for usage quota endpoints."""

from typing import Optional

from pydantic import Field

from .base import CamelModel


class QuotaStatus(CamelModel):
    """Whether an account may create another support request this month."""

    can_create: bool
    used: int
    base_limit: int
    additional_packages: int
    total_limit: int
    reason: Optional[str] = None


class UsageIncrementRequest(CamelModel):
    """Request body for recording one support request against an account."""

    email: str = Field(..., min_length=3)


class UsageIncrementResult(CamelModel):
    success: bool = True
    new_usage_count: int


class PackagePurchaseRequest(CamelModel):
    """Request body for buying additional support request packages."""

    packages: int = Field(..., description="Number of 10-request packages to add.")


class PackagePurchaseResult(CamelModel):
    success: bool = True
    new_package_count: int
    new_total_limit: int
