"""Endpoints for student support requests."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...core.security import AuthContext, get_auth_context
from ...schemas import SupportRequestCreate, SupportRequestRead
from ...services import support_request_service
from ...services.support_request_service import SupportRequestRuleViolation

router = APIRouter(prefix="/support-requests", tags=["support-requests"])


@router.post(
    "",
    response_model=SupportRequestRead,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a support request",
    responses={
        201: {
            "description": "Support request created",
            "content": {
                "application/json": {
                    "example": {
                        "id": 42,
                        "teacher": "Dana Whitfield",
                        "teacherEmail": "dana.whitfield@example.edu",
                        "studentFirstName": "Jordan",
                        "studentLastInitial": "P",
                        "grade": "4",
                        "concernDescription": "Frequently leaves seat during independent reading.",
                        "additionalInfo": None,
                        "aiRecommendations": None,
                        "createdAt": "2025-11-12T10:15:30",
                    }
                }
            },
        },
        403: {"description": "Allowance exhausted or subscription inactive"},
        404: {"description": "Account not found"},
    },
)
def create_support_request(
    payload: SupportRequestCreate,
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
) -> SupportRequestRead:
    """Create a support request, consuming one unit of the caller's allowance."""

    try:
        support_request = support_request_service.create_support_request(db, auth=auth, payload=payload)
        db.commit()
        db.refresh(support_request)
        return support_request
    except SupportRequestRuleViolation as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.get("", response_model=List[SupportRequestRead], summary="List support requests")
def list_support_requests(
    *,
    limit: int = Query(50, ge=1, le=100, description="Maximum items to return"),
    offset: int = Query(0, ge=0, description="Items to skip for pagination"),
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
) -> List[SupportRequestRead]:
    """Teachers see their own requests; admins see everyone's."""

    return list(support_request_service.list_support_requests(db, auth=auth, limit=limit, offset=offset))


@router.get(
    "/{request_id}",
    response_model=SupportRequestRead,
    summary="Fetch a support request",
    responses={404: {"description": "Support request not found"}},
)
def get_support_request(
    request_id: int,
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
) -> SupportRequestRead:
    try:
        return support_request_service.get_support_request(db, auth=auth, request_id=request_id)
    except SupportRequestRuleViolation as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc
