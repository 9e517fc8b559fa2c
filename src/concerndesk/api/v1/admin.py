"""Administrator endpoints: teacher accounts, CSV import and usage reset."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...core.security import require_admin
from ...schemas import (
    BulkImportOutcome,
    BulkImportRequest,
    PasswordResetRequest,
    PasswordResetResult,
    TeacherBulkDeleteRequest,
    TeacherBulkDeleteResult,
    TeacherBulkUpdateRequest,
    TeacherBulkUpdateResult,
    TeacherCreate,
    TeacherRead,
    TeacherUpdate,
)
from ...services import bulk_import_service, monthly_reset_service, teacher_service
from ...services.bulk_import_service import BulkImportError
from ...services.teacher_service import TeacherRuleViolation

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.post(
    "/teachers/bulk-import",
    response_model=BulkImportOutcome,
    summary="Import teachers from CSV",
    responses={
        200: {
            "description": "Import finished; rows that failed are listed in errors",
            "content": {
                "application/json": {
                    "example": {
                        "success": False,
                        "totalRows": 2,
                        "successfulImports": 1,
                        "errors": [
                            {
                                "row": 3,
                                "email": "sam.ortiz@example.edu",
                                "name": "Sam Ortiz",
                                "error": "Email already exists in system",
                            }
                        ],
                        "duplicateEmails": ["sam.ortiz@example.edu"],
                        "summary": "Processed 2 rows. Successfully imported 1 teachers. 1 errors encountered.",
                    }
                }
            },
        },
        400: {"description": "Upload is not a usable CSV"},
        403: {"description": "Admin access required"},
    },
)
def bulk_import(
    payload: BulkImportRequest,
    db: Session = Depends(get_db),
) -> BulkImportOutcome:
    """Create teacher accounts from a base64 encoded CSV file.

    Example request body::

        {
            "csvData": "bmFtZSxlbWFpbApEYW5hIFdoaXRmaWVsZCxkYW5hQGV4YW1wbGUuZWR1Cg==",
            "filename": "teachers.csv"
        }
    """

    try:
        outcome = bulk_import_service.run_bulk_import(db, csv_data=payload.csv_data, filename=payload.filename)
        db.commit()
        return outcome
    except BulkImportError as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.post(
    "/teachers/bulk-update",
    response_model=TeacherBulkUpdateResult,
    summary="Update many teacher accounts",
    responses={
        200: {
            "description": "Ids that failed are listed in errors",
            "content": {
                "application/json": {
                    "example": {"success": False, "updatedCount": 2, "errors": ["Teacher ID 99 not found"]}
                }
            },
        },
        400: {"description": "No teacher ids provided"},
    },
)
def bulk_update_teachers(payload: TeacherBulkUpdateRequest, db: Session = Depends(get_db)) -> TeacherBulkUpdateResult:
    """Apply subscription, limit and school changes to every listed account.

    Example request body::

        {"teacherIds": [3, 7], "updates": {"supportRequestsLimit": 40, "schoolDistrict": "Metro"}}
    """

    try:
        result = teacher_service.bulk_update_teachers(db, payload.teacher_ids, payload.updates)
        db.commit()
        return result
    except TeacherRuleViolation as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.post(
    "/teachers/bulk-delete",
    response_model=TeacherBulkDeleteResult,
    summary="Delete many teacher accounts",
    responses={400: {"description": "No teacher ids provided"}},
)
def bulk_delete_teachers(payload: TeacherBulkDeleteRequest, db: Session = Depends(get_db)) -> TeacherBulkDeleteResult:
    try:
        result = teacher_service.bulk_delete_teachers(db, payload.teacher_ids)
        db.commit()
        return result
    except TeacherRuleViolation as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.get("/teachers", response_model=List[TeacherRead], summary="List teacher accounts")
def list_teachers(db: Session = Depends(get_db)) -> List[TeacherRead]:
    return [teacher_service.to_read(teacher) for teacher in teacher_service.list_teachers(db)]


@router.post(
    "/teachers",
    response_model=TeacherRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a teacher account",
    responses={409: {"description": "Email already in use"}},
)
def create_teacher(payload: TeacherCreate, db: Session = Depends(get_db)) -> TeacherRead:
    try:
        teacher = teacher_service.create_teacher(db, payload)
        db.commit()
        db.refresh(teacher)
        return teacher_service.to_read(teacher)
    except TeacherRuleViolation as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.put(
    "/teachers/{teacher_id}",
    response_model=TeacherRead,
    summary="Update a teacher account",
    responses={404: {"description": "Teacher not found"}, 409: {"description": "Email already in use"}},
)
def update_teacher(teacher_id: int, payload: TeacherUpdate, db: Session = Depends(get_db)) -> TeacherRead:
    try:
        teacher = teacher_service.update_teacher(db, teacher_id, payload)
        db.commit()
        db.refresh(teacher)
        return teacher_service.to_read(teacher)
    except TeacherRuleViolation as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.delete(
    "/teachers/{teacher_id}",
    summary="Delete a teacher account",
    responses={404: {"description": "Teacher not found"}},
)
def delete_teacher(teacher_id: int, db: Session = Depends(get_db)) -> dict[str, bool]:
    try:
        teacher_service.delete_teacher(db, teacher_id)
        db.commit()
        return {"success": True}
    except TeacherRuleViolation as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.post(
    "/teachers/{teacher_id}/reset-password",
    response_model=PasswordResetResult,
    summary="Reset a teacher's password",
    responses={400: {"description": "Password too short"}, 404: {"description": "Teacher not found"}},
)
def reset_teacher_password(
    teacher_id: int,
    payload: PasswordResetRequest,
    db: Session = Depends(get_db),
) -> PasswordResetResult:
    """Set or generate a password; the plain value is returned once."""

    try:
        teacher, password = teacher_service.reset_password(db, teacher_id, payload.new_password)
        db.commit()
        return PasswordResetResult(teacher_id=teacher.id, temporary_password=password)
    except TeacherRuleViolation as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.post("/usage/monthly-reset", summary="Run the monthly usage reset now")
def run_monthly_reset(db: Session = Depends(get_db)) -> dict[str, int]:
    summary = monthly_reset_service.run_monthly_reset(db)
    db.commit()
    return summary
