"""Pydantic schemas for the teacher CSV import."""

from typing import List, Optional

from pydantic import Field

from .base import CamelModel


class BulkImportRequest(CamelModel):
    """Base64 encoded CSV upload."""

    csv_data: str = Field(..., min_length=1, description="Base64 encoded CSV content.")
    filename: str = Field(..., min_length=1)


class BulkImportRowError(CamelModel):
    """A data row that could not be imported."""

    row: int
    email: Optional[str] = None
    name: Optional[str] = None
    error: str


class BulkImportOutcome(CamelModel):
    """Per-upload result; returned even when some rows failed."""

    success: bool
    total_rows: int
    successful_imports: int
    errors: List[BulkImportRowError] = Field(default_factory=list)
    duplicate_emails: List[str] = Field(default_factory=list)
    summary: str
