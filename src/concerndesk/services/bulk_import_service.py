"""Teacher CSV import: decode, validate, de-duplicate and insert row by row."""

from __future__ import annotations

import base64
import binascii
import csv
import io
import logging
import re
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Set

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..core.config import get_settings
from ..core.security import generate_password, get_password_hash
from ..models import TeacherAccount
from ..schemas import BulkImportOutcome, BulkImportRowError
from ..utils.datetime import one_year_from, parse_date, utcnow

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
REQUIRED_FIELDS = ("name", "email")
DEFAULT_TEACHER_TYPE = "classroom"

# Header text (lower-cased, trimmed) -> TeacherAccount-facing field name.
HEADER_ALIASES: Dict[str, str] = {
    "name": "name",
    "email": "email",
    "password": "password",
    "school name": "school_name",
    "schoolname": "school_name",
    "school district": "school_district",
    "schooldistrict": "school_district",
    "primary grade": "primary_grade",
    "primarygrade": "primary_grade",
    "grade": "primary_grade",
    "primary subject": "primary_subject",
    "primarysubject": "primary_subject",
    "subject": "primary_subject",
    "teacher type": "teacher_type",
    "teachertype": "teacher_type",
    "type": "teacher_type",
    "subscription end date": "subscription_end_date",
    "subscriptionenddate": "subscription_end_date",
    "subscription end": "subscription_end_date",
    "support requests limit": "support_requests_limit",
    "supportrequestslimit": "support_requests_limit",
    "limit": "support_requests_limit",
}


class BulkImportError(Exception):
    """Raised when the upload as a whole is unusable."""

    def __init__(self, detail: str, status_code: int = 400) -> None:
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code


class RowRejected(Exception):
    """A single data row failed validation."""


def decode_payload(csv_data: str) -> str:
    """Decode base64 text into CSV content."""

    try:
        raw = base64.b64decode(csv_data.strip(), validate=True)
        return raw.decode("utf-8-sig")
    except (binascii.Error, ValueError) as exc:
        raise BulkImportError("Invalid base64 CSV data") from exc


def parse_records(content: str) -> List[List[str]]:
    """Tokenize CSV content into records, dropping blank lines.

    Quoted fields may contain commas, newlines and doubled quotes. A line
    made only of separators (``,,,``) is kept; the import loop skips it.
    """

    reader = csv.reader(io.StringIO(content), skipinitialspace=True)
    records = []
    try:
        for record in reader:
            if not record or (len(record) == 1 and not record[0].strip()):
                continue
            records.append(record)
    except csv.Error as exc:
        raise BulkImportError(f"Invalid CSV content: {exc}") from exc
    return records


def map_headers(header: Iterable[str]) -> List[Optional[str]]:
    """Resolve header cells to field names; unknown headers map to None."""

    return [HEADER_ALIASES.get(" ".join(cell.strip().lower().split())) for cell in header]


def _row_values(fields: List[Optional[str]], record: List[str]) -> Dict[str, str]:
    values: Dict[str, str] = {}
    for field, cell in zip(fields, record):
        if field is None:
            continue
        value = cell.strip()
        if value:
            values[field] = value
    if "email" in values:
        values["email"] = values["email"].lower()
    return values


def _existing_emails(session: Session) -> Set[str]:
    emails = session.execute(select(TeacherAccount.email)).scalars().all()
    return {email.lower() for email in emails if email}


def _resolve_limit(raw: Optional[str]) -> int:
    settings = get_settings()
    if raw is None:
        return settings.base_support_request_limit
    try:
        limit = int(raw)
    except ValueError:
        limit = None
    if limit is None or limit < 1 or limit > settings.import_max_support_request_limit:
        raise RowRejected(
            f"Support requests limit must be a number between 1 and {settings.import_max_support_request_limit}"
        )
    return limit


def _resolve_end_date(raw: Optional[str], now: datetime) -> datetime:
    if raw is None:
        return one_year_from(now)
    try:
        return parse_date(raw)
    except ValueError as exc:
        raise RowRejected("Invalid subscription end date format. Use YYYY-MM-DD or MM/DD/YYYY") from exc


def build_account(values: Dict[str, str], now: datetime) -> TeacherAccount:
    """Apply defaults and validation to a mapped row."""

    subscription_end_date = _resolve_end_date(values.get("subscription_end_date"), now)
    support_requests_limit = _resolve_limit(values.get("support_requests_limit"))
    password = values.get("password") or generate_password()

    return TeacherAccount(
        email=values["email"],
        name=values["name"],
        password_hash=get_password_hash(password),
        school_name=values.get("school_name"),
        school_district=values.get("school_district"),
        primary_grade=values.get("primary_grade"),
        primary_subject=values.get("primary_subject"),
        teacher_type=values.get("teacher_type") or DEFAULT_TEACHER_TYPE,
        support_requests_limit=support_requests_limit,
        support_requests_used_this_month=0,
        additional_packages=0,
        subscription_start_date=now,
        subscription_end_date=subscription_end_date,
        usage_reset_at=now,
        created_at=now,
        updated_at=now,
    )


def run_bulk_import(
    session: Session,
    *,
    csv_data: str,
    filename: str,
    now: Optional[datetime] = None,
) -> BulkImportOutcome:
    """Import teacher accounts from a base64 encoded CSV upload.

    Structural problems (encoding, missing header, no data) raise
    ``BulkImportError`` before anything is written. Problems with a single
    row are collected in ``errors`` and never stop the batch. Each insert
    runs in its own SAVEPOINT; the caller commits.
    """

    if not csv_data or not filename:
        raise BulkImportError("CSV data and filename are required")

    records = parse_records(decode_payload(csv_data))
    if len(records) < 2:
        raise BulkImportError("CSV file must contain at least a header row and one data row")

    fields = map_headers(records[0])
    missing = [name for name in REQUIRED_FIELDS if name not in fields]
    if missing:
        raise BulkImportError(f"Missing required headers: {', '.join(missing)}")

    now = now or utcnow()
    known_emails = _existing_emails(session)
    data_rows = records[1:]
    errors: List[BulkImportRowError] = []
    duplicate_emails: List[str] = []
    successful_imports = 0

    logger.info("importing %s data rows from %s", len(data_rows), filename)

    for index, record in enumerate(data_rows):
        row_number = index + 2
        if all(not cell.strip() for cell in record):
            continue

        values = _row_values(fields, record)
        email = values.get("email")
        name = values.get("name")

        if not email or not name:
            errors.append(BulkImportRowError(row=row_number, email=email, name=name, error="Name and email are required"))
            continue
        if not EMAIL_PATTERN.match(email):
            errors.append(BulkImportRowError(row=row_number, email=email, name=name, error="Invalid email format"))
            continue
        if email in known_emails:
            duplicate_emails.append(email)
            errors.append(
                BulkImportRowError(row=row_number, email=email, name=name, error="Email already exists in system")
            )
            continue
        known_emails.add(email)

        try:
            account = build_account(values, now)
            with session.begin_nested():
                session.add(account)
        except RowRejected as exc:
            errors.append(BulkImportRowError(row=row_number, email=email, name=name, error=str(exc)))
            continue
        except Exception as exc:
            logger.exception("error importing row %s of %s", row_number, filename)
            errors.append(
                BulkImportRowError(row=row_number, email=email, name=name, error=str(exc) or "Unknown error occurred")
            )
            continue

        successful_imports += 1

    summary = (
        f"Processed {len(data_rows)} rows. Successfully imported {successful_imports} teachers. "
        f"{len(errors)} errors encountered."
    )
    logger.info("bulk import of %s finished: %s", filename, summary)

    return BulkImportOutcome(
        success=not errors,
        total_rows=len(data_rows),
        successful_imports=successful_imports,
        errors=errors,
        duplicate_emails=duplicate_emails,
        summary=summary,
    )
