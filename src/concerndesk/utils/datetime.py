"""Date-time helpers for usage periods and subscription dates."""

from datetime import date, datetime, timezone


def utcnow() -> datetime:
    """Return the current UTC time as a naive datetime, matching stored columns."""

    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """Normalise an aware datetime to naive UTC; naive values are assumed UTC."""

    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def month_bucket(now: datetime | None = None) -> date:
    """Return the first day of the month for the provided timestamp (UTC)."""

    current = to_naive_utc(now) if now else utcnow()
    return date(current.year, current.month, 1)


def one_year_from(now: datetime) -> datetime:
    """Return the same instant one calendar year later (Feb 29 rolls to Feb 28)."""

    try:
        return now.replace(year=now.year + 1)
    except ValueError:
        return now.replace(year=now.year + 1, day=28)


SPREADSHEET_DATE_FORMATS = ("%m/%d/%Y", "%m/%d/%y")


def parse_date(value: str) -> datetime:
    """Parse an ISO 8601 date or date-time string to naive UTC.

    US spreadsheet dates (``MM/DD/YYYY``) are accepted as well. Raises
    ``ValueError`` for anything else.
    """

    text = value.strip()
    try:
        return datetime.combine(date.fromisoformat(text), datetime.min.time())
    except ValueError:
        pass
    for fmt in SPREADSHEET_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return to_naive_utc(datetime.fromisoformat(text))
