"""Deterministic validators and normalizers shared by services and API handlers."""

from __future__ import annotations

from datetime import date, datetime, timezone

_DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y", "%Y/%m/%d")


def sanitize_text(value: str | None, max_len: int = 20000) -> str:
    """Sanitize free-form content before persistence."""
    if value is None:
        return ""
    cleaned = str(value).replace("\x00", "").strip()
    return cleaned[:max_len]


def normalize_email(value: str | None) -> str:
    return (value or "").strip().lower()


def emails_match(left: str | None, right: str | None) -> bool:
    """Case-insensitive, whitespace-insensitive email equality; blanks never match."""
    a, b = normalize_email(left), normalize_email(right)
    return bool(a) and a == b


def parse_date(value: date | datetime | str | None) -> date | None:
    """Parse a calendar date from ISO strings, datetimes or a few common formats.

    Datetimes are converted to their UTC calendar date. Unparseable input
    returns None rather than raising.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    if not text:
        return None
    if len(text) > 10 and text[10] in "T ":
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            parsed = None
        if parsed is not None:
            return parse_date(parsed)
        text = text[:10]
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def as_utc(value: datetime | None) -> datetime | None:
    """Treat naive datetimes (as returned by SQLite) as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def start_of_day_utc(day: date) -> datetime:
    return datetime(day.year, day.month, day.day, 0, 0, 0, tzinfo=timezone.utc)


def end_of_day_utc(day: date) -> datetime:
    return datetime(day.year, day.month, day.day, 23, 59, 59, tzinfo=timezone.utc)
