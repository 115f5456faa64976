from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta
from typing import Optional, Tuple


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_optional_date(value: Optional[str]) -> Optional[date]:
    """Lenient variant for query-string filters: blank or malformed gives None."""
    v = (value or "").strip()
    if not v:
        return None
    try:
        return parse_iso_date(v[:10])
    except ValueError:
        return None


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so services can take it as an injectable clock.
    """
    return datetime.now()


def start_of_day(d: date) -> datetime:
    return datetime.combine(d, time.min)


def day_bounds(d: date) -> Tuple[datetime, datetime]:
    """[start, next day start) for a calendar day."""
    start = start_of_day(d)
    return start, start + timedelta(days=1)


def month_bounds(d: date) -> Tuple[datetime, datetime]:
    """[first day, first day of next month) for the month containing d."""
    first = date(d.year, d.month, 1)
    last_day = calendar.monthrange(d.year, d.month)[1]
    return start_of_day(first), start_of_day(date(d.year, d.month, last_day)) + timedelta(days=1)


def add_months(value: datetime, months: int) -> datetime:
    """Same day-of-month n months later, clamped to the month's last day."""
    index = value.month - 1 + months
    year, month = value.year + index // 12, index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def month_name(d: date) -> str:
    """English month name ("June") as stored on payroll records."""
    return calendar.month_name[d.month]


def hours_between(start: datetime, end: datetime) -> float:
    """Elapsed hours rounded to 2 decimals, never negative."""
    seconds = (end - start).total_seconds()
    return round(max(seconds, 0) / 3600, 2)


def isoformat(value) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def service_duration(since: Optional[datetime], now: datetime) -> str:
    """Human readable tenure, e.g. "2 years, 3 months"."""
    if since is None:
        return "N/A"
    months = (now.year - since.year) * 12 + (now.month - since.month)
    if now.day < since.day:
        months -= 1
    months = max(months, 0)
    years, months = divmod(months, 12)
    parts = []
    if years:
        parts.append(f"{years} year{'s' if years != 1 else ''}")
    if months or not parts:
        parts.append(f"{months} month{'s' if months != 1 else ''}")
    return ", ".join(parts)
