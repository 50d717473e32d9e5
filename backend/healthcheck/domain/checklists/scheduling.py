# backend/healthcheck/domain/checklists/scheduling.py
from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import Optional, Union


class Frequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    SEMIANNUAL = "semiannual"
    ANNUAL = "annual"


# (days, months)
_OFFSETS: dict[Frequency, tuple[int, int]] = {
    Frequency.DAILY: (1, 0),
    Frequency.WEEKLY: (7, 0),
    Frequency.BIWEEKLY: (14, 0),
    Frequency.MONTHLY: (0, 1),
    Frequency.QUARTERLY: (0, 3),
    Frequency.SEMIANNUAL: (0, 6),
    Frequency.ANNUAL: (0, 12),
}

DEFAULT_FREQUENCY = Frequency.MONTHLY


def parse_frequency(raw: Union[str, Frequency, None]) -> Frequency:
    """Unknown or missing frequencies fall back to monthly."""
    if isinstance(raw, Frequency):
        return raw
    try:
        return Frequency((raw or "").strip().lower())
    except ValueError:
        return DEFAULT_FREQUENCY


def add_months(d: date, months: int) -> date:
    """
    Calendar month arithmetic with end-of-month clamping:
      2024-01-31 + 1 month  -> 2024-02-29
      2024-02-29 + 12 months -> 2025-02-28
    """
    idx = d.month - 1 + months
    year = d.year + idx // 12
    month = idx % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(d.day, last_day))


def as_calendar_date(reference: Union[date, datetime, None]) -> date:
    if reference is None:
        return datetime.now(timezone.utc).date()
    if isinstance(reference, datetime):
        return reference.date()
    return reference


def as_naive_utc(moment: datetime) -> datetime:
    # DateTime columns store naive UTC
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


def next_due_date(
    frequency: Union[str, Frequency, None],
    reference: Optional[Union[date, datetime]] = None,
) -> date:
    base = as_calendar_date(reference)
    days, months = _OFFSETS[parse_frequency(frequency)]
    if months:
        return add_months(base, months)
    return base + timedelta(days=days)
