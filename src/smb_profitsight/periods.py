# SMB ProfitSight - Profitability analytics for SMB inventory & sales
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Period and date helpers for SMB ProfitSight.

This module defines a Period value object, helpers to derive reporting
periods (last N days, month-to-date, year-to-date, last month) from CLI
arguments, and the ISO date-key helpers used everywhere a record date is
compared.

Date comparison
---------------
Record dates are ISO strings, either dates ("2025-03-14") or date-times
("2025-03-14T10:00:00"). All range and cut-off checks compare the
"YYYY-MM-DD" prefix as plain strings. ISO ordering makes this equivalent to a
calendar comparison, and it never depends on a time zone.
"""

from calendar import monthrange
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional

import pandas as pd

DATE_KEY_LENGTH = 10


@dataclass
class Period:
    """Represents a reporting period with a human-readable label."""

    start: date
    end: date
    label: str

    def to_filter_spec(self, customer_id: str = "", category: str = ""):
        """Build a FilterSpec covering this period."""
        from .filters import FilterSpec

        return FilterSpec(
            from_date=self.start.isoformat(),
            to_date=self.end.isoformat(),
            customer_id=customer_id,
            category=category,
        )


def date_key(value) -> str:
    """
    Return the 'YYYY-MM-DD' key of a record date.

    Missing values (None, NaN, empty string) map to "" so that they never
    fall inside a non-empty date range.
    """
    if value is None:
        return ""
    if isinstance(value, (date, datetime)):
        return value.isoformat()[:DATE_KEY_LENGTH]
    try:
        if pd.isna(value):
            return ""
    except (TypeError, ValueError):
        pass
    return str(value).strip()[:DATE_KEY_LENGTH]


def date_keys(values: pd.Series) -> pd.Series:
    """Vectorized version of :func:`date_key` for a Series of record dates."""
    return values.map(date_key).astype(str)


def _today() -> date:
    """Return today's date as a date object (isolated for easier testing)."""
    return datetime.today().date()


def period_last_days(days: int = 30) -> Period:
    """Rolling window ending today, starting `days` days earlier."""
    today = _today()
    return Period(
        start=today - timedelta(days=days),
        end=today,
        label=f"Last {days} days",
    )


def period_mtd() -> Period:
    """Month-to-date."""
    today = _today()
    return Period(start=today.replace(day=1), end=today, label="Month to date")


def period_ytd() -> Period:
    """Calendar year-to-date."""
    today = _today()
    return Period(start=date(today.year, 1, 1), end=today, label="Year to date")


def period_last_month() -> Period:
    """Full previous calendar month."""
    today = _today()

    if today.month == 1:
        year = today.year - 1
        month = 12
    else:
        year = today.year
        month = today.month - 1

    start = date(year, month, 1)
    end = date(year, month, monthrange(year, month)[1])
    return Period(start=start, end=end, label="Last month")


def determine_period_from_args(args, default_window_days: int = 30) -> Period:
    """
    Determine the reporting period to use based on CLI args.

    Priority (highest to lowest):

        1. args.from_date / args.to_date (custom period)
        2. args.period (last-30-days, mtd, ytd, last-month)
        3. rolling window of `default_window_days` days ending today
    """
    from_raw: Optional[str] = getattr(args, "from_date", None)
    to_raw: Optional[str] = getattr(args, "to_date", None)

    if from_raw or to_raw:
        default = period_last_days(default_window_days)
        start = date.fromisoformat(from_raw) if from_raw else default.start
        end = date.fromisoformat(to_raw) if to_raw else default.end

        if end < start:
            raise ValueError("Custom period end date cannot be before start date.")

        return Period(start=start, end=end, label=f"Custom period ({start} → {end})")

    p = getattr(args, "period", None)
    if p:
        if p == "last-30-days":
            return period_last_days(30)
        if p == "mtd":
            return period_mtd()
        if p == "ytd":
            return period_ytd()
        if p == "last-month":
            return period_last_month()
        raise ValueError(f"Unknown period: {p!r}")

    return period_last_days(default_window_days)
