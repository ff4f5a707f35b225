# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""DateTime utilities for the academy backend.

All datetime operations should go through these helpers so that
timestamps stay consistent.

Design Decisions:
-----------------
1. All timestamps are stored in UTC (PostgreSQL TIMESTAMPTZ)
2. All Python datetimes are timezone-aware (with timezone.utc)
3. Calendar values (program start dates) are plain ``date`` objects

Usage:
------
    from src.utils.datetime import utc_now

    # For SQLAlchemy model defaults
    created_at = mapped_column(DateTime(timezone=True), default=utc_now)
"""

from datetime import date, datetime, timedelta, timezone


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime.

    Returns:
        Timezone-aware datetime representing current UTC time.
    """
    return datetime.now(timezone.utc)


def utc_today() -> date:
    """Get today's calendar date in UTC."""
    return utc_now().date()


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Ensure a datetime is timezone-aware UTC.

    Args:
        dt: A datetime object (naive or aware) or None.

    Returns:
        Timezone-aware UTC datetime or None.

    Note:
        - If dt is None, returns None
        - If dt is naive, assumes UTC and adds tzinfo
        - If dt is aware, converts to UTC
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        # Naive datetime - assume UTC
        return dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(timezone.utc)


def days_between(start: date, end: date) -> int:
    """Whole days elapsed from ``start`` to ``end``.

    Negative when ``start`` is after ``end``.

    Args:
        start: Earlier calendar date.
        end: Later calendar date.

    Returns:
        Number of full days, floored.
    """
    return (end - start).days


def whole_days_since(start: datetime, reference: datetime | None = None) -> int:
    """Full days elapsed between ``start`` and ``reference``.

    Args:
        start: Start of the interval.
        reference: End of the interval, defaults to now.

    Returns:
        Floor of the elapsed days, never below zero.
    """
    reference_utc = ensure_utc(reference) if reference is not None else utc_now()
    elapsed = reference_utc - ensure_utc(start)
    return max(elapsed // timedelta(days=1), 0)


def format_long_date(value: date | datetime) -> str:
    """Format a date the way assignment emails print it ("October 19, 2026")."""
    return f"{value:%B} {value.day}, {value.year}"


def format_iso(dt: datetime | None) -> str | None:
    """Format a datetime as ISO 8601 string.

    Args:
        dt: Datetime to format.

    Returns:
        ISO 8601 formatted string or None.
    """
    if dt is None:
        return None

    return ensure_utc(dt).isoformat()
