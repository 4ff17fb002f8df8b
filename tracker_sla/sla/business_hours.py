"""
Business-hours calculation utilities.

Time only counts on a fixed calendar:
- Monday to Friday
- 09:00 to 18:00 (9 hours per day)
- weekends contribute nothing

All datetimes are treated as naive local wall-clock values.
"""

from __future__ import annotations

from datetime import datetime, timedelta

BUSINESS_HOURS_START = 9
BUSINESS_HOURS_END = 18
BUSINESS_HOURS_PER_DAY = BUSINESS_HOURS_END - BUSINESS_HOURS_START

# datetime.weekday(): Monday == 0 ... Saturday == 5, Sunday == 6
_SATURDAY = 5

_MINUTE = timedelta(minutes=1)


def is_weekend(value: datetime) -> bool:
    """Return True if the date falls on Saturday or Sunday."""
    return value.weekday() >= _SATURDAY


def is_business_hours(value: datetime) -> bool:
    """Return True if the hour of day is inside the business window."""
    return BUSINESS_HOURS_START <= value.hour < BUSINESS_HOURS_END


def business_day_start(value: datetime) -> datetime:
    """Return 09:00 on the same calendar date."""
    return value.replace(hour=BUSINESS_HOURS_START, minute=0, second=0, microsecond=0)


def business_day_end(value: datetime) -> datetime:
    """Return 18:00 on the same calendar date."""
    return value.replace(hour=BUSINESS_HOURS_END, minute=0, second=0, microsecond=0)


def next_business_day_start(value: datetime) -> datetime:
    """Return 09:00 on the next weekday after the given date."""
    next_day = business_day_start(value) + timedelta(days=1)
    while is_weekend(next_day):
        next_day += timedelta(days=1)
    return next_day


def _whole_minutes(delta: timedelta) -> int:
    # Floor division keeps partial minutes out of the total.
    return delta // _MINUTE


def calculate_business_hours(start: datetime, end: datetime) -> int:
    """
    Calculate business minutes between two datetimes.

    Walks one business day at a time, clamping each segment to the
    09:00-18:00 window and skipping weekends entirely.

    Returns:
        Whole business minutes; 0 when start is not before end.
    """
    if start >= end:
        return 0

    total_minutes = 0
    current = start

    while current < end:
        if is_weekend(current):
            current = next_business_day_start(current)
            continue

        day_start = business_day_start(current)
        day_end = business_day_end(current)

        if current < day_start:
            segment_start = day_start
        elif current >= day_end:
            current = next_business_day_start(current)
            continue
        else:
            segment_start = current

        # End lands before this day opens: nothing left to count.
        if end < day_start:
            break
        segment_end = end if end <= day_end else day_end

        segment_minutes = _whole_minutes(segment_end - segment_start)
        if segment_minutes > 0:
            total_minutes += segment_minutes

        if segment_end < end:
            current = next_business_day_start(segment_end)
        else:
            break

    return total_minutes


def format_minutes(minutes: int) -> str:
    """
    Format a business-minute count as "30m", "5h 30m" or "3d 2h".

    Grouping into business days only starts at 24 raw hours, so 18h stays "18h".
    """
    if minutes < 60:
        return f"{minutes}m"

    hours, remaining_minutes = divmod(minutes, 60)
    if hours < 24:
        return f"{hours}h {remaining_minutes}m" if remaining_minutes else f"{hours}h"

    days, remaining_hours = divmod(hours, BUSINESS_HOURS_PER_DAY)
    if remaining_hours == 0:
        return f"{days}d"
    return f"{days}d {remaining_hours}h"


def format_business_hours(start: datetime, end: datetime) -> str:
    """Calculate business time between two datetimes and format it."""
    return format_minutes(calculate_business_hours(start, end))


def add_business_hours(start: datetime, hours: float) -> datetime:
    """
    Advance a datetime by a number of business hours.

    Starts outside the window snap forward to the next opening before any
    time is consumed. Adding 0 hours returns start unchanged.
    """
    if hours < 0:
        raise ValueError(f"Business hours to add must be non-negative, got {hours}.")

    remaining_minutes = hours * 60
    current = start

    while remaining_minutes > 0:
        if is_weekend(current):
            current = next_business_day_start(current)
            continue

        day_start = business_day_start(current)
        day_end = business_day_end(current)

        if current < day_start:
            current = day_start

        if current >= day_end:
            current = next_business_day_start(current)
            continue

        available_minutes = _whole_minutes(day_end - current)

        if remaining_minutes <= available_minutes:
            current = current + timedelta(minutes=remaining_minutes)
            remaining_minutes = 0
        else:
            remaining_minutes -= available_minutes
            current = next_business_day_start(day_end)

    return current
