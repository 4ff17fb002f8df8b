"""Date utilities for turning export timestamps into wall-clock datetimes."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Mapping, Optional

import pandas as pd

from tracker_sla.utils.config import LOCAL_TIMEZONE

PERIOD_DAYS = {
    "week": 7,
    "month": 30,
    "quarter": 90,
}


def to_naive_datetime(value: object, tz: str = LOCAL_TIMEZONE) -> Optional[datetime]:
    """
    Coerce a timestamp-like value to a naive local datetime.

    Accepts datetimes, pandas Timestamps and ISO strings. Aware values are
    converted to ``tz`` before the offset is dropped. Missing or unparseable
    values return None.
    """
    if value is None or value is pd.NA or value is pd.NaT:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    timestamp = pd.to_datetime(value, errors="coerce")
    if pd.isna(timestamp):
        return None
    if timestamp.tzinfo is not None:
        timestamp = timestamp.tz_convert(tz).tz_localize(None)
    return timestamp.to_pydatetime()


def issue_started_at(issue: Mapping[str, object]) -> Optional[datetime]:
    """Return when the SLA clock started: reported_at, else created_at."""
    reported_at = to_naive_datetime(issue.get("reported_at"))
    if reported_at is not None:
        return reported_at
    return to_naive_datetime(issue.get("created_at"))


def period_cutoff(period: str, now: datetime) -> Optional[datetime]:
    """
    Return the earliest datetime included in a dashboard period.

    "all" has no cutoff and returns None.
    """
    if period == "all":
        return None
    if period not in PERIOD_DAYS:
        raise ValueError(f"Unknown period '{period}'. Expected one of: all, {', '.join(PERIOD_DAYS)}.")
    return now - timedelta(days=PERIOD_DAYS[period])
