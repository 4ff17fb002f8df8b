"""SLA calculation utilities."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, Optional

from tracker_sla.sla.business_hours import calculate_business_hours
from tracker_sla.utils.config import DEFAULT_SLA_HOURS, SLA_HOURS_BY_PRIORITY

AT_RISK_THRESHOLD = 80
OVERDUE_THRESHOLD = 100


class SLAStatus(str, Enum):
    """SLA classification of elapsed business time."""

    ON_TIME = "on-time"
    AT_RISK = "at-risk"
    OVERDUE = "overdue"


@dataclass(frozen=True)
class SLAResult:
    """Elapsed business time measured against an SLA allotment."""

    status: SLAStatus
    elapsed_minutes: int
    remaining_minutes: int
    percentage_used: int

    def to_dict(self) -> Dict[str, object]:
        return {
            "status": self.status.value,
            "elapsedMinutes": self.elapsed_minutes,
            "remainingMinutes": self.remaining_minutes,
            "percentageUsed": self.percentage_used,
        }


def get_expected_sla_hours(priority: Optional[str]) -> int:
    """
    Return expected SLA hours based on priority.
    """
    if not isinstance(priority, str):
        return DEFAULT_SLA_HOURS
    return SLA_HOURS_BY_PRIORITY.get(priority.upper(), DEFAULT_SLA_HOURS)


def _used_percentage(elapsed_minutes: int, sla_minutes: float) -> float:
    if sla_minutes == 0:
        # 0 of 0 is undefined and reads as on-time; any time against a
        # zero allotment is unbounded usage.
        return math.inf if elapsed_minutes > 0 else math.nan
    return elapsed_minutes / sla_minutes * 100


def classify_percentage(percentage: float) -> SLAStatus:
    """Map a raw (unclamped) usage percentage to an SLA status."""
    # NaN fails both comparisons and falls through to on-time.
    if percentage >= OVERDUE_THRESHOLD:
        return SLAStatus.OVERDUE
    if percentage >= AT_RISK_THRESHOLD:
        return SLAStatus.AT_RISK
    return SLAStatus.ON_TIME


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def check_sla_status(
    start: datetime,
    sla_hours: float,
    current: Optional[datetime] = None,
) -> SLAResult:
    """
    Check how much of an SLA allotment has been used in business time.

    Args:
        start: When the issue was reported or created.
        sla_hours: SLA allotment in business hours.
        current: Reference instant, defaults to now.

    Returns:
        SLAResult with status, elapsed and remaining minutes, and the
        percentage used rounded and capped at 100.
    """
    if current is None:
        current = datetime.now()

    elapsed_minutes = calculate_business_hours(start, current)
    sla_minutes = sla_hours * 60
    remaining_minutes = sla_minutes - elapsed_minutes
    percentage = _used_percentage(elapsed_minutes, sla_minutes)

    status = classify_percentage(percentage)
    percentage_used = 0 if math.isnan(percentage) else _round_half_up(min(100, percentage))

    return SLAResult(
        status=status,
        elapsed_minutes=elapsed_minutes,
        remaining_minutes=int(remaining_minutes),
        percentage_used=percentage_used,
    )
