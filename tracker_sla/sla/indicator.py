"""SLA badge text for a single issue."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Mapping, Optional

from tracker_sla.sla.business_hours import format_business_hours, format_minutes
from tracker_sla.sla.sla_calculation import SLAResult, SLAStatus, check_sla_status
from tracker_sla.utils.date_utils import issue_started_at, to_naive_datetime

SLA_ISSUE_TYPES = {"MAINTENANCE", "BUG"}
CLOSED_STATUS_TYPES = {"DONE", "CANCELED"}


@dataclass(frozen=True)
class SLAIndicator:
    """Badge tone with full and compact text; compact_text None hides the compact badge."""

    tone: str
    text: str
    compact_text: Optional[str]
    result: Optional[SLAResult] = None


def describe_sla(
    issue: Mapping[str, object],
    sla_hours: Optional[float],
    now: Optional[datetime] = None,
) -> Optional[SLAIndicator]:
    """
    Build the SLA badge for an issue, or None when no badge applies.

    Resolved issues show their resolution time; open issues with an SLA
    show time remaining or how far past the allotment they are.
    """
    if issue.get("issue_type") not in SLA_ISSUE_TYPES:
        return None

    started_at = issue_started_at(issue)
    if started_at is None:
        return None

    resolved_at = to_naive_datetime(issue.get("resolved_at"))
    if resolved_at is not None:
        resolution_time = format_business_hours(started_at, resolved_at)
        return SLAIndicator(
            tone="resolved",
            text=f"Resolved in {resolution_time}",
            compact_text=resolution_time,
        )

    if sla_hours is None:
        return None
    if issue.get("status_type") in CLOSED_STATUS_TYPES:
        return None

    result = check_sla_status(started_at, sla_hours, now)

    if result.status is SLAStatus.OVERDUE:
        overdue_time = format_minutes(max(0, -result.remaining_minutes))
        return SLAIndicator(
            tone=result.status.value,
            text=f"SLA overdue by {overdue_time}",
            compact_text=f"{overdue_time} overdue",
            result=result,
        )

    remaining_time = format_minutes(result.remaining_minutes)
    # Compact badges stay hidden while an issue is on time.
    compact_text = f"{remaining_time} left" if result.status is SLAStatus.AT_RISK else None
    return SLAIndicator(
        tone=result.status.value,
        text=f"{remaining_time} remaining",
        compact_text=compact_text,
        result=result,
    )
