"""Issue status transitions and the SLA fields they stamp."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict, Mapping, Optional

from tracker_sla.sla.business_hours import calculate_business_hours
from tracker_sla.utils.date_utils import issue_started_at, to_naive_datetime

logger = logging.getLogger(__name__)

OPEN_STATUS_TYPES = {"BACKLOG", "TODO", "IN_PROGRESS", "IN_REVIEW"}
RESPONSE_STATUS_TYPES = {"IN_PROGRESS", "IN_REVIEW"}
RESOLVED_STATUS_TYPE = "DONE"
CANCELED_STATUS_TYPE = "CANCELED"
STATUS_TYPES = OPEN_STATUS_TYPES | {RESOLVED_STATUS_TYPE, CANCELED_STATUS_TYPE}


def apply_status_transition(
    issue: Mapping[str, object],
    new_status_type: str,
    now: Optional[datetime] = None,
) -> Dict[str, object]:
    """
    Move an issue to a new status type and return the updated copy.

    - Starting work (IN_PROGRESS / IN_REVIEW) stamps the first response.
    - Resolving (DONE) stamps resolved_at and the business-minute
      resolution time since the issue was reported or created.
    - Going from DONE or CANCELED back to an open status reopens the issue:
      resolution fields are cleared and reopen_count is incremented.
    """
    if new_status_type not in STATUS_TYPES:
        raise ValueError(
            f"Unknown status type '{new_status_type}'. "
            f"Expected one of: {', '.join(sorted(STATUS_TYPES))}."
        )
    if now is None:
        now = datetime.now()

    updated = dict(issue)
    previous_status_type = updated.get("status_type")
    if previous_status_type == new_status_type:
        return updated

    updated["status_type"] = new_status_type

    reopening = (
        previous_status_type in (RESOLVED_STATUS_TYPE, CANCELED_STATUS_TYPE)
        and new_status_type in OPEN_STATUS_TYPES
    )
    if reopening:
        updated["resolved_at"] = None
        updated["resolution_time_minutes"] = None
        updated["reopen_count"] = int(updated.get("reopen_count") or 0) + 1
        logger.info(
            "Reopened issue %s (reopen_count=%s)",
            updated.get("issue_id"),
            updated["reopen_count"],
        )

    if new_status_type in RESPONSE_STATUS_TYPES or new_status_type == RESOLVED_STATUS_TYPE:
        if to_naive_datetime(updated.get("first_response_at")) is None:
            updated["first_response_at"] = now

    if new_status_type == RESOLVED_STATUS_TYPE:
        started_at = issue_started_at(updated)
        updated["resolved_at"] = now
        updated["resolution_time_minutes"] = (
            calculate_business_hours(started_at, now) if started_at is not None else None
        )
        logger.info(
            "Resolved issue %s in %s business minutes",
            updated.get("issue_id"),
            updated["resolution_time_minutes"],
        )

    return updated
