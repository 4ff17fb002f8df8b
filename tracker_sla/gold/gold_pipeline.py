"""Gold layer: compute SLA metrics, dashboard figures and reports."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd

from tracker_sla.sla.business_hours import (
    BUSINESS_HOURS_PER_DAY,
    calculate_business_hours,
    format_minutes,
)
from tracker_sla.sla.indicator import SLA_ISSUE_TYPES
from tracker_sla.sla.sla_calculation import check_sla_status, get_expected_sla_hours
from tracker_sla.utils.config import (
    DASHBOARD_OVERDUE_HOURS,
    GOLD_DIR,
    SILVER_CLEAN_DIR,
    SLA_HOURS_BY_PRIORITY,
)
from tracker_sla.utils.date_utils import issue_started_at, period_cutoff, to_naive_datetime

logger = logging.getLogger(__name__)

SLA_COLUMNS = [
    "resolution_time_minutes",
    "first_response_minutes",
    "elapsed_minutes",
    "sla_status",
    "percentage_used",
    "remaining_minutes",
    "resolution_time_display",
]


def read_silver(silver_path: Path) -> pd.DataFrame:
    """Read Silver data from disk."""
    return pd.read_parquet(silver_path)


def _started_at(df: pd.DataFrame) -> pd.Series:
    return df["reported_at"].fillna(df["created_at"])


def _row_sla_fields(row: pd.Series, now: datetime) -> Dict[str, object]:
    started_at = issue_started_at(row)
    resolved_at = to_naive_datetime(row["resolved_at"])
    first_response_at = to_naive_datetime(row["first_response_at"])

    # Open issues are measured up to now, resolved ones up to resolution.
    measured_until = resolved_at if resolved_at is not None else now
    result = check_sla_status(started_at, row["expected_sla_hours"], measured_until)

    resolution_minutes: object = pd.NA
    if resolved_at is not None:
        resolution_minutes = row["resolution_time_minutes"]
        if pd.isna(resolution_minutes):
            resolution_minutes = calculate_business_hours(started_at, resolved_at)
        resolution_minutes = int(resolution_minutes)

    first_response_minutes: object = pd.NA
    if first_response_at is not None:
        first_response_minutes = calculate_business_hours(started_at, first_response_at)

    return {
        "resolution_time_minutes": resolution_minutes,
        "first_response_minutes": first_response_minutes,
        "elapsed_minutes": result.elapsed_minutes,
        "sla_status": result.status.value,
        "percentage_used": result.percentage_used,
        "remaining_minutes": result.remaining_minutes,
        "resolution_time_display": (
            format_minutes(resolution_minutes) if resolved_at is not None else pd.NA
        ),
    }


def calculate_sla_metrics(df: pd.DataFrame, now: Optional[datetime] = None) -> pd.DataFrame:
    """Calculate SLA metrics for every issue, open or resolved."""
    if now is None:
        now = datetime.now()
    df = df.copy()
    df["started_at"] = _started_at(df)
    df["expected_sla_hours"] = df["priority"].apply(get_expected_sla_hours).astype("int64")

    fields = [_row_sla_fields(row, now) for _, row in df.iterrows()]
    metrics = pd.DataFrame(fields, index=df.index, columns=SLA_COLUMNS)
    for col in SLA_COLUMNS:
        df[col] = metrics[col]

    for col in ["resolution_time_minutes", "first_response_minutes"]:
        df[col] = df[col].astype("Int64")
    for col in ["elapsed_minutes", "percentage_used", "remaining_minutes"]:
        df[col] = df[col].astype("int64")
    for col in ["sla_status", "resolution_time_display"]:
        df[col] = df[col].astype("string")
    return df


def filter_period(
    df: pd.DataFrame,
    period: str,
    now: datetime,
    project_id: Optional[str] = None,
) -> pd.DataFrame:
    """Keep issues reported inside the period, optionally for one project."""
    cutoff = period_cutoff(period, now)
    mask = pd.Series(True, index=df.index)
    if cutoff is not None:
        mask &= _started_at(df) >= cutoff
    if project_id is not None:
        mask &= df["project_id"] == project_id
    return df[mask.fillna(False).astype(bool)]


def build_dashboard_metrics(df: pd.DataFrame) -> Dict[str, object]:
    """
    Aggregate maintenance dashboard figures.

    Only MAINTENANCE and BUG issues are counted. Expects the columns added
    by calculate_sla_metrics.
    """
    df = df[df["issue_type"].isin(SLA_ISSUE_TYPES).fillna(False).astype(bool)]
    resolved = df[df["resolved_at"].notna()]
    open_issues = df[df["resolved_at"].isna()]
    overdue = open_issues[open_issues["elapsed_minutes"] > DASHBOARD_OVERDUE_HOURS * 60]

    resolution_times = resolved["resolution_time_minutes"].dropna()
    first_response_times = df["first_response_minutes"].dropna()
    total = int(len(df))

    return {
        "total": total,
        "resolved": int(len(resolved)),
        "open": int(len(open_issues)),
        "overdue": int(len(overdue)),
        "avg_resolution_minutes": (
            float(resolution_times.mean()) if len(resolution_times) else 0.0
        ),
        "avg_first_response_minutes": (
            float(first_response_times.mean()) if len(first_response_times) else 0.0
        ),
        "total_reopens": int(df["reopen_count"].sum()),
        "resolution_rate": (len(resolved) / total * 100) if total else 0.0,
    }


def format_dashboard_time(minutes: float) -> str:
    """Format an average like the dashboard cards: "4h 30m" or "3d 2h"."""
    hours = int(minutes // 60)
    mins = int(minutes % 60)
    if hours >= 24:
        days, remaining_hours = divmod(hours, BUSINESS_HOURS_PER_DAY)
        return f"{days}d {remaining_hours}h"
    return f"{hours}h {mins}m"


def format_dashboard_output(metrics: Dict[str, object]) -> str:
    """Format dashboard metrics into a readable string."""
    sections: List[str] = [
        f"Issues: {metrics['total']} "
        f"(resolved {metrics['resolved']}, open {metrics['open']}, overdue {metrics['overdue']})",
        f"Avg resolution time: {format_dashboard_time(metrics['avg_resolution_minutes'])}",
        f"Avg first response: {format_dashboard_time(metrics['avg_first_response_minutes'])}",
        f"Total reopens: {metrics['total_reopens']}",
        f"Resolution rate: {metrics['resolution_rate']:.1f}%",
    ]
    return "\n".join(sections)


def select_gold_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Select final Gold columns for analytics."""
    drop_cols = [col for col in ["title", "source_file"] if col in df.columns]
    return df.drop(columns=drop_cols)


def write_gold(df: pd.DataFrame, output_path: Path) -> Path:
    """Write Gold data to disk."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    df.to_parquet(output_path, index=False)
    return output_path


def build_sla_reports(df: pd.DataFrame) -> Dict[str, pd.DataFrame]:
    """Build aggregated SLA reports from Gold data."""
    required_cols = {
        "issue_id",
        "issue_type",
        "assignee_name",
        "priority",
        "resolved_at",
        "resolution_time_minutes",
        "sla_status",
    }
    missing = required_cols - set(df.columns)
    if missing:
        missing_list = ", ".join(sorted(missing))
        raise ValueError(f"Gold data is missing required columns: {missing_list}")

    def _by(column: str) -> pd.DataFrame:
        report = (
            df.groupby(column, dropna=False)
            .agg(
                issue_count=("issue_id", "count"),
                resolved_count=("resolved_at", "count"),
                avg_resolution_minutes=("resolution_time_minutes", "mean"),
            )
            .reset_index()
        )
        report["avg_resolution_minutes"] = (
            report["avg_resolution_minutes"].astype("Float64").round(2)
        )
        return report

    by_status = df.groupby("sla_status", dropna=False).size().reset_index(name="issue_count")

    # Every known priority is listed, including those with no issues.
    by_priority = (
        df["priority"]
        .value_counts()
        .reindex(list(SLA_HOURS_BY_PRIORITY), fill_value=0)
        .rename_axis("priority")
        .reset_index(name="issue_count")
    )

    return {
        "sla_avg_by_assignee.csv": _by("assignee_name"),
        "sla_avg_by_issue_type.csv": _by("issue_type"),
        "sla_status_counts.csv": by_status,
        "sla_counts_by_priority.csv": by_priority,
    }


def write_sla_reports(df: pd.DataFrame, output_dir: Path = GOLD_DIR / "reports") -> Dict[str, Path]:
    """Write aggregated SLA reports to disk."""
    output_dir.mkdir(parents=True, exist_ok=True)
    reports = build_sla_reports(df)
    output_paths: Dict[str, Path] = {}
    for filename, report_df in reports.items():
        output_path = output_dir / filename
        report_df.to_csv(output_path, index=False)
        output_paths[filename] = output_path
    return output_paths


def run_gold(
    silver_path: Path = SILVER_CLEAN_DIR / "issues_silver.parquet",
    output_dir: Path = GOLD_DIR,
    output_filename: str = "issues_gold.parquet",
    now: Optional[datetime] = None,
    period: str = "all",
    project_id: Optional[str] = None,
) -> Path:
    """Execute the Gold pipeline."""
    if now is None:
        now = datetime.now()
    silver_df = read_silver(silver_path)
    with_sla = calculate_sla_metrics(silver_df, now)
    final_df = select_gold_columns(with_sla)
    output_path = write_gold(final_df, output_dir / output_filename)
    report_paths = write_sla_reports(final_df, output_dir / "reports")
    logger.info("Wrote %d Gold rows to %s and %d reports", len(final_df), output_path, len(report_paths))

    dashboard = build_dashboard_metrics(filter_period(final_df, period, now, project_id))
    logger.info("Dashboard (%s):\n%s", period, format_dashboard_output(dashboard))
    return output_path
