"""Silver layer: clean and filter Bronze data."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Tuple

import pandas as pd

from tracker_sla.utils.config import SILVER_CLEAN_DIR, SILVER_REJECTS_DIR
from tracker_sla.utils.date_utils import to_naive_datetime

logger = logging.getLogger(__name__)

TIMESTAMP_COLUMNS = ["created_at", "reported_at", "first_response_at", "resolved_at"]
CODE_COLUMNS = ["issue_type", "priority", "status_type"]


def read_bronze(bronze_path: Path) -> pd.DataFrame:
    """Read Bronze data from disk."""
    return pd.read_parquet(bronze_path)


def _normalize_code(series: pd.Series) -> pd.Series:
    # "In Progress", "in-progress" and "IN_PROGRESS" all become IN_PROGRESS.
    return (
        series.astype("string")
        .str.strip()
        .str.upper()
        .str.replace(r"[\s\-]+", "_", regex=True)
    )


def clean_data(df: pd.DataFrame) -> pd.DataFrame:
    """
    Clean and standardize data types.

    Timestamps become naive local wall-clock datetimes, the form the
    business-hours engine works on.
    """
    df = df.copy()
    for col in TIMESTAMP_COLUMNS:
        df[col] = pd.to_datetime(df[col].map(to_naive_datetime), errors="coerce")
    for col in CODE_COLUMNS:
        df[col] = _normalize_code(df[col])
    df["assignee_name"] = df["assignee_name"].astype("string").fillna("Unassigned")
    df["reopen_count"] = (
        pd.to_numeric(df["reopen_count"], errors="coerce").fillna(0).astype("int64")
    )
    df["resolution_time_minutes"] = pd.to_numeric(
        df["resolution_time_minutes"], errors="coerce"
    ).round().astype("Int64")
    return df


def split_quality_checks(df: pd.DataFrame) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Split rows into valid and rejected sets with a reject_reason column.
    """
    df = df.copy()
    missing_issue_id = df["issue_id"].isna()
    missing_created_at = df["created_at"].isna()
    duplicate_issue_id = df["issue_id"].duplicated(keep="first") & ~missing_issue_id
    resolved_before_created = df["resolved_at"].notna() & (
        df["resolved_at"] < df["created_at"]
    )

    # Tag rows with a single reject reason; the last matching check wins.
    reject_reason = pd.Series(pd.NA, index=df.index, dtype="string")
    reject_reason = (
        reject_reason.mask(resolved_before_created, "resolved_before_created")
        .mask(duplicate_issue_id, "duplicate_issue_id")
        .mask(missing_created_at, "missing_created_at")
        .mask(missing_issue_id, "missing_issue_id")
    )

    rejects = df[reject_reason.notna()].copy()
    rejects["reject_reason"] = reject_reason[reject_reason.notna()]

    valid = df[reject_reason.isna()].copy()
    return valid, rejects


def write_silver(df: pd.DataFrame, output_path: Path) -> Path:
    """Write Silver data to disk."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    df.to_parquet(output_path, index=False)
    return output_path


def write_rejects(
    df: pd.DataFrame,
    output_dir: Path = SILVER_REJECTS_DIR,
    output_filename: str = "silver_rejects.parquet",
) -> Path:
    """Write rejected rows to the Silver rejects folder."""
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / output_filename
    df.to_parquet(output_path, index=False)
    return output_path


def run_silver(
    bronze_path: Path,
    output_dir: Path = SILVER_CLEAN_DIR,
    rejects_dir: Path = SILVER_REJECTS_DIR,
    output_filename: str = "issues_silver.parquet",
) -> Path:
    """Execute the Silver pipeline."""
    df = clean_data(read_bronze(bronze_path))
    valid, rejects = split_quality_checks(df)
    if not rejects.empty:
        counts = rejects["reject_reason"].value_counts().to_dict()
        logger.warning("Rejected %d issues: %s", len(rejects), counts)
    write_rejects(rejects, output_dir=rejects_dir)
    output_path = write_silver(valid, output_dir / output_filename)
    logger.info("Wrote %d Silver rows to %s", len(valid), output_path)
    return output_path
