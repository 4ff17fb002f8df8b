"""Bronze layer: normalize and flatten the raw issue export."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, List, Sequence, Union

import pandas as pd

from tracker_sla.utils.config import BRONZE_DIR

logger = logging.getLogger(__name__)

# Flattened export field -> Bronze column.
COLUMNS_MAP = {
    "id": "issue_id",
    "identifier": "identifier",
    "title": "title",
    "type": "issue_type",
    "priority": "priority",
    "status.type": "status_type",
    "status.name": "status_name",
    "project.id": "project_id",
    "project.name": "project_name",
    "assignee.name": "assignee_name",
    "createdAt": "created_at",
    "reportedAt": "reported_at",
    "firstResponseAt": "first_response_at",
    "resolvedAt": "resolved_at",
    "resolutionTimeMinutes": "resolution_time_minutes",
    "reopenCount": "reopen_count",
}

# Exports that carry ids instead of nested objects.
FALLBACK_MAP = {
    "projectId": "project_id",
    "statusType": "status_type",
    "assigneeName": "assignee_name",
}


def read_raw_json(raw_file_path: Path) -> Dict:
    """Read the raw JSON export from disk."""
    with raw_file_path.open("r", encoding="utf-8") as file:
        return json.load(file)


def validate_raw_schema(raw_json: Dict) -> None:
    """Validate minimal raw JSON structure."""
    if not isinstance(raw_json, dict) or "issues" not in raw_json:
        raise ValueError("Raw JSON is missing required 'issues' field.")
    if not isinstance(raw_json["issues"], list):
        raise ValueError("Raw JSON 'issues' field must be a list.")


def normalize_issues(raw_json: Dict) -> pd.DataFrame:
    """Normalize nested issue JSON into a flat table."""
    validate_raw_schema(raw_json)
    return pd.json_normalize(raw_json["issues"])


def select_and_rename_fields(df: pd.DataFrame) -> pd.DataFrame:
    """Select and rename relevant fields for Bronze."""
    selected = df.copy()

    for source_col, target_col in FALLBACK_MAP.items():
        if target_col not in selected.columns and source_col in selected.columns:
            selected[target_col] = selected[source_col]

    selected = selected.rename(
        columns={
            source: target
            for source, target in COLUMNS_MAP.items()
            if source in selected.columns and target not in selected.columns
        }
    )

    for target_col in COLUMNS_MAP.values():
        if target_col not in selected.columns:
            selected[target_col] = pd.NA

    selected["issue_id"] = selected["issue_id"].astype("string")
    return selected[list(COLUMNS_MAP.values())]


def add_source_file(df: pd.DataFrame, source_file: Path) -> pd.DataFrame:
    """Add a source file column for lineage."""
    df = df.copy()
    df["source_file"] = source_file.name
    return df


def write_bronze(df: pd.DataFrame, output_path: Path) -> Path:
    """Write Bronze data to disk."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    df.to_parquet(output_path, index=False)
    return output_path


RawPathInput = Union[Path, str, Sequence[Path], Sequence[str]]


def _coerce_raw_paths(raw_file_path: RawPathInput) -> List[Path]:
    if isinstance(raw_file_path, (Path, str)):
        return [Path(raw_file_path)]
    return [Path(p) for p in raw_file_path]


def build_bronze(raw_file_path: RawPathInput) -> pd.DataFrame:
    """Read and normalize one or more raw exports into a single frame."""
    frames: List[pd.DataFrame] = []
    for path in _coerce_raw_paths(raw_file_path):
        raw_json = read_raw_json(path)
        normalized = normalize_issues(raw_json)
        bronze_df = select_and_rename_fields(normalized)
        frames.append(add_source_file(bronze_df, path))
        logger.info("Loaded %d issues from %s", len(bronze_df), path)
    if not frames:
        return pd.DataFrame(columns=[*COLUMNS_MAP.values(), "source_file"])
    return pd.concat(frames, ignore_index=True)


def run_bronze(
    raw_file_path: RawPathInput,
    output_dir: Path = BRONZE_DIR,
    output_filename: str = "issues_bronze.parquet",
) -> Path:
    """Execute the Bronze pipeline."""
    bronze_df = build_bronze(raw_file_path)
    output_path = write_bronze(bronze_df, output_dir / output_filename)
    logger.info("Wrote %d Bronze rows to %s", len(bronze_df), output_path)
    return output_path
