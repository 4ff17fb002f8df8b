"""Configuration utilities and environment variables."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict


def _get_project_root() -> Path:
    """Return the project root directory based on this file location."""
    # Keep project-relative paths stable regardless of CWD.
    return Path(__file__).resolve().parents[2]


PROJECT_ROOT = _get_project_root()


def _load_env_file(env_path: Path) -> None:
    """Load key=value pairs from a .env file using stdlib only."""
    if not env_path.exists():
        return
    # Only set env vars that are not already defined.
    for line in env_path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        os.environ.setdefault(key, value)


# Load environment variables from local .env if present (never committed).
_load_env_file(PROJECT_ROOT / ".env")

DATA_DIR = Path(os.getenv("DATA_DIR", str(PROJECT_ROOT / "data")))
RAW_DIR = DATA_DIR / "raw"
BRONZE_DIR = DATA_DIR / "bronze"
SILVER_DIR = DATA_DIR / "silver"
SILVER_CLEAN_DIR = SILVER_DIR / "clean"
SILVER_REJECTS_DIR = SILVER_DIR / "rejects"
GOLD_DIR = DATA_DIR / "gold"

ISSUES_EXPORT_FILENAME = os.getenv("ISSUES_EXPORT_FILENAME", "issues_export.json")
ISSUES_EXPORT_PATH = RAW_DIR / ISSUES_EXPORT_FILENAME

# Wall-clock zone used to make timezone-aware export timestamps naive.
LOCAL_TIMEZONE = os.getenv("LOCAL_TIMEZONE", "UTC")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

DEFAULT_SLA_HOURS = int(os.getenv("DEFAULT_SLA_HOURS", "24"))
SLA_HOURS_BY_PRIORITY: Dict[str, int] = {
    "URGENT": int(os.getenv("SLA_HOURS_URGENT", "4")),
    "HIGH": int(os.getenv("SLA_HOURS_HIGH", "8")),
    "MEDIUM": int(os.getenv("SLA_HOURS_MEDIUM", "24")),
    "LOW": int(os.getenv("SLA_HOURS_LOW", "40")),
    "NO_PRIORITY": int(os.getenv("SLA_HOURS_NO_PRIORITY", "40")),
}

# Open issues past this many business hours count as overdue on the dashboard.
DASHBOARD_OVERDUE_HOURS = int(os.getenv("DASHBOARD_OVERDUE_HOURS", "18"))
