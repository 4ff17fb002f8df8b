"""Main orchestration for the issue SLA pipeline."""

from __future__ import annotations

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from tracker_sla.bronze.bronze_pipeline import run_bronze
from tracker_sla.gold.gold_pipeline import run_gold
from tracker_sla.silver.silver_pipeline import run_silver
from tracker_sla.utils.config import DATA_DIR, ISSUES_EXPORT_PATH
from tracker_sla.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


def run_pipeline(
    export_path: Optional[Path] = None,
    now: Optional[datetime] = None,
    data_dir: Path = DATA_DIR,
) -> Path:
    """Run the end-to-end pipeline and return the Gold output path."""
    export_path = Path(export_path) if export_path is not None else ISSUES_EXPORT_PATH
    if not export_path.exists():
        raise FileNotFoundError(f"Issue export not found: {export_path}")

    logger.info("Running SLA pipeline for %s", export_path)
    # Orchestrate all layers in order.
    bronze_path = run_bronze(export_path, output_dir=data_dir / "bronze")
    silver_path = run_silver(
        bronze_path,
        output_dir=data_dir / "silver" / "clean",
        rejects_dir=data_dir / "silver" / "rejects",
    )
    return run_gold(silver_path, output_dir=data_dir / "gold", now=now)


if __name__ == "__main__":
    setup_logging()
    run_pipeline(Path(sys.argv[1]) if len(sys.argv) > 1 else None)
