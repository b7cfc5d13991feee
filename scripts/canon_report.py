#!/usr/bin/env python3
"""Build the curation dashboards for a canon and export them."""

import argparse
import logging
import sys
from datetime import date
from pathlib import Path

# Ensure project root is on sys.path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from canon.core.config import ConfigurationError, default_config, load_config
from canon.core.database import CanonDatabase
from canon.exporters import export_all
from canon.pipeline.enrichment import EnrichmentRunSummary
from canon.quality.audit import audit_source_dates, source_quality_report
from canon.scoring.coverage import build_topic_coverage
from canon.scoring.health import canon_health
from canon.scoring.priority import build_curation_queue

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("report")


def _latest_run(db: CanonDatabase) -> EnrichmentRunSummary | None:
    completed = [r for r in db.get_runs() if r["status"] == "completed" and r["summary"]]
    if not completed:
        return None
    return EnrichmentRunSummary.model_validate(completed[-1]["summary"])


def build_reports(
    canon_name: str,
    output_dir: str,
    data_root: str | None = None,
    config_path: str | None = None,
    today: date | None = None,
) -> dict:
    """Score the canon as of ``today`` and write every report under ``output_dir``."""
    config = load_config(config_path) if config_path else default_config()
    today = today or date.today()

    db = CanonDatabase(canon_name, data_root=Path(data_root) if data_root else None)
    try:
        authors = db.list_authors()
        camps = db.list_camps()
        run = _latest_run(db)
    finally:
        db.close()
    logger.info("Loaded %d authors and %d camps from %s", len(authors), len(camps), canon_name)

    queue = build_curation_queue(authors, camps, today, config)
    coverage = build_topic_coverage(camps, authors, today, config)
    health = canon_health(authors, camps, today, config)
    quality = source_quality_report(authors)

    audit = audit_source_dates(authors)
    logger.info(
        "Source dates: %d specific, %d year-only, %d missing (%d need enrichment)",
        audit.summary.specific,
        audit.summary.year_only,
        audit.summary.missing,
        audit.summary.needs_enrichment,
    )

    paths = export_all(output_dir, queue, coverage, health, source_quality=quality, run=run)
    for key, path in paths.items():
        logger.info("  %s: %s", key, path)
    return paths


def main():
    parser = argparse.ArgumentParser(description="Export canon curation reports")
    parser.add_argument("--name", required=True, help="Canon name (database directory)")
    parser.add_argument("--data-root", default=None, help="Root directory holding canon databases")
    parser.add_argument("--config", default=None, help="Path to curation config YAML")
    parser.add_argument("--output-dir", default=None, help="Report directory (default: data/<name>/reports)")
    parser.add_argument("--today", default=None, help="Score as of this date (YYYY-MM-DD)")
    args = parser.parse_args()

    output_dir = args.output_dir or str(Path(args.data_root or "data") / args.name / "reports")
    today = date.fromisoformat(args.today) if args.today else None

    try:
        build_reports(
            args.name,
            output_dir,
            data_root=args.data_root,
            config_path=args.config,
            today=today,
        )
    except ConfigurationError as exc:
        logger.error("%s", exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
