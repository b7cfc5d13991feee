#!/usr/bin/env python3
"""Batch date enrichment runner for a canon database."""

import argparse
import asyncio
import json
import logging
import sys
import time
from pathlib import Path

# Ensure project root is on sys.path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from canon.agents.date_enricher import DateEnricher
from canon.core.config import ConfigurationError, CurationConfig, default_config, load_config
from canon.core.database import CanonDatabase
from canon.exporters.reports import export_json
from canon.pipeline.enrichment import EnrichmentRunSummary, run_enrichment

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("enrichment")


# ── Runner ───────────────────────────────────────────────────────────


async def enrich_canon(db: CanonDatabase, config: CurationConfig) -> EnrichmentRunSummary:
    enricher = DateEnricher(model=config.model)
    return await run_enrichment(db, enricher, config)


def run(
    canon_name: str,
    data_root: str | None = None,
    config_path: str | None = None,
    output: str | None = None,
) -> EnrichmentRunSummary:
    """Run one enrichment pass and record it in the canon's run log."""
    t_start = time.time()

    config = load_config(config_path) if config_path else default_config()
    logger.info(
        "Config: batch size %d, model %s (hash %s)",
        config.batch_size,
        config.model,
        config.config_hash()[:12],
    )

    db = CanonDatabase(canon_name, data_root=Path(data_root) if data_root else None)
    logger.info("Database: %s", db.db_path)

    run_id = db.start_run(config.config_hash())
    status = "failed"
    try:
        summary = asyncio.run(enrich_canon(db, config))
        db.finish_run(run_id, "completed", summary.to_report())
        status = "completed"
    except Exception as exc:
        logger.error("Enrichment run failed: %s", exc, exc_info=True)
        db.finish_run(run_id, "failed", {"error": str(exc)})
        raise
    finally:
        elapsed = time.time() - t_start
        logger.info("=" * 60)
        logger.info("ENRICHMENT %s in %.1fs", status.upper(), elapsed)
        logger.info("Canon stats: %s", json.dumps(db.get_canon_stats(), indent=2))
        db.close()

    logger.info("Authors: %d total, %d processed, %d failed",
                summary.total_authors, summary.processed_authors, summary.failed_authors)
    logger.info("Sources enriched: %d", summary.enriched_sources)
    for top in summary.top_enriched:
        logger.info("  %s: %d/%d", top.name, top.enriched_count, top.total_sources)

    if output:
        export_json(summary.to_report(), output)
    return summary


# ── CLI ──────────────────────────────────────────────────────────────


def main():
    parser = argparse.ArgumentParser(description="Enrich missing source dates across the canon")
    parser.add_argument("--name", required=True, help="Canon name (database directory)")
    parser.add_argument("--data-root", default=None, help="Root directory holding canon databases")
    parser.add_argument("--config", default=None, help="Path to curation config YAML")
    parser.add_argument("--output", default=None, help="Write the run report JSON here")
    args = parser.parse_args()

    try:
        run(args.name, data_root=args.data_root, config_path=args.config, output=args.output)
    except ConfigurationError as exc:
        logger.error("%s", exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
