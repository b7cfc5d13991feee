#!/usr/bin/env python3
"""Seed a canon database from a JSON export of authors and camps."""

import argparse
import json
import logging
import sys
from pathlib import Path

# Ensure project root is on sys.path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from canon.core.config import ConfigurationError
from canon.core.database import CanonDatabase
from canon.quality.validation import validate_sources

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("import")


def main():
    parser = argparse.ArgumentParser(description="Import authors and camps into a canon database")
    parser.add_argument("export", help="Path to the JSON export ({authors, camps})")
    parser.add_argument("--name", required=True, help="Canon name (database directory)")
    parser.add_argument("--data-root", default=None, help="Root directory holding canon databases")
    args = parser.parse_args()

    if not Path(args.export).is_file():
        logger.error("Export file not found: %s", args.export)
        sys.exit(1)

    try:
        db = CanonDatabase(args.name, data_root=Path(args.data_root) if args.data_root else None)
    except ConfigurationError as exc:
        logger.error("%s", exc)
        sys.exit(1)

    try:
        counts = db.import_canon(args.export)
        logger.info("Imported %d authors, %d camps", counts["authors"], counts["camps"])

        # Warn about sources that would fail the admin form
        for author in db.list_authors():
            if not author.sources:
                continue
            batch = validate_sources(author.sources)
            if not batch.all_valid:
                logger.warning(
                    "%s: %d/%d sources invalid",
                    author.name,
                    batch.summary.invalid,
                    batch.summary.total,
                )
        logger.info("Canon stats: %s", json.dumps(db.get_canon_stats(), indent=2))
    finally:
        db.close()


if __name__ == "__main__":
    main()
