"""Export convenience function."""

import logging
from pathlib import Path

from canon.exporters.reports import export_json, export_queue_csv, export_workbook
from canon.pipeline.enrichment import EnrichmentRunSummary
from canon.quality.audit import SourceQualityReport
from canon.scoring.coverage import TopicCoverageReport
from canon.scoring.health import CanonHealth
from canon.scoring.priority import CurationQueue

logger = logging.getLogger(__name__)


def export_all(
    output_dir: str,
    queue: CurationQueue,
    coverage: TopicCoverageReport,
    health: CanonHealth,
    source_quality: SourceQualityReport | None = None,
    run: EnrichmentRunSummary | None = None,
) -> dict:
    """Run all exports and return dict of file paths created."""
    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)

    paths = {}

    reports = {
        "curation_queue": queue.to_report(),
        "topic_coverage": coverage.to_report(),
        "canon_health": health.to_report(),
    }
    if source_quality is not None:
        reports["source_quality"] = source_quality.to_report()
    if run is not None:
        reports["enrichment_run"] = run.to_report()

    for name, report in reports.items():
        path = str(out / f"{name}.json")
        export_json(report, path)
        paths[f"{name}_json"] = path

    queue_csv_path = str(out / "curation_queue.csv")
    export_queue_csv(queue, queue_csv_path)
    paths["curation_queue_csv"] = queue_csv_path

    workbook_path = str(out / "canon_report.xlsx")
    export_workbook(queue, coverage, health.domain_breakdown, workbook_path, run=run)
    paths["workbook_xlsx"] = workbook_path

    logger.info("All exports written to %s", output_dir)
    return paths
