"""Report exports: JSON documents, curation-queue CSV, and an Excel workbook."""

import csv
import json
import logging

import openpyxl
from openpyxl.styles import Font

from canon.pipeline.enrichment import EnrichmentRunSummary
from canon.scoring.coverage import TopicCoverageReport
from canon.scoring.health import DomainBreakdown
from canon.scoring.priority import CurationQueue

logger = logging.getLogger(__name__)

QUEUE_COLUMNS = [
    "id",
    "name",
    "affiliation",
    "urgency",
    "priority_score",
    "priority_reasons",
    "source_count",
    "most_recent_source_date",
    "days_since_last_source",
    "has_position_summary",
    "camps",
]


# ── JSON ─────────────────────────────────────────────────────────────


def export_json(report: dict, output_path: str) -> None:
    """Write a report dict as indented JSON."""
    with open(output_path, "w") as f:
        json.dump(report, f, indent=2, default=str)
    logger.info("Report exported to %s", output_path)


# ── CSV Export ───────────────────────────────────────────────────────


def _queue_rows(queue: CurationQueue) -> list[list]:
    rows = []
    for item in queue.queue:
        rows.append([
            item.id,
            item.name,
            item.affiliation or "",
            item.urgency,
            item.priority_score,
            "; ".join(item.priority_reasons),
            item.source_count,
            item.most_recent_source_date.isoformat() if item.most_recent_source_date else "",
            "" if item.days_since_last_source is None else item.days_since_last_source,
            item.has_position_summary,
            "; ".join(item.camps),
        ])
    return rows


def export_queue_csv(queue: CurationQueue, output_path: str) -> None:
    """Export the curation queue as CSV, most urgent first."""
    rows = _queue_rows(queue)
    with open(output_path, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(QUEUE_COLUMNS)
        writer.writerows(rows)

    logger.info("Curation queue CSV exported to %s (%d rows)", output_path, len(rows))


# ── Excel Export ─────────────────────────────────────────────────────


def export_workbook(
    queue: CurationQueue,
    coverage: TopicCoverageReport,
    domains: list[DomainBreakdown],
    output_path: str,
    run: EnrichmentRunSummary | None = None,
) -> None:
    """Export the dashboard reports as one workbook, one sheet each."""
    wb = openpyxl.Workbook()

    # Sheet 1: Curation Queue
    ws1 = wb.active
    ws1.title = "Curation Queue"
    ws1.append(QUEUE_COLUMNS)
    for row in _queue_rows(queue):
        ws1.append(row)
    _style_header(ws1)

    # Sheet 2: Topic Coverage
    ws2 = wb.create_sheet("Topic Coverage")
    ws2.append([
        "topic", "domain_id", "level", "score", "author_count", "source_count",
        "days_since_most_recent", "is_fast_moving", "insight",
    ])
    for t in sorted(coverage.all_topics, key=lambda t: t.coverage.score):
        ws2.append([
            t.topic,
            t.domain_id,
            t.coverage.level,
            t.coverage.score,
            t.author_count,
            t.source_count,
            t.days_since_most_recent,
            t.is_fast_moving,
            t.insight,
        ])
    _style_header(ws2)

    # Sheet 3: Domain Breakdown
    ws3 = wb.create_sheet("Domain Breakdown")
    ws3.append(["domain", "camp_count", "author_count", "source_count", "avg_days_since_update"])
    for d in domains:
        ws3.append([d.domain, d.camp_count, d.author_count, d.source_count, d.avg_days_since_update])
    _style_header(ws3)

    # Sheet 4: Enrichment Run (optional)
    if run is not None:
        ws4 = wb.create_sheet("Enrichment Run")
        ws4.append(["author_id", "author_name", "status", "enriched_count", "total_sources", "error"])
        for r in run.results:
            ws4.append([
                r.author_id, r.author_name, r.status, r.enriched_count, r.total_sources, r.error or "",
            ])
        _style_header(ws4)

    wb.save(output_path)
    logger.info("Canon workbook exported to %s", output_path)


def _style_header(ws) -> None:
    """Bold the header row."""
    for cell in ws[1]:
        cell.font = Font(bold=True)
