"""Author curation priority: additive score, urgency band, and the curation queue."""

import logging
from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from canon.core.config import CurationConfig, StalenessThresholds
from canon.core.models import Author, Camp, CampAuthor
from canon.scoring.staleness import author_staleness

logger = logging.getLogger(__name__)

Urgency = Literal["critical", "high", "medium", "low"]

NO_SOURCES_POINTS = 100
STALE_POINTS = (80, 50, 30)  # > critical / > high / > medium day thresholds
NO_POSITION_SUMMARY_POINTS = 40
MANY_CAMPS_POINTS = 10
MANY_CAMPS = 3

URGENCY_BANDS: tuple[tuple[int, Urgency], ...] = (
    (100, "critical"),
    (60, "high"),
    (30, "medium"),
)

QUEUE_LIMIT = 50
URGENCY_LIMIT = 20


class _Report(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CurationQueueItem(_Report):
    """One author with its computed priority; rebuilt on every run."""

    id: str
    name: str
    affiliation: Optional[str] = None
    source_count: int
    most_recent_source_date: Optional[date] = None
    days_since_last_source: Optional[int] = None
    has_position_summary: bool
    camps: list[str] = Field(default_factory=list)
    priority_score: int
    priority_reasons: list[str] = Field(default_factory=list)
    urgency: Urgency


class QueueSummary(_Report):
    total: int
    critical: int
    high: int
    medium: int
    low: int
    without_sources: int
    without_position_summary: int


class CurationQueue(_Report):
    summary: QueueSummary
    queue: list[CurationQueueItem]
    by_urgency: dict[str, list[CurationQueueItem]]

    def to_report(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


# ── Scoring ──────────────────────────────────────────────────────────


def score_author(
    source_count: int,
    days_since_last_source: int | None,
    has_position_summary: bool,
    camp_count: int,
    thresholds: StalenessThresholds | None = None,
) -> tuple[int, list[str]]:
    """Return (priority score, human-readable reasons). Higher is more urgent."""
    t = thresholds or StalenessThresholds()
    score = 0
    reasons: list[str] = []

    if source_count == 0:
        score += NO_SOURCES_POINTS
        reasons.append("No sources")

    days = days_since_last_source
    if days is not None:
        if days > t.author_critical_days:
            score += STALE_POINTS[0]
            reasons.append(f"Sources {round(days / 365)} years old")
        elif days > t.author_high_days:
            score += STALE_POINTS[1]
            reasons.append(f"Sources {round(days / 30)} months old")
        elif days > t.author_medium_days:
            score += STALE_POINTS[2]
            reasons.append(f"Sources {round(days / 30)} months old")

    if not has_position_summary:
        score += NO_POSITION_SUMMARY_POINTS
        reasons.append("No position summary")

    if camp_count >= MANY_CAMPS:
        score += MANY_CAMPS_POINTS
        reasons.append(f"In {camp_count} camps")

    return score, reasons


def urgency_band(score: int) -> Urgency:
    for floor, band in URGENCY_BANDS:
        if score >= floor:
            return band
    return "low"


# ── Queue ────────────────────────────────────────────────────────────


def memberships_by_author(camps: list[Camp]) -> dict[str, list[tuple[Camp, CampAuthor]]]:
    index: dict[str, list[tuple[Camp, CampAuthor]]] = {}
    for camp in camps:
        for member in camp.authors:
            index.setdefault(member.author_id, []).append((camp, member))
    return index


def build_queue_item(
    author: Author,
    memberships: list[tuple[Camp, CampAuthor]],
    today: date,
    config: CurationConfig,
) -> CurationQueueItem:
    days = author_staleness(author, today)
    has_summary = any(m.has_position_summary for _, m in memberships)
    camp_labels = [camp.label for camp, _ in memberships]

    score, reasons = score_author(
        source_count=len(author.sources),
        days_since_last_source=days,
        has_position_summary=has_summary,
        camp_count=len(camp_labels),
        thresholds=config.staleness_thresholds,
    )

    return CurationQueueItem(
        id=author.id,
        name=author.name,
        affiliation=author.affiliation,
        source_count=len(author.sources),
        most_recent_source_date=author.most_recent_source_date,
        days_since_last_source=days,
        has_position_summary=has_summary,
        camps=camp_labels,
        priority_score=score,
        priority_reasons=reasons,
        urgency=urgency_band(score),
    )


def build_curation_queue(
    authors: list[Author],
    camps: list[Camp],
    today: date,
    config: CurationConfig,
) -> CurationQueue:
    """Score every author; the queue holds only those with a non-zero score."""
    index = memberships_by_author(camps)
    items = [build_queue_item(a, index.get(a.id, []), today, config) for a in authors]

    # sorted() is stable, so equal scores keep datastore order
    ranked = sorted(items, key=lambda i: i.priority_score, reverse=True)
    needing_attention = [i for i in ranked if i.priority_score > 0]

    by_band = {
        band: [i for i in needing_attention if i.urgency == band]
        for band in ("critical", "high", "medium", "low")
    }

    summary = QueueSummary(
        total=len(items),
        critical=sum(1 for i in items if i.urgency == "critical"),
        high=sum(1 for i in items if i.urgency == "high"),
        medium=sum(1 for i in items if i.urgency == "medium"),
        low=sum(1 for i in items if i.urgency == "low"),
        without_sources=sum(1 for i in items if i.source_count == 0),
        without_position_summary=sum(1 for i in items if not i.has_position_summary),
    )

    logger.info(
        "Curation queue: %d authors, %d critical, %d high, %d medium",
        summary.total,
        summary.critical,
        summary.high,
        summary.medium,
    )

    return CurationQueue(
        summary=summary,
        queue=needing_attention[:QUEUE_LIMIT],
        by_urgency={
            band: by_band[band][:URGENCY_LIMIT] for band in ("critical", "high", "medium")
        },
    )
