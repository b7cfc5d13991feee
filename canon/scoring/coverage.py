"""Topic (camp) coverage strength, insight text, and the coverage report."""

import logging
from datetime import date
from typing import Iterable, Literal, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from canon.core.config import CurationConfig, FreshnessBands, StalenessThresholds
from canon.core.models import Author, Camp
from canon.scoring.staleness import days_since, sort_days

logger = logging.getLogger(__name__)

CoverageLevel = Literal["strong", "moderate", "weak", "none"]

ATTENTION_LIMIT = 10
FAST_MOVING_LIMIT = 5


class _Report(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CoverageStrength(_Report):
    level: CoverageLevel
    score: int


class TopicCoverage(_Report):
    id: str
    topic: str
    domain_id: int
    author_count: int
    total_authors: int
    source_count: int
    most_recent_date: Optional[date] = None
    days_since_most_recent: Optional[int] = None
    avg_days_since_update: Optional[int] = None
    is_fast_moving: bool
    coverage: CoverageStrength
    insight: str


class CoverageSummary(_Report):
    strong: int
    moderate: int
    weak: int
    none: int


class TopicCoverageReport(_Report):
    summary: CoverageSummary
    topics_needing_attention: list[TopicCoverage]
    fast_moving_topics: list[TopicCoverage]
    all_topics: list[TopicCoverage]

    def to_report(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


# ── Terms ────────────────────────────────────────────────────────────


def is_fast_moving(label: str, keywords: Iterable[str]) -> bool:
    lowered = label.lower()
    return any(k.lower() in lowered for k in keywords)


def author_count_points(author_count: int) -> int:
    if author_count >= 10:
        return 40
    if author_count >= 5:
        return 30
    if author_count >= 3:
        return 20
    return 10


def source_count_points(source_count: int) -> int:
    if source_count >= 20:
        return 30
    if source_count >= 10:
        return 20
    if source_count >= 5:
        return 15
    if source_count > 0:
        return 5
    return 0


def freshness_points(days: int | None, bands: FreshnessBands) -> int:
    # Undated topics are left unscored rather than penalised
    if days is None:
        return 0
    if days < bands.full:
        return 30
    if days < bands.partial:
        return 20
    if days < bands.minimal:
        return 10
    return 0


def coverage_level(score: int) -> CoverageLevel:
    if score >= 70:
        return "strong"
    if score >= 45:
        return "moderate"
    if score > 0:
        return "weak"
    return "none"


def coverage_strength(
    author_count: int,
    source_count: int,
    days_since_update: int | None,
    fast_moving: bool,
    thresholds: StalenessThresholds | None = None,
) -> CoverageStrength:
    """0-100 health score: author count (40) + source count (30) + freshness (30)."""
    if author_count == 0:
        return CoverageStrength(level="none", score=0)

    t = thresholds or StalenessThresholds()
    bands = t.fast_moving if fast_moving else t.regular
    score = (
        author_count_points(author_count)
        + source_count_points(source_count)
        + freshness_points(days_since_update, bands)
    )
    return CoverageStrength(level=coverage_level(score), score=score)


# ── Insight ──────────────────────────────────────────────────────────


def coverage_insight(
    topic: str,
    coverage: CoverageStrength,
    days_since_update: int | None,
    fast_moving: bool,
    author_count: int,
    total_authors: int,
) -> str:
    """Display-only sentence describing how far to trust analysis on this topic."""
    pct = round(author_count / total_authors * 100) if total_authors else 0
    days = days_since_update or 0

    if coverage.level == "none":
        return f'No authors currently cover "{topic}". Consider adding experts in this area.'

    if coverage.level == "weak":
        if author_count < 3:
            noun = "author covers" if author_count == 1 else "authors cover"
            return (
                f"Only {author_count} {noun} this topic ({pct}% of canon). "
                "Analysis may lack diverse perspectives."
            )
        if days > 180:
            tail = (
                "This is a fast-moving topic - our canon may not reflect latest developments."
                if fast_moving
                else "Consider refreshing sources."
            )
            return f"Coverage is {round(days / 30)} months old. {tail}"
        return "Limited coverage. Treat analysis as directional rather than comprehensive."

    if coverage.level == "moderate":
        if fast_moving and days > 90:
            return (
                "This is a fast-moving topic. Our canon may not reflect the latest "
                f"developments (last update: {round(days / 30)} months ago). "
                "Treat analysis as directional."
            )
        if author_count < 5:
            return (
                f"{author_count} authors cover this topic. Good for general direction "
                "but may miss niche perspectives."
            )
        return (
            f"Decent coverage from {author_count} authors. "
            "Analysis should be reliable for mainstream viewpoints."
        )

    if fast_moving and days_since_update is not None and days_since_update < 60:
        return (
            f"Strong, up-to-date coverage from {author_count} authors. "
            "Analysis reflects current discourse."
        )
    return (
        f"Well-covered topic with {author_count} authors and recent sources. "
        "High confidence in analysis."
    )


# ── Report ───────────────────────────────────────────────────────────


def build_topic_coverage(
    camps: list[Camp],
    authors: list[Author],
    today: date,
    config: CurationConfig,
) -> TopicCoverageReport:
    """Aggregate member authors' sources per camp and score each camp."""
    by_id = {a.id: a for a in authors}
    total_authors = len(authors)
    topics: list[TopicCoverage] = []

    for camp in camps:
        members = [by_id[aid] for aid in camp.author_ids if aid in by_id]
        source_count = sum(len(a.sources) for a in members)
        newest = [a.most_recent_source_date for a in members]
        dated = [d for d in newest if d]

        most_recent = max(dated) if dated else None
        days_recent = days_since(most_recent, today)
        avg_days = (
            round(sum(days_since(d, today) for d in dated) / len(dated)) if dated else None
        )

        fast = is_fast_moving(camp.label, config.fast_moving_keywords)
        author_count = len(camp.author_ids)
        coverage = coverage_strength(
            author_count, source_count, days_recent, fast, config.staleness_thresholds
        )

        topics.append(
            TopicCoverage(
                id=camp.id,
                topic=camp.label,
                domain_id=camp.domain_id,
                author_count=author_count,
                total_authors=total_authors,
                source_count=source_count,
                most_recent_date=most_recent,
                days_since_most_recent=days_recent,
                avg_days_since_update=avg_days,
                is_fast_moving=fast,
                coverage=coverage,
                insight=coverage_insight(
                    camp.label, coverage, days_recent, fast, author_count, total_authors
                ),
            )
        )

    weakest_first = sorted(topics, key=lambda t: t.coverage.score)
    fast_needing_attention = sorted(
        (t for t in topics if t.is_fast_moving and t.coverage.level in ("weak", "moderate")),
        key=lambda t: sort_days(t.days_since_most_recent),
    )

    summary = CoverageSummary(
        strong=sum(1 for t in topics if t.coverage.level == "strong"),
        moderate=sum(1 for t in topics if t.coverage.level == "moderate"),
        weak=sum(1 for t in topics if t.coverage.level == "weak"),
        none=sum(1 for t in topics if t.coverage.level == "none"),
    )
    logger.info(
        "Topic coverage: %d strong, %d moderate, %d weak, %d none",
        summary.strong,
        summary.moderate,
        summary.weak,
        summary.none,
    )

    return TopicCoverageReport(
        summary=summary,
        topics_needing_attention=weakest_first[:ATTENTION_LIMIT],
        fast_moving_topics=fast_needing_attention[:FAST_MOVING_LIMIT],
        all_topics=topics,
    )
