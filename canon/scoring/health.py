"""Canon health rollups: per-domain breakdown, age buckets, stalest authors and camps."""

import logging
from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from canon.core.config import CurationConfig
from canon.core.models import Author, Camp, resolved_date
from canon.scoring.staleness import days_since, sort_days

logger = logging.getLogger(__name__)

STALEST_AUTHORS_LIMIT = 15
STALEST_CAMPS_LIMIT = 10


class _Report(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DomainBreakdown(_Report):
    domain: str
    camp_count: int
    author_count: int
    source_count: int
    avg_days_since_update: Optional[int] = None


class CoverageByAge(_Report):
    current: int = 0
    moderate: int = 0
    stale: int = 0
    no_date: int = 0


class SourceDateRange(_Report):
    oldest_date: Optional[date] = None
    newest_date: Optional[date] = None
    days_since_newest: Optional[int] = None


class StaleAuthor(_Report):
    id: str
    name: str
    affiliation: Optional[str] = None
    source_count: int
    most_recent_date: Optional[date] = None
    days_since_update: Optional[int] = None


class StaleCamp(_Report):
    id: str
    name: str
    domain: str
    author_count: int
    source_count: int
    most_recent_date: Optional[date] = None
    days_since_update: Optional[int] = None


class CanonHealth(_Report):
    total_authors: int
    total_camps: int
    total_sources: int
    authors_with_sources: int
    authors_without_sources: int
    coverage_by_age: CoverageByAge
    source_date_range: SourceDateRange
    stalest_authors: list[StaleAuthor]
    stalest_camps: list[StaleCamp]
    domain_breakdown: list[DomainBreakdown]

    def to_report(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


# ── Domain Breakdown ─────────────────────────────────────────────────


def domain_breakdown(
    camps: list[Camp],
    authors: list[Author],
    today: date,
    config: CurationConfig,
) -> list[DomainBreakdown]:
    """Per-domain rollup, stalest domain first; domains without camps are omitted.

    Authors belonging to several camps of one domain are counted once.
    """
    by_id = {a.id: a for a in authors}
    camp_counts: dict[str, int] = {label: 0 for label in config.domains.values()}
    members: dict[str, set[str]] = {label: set() for label in config.domains.values()}

    for camp in camps:
        label = config.domain_label(camp.domain_id)
        camp_counts[label] = camp_counts.get(label, 0) + 1
        members.setdefault(label, set()).update(camp.author_ids)

    rows: list[DomainBreakdown] = []
    for label, count in camp_counts.items():
        if count == 0:
            continue
        domain_authors = [by_id[aid] for aid in sorted(members[label]) if aid in by_id]
        ages = [
            days_since(a.most_recent_source_date, today)
            for a in domain_authors
            if a.most_recent_source_date is not None
        ]
        rows.append(
            DomainBreakdown(
                domain=label,
                camp_count=count,
                author_count=len(members[label]),
                source_count=sum(len(a.sources) for a in domain_authors),
                avg_days_since_update=round(sum(ages) / len(ages)) if ages else None,
            )
        )

    # Stalest first; undated domains go last
    rows.sort(
        key=lambda r: (r.avg_days_since_update is None, -sort_days(r.avg_days_since_update))
    )
    return rows


# ── Canon Health ─────────────────────────────────────────────────────


def canon_health(
    authors: list[Author],
    camps: list[Camp],
    today: date,
    config: CurationConfig,
) -> CanonHealth:
    """Whole-canon freshness rollup for the admin dashboard."""
    t = config.staleness_thresholds
    by_age = CoverageByAge()
    all_dates: list[date] = []

    for author in authors:
        for source in author.sources:
            d = resolved_date(source)
            if d is None:
                by_age.no_date += 1
                continue
            all_dates.append(d)
            age = days_since(d, today)
            if age < t.current_days:
                by_age.current += 1
            elif age < t.moderate_days:
                by_age.moderate += 1
            else:
                by_age.stale += 1

    newest = max(all_dates) if all_dates else None
    date_range = SourceDateRange(
        oldest_date=min(all_dates) if all_dates else None,
        newest_date=newest,
        days_since_newest=days_since(newest, today),
    )

    stale_authors = [
        StaleAuthor(
            id=a.id,
            name=a.name,
            affiliation=a.affiliation,
            source_count=len(a.sources),
            most_recent_date=a.most_recent_source_date,
            days_since_update=days_since(a.most_recent_source_date, today),
        )
        for a in authors
    ]
    stale_authors.sort(key=_staleness_key)

    by_id = {a.id: a for a in authors}
    stale_camps = []
    for camp in camps:
        members = [by_id[aid] for aid in camp.author_ids if aid in by_id]
        dated = [a.most_recent_source_date for a in members if a.most_recent_source_date]
        newest_camp = max(dated) if dated else None
        stale_camps.append(
            StaleCamp(
                id=camp.id,
                name=camp.label,
                domain=config.domain_label(camp.domain_id),
                author_count=len(camp.author_ids),
                source_count=sum(len(a.sources) for a in members),
                most_recent_date=newest_camp,
                days_since_update=days_since(newest_camp, today),
            )
        )
    stale_camps.sort(key=lambda c: (*_staleness_key(c), -c.author_count))

    with_sources = sum(1 for a in authors if a.sources)
    health = CanonHealth(
        total_authors=len(authors),
        total_camps=len(camps),
        total_sources=sum(len(a.sources) for a in authors),
        authors_with_sources=with_sources,
        authors_without_sources=len(authors) - with_sources,
        coverage_by_age=by_age,
        source_date_range=date_range,
        stalest_authors=stale_authors[:STALEST_AUTHORS_LIMIT],
        stalest_camps=stale_camps[:STALEST_CAMPS_LIMIT],
        domain_breakdown=domain_breakdown(camps, authors, today, config),
    )
    logger.info(
        "Canon health: %d authors, %d sources (%d current, %d stale, %d undated)",
        health.total_authors,
        health.total_sources,
        by_age.current,
        by_age.stale,
        by_age.no_date,
    )
    return health


def _staleness_key(item: StaleAuthor | StaleCamp) -> tuple[int, int]:
    """Undated first, then most days since update first."""
    if item.days_since_update is None:
        return (0, 0)
    return (1, -item.days_since_update)
