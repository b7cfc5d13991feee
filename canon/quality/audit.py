"""Source audits: date quality per source and generic-source counts per author."""

import logging
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from canon.core.models import Author, Source
from canon.quality.classifier import classify

logger = logging.getLogger(__name__)

DateQuality = Literal["specific", "year-only", "missing"]

TOP_AUTHORS_LIMIT = 20


class _Report(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def date_quality(source: Source) -> DateQuality:
    """A January 1st date is treated as a year standing in for a real date."""
    d = source.published_date
    if d is not None:
        if d.month == 1 and d.day == 1:
            return "year-only"
        return "specific"
    if source.year is not None:
        return "year-only"
    return "missing"


def sources_needing_enrichment(sources: list[Source]) -> list[Source]:
    return [s for s in sources if date_quality(s) != "specific"]


# ── Date Audit ───────────────────────────────────────────────────────


class SourceDateAudit(_Report):
    author_id: str
    author_name: str
    source_title: str
    current_date: Optional[str] = None
    date_quality: DateQuality
    url: str


class AuthorDateStats(_Report):
    name: str
    total: int
    needs_enrichment: int


class DateAuditSummary(_Report):
    total: int
    specific: int
    year_only: int
    missing: int
    needs_enrichment: int


class DateAudit(_Report):
    summary: DateAuditSummary
    author_stats: list[AuthorDateStats]
    all_sources: list[SourceDateAudit]

    def to_report(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


def audit_source_dates(authors: list[Author]) -> DateAudit:
    rows: list[SourceDateAudit] = []
    stats: list[AuthorDateStats] = []

    for author in authors:
        if not author.sources:
            continue
        needing = 0
        for source in author.sources:
            quality = date_quality(source)
            if quality != "specific":
                needing += 1
            current = None
            if source.published_date is not None:
                current = source.published_date.isoformat()
            elif source.year is not None:
                current = str(source.year)
            rows.append(
                SourceDateAudit(
                    author_id=author.id,
                    author_name=author.name,
                    source_title=source.title or "Untitled",
                    current_date=current,
                    date_quality=quality,
                    url=source.url,
                )
            )
        if needing:
            stats.append(
                AuthorDateStats(name=author.name, total=len(author.sources), needs_enrichment=needing)
            )

    stats.sort(key=lambda s: s.needs_enrichment, reverse=True)
    year_only = sum(1 for r in rows if r.date_quality == "year-only")
    missing = sum(1 for r in rows if r.date_quality == "missing")
    summary = DateAuditSummary(
        total=len(rows),
        specific=len(rows) - year_only - missing,
        year_only=year_only,
        missing=missing,
        needs_enrichment=year_only + missing,
    )
    logger.info(
        "Date audit: %d sources, %d specific, %d year-only, %d missing",
        summary.total,
        summary.specific,
        summary.year_only,
        summary.missing,
    )
    return DateAudit(summary=summary, author_stats=stats, all_sources=rows)


# ── Source Quality ───────────────────────────────────────────────────


class AuthorSourceQuality(_Report):
    id: str
    name: str
    total_sources: int
    specific_dates: int
    year_only: int
    no_date: int
    generic: int
    ambiguous: int
    date_quality: str


class SourceQualitySummary(_Report):
    total_sources: int
    specific_dates: int
    year_only: int
    no_date: int
    generic: int
    ambiguous: int
    date_quality: str


class SourceQualityReport(_Report):
    summary: SourceQualitySummary
    authors_needing_work: list[AuthorSourceQuality]
    authors_with_generic: list[AuthorSourceQuality]

    def to_report(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


def source_quality_report(authors: list[Author]) -> SourceQualityReport:
    """Date completeness plus classifier verdicts, rolled up per author."""
    per_author: list[AuthorSourceQuality] = []

    for author in authors:
        qualities = [date_quality(s) for s in author.sources]
        verdicts = [classify(s.url, s.title).quality for s in author.sources]
        specific = qualities.count("specific")
        per_author.append(
            AuthorSourceQuality(
                id=author.id,
                name=author.name,
                total_sources=len(author.sources),
                specific_dates=specific,
                year_only=qualities.count("year-only"),
                no_date=qualities.count("missing"),
                generic=verdicts.count("generic"),
                ambiguous=verdicts.count("ambiguous"),
                date_quality=_percent(specific, len(author.sources), digits=0),
            )
        )

    total = sum(a.total_sources for a in per_author)
    specific_total = sum(a.specific_dates for a in per_author)
    summary = SourceQualitySummary(
        total_sources=total,
        specific_dates=specific_total,
        year_only=sum(a.year_only for a in per_author),
        no_date=sum(a.no_date for a in per_author),
        generic=sum(a.generic for a in per_author),
        ambiguous=sum(a.ambiguous for a in per_author),
        date_quality=_percent(specific_total, total, digits=1),
    )

    needing_work = sorted(
        (a for a in per_author if a.total_sources and a.specific_dates < a.total_sources),
        key=lambda a: a.specific_dates / a.total_sources,
    )
    with_generic = sorted(
        (a for a in per_author if a.generic),
        key=lambda a: a.generic,
        reverse=True,
    )

    return SourceQualityReport(
        summary=summary,
        authors_needing_work=needing_work[:TOP_AUTHORS_LIMIT],
        authors_with_generic=with_generic[:TOP_AUTHORS_LIMIT],
    )


def _percent(part: int, whole: int, digits: int) -> str:
    if whole == 0:
        return "N/A"
    return f"{part / whole * 100:.{digits}f}%"
