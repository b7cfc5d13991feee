"""Batch date enrichment: fetch authors, infer dates per group, merge, persist."""

import asyncio
import logging
from typing import Iterator, Literal, Optional, Protocol, Sequence, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from canon.agents.date_enricher import EnrichedSourceDate
from canon.core.config import CurationConfig
from canon.core.models import Author, Source
from canon.pipeline.merge import merge_sources
from canon.quality.audit import sources_needing_enrichment

logger = logging.getLogger(__name__)

T = TypeVar("T")

AuthorStatus = Literal["merged", "skipped", "failed"]

TOP_ENRICHED_LIMIT = 10


# ── Collaborators ────────────────────────────────────────────────────


class AuthorStore(Protocol):
    def list_authors_with_sources(self) -> list[Author]: ...

    def update_author_sources(self, author_id: str, sources: list[Source]) -> None: ...


class DateInferenceService(Protocol):
    async def enrich_dates(
        self, sources: list[Source], author_name: str
    ) -> list[EnrichedSourceDate]: ...


# ── Result Models ────────────────────────────────────────────────────


class _Report(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AuthorEnrichmentResult(_Report):
    """Outcome for one author: merged (written), skipped (no change), or failed."""

    author_id: str
    author_name: str
    status: AuthorStatus
    success: bool
    enriched_count: int = 0
    total_sources: int = 0
    error: Optional[str] = None


class TopEnriched(_Report):
    name: str
    enriched_count: int
    total_sources: int


class EnrichmentRunSummary(_Report):
    total_authors: int
    processed_authors: int
    failed_authors: int
    enriched_sources: int
    top_enriched: list[TopEnriched] = Field(default_factory=list)
    results: list[AuthorEnrichmentResult] = Field(default_factory=list)

    def to_report(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ── Helpers ──────────────────────────────────────────────────────────


def batched(items: Sequence[T], size: int) -> Iterator[list[T]]:
    """Consecutive groups of ``size`` (the last may be shorter)."""
    if size < 1:
        raise ValueError(f"Batch size must be >= 1, got {size}")
    for start in range(0, len(items), size):
        yield list(items[start : start + size])


def summarize(total_authors: int, results: list[AuthorEnrichmentResult]) -> EnrichmentRunSummary:
    """Fold per-author results (already in submission order) into a run summary."""
    top = sorted(
        (r for r in results if r.success and r.enriched_count > 0),
        key=lambda r: r.enriched_count,
        reverse=True,
    )[:TOP_ENRICHED_LIMIT]
    return EnrichmentRunSummary(
        total_authors=total_authors,
        processed_authors=sum(1 for r in results if r.success),
        failed_authors=sum(1 for r in results if not r.success),
        enriched_sources=sum(r.enriched_count for r in results),
        top_enriched=[
            TopEnriched(name=r.author_name, enriched_count=r.enriched_count, total_sources=r.total_sources)
            for r in top
        ],
        results=results,
    )


# ── Single-Author Enrichment ─────────────────────────────────────────


async def enrich_author(
    author: Author,
    enricher: DateInferenceService,
    store: AuthorStore,
    config: CurationConfig | None = None,
) -> AuthorEnrichmentResult:
    """Infer, merge, and persist one author's dates. Never raises."""
    skip_specific = config.skip_specific_dates if config else False
    sources = author.sources
    try:
        to_date = sources_needing_enrichment(sources) if skip_specific else sources
        if not to_date:
            logger.info("%s: all %d sources already dated", author.name, len(sources))
            return AuthorEnrichmentResult(
                author_id=author.id,
                author_name=author.name,
                status="skipped",
                success=True,
                total_sources=len(sources),
            )

        logger.info("%s: enriching %d/%d sources", author.name, len(to_date), len(sources))
        results = await enricher.enrich_dates(to_date, author.name)
        _log_confidence(author.name, results)

        # Only the sources sent for inference may take a result
        outcome = merge_sources(to_date, results)
        if outcome.enriched_count:
            store.update_author_sources(author.id, _splice(sources, to_date, outcome.sources))
            status: AuthorStatus = "merged"
        else:
            status = "skipped"

        logger.info(
            "%s: %d/%d sources enriched (%s)",
            author.name,
            outcome.enriched_count,
            len(sources),
            status,
        )
        return AuthorEnrichmentResult(
            author_id=author.id,
            author_name=author.name,
            status=status,
            success=True,
            enriched_count=outcome.enriched_count,
            total_sources=len(sources),
        )
    except Exception as exc:
        logger.error("Error processing author %s: %s", author.name, exc)
        return AuthorEnrichmentResult(
            author_id=author.id,
            author_name=author.name,
            status="failed",
            success=False,
            total_sources=len(sources),
            error=str(exc) or type(exc).__name__,
        )


def _splice(sources: list[Source], subset: list[Source], merged: list[Source]) -> list[Source]:
    """Put the merged copies of ``subset`` back in place within ``sources``."""
    replacements = {id(old): new for old, new in zip(subset, merged)}
    return [replacements.get(id(s), s) for s in sources]


def _log_confidence(author_name: str, results: list[EnrichedSourceDate]) -> None:
    if not results:
        logger.warning("%s: no enriched dates returned", author_name)
        return
    counts = {"high": 0, "medium": 0, "low": 0, "no_date": 0}
    for r in results:
        counts["no_date" if not r.enriched_date else r.confidence] += 1
    logger.debug("%s: confidence distribution %s", author_name, counts)


# ── Batch Pipeline ───────────────────────────────────────────────────


async def run_enrichment(
    store: AuthorStore,
    enricher: DateInferenceService,
    config: CurationConfig | None = None,
) -> EnrichmentRunSummary:
    """Enrich every author with sources, ``batch_size`` authors at a time.

    Each group runs concurrently and is awaited in full before the next
    starts. Results keep submission order. A failing author is recorded and
    does not affect the others.
    """
    config = config or CurationConfig()
    authors = store.list_authors_with_sources()
    groups = list(batched(authors, config.batch_size))
    logger.info(
        "Enriching %d authors with sources in %d groups of up to %d",
        len(authors),
        len(groups),
        config.batch_size,
    )

    results: list[AuthorEnrichmentResult] = []
    for n, group in enumerate(groups, 1):
        group_results = await asyncio.gather(
            *(enrich_author(author, enricher, store, config) for author in group)
        )
        results.extend(group_results)
        logger.info("Processed group %d of %d", n, len(groups))

    summary = summarize(len(authors), results)
    logger.info(
        "Enrichment summary: %d processed, %d failed, %d sources enriched",
        summary.processed_authors,
        summary.failed_authors,
        summary.enriched_sources,
    )
    return summary
