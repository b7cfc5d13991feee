"""Match inferred dates back to sources, gate by confidence, and merge."""

import logging
import re
from datetime import date
from typing import NamedTuple

from canon.agents.date_enricher import EnrichedSourceDate
from canon.core.models import Source

logger = logging.getLogger(__name__)

_FULL_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")
_YEAR_RE = re.compile(r"^(\d{4})$")


class MergeOutcome(NamedTuple):
    sources: list[Source]
    enriched_count: int


# ── Date Shape ───────────────────────────────────────────────────────


def normalize_enriched_date(value: str | None) -> tuple[date, int] | None:
    """Resolve YYYY-MM-DD / YYYY-MM / YYYY to (date, year); anything else is None."""
    if not value:
        return None
    text = value.strip()
    try:
        if m := _FULL_RE.match(text):
            d = date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
        elif m := _MONTH_RE.match(text):
            d = date(int(m.group(1)), int(m.group(2)), 1)
        elif m := _YEAR_RE.match(text):
            d = date(int(m.group(1)), 1, 1)
        else:
            return None
    except ValueError:
        return None
    return d, d.year


# ── Matching ─────────────────────────────────────────────────────────


def _normalize_title(title: str) -> str:
    return title.strip().casefold()


def find_enrichment(
    title: str, results: list[EnrichedSourceDate]
) -> EnrichedSourceDate | None:
    """Exact title match first, then trimmed case-insensitive match."""
    for result in results:
        if result.original_title == title:
            return result
    wanted = _normalize_title(title)
    for result in results:
        if _normalize_title(result.original_title) == wanted:
            return result
    return None


# ── Gating & Merge ───────────────────────────────────────────────────


def is_accepted(result: EnrichedSourceDate | None) -> bool:
    return bool(result and result.enriched_date and result.confidence != "low")


def merge_source(source: Source, result: EnrichedSourceDate | None) -> Source:
    """Apply an accepted result; otherwise return ``source`` itself, untouched."""
    if not is_accepted(result):
        return source
    resolved = normalize_enriched_date(result.enriched_date)
    if resolved is None:
        logger.debug("Rejected date shape %r for %r", result.enriched_date, source.title)
        return source
    published, year = resolved
    return source.model_copy(
        update={
            "published_date": published,
            "year": year,
            "date_enriched": True,
            "enrichment_source": result.source,
            "enrichment_confidence": result.confidence,
        }
    )


def merge_sources(
    sources: list[Source], results: list[EnrichedSourceDate]
) -> MergeOutcome:
    """Merge results into a new source list; count sources whose value changed."""
    merged: list[Source] = []
    changed = 0
    for source in sources:
        result = find_enrichment(source.title, results)
        if result is None:
            logger.debug("No match for %r", source.title[:50])
        elif not is_accepted(result):
            logger.debug(
                "Skipped %r: %s",
                source.title[:50],
                "no date" if not result.enriched_date else "low confidence",
            )
        updated = merge_source(source, result)
        if updated != source:
            changed += 1
        merged.append(updated)
    return MergeOutcome(merged, changed)
