"""Editorial validation of source records before they are saved.

Validation never blocks anything on its own; it returns errors and warnings
and the caller decides whether ``valid=False`` is fatal for its flow.
"""

import logging
import re
from datetime import date
from typing import Any

from pydantic import BaseModel, Field

from canon.core.models import Source
from canon.quality.classifier import Quality, classify, classify_title, classify_url

logger = logging.getLogger(__name__)

VAGUE_TYPES = ("Other", "Website", "Organization", "Channel", "Profile", "Homepage")
PREFERRED_TYPES = "Video, Article, Podcast, Paper, Book, Interview, Talk"
MIN_SUMMARY_CHARS = 20

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class SourceValidation(BaseModel):
    valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    quality: Quality
    quality_reason: str


class ValidationSummary(BaseModel):
    total: int
    valid: int
    invalid: int
    specific: int
    generic: int
    ambiguous: int


class BatchValidation(BaseModel):
    all_valid: bool
    results: list[SourceValidation]
    summary: ValidationSummary


def validate_source(source: dict | Source) -> SourceValidation:
    """Check one source record for specificity, date shape, type and summary."""
    raw: dict[str, Any] = source.to_record() if isinstance(source, Source) else dict(source)
    url = str(raw.get("url") or "")
    title = str(raw.get("title") or "")
    errors: list[str] = []
    warnings: list[str] = []

    by_url = classify_url(url)
    if by_url.quality == "generic":
        errors.append(f"Generic URL not allowed: {by_url.reason}")
        errors.append(f"  URL: {url}")
        errors.append("  Must be a specific article, video, episode, or paper")
    elif by_url.quality == "ambiguous":
        warnings.append(f"URL may be generic: {by_url.reason}")

    by_title = classify_title(title)
    if by_title.quality == "generic":
        errors.append(f"Generic title not allowed: {by_title.reason}")
        errors.append(f'  Title: "{title}"')
        errors.append("  Must reference specific content, not a channel/homepage/profile")
    elif by_title.quality == "ambiguous":
        warnings.append(f"Title may be too generic: {by_title.reason}")

    published = raw.get("published_date") or raw.get("publishedDate") or raw.get("date")
    if not published and not raw.get("year"):
        warnings.append("No date provided - published_date (YYYY-MM-DD) or year recommended")
    elif published:
        error = _check_date(str(published))
        if error:
            errors.append(error)

    source_type = raw.get("type")
    if source_type and source_type in VAGUE_TYPES:
        warnings.append(f'Type "{source_type}" is vague - prefer: {PREFERRED_TYPES}')

    summary = raw.get("summary") or ""
    if len(summary) < MIN_SUMMARY_CHARS:
        warnings.append(
            f"Summary should describe content ({MIN_SUMMARY_CHARS}+ characters recommended)"
        )

    overall = classify(url, title)
    return SourceValidation(
        valid=not errors,
        errors=errors,
        warnings=warnings,
        quality=overall.quality,
        quality_reason=overall.reason,
    )


def validate_sources(sources: list[dict | Source]) -> BatchValidation:
    results = [validate_source(s) for s in sources]
    summary = ValidationSummary(
        total=len(results),
        valid=sum(1 for r in results if r.valid),
        invalid=sum(1 for r in results if not r.valid),
        specific=sum(1 for r in results if r.quality == "specific"),
        generic=sum(1 for r in results if r.quality == "generic"),
        ambiguous=sum(1 for r in results if r.quality == "ambiguous"),
    )
    if summary.invalid:
        logger.info(
            "Validated %d sources: %d invalid, %d generic, %d ambiguous",
            summary.total,
            summary.invalid,
            summary.generic,
            summary.ambiguous,
        )
    return BatchValidation(all_valid=summary.invalid == 0, results=results, summary=summary)


def _check_date(value: str) -> str | None:
    if not _ISO_DATE_RE.match(value):
        return f"published_date must be YYYY-MM-DD format, got: {value}"
    try:
        date.fromisoformat(value)
    except ValueError:
        return f"published_date is not a valid date: {value}"
    return None
