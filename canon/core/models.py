"""Canon records: sources, authors, camps, and camp memberships."""

import re
from datetime import date, datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

Confidence = Literal["high", "medium", "low"]
Relevance = Literal["strong", "partial", "challenges", "emerging"]

RELEVANCES: tuple[str, ...] = ("strong", "partial", "challenges", "emerging")

# Keys that carry a publication date in stored records, in precedence order
_DATE_KEYS = ("published_date", "publishedDate", "date")

# Provenance keys written under other names by older tooling
_PROVENANCE_ALIASES = {
    "dateEnriched": "date_enriched",
    "enrichmentSource": "enrichment_source",
    "date_enrichment_source": "enrichment_source",
    "enrichmentConfidence": "enrichment_confidence",
    "date_enrichment_confidence": "enrichment_confidence",
}

_FULL_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})")
_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")
_YEAR_RE = re.compile(r"^(\d{4})$")


# ── Source ───────────────────────────────────────────────────────────


class Source(BaseModel):
    """One citation belonging to an author.

    Stored records use several spellings for the date; they are resolved into
    the single ``published_date`` field here, before any scorer or pipeline
    stage sees the record. Keys this model does not know about are kept.
    """

    model_config = ConfigDict(extra="allow")

    title: str = ""
    url: str = ""
    type: Optional[str] = None
    published_date: Optional[date] = None
    year: Optional[int] = None
    summary: Optional[str] = None
    date_enriched: bool = False
    enrichment_source: Optional[str] = None
    enrichment_confidence: Optional[Confidence] = None

    @model_validator(mode="before")
    @classmethod
    def normalize_record(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)

        raw_date = None
        for key in _DATE_KEYS:
            value = data.pop(key, None)
            if raw_date is None and value not in (None, ""):
                raw_date = value

        for old, new in _PROVENANCE_ALIASES.items():
            if old in data:
                value = data.pop(old)
                data.setdefault(new, value)

        year = _coerce_year(data.get("year"))
        published, implied_year = _coerce_date(raw_date)
        data["published_date"] = published
        if year is None:
            year = implied_year
        data["year"] = year

        for key in ("title", "url"):
            if data.get(key) is None:
                data[key] = ""
        if data.get("date_enriched") is None:
            data["date_enriched"] = False
        return data

    @field_validator("enrichment_confidence", mode="before")
    @classmethod
    def drop_unknown_confidence(cls, v: Any) -> Any:
        if v not in ("high", "medium", "low"):
            return None
        return v

    @property
    def has_specific_date(self) -> bool:
        return self.published_date is not None

    def to_record(self) -> dict:
        """JSON-ready dict for persistence (dates as ISO strings, no nulls)."""
        return self.model_dump(mode="json", exclude_none=True)


def _coerce_year(value: Any) -> int | None:
    if value is None or value == "" or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    match = _YEAR_RE.match(str(value).strip())
    return int(match.group(1)) if match else None


def _coerce_date(value: Any) -> tuple[date | None, int | None]:
    """Return (calendar date, implied year) for a stored date value.

    A bare year yields no calendar date, only a year. A ``YYYY-MM`` value is
    pinned to the first of the month. Anything unparseable yields nothing.
    """
    if value is None:
        return None, None
    if isinstance(value, datetime):
        return value.date(), value.year
    if isinstance(value, date):
        return value, value.year
    if isinstance(value, int) and not isinstance(value, bool):
        return None, value

    text = str(value).strip()
    if m := _FULL_DATE_RE.match(text):
        try:
            d = date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
        except ValueError:
            return None, None
        return d, d.year
    if m := _MONTH_RE.match(text):
        try:
            d = date(int(m.group(1)), int(m.group(2)), 1)
        except ValueError:
            return None, None
        return d, d.year
    if m := _YEAR_RE.match(text):
        return None, int(m.group(1))
    return None, None


# ── Author ───────────────────────────────────────────────────────────


class Author(BaseModel):
    """A canon author; owns its source list exclusively."""

    id: str
    name: str
    affiliation: Optional[str] = None
    sources: list[Source] = Field(default_factory=list)

    @property
    def most_recent_source_date(self) -> date | None:
        """Newest resolvable date across sources (year-only counts as Jan 1)."""
        dates = [d for d in (resolved_date(s) for s in self.sources) if d]
        return max(dates) if dates else None


def resolved_date(source: Source) -> date | None:
    """Specific date if known, else January 1st of the year, else None."""
    if source.published_date is not None:
        return source.published_date
    if source.year is not None and 1 <= source.year <= 9999:
        return date(source.year, 1, 1)
    return None


# ── Camps ────────────────────────────────────────────────────────────


class CampAuthor(BaseModel):
    """Membership of an author in a camp."""

    author_id: str
    relevance: Relevance = "strong"
    position_summary: Optional[str] = None
    quote: Optional[str] = None

    @property
    def has_position_summary(self) -> bool:
        return bool(self.position_summary and self.position_summary.strip())


class Camp(BaseModel):
    """A labelled perspective within a domain."""

    id: str
    label: str
    domain_id: int
    description: Optional[str] = None
    authors: list[CampAuthor] = Field(default_factory=list)

    @property
    def author_ids(self) -> list[str]:
        return [m.author_id for m in self.authors]
