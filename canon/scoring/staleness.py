"""Staleness helpers shared by the scorers."""

from datetime import date

from canon.core.models import Author, Source, resolved_date

# Ordering stand-in for "no resolvable date"; never stored or reported.
UNDATED_SORT_DAYS = 999


def days_since(d: date | None, today: date) -> int | None:
    if d is None:
        return None
    return (today - d).days


def most_recent_date(sources: list[Source]) -> date | None:
    dates = [d for d in (resolved_date(s) for s in sources) if d]
    return max(dates) if dates else None


def author_staleness(author: Author, today: date) -> int | None:
    """Days since the author's newest resolvable source, or None."""
    return days_since(author.most_recent_source_date, today)


def sort_days(days: int | None) -> int:
    """Days for ordering only: undated sorts as ``UNDATED_SORT_DAYS``."""
    return UNDATED_SORT_DAYS if days is None else days
