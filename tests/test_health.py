"""Tests for domain breakdown and the canon health rollup."""

from datetime import date, timedelta

from canon.core.config import default_config
from canon.core.models import Author, Camp, CampAuthor, Source
from canon.scoring.health import canon_health, domain_breakdown

TODAY = date(2025, 1, 1)


def _author(author_id, days_ago=None, n_sources=1):
    published = TODAY - timedelta(days=days_ago) if days_ago is not None else None
    return Author(
        id=author_id,
        name=author_id.upper(),
        sources=[
            Source(title=f"{author_id} source {i}", published_date=published)
            for i in range(n_sources)
        ],
    )


def _camp(camp_id, domain_id, member_ids):
    return Camp(
        id=camp_id,
        label=f"Camp {camp_id}",
        domain_id=domain_id,
        authors=[CampAuthor(author_id=a) for a in member_ids],
    )


def _canon():
    authors = [
        _author("a1", days_ago=400),
        _author("a2", days_ago=100),
        _author("a3"),
        _author("a4", days_ago=10),
        _author("a5", n_sources=0),
    ]
    camps = [
        _camp("c1", 1, ["a1", "a2"]),
        _camp("c2", 1, ["a1"]),
        _camp("c3", 2, ["a3"]),
        _camp("c4", 3, ["a4"]),
    ]
    return authors, camps


# ── Domain Breakdown ─────────────────────────────────────────────────


def test_domain_breakdown_dedups_authors():
    authors, camps = _canon()
    rows = domain_breakdown(camps, authors, TODAY, default_config())
    technical = rows[0]
    assert technical.domain == "AI Technical Capabilities"
    assert technical.camp_count == 2
    assert technical.author_count == 2
    assert technical.source_count == 2
    assert technical.avg_days_since_update == 250


def test_domain_breakdown_order_and_omissions():
    authors, camps = _canon()
    rows = domain_breakdown(camps, authors, TODAY, default_config())
    # stalest first, undated last, domains without camps omitted
    assert [r.domain for r in rows] == [
        "AI Technical Capabilities",
        "Enterprise AI Adoption",
        "AI & Society",
    ]
    assert rows[-1].avg_days_since_update is None


def test_unknown_domain_id_is_reported():
    rows = domain_breakdown(
        [_camp("c9", 42, ["a1"])], [_author("a1", days_ago=5)], TODAY, default_config()
    )
    assert [r.domain for r in rows] == ["Unknown"]


# ── Canon Health ─────────────────────────────────────────────────────


def test_canon_health_totals_and_age_buckets():
    authors, camps = _canon()
    health = canon_health(authors, camps, TODAY, default_config())

    assert health.total_authors == 5
    assert health.total_camps == 4
    assert health.total_sources == 4
    assert health.authors_with_sources == 4
    assert health.authors_without_sources == 1

    ages = health.coverage_by_age
    assert (ages.current, ages.moderate, ages.stale, ages.no_date) == (1, 1, 1, 1)

    assert health.source_date_range.oldest_date == TODAY - timedelta(days=400)
    assert health.source_date_range.newest_date == TODAY - timedelta(days=10)
    assert health.source_date_range.days_since_newest == 10


def test_stalest_authors_undated_first():
    authors, camps = _canon()
    health = canon_health(authors, camps, TODAY, default_config())
    assert [a.id for a in health.stalest_authors] == ["a3", "a5", "a1", "a2", "a4"]


def test_stalest_camps():
    authors, camps = _canon()
    health = canon_health(authors, camps, TODAY, default_config())
    assert [c.id for c in health.stalest_camps] == ["c3", "c2", "c1", "c4"]
    c1 = next(c for c in health.stalest_camps if c.id == "c1")
    assert c1.days_since_update == 100
    assert c1.domain == "AI Technical Capabilities"


def test_empty_canon():
    health = canon_health([], [], TODAY, default_config())
    assert health.total_sources == 0
    assert health.source_date_range.newest_date is None
    assert health.source_date_range.days_since_newest is None
    assert health.domain_breakdown == []


def test_health_report_is_camel_case():
    authors, camps = _canon()
    report = canon_health(authors, camps, TODAY, default_config()).to_report()
    assert report["coverageByAge"]["noDate"] == 1
    assert report["domainBreakdown"][0]["avgDaysSinceUpdate"] == 250
