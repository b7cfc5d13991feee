"""Tests for source date and quality audits."""

from canon.core.models import Author, Source
from canon.quality.audit import (
    audit_source_dates,
    date_quality,
    source_quality_report,
    sources_needing_enrichment,
)


def _src(title="Scaling laws: a retrospective", url="https://arxiv.org/abs/2301.12345", **kw):
    return Source(title=title, url=url, **kw)


# ── Date Quality ─────────────────────────────────────────────────────


def test_specific_date():
    assert date_quality(_src(published_date="2023-05-10")) == "specific"


def test_january_first_counts_as_year_only():
    assert date_quality(_src(published_date="2023-01-01")) == "year-only"


def test_year_without_date():
    assert date_quality(_src(year=2021)) == "year-only"
    assert date_quality(_src(published_date="2021")) == "year-only"


def test_missing_date():
    assert date_quality(_src()) == "missing"


def test_sources_needing_enrichment():
    dated = _src(title="Dated", published_date="2023-05-10")
    undated = _src(title="Undated")
    year_only = _src(title="Year only", year=2020)
    assert sources_needing_enrichment([dated, undated, year_only]) == [undated, year_only]


# ── Date Audit ───────────────────────────────────────────────────────


def test_audit_source_dates():
    authors = [
        Author(
            id="a1",
            name="Ada",
            sources=[_src(published_date="2023-05-10"), _src(year=2020), _src()],
        ),
        Author(id="a2", name="Bo", sources=[_src(), _src(), _src()]),
        Author(id="a3", name="Cy", sources=[]),
    ]
    audit = audit_source_dates(authors)

    assert audit.summary.total == 6
    assert audit.summary.specific == 1
    assert audit.summary.year_only == 1
    assert audit.summary.missing == 4
    assert audit.summary.needs_enrichment == 5
    # Bo has more sources needing work than Ada
    assert [s.name for s in audit.author_stats] == ["Bo", "Ada"]
    assert audit.all_sources[1].current_date == "2020"
    assert audit.all_sources[0].current_date == "2023-05-10"


def test_audit_report_is_camel_case():
    report = audit_source_dates([Author(id="a1", name="Ada", sources=[_src()])]).to_report()
    assert report["summary"]["needsEnrichment"] == 1
    assert report["allSources"][0]["dateQuality"] == "missing"


# ── Source Quality ───────────────────────────────────────────────────


def test_source_quality_report():
    authors = [
        Author(
            id="a1",
            name="Ada",
            sources=[
                _src(published_date="2023-05-10"),
                _src(url="https://youtube.com/@ada", title="Ada's Channel"),
            ],
        ),
        Author(id="a2", name="Bo", sources=[_src(published_date="2022-03-04")]),
    ]
    report = source_quality_report(authors)

    assert report.summary.total_sources == 3
    assert report.summary.specific_dates == 2
    assert report.summary.no_date == 1
    assert report.summary.generic == 1
    assert report.summary.date_quality == "66.7%"

    assert [a.id for a in report.authors_needing_work] == ["a1"]
    assert report.authors_needing_work[0].date_quality == "50%"
    assert [a.id for a in report.authors_with_generic] == ["a1"]


def test_source_quality_with_no_sources():
    report = source_quality_report([Author(id="a1", name="Ada")])
    assert report.summary.date_quality == "N/A"
    assert report.authors_needing_work == []
