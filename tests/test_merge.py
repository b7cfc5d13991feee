"""Tests for matching inferred dates to sources and merging them."""

import random
from datetime import date

import pytest

from canon.agents.date_enricher import EnrichedSourceDate
from canon.core.models import Source
from canon.pipeline.merge import (
    find_enrichment,
    merge_source,
    merge_sources,
    normalize_enriched_date,
)


def _result(title="My Title", enriched_date="2023-05-10", confidence="high", source="URL path"):
    return EnrichedSourceDate(
        original_title=title,
        enriched_date=enriched_date,
        confidence=confidence,
        reasoning="test",
        source=source,
    )


# ── Date Shape ───────────────────────────────────────────────────────


@pytest.mark.parametrize(
    "value,expected",
    [
        ("2023-05-10", (date(2023, 5, 10), 2023)),
        ("2023-05", (date(2023, 5, 1), 2023)),
        ("2023", (date(2023, 1, 1), 2023)),
        (" 2023-05 ", (date(2023, 5, 1), 2023)),
        ("May 2023", None),
        ("2023-13", None),
        ("2023-02-30", None),
        ("05/10/2023", None),
        ("", None),
        (None, None),
    ],
)
def test_normalize_enriched_date(value, expected):
    assert normalize_enriched_date(value) == expected


# ── Matching ─────────────────────────────────────────────────────────


def test_normalized_title_fallback():
    result = _result(title="my title")
    assert find_enrichment("  My Title ", [result]) is result


def test_exact_match_preferred():
    loose = _result(title="my title", enriched_date="2020")
    exact = _result(title="  My Title ", enriched_date="2021")
    assert find_enrichment("  My Title ", [loose, exact]) is exact


def test_no_match():
    assert find_enrichment("Something else", [_result()]) is None


# ── Merge ────────────────────────────────────────────────────────────


def test_accepted_result_is_merged():
    source = Source(
        title="My Title",
        url="https://example.com/articles/x",
        type="Article",
        summary="About things",
        venue="NeurIPS",
    )
    merged = merge_source(source, _result(enriched_date="2023-05", confidence="medium"))

    assert merged.published_date == date(2023, 5, 1)
    assert merged.year == 2023
    assert merged.date_enriched is True
    assert merged.enrichment_source == "URL path"
    assert merged.enrichment_confidence == "medium"
    # untouched fields
    assert merged.url == source.url
    assert merged.type == "Article"
    assert merged.summary == "About things"
    assert merged.to_record()["venue"] == "NeurIPS"
    # original not mutated
    assert source.published_date is None
    assert source.date_enriched is False


def test_bad_shape_is_not_merged():
    source = Source(title="My Title")
    assert merge_source(source, _result(enriched_date="sometime in 2023")) is source


def test_merge_sources_counts_changes():
    sources = [Source(title="My Title"), Source(title="Other")]
    outcome = merge_sources(sources, [_result()])
    assert outcome.enriched_count == 1
    assert outcome.sources[0].published_date == date(2023, 5, 10)
    assert outcome.sources[1] is sources[1]


def test_merge_is_idempotent():
    sources = [Source(title="My Title"), Source(title="Other", year=2019)]
    results = [_result(), _result(title="Other", enriched_date="2019-07")]
    first = merge_sources(sources, results)
    second = merge_sources(first.sources, results)
    assert first.enriched_count == 2
    assert second.enriched_count == 0
    assert [s.to_record() for s in second.sources] == [s.to_record() for s in first.sources]


# ── Gating Law ───────────────────────────────────────────────────────


def _random_source(rng: random.Random, i: int) -> Source:
    record = {"title": f"Source {i} {rng.choice(['alpha', 'beta', 'gamma'])}"}
    if rng.random() < 0.5:
        record["url"] = f"https://example.com/{rng.randint(1, 999)}"
    if rng.random() < 0.4:
        record["published_date"] = f"{rng.randint(1990, 2025)}-{rng.randint(1, 12):02d}-{rng.randint(1, 28):02d}"
    elif rng.random() < 0.5:
        record["year"] = rng.randint(1990, 2025)
    if rng.random() < 0.3:
        record["dateEnriched"] = True
        record["enrichmentConfidence"] = rng.choice(["high", "medium"])
        record["enrichmentSource"] = "earlier run"
    if rng.random() < 0.3:
        record["summary"] = "x" * rng.randint(0, 40)
    return Source.model_validate(record)


def _rejected_result(rng: random.Random, title: str) -> EnrichedSourceDate:
    if rng.random() < 0.5:
        return _result(title=title, enriched_date=rng.choice(["2023-05-01", "2020", "2019-03"]),
                       confidence="low")
    return _result(title=title, enriched_date=rng.choice([None, ""]),
                   confidence=rng.choice(["high", "medium", "low"]))


def test_rejected_results_leave_sources_unchanged():
    rng = random.Random(20240517)
    for trial in range(200):
        sources = [_random_source(rng, i) for i in range(rng.randint(1, 6))]
        before = [s.to_record() for s in sources]
        results = [_rejected_result(rng, s.title) for s in sources]
        rng.shuffle(results)

        outcome = merge_sources(sources, results)

        assert outcome.enriched_count == 0, trial
        assert all(a is b for a, b in zip(outcome.sources, sources)), trial
        assert [s.to_record() for s in outcome.sources] == before, trial
