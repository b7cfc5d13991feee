"""Tests for editorial source validation."""

from canon.core.models import Source
from canon.quality.validation import validate_source, validate_sources


def _record(**kw):
    defaults = dict(
        title="Episode 42: Scaling and its discontents",
        url="https://youtube.com/watch?v=abc123",
        published_date="2023-05-10",
        type="Video",
        summary="Discussion of where scaling laws stop predicting capability.",
    )
    defaults.update(kw)
    return defaults


def test_clean_source_is_valid():
    result = validate_source(_record())
    assert result.valid is True
    assert result.errors == []
    assert result.warnings == []
    assert result.quality == "specific"


def test_generic_url_is_an_error():
    result = validate_source(_record(url="https://youtube.com/@someone"))
    assert result.valid is False
    assert result.errors[0].startswith("Generic URL not allowed")
    assert result.quality == "generic"


def test_generic_title_is_an_error():
    result = validate_source(_record(title="Company Website"))
    assert result.valid is False
    assert any(e.startswith("Generic title not allowed") for e in result.errors)


def test_ambiguous_url_is_only_a_warning():
    result = validate_source(_record(url="https://example.com/research/agents"))
    assert result.valid is True
    assert any(w.startswith("URL may be generic") for w in result.warnings)
    assert result.quality == "ambiguous"


def test_wrong_date_format():
    result = validate_source(_record(published_date="2023/05/10"))
    assert result.valid is False
    assert "YYYY-MM-DD format" in result.errors[0]


def test_impossible_calendar_date():
    result = validate_source(_record(published_date="2023-02-30"))
    assert result.valid is False
    assert "not a valid date" in result.errors[0]


def test_missing_date_warns():
    result = validate_source(_record(published_date=None))
    assert result.valid is True
    assert any(w.startswith("No date provided") for w in result.warnings)


def test_year_only_does_not_warn_about_date():
    result = validate_source(_record(published_date=None, year=2023))
    assert not any("No date" in w for w in result.warnings)


def test_vague_type_and_short_summary_warn():
    result = validate_source(_record(type="Website", summary="Short"))
    assert result.valid is True
    assert len(result.warnings) == 2


def test_source_model_input_uses_normalized_date():
    source = Source.model_validate(_record(published_date="2023-05"))
    result = validate_source(source)
    assert result.valid is True


def test_batch_summary():
    batch = validate_sources(
        [
            _record(),
            _record(url="https://x.com/someone"),
            _record(url="https://example.com/research/agents"),
        ]
    )
    assert batch.all_valid is False
    assert batch.summary.total == 3
    assert batch.summary.valid == 2
    assert batch.summary.invalid == 1
    assert batch.summary.specific == 1
    assert batch.summary.generic == 1
    assert batch.summary.ambiguous == 1


def test_empty_batch_is_valid():
    batch = validate_sources([])
    assert batch.all_valid is True
    assert batch.summary.total == 0
