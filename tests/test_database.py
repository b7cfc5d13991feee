"""Tests for the SQLite canon database."""

import json
from datetime import date

import pytest

from canon.core.config import ConfigurationError
from canon.core.database import CanonDatabase
from canon.core.models import Author, Camp, CampAuthor, Source


@pytest.fixture()
def db(tmp_path):
    """Create a fresh CanonDatabase in a temp directory."""
    cdb = CanonDatabase("test_canon", data_root=tmp_path)
    yield cdb
    cdb.close()


def _author(author_id="a1", name="Ada Lovelace", **kw):
    defaults = dict(
        id=author_id,
        name=name,
        affiliation="Analytical Engines Ltd",
        sources=[
            Source(
                title="Notes on the engine: a retrospective",
                url="https://example.com/2023/05/notes",
                published_date="2023-05-10",
                type="Article",
            )
        ],
    )
    defaults.update(kw)
    return Author(**defaults)


# ── Table Creation ───────────────────────────────────────────────────


def test_tables_exist(db):
    tables = {
        r[0]
        for r in db._conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table'"
        ).fetchall()
    }
    assert {"authors", "camps", "camp_authors", "enrichment_runs"}.issubset(tables)


def test_database_file_created(db, tmp_path):
    assert (tmp_path / "test_canon" / "canon.db").is_file()


def test_wal_mode(db):
    mode = db._conn.execute("PRAGMA journal_mode").fetchone()[0]
    assert mode == "wal"


def test_unconfigured_name_is_fatal(tmp_path):
    with pytest.raises(ConfigurationError):
        CanonDatabase("", data_root=tmp_path)


def test_unopenable_location_is_fatal(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    with pytest.raises(ConfigurationError):
        CanonDatabase("canon", data_root=blocker)


# ── Authors ──────────────────────────────────────────────────────────


def test_add_authors_skips_existing(db):
    assert db.add_authors([_author("a1"), _author("a2", "Bo")]) == 2
    assert db.add_authors([_author("a1")]) == 0
    assert [a.id for a in db.list_authors()] == ["a1", "a2"]


def test_sources_round_trip(db):
    db.add_authors([_author()])
    author = db.get_author("a1")
    assert author.sources[0].published_date == date(2023, 5, 10)
    assert author.sources[0].year == 2023
    assert author.affiliation == "Analytical Engines Ltd"


def test_get_missing_author(db):
    with pytest.raises(ValueError, match="not found"):
        db.get_author("missing")


def test_list_authors_with_sources(db):
    db.add_authors([_author("a1"), _author("a2", "Bo", sources=[])])
    assert [a.id for a in db.list_authors_with_sources()] == ["a1"]


def test_update_author_sources(db):
    db.add_authors([_author()])
    new_sources = [
        Source(title="First", url="https://arxiv.org/abs/2301.1", year=2023),
        Source(title="Second", url="https://arxiv.org/abs/2302.2", date_enriched=True,
               enrichment_source="ArXiv URL", enrichment_confidence="high",
               published_date="2023-02-01"),
    ]
    db.update_author_sources("a1", new_sources)

    author = db.get_author("a1")
    assert [s.title for s in author.sources] == ["First", "Second"]
    assert author.sources[1].date_enriched is True
    assert author.sources[1].enrichment_confidence == "high"


def test_replaced_source_does_not_inherit_stored_keys(db):
    db.add_authors([_author()])
    db.update_author_sources("a1", [Source(title="Other", url="https://arxiv.org/abs/1")])
    source = db.get_author("a1").sources[0]
    assert source.type is None
    assert source.published_date is None


def test_update_missing_author(db):
    with pytest.raises(ValueError, match="not found"):
        db.update_author_sources("missing", [])


# ── Camps ────────────────────────────────────────────────────────────


def test_add_camp_with_members(db):
    db.add_authors([_author("a1"), _author("a2", "Bo")])
    db.add_camp(
        Camp(
            id="c1",
            label="AI Safety",
            domain_id=4,
            authors=[
                CampAuthor(author_id="a1", position_summary="Argues for evals"),
                CampAuthor(author_id="a2", relevance="challenges"),
            ],
        )
    )
    camps = db.list_camps()
    assert len(camps) == 1
    assert camps[0].author_ids == ["a1", "a2"]
    assert camps[0].authors[1].relevance == "challenges"


def test_add_camp_author(db):
    db.add_authors([_author()])
    db.add_camp(Camp(id="c1", label="Future of Work", domain_id=5))
    db.add_camp_author("c1", "a1", relevance="emerging", quote="Jobs change")
    member = db.list_camps()[0].authors[0]
    assert member.relevance == "emerging"
    assert member.quote == "Jobs change"


def test_invalid_relevance(db):
    db.add_authors([_author()])
    db.add_camp(Camp(id="c1", label="X", domain_id=1))
    with pytest.raises(ValueError, match="Invalid relevance"):
        db.add_camp_author("c1", "a1", relevance="opposes")


def test_duplicate_membership(db):
    db.add_authors([_author()])
    db.add_camp(Camp(id="c1", label="X", domain_id=1))
    db.add_camp_author("c1", "a1")
    with pytest.raises(ValueError):
        db.add_camp_author("c1", "a1")


def test_membership_requires_known_author(db):
    db.add_camp(Camp(id="c1", label="X", domain_id=1))
    with pytest.raises(ValueError):
        db.add_camp_author("c1", "ghost")


# ── Enrichment Runs ──────────────────────────────────────────────────


def test_run_lifecycle(db):
    run_id = db.start_run("abc123")
    assert db.get_runs()[0]["status"] == "running"

    db.finish_run(run_id, "completed", {"totalAuthors": 3, "enrichedSources": 2})
    run = db.get_runs()[0]
    assert run["status"] == "completed"
    assert run["config_hash"] == "abc123"
    assert run["completed_at"] is not None
    assert run["summary"]["enrichedSources"] == 2


def test_invalid_run_status(db):
    run_id = db.start_run("abc123")
    with pytest.raises(ValueError, match="Invalid run status"):
        db.finish_run(run_id, "aborted")


# ── Import & Stats ───────────────────────────────────────────────────


def test_import_canon(db, tmp_path):
    export = {
        "authors": [
            {
                "id": "a1",
                "name": "Ada",
                "sources": [
                    {"title": "On engines: part one", "url": "https://example.com/blog/engines",
                     "publishedDate": "2023-05"},
                    {"title": "Undated talk with Bo", "url": "https://example.com/talks/x"},
                ],
            },
            {"id": "a2", "name": "Bo"},
        ],
        "camps": [
            {"id": "c1", "label": "AI Safety", "domain_id": 4,
             "authors": [{"author_id": "a1"}, {"author_id": "a2", "relevance": "partial"}]},
        ],
    }
    path = tmp_path / "export.json"
    path.write_text(json.dumps(export))

    assert db.import_canon(path) == {"authors": 2, "camps": 1}
    # Re-import is a no-op
    assert db.import_canon(path) == {"authors": 0, "camps": 0}

    author = db.get_author("a1")
    assert author.sources[0].published_date == date(2023, 5, 1)

    stats = db.get_canon_stats()
    assert stats == {
        "total_authors": 2,
        "authors_with_sources": 1,
        "total_sources": 2,
        "total_camps": 1,
        "total_runs": 0,
    }
