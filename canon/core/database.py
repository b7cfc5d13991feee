"""SQLite canon store: authors with inline sources, camps, and enrichment runs."""

import json
import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path

from canon.core.config import ConfigurationError
from canon.core.models import RELEVANCES, Author, Camp, CampAuthor, Source

logger = logging.getLogger(__name__)

DATA_ROOT = Path("data")

RUN_STATUSES = ("running", "completed", "failed")

# ── Schema DDL ───────────────────────────────────────────────────────

_SCHEMA = """
CREATE TABLE IF NOT EXISTS authors (
    id              TEXT PRIMARY KEY,
    name            TEXT NOT NULL,
    affiliation     TEXT,
    sources         TEXT NOT NULL DEFAULT '[]',  -- JSON array
    created_at      TEXT NOT NULL,
    updated_at      TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS camps (
    id              TEXT PRIMARY KEY,
    label           TEXT NOT NULL,
    domain_id       INTEGER NOT NULL,
    description     TEXT
);

CREATE INDEX IF NOT EXISTS idx_camps_domain ON camps(domain_id);

CREATE TABLE IF NOT EXISTS camp_authors (
    id                  INTEGER PRIMARY KEY,
    camp_id             TEXT NOT NULL REFERENCES camps(id),
    author_id           TEXT NOT NULL REFERENCES authors(id),
    relevance           TEXT NOT NULL DEFAULT 'strong'
                        CHECK (relevance IN ('strong', 'partial', 'challenges', 'emerging')),
    position_summary    TEXT,
    quote               TEXT,
    UNIQUE (camp_id, author_id)
);

CREATE INDEX IF NOT EXISTS idx_camp_authors_author ON camp_authors(author_id);

CREATE TABLE IF NOT EXISTS enrichment_runs (
    id              INTEGER PRIMARY KEY,
    config_hash     TEXT NOT NULL,
    started_at      TEXT NOT NULL,
    completed_at    TEXT,
    status          TEXT NOT NULL DEFAULT 'running'
                    CHECK (status IN ('running', 'completed', 'failed')),
    summary         TEXT NOT NULL DEFAULT '{}'  -- JSON run report
);
"""


# ── CanonDatabase ────────────────────────────────────────────────────


class CanonDatabase:
    """SQLite store for one canon; the datastore the enrichment pipeline talks to."""

    def __init__(self, canon_name: str, data_root: Path | None = None):
        if not canon_name:
            raise ConfigurationError("Canon database name is not configured")
        root = (data_root or DATA_ROOT) / canon_name
        try:
            root.mkdir(parents=True, exist_ok=True)
            self.db_path = root / "canon.db"
            self._conn = sqlite3.connect(str(self.db_path))
        except (OSError, sqlite3.Error) as exc:
            raise ConfigurationError(f"Cannot open canon database at {root}: {exc}") from exc
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute("PRAGMA foreign_keys=ON")
        self._conn.executescript(_SCHEMA)
        self._conn.commit()

    # ── Authors ──────────────────────────────────────────────

    def add_authors(self, authors: list[Author]) -> int:
        """Insert authors, skipping ids that already exist. Returns count added."""
        now = _now()
        added = 0
        for author in authors:
            try:
                self._conn.execute(
                    """INSERT INTO authors
                       (id, name, affiliation, sources, created_at, updated_at)
                       VALUES (?, ?, ?, ?, ?, ?)""",
                    (
                        author.id,
                        author.name,
                        author.affiliation,
                        _dump_sources(author.sources),
                        now,
                        now,
                    ),
                )
                added += 1
            except sqlite3.IntegrityError:
                # existing id
                continue

        self._conn.commit()
        logger.info("Added %d/%d authors (existing ids skipped)", added, len(authors))
        return added

    def get_author(self, author_id: str) -> Author:
        row = self._conn.execute(
            "SELECT * FROM authors WHERE id = ?", (author_id,)
        ).fetchone()
        if row is None:
            raise ValueError(f"Author {author_id} not found")
        return _row_to_author(row)

    def list_authors(self) -> list[Author]:
        rows = self._conn.execute("SELECT * FROM authors ORDER BY rowid").fetchall()
        return [_row_to_author(r) for r in rows]

    def list_authors_with_sources(self) -> list[Author]:
        """Authors whose inline source list is non-empty, in insertion order."""
        return [a for a in self.list_authors() if a.sources]

    def update_author_sources(self, author_id: str, sources: list[Source]) -> None:
        """Replace an author's full source list in one write.

        Sources equal to the stored record at the same position are written
        back as that record unchanged. A changed source with the same title
        and URL keeps every stored key and adds or overwrites only the keys
        it now carries.
        """
        row = self._conn.execute(
            "SELECT sources FROM authors WHERE id = ?", (author_id,)
        ).fetchone()
        if row is None:
            raise ValueError(f"Author {author_id} not found")
        stored = json.loads(row["sources"] or "[]")
        self._conn.execute(
            "UPDATE authors SET sources = ?, updated_at = ? WHERE id = ?",
            (json.dumps(_overlay_records(stored, sources)), _now(), author_id),
        )
        self._conn.commit()

    # ── Camps ────────────────────────────────────────────────

    def add_camp(self, camp: Camp) -> None:
        """Insert a camp and its memberships."""
        self._conn.execute(
            "INSERT INTO camps (id, label, domain_id, description) VALUES (?, ?, ?, ?)",
            (camp.id, camp.label, camp.domain_id, camp.description),
        )
        for member in camp.authors:
            self._insert_membership(camp.id, member)
        self._conn.commit()

    def add_camp_author(
        self,
        camp_id: str,
        author_id: str,
        relevance: str = "strong",
        position_summary: str | None = None,
        quote: str | None = None,
    ) -> None:
        """Attach an author to a camp."""
        if relevance not in RELEVANCES:
            raise ValueError(f"Invalid relevance: {relevance}")
        member = CampAuthor(
            author_id=author_id,
            relevance=relevance,
            position_summary=position_summary,
            quote=quote,
        )
        self._insert_membership(camp_id, member)
        self._conn.commit()

    def list_camps(self) -> list[Camp]:
        """All camps with their memberships."""
        camps = {
            r["id"]: Camp(
                id=r["id"],
                label=r["label"],
                domain_id=r["domain_id"],
                description=r["description"],
            )
            for r in self._conn.execute("SELECT * FROM camps ORDER BY rowid").fetchall()
        }
        rows = self._conn.execute("SELECT * FROM camp_authors ORDER BY id").fetchall()
        for r in rows:
            camps[r["camp_id"]].authors.append(
                CampAuthor(
                    author_id=r["author_id"],
                    relevance=r["relevance"],
                    position_summary=r["position_summary"],
                    quote=r["quote"],
                )
            )
        return list(camps.values())

    def _insert_membership(self, camp_id: str, member: CampAuthor) -> None:
        try:
            self._conn.execute(
                """INSERT INTO camp_authors
                   (camp_id, author_id, relevance, position_summary, quote)
                   VALUES (?, ?, ?, ?, ?)""",
                (
                    camp_id,
                    member.author_id,
                    member.relevance,
                    member.position_summary,
                    member.quote,
                ),
            )
        except sqlite3.IntegrityError as exc:
            self._conn.rollback()
            raise ValueError(
                f"Cannot add author {member.author_id} to camp {camp_id}: {exc}"
            ) from exc

    # ── Enrichment Runs ──────────────────────────────────────

    def start_run(self, config_hash: str) -> int:
        """Record the start of an enrichment run. Returns the run id."""
        cur = self._conn.execute(
            """INSERT INTO enrichment_runs (config_hash, started_at, status, summary)
               VALUES (?, ?, 'running', '{}')""",
            (config_hash, _now()),
        )
        self._conn.commit()
        return cur.lastrowid

    def finish_run(self, run_id: int, status: str, summary: dict | None = None) -> None:
        if status not in RUN_STATUSES:
            raise ValueError(f"Invalid run status: {status}")
        self._conn.execute(
            """UPDATE enrichment_runs
               SET status = ?, completed_at = ?, summary = ?
               WHERE id = ?""",
            (status, _now(), json.dumps(summary or {}), run_id),
        )
        self._conn.commit()

    def get_runs(self) -> list[dict]:
        rows = self._conn.execute("SELECT * FROM enrichment_runs ORDER BY id").fetchall()
        runs = []
        for r in rows:
            run = dict(r)
            run["summary"] = json.loads(run["summary"])
            runs.append(run)
        return runs

    # ── Import ───────────────────────────────────────────────

    def import_canon(self, path: str | Path) -> dict:
        """Seed from a JSON export: ``{"authors": [...], "camps": [...]}``."""
        with open(path) as f:
            raw = json.load(f)

        authors = [Author.model_validate(a) for a in raw.get("authors", [])]
        added_authors = self.add_authors(authors)

        added_camps = 0
        existing = {c.id for c in self.list_camps()}
        for item in raw.get("camps", []):
            camp = Camp.model_validate(item)
            if camp.id in existing:
                continue
            self.add_camp(camp)
            added_camps += 1

        logger.info(
            "Imported %d authors and %d camps from %s", added_authors, added_camps, path
        )
        return {"authors": added_authors, "camps": added_camps}

    # ── Stats ────────────────────────────────────────────────

    def get_canon_stats(self) -> dict:
        authors = self.list_authors()
        return {
            "total_authors": len(authors),
            "authors_with_sources": sum(1 for a in authors if a.sources),
            "total_sources": sum(len(a.sources) for a in authors),
            "total_camps": self._conn.execute("SELECT COUNT(*) FROM camps").fetchone()[0],
            "total_runs": self._conn.execute(
                "SELECT COUNT(*) FROM enrichment_runs"
            ).fetchone()[0],
        }

    # ── Cleanup ──────────────────────────────────────────────

    def close(self) -> None:
        self._conn.close()


# ── Helpers ──────────────────────────────────────────────────────────


def _dump_sources(sources: list[Source]) -> str:
    return json.dumps([s.to_record() for s in sources])


def _overlay_records(stored: list, sources: list[Source]) -> list[dict]:
    records = []
    for i, source in enumerate(sources):
        old = stored[i] if i < len(stored) and isinstance(stored[i], dict) else None
        prior = Source.model_validate(old) if old is not None else None
        if prior is None or (prior.title, prior.url) != (source.title, source.url):
            records.append(source.to_record())
        elif prior == source:
            records.append(old)
        else:
            records.append({**old, **source.to_record()})
    return records


def _row_to_author(row: sqlite3.Row) -> Author:
    return Author(
        id=row["id"],
        name=row["name"],
        affiliation=row["affiliation"],
        sources=[Source.model_validate(s) for s in json.loads(row["sources"] or "[]")],
    )


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()
