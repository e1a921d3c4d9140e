"""SQLite-backed index for Sieve.

Holds the three index tables (vocabulary, postings, documents) plus a
one-row meta table.  Query-time connections are opened read-only; only
`sieve load` opens a writable store to import a JSON dump.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path

from engine.errors import IndexConsistencyError, IndexFormatError
from engine.index import IndexReader, InMemoryIndex, Posting

DEFAULT_DB_PATH = "sieve.db"
REQUIRED_TABLES = ("vocabulary", "postings", "documents", "meta")


class IndexStore(IndexReader):
    def __init__(self, db_path: str = DEFAULT_DB_PATH, read_only: bool = True):
        self.db_path = db_path
        self.read_only = read_only
        if read_only:
            if not Path(db_path).exists():
                raise FileNotFoundError(f"Index database not found: {db_path}")
            uri = f"{Path(db_path).resolve().as_uri()}?mode=ro"
            self.conn = sqlite3.connect(uri, uri=True, check_same_thread=False)
        else:
            self.conn = sqlite3.connect(db_path)
        self.conn.row_factory = sqlite3.Row
        try:
            if read_only:
                self._check_tables()
            else:
                self._init_tables()
        except sqlite3.DatabaseError as e:
            self.conn.close()
            raise IndexFormatError(f"{db_path} is not a Sieve index: {e}") from e
        except IndexFormatError:
            self.conn.close()
            raise

    def __enter__(self) -> IndexStore:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # ── Schema ──────────────────────────────────────────────────────

    def _init_tables(self) -> None:
        stmts = [
            """CREATE TABLE IF NOT EXISTS vocabulary (
                term    TEXT PRIMARY KEY,
                term_id INTEGER NOT NULL UNIQUE,
                idf     REAL NOT NULL
            )""",
            """CREATE TABLE IF NOT EXISTS postings (
                term_id INTEGER NOT NULL,
                doc_id  INTEGER NOT NULL,
                weight  REAL NOT NULL,
                PRIMARY KEY (term_id, doc_id)
            )""",
            """CREATE TABLE IF NOT EXISTS documents (
                doc_id INTEGER PRIMARY KEY,
                norm   REAL NOT NULL
            )""",
            """CREATE TABLE IF NOT EXISTS meta (
                id        INTEGER PRIMARY KEY CHECK (id = 1),
                source    TEXT,
                loaded_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )""",
        ]
        cur = self.conn.cursor()
        for stmt in stmts:
            cur.execute(stmt)
        self.conn.commit()

    def _check_tables(self) -> None:
        rows = self.conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'").fetchall()
        missing = sorted(set(REQUIRED_TABLES) - {row["name"] for row in rows})
        if missing:
            raise IndexFormatError(f"{self.db_path} is missing tables: {missing}")

    # ── Index contract ─────────────────────────────────────────────

    def lookup_term(self, term: str) -> tuple[int, float] | None:
        row = self.conn.execute(
            "SELECT term_id, idf FROM vocabulary WHERE term = ?", (term,)
        ).fetchone()
        return (row["term_id"], row["idf"]) if row else None

    def postings(self, term_id: int) -> list[Posting]:
        rows = self.conn.execute(
            "SELECT doc_id, weight FROM postings WHERE term_id = ? ORDER BY doc_id",
            (term_id,),
        ).fetchall()
        return [(row["doc_id"], row["weight"]) for row in rows]

    def doc_norm(self, doc_id: int) -> float:
        row = self.conn.execute(
            "SELECT norm FROM documents WHERE doc_id = ?", (doc_id,)
        ).fetchone()
        if row is None:
            raise IndexConsistencyError(doc_id)
        return row["norm"]

    # ── Import ─────────────────────────────────────────────────────

    def delete_all(self) -> None:
        for table in ("vocabulary", "postings", "documents", "meta"):
            self.conn.execute(f"DELETE FROM {table}")
        self.conn.commit()

    def write_index(self, index: InMemoryIndex, source: str | None = None) -> None:
        """Copy an in-memory index into the store in one transaction."""
        if self.read_only:
            raise PermissionError(f"Index store {self.db_path} is open read-only.")
        with self.conn:
            self.conn.executemany(
                "INSERT OR REPLACE INTO vocabulary (term, term_id, idf) VALUES (?, ?, ?)",
                [(term, tid, idf) for term, (tid, idf) in index.vocabulary.items()],
            )
            self.conn.executemany(
                "INSERT OR REPLACE INTO postings (term_id, doc_id, weight) VALUES (?, ?, ?)",
                [
                    (tid, doc_id, weight)
                    for tid, plist in index.posting_lists.items()
                    for doc_id, weight in plist
                ],
            )
            self.conn.executemany(
                "INSERT OR REPLACE INTO documents (doc_id, norm) VALUES (?, ?)",
                list(index.documents.items()),
            )
            self.conn.execute(
                "INSERT OR REPLACE INTO meta (id, source, loaded_at) "
                "VALUES (1, ?, CURRENT_TIMESTAMP)",
                (source,),
            )

    # ── Stats ──────────────────────────────────────────────────────

    def get_stats(self) -> dict:
        counts = {}
        for table, key in (("vocabulary", "terms"), ("postings", "postings"), ("documents", "documents")):
            counts[key] = self.conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
        row = self.conn.execute("SELECT source, loaded_at FROM meta WHERE id = 1").fetchone()
        counts["source"] = row["source"] if row else None
        counts["loaded_at"] = row["loaded_at"] if row else None
        return counts

    # ── Utilities ──────────────────────────────────────────────────

    def close(self) -> None:
        self.conn.close()
