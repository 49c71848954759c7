"""Full-text search index over diagram sources, backed by SQLite FTS5."""

from __future__ import annotations

import re
import sqlite3
from dataclasses import dataclass
from pathlib import Path

from uml_index.core.errors import DocumentNotFoundError, SearchIndexError
from uml_index.db.sqlite import SQLiteDatabase

_INDEX_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_TERM_RE = re.compile(r"\w+", re.UNICODE)


@dataclass(slots=True)
class SearchHit:
    key: str
    document: str
    score: float


class SearchIndex:
    """Named FTS5 table holding one text field per string key."""

    def __init__(self, database: SQLiteDatabase, name: str) -> None:
        self.db = database
        self.name = name

    @classmethod
    def open(cls, db_path: Path, name: str) -> "SearchIndex":
        """Open (creating if needed) the index called ``name``."""
        if not _INDEX_NAME_RE.match(name):
            raise SearchIndexError(f"invalid index name: {name!r}")
        database = SQLiteDatabase(db_path)
        try:
            database.executescript(
                f'CREATE VIRTUAL TABLE IF NOT EXISTS "{name}" '
                "USING fts5(doc_key UNINDEXED, document, tokenize='unicode61');"
            )
        except sqlite3.Error as exc:
            database.close()
            raise SearchIndexError(f"failed to open search index {name}: {exc}") from exc
        return cls(database, name)

    def put(self, key: str, document: str) -> None:
        """Insert or replace the document stored under ``key``."""
        try:
            with self.db.transaction() as cursor:
                cursor.execute(f'DELETE FROM "{self.name}" WHERE doc_key = ?', [key])
                cursor.execute(
                    f'INSERT INTO "{self.name}" (doc_key, document) VALUES (?, ?)',
                    [key, document],
                )
        except sqlite3.Error as exc:
            raise SearchIndexError(f"failed to put document {key}: {exc}") from exc

    def delete(self, key: str) -> None:
        """Delete the document under ``key``; raise DocumentNotFoundError if absent."""
        try:
            with self.db.transaction() as cursor:
                cursor.execute(f'DELETE FROM "{self.name}" WHERE doc_key = ?', [key])
                deleted = cursor.rowcount
        except sqlite3.Error as exc:
            raise SearchIndexError(f"failed to delete document {key}: {exc}") from exc
        if deleted == 0:
            raise DocumentNotFoundError(key)

    def get(self, key: str) -> str | None:
        try:
            row = self.db.execute(
                f'SELECT document FROM "{self.name}" WHERE doc_key = ?',
                [key],
            ).fetchone()
        except sqlite3.Error as exc:
            raise SearchIndexError(f"failed to read document {key}: {exc}") from exc
        return row["document"] if row else None

    def search(self, query: str, limit: int = 10) -> list[SearchHit]:
        """Return the best matching documents, most relevant first."""
        match = build_match_expression(query)
        if not match:
            return []
        try:
            rows = self.db.query(
                f'SELECT doc_key, document, bm25("{self.name}") AS score '
                f'FROM "{self.name}" WHERE "{self.name}" MATCH ? '
                "ORDER BY score ASC LIMIT ?",
                [match, limit],
            )
        except sqlite3.Error as exc:
            raise SearchIndexError(f"search failed for {query!r}: {exc}") from exc
        # FTS5 bm25() is lower-is-better; flip the sign for callers.
        return [SearchHit(key=row["doc_key"], document=row["document"], score=-float(row["score"])) for row in rows]

    def count(self) -> int:
        row = self.db.execute(f'SELECT COUNT(*) AS count FROM "{self.name}"').fetchone()
        return int(row["count"]) if row else 0

    def close(self) -> None:
        self.db.close()


def build_match_expression(query: str) -> str:
    """Quote every word of ``query`` so FTS5 never sees its own syntax."""
    terms = _TERM_RE.findall(query)
    return " ".join(f'"{term}"' for term in terms)


__all__ = ["SearchHit", "SearchIndex", "build_match_expression"]
