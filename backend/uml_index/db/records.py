"""Structured record store for rendered diagrams."""

from __future__ import annotations

import sqlite3
from typing import Sequence

from uml_index.core.errors import StoreError
from uml_index.db.sqlite import SQLiteDatabase
from uml_index.models.entities import DiagramRecord, DiagramType
from uml_index.utils.time import now_ms

_COLUMNS = "id, origin, source, source_sha256, diagram_type, svg, png_base64, ascii, created_at"


class RecordStore:
    """Query, batch-delete and insert :class:`DiagramRecord` rows."""

    def __init__(self, database: SQLiteDatabase) -> None:
        self.db = database

    def find_by_origin(self, origin: str) -> list[DiagramRecord]:
        try:
            rows = self.db.query(
                f"SELECT {_COLUMNS} FROM umls WHERE origin = ? ORDER BY id ASC",
                [origin],
            )
        except sqlite3.Error as exc:
            raise StoreError(f"failed to query records for {origin}: {exc}") from exc
        return [_row_to_record(row) for row in rows]

    def get(self, record_id: int) -> DiagramRecord | None:
        try:
            row = self.db.execute(f"SELECT {_COLUMNS} FROM umls WHERE id = ?", [record_id]).fetchone()
        except sqlite3.Error as exc:
            raise StoreError(f"failed to load record {record_id}: {exc}") from exc
        return _row_to_record(row) if row else None

    def get_many(self, record_ids: Sequence[int]) -> dict[int, DiagramRecord]:
        if not record_ids:
            return {}
        placeholders = ",".join("?" for _ in record_ids)
        try:
            rows = self.db.query(
                f"SELECT {_COLUMNS} FROM umls WHERE id IN ({placeholders})",
                list(record_ids),
            )
        except sqlite3.Error as exc:
            raise StoreError(f"failed to load records: {exc}") from exc
        return {row["id"]: _row_to_record(row) for row in rows}

    def delete_many(self, record_ids: Sequence[int]) -> int:
        """Delete all given ids in a single transaction."""
        if not record_ids:
            return 0
        placeholders = ",".join("?" for _ in record_ids)
        try:
            with self.db.transaction() as cursor:
                cursor.execute(f"DELETE FROM umls WHERE id IN ({placeholders})", list(record_ids))
                return cursor.rowcount
        except sqlite3.Error as exc:
            raise StoreError(f"failed to delete records {list(record_ids)}: {exc}") from exc

    def insert(self, record: DiagramRecord) -> int:
        """Persist ``record`` and return its newly assigned id."""
        created_at = record.created_at or now_ms()
        try:
            with self.db.transaction() as cursor:
                cursor.execute(
                    """
                    INSERT INTO umls (origin, source, source_sha256, diagram_type, svg, png_base64, ascii, created_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    [
                        record.origin,
                        record.source,
                        record.source_sha256,
                        record.diagram_type.value,
                        record.svg,
                        record.png_base64,
                        record.ascii,
                        created_at,
                    ],
                )
                record_id = cursor.lastrowid
        except sqlite3.Error as exc:
            raise StoreError(f"failed to insert record for {record.origin}: {exc}") from exc
        record.id = record_id
        record.created_at = created_at
        return record_id

    def count(self, origin: str | None = None) -> int:
        if origin is None:
            row = self.db.execute("SELECT COUNT(*) AS count FROM umls").fetchone()
        else:
            row = self.db.execute("SELECT COUNT(*) AS count FROM umls WHERE origin = ?", [origin]).fetchone()
        return int(row["count"]) if row else 0


def _row_to_record(row: sqlite3.Row) -> DiagramRecord:
    return DiagramRecord(
        id=row["id"],
        origin=row["origin"],
        source=row["source"],
        source_sha256=row["source_sha256"],
        diagram_type=DiagramType(row["diagram_type"]),
        svg=row["svg"],
        png_base64=row["png_base64"],
        ascii=row["ascii"],
        created_at=row["created_at"],
    )


__all__ = ["RecordStore"]
