"""Internal dataclasses representing persisted entities."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class DiagramType(str, Enum):
    SEQUENCE = "sequence"
    USECASE = "usecase"
    CLASS = "class"
    ACTIVITY = "activity"
    COMPONENT = "component"
    STATE = "state"
    UNKNOWN = "unknown"


@dataclass(slots=True)
class RenderedDiagram:
    svg: str
    png_base64: str
    ascii: str


@dataclass(slots=True)
class DiagramRecord:
    """One extracted, validated and rendered block belonging to an origin."""

    origin: str
    source: str
    source_sha256: str
    diagram_type: DiagramType
    svg: str
    png_base64: str
    ascii: str
    id: int | None = None
    created_at: int | None = None


@dataclass(slots=True)
class SearchDocument:
    """Full-text projection of a record, keyed by the record id as a string."""

    key: str
    document: str

    @classmethod
    def for_record(cls, record: DiagramRecord) -> "SearchDocument":
        if record.id is None:
            raise ValueError("record has no store identity yet")
        return cls(key=str(record.id), document=record.source)


@dataclass(slots=True)
class SyncResult:
    """Counters for one synchronisation run of an origin."""

    origin: str
    evicted: int = 0
    found: int = 0
    skipped: int = 0
    created: int = 0
    unindexed: int = 0
    record_ids: list[int] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        return {
            "origin": self.origin,
            "evicted": self.evicted,
            "found": self.found,
            "skipped": self.skipped,
            "created": self.created,
            "unindexed": self.unindexed,
            "record_ids": list(self.record_ids),
        }


__all__ = [
    "DiagramType",
    "RenderedDiagram",
    "DiagramRecord",
    "SearchDocument",
    "SyncResult",
]
