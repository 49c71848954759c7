"""Locate delimited diagram sources inside arbitrary text."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

START_MARKER = "@startuml"
END_MARKER = "@enduml"
MINIMUM_SOURCE_LENGTH = 50


def iter_blocks(
    text: str,
    start_marker: str = START_MARKER,
    end_marker: str = END_MARKER,
    min_length: int = MINIMUM_SOURCE_LENGTH,
) -> Iterator[str]:
    """Yield every ``start .. end`` block of ``text`` that is at least ``min_length`` long.

    The scan always resumes right after the end marker it just consumed, so a
    stray end marker discards whatever precedes it and an unterminated start
    marker ends the scan.
    """
    pos = 0
    while True:
        start = text.find(start_marker, pos)
        end = text.find(end_marker, pos)
        if start == -1 or end == -1:
            return
        if start < end:
            block = text[start:end] + end_marker
            if len(block) >= min_length:
                yield block
        pos = end + len(end_marker)


@dataclass(frozen=True, slots=True)
class ExtractedBlocks:
    """Restartable view over the blocks of one text body."""

    text: str
    start_marker: str = START_MARKER
    end_marker: str = END_MARKER
    min_length: int = MINIMUM_SOURCE_LENGTH

    def __iter__(self) -> Iterator[str]:
        return iter_blocks(self.text, self.start_marker, self.end_marker, self.min_length)


class SourceExtractor:
    """Configured entry point for block extraction."""

    def __init__(
        self,
        start_marker: str = START_MARKER,
        end_marker: str = END_MARKER,
        min_length: int = MINIMUM_SOURCE_LENGTH,
    ) -> None:
        if not start_marker or not end_marker:
            raise ValueError("markers must be non-empty")
        self.start_marker = start_marker
        self.end_marker = end_marker
        self.min_length = min_length

    def find_blocks(self, text: str) -> ExtractedBlocks:
        return ExtractedBlocks(text, self.start_marker, self.end_marker, self.min_length)


__all__ = [
    "START_MARKER",
    "END_MARKER",
    "MINIMUM_SOURCE_LENGTH",
    "iter_blocks",
    "ExtractedBlocks",
    "SourceExtractor",
]
