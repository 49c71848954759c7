"""Exception hierarchy for indexing runs.

Anything derived from :class:`InfrastructureError` is fatal for the current
run: the synchronizer stops processing blocks and re-raises it to the caller.
Validation rejections (invalid syntax, no identifiable diagram) are ordinary
outcomes and never surface as exceptions.
"""

from __future__ import annotations


class UmlIndexError(Exception):
    """Base class for all UML Index errors."""


class InfrastructureError(UmlIndexError):
    """A collaborator (store, index, checker, renderer) could not do its job."""


class StoreError(InfrastructureError):
    """The structured record store failed a query or write."""


class SearchIndexError(InfrastructureError):
    """The full-text search index could not be opened or modified."""


class DocumentNotFoundError(SearchIndexError):
    """A search document addressed by key does not exist."""

    def __init__(self, key: str) -> None:
        super().__init__(f"no such document: {key}")
        self.key = key


class SyntaxCheckError(InfrastructureError):
    """The syntax checker call itself failed (not an invalid-syntax verdict)."""


class RenderError(InfrastructureError):
    """One of the render calls failed."""


class ContentLoadError(InfrastructureError):
    """Content for an origin could not be loaded."""


__all__ = [
    "UmlIndexError",
    "InfrastructureError",
    "StoreError",
    "SearchIndexError",
    "DocumentNotFoundError",
    "SyntaxCheckError",
    "RenderError",
    "ContentLoadError",
]
