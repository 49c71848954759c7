"""Shared, lazily built service instances."""

from __future__ import annotations

from functools import lru_cache

from uml_index.core.config import Settings, get_settings
from uml_index.db.records import RecordStore
from uml_index.db.search_index import SearchIndex
from uml_index.db.sqlite import SQLiteDatabase
from uml_index.ingest.checker import PlantUMLSyntaxChecker, SyntaxChecker
from uml_index.ingest.renderer import (
    PlantUMLJarRenderer,
    PlantUMLServerRenderer,
    Renderer,
    RenderingPipeline,
)
from uml_index.ingest.synchronizer import IndexSynchronizer

_DB: SQLiteDatabase | None = None
_SYNCHRONIZER: IndexSynchronizer | None = None


@lru_cache(maxsize=1)
def get_app_settings() -> Settings:
    return get_settings()


def get_database() -> SQLiteDatabase:
    global _DB
    if _DB is None:
        settings = get_app_settings()
        db = SQLiteDatabase(settings.db_path)
        db.ensure_schema()
        _DB = db
    return _DB


def get_record_store() -> RecordStore:
    return RecordStore(get_database())


def open_search_index() -> SearchIndex:
    settings = get_app_settings()
    return SearchIndex.open(settings.search_db_path, settings.index_name)


def get_syntax_checker() -> SyntaxChecker:
    settings = get_app_settings()
    return PlantUMLSyntaxChecker(settings.plantuml_jar, java_bin=settings.java_bin)


def get_renderer() -> Renderer:
    settings = get_app_settings()
    if settings.renderer_backend == "jar":
        return PlantUMLJarRenderer(settings.plantuml_jar, java_bin=settings.java_bin)
    return PlantUMLServerRenderer(settings.plantuml_server_url)


def get_synchronizer() -> IndexSynchronizer:
    global _SYNCHRONIZER
    if _SYNCHRONIZER is None:
        _SYNCHRONIZER = IndexSynchronizer.from_settings(
            get_app_settings(),
            records=get_record_store(),
            checker=get_syntax_checker(),
            pipeline=RenderingPipeline(get_renderer()),
        )
    return _SYNCHRONIZER


def reset() -> None:
    """Drop cached instances so the next access rebuilds them."""
    global _DB, _SYNCHRONIZER
    if _DB is not None:
        _DB.close()
    _DB = None
    _SYNCHRONIZER = None
    get_app_settings.cache_clear()
    get_settings.cache_clear()


__all__ = [
    "get_app_settings",
    "get_database",
    "get_record_store",
    "open_search_index",
    "get_syntax_checker",
    "get_renderer",
    "get_synchronizer",
    "reset",
]
