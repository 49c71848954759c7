"""Replace-all synchronisation of one origin into the record store and search index."""

from __future__ import annotations

import logging
import time
from typing import Callable, Protocol

from uml_index.core.config import Settings
from uml_index.core.errors import (
    DocumentNotFoundError,
    RenderError,
    SearchIndexError,
    StoreError,
    SyntaxCheckError,
)
from uml_index.core.logging import get_logger
from uml_index.core.metrics import BLOCK_COUNT, EVICTED_RECORDS, RUN_COUNT, RUN_DURATION
from uml_index.db.records import RecordStore
from uml_index.db.search_index import SearchIndex
from uml_index.ingest.checker import CheckResult, SyntaxChecker
from uml_index.ingest.classifier import classify
from uml_index.ingest.extractor import SourceExtractor
from uml_index.ingest.renderer import RenderingPipeline
from uml_index.models.entities import DiagramRecord, SearchDocument, SyncResult
from uml_index.utils.hashing import sha256_text

LogAdapter = logging.LoggerAdapter
IndexOpener = Callable[[str], SearchIndex]


class OriginSync(Protocol):
    """How records of one origin are evicted from and written to both stores."""

    def evict(self, origin: str) -> int:
        """Remove every record of ``origin`` and its search document; return the count."""
        ...

    def persist(self, record: DiagramRecord) -> bool:
        """Store ``record``; return False if it was stored but could not be indexed."""
        ...


class SequentialOriginSync:
    """Delete-then-insert across both stores with no shared transaction.

    A record whose search document fails to write stays in the record store
    without a searchable counterpart until the origin is processed again.
    """

    def __init__(self, records: RecordStore, index: SearchIndex, log: LogAdapter) -> None:
        self.records = records
        self.index = index
        self.log = log

    def evict(self, origin: str) -> int:
        try:
            stale = self.records.find_by_origin(origin)
        except StoreError as exc:
            self.log.critical("failed to fetch old records: %s", exc)
            raise
        if not stale:
            return 0

        ids = [record.id for record in stale if record.id is not None]
        self.log.info("there are old records found, so delete them: %s", ids)
        try:
            self.records.delete_many(ids)
        except StoreError as exc:
            self.log.critical("failed to delete old records: %s", exc)
            raise

        for record_id in ids:
            try:
                self.index.delete(str(record_id))
            except DocumentNotFoundError:
                self.log.info("document %s was not in the search index", record_id)
            except SearchIndexError as exc:
                self.log.critical("failed to delete document from search index: %s", exc)
                raise
            else:
                self.log.info("deleted document from search index: %s", record_id)
        EVICTED_RECORDS.inc(len(ids))
        return len(ids)

    def persist(self, record: DiagramRecord) -> bool:
        try:
            self.records.insert(record)
        except StoreError as exc:
            self.log.critical("put error: %s", exc)
            raise

        document = SearchDocument.for_record(record)
        try:
            self.index.put(document.key, document.document)
        except SearchIndexError as exc:
            self.log.error("failed to put document %s to search index: %s", document.key, exc)
            return False
        return True


SyncFactory = Callable[[RecordStore, SearchIndex, LogAdapter], OriginSync]


class IndexSynchronizer:
    """Extract, validate, classify, render and persist all blocks of one origin."""

    def __init__(
        self,
        records: RecordStore,
        open_index: IndexOpener,
        checker: SyntaxChecker,
        pipeline: RenderingPipeline,
        extractor: SourceExtractor | None = None,
        index_name: str = "uml_source",
        timeout: float | None = None,
        logger: logging.Logger | None = None,
        sync_factory: SyncFactory = SequentialOriginSync,
    ) -> None:
        self.records = records
        self.open_index = open_index
        self.checker = checker
        self.pipeline = pipeline
        self.extractor = extractor or SourceExtractor()
        self.index_name = index_name
        self.timeout = timeout
        self.logger = logger or get_logger(__name__)
        self.sync_factory = sync_factory

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        records: RecordStore,
        checker: SyntaxChecker,
        pipeline: RenderingPipeline,
        logger: logging.Logger | None = None,
    ) -> "IndexSynchronizer":
        return cls(
            records=records,
            open_index=lambda name: SearchIndex.open(settings.search_db_path, name),
            checker=checker,
            pipeline=pipeline,
            extractor=SourceExtractor(
                start_marker=settings.start_marker,
                end_marker=settings.end_marker,
                min_length=settings.min_source_length,
            ),
            index_name=settings.index_name,
            timeout=settings.collaborator_timeout,
            logger=logger,
        )

    def process(self, origin: str, content: str) -> SyncResult:
        """Replace every record of ``origin`` with the blocks found in ``content``.

        Raises the first fatal error; records written before it are kept.
        """
        log = logging.LoggerAdapter(self.logger, {"ctx_origin": origin})
        result = SyncResult(origin=origin)
        started = time.perf_counter()
        try:
            self._run(origin, content, result, log)
        except Exception:
            RUN_COUNT.labels(status="failed").inc()
            raise
        finally:
            RUN_DURATION.observe(time.perf_counter() - started)
        RUN_COUNT.labels(status="succeeded").inc()
        log.info(
            "finished indexing: found=%d created=%d skipped=%d unindexed=%d",
            result.found,
            result.created,
            result.skipped,
            result.unindexed,
        )
        return result

    def _run(self, origin: str, content: str, result: SyncResult, log: LogAdapter) -> None:
        try:
            index = self.open_index(self.index_name)
        except SearchIndexError as exc:
            log.critical("failed to open search index %s: %s", self.index_name, exc)
            raise

        try:
            sync = self.sync_factory(self.records, index, log)
            result.evicted = sync.evict(origin)

            for source in self.extractor.find_blocks(content):
                result.found += 1
                record = self._build_record(origin, source, log)
                if record is None:
                    result.skipped += 1
                    BLOCK_COUNT.labels(outcome="skipped").inc()
                    continue
                indexed = sync.persist(record)
                result.created += 1
                result.record_ids.append(record.id)
                BLOCK_COUNT.labels(outcome="created").inc()
                if not indexed:
                    result.unindexed += 1
                    BLOCK_COUNT.labels(outcome="unindexed").inc()
        finally:
            index.close()

    def _build_record(self, origin: str, source: str, log: LogAdapter) -> DiagramRecord | None:
        log.info("process source: %s", source)
        check = self._check(source, log)
        if not check.valid:
            log.info("invalid syntax (line %s): %s", check.error_line, source)
            return None
        if not check.has_diagram:
            log.info("invalid diagram: %s", source)
            return None

        diagram_type = classify(source, check.category)
        try:
            rendered = self.pipeline.render(source, timeout=self.timeout)
        except RenderError as exc:
            log.critical("failed to render: %s", exc)
            raise
        log.debug("rendered %s diagram", diagram_type.value)

        return DiagramRecord(
            origin=origin,
            source=source,
            source_sha256=sha256_text(source),
            diagram_type=diagram_type,
            svg=rendered.svg,
            png_base64=rendered.png_base64,
            ascii=rendered.ascii,
        )

    def _check(self, source: str, log: LogAdapter) -> CheckResult:
        try:
            result = self.checker.check(source, timeout=self.timeout)
        except SyntaxCheckError as exc:
            log.critical("failed to check syntax: %s", exc)
            raise
        except Exception as exc:
            log.critical("failed to check syntax: %s", exc)
            raise SyntaxCheckError(str(exc)) from exc
        log.info("syntax check result: %s", result)
        return result


__all__ = ["OriginSync", "SequentialOriginSync", "IndexSynchronizer"]
