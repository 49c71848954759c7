"""Test fixtures for UML Index."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import pytest

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from uml_index.core.errors import RenderError, SyntaxCheckError  # noqa: E402
from uml_index.db.records import RecordStore  # noqa: E402
from uml_index.db.search_index import SearchIndex  # noqa: E402
from uml_index.db.sqlite import SQLiteDatabase  # noqa: E402
from uml_index.ingest.checker import CheckResult  # noqa: E402
from uml_index.ingest.renderer import RenderingPipeline  # noqa: E402
from uml_index.ingest.synchronizer import IndexSynchronizer  # noqa: E402

SEQUENCE_A = "@startuml\nAlice -> Bob: Authentication Request\nBob --> Alice: Authentication Response\n@enduml"
SEQUENCE_B = "@startuml\nBrowser -> Server: GET /index.html\nServer --> Browser: 200 OK with the page body\n@enduml"


@pytest.fixture(autouse=True)
def reset_state(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Reset cached wiring and environment between tests."""
    monkeypatch.setenv("UMLX_DB_PATH", str(tmp_path / "records.db"))
    monkeypatch.setenv("UMLX_SEARCH_DB_PATH", str(tmp_path / "search.db"))
    monkeypatch.delenv("UMLX_CONFIG", raising=False)

    from uml_index import dependencies as deps

    deps.reset()
    yield
    deps.reset()


class FakeChecker:
    """Deterministic checker keyed on the first diagram keyword of a block."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls: list[str] = []

    def check(self, source: str, timeout: float | None = None) -> CheckResult:
        self.calls.append(source)
        if self.fail:
            raise SyntaxCheckError("checker unavailable")
        if "SYNTAX_ERROR" in source:
            return CheckResult(valid=False, category="", has_diagram=False, error_line=2, message="Syntax Error?")
        if "NO_DIAGRAM" in source:
            return CheckResult(valid=True, category="EMPTY", has_diagram=False)
        if "actor" in source or "[" in source:
            return CheckResult(valid=True, category="DESCRIPTION", has_diagram=True)
        if "class " in source:
            return CheckResult(valid=True, category="CLASS", has_diagram=True)
        if "->" in source:
            return CheckResult(valid=True, category="SEQUENCE", has_diagram=True)
        return CheckResult(valid=True, category="DESCRIPTION", has_diagram=True)


class FakeRenderer:
    """Renders sources into predictable strings; can fail one format on demand."""

    def __init__(self, fail_on: str | None = None) -> None:
        self.fail_on = fail_on
        self.calls: list[tuple[str, str]] = []

    def render_svg(self, source: str, timeout: float | None = None) -> str:
        self._record("svg", source)
        return f"<svg>{len(source)}</svg>"

    def render_png(self, source: str, timeout: float | None = None) -> bytes:
        self._record("png", source)
        return b"\x89PNG" + source.encode("utf-8")[:8]

    def render_ascii(self, source: str, timeout: float | None = None) -> str:
        self._record("ascii", source)
        return f"ascii:{source.splitlines()[1]}"

    def _record(self, fmt: str, source: str) -> None:
        self.calls.append((fmt, source))
        if self.fail_on == fmt:
            raise RenderError(f"{fmt} backend unavailable")


@pytest.fixture
def record_store(tmp_path: Path) -> RecordStore:
    db = SQLiteDatabase(tmp_path / "records.db")
    db.ensure_schema()
    yield RecordStore(db)
    db.close()


@pytest.fixture
def search_db_path(tmp_path: Path) -> Path:
    return tmp_path / "search.db"


@pytest.fixture
def checker() -> FakeChecker:
    return FakeChecker()


@pytest.fixture
def renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture
def synchronizer(
    record_store: RecordStore,
    search_db_path: Path,
    checker: FakeChecker,
    renderer: FakeRenderer,
) -> IndexSynchronizer:
    return IndexSynchronizer(
        records=record_store,
        open_index=lambda name: SearchIndex.open(search_db_path, name),
        checker=checker,
        pipeline=RenderingPipeline(renderer),
        logger=logging.getLogger("uml_index.tests"),
    )


@pytest.fixture
def sequence_sources() -> tuple[str, str]:
    return SEQUENCE_A, SEQUENCE_B
