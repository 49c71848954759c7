"""Tests for block extraction."""

from uml_index.ingest.extractor import MINIMUM_SOURCE_LENGTH, SourceExtractor, iter_blocks

LONG_BODY = "Alice -> Bob: a message long enough to pass the minimum\n"
CLASS_BODY = "class Foo\nclass Bar\nFoo <|-- Bar : inheritance\n"


def _block(body: str = LONG_BODY) -> str:
    return f"@startuml\n{body}@enduml"


def test_finds_blocks_in_surrounding_text() -> None:
    text = f"# Readme\n\n```\n{_block()}\n```\n\nmore prose\n{_block(CLASS_BODY)}"
    blocks = list(iter_blocks(text))
    assert blocks == [_block(), _block(CLASS_BODY)]
    assert all(b.startswith("@startuml") and b.endswith("@enduml") for b in blocks)


def test_short_blocks_are_dropped() -> None:
    short = "@startuml\nAlice -> Bob: hello\n@enduml"
    assert len(short) < MINIMUM_SOURCE_LENGTH
    assert list(iter_blocks(short)) == []
    assert list(iter_blocks(short, min_length=len(short))) == [short]


def test_unterminated_start_emits_nothing() -> None:
    text = f"{_block()}\n@startuml\n{LONG_BODY}no end marker here"
    assert list(iter_blocks(text)) == [_block()]


def test_stray_end_marker_is_skipped() -> None:
    text = f"junk @enduml more junk\n{_block()}"
    assert list(iter_blocks(text)) == [_block()]


def test_nested_start_belongs_to_enclosing_block() -> None:
    # Only the first end marker closes a block; the inner start is plain text.
    text = f"@startuml\n{LONG_BODY}@startuml\nnested\n@enduml tail @enduml"
    blocks = list(iter_blocks(text))
    assert blocks == [f"@startuml\n{LONG_BODY}@startuml\nnested\n@enduml"]


def test_no_markers_yields_nothing() -> None:
    assert list(iter_blocks("")) == []
    assert list(iter_blocks("plain text without diagrams")) == []
    assert list(iter_blocks("@enduml@enduml@startuml")) == []


def test_find_blocks_is_restartable() -> None:
    blocks = SourceExtractor().find_blocks(f"{_block()}\n{_block()}")
    assert list(blocks) == list(blocks) == [_block(), _block()]


def test_custom_markers() -> None:
    extractor = SourceExtractor(start_marker="@startmindmap", end_marker="@endmindmap", min_length=10)
    text = "@startmindmap\n* root\n** leaf\n@endmindmap"
    assert list(extractor.find_blocks(text)) == [text]
