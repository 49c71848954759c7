"""Tests for diagram type classification."""

import pytest

from uml_index.ingest.classifier import classify
from uml_index.models.entities import DiagramType

USECASE = "@startuml\nactor User\nUser --> (Log in)\n@enduml"
COMPONENT = "@startuml\n[Frontend] --> [Backend]\n@enduml"


@pytest.mark.parametrize(
    ("category", "expected"),
    [
        ("SEQUENCE", DiagramType.SEQUENCE),
        ("CLASS", DiagramType.CLASS),
        ("ACTIVITY", DiagramType.ACTIVITY),
        ("STATE", DiagramType.STATE),
    ],
)
def test_direct_categories(category: str, expected: DiagramType) -> None:
    assert classify(COMPONENT, category) is expected


def test_description_with_actor_is_usecase() -> None:
    assert classify(USECASE, "DESCRIPTION") is DiagramType.USECASE
    assert classify("@startuml\nusecase (Pay)\n@enduml", "DESCRIPTION") is DiagramType.USECASE


def test_description_without_actor_is_component() -> None:
    assert classify(COMPONENT, "DESCRIPTION") is DiagramType.COMPONENT


def test_component_labelled_actor_is_misclassified() -> None:
    source = '@startuml\n[Frontend] --> [Backend] : "actor lookup"\n@enduml'
    assert classify(source, "DESCRIPTION") is DiagramType.USECASE


@pytest.mark.parametrize("category", ["OBJECT", "MINDMAP", "", "sequence", None])
def test_unrecognised_categories_fall_back_to_unknown(category: str | None) -> None:
    assert classify(USECASE, category) is DiagramType.UNKNOWN
