"""Map a syntax checker category to a precise diagram type."""

from __future__ import annotations

from uml_index.models.entities import DiagramType

_DIRECT: dict[str, DiagramType] = {
    "SEQUENCE": DiagramType.SEQUENCE,
    "CLASS": DiagramType.CLASS,
    "ACTIVITY": DiagramType.ACTIVITY,
    "STATE": DiagramType.STATE,
}

_USECASE_TOKENS = ("actor", "usecase")


def classify(source: str, category: str | None) -> DiagramType:
    """Resolve the diagram type of ``source`` given the checker's category.

    PlantUML reports both use case and component diagrams as DESCRIPTION.
    They are told apart by looking for ``actor`` or ``usecase`` in the
    source, which misfires on component diagrams whose labels contain
    either word.
    """
    if category in _DIRECT:
        return _DIRECT[category]
    if category == "DESCRIPTION":
        if any(token in source for token in _USECASE_TOKENS):
            return DiagramType.USECASE
        return DiagramType.COMPONENT
    return DiagramType.UNKNOWN


__all__ = ["classify"]
