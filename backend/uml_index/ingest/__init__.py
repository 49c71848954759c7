"""Extraction, classification, rendering and synchronisation of diagram blocks."""

from .classifier import classify
from .extractor import SourceExtractor, iter_blocks
from .renderer import RenderingPipeline
from .synchronizer import IndexSynchronizer, SequentialOriginSync

__all__ = [
    "classify",
    "SourceExtractor",
    "iter_blocks",
    "RenderingPipeline",
    "IndexSynchronizer",
    "SequentialOriginSync",
]
