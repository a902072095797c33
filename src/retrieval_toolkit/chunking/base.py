"""
Document chunking abstractions.

A 'SourceChunk' is the atomic unit of retrieved content: chunkers produce
them, similarity indexes store them, and the merge engine turns them into
citation-ready 'Source' objects. Local-index chunks carry an 'item_index',
their position in the ordered passage sequence of their source document, so
the merge engine can stitch a chunk together with its neighbours. Web results
never have one.

Concrete chunkers: 'TextChunker'.
"""

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel


class SourceChunk(BaseModel):
    """
    A single retrieved passage and where it came from.

    Attributes:
        text: The passage content.
        source_identifier: File path or URL of the originating document. May be
            missing when the index holds items whose origin could not be
            resolved. Such chunks are never cited.
        item_index: Position of the passage within its source document.
    """

    text: str
    source_identifier: str | None = None
    item_index: int | None = None

    @property
    def has_source(self) -> bool:
        return bool(self.source_identifier and self.source_identifier.strip())


class Chunker(ABC):
    """
    Abstract base class for document chunkers.

    The loose '*args / **kwargs' signature on 'make_chunks' lets each chunker
    expose format-specific parameters without forcing a shared interface for
    every option.
    """

    @abstractmethod
    def make_chunks(self, *args: Any, **kwargs: Any) -> list[SourceChunk]:
        """Split the input document and return its ordered 'SourceChunk' list."""
        pass
