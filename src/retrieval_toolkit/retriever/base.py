"""
Similarity index abstractions.

A similarity index accepts a natural-language query and returns a ranked list
of 'SourceChunk' objects. Besides search, an index exposes every chunk it
holds through 'items'. The merge engine uses that view to find the passages
immediately before and after a hit in the same document.

Concrete implementations: 'VectorSimilarityIndex', 'BM25SimilarityIndex'.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from retrieval_toolkit.chunking.base import SourceChunk


class SimilarityIndex(ABC):
    """
    Abstract base class for local similarity indexes.

    Index construction and maintenance belong to the implementation; the
    retrieval pipeline only reads from it.
    """

    @property
    @abstractmethod
    def items(self) -> Sequence[SourceChunk]:
        """All chunks currently indexed, in insertion order."""
        pass

    @property
    def is_empty(self) -> bool:
        return len(self.items) == 0

    @abstractmethod
    async def search(self, query: str, max_results: int) -> list[SourceChunk]:
        """Return up to 'max_results' chunks most relevant to 'query', best first."""
        pass

    def neighbours(self, chunk: SourceChunk) -> tuple[SourceChunk | None, SourceChunk | None]:
        """Return the passages directly before and after 'chunk' in its source document."""
        if chunk.item_index is None or not chunk.has_source:
            return None, None
        before: SourceChunk | None = None
        after: SourceChunk | None = None
        for item in self.items:
            if item.source_identifier != chunk.source_identifier:
                continue
            if before is None and item.item_index == chunk.item_index - 1:
                before = item
            elif after is None and item.item_index == chunk.item_index + 1:
                after = item
        return before, after
