"""
BM25 lexical similarity index backed by 'rank-bm25'.

'rank-bm25' provides a well-tested BM25 Okapi implementation. The corpus is
tokenised and indexed whenever chunks are added; search is a pure in-memory
operation with no I/O cost per query.

Useful when no embedding model is available, for example when indexing a
folder of notes on a machine without an embeddings backend.
"""

import re
from collections.abc import Iterable, Sequence

from rank_bm25 import BM25Okapi  # type: ignore[import-untyped]

from retrieval_toolkit.chunking.base import SourceChunk
from retrieval_toolkit.retriever.base import SimilarityIndex


class BM25SimilarityIndex(SimilarityIndex):
    """
    In-memory BM25 index over a list of 'SourceChunk' objects.

    Uses 'rank_bm25.BM25Okapi' under the hood. Text is tokenised with a simple
    word-boundary regex (lowercased). An empty index returns no results.
    """

    def __init__(self, chunks: Iterable[SourceChunk] = ()) -> None:
        self._chunks: list[SourceChunk] = []
        self._bm25: BM25Okapi | None = None
        self.add_chunks(chunks)

    @property
    def items(self) -> Sequence[SourceChunk]:
        return self._chunks

    @staticmethod
    def _tokenize(text: str) -> list[str]:
        """Lowercase word-boundary tokenisation."""
        return re.findall(r"\b\w+\b", text.lower())

    def add_chunks(self, chunks: Iterable[SourceChunk]) -> None:
        self._chunks.extend(chunks)
        tokenized = [self._tokenize(chunk.text) for chunk in self._chunks]
        # BM25Okapi divides by the vocabulary size, so it cannot be built without a single token.
        self._bm25 = BM25Okapi(tokenized) if any(tokenized) else None

    async def search(self, query: str, max_results: int) -> list[SourceChunk]:
        """Score the corpus against 'query' using BM25 and return the top 'max_results' chunks."""
        if self._bm25 is None or max_results <= 0:
            return []
        scores: list[float] = self._bm25.get_scores(self._tokenize(query)).tolist()
        top_indices = sorted(range(len(scores)), key=lambda i: scores[i], reverse=True)[:max_results]
        return [self._chunks[i] for i in top_indices]
