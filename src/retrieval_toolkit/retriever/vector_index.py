"""
In-memory vector similarity index.

Chunks are embedded once when added and kept as a row-normalised matrix, so a
search is a single matrix-vector product followed by a sort.
"""

from collections.abc import Sequence

import numpy as np
from loguru import logger
from numpy.typing import NDArray

from retrieval_toolkit.chunking.base import SourceChunk
from retrieval_toolkit.embeddings.base import EmbeddingsModel
from retrieval_toolkit.retriever.base import SimilarityIndex


def _normalise(matrix: NDArray[np.float64]) -> NDArray[np.float64]:
    norms = np.linalg.norm(matrix, axis=1, keepdims=True)
    norms[norms == 0] = 1.0
    return matrix / norms


class VectorSimilarityIndex(SimilarityIndex):
    """
    Cosine-similarity index over chunks embedded with an 'EmbeddingsModel'.

    Attributes:
        embeddings_model: Model used for both chunks and queries.
    """

    def __init__(self, embeddings_model: EmbeddingsModel) -> None:
        self.embeddings_model = embeddings_model
        self._chunks: list[SourceChunk] = []
        self._matrix: NDArray[np.float64] | None = None

    @property
    def items(self) -> Sequence[SourceChunk]:
        return self._chunks

    async def add_chunks(self, chunks: list[SourceChunk]) -> None:
        if not chunks:
            return
        embeddings = np.atleast_2d(
            np.asarray(await self.embeddings_model.get_embeddings([c.text for c in chunks]), dtype=np.float64)
        )
        if embeddings.shape[0] != len(chunks):
            raise ValueError(f"Embeddings model returned {embeddings.shape[0]} vectors for {len(chunks)} chunks")
        normalised = _normalise(embeddings)
        self._matrix = normalised if self._matrix is None else np.vstack([self._matrix, normalised])
        self._chunks.extend(chunks)
        logger.debug(f"Indexed {len(chunks)} chunks (total {len(self._chunks)}, dim {normalised.shape[1]})")

    async def search(self, query: str, max_results: int) -> list[SourceChunk]:
        if self._matrix is None or max_results <= 0:
            return []
        query_vector = np.asarray(await self.embeddings_model.get_embeddings(query), dtype=np.float64).reshape(-1)
        norm = np.linalg.norm(query_vector)
        if norm == 0:
            return []
        scores = self._matrix @ (query_vector / norm)
        top_indices = np.argsort(-scores, kind="stable")[:max_results]
        return [self._chunks[int(i)] for i in top_indices]
