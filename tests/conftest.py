"""Pytest configuration and shared fakes."""

from collections.abc import AsyncGenerator, Sequence

import numpy as np
import pytest
from numpy.typing import NDArray

from retrieval_toolkit.chunking.base import SourceChunk
from retrieval_toolkit.config import RetrievalSettings
from retrieval_toolkit.conversation_database.data_models.source import Source
from retrieval_toolkit.conversation_database.in_memory.sources_ledger import InMemorySourcesLedger
from retrieval_toolkit.embeddings.base import EmbeddingsModel
from retrieval_toolkit.exceptions import SearchError
from retrieval_toolkit.llms.base import LLM, LLMMessage
from retrieval_toolkit.retriever.base import SimilarityIndex
from retrieval_toolkit.web_search.base import WebSearchClient


class StaticIndex(SimilarityIndex):
    """Index holding 'items' that answers every search with 'results'."""

    def __init__(self, items: Sequence[SourceChunk], results: Sequence[SourceChunk] | None = None) -> None:
        self._items = list(items)
        self._results = list(results) if results is not None else list(items)
        self.calls: list[tuple[str, int]] = []

    @property
    def items(self) -> Sequence[SourceChunk]:
        return self._items

    async def search(self, query: str, max_results: int) -> list[SourceChunk]:
        self.calls.append((query, max_results))
        return self._results[:max_results]


class ScriptedWebSearch(WebSearchClient):
    """
    Web search client whose primary and backup answers are fixed up front.

    An answer is either a list of sources or an exception instance to raise.
    """

    def __init__(
        self,
        primary: list[Source] | Exception,
        backup: list[Source] | Exception | None = None,
    ) -> None:
        self.primary = primary
        self.backup = backup if backup is not None else SearchError("backup not configured")
        self.calls: list[tuple[str, int, bool]] = []

    async def search(self, query: str, result_count: int, use_backup_provider: bool = False) -> list[Source]:
        self.calls.append((query, result_count, use_backup_provider))
        answer = self.backup if use_backup_provider else self.primary
        if isinstance(answer, Exception):
            raise answer
        return answer[:result_count]


class KeywordEmbeddings(EmbeddingsModel):
    """Bag-of-keywords embeddings: one dimension per vocabulary word."""

    model_name = "keyword-test"

    def __init__(self, vocabulary: list[str]) -> None:
        self.vocabulary = vocabulary

    async def get_embeddings(self, texts: str | list[str]) -> NDArray[np.float64]:
        if isinstance(texts, str):
            texts = [texts]
        rows = [[float(text.lower().count(word)) for word in self.vocabulary] for text in texts]
        return np.array(rows, dtype=np.float64)


class ScriptedLLM(LLM):
    """LLM that streams a fixed list of deltas and records the conversations it received."""

    def __init__(self, deltas: list[str]) -> None:
        self.deltas = deltas
        self.conversations: list[list[LLMMessage]] = []

    async def generate(self, conversation: list[LLMMessage]) -> LLMMessage:
        self.conversations.append(conversation)
        return LLMMessage(content="".join(self.deltas))

    async def generate_stream(self, conversation: list[LLMMessage]) -> AsyncGenerator[LLMMessage, None]:
        self.conversations.append(conversation)
        for delta in self.deltas:
            yield LLMMessage(content=delta)


@pytest.fixture
def ledger() -> InMemorySourcesLedger:
    return InMemorySourcesLedger()


@pytest.fixture
def settings() -> RetrievalSettings:
    return RetrievalSettings(search_results_multiplier=2, use_search_result_context=True)


@pytest.fixture
def report_chunks() -> list[SourceChunk]:
    return [
        SourceChunk(text="Intro to the report.", source_identifier="/docs/report.pdf", item_index=0),
        SourceChunk(text="Revenue grew 12%.", source_identifier="/docs/report.pdf", item_index=1),
        SourceChunk(text="Costs were flat.", source_identifier="/docs/report.pdf", item_index=2),
        SourceChunk(text="Unrelated memo.", source_identifier="/docs/memo.txt", item_index=1),
    ]
