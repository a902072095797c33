"""
Retrieval toolkit: source gathering, prompt assembly and citation parsing for
a local chat assistant.

Typical wiring:

    from retrieval_toolkit import (
        InMemorySourcesLedger, RetrievalSettings, SourceMerger, TavilySearch,
    )

    ledger = InMemorySourcesLedger()
    merger = SourceMerger(ledger, web_search=TavilySearch.from_env(), settings=RetrievalSettings.from_env())
    result = await merger.merge(query, message_id, similarity_index=index, use_web_search=True)
"""

from retrieval_toolkit.chunking.base import SourceChunk
from retrieval_toolkit.config import RetrievalSettings
from retrieval_toolkit.conversation_database.data_models.source import (
    Citation,
    Source,
    SourcesLedger,
    SourcesRecord,
    TemporaryResource,
)
from retrieval_toolkit.conversation_database.in_memory.sources_ledger import InMemorySourcesLedger
from retrieval_toolkit.exceptions import ConfigurationError, RetrievalToolkitError, SearchError
from retrieval_toolkit.retriever.base import SimilarityIndex
from retrieval_toolkit.retriever.merge import MergeResult, SourceMerger
from retrieval_toolkit.utils.citations import ParsedResponse, ResponseParser
from retrieval_toolkit.utils.prompt import build_query_with_sources
from retrieval_toolkit.web_search.base import WebSearchClient
from retrieval_toolkit.web_search.tavily import TavilySearch

__all__ = [
    "Citation",
    "ConfigurationError",
    "InMemorySourcesLedger",
    "MergeResult",
    "ParsedResponse",
    "ResponseParser",
    "RetrievalSettings",
    "RetrievalToolkitError",
    "SearchError",
    "SimilarityIndex",
    "Source",
    "SourceChunk",
    "SourceMerger",
    "SourcesLedger",
    "SourcesRecord",
    "TavilySearch",
    "TemporaryResource",
    "WebSearchClient",
    "build_query_with_sources",
]
