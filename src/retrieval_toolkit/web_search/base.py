"""
Web search client abstraction.

A web search client returns citation-ready 'Source' objects (page excerpt and
URL). Providers are addressed through a single client with two credentials:
the primary one and a backup used when the primary is rate-limited or down.
Choosing between them is the caller's job; see 'SourceMerger'.
"""

from abc import ABC, abstractmethod

from retrieval_toolkit.conversation_database.data_models.source import Source


class WebSearchClient(ABC):
    @abstractmethod
    async def search(self, query: str, result_count: int, use_backup_provider: bool = False) -> list[Source]:
        """Return up to 'result_count' ranked results for 'query'.

        Raises 'SearchError' on network, authentication or provider failure.
        """
        pass
