"""
Source merge engine.

'SourceMerger' gathers everything that may ground an answer to one user
message and turns it into a prompt:

    1. local similarity index hits, optionally stitched together with the
       passages before and after them in the same document,
    2. web search results, primary provider first, backup provider once if
       the primary fails or comes back empty,
    3. resources the user attached to this turn only.

Results are concatenated in that order, which is also the citation priority
the prompt asks the model to respect (files beat websites). The index search
and the web search run as separate tasks. The web task needs the local result
count to size its request, so when an index is present it waits on the index
task before calling the provider.

Nothing in here is fatal: a failing index or web provider means fewer
sources, and no sources at all means the query goes to the model unchanged.
"""

import asyncio
from collections.abc import Sequence
from uuid import UUID

from loguru import logger
from pydantic import BaseModel, Field

from retrieval_toolkit.chunking.base import SourceChunk
from retrieval_toolkit.config import RetrievalSettings
from retrieval_toolkit.conversation_database.data_models.source import (
    Source,
    SourcesLedger,
    SourcesRecord,
    TemporaryResource,
)
from retrieval_toolkit.exceptions import SearchError
from retrieval_toolkit.retriever.base import SimilarityIndex
from retrieval_toolkit.utils.prompt import build_query_with_sources
from retrieval_toolkit.web_search.base import WebSearchClient


class MergeResult(BaseModel):
    """
    Outcome of a merge.

    Attributes:
        text: The prompt to submit. Equal to the original query when no
            sources were found.
        sources_count: Number of sources embedded in 'text'.
        sources: The sources themselves, in prompt order.
    """

    text: str
    sources_count: int = 0
    sources: list[Source] = Field(default_factory=list)


class SourceMerger:
    """
    Builds the source list and augmented prompt for a user message.

    Attributes:
        ledger: Where the sources used for each message are recorded.
        web_search: Web search client. Web search is skipped when None.
        settings: Result counts and context stitching switches.
    """

    def __init__(
        self,
        ledger: SourcesLedger,
        web_search: WebSearchClient | None = None,
        settings: RetrievalSettings | None = None,
    ) -> None:
        self.ledger = ledger
        self.web_search = web_search
        self.settings = settings or RetrievalSettings()

    @property
    def index_result_count(self) -> int:
        return 2 * self.settings.search_results_multiplier

    def web_result_count(self, has_local_sources: bool) -> int:
        return (1 if has_local_sources else 2) * self.settings.search_results_multiplier

    async def merge(
        self,
        query: str,
        message_id: UUID,
        similarity_index: SimilarityIndex | None = None,
        use_web_search: bool = False,
        temporary_resources: Sequence[TemporaryResource] = (),
    ) -> MergeResult:
        index = similarity_index if similarity_index is not None and not similarity_index.is_empty else None
        logger.info(
            f"Gathering sources for message {message_id} "
            f"(index={'yes' if index is not None else 'no'}, web={use_web_search}, "
            f"attachments={len(temporary_resources)})"
        )

        local_task = asyncio.create_task(self.search_local(query, index))
        web_task: asyncio.Task[list[Source]] | None = None
        if use_web_search:
            if self.web_search is None:
                logger.warning("Web search requested but no web search client is configured")
            else:
                sized_by = local_task if index is not None else None
                web_task = asyncio.create_task(self._search_web_sized_by(query, sized_by))

        try:
            local_sources = await local_task
            web_sources = await web_task if web_task is not None else []
        except BaseException:
            # The turn was abandoned: don't leave a search running.
            for task in (local_task, web_task):
                if task is not None and not task.done():
                    task.cancel()
            raise
        attached_sources = [source for resource in temporary_resources if (source := resource.source) is not None]

        sources = _deduplicate(local_sources + web_sources + attached_sources)
        logger.info(
            f"Merged {len(sources)} sources "
            f"(local={len(local_sources)}, web={len(web_sources)}, attachments={len(attached_sources)})"
        )
        if not sources:
            return MergeResult(text=query)

        self.ledger.add(SourcesRecord(message_id=message_id, sources=tuple(sources)))
        return MergeResult(
            text=build_query_with_sources(query, sources),
            sources_count=len(sources),
            sources=sources,
        )

    async def search_local(self, query: str, index: SimilarityIndex | None) -> list[Source]:
        if index is None:
            return []
        try:
            chunks = await index.search(query, max_results=self.index_result_count)
        except Exception as exc:
            logger.warning(f"Similarity index search failed ({exc!r}), continuing without local sources")
            return []
        sources: list[Source] = []
        for chunk in chunks:
            if not chunk.has_source or chunk.source_identifier is None:
                logger.warning(f"Dropping index result without a source: {chunk.text[:80]!r}")
                continue
            text = self.expand_context(index, chunk) if self.settings.use_search_result_context else chunk.text
            sources.append(Source(text=text, source=chunk.source_identifier))
        logger.debug(f"Index returned {len(chunks)} chunks, kept {len(sources)}")
        return sources

    @staticmethod
    def expand_context(index: SimilarityIndex, chunk: SourceChunk) -> str:
        """Join the passages before and after 'chunk' around it. Missing neighbours add nothing."""
        before, after = index.neighbours(chunk)
        parts = [before.text if before else "", chunk.text, after.text if after else ""]
        return " ".join(part for part in parts if part)

    async def search_web(self, query: str, result_count: int) -> list[Source]:
        if self.web_search is None:
            return []
        try:
            results = await self.web_search.search(query, result_count)
            if results:
                return results
            logger.warning("Primary web search returned no results, retrying with the backup provider")
        except SearchError as exc:
            logger.warning(f"Primary web search failed ({exc}), retrying with the backup provider")

        try:
            return await self.web_search.search(query, result_count, use_backup_provider=True)
        except SearchError as exc:
            logger.warning(f"Backup web search failed ({exc}), continuing without web results")
            return []

    async def _search_web_sized_by(self, query: str, local_task: asyncio.Task[list[Source]] | None) -> list[Source]:
        has_local_sources = bool(await local_task) if local_task is not None else False
        return await self.search_web(query, self.web_result_count(has_local_sources))


def _deduplicate(sources: list[Source]) -> list[Source]:
    seen: set[tuple[str, str]] = set()
    unique: list[Source] = []
    for source in sources:
        key = (source.source, source.text)
        if key in seen:
            continue
        seen.add(key)
        unique.append(source)
    return unique
