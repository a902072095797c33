"""
Retrieval-Augmented Generation (RAG) agent.

Before calling the LLM, the agent gathers sources for the query from the
local similarity index, the web and the user's attachments ('SourceMerger'),
and appends them to the user message together with the citation instructions.
While the answer streams in, every snapshot is run through 'ResponseParser'.
A citation list that is still being written does not decode yet, so it shows
up in intermediate snapshots and disappears once it is complete.
"""

from collections.abc import AsyncGenerator

from loguru import logger

from retrieval_toolkit.agents.base import Agent, AgentAnswer, QueryWithContext
from retrieval_toolkit.llms.base import LLM, LLMMessage, Roles
from retrieval_toolkit.retriever.base import SimilarityIndex
from retrieval_toolkit.retriever.merge import SourceMerger
from retrieval_toolkit.utils.citations import ResponseParser


class RAG(Agent):
    """
    RAG agent that grounds answers in local files and web results.

    Attributes:
        merger: Gathers the sources and records them in its ledger.
        similarity_index: Index of the active profile's documents. Optional.
        use_web_search: Whether to query the web search client as well.
        parser: Splits answer text from the citation list.
    """

    def __init__(
        self,
        llm: LLM,
        merger: SourceMerger,
        system_prompt: str,
        similarity_index: SimilarityIndex | None = None,
        use_web_search: bool = False,
        parser: ResponseParser | None = None,
        description: str = "",
    ) -> None:
        super().__init__(system_prompt, llm, description)
        self.merger = merger
        self.similarity_index = similarity_index
        self.use_web_search = use_web_search
        self.parser = parser or ResponseParser.from_settings(merger.settings)

    async def answer_stream(self, query_with_context: QueryWithContext) -> AsyncGenerator[AgentAnswer, None]:
        merged = await self.merger.merge(
            query_with_context.query,
            query_with_context.message_id,
            similarity_index=self.similarity_index,
            use_web_search=self.use_web_search,
            temporary_resources=query_with_context.temporary_resources,
        )
        include_citations = merged.sources_count > 0

        response_stream = self.llm.generate_stream(
            [
                LLMMessage(role=Roles.SYSTEM, content=self.system_prompt),
                *query_with_context.history,
                LLMMessage(role=Roles.USER, content=merged.text),
            ]
        )

        content = ""
        async for response_chunk in response_stream:
            if not response_chunk.content:
                continue
            content += response_chunk.content
            parsed = self.parser.parse(content, include_citations=include_citations)
            yield AgentAnswer(
                content=parsed.text,
                role=Roles.ASSISTANT,
                citations=parsed.citations,
                sources=merged.sources,
            )

        logger.debug(f"Answer for message {query_with_context.message_id} complete ({len(content)} chars)")
