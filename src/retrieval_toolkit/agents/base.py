"""
Agent abstractions.

An agent turns a 'QueryWithContext' into a stream of 'AgentAnswer'
snapshots. Each snapshot carries the full answer so far, not a delta, so a
consumer can simply render the latest one. 'answer' drains the stream and
returns the final snapshot.
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncGenerator
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from retrieval_toolkit.conversation_database.data_models.source import Citation, Source, TemporaryResource
from retrieval_toolkit.llms.base import LLM, LLMMessage


class QueryWithContext(BaseModel):
    """
    A user query and everything needed to answer it.

    Attributes:
        query: The new user message.
        history: Earlier turns, oldest first.
        message_id: Id under which the sources used for this turn are recorded.
        temporary_resources: Files attached to this turn only.
    """

    query: str
    history: list[LLMMessage] = Field(default_factory=list)
    message_id: UUID = Field(default_factory=uuid4)
    temporary_resources: list[TemporaryResource] = Field(default_factory=list)


class AgentAnswer(LLMMessage):
    """An answer snapshot with the citations parsed out of it and the sources it was grounded on."""

    citations: list[Citation] = Field(default_factory=list)
    sources: list[Source] = Field(default_factory=list)


class Agent(ABC):
    def __init__(self, system_prompt: str, llm: LLM, description: str = "") -> None:
        self.system_prompt = system_prompt
        self.llm = llm
        self.description = description

    @abstractmethod
    def answer_stream(self, query_with_context: QueryWithContext) -> AsyncGenerator[AgentAnswer, None]:
        pass

    async def answer(self, query_with_context: QueryWithContext) -> AgentAnswer:
        last_answer: AgentAnswer | None = None
        async for answer in self.answer_stream(query_with_context):
            last_answer = answer
        if last_answer is None:
            raise RuntimeError("No answer was generated from the stream")
        return last_answer
