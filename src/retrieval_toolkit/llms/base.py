"""
Core LLM abstractions and message data models.

Inference is a black box to this toolkit: a backend receives a list of
'LLMMessage' objects and produces text, either all at once or as a stream of
deltas. Concrete backends (a local llama.cpp server, a remote
OpenAI-compatible endpoint) live in the application and implement 'LLM'.

'LLMMessage' doubles as the base class for 'AgentAnswer' so that streamed
partial answers and the final answer travel through the same async generator.
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncGenerator
from enum import StrEnum

from pydantic import BaseModel


class Roles(StrEnum):
    """Conversation roles as used by chat completion APIs."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class LLMMessage(BaseModel):
    """A single message in a conversation sent to or received from an LLM."""

    content: str = ""
    role: Roles = Roles.ASSISTANT


class LLM(ABC):
    """Abstract base class for language model backends."""

    @abstractmethod
    async def generate(self, conversation: list[LLMMessage]) -> LLMMessage:
        """Return a single complete response for the given conversation."""
        pass

    @abstractmethod
    def generate_stream(self, conversation: list[LLMMessage]) -> AsyncGenerator[LLMMessage, None]:
        """Yield response deltas as they arrive from the model."""
        pass
