"""
Message data model.

A 'Message' is one turn of a conversation. User messages are the only ones
that get augmented with retrieved sources before submission; assistant
messages are filled in incrementally from the model's stream via 'update',
which also pulls the trailing citation list out of the text.

'MessageSubset' is the role + content pair actually sent to the inference
backend for each message of the history.
"""

from collections.abc import Sequence
from datetime import datetime
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_validator

from retrieval_toolkit.conversation_database.data_models.source import Citation, TemporaryResource
from retrieval_toolkit.llms.base import Roles
from retrieval_toolkit.retriever.base import SimilarityIndex
from retrieval_toolkit.retriever.merge import MergeResult, SourceMerger
from retrieval_toolkit.utils.citations import ResponseParser

UNKNOWN_MODEL = "Unknown"
REMOTE_MODEL_PREFIX = "Remote Model: "


class Message(BaseModel):
    """
    A single message within a conversation.

    'text' has LaTeX display delimiters ('\\[' and '\\]') rewritten to '$$'
    on construction, since that is the only display-math syntax the renderer
    understands.
    """

    id: UUID = Field(default_factory=uuid4)
    text: str
    sender: Roles
    model: str = UNKNOWN_MODEL
    start_time: datetime = Field(default_factory=datetime.now)
    last_updated: datetime = Field(default_factory=datetime.now)
    output_ended: bool = False
    tokens_per_second: float | None = None
    response_start_seconds: float | None = None
    referenced_urls: list[Citation] = Field(default_factory=list)

    @field_validator("text")
    @classmethod
    def _normalise_latex_delimiters(cls, value: str) -> str:
        return value.replace("\\[", "$$").replace("\\]", "$$")

    @classmethod
    def create(cls, text: str, sender: Roles, model: str | None = None, used_server: bool = False) -> "Message":
        model_name = model or UNKNOWN_MODEL
        if used_server:
            model_name = REMOTE_MODEL_PREFIX + model_name
        return cls(text=text, sender=sender, model=model_name)

    async def submitted_text(
        self,
        merger: SourceMerger,
        similarity_index: SimilarityIndex | None = None,
        use_web_search: bool = False,
        temporary_resources: Sequence[TemporaryResource] = (),
    ) -> MergeResult:
        """Return the text to submit for this message, with sources appended for user messages."""
        if self.sender != Roles.USER:
            return MergeResult(text=self.text)
        return await merger.merge(
            self.text,
            self.id,
            similarity_index=similarity_index,
            use_web_search=use_web_search,
            temporary_resources=temporary_resources,
        )

    def update(
        self,
        response_text: str,
        include_references: bool,
        parser: ResponseParser | None = None,
        tokens_per_second: float | None = None,
        response_start_seconds: float | None = None,
    ) -> None:
        """Replace the text with the latest completion, moving its citation list into 'referenced_urls'."""
        self.tokens_per_second = tokens_per_second
        self.response_start_seconds = response_start_seconds
        self.last_updated = datetime.now()
        parsed = (parser or ResponseParser()).parse(response_text, include_citations=include_references)
        self.text = parsed.text
        if parsed.citations:
            self.referenced_urls = parsed.citations

    def end(self) -> None:
        self.last_updated = datetime.now()
        self.output_ended = True


class MessageSubset(BaseModel):
    role: Roles
    content: str

    @classmethod
    async def from_message(
        cls,
        message: Message,
        merger: SourceMerger | None = None,
        similarity_index: SimilarityIndex | None = None,
        should_add_sources: bool = False,
        use_web_search: bool = False,
        temporary_resources: Sequence[TemporaryResource] = (),
    ) -> "MessageSubset":
        if should_add_sources:
            if merger is None:
                raise ValueError("A SourceMerger is required to add sources to a message")
            result = await message.submitted_text(
                merger,
                similarity_index=similarity_index,
                use_web_search=use_web_search,
                temporary_resources=temporary_resources,
            )
            return cls(role=message.sender, content=result.text)
        return cls(role=message.sender, content=message.text)
