"""
Citation extraction from free-text model output.

The model is asked to end its answer with a JSON list of '{"url": ...}'
objects and nothing else. In practice models sometimes emit an empty '[]',
put a heading such as '**Sources:**' in front of the list, or produce JSON
that does not decode. 'ResponseParser' splits a completion into display text
and citations and never loses content: when the trailing block cannot be
decoded, the whole response is shown and no citations are attached.

The heading table is configuration ('RetrievalSettings.heading_variants'), so
a new variant can be handled without touching the parsing logic.
"""

import json
from collections.abc import Sequence
from typing import Any

from loguru import logger
from pydantic import BaseModel, Field, ValidationError

from retrieval_toolkit.config import DEFAULT_HEADING_VARIANTS, RetrievalSettings
from retrieval_toolkit.conversation_database.data_models.source import Citation

EMPTY_LIST_MARKER = "[]"


class ParsedResponse(BaseModel):
    """Display text and the citations the model attached to it."""

    text: str
    citations: list[Citation] = Field(default_factory=list)


class ResponseParser:
    def __init__(self, heading_variants: Sequence[str] = DEFAULT_HEADING_VARIANTS) -> None:
        self.heading_variants = tuple(heading_variants)

    @classmethod
    def from_settings(cls, settings: RetrievalSettings) -> "ResponseParser":
        return cls(heading_variants=settings.heading_variants)

    def parse(self, response: str, include_citations: bool = True) -> ParsedResponse:
        text = response
        dropped_empty_list = text.endswith(EMPTY_LIST_MARKER)
        if dropped_empty_list:
            text = text[: -len(EMPTY_LIST_MARKER)]
        if not include_citations:
            return ParsedResponse(text=text)
        if dropped_empty_list:
            text = text.rstrip()

        split_at = text.rfind("[")
        if split_at == -1:
            return ParsedResponse(text=text)

        citations = self.decode_citations(text[split_at:])
        if citations is None:
            logger.debug("Could not decode the trailing citation block; keeping the full response text")
            return ParsedResponse(text=text)
        return ParsedResponse(text=self.strip_headings(text[:split_at]), citations=citations)

    def strip_headings(self, text: str) -> str:
        """Trim 'text' and drop any known heading left dangling before the citation list."""
        text = text.strip()
        for heading in self.heading_variants:
            if text.endswith(heading):
                text = text[: -len(heading)]
        return text.strip()

    @staticmethod
    def decode_citations(block: str) -> list[Citation] | None:
        """
        Decode a JSON list of '{"url": ...}' objects.

        Entries that are not objects with a string 'url' are ignored. Returns
        None when the block is not a JSON list, or when it has entries but none
        of them is a citation.
        """
        try:
            data: Any = json.loads(block)
        except ValueError:
            return None
        if not isinstance(data, list):
            return None

        citations: list[Citation] = []
        for entry in data:
            if not isinstance(entry, dict) or not isinstance(entry.get("url"), str):
                logger.debug(f"Ignoring malformed citation entry: {entry!r}")
                continue
            try:
                citations.append(Citation.model_validate(entry))
            except ValidationError:
                logger.debug(f"Ignoring malformed citation entry: {entry!r}")
        if data and not citations:
            return None
        return citations
