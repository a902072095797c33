"""
Plain-text chunker.

Splits a document on blank lines and packs consecutive paragraphs into
passages of at most 'max_words' words. Paragraphs longer than the cap are
split on word boundaries. Passages are numbered from 0 in document order.
"""

import re
from pathlib import Path

from loguru import logger

from retrieval_toolkit.chunking.base import Chunker, SourceChunk

_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")


class TextChunker(Chunker):
    def __init__(self, max_words: int = 200) -> None:
        if max_words < 1:
            raise ValueError("max_words must be at least 1")
        self.max_words = max_words

    def make_chunks(self, text: str, source: str) -> list[SourceChunk]:  # type: ignore[override]
        passages: list[str] = []
        current: list[str] = []
        for paragraph in _PARAGRAPH_BREAK.split(text):
            words = paragraph.split()
            if not words:
                continue
            if current and len(current) + len(words) > self.max_words:
                passages.append(" ".join(current))
                current = []
            while len(words) > self.max_words:
                passages.append(" ".join(words[: self.max_words]))
                words = words[self.max_words :]
            current += words
        if current:
            passages.append(" ".join(current))

        logger.debug(f"Chunked {source!r} into {len(passages)} passages")
        return [
            SourceChunk(text=passage, source_identifier=source, item_index=index)
            for index, passage in enumerate(passages)
        ]

    def make_chunks_from_file(self, path: str | Path) -> list[SourceChunk]:
        path = Path(path)
        return self.make_chunks(path.read_text(encoding="utf-8", errors="replace"), source=str(path))
