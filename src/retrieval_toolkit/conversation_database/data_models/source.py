"""
Source data models and the sources ledger interface.

Sources are the citation-ready passages that were handed to the model for a
specific assistant message. The ledger keeps them keyed by message id so the
UI can show which files and pages a response was grounded on, long after the
prompt that carried them has been discarded.

Concrete implementations: 'InMemorySourcesLedger'.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator


class Source(BaseModel):
    """A normalized text + origin pair. 'source' is a URL or a file path and is never empty."""

    model_config = ConfigDict(frozen=True)

    text: str
    source: str

    @field_validator("source")
    @classmethod
    def _source_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("source must not be empty")
        return value


class SourcesRecord(BaseModel):
    """The ordered sources used to produce one assistant message: local, then web, then ephemeral."""

    model_config = ConfigDict(frozen=True)

    message_id: UUID
    sources: tuple[Source, ...]


class Citation(BaseModel):
    """A single entry of the citation list the model emits after its answer."""

    model_config = ConfigDict(frozen=True)

    url: str


class TemporaryResource(BaseModel):
    """
    A file the user attached to the current turn only.

    'text' is the already-extracted content. A resource with no text or no
    location yields no 'Source' and is skipped during the merge.
    """

    model_config = ConfigDict(frozen=True)

    url: str
    text: str | None = None

    @property
    def source(self) -> Source | None:
        if not self.text or not self.url.strip():
            return None
        return Source(text=self.text, source=self.url)

    @classmethod
    def from_file(cls, path: str | Path) -> "TemporaryResource":
        path = Path(path)
        return cls(url=str(path), text=path.read_text(encoding="utf-8", errors="replace"))


class SourcesLedger(ABC):
    """
    Repository correlating message ids with the 'SourcesRecord' used to answer them.

    Implementations must be safe to call from several threads: a retrieval
    may complete while the UI is reading the record of an older message.
    """

    @abstractmethod
    def add(self, record: SourcesRecord) -> SourcesRecord:
        """Insert 'record', replacing any record stored for the same message id."""
        pass

    @abstractmethod
    def get(self, message_id: UUID) -> SourcesRecord | None:
        pass

    @abstractmethod
    def delete(self, message_id: UUID) -> bool:
        pass
